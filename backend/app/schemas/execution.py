"""
실행 기록 스키마
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from src.domain.entities.execution import ExecutionRecord


class ExecutionResponse(BaseModel):
    """실행 기록 응답 스키마"""
    id: Optional[int] = None
    job_name: str
    fired_at: datetime
    outcome: str = Field(..., description="success, failed, skipped")
    reason: Optional[str] = None
    action: Optional[str] = None
    ticker: Optional[str] = None
    quantity: Optional[int] = None
    order_id: Optional[str] = None
    client_order_id: Optional[str] = None
    attempts: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, record: ExecutionRecord) -> "ExecutionResponse":
        return cls(
            id=record.id,
            job_name=record.job_name,
            fired_at=record.fired_at,
            outcome=record.outcome.value,
            reason=record.reason,
            action=record.action,
            ticker=record.ticker,
            quantity=record.quantity,
            order_id=record.order_id,
            client_order_id=record.client_order_id,
            attempts=record.attempts,
            created_at=record.created_at,
        )


class ExecutionListResponse(BaseModel):
    """실행 기록 목록 응답 스키마"""
    executions: list[ExecutionResponse]
    total: int = Field(..., description="반환된 기록 수")
