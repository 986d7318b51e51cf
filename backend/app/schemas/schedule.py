"""
스케줄/타임존 스키마
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class TimezoneSchema(BaseModel):
    """타임존 요청/응답 스키마"""
    timezone: str = Field(..., description="IANA 타임존 (예: America/New_York)")


class TriggerResponse(BaseModel):
    """엔진에 등록된 트리거"""
    job_name: str
    day_of_week: Optional[str] = Field(None, description="요일 표현 (등록 상태가 불일치하면 null)")
    hour: Optional[int] = None
    minute: Optional[int] = None
    timezone: Optional[str] = None
    next_run_time: Optional[datetime] = Field(None, description="다음 실행 예정 시각")


class TriggerListResponse(BaseModel):
    """트리거 목록 응답 스키마"""
    triggers: list[TriggerResponse]
    total: int


class ReconcileErrorResponse(BaseModel):
    """재조정 중 실패한 작업"""
    job_name: Optional[str] = None
    operation: Optional[str] = None
    message: str


class ReconcileResponse(BaseModel):
    """재조정 결과 (적용된 변경 사항)"""
    created: List[str]
    updated: List[str]
    deleted: List[str]
    unchanged: List[str]
    errors: List[ReconcileErrorResponse]
