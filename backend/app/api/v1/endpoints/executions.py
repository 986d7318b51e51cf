"""
실행 기록 API 엔드포인트
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from backend.app.api.v1.deps import get_execution_records
from backend.app.schemas.execution import ExecutionListResponse, ExecutionResponse
from src.application.ports.outbound.execution_record_port import ExecutionRecordPort

router = APIRouter()


@router.get("", response_model=ExecutionListResponse)
async def list_executions(
    job_name: Optional[str] = Query(None, description="작업 이름 필터"),
    limit: int = Query(50, ge=1, le=500, description="최대 반환 개수"),
    execution_records: ExecutionRecordPort = Depends(get_execution_records),
) -> ExecutionListResponse:
    """
    실행 기록 조회 (최신순)

    트리거 발화마다 한 건씩 기록됩니다: success, failed(사유 포함), skipped.
    """
    records = await execution_records.list(job_name=job_name, limit=limit)
    return ExecutionListResponse(
        executions=[ExecutionResponse.from_entity(record) for record in records],
        total=len(records),
    )
