"""
타임존 설정 API 엔드포인트
"""
from fastapi import APIRouter, Depends

from backend.app.api.v1.deps import get_manage_jobs
from backend.app.schemas.schedule import TimezoneSchema
from src.application.use_cases.manage_jobs import ManageJobsUseCase

router = APIRouter()


@router.get("", response_model=TimezoneSchema)
async def get_timezone(
    manage_jobs: ManageJobsUseCase = Depends(get_manage_jobs),
) -> TimezoneSchema:
    """현재 타임존 조회"""
    return TimezoneSchema(timezone=await manage_jobs.get_timezone())


@router.put("", response_model=TimezoneSchema)
async def set_timezone(
    request: TimezoneSchema,
    manage_jobs: ManageJobsUseCase = Depends(get_manage_jobs),
) -> TimezoneSchema:
    """
    타임존 변경

    모든 트리거가 새 타임존으로 다시 등록됩니다.
    알 수 없는 타임존은 422를 반환합니다.
    """
    return TimezoneSchema(timezone=await manage_jobs.set_timezone(request.timezone.strip()))
