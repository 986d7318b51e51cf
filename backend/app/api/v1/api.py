"""
API 라우터
모든 엔드포인트를 통합합니다.
"""
from fastapi import APIRouter

from backend.app.api.v1.endpoints import executions, jobs, schedules, settings

api_router = APIRouter()

# 각 엔드포인트 등록
api_router.include_router(
    jobs.router,
    prefix="/jobs",
    tags=["jobs"]
)

api_router.include_router(
    settings.router,
    prefix="/timezone",
    tags=["settings"]
)

api_router.include_router(
    schedules.router,
    prefix="/schedules",
    tags=["schedules"]
)

api_router.include_router(
    executions.router,
    prefix="/executions",
    tags=["executions"]
)
