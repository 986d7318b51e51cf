"""
작업 관리 API 엔드포인트
스케줄 트레이딩 작업의 생성/조회/수정/삭제를 처리합니다.

모든 쓰기는 저장 후 재조정을 수행하며, 재조정 실패는 응답에 영향을 주지 않습니다.
"""
from fastapi import APIRouter, Depends, Response, status

from backend.app.api.v1.deps import get_manage_jobs
from backend.app.schemas.execution import ExecutionResponse
from backend.app.schemas.job import JobCreate, JobListResponse, JobResponse, JobUpdate
from src.application.use_cases.manage_jobs import ManageJobsUseCase

router = APIRouter()


@router.get("", response_model=JobListResponse)
async def list_jobs(
    manage_jobs: ManageJobsUseCase = Depends(get_manage_jobs),
) -> JobListResponse:
    """전체 작업 목록 조회 (이름순)"""
    jobs = await manage_jobs.list_jobs()
    return JobListResponse(
        jobs=[JobResponse.from_entity(job) for job in jobs],
        total=len(jobs),
    )


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    request: JobCreate,
    manage_jobs: ManageJobsUseCase = Depends(get_manage_jobs),
) -> JobResponse:
    """
    작업 생성

    - **409**: 같은 이름의 작업이 이미 존재
    - **422**: 검증 실패 (요일, 시/분, 수량, 심볼 등)
    """
    job = await manage_jobs.create_job(request.to_entity())
    return JobResponse.from_entity(job)


@router.get("/{name}", response_model=JobResponse)
async def get_job(
    name: str,
    manage_jobs: ManageJobsUseCase = Depends(get_manage_jobs),
) -> JobResponse:
    """작업 조회"""
    return JobResponse.from_entity(await manage_jobs.get_job(name))


@router.put("/{name}", response_model=JobResponse)
async def update_job(
    name: str,
    request: JobUpdate,
    manage_jobs: ManageJobsUseCase = Depends(get_manage_jobs),
) -> JobResponse:
    """
    작업 전체 교체

    본문의 name은 생략하거나 경로와 같아야 합니다.
    변경 사항은 다음 발화부터 적용됩니다.
    """
    job = await manage_jobs.update_job(name, request.to_entity(name))
    return JobResponse.from_entity(job)


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job(
    name: str,
    manage_jobs: ManageJobsUseCase = Depends(get_manage_jobs),
) -> Response:
    """작업 삭제 (트리거도 함께 제거)"""
    await manage_jobs.delete_job(name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{name}/enable", response_model=JobResponse)
async def enable_job(
    name: str,
    manage_jobs: ManageJobsUseCase = Depends(get_manage_jobs),
) -> JobResponse:
    """작업 활성화 (트리거 등록)"""
    return JobResponse.from_entity(await manage_jobs.set_enabled(name, True))


@router.post("/{name}/disable", response_model=JobResponse)
async def disable_job(
    name: str,
    manage_jobs: ManageJobsUseCase = Depends(get_manage_jobs),
) -> JobResponse:
    """작업 비활성화 (정의는 유지, 트리거만 제거)"""
    return JobResponse.from_entity(await manage_jobs.set_enabled(name, False))


@router.post("/{name}/run", response_model=ExecutionResponse)
async def run_job(
    name: str,
    manage_jobs: ManageJobsUseCase = Depends(get_manage_jobs),
) -> ExecutionResponse:
    """
    작업 즉시 실행

    스케줄과 무관하게 거래 핸들러를 한 번 실행하고 기록된 결과를 반환합니다.
    """
    record = await manage_jobs.run_job_now(name)
    return ExecutionResponse.from_entity(record)
