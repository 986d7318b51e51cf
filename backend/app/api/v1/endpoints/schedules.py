"""
스케줄(트리거) API 엔드포인트
워크플로 엔진에 실제로 등록된 트리거를 조회하고 재조정을 강제합니다.
"""
import logging

from fastapi import APIRouter, Depends

from backend.app.api.v1.deps import get_reconciler
from backend.app.schemas.schedule import ReconcileResponse, TriggerListResponse, TriggerResponse
from src.application.use_cases.reconcile_schedules import ReconcileSchedulesUseCase

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=TriggerListResponse)
async def list_schedules(
    reconciler: ReconcileSchedulesUseCase = Depends(get_reconciler),
) -> TriggerListResponse:
    """
    등록된 트리거 목록 조회

    엔진 상태를 직접 조회하므로 작업 정의와 다를 수 있습니다 (다음 재조정 전까지).
    엔진 응답이 ENGINE_CALL_TIMEOUT_SECONDS를 넘으면 503을 반환합니다.
    """
    triggers, next_runs = await reconciler.live_triggers()

    items = []
    for name in sorted(triggers):
        spec = triggers[name]
        items.append(TriggerResponse(
            job_name=name,
            next_run_time=next_runs.get(name),
            **(spec.to_dict() if spec is not None else {}),
        ))
    return TriggerListResponse(triggers=items, total=len(items))


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile_schedules(
    reconciler: ReconcileSchedulesUseCase = Depends(get_reconciler),
) -> ReconcileResponse:
    """
    재조정 강제 실행

    적용된 변경 사항을 반환합니다. 엔진에 연결할 수 없으면 503을 반환합니다.
    """
    result = await reconciler.reconcile()
    return ReconcileResponse(**result.to_dict())
