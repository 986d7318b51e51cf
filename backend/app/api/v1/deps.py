"""
API 의존성
Container에서 유스케이스를 꺼내 엔드포인트에 주입합니다.
"""
from backend.app.core.scheduler import get_container
from src.application.ports.outbound.execution_record_port import ExecutionRecordPort
from src.application.use_cases.manage_jobs import ManageJobsUseCase
from src.application.use_cases.reconcile_schedules import ReconcileSchedulesUseCase


def get_manage_jobs() -> ManageJobsUseCase:
    """작업 관리 유스케이스"""
    return get_container().get_manage_jobs_use_case()


def get_reconciler() -> ReconcileSchedulesUseCase:
    """재조정 유스케이스"""
    return get_container().get_reconcile_use_case()


def get_execution_records() -> ExecutionRecordPort:
    """실행 기록 저장소"""
    return get_container().get_execution_record_port()
