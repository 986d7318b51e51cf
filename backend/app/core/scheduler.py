"""
APScheduler 설정 및 관리
작업 정의를 CronTrigger로 등록하고, 트리거 발화 시 거래를 실행합니다.

구성:
- scheduled_trade_job: 트리거 발화 시 호출 (재시도/백오프 포함, 예외 전파 없음)
- reconcile_sweep_job: 주기적 재조정 (엔진 드리프트 자가 복구)
- start_scheduler / stop_scheduler: FastAPI lifespan에서 호출
"""
import asyncio
import logging
from time import time
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from backend.app.core.config import settings
from src.application.use_cases.reconcile_schedules import ReconcileResult
from src.domain.entities.execution import ExecutionRecord
from src.domain.exceptions import RetryableExecutionError

logger = logging.getLogger(__name__)

RECONCILE_SWEEP_JOB_ID = "reconcile_sweep"


def build_scheduler() -> AsyncIOScheduler:
    """
    스케줄러 인스턴스 생성

    SCHEDULER_JOBSTORE_URL이 설정된 경우 SQLAlchemyJobStore에 트리거를 영속화합니다.
    """
    jobstores = {}
    if settings.SCHEDULER_JOBSTORE_URL:
        from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
        jobstores["default"] = SQLAlchemyJobStore(url=settings.SCHEDULER_JOBSTORE_URL)

    return AsyncIOScheduler(
        jobstores=jobstores,
        timezone=settings.SCHEDULER_TIMEZONE,
        job_defaults={
            "coalesce": True,  # 누락된 작업 병합
            "max_instances": 1,  # 동시 실행 방지
            "misfire_grace_time": settings.SCHEDULER_MISFIRE_GRACE_SECONDS,  # 지연 허용 시간 (초)
        }
    )


# 전역 스케줄러 인스턴스
scheduler = build_scheduler()

# ============================================================================
# Container 싱글톤
# ============================================================================
_container = None


def get_container():
    """
    Container 싱글톤 인스턴스 반환

    STORAGE_BACKEND=postgres인 경우 PostgreSQL session_factory를 전달합니다.
    워크플로 엔진은 전역 APScheduler 인스턴스를 사용합니다.
    """
    global _container
    if _container is None:
        from src.container import Container

        session_factory = None
        if settings.STORAGE_BACKEND != "memory":
            from backend.app.db.session import AsyncSessionLocal
            session_factory = AsyncSessionLocal

        set_container(Container.create_from_settings(
            settings,
            scheduler=scheduler,
            session_factory=session_factory,
        ))
        logger.info("✅ Container 싱글톤 초기화 완료")

    return _container


def set_container(container) -> None:
    """Container 교체 (테스트용). None이면 다음 호출 시 재생성합니다."""
    global _container
    _container = container
    if container is not None:
        container.get_reconcile_use_case().set_on_result(record_reconcile_metrics)


def record_reconcile_metrics(result: ReconcileResult) -> None:
    """재조정 결과를 Prometheus 메트릭으로 기록"""
    from backend.app.services.metrics import record_reconcile_result
    record_reconcile_result(
        created=result.created,
        updated=result.updated,
        deleted=result.deleted,
        unchanged=result.unchanged,
        errors=len(result.errors),
    )


def retry_delay(attempt: int, base_seconds: float, max_seconds: float) -> float:
    """
    재시도 대기 시간 (지수 백오프, 상한 적용)

    Example:
        >>> [retry_delay(n, 2.0, 30.0) for n in (1, 2, 3, 4, 5)]
        [2.0, 4.0, 8.0, 16.0, 30.0]
    """
    return min(base_seconds * (2 ** (attempt - 1)), max_seconds)


def _capture_exception(exc: Exception, job: str, job_name: Optional[str] = None) -> None:
    """Sentry로 에러 전송 (활성화된 경우)"""
    if not settings.SENTRY_ENABLED:
        return
    import sentry_sdk
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("component", "scheduler")
        scope.set_tag("job", job)
        if job_name:
            scope.set_tag("trade_job", job_name)
        sentry_sdk.capture_exception(exc)


async def scheduled_trade_job(job_name: str) -> Optional[ExecutionRecord]:
    """
    트리거 발화 시 실행되는 거래 작업

    실행 순서:
    1. 발화 시각 결정 (모든 시도가 공유 → client_order_id 동일)
    2. ExecuteScheduledTradeUseCase 실행
    3. 재시도 가능한 실패는 지수 백오프 후 재시도 (TRADE_RETRY_MAX_ATTEMPTS)
    4. 결과 메트릭 기록

    어떤 예외도 스케줄러로 전파하지 않습니다.
    """
    from backend.app.services.metrics import (
        record_execution,
        record_retry,
        scheduler_job_duration_seconds,
    )

    job_start_time = time()
    max_attempts = settings.TRADE_RETRY_MAX_ATTEMPTS

    try:
        container = get_container()
        use_case = container.get_execute_trade_use_case()
        fired_at = container.get_time_provider_port().fire_time()

        logger.info(f"⏰ 트리거 발화: {job_name} (fired_at={fired_at.isoformat()})")

        for attempt in range(1, max_attempts + 1):
            try:
                record = await use_case.execute(
                    job_name,
                    fired_at=fired_at,
                    attempt=attempt,
                    max_attempts=max_attempts,
                )
            except RetryableExecutionError as e:
                delay = retry_delay(
                    attempt,
                    settings.TRADE_RETRY_BASE_DELAY_SECONDS,
                    settings.TRADE_RETRY_MAX_DELAY_SECONDS,
                )
                logger.warning(
                    f"🔁 {job_name} 시도 {attempt}/{max_attempts} 실패 ({e.reason}), {delay:.1f}초 후 재시도"
                )
                record_retry()
                await asyncio.sleep(delay)
                continue

            record_execution(record.outcome.value)
            logger.info(f"✅ {job_name} 실행 완료: {record.summary}")
            return record

        # execute()는 마지막 시도에서 예외 대신 failed 기록을 반환하므로 도달하지 않음
        return None

    except Exception as e:
        logger.error(f"❌ 거래 작업 실행 중 오류 발생 ({job_name}): {e}", exc_info=True)
        _capture_exception(e, "scheduled_trade_job", job_name)
        return None

    finally:
        scheduler_job_duration_seconds.labels(job_name="scheduled_trade_job").observe(
            time() - job_start_time
        )


async def reconcile_sweep_job() -> Optional[ReconcileResult]:
    """
    주기적 재조정 작업 (RECONCILE_INTERVAL_SECONDS)

    API 쓰기 직후의 재조정이 실패했거나 엔진 상태가 외부에서 바뀐 경우를 복구합니다.
    """
    from backend.app.services.metrics import (
        record_reconcile_failure,
        scheduler_job_duration_seconds,
    )

    job_start_time = time()
    try:
        result = await get_container().get_reconcile_use_case().reconcile()
        if result.changed:
            logger.info(f"🔄 주기적 재조정으로 트리거 변경: {result.to_dict()}")
        return result
    except Exception as e:
        logger.error(f"❌ 주기적 재조정 실패: {e}", exc_info=True)
        record_reconcile_failure()
        _capture_exception(e, "reconcile_sweep_job")
        return None
    finally:
        scheduler_job_duration_seconds.labels(job_name=RECONCILE_SWEEP_JOB_ID).observe(
            time() - job_start_time
        )


def add_jobs():
    """
    스케줄러에 시스템 작업 추가

    거래 트리거는 여기서 등록하지 않습니다 (재조정이 작업 정의로부터 등록).
    """
    scheduler.add_job(
        reconcile_sweep_job,
        trigger=IntervalTrigger(seconds=settings.RECONCILE_INTERVAL_SECONDS),
        id=RECONCILE_SWEEP_JOB_ID,
        name=f"트리거 재조정 (매 {settings.RECONCILE_INTERVAL_SECONDS}초)",
        replace_existing=True,
    )
    logger.info(f"✅ 재조정 작업 등록됨 (IntervalTrigger: {settings.RECONCILE_INTERVAL_SECONDS}초)")


def start_scheduler() -> bool:
    """
    스케줄러 시작

    Returns:
        bool: 이번 호출로 시작되었으면 True
    """
    if not settings.SCHEDULER_ENABLED:
        logger.warning("스케줄러가 비활성화되어 있습니다.")
        return False

    if scheduler.running:
        logger.warning("스케줄러가 이미 실행 중입니다.")
        return False

    add_jobs()
    scheduler.start()
    logger.info(f"✅ 스케줄러 시작됨 (timezone={settings.SCHEDULER_TIMEZONE}, namespace={settings.SCHEDULER_NAMESPACE})")
    return True


def stop_scheduler():
    """스케줄러 중지"""
    if not scheduler.running:
        logger.warning("스케줄러가 실행 중이 아닙니다.")
        return

    scheduler.shutdown(wait=True)
    logger.info("✅ 스케줄러 중지됨")
