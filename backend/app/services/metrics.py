"""
Prometheus 메트릭 서비스
애플리케이션 성능 및 비즈니스 메트릭을 수집합니다.
"""
import logging
from typing import Iterable

from prometheus_client import Counter, Histogram, Gauge, Info
from prometheus_client import make_asgi_app

from backend.app.core.config import settings

logger = logging.getLogger(__name__)

# 애플리케이션 정보
app_info = Info('trade_schedule_info', 'Trade Schedule Service Information')
app_info.info({
    'version': settings.VERSION,
    'name': settings.PROJECT_NAME,
})

# 거래 실행 메트릭
trade_executions_total = Counter(
    'trade_executions_total',
    'Total trigger fires by recorded outcome',
    ['outcome']
)

trade_retries_total = Counter(
    'trade_retries_total',
    'Total retried trade attempts after a transient failure',
)

# 재조정 메트릭
schedule_reconcile_operations_total = Counter(
    'schedule_reconcile_operations_total',
    'Total trigger operations applied by reconciliation',
    ['operation']
)

schedule_reconcile_failures_total = Counter(
    'schedule_reconcile_failures_total',
    'Total failed reconciliation operations or passes',
)

scheduled_jobs_registered = Gauge(
    'scheduled_jobs_registered',
    'Number of live trade triggers after the last reconciliation'
)

# 스케줄러 메트릭
scheduler_job_duration_seconds = Histogram(
    'scheduler_job_duration_seconds',
    'Scheduler job duration in seconds',
    ['job_name']
)


def record_execution(outcome: str):
    """거래 실행 결과 메트릭 기록"""
    trade_executions_total.labels(outcome=outcome).inc()


def record_retry():
    """재시도 메트릭 기록"""
    trade_retries_total.inc()


def record_reconcile_result(
    created: Iterable[str],
    updated: Iterable[str],
    deleted: Iterable[str],
    unchanged: Iterable[str],
    errors: int,
):
    """재조정 결과 메트릭 기록"""
    created, updated, deleted, unchanged = (
        list(created), list(updated), list(deleted), list(unchanged)
    )
    for operation, names in (("create", created), ("update", updated), ("delete", deleted)):
        if names:
            schedule_reconcile_operations_total.labels(operation=operation).inc(len(names))
    if errors:
        schedule_reconcile_failures_total.inc(errors)
    scheduled_jobs_registered.set(len(created) + len(updated) + len(unchanged))


def record_reconcile_failure():
    """재조정 패스 전체 실패 기록"""
    schedule_reconcile_failures_total.inc()


# ASGI 애플리케이션 (FastAPI에 마운트)
metrics_app = make_asgi_app()
