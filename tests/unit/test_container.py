"""
Container 테스트

의존성 조립(테스트용/설정 기반)과 유스케이스 싱글톤을 검증합니다.
"""
import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from backend.app.core.config import Settings
from src.container import Container
from src.infrastructure.adapters.broker.memory_broker_adapter import InMemoryBrokerAdapter
from src.infrastructure.adapters.persistence.memory_job_repository import InMemoryJobRepository
from src.infrastructure.adapters.persistence.postgres_job_repository import PostgresJobRepository
from src.infrastructure.adapters.scheduler.apscheduler_engine_adapter import APSchedulerEngineAdapter
from src.infrastructure.adapters.scheduler.memory_engine_adapter import InMemoryWorkflowEngineAdapter


def _settings(**overrides) -> Settings:
    values = dict(STORAGE_BACKEND="memory", ALPACA_API_KEY="", ALPACA_SECRET_KEY="")
    values.update(overrides)
    return Settings(**values)


class TestCreateForTesting:

    def test_in_memory_ports(self):
        container = Container.create_for_testing()

        assert isinstance(container.get_job_repository_port(), InMemoryJobRepository)
        assert isinstance(container.get_workflow_engine_port(), InMemoryWorkflowEngineAdapter)
        assert isinstance(container.get_broker_port(), InMemoryBrokerAdapter)

    def test_overrides(self):
        broker = InMemoryBrokerAdapter(paper=False)

        container = Container.create_for_testing(broker_port=broker)

        assert container.get_broker_port() is broker

    def test_use_cases_share_ports(self):
        """유스케이스는 싱글톤이며 같은 저장소/엔진을 공유"""
        container = Container.create_for_testing()

        reconciler = container.get_reconcile_use_case()
        manage = container.get_manage_jobs_use_case()
        executor = container.get_execute_trade_use_case()

        assert container.get_reconcile_use_case() is reconciler
        assert manage.reconciler is reconciler
        assert manage.executor is executor
        assert executor.job_repository is reconciler.job_repository


class TestCreateFromSettings:

    def test_memory_backend_without_scheduler(self):
        container = Container.create_from_settings(_settings(SCHEDULER_TIMEZONE="Europe/London"))

        assert isinstance(container.get_job_repository_port(), InMemoryJobRepository)
        assert isinstance(container.get_workflow_engine_port(), InMemoryWorkflowEngineAdapter)
        assert isinstance(container.get_broker_port(), InMemoryBrokerAdapter)

    @pytest.mark.asyncio
    async def test_default_timezone_from_settings(self):
        container = Container.create_from_settings(_settings(SCHEDULER_TIMEZONE="Europe/London"))

        assert await container.get_schedule_settings_port().get_timezone() == "Europe/London"

    def test_scheduler_backed_engine(self):
        scheduler = AsyncIOScheduler(timezone="UTC")

        container = Container.create_from_settings(_settings(SCHEDULER_NAMESPACE="paper"), scheduler=scheduler)

        engine = container.get_workflow_engine_port()
        assert isinstance(engine, APSchedulerEngineAdapter)
        assert engine.namespace == "paper"
        assert engine.job_id("buy-tsla") == "paper:buy-tsla"

    def test_postgres_backend_requires_session_factory(self):
        with pytest.raises(ValueError):
            Container.create_from_settings(_settings(STORAGE_BACKEND="postgres"))

    def test_postgres_backend(self):
        container = Container.create_from_settings(
            _settings(STORAGE_BACKEND="postgres"),
            session_factory=object(),
        )

        assert isinstance(container.get_job_repository_port(), PostgresJobRepository)

    def test_timeouts_from_settings(self):
        container = Container.create_from_settings(_settings(
            ENGINE_CALL_TIMEOUT_SECONDS=3,
            BROKER_CALL_TIMEOUT_SECONDS=4,
            LOCK_TIMEOUT_SECONDS=5,
        ))

        assert container.get_reconcile_use_case().engine_timeout_seconds == 3
        assert container.get_execute_trade_use_case().broker_timeout_seconds == 4
        assert container.get_manage_jobs_use_case().lock_timeout_seconds == 5
