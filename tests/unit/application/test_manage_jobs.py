"""
ManageJobsUseCase 테스트

작업 CRUD 후 재조정, 이름 단위 쓰기 직렬화, 타임존 변경을 검증합니다.
"""
import asyncio

import pytest

from src.application.ports.outbound.lock_port import LockAcquisitionError, job_lock_name
from src.application.use_cases.execute_scheduled_trade import ExecuteScheduledTradeUseCase
from src.application.use_cases.manage_jobs import ManageJobsUseCase
from src.application.use_cases.reconcile_schedules import ReconcileSchedulesUseCase
from src.domain.entities.execution import ExecutionOutcome, REASON_DUPLICATE
from src.domain.exceptions import (
    JobConflictError,
    JobNotFoundError,
    JobValidationError,
    ScheduleCompileError,
)
from src.infrastructure.adapters.broker.memory_broker_adapter import InMemoryBrokerAdapter
from src.infrastructure.adapters.persistence.memory_adapter import (
    InMemoryExecutionRecordAdapter,
    InMemoryScheduleSettingsAdapter,
)
from src.infrastructure.adapters.persistence.memory_job_repository import InMemoryJobRepository
from src.infrastructure.adapters.persistence.memory_lock_adapter import InMemoryLockAdapter
from src.infrastructure.adapters.scheduler.memory_engine_adapter import InMemoryWorkflowEngineAdapter


@pytest.fixture
def repository():
    return InMemoryJobRepository()


@pytest.fixture
def engine():
    return InMemoryWorkflowEngineAdapter()


@pytest.fixture
def settings_port():
    return InMemoryScheduleSettingsAdapter("America/New_York")


@pytest.fixture
def lock_port():
    return InMemoryLockAdapter()


@pytest.fixture
def broker():
    return InMemoryBrokerAdapter()


@pytest.fixture
def reconciler(repository, engine, settings_port, lock_port):
    return ReconcileSchedulesUseCase(repository, engine, settings_port, lock_port)


@pytest.fixture
def use_case(repository, reconciler, settings_port, lock_port, broker, time_provider):
    executor = ExecuteScheduledTradeUseCase(
        repository, broker, InMemoryExecutionRecordAdapter(), time_provider
    )
    return ManageJobsUseCase(
        repository,
        reconciler,
        settings_port,
        lock_port,
        lock_timeout_seconds=0.2,
        executor=executor,
    )


class TestCreateJob:
    """작업 생성"""

    @pytest.mark.asyncio
    async def test_create_registers_trigger(self, use_case, engine, job_factory):
        """생성 후 트리거가 등록됨 (mon-fri 9:35 America/New_York)"""
        # When
        await use_case.create_job(job_factory())

        # Then
        spec = engine.triggers["buy-tsla"]
        assert spec.day_of_week == "mon-fri"
        assert (spec.hour, spec.minute) == (9, 35)
        assert spec.timezone == "America/New_York"

    @pytest.mark.asyncio
    async def test_create_duplicate_name_conflicts(self, use_case, job_factory):
        """같은 이름 재생성 → JobConflictError"""
        await use_case.create_job(job_factory())

        with pytest.raises(JobConflictError):
            await use_case.create_job(job_factory(quantity=5))

    @pytest.mark.asyncio
    async def test_create_disabled_registers_nothing(self, use_case, engine, job_factory):
        """비활성 작업은 트리거 없음"""
        await use_case.create_job(job_factory(enabled=False))

        assert engine.triggers == {}

    @pytest.mark.asyncio
    async def test_reconcile_failure_does_not_fail_write(self, use_case, engine, repository, job_factory):
        """재조정 실패는 로그만 남기고 쓰기는 성공"""
        async def unreachable():
            raise ConnectionError("engine down")

        engine.list_triggers = unreachable

        stored = await use_case.create_job(job_factory())

        assert stored.name == "buy-tsla"
        assert await repository.exists("buy-tsla")


class TestUpdateJob:
    """작업 수정"""

    @pytest.mark.asyncio
    async def test_update_schedule_replaces_trigger(self, use_case, engine, job_factory):
        """스케줄 변경 → 트리거 교체"""
        await use_case.create_job(job_factory())

        await use_case.update_job("buy-tsla", job_factory(hour=10, minute=0))

        assert (engine.triggers["buy-tsla"].hour, engine.triggers["buy-tsla"].minute) == (10, 0)

    @pytest.mark.asyncio
    async def test_update_quantity_keeps_trigger(self, use_case, engine, repository, job_factory):
        """수량만 변경 → 트리거 호출 없음, 저장소만 변경"""
        await use_case.create_job(job_factory())
        before = engine.mutation_count

        await use_case.update_job("buy-tsla", job_factory(quantity=20))

        assert engine.mutation_count == before
        assert (await repository.get("buy-tsla")).quantity == 20

    @pytest.mark.asyncio
    async def test_update_unknown_job(self, use_case, job_factory):
        with pytest.raises(JobNotFoundError):
            await use_case.update_job("buy-tsla", job_factory())

    @pytest.mark.asyncio
    async def test_update_name_mismatch(self, use_case, job_factory):
        """본문의 이름이 경로와 다르면 검증 실패"""
        await use_case.create_job(job_factory())

        with pytest.raises(JobValidationError) as exc_info:
            await use_case.update_job("buy-tsla", job_factory(name="other"))

        assert exc_info.value.field == "name"


class TestDeleteAndToggle:
    """삭제 및 활성/비활성"""

    @pytest.mark.asyncio
    async def test_delete_removes_trigger(self, use_case, engine, repository, job_factory):
        await use_case.create_job(job_factory())

        await use_case.delete_job("buy-tsla")

        assert "buy-tsla" not in engine.triggers
        assert not await repository.exists("buy-tsla")

    @pytest.mark.asyncio
    async def test_delete_unknown_job(self, use_case):
        with pytest.raises(JobNotFoundError):
            await use_case.delete_job("missing")

    @pytest.mark.asyncio
    async def test_disable_then_enable(self, use_case, engine, repository, job_factory):
        """비활성화 → 트리거 삭제 + 정의 유지, 재활성화 → 트리거 복원"""
        await use_case.create_job(job_factory())

        disabled = await use_case.set_enabled("buy-tsla", False)
        assert disabled.enabled is False
        assert "buy-tsla" not in engine.triggers
        assert await repository.exists("buy-tsla")

        await use_case.set_enabled("buy-tsla", True)
        assert "buy-tsla" in engine.triggers

    @pytest.mark.asyncio
    async def test_set_enabled_noop(self, use_case, engine, job_factory):
        """이미 같은 상태면 재조정 없음"""
        await use_case.create_job(job_factory())
        calls = len(engine.calls)

        await use_case.set_enabled("buy-tsla", True)

        assert len(engine.calls) == calls


class TestTimezone:
    """타임존 설정"""

    @pytest.mark.asyncio
    async def test_set_timezone_recompiles_all(self, use_case, engine, job_factory):
        """타임존 변경 → 모든 트리거 재등록, 요일/시각 유지"""
        await use_case.create_job(job_factory(name="a-job"))
        await use_case.create_job(job_factory(name="b-job", hour=15, minute=55))

        await use_case.set_timezone("Europe/London")

        assert {spec.timezone for spec in engine.triggers.values()} == {"Europe/London"}
        assert engine.triggers["b-job"].hour == 15
        assert await use_case.get_timezone() == "Europe/London"

    @pytest.mark.asyncio
    async def test_unknown_timezone_rejected(self, use_case):
        with pytest.raises(ScheduleCompileError):
            await use_case.set_timezone("Mars/Olympus")

        assert await use_case.get_timezone() == "America/New_York"


class TestConcurrency:
    """이름 단위 쓰기 직렬화"""

    @pytest.mark.asyncio
    async def test_concurrent_writes_same_name_serialized(self, use_case, repository, job_factory):
        """같은 이름에 대한 동시 수정 → 하나씩 적용, 최종 상태는 둘 중 하나"""
        await use_case.create_job(job_factory())

        await asyncio.gather(
            use_case.update_job("buy-tsla", job_factory(quantity=20)),
            use_case.update_job("buy-tsla", job_factory(quantity=30)),
        )

        assert (await repository.get("buy-tsla")).quantity in (20, 30)

    @pytest.mark.asyncio
    async def test_held_job_lock_times_out(self, use_case, lock_port, job_factory):
        """다른 쓰기가 락을 오래 잡고 있으면 LockAcquisitionError"""
        await use_case.create_job(job_factory())
        await lock_port.acquire(job_lock_name("buy-tsla"))

        with pytest.raises(LockAcquisitionError):
            await use_case.update_job("buy-tsla", job_factory(quantity=20))

    @pytest.mark.asyncio
    async def test_different_names_not_blocked(self, use_case, lock_port, repository, job_factory):
        """다른 이름의 락은 서로 막지 않음"""
        await lock_port.acquire(job_lock_name("a-job"))

        await use_case.create_job(job_factory(name="b-job"))

        assert await repository.exists("b-job")


class TestRunJobNow:
    """즉시 실행"""

    @pytest.mark.asyncio
    async def test_run_now_submits_order(self, use_case, broker, job_factory):
        await use_case.create_job(job_factory())

        record = await use_case.run_job_now("buy-tsla")

        assert record.outcome is ExecutionOutcome.SUCCESS
        assert len(broker.orders) == 1

    @pytest.mark.asyncio
    async def test_run_now_in_fire_minute_places_own_order(self, use_case, broker, job_factory):
        """같은 분의 예약 발화와 수동 실행은 각자 주문 (client_order_id 분리)"""
        await use_case.create_job(job_factory())

        scheduled = await use_case.executor.execute("buy-tsla")
        manual = await use_case.run_job_now("buy-tsla")

        assert scheduled.outcome is ExecutionOutcome.SUCCESS
        assert manual.outcome is ExecutionOutcome.SUCCESS
        assert scheduled.order_id != manual.order_id
        assert len(broker.orders) == 2

    @pytest.mark.asyncio
    async def test_repeated_run_now_same_second_recorded_once(self, use_case, broker, job_factory):
        """
        Given: 같은 초에 수동 실행 2회
        When: 두 번째 제출이 기존 주문으로 해석됨
        Then: 주문 1건, success 1건 + skipped(duplicate) 1건
        """
        await use_case.create_job(job_factory())

        first = await use_case.run_job_now("buy-tsla")
        second = await use_case.run_job_now("buy-tsla")

        assert first.outcome is ExecutionOutcome.SUCCESS
        assert second.outcome is ExecutionOutcome.SKIPPED
        assert second.reason == REASON_DUPLICATE
        assert len(broker.orders) == 1
        outcomes = [r.outcome for r in use_case.executor.execution_records.records]
        assert outcomes.count(ExecutionOutcome.SUCCESS) == 1

    @pytest.mark.asyncio
    async def test_run_now_unknown_job(self, use_case, broker):
        with pytest.raises(JobNotFoundError):
            await use_case.run_job_now("missing")

        assert broker.submissions == []

    @pytest.mark.asyncio
    async def test_run_now_without_executor(self, repository, reconciler, settings_port, lock_port):
        use_case = ManageJobsUseCase(repository, reconciler, settings_port, lock_port)

        with pytest.raises(RuntimeError):
            await use_case.run_job_now("buy-tsla")
