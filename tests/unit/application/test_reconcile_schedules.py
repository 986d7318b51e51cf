"""
ReconcileSchedulesUseCase 테스트

저장소(작업 정의)와 엔진(트리거)의 차이만큼만 변경하는지 검증합니다.
"""
import asyncio

import pytest
from unittest.mock import AsyncMock

from src.application.ports.outbound.lock_port import LockAcquisitionError, RECONCILIATION_LOCK
from src.application.use_cases.reconcile_schedules import ReconcileResult, ReconcileSchedulesUseCase
from src.domain.entities.job import Weekday
from src.domain.exceptions import ReconciliationError
from src.domain.value_objects.trigger_spec import TriggerSpec
from src.infrastructure.adapters.persistence.memory_adapter import InMemoryScheduleSettingsAdapter
from src.infrastructure.adapters.persistence.memory_job_repository import InMemoryJobRepository
from src.infrastructure.adapters.persistence.memory_lock_adapter import InMemoryLockAdapter
from src.infrastructure.adapters.scheduler.memory_engine_adapter import InMemoryWorkflowEngineAdapter

TZ = "America/New_York"
BUY_TSLA_SPEC = TriggerSpec(day_of_week="mon-fri", hour=9, minute=35, timezone=TZ)


class TestReconcileSchedules:
    """재조정 패스 테스트"""

    @pytest.fixture
    def repository(self):
        return InMemoryJobRepository()

    @pytest.fixture
    def engine(self):
        return InMemoryWorkflowEngineAdapter()

    @pytest.fixture
    def settings(self):
        return InMemoryScheduleSettingsAdapter(TZ)

    @pytest.fixture
    def lock_port(self):
        return InMemoryLockAdapter()

    @pytest.fixture
    def use_case(self, repository, engine, settings, lock_port):
        return ReconcileSchedulesUseCase(
            job_repository=repository,
            engine=engine,
            settings=settings,
            lock_port=lock_port,
            engine_timeout_seconds=0.5,
            lock_timeout_seconds=0.5,
        )

    @pytest.mark.asyncio
    async def test_creates_trigger_for_enabled_job(self, use_case, repository, engine, job_factory):
        """활성 작업에 트리거 생성"""
        # Given
        await repository.put(job_factory())

        # When
        result = await use_case.reconcile()

        # Then
        assert result.created == ["buy-tsla"]
        assert engine.triggers == {"buy-tsla": BUY_TSLA_SPEC}

    @pytest.mark.asyncio
    async def test_second_pass_issues_no_mutations(self, use_case, repository, engine, job_factory):
        """변경이 없으면 두 번째 패스는 엔진 변경 호출 0회 (멱등성)"""
        await repository.put(job_factory())
        await repository.put(job_factory(name="sell-aapl", action="sell", ticker="AAPL", days=(Weekday.FRI,)))
        await use_case.reconcile()
        calls_after_first = engine.mutation_count

        result = await use_case.reconcile()

        assert engine.mutation_count == calls_after_first
        assert result.changed is False
        assert sorted(result.unchanged) == ["buy-tsla", "sell-aapl"]

    @pytest.mark.asyncio
    async def test_changed_schedule_updates_trigger(self, use_case, repository, engine, job_factory):
        """스케줄 변경 시 트리거 교체"""
        await repository.put(job_factory())
        await use_case.reconcile()

        await repository.put(job_factory(hour=10, minute=0))
        result = await use_case.reconcile()

        assert result.updated == ["buy-tsla"]
        assert engine.triggers["buy-tsla"].hour == 10
        assert engine.triggers["buy-tsla"].minute == 0

    @pytest.mark.asyncio
    async def test_quantity_change_does_not_touch_trigger(self, use_case, repository, engine, job_factory):
        """수량 변경은 트리거에 영향 없음 (핸들러가 발화 시 재조회)"""
        await repository.put(job_factory())
        await use_case.reconcile()
        calls = engine.mutation_count

        await repository.put(job_factory(quantity=20))
        result = await use_case.reconcile()

        assert engine.mutation_count == calls
        assert result.unchanged == ["buy-tsla"]

    @pytest.mark.asyncio
    async def test_deleted_job_removes_trigger(self, use_case, repository, engine, job_factory):
        """삭제된 작업의 트리거 제거, 이후 패스는 변경 없음"""
        await repository.put(job_factory())
        await use_case.reconcile()

        await repository.delete("buy-tsla")
        result = await use_case.reconcile()
        again = await use_case.reconcile()

        assert result.deleted == ["buy-tsla"]
        assert engine.triggers == {}
        assert again.changed is False

    @pytest.mark.asyncio
    async def test_disabled_job_has_no_trigger(self, use_case, repository, engine, job_factory):
        """비활성 작업은 트리거 제거, 정의는 유지"""
        await repository.put(job_factory())
        await use_case.reconcile()

        await repository.put(job_factory(enabled=False))
        result = await use_case.reconcile()

        assert result.deleted == ["buy-tsla"]
        assert "buy-tsla" not in engine.triggers
        assert await repository.exists("buy-tsla")

    @pytest.mark.asyncio
    async def test_orphan_trigger_removed(self, use_case, engine):
        """저장소에 없는 트리거는 제거 (드리프트 복구)"""
        engine.inject_trigger("ghost", BUY_TSLA_SPEC)

        result = await use_case.reconcile()

        assert result.deleted == ["ghost"]
        assert engine.triggers == {}

    @pytest.mark.asyncio
    async def test_out_of_band_removal_restored(self, use_case, repository, engine, job_factory):
        """엔진에서 외부적으로 사라진 트리거는 다시 생성"""
        await repository.put(job_factory())
        await use_case.reconcile()
        engine.remove_out_of_band("buy-tsla")

        result = await use_case.reconcile()

        assert result.created == ["buy-tsla"]

    @pytest.mark.asyncio
    async def test_stale_trigger_is_replaced(self, use_case, repository, engine, job_factory):
        """해석할 수 없는 트리거(None)는 다시 등록"""
        await repository.put(job_factory())
        engine.inject_trigger("buy-tsla", None)

        result = await use_case.reconcile()

        assert result.updated == ["buy-tsla"]
        assert engine.triggers["buy-tsla"] == BUY_TSLA_SPEC

    @pytest.mark.asyncio
    async def test_timezone_change_recompiles_all(self, use_case, repository, engine, settings, job_factory):
        """타임존 변경 시 모든 트리거 재등록"""
        await repository.put(job_factory())
        await use_case.reconcile()

        await settings.set_timezone("Europe/London")
        result = await use_case.reconcile()

        assert result.updated == ["buy-tsla"]
        assert engine.triggers["buy-tsla"].timezone == "Europe/London"

    @pytest.mark.asyncio
    async def test_explicit_job_list_is_used(self, use_case, engine, job_factory):
        """jobs 인자가 주어지면 저장소 대신 사용"""
        result = await use_case.reconcile(jobs=[job_factory(name="given")])

        assert result.created == ["given"]
        assert list(engine.triggers) == ["given"]

    @pytest.mark.asyncio
    async def test_per_job_failure_does_not_abort_pass(self, use_case, repository, engine, job_factory):
        """한 작업의 등록 실패가 나머지 작업을 막지 않음"""
        await repository.put(job_factory(name="a-job"))
        await repository.put(job_factory(name="b-job"))
        original_upsert = engine.upsert_trigger

        async def flaky_upsert(job_name, spec):
            if job_name == "a-job":
                raise RuntimeError("engine rejected")
            await original_upsert(job_name, spec)

        engine.upsert_trigger = flaky_upsert

        result = await use_case.reconcile()

        assert result.created == ["b-job"]
        assert len(result.errors) == 1
        assert result.errors[0].job_name == "a-job"
        assert result.errors[0].operation == "upsert"
        assert result.ok is False

    @pytest.mark.asyncio
    async def test_unreachable_engine_raises(self, use_case, engine):
        """트리거 목록 조회 실패 시 ReconciliationError"""
        engine.list_triggers = AsyncMock(side_effect=ConnectionError("down"))

        with pytest.raises(ReconciliationError) as exc_info:
            await use_case.reconcile()
        assert exc_info.value.operation == "list"

    @pytest.mark.asyncio
    async def test_engine_timeout_raises(self, use_case, engine):
        """엔진 호출은 타임아웃으로 제한됨"""
        async def hang():
            await asyncio.sleep(5)

        engine.list_triggers = hang

        with pytest.raises(ReconciliationError) as exc_info:
            await use_case.reconcile()
        assert "timed out" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_live_triggers_returns_triggers_and_next_runs(self, use_case, repository, engine, job_factory):
        """라이브 트리거와 다음 실행 시각 조회"""
        await repository.put(job_factory())
        await use_case.reconcile()

        triggers, next_runs = await use_case.live_triggers()

        assert set(triggers) == {"buy-tsla"}
        assert next_runs == {"buy-tsla": None}

    @pytest.mark.asyncio
    async def test_live_triggers_timeout(self, use_case, engine):
        """라이브 트리거 조회도 엔진 타임아웃 적용"""
        async def hang():
            await asyncio.sleep(5)

        engine.get_next_run_times = hang

        with pytest.raises(ReconciliationError) as exc_info:
            await use_case.live_triggers()
        assert exc_info.value.operation == "next_run_times"

    @pytest.mark.asyncio
    async def test_lock_released_after_failure(self, use_case, engine, lock_port):
        """실패한 패스 후에도 재조정 락 해제"""
        engine.list_triggers = AsyncMock(side_effect=ConnectionError("down"))

        with pytest.raises(ReconciliationError):
            await use_case.reconcile()

        assert await lock_port.is_locked(RECONCILIATION_LOCK) is False

    @pytest.mark.asyncio
    async def test_lock_timeout_raises(self, use_case, lock_port):
        """다른 패스가 락을 오래 잡고 있으면 LockAcquisitionError"""
        await lock_port.acquire(RECONCILIATION_LOCK)

        with pytest.raises(LockAcquisitionError):
            await use_case.reconcile()

    @pytest.mark.asyncio
    async def test_concurrent_passes_are_serialized(self, use_case, repository, engine, job_factory):
        """동시 패스는 직렬화되어 트리거를 한 번만 생성"""
        await repository.put(job_factory())

        results = await asyncio.gather(use_case.reconcile(), use_case.reconcile())

        assert sum(len(r.created) for r in results) == 1
        assert engine.calls == [("upsert", "buy-tsla")]

    @pytest.mark.asyncio
    async def test_result_callback_invoked(self, use_case, repository, job_factory):
        """완료된 패스마다 콜백 호출"""
        received = []
        use_case.set_on_result(received.append)
        await repository.put(job_factory())

        await use_case.reconcile()

        assert len(received) == 1
        assert received[0].created == ["buy-tsla"]

    def test_result_to_dict(self):
        """결과 직렬화"""
        result = ReconcileResult(created=["a"], errors=[
            ReconciliationError("boom", job_name="b", operation="delete"),
        ])

        assert result.to_dict() == {
            "created": ["a"],
            "updated": [],
            "deleted": [],
            "unchanged": [],
            "errors": [{"job_name": "b", "operation": "delete", "message": "boom"}],
        }
