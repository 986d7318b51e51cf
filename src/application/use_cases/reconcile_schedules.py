"""
ReconcileSchedulesUseCase - Make the live trigger set match the job store.

The job store is the source of truth. Each pass re-reads the store and
re-queries the workflow engine, then issues only the trigger operations
needed to close the gap:

- enabled job without trigger        -> upsert (created)
- enabled job with a different spec  -> upsert (updated)
- trigger without an enabled job     -> delete (deleted)

A pass with no store change issues no mutating engine calls.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from src.application.ports.outbound.job_repository_port import JobRepositoryPort
from src.application.ports.outbound.lock_port import LockPort, RECONCILIATION_LOCK
from src.application.ports.outbound.schedule_settings_port import ScheduleSettingsPort
from src.application.ports.outbound.workflow_engine_port import WorkflowEnginePort
from src.domain.entities.job import JobDefinition
from src.domain.exceptions import ReconciliationError, ScheduleCompileError
from src.domain.services.schedule_compiler import compile_schedule
from src.domain.value_objects.trigger_spec import TriggerSpec

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ReconcileResult:
    """
    Diff applied by one reconciliation pass.

    Attributes:
        created: Jobs that got a new trigger
        updated: Jobs whose trigger was replaced
        deleted: Job names whose trigger was removed
        unchanged: Jobs whose trigger already matched
        errors: Per-job failures; the pass continued past them
    """
    created: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)
    errors: List[ReconciliationError] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """True if any trigger operation was applied."""
        return bool(self.created or self.updated or self.deleted)

    @property
    def ok(self) -> bool:
        """True if every operation succeeded."""
        return not self.errors

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "created": list(self.created),
            "updated": list(self.updated),
            "deleted": list(self.deleted),
            "unchanged": list(self.unchanged),
            "errors": [
                {"job_name": e.job_name, "operation": e.operation, "message": str(e)}
                for e in self.errors
            ],
        }


class ReconcileSchedulesUseCase:
    """
    Use case reconciling job definitions against engine triggers.

    Concurrent calls are serialized through the reconciliation lock so two
    passes never issue conflicting registrations for the same job.
    """

    def __init__(
        self,
        job_repository: JobRepositoryPort,
        engine: WorkflowEnginePort,
        settings: ScheduleSettingsPort,
        lock_port: LockPort,
        engine_timeout_seconds: float = 10.0,
        lock_timeout_seconds: float = 30.0,
    ):
        """
        Initialize with required ports.

        Args:
            job_repository: Job store (source of truth)
            engine: Workflow engine holding the live triggers
            settings: Provides the timezone used to compile schedules
            lock_port: Serializes reconciliation passes
            engine_timeout_seconds: Timeout applied to every engine call
            lock_timeout_seconds: Maximum wait for a running pass to finish
        """
        self.job_repository = job_repository
        self.engine = engine
        self.settings = settings
        self.lock_port = lock_port
        self.engine_timeout_seconds = engine_timeout_seconds
        self.lock_timeout_seconds = lock_timeout_seconds
        self._on_result: Optional[Callable[[ReconcileResult], None]] = None

    def set_on_result(self, callback: Optional[Callable[[ReconcileResult], None]]) -> None:
        """Register a callback invoked with the result of every completed pass."""
        self._on_result = callback

    async def reconcile(self, jobs: Optional[Sequence[JobDefinition]] = None) -> ReconcileResult:
        """
        Run one reconciliation pass.

        Args:
            jobs: Current job definitions; loaded from the store when None

        Returns:
            ReconcileResult describing the applied diff

        Raises:
            ReconciliationError: If the live trigger set cannot be read
            LockAcquisitionError: If another pass holds the lock too long
        """
        async with self.lock_port.lock(
            RECONCILIATION_LOCK,
            timeout_seconds=self.lock_timeout_seconds,
            blocking=True,
        ):
            result = await self._reconcile(jobs)

        if self._on_result is not None:
            try:
                self._on_result(result)
            except Exception as e:
                logger.warning(f"Reconcile result callback failed: {e}")
        return result

    async def live_triggers(self) -> Tuple[Dict[str, Optional[TriggerSpec]], Dict[str, Optional[datetime]]]:
        """
        Read the live triggers and their next fire times from the engine.

        Both engine calls run under the engine timeout.

        Raises:
            ReconciliationError: If the engine is unreachable or too slow
        """
        triggers = await self._call(self.engine.list_triggers(), "list")
        next_runs = await self._call(self.engine.get_next_run_times(), "next_run_times")
        return triggers, next_runs

    async def _reconcile(self, jobs: Optional[Sequence[JobDefinition]]) -> ReconcileResult:
        if jobs is None:
            jobs = await self.job_repository.list()
        timezone = await self.settings.get_timezone()

        result = ReconcileResult()
        desired: Dict[str, TriggerSpec] = {}
        uncompilable = set()

        for job in jobs:
            if not job.enabled:
                continue
            try:
                desired[job.name] = compile_schedule(job.schedule, timezone)
            except ScheduleCompileError as e:
                uncompilable.add(job.name)
                result.errors.append(
                    ReconciliationError(f"Schedule does not compile: {e}", job_name=job.name, operation="compile")
                )
                logger.error(f"Skipping trigger for {job.name}: {e}")

        live = await self._call(self.engine.list_triggers(), "list")

        for name in sorted(desired):
            spec = desired[name]
            if name in live and live[name] == spec:
                result.unchanged.append(name)
                continue

            try:
                await self._call(self.engine.upsert_trigger(name, spec), "upsert", name)
            except ReconciliationError as e:
                result.errors.append(e)
                logger.warning(f"Trigger upsert failed for {name}: {e}")
                continue

            if name in live:
                result.updated.append(name)
                logger.info(f"Trigger updated: {name} -> {spec}")
            else:
                result.created.append(name)
                logger.info(f"Trigger created: {name} -> {spec}")

        for name in sorted(live):
            if name in desired or name in uncompilable:
                continue
            try:
                await self._call(self.engine.delete_trigger(name), "delete", name)
            except ReconciliationError as e:
                result.errors.append(e)
                logger.warning(f"Trigger delete failed for {name}: {e}")
                continue
            result.deleted.append(name)
            logger.info(f"Trigger deleted: {name}")

        if result.changed or result.errors:
            logger.info(
                f"Reconciliation done: created={len(result.created)} updated={len(result.updated)} "
                f"deleted={len(result.deleted)} unchanged={len(result.unchanged)} errors={len(result.errors)}"
            )
        return result

    async def _call(self, awaitable: Awaitable[T], operation: str, job_name: Optional[str] = None) -> T:
        """Run one engine call under the engine timeout, mapping failures to ReconciliationError."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.engine_timeout_seconds)
        except asyncio.TimeoutError:
            raise ReconciliationError(
                f"Workflow engine {operation} timed out after {self.engine_timeout_seconds}s",
                job_name=job_name,
                operation=operation,
            )
        except ReconciliationError:
            raise
        except Exception as e:
            raise ReconciliationError(
                f"Workflow engine {operation} failed: {e}",
                job_name=job_name,
                operation=operation,
            ) from e
