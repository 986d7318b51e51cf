"""
ManageJobsUseCase - CRUD over job definitions and the timezone setting.

Every successful write is followed by a reconciliation pass. Reconciliation
failures are logged only: the store write already succeeded and the periodic
sweep retries the trigger update.
"""
import logging
from typing import List, Optional

from src.application.ports.outbound.job_repository_port import JobRepositoryPort
from src.application.ports.outbound.lock_port import LockPort, job_lock_name
from src.application.ports.outbound.schedule_settings_port import ScheduleSettingsPort
from src.application.use_cases.execute_scheduled_trade import ExecuteScheduledTradeUseCase
from src.application.use_cases.reconcile_schedules import ReconcileResult, ReconcileSchedulesUseCase
from src.domain.entities.execution import ExecutionRecord
from src.domain.entities.job import JobDefinition
from src.domain.exceptions import JobValidationError
from src.domain.services.schedule_compiler import validate_timezone

logger = logging.getLogger(__name__)


class ManageJobsUseCase:
    """
    Use case mediating all writes to the job store.

    Writes to one job name are serialized through a per-name lock; writes to
    different names proceed concurrently.
    """

    def __init__(
        self,
        job_repository: JobRepositoryPort,
        reconciler: ReconcileSchedulesUseCase,
        settings: ScheduleSettingsPort,
        lock_port: LockPort,
        lock_timeout_seconds: float = 30.0,
        executor: Optional[ExecuteScheduledTradeUseCase] = None,
    ):
        """
        Initialize with required ports.

        Args:
            job_repository: Job store
            reconciler: Registrar run after every write
            settings: Global timezone setting
            lock_port: Per-name write locks
            lock_timeout_seconds: Maximum wait for a concurrent write on the same name
            executor: Trade handler used by run_job_now
        """
        self.job_repository = job_repository
        self.reconciler = reconciler
        self.settings = settings
        self.lock_port = lock_port
        self.lock_timeout_seconds = lock_timeout_seconds
        self.executor = executor

    # --- Reads ---

    async def list_jobs(self) -> List[JobDefinition]:
        """List all jobs."""
        return await self.job_repository.list()

    async def get_job(self, name: str) -> JobDefinition:
        """
        Get one job.

        Raises:
            JobNotFoundError: If the name is unknown
        """
        return await self.job_repository.get(name)

    async def get_timezone(self) -> str:
        """Get the timezone used to interpret job hours."""
        return await self.settings.get_timezone()

    # --- Writes ---

    async def create_job(self, job: JobDefinition) -> JobDefinition:
        """
        Create a job.

        Raises:
            JobConflictError: If the name is already taken
        """
        async with self._job_lock(job.name):
            stored = await self.job_repository.create(job)
        logger.info(f"Job created: {stored.name}")
        await self._reconcile_after_write(f"create {stored.name}")
        return stored

    async def update_job(self, name: str, job: JobDefinition) -> JobDefinition:
        """
        Replace an existing job.

        Raises:
            JobValidationError: If the body names a different job
            JobNotFoundError: If the name is unknown
        """
        if job.name != name:
            raise JobValidationError(
                f"name in body ({job.name!r}) does not match path ({name!r})",
                field="name",
            )
        async with self._job_lock(name):
            await self.job_repository.get(name)
            stored = await self.job_repository.put(job)
        logger.info(f"Job updated: {name}")
        await self._reconcile_after_write(f"update {name}")
        return stored

    async def delete_job(self, name: str) -> None:
        """
        Delete a job and, through reconciliation, its trigger.

        Raises:
            JobNotFoundError: If the name is unknown
        """
        async with self._job_lock(name):
            await self.job_repository.delete(name)
        logger.info(f"Job deleted: {name}")
        await self._reconcile_after_write(f"delete {name}")

    async def set_enabled(self, name: str, enabled: bool) -> JobDefinition:
        """
        Enable or disable a job. Disabled jobs keep their definition.

        Raises:
            JobNotFoundError: If the name is unknown
        """
        async with self._job_lock(name):
            job = await self.job_repository.get(name)
            if job.enabled == enabled:
                return job
            stored = await self.job_repository.put(job.with_enabled(enabled))
        logger.info(f"Job {'enabled' if enabled else 'disabled'}: {name}")
        await self._reconcile_after_write(f"{'enable' if enabled else 'disable'} {name}")
        return stored

    async def set_timezone(self, timezone: str) -> str:
        """
        Change the timezone; every trigger is recompiled.

        Raises:
            ScheduleCompileError: If the timezone is unknown
        """
        validate_timezone(timezone)
        stored = await self.settings.set_timezone(timezone)
        logger.info(f"Timezone set: {stored}")
        await self._reconcile_after_write(f"timezone {stored}")
        return stored

    async def run_job_now(self, name: str) -> ExecutionRecord:
        """
        Fire the trade handler for a job immediately, outside its schedule.

        Runs a single attempt; the outcome is recorded like a scheduled fire.

        Raises:
            JobNotFoundError: If the name is unknown
        """
        if self.executor is None:
            raise RuntimeError("ManageJobsUseCase has no trade executor configured")
        await self.job_repository.get(name)
        logger.info(f"Manual run requested: {name}")
        return await self.executor.execute(name, manual=True)

    def _job_lock(self, name: str):
        return self.lock_port.lock(
            job_lock_name(name),
            timeout_seconds=self.lock_timeout_seconds,
            blocking=True,
        )

    async def _reconcile_after_write(self, context: str) -> Optional[ReconcileResult]:
        """Reconcile after a write; failures are logged and left to the periodic sweep."""
        try:
            result = await self.reconciler.reconcile()
        except Exception as e:
            logger.warning(f"Reconciliation after {context} failed, sweep will retry: {e}", exc_info=True)
            return None

        if not result.ok:
            logger.warning(f"Reconciliation after {context} finished with {len(result.errors)} error(s)")
        return result
