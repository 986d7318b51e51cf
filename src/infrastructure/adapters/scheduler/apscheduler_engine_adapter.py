"""
APSchedulerEngineAdapter - APScheduler implementation of WorkflowEnginePort.

Triggers are APScheduler cron jobs with id "{namespace}:{job_name}". The
fire callable is referenced textually so jobs survive a persistent jobstore
(SQLAlchemyJobStore) round-trip. The live TriggerSpec is read back from the
CronTrigger fields on every query; nothing is cached here.

APScheduler calls are offloaded to a worker thread so the caller's timeout
(asyncio.wait_for) can bound them even when the jobstore is a remote database.
"""
import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, Optional, TypeVar

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger

from src.application.ports.outbound.workflow_engine_port import WorkflowEnginePort
from src.domain.exceptions import ReconciliationError
from src.domain.value_objects.trigger_spec import TriggerSpec

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRADE_JOB_FUNC = "backend.app.core.scheduler:scheduled_trade_job"

# CronTrigger fields a compiled TriggerSpec never sets
_DEFAULT_FIELDS = {
    "year": "*",
    "month": "*",
    "day": "*",
    "week": "*",
    "second": "0",
}


class APSchedulerEngineAdapter(WorkflowEnginePort):
    """
    Workflow engine adapter over an APScheduler scheduler.

    Only jobs whose id carries this adapter's namespace prefix are treated as
    triggers; other scheduler jobs (e.g., the reconcile sweep) are ignored.
    """

    def __init__(
        self,
        scheduler: BaseScheduler,
        namespace: str = "trade",
        func_ref: str = TRADE_JOB_FUNC,
        jobstore: str = "default",
        misfire_grace_time: int = 60,
    ):
        """
        Initialize the adapter.

        Args:
            scheduler: APScheduler instance (started or not)
            namespace: Prefix separating trade triggers from other jobs
            func_ref: Textual reference of the fire callable
            jobstore: Jobstore alias for trade triggers
            misfire_grace_time: Seconds a late fire is still executed
        """
        self._scheduler = scheduler
        self._namespace = namespace
        self._func_ref = func_ref
        self._jobstore = jobstore
        self._misfire_grace_time = misfire_grace_time

    @property
    def namespace(self) -> str:
        return self._namespace

    def job_id(self, job_name: str) -> str:
        """APScheduler job id for a job name."""
        return f"{self._namespace}:{job_name}"

    def _job_name(self, job_id: str) -> Optional[str]:
        prefix = f"{self._namespace}:"
        if job_id.startswith(prefix):
            return job_id[len(prefix):]
        return None

    async def _run(self, operation: str, job_name: Optional[str], func: Callable[..., T], *args) -> T:
        try:
            return await asyncio.to_thread(func, *args)
        except Exception as e:
            raise ReconciliationError(
                f"APScheduler {operation} failed: {e}",
                job_name=job_name,
                operation=operation,
            ) from e

    async def list_triggers(self) -> Dict[str, Optional[TriggerSpec]]:
        jobs = await self._run("list", None, self._scheduler.get_jobs)
        triggers: Dict[str, Optional[TriggerSpec]] = {}
        for job in jobs:
            name = self._job_name(job.id)
            if name is not None:
                triggers[name] = self.spec_from_trigger(job.trigger)
        return triggers

    async def get_next_run_times(self) -> Dict[str, Optional[datetime]]:
        jobs = await self._run("list", None, self._scheduler.get_jobs)
        result: Dict[str, Optional[datetime]] = {}
        for job in jobs:
            name = self._job_name(job.id)
            if name is not None:
                # pending jobs of a stopped scheduler have no next_run_time yet
                result[name] = getattr(job, "next_run_time", None)
        return result

    async def upsert_trigger(self, job_name: str, spec: TriggerSpec) -> None:
        await self._run("upsert", job_name, self._upsert, job_name, spec)
        logger.debug(f"APScheduler job upserted: {self.job_id(job_name)} ({spec})")

    def _upsert(self, job_name: str, spec: TriggerSpec) -> None:
        job_id = self.job_id(job_name)
        trigger = CronTrigger(
            day_of_week=spec.day_of_week,
            hour=spec.hour,
            minute=spec.minute,
            timezone=spec.timezone,
        )
        options = dict(
            trigger=trigger,
            id=job_id,
            name=f"{job_name} [{spec}]",
            kwargs={"job_name": job_name},
            jobstore=self._jobstore,
            coalesce=True,
            max_instances=1,
            misfire_grace_time=self._misfire_grace_time,
        )
        if self._scheduler.running:
            self._scheduler.add_job(self._func_ref, replace_existing=True, **options)
            return

        # A stopped scheduler queues jobs as pending and does not dedupe ids
        # until start(), so replace explicitly.
        if self._scheduler.get_job(job_id) is not None:
            self._scheduler.remove_job(job_id)
        self._scheduler.add_job(self._func_ref, **options)

    async def delete_trigger(self, job_name: str) -> None:
        await self._run("delete", job_name, self._delete, job_name)
        logger.debug(f"APScheduler job removed: {self.job_id(job_name)}")

    def _delete(self, job_name: str) -> None:
        try:
            self._scheduler.remove_job(self.job_id(job_name))
        except JobLookupError:
            pass

    @staticmethod
    def spec_from_trigger(trigger) -> Optional[TriggerSpec]:
        """
        Read a TriggerSpec back from an APScheduler trigger.

        Returns None for anything a compiled TriggerSpec could not have
        produced (non-cron triggers, extra cron fields, step expressions).
        """
        if not isinstance(trigger, CronTrigger):
            return None

        fields = {field.name: str(field) for field in trigger.fields}
        for name, default in _DEFAULT_FIELDS.items():
            if fields.get(name, default) != default:
                return None

        try:
            hour = int(fields["hour"])
            minute = int(fields["minute"])
        except (KeyError, ValueError):
            return None

        return TriggerSpec(
            day_of_week=fields.get("day_of_week", "*"),
            hour=hour,
            minute=minute,
            timezone=str(trigger.timezone),
        )
