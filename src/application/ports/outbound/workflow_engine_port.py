"""
WorkflowEnginePort - Interface for the scheduling engine that owns triggers.

The engine holds the live set of recurring triggers. It is an external,
eventually-reconciled resource: callers re-query it on every pass instead of
caching its state.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Optional

from src.domain.value_objects.trigger_spec import TriggerSpec


class WorkflowEnginePort(ABC):
    """
    Port interface for trigger registration.

    Triggers are keyed by job name. Firing a trigger invokes the trade
    execution handler for that job.
    """

    @abstractmethod
    async def list_triggers(self) -> Dict[str, Optional[TriggerSpec]]:
        """
        List triggers registered by this service.

        Returns:
            Mapping of job name to its live TriggerSpec. The value is None when
            a trigger exists but cannot be read back as a TriggerSpec (e.g., it
            was modified out-of-band); callers treat it as stale.

        Raises:
            ReconciliationError: If the engine is unreachable
        """
        pass

    @abstractmethod
    async def upsert_trigger(self, job_name: str, spec: TriggerSpec) -> None:
        """
        Create or replace the trigger for a job.

        Raises:
            ReconciliationError: If the engine rejects the operation
        """
        pass

    @abstractmethod
    async def delete_trigger(self, job_name: str) -> None:
        """
        Remove the trigger for a job. Removing a missing trigger is a no-op.

        Raises:
            ReconciliationError: If the engine rejects the operation
        """
        pass

    async def get_next_run_times(self) -> Dict[str, Optional[datetime]]:
        """
        Next scheduled fire time per job, when the engine can report it.
        """
        return {name: None for name in await self.list_triggers()}
