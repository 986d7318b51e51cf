"""
InMemoryWorkflowEngineAdapter - In-memory implementation of WorkflowEnginePort.

Keeps triggers in a dictionary and logs every mutating call. Used in tests
and for dry runs where nothing should fire.
"""
from typing import Dict, List, Optional, Tuple

from src.application.ports.outbound.workflow_engine_port import WorkflowEnginePort
from src.domain.value_objects.trigger_spec import TriggerSpec


class InMemoryWorkflowEngineAdapter(WorkflowEnginePort):
    """
    In-memory workflow engine.
    """

    def __init__(self):
        """Initialize with no triggers."""
        self._triggers: Dict[str, Optional[TriggerSpec]] = {}
        self.calls: List[Tuple[str, str]] = []

    def clear(self):
        """Remove all triggers and the call log. Useful for test cleanup."""
        self._triggers.clear()
        self.calls.clear()

    @property
    def triggers(self) -> Dict[str, Optional[TriggerSpec]]:
        """Copy of the live triggers (for testing)."""
        return dict(self._triggers)

    @property
    def mutation_count(self) -> int:
        """Number of upsert/delete calls received."""
        return len(self.calls)

    def inject_trigger(self, job_name: str, spec: Optional[TriggerSpec]) -> None:
        """Register a trigger behind the service's back (simulates drift)."""
        self._triggers[job_name] = spec

    def remove_out_of_band(self, job_name: str) -> None:
        """Drop a trigger behind the service's back (simulates drift)."""
        self._triggers.pop(job_name, None)

    async def list_triggers(self) -> Dict[str, Optional[TriggerSpec]]:
        return dict(self._triggers)

    async def upsert_trigger(self, job_name: str, spec: TriggerSpec) -> None:
        self.calls.append(("upsert", job_name))
        self._triggers[job_name] = spec

    async def delete_trigger(self, job_name: str) -> None:
        self.calls.append(("delete", job_name))
        self._triggers.pop(job_name, None)
