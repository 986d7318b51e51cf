"""
In-memory adapters for execution records and schedule settings.

These adapters provide in-memory storage for testing purposes and for
running without a database. All data is lost when the adapter is destroyed.
"""
from dataclasses import replace
from typing import List, Optional

from src.application.ports.outbound.execution_record_port import ExecutionRecordPort
from src.application.ports.outbound.schedule_settings_port import ScheduleSettingsPort
from src.domain.entities.execution import ExecutionRecord


class InMemoryExecutionRecordAdapter(ExecutionRecordPort):
    """
    In-memory execution record log.
    """

    def __init__(self):
        """Initialize empty log."""
        self._records: List[ExecutionRecord] = []

    def clear(self):
        """Clear all records. Useful for test cleanup."""
        self._records.clear()

    @property
    def records(self) -> List[ExecutionRecord]:
        """All records in append order (for testing)."""
        return list(self._records)

    async def append(self, record: ExecutionRecord) -> ExecutionRecord:
        stored = replace(record, id=len(self._records) + 1)
        self._records.append(stored)
        return stored

    async def list(
        self,
        job_name: Optional[str] = None,
        limit: int = 50,
    ) -> List[ExecutionRecord]:
        records = [r for r in reversed(self._records) if job_name is None or r.job_name == job_name]
        return records[:limit]


class InMemoryScheduleSettingsAdapter(ScheduleSettingsPort):
    """
    In-memory timezone setting.
    """

    def __init__(self, default_timezone: str = "America/New_York"):
        self._timezone = default_timezone

    async def get_timezone(self) -> str:
        return self._timezone

    async def set_timezone(self, timezone: str) -> str:
        self._timezone = timezone
        return self._timezone
