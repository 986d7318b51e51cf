"""
ExecutionRecordPort - Interface for the append-only execution audit log.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from src.domain.entities.execution import ExecutionRecord


class ExecutionRecordPort(ABC):
    """
    Port interface for execution records.

    Records are appended once per trigger fire and never mutated.
    """

    @abstractmethod
    async def append(self, record: ExecutionRecord) -> ExecutionRecord:
        """
        Append a record.

        Returns:
            The stored record (with its id assigned)
        """
        pass

    @abstractmethod
    async def list(
        self,
        job_name: Optional[str] = None,
        limit: int = 50,
    ) -> List[ExecutionRecord]:
        """
        List records, newest first.

        Args:
            job_name: Only records for this job when given
            limit: Maximum number of records
        """
        pass
