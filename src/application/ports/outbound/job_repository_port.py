"""
JobRepositoryPort - Interface for the job store.

The job store is the source of truth for job definitions. Triggers in the
workflow engine are derived from it.
"""
from abc import ABC, abstractmethod
from typing import List

from src.domain.entities.job import JobDefinition
from src.domain.exceptions import JobNotFoundError


class JobRepositoryPort(ABC):
    """
    Port interface for job definition persistence.

    Writes must be atomic with respect to concurrent readers: a reader sees
    either the previous or the new definition, never a partial one.
    """

    @abstractmethod
    async def get(self, name: str) -> JobDefinition:
        """
        Get a job by name.

        Raises:
            JobNotFoundError: If no job has this name
        """
        pass

    @abstractmethod
    async def list(self) -> List[JobDefinition]:
        """
        List all jobs ordered by name.
        """
        pass

    @abstractmethod
    async def put(self, job: JobDefinition) -> JobDefinition:
        """
        Insert or replace a job keyed by name.

        Args:
            job: Validated job definition

        Returns:
            The stored definition
        """
        pass

    @abstractmethod
    async def create(self, job: JobDefinition) -> JobDefinition:
        """
        Insert a new job.

        Raises:
            JobConflictError: If a job with the same name already exists
        """
        pass

    @abstractmethod
    async def delete(self, name: str) -> None:
        """
        Delete a job by name.

        Raises:
            JobNotFoundError: If no job has this name
        """
        pass

    async def exists(self, name: str) -> bool:
        """Check whether a job with this name is stored."""
        try:
            await self.get(name)
        except JobNotFoundError:
            return False
        return True
