"""
InMemoryJobRepository - In-memory implementation of JobRepositoryPort.

Job definitions are frozen dataclasses, so replacing a dict entry is atomic
for readers. All data is lost when the process exits.
"""
from typing import Dict, List

from src.application.ports.outbound.job_repository_port import JobRepositoryPort
from src.domain.entities.job import JobDefinition
from src.domain.exceptions import JobConflictError, JobNotFoundError


class InMemoryJobRepository(JobRepositoryPort):
    """
    In-memory job store for tests and STORAGE_BACKEND=memory.
    """

    def __init__(self):
        """Initialize empty storage."""
        self._jobs: Dict[str, JobDefinition] = {}

    def clear(self):
        """Clear all stored jobs. Useful for test cleanup."""
        self._jobs.clear()

    async def get(self, name: str) -> JobDefinition:
        try:
            return self._jobs[name]
        except KeyError:
            raise JobNotFoundError(name)

    async def list(self) -> List[JobDefinition]:
        return [self._jobs[name] for name in sorted(self._jobs)]

    async def put(self, job: JobDefinition) -> JobDefinition:
        self._jobs[job.name] = job
        return job

    async def create(self, job: JobDefinition) -> JobDefinition:
        if job.name in self._jobs:
            raise JobConflictError(job.name)
        self._jobs[job.name] = job
        return job

    async def delete(self, name: str) -> None:
        if self._jobs.pop(name, None) is None:
            raise JobNotFoundError(name)
