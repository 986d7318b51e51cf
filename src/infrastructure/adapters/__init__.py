"""Infrastructure adapters."""
from src.infrastructure.adapters.scheduler.memory_engine_adapter import InMemoryWorkflowEngineAdapter
from src.infrastructure.adapters.broker.memory_broker_adapter import InMemoryBrokerAdapter
from src.infrastructure.adapters.persistence.memory_job_repository import InMemoryJobRepository
from src.infrastructure.adapters.persistence.memory_adapter import (
    InMemoryExecutionRecordAdapter,
    InMemoryScheduleSettingsAdapter,
)
from src.infrastructure.adapters.persistence.memory_lock_adapter import InMemoryLockAdapter

__all__ = [
    "InMemoryWorkflowEngineAdapter",
    "InMemoryBrokerAdapter",
    "InMemoryJobRepository",
    "InMemoryExecutionRecordAdapter",
    "InMemoryScheduleSettingsAdapter",
    "InMemoryLockAdapter",
]
