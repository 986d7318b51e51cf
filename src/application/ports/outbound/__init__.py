# Outbound ports (external system interfaces)
from src.application.ports.outbound.job_repository_port import JobRepositoryPort
from src.application.ports.outbound.workflow_engine_port import WorkflowEnginePort
from src.application.ports.outbound.broker_port import BrokerPort, BrokerError
from src.application.ports.outbound.execution_record_port import ExecutionRecordPort
from src.application.ports.outbound.schedule_settings_port import ScheduleSettingsPort
from src.application.ports.outbound.lock_port import (
    LockPort,
    LockAcquisitionError,
    RECONCILIATION_LOCK,
    job_lock_name,
)
from src.application.ports.outbound.time_provider_port import (
    TimeProviderPort,
    SystemTimeAdapter,
    FixedTimeAdapter,
)

__all__ = [
    "JobRepositoryPort",
    "WorkflowEnginePort",
    "BrokerPort",
    "BrokerError",
    "ExecutionRecordPort",
    "ScheduleSettingsPort",
    "LockPort",
    "LockAcquisitionError",
    "RECONCILIATION_LOCK",
    "job_lock_name",
    "TimeProviderPort",
    "SystemTimeAdapter",
    "FixedTimeAdapter",
]
