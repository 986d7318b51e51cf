"""Application ports (interfaces)."""
from src.application.ports.outbound.job_repository_port import JobRepositoryPort
from src.application.ports.outbound.workflow_engine_port import WorkflowEnginePort
from src.application.ports.outbound.broker_port import BrokerPort

__all__ = [
    "JobRepositoryPort",
    "WorkflowEnginePort",
    "BrokerPort",
]
