"""Domain entities."""
from src.domain.entities.job import (
    JobDefinition,
    Schedule,
    OrderSide,
    Weekday,
)
from src.domain.entities.execution import ExecutionRecord, ExecutionOutcome

__all__ = [
    "JobDefinition",
    "Schedule",
    "OrderSide",
    "Weekday",
    "ExecutionRecord",
    "ExecutionOutcome",
]
