"""
Application Use Cases.

This module contains the business use cases that orchestrate
domain logic through port interfaces.
"""
from src.application.use_cases.execute_scheduled_trade import (
    ExecuteScheduledTradeUseCase,
    make_client_order_id,
)
from src.application.use_cases.manage_jobs import ManageJobsUseCase
from src.application.use_cases.reconcile_schedules import (
    ReconcileSchedulesUseCase,
    ReconcileResult,
)

__all__ = [
    "ExecuteScheduledTradeUseCase",
    "make_client_order_id",
    "ManageJobsUseCase",
    "ReconcileSchedulesUseCase",
    "ReconcileResult",
]
