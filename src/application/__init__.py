"""
Application Layer - Use Cases and Ports

This module contains the application logic that orchestrates domain entities
and coordinates with external systems through ports (interfaces).

Structure:
- ports/outbound/: Interfaces that the application uses to communicate with external systems
- use_cases/: Application services implementing business use cases
- dto/: Data Transfer Objects for port communication
"""
from src.application.use_cases.execute_scheduled_trade import ExecuteScheduledTradeUseCase
from src.application.use_cases.manage_jobs import ManageJobsUseCase
from src.application.use_cases.reconcile_schedules import ReconcileSchedulesUseCase

__all__ = [
    "ExecuteScheduledTradeUseCase",
    "ManageJobsUseCase",
    "ReconcileSchedulesUseCase",
]
