"""
Domain Exceptions

Custom exceptions for domain layer errors.
"""
from typing import Optional


class DomainError(Exception):
    """Base exception for domain errors."""
    pass


class JobValidationError(DomainError):
    """Raised when a job definition has malformed fields."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ScheduleCompileError(JobValidationError):
    """Raised when a schedule cannot be compiled into a trigger."""
    pass


class JobNotFoundError(DomainError):
    """Raised when a job name is unknown to the store."""

    def __init__(self, name: str):
        super().__init__(f"Job not found: {name}")
        self.name = name


class JobConflictError(DomainError):
    """Raised when creating a job whose name already exists."""

    def __init__(self, name: str):
        super().__init__(f"Job already exists: {name}")
        self.name = name


class ReconciliationError(DomainError):
    """Raised when the workflow engine is unreachable or rejects a trigger operation."""

    def __init__(self, message: str, job_name: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message)
        self.job_name = job_name
        self.operation = operation


class ExecutionError(DomainError):
    """Raised when a scheduled trade could not be executed."""

    def __init__(self, job_name: str, reason: str):
        super().__init__(f"Execution failed ({job_name}): {reason}")
        self.job_name = job_name
        self.reason = reason


class RetryableExecutionError(ExecutionError):
    """
    Raised when an attempt failed transiently and the engine may retry it.

    No execution record is written for the attempt.
    """
    pass
