"""
Execution Record Entity

Append-only audit entry written once per trigger fire.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from src.domain.entities.job import JobDefinition


class ExecutionOutcome(Enum):
    """Outcome of one trigger fire."""
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


# Well-known reasons
REASON_TIMEOUT = "timeout"
REASON_NOT_FOUND = "not_found"
REASON_DISABLED = "disabled"
REASON_DUPLICATE = "duplicate"


@dataclass(frozen=True)
class ExecutionRecord:
    """
    Result of one scheduled trade execution.

    Attributes:
        job_name: Job that fired
        fired_at: Scheduled fire time shared by all attempts of one fire
        outcome: success, failed or skipped
        reason: Failure or skip reason (None on success)
        action/ticker/quantity: Order parameters actually used
        order_id: Broker order ID on success
        client_order_id: Deterministic client order ID for the fire
        attempts: Number of attempts made before this record
        id: Store-assigned identifier
    """
    job_name: str
    fired_at: datetime
    outcome: ExecutionOutcome
    reason: Optional[str] = None
    action: Optional[str] = None
    ticker: Optional[str] = None
    quantity: Optional[int] = None
    order_id: Optional[str] = None
    client_order_id: Optional[str] = None
    attempts: int = 1
    id: Optional[int] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def skipped(cls, job_name: str, fired_at: datetime, reason: str, attempts: int = 1) -> ExecutionRecord:
        """Create a record for a fire that did nothing."""
        return cls(
            job_name=job_name,
            fired_at=fired_at,
            outcome=ExecutionOutcome.SKIPPED,
            reason=reason,
            attempts=attempts,
        )

    @classmethod
    def for_job(
        cls,
        job: JobDefinition,
        fired_at: datetime,
        outcome: ExecutionOutcome,
        client_order_id: str,
        attempts: int,
        reason: Optional[str] = None,
        order_id: Optional[str] = None,
    ) -> ExecutionRecord:
        """Create a record carrying the job's order parameters."""
        return cls(
            job_name=job.name,
            fired_at=fired_at,
            outcome=outcome,
            reason=reason,
            action=job.action.value,
            ticker=job.ticker,
            quantity=job.quantity,
            order_id=order_id,
            client_order_id=client_order_id,
            attempts=attempts,
        )

    @property
    def summary(self) -> str:
        """Human readable outcome, e.g. "failed: timeout"."""
        if self.reason:
            return f"{self.outcome.value}: {self.reason}"
        return self.outcome.value
