"""
ExecuteScheduledTradeUseCase - Handler invoked on every trigger fire.

The handler re-reads the job from the store (never a snapshot captured at
scheduling time), submits one market order and records the outcome once.
It does not retry: transient failures are raised as RetryableExecutionError
while attempts remain, and the engine decides whether to call again.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from src.application.dto.trading import OrderRequest
from src.application.ports.outbound.broker_port import BrokerError, BrokerPort
from src.application.ports.outbound.execution_record_port import ExecutionRecordPort
from src.application.ports.outbound.job_repository_port import JobRepositoryPort
from src.application.ports.outbound.time_provider_port import TimeProviderPort
from src.domain.entities.execution import (
    ExecutionOutcome,
    ExecutionRecord,
    REASON_DISABLED,
    REASON_DUPLICATE,
    REASON_NOT_FOUND,
    REASON_TIMEOUT,
)
from src.domain.exceptions import JobNotFoundError, RetryableExecutionError

logger = logging.getLogger(__name__)


def make_client_order_id(job_name: str, fired_at: datetime, manual: bool = False) -> str:
    """
    Generate the client order ID for one fire of a job.

    All attempts of the same fire share it, so the broker rejects a
    duplicate submission instead of placing a second order. Manual runs
    carry seconds and a suffix so they never collide with a scheduled fire.

    Example:
        >>> make_client_order_id("buy-tsla", datetime(2024, 1, 8, 14, 35, tzinfo=timezone.utc))
        'buy-tsla-20240108T1435Z'
        >>> make_client_order_id("buy-tsla", datetime(2024, 1, 8, 14, 35, 12, tzinfo=timezone.utc), manual=True)
        'buy-tsla-20240108T143512Z-manual'
    """
    if fired_at.tzinfo is not None:
        fired_at = fired_at.astimezone(timezone.utc)
    if manual:
        return f"{job_name}-{fired_at.strftime('%Y%m%dT%H%M%S')}Z-manual"
    return f"{job_name}-{fired_at.strftime('%Y%m%dT%H%M')}Z"


class ExecuteScheduledTradeUseCase:
    """
    Use case executing the trade of one scheduled job.
    """

    def __init__(
        self,
        job_repository: JobRepositoryPort,
        broker: BrokerPort,
        execution_records: ExecutionRecordPort,
        time_provider: TimeProviderPort,
        broker_timeout_seconds: float = 10.0,
    ):
        """
        Initialize with required ports.

        Args:
            job_repository: Job store, read on every fire
            broker: Trading API
            execution_records: Audit log of outcomes
            time_provider: Source of fire timestamps
            broker_timeout_seconds: Timeout applied to the order submission
        """
        self.job_repository = job_repository
        self.broker = broker
        self.execution_records = execution_records
        self.time_provider = time_provider
        self.broker_timeout_seconds = broker_timeout_seconds

    async def execute(
        self,
        job_name: str,
        fired_at: Optional[datetime] = None,
        attempt: int = 1,
        max_attempts: int = 1,
        manual: bool = False,
    ) -> ExecutionRecord:
        """
        Execute the trade for a job.

        Args:
            job_name: Job whose trigger fired
            fired_at: Fire time shared by all attempts (now when None)
            attempt: 1-based attempt number
            max_attempts: Attempts the engine is willing to make
            manual: Run requested outside the schedule (fired_at defaults to
                the current second instead of the fire minute)

        Returns:
            The recorded ExecutionRecord

        Raises:
            RetryableExecutionError: Transient failure with attempts remaining;
                nothing was recorded
        """
        if fired_at is None:
            fired_at = self.time_provider.now() if manual else self.time_provider.fire_time()

        try:
            job = await self.job_repository.get(job_name)
        except JobNotFoundError:
            logger.info(f"Job {job_name} no longer exists, skipping fire")
            return await self._record(ExecutionRecord.skipped(job_name, fired_at, REASON_NOT_FOUND, attempt))

        if not job.enabled:
            logger.info(f"Job {job_name} is disabled, skipping fire")
            return await self._record(ExecutionRecord.skipped(job_name, fired_at, REASON_DISABLED, attempt))

        client_order_id = make_client_order_id(job.name, fired_at, manual=manual)
        request = OrderRequest(
            ticker=job.ticker,
            side=job.action,
            quantity=job.quantity,
            client_order_id=client_order_id,
        )

        logger.info(
            f"Submitting {job.action.value} {job.quantity} {job.ticker} for {job.name} "
            f"(attempt {attempt}/{max_attempts}, client_order_id={client_order_id})"
        )

        retryable = False
        try:
            response = await asyncio.wait_for(
                self.broker.submit_order(request),
                timeout=self.broker_timeout_seconds,
            )
        except asyncio.TimeoutError:
            reason, retryable = REASON_TIMEOUT, True
            logger.warning(f"Order submission timed out after {self.broker_timeout_seconds}s for {job.name}")
        except BrokerError as e:
            reason, retryable = e.message, e.retryable
            logger.warning(f"Broker error for {job.name}: {e.message} (retryable={e.retryable})")
        except Exception as e:
            reason = f"{type(e).__name__}: {e}"
            logger.error(f"Unexpected error submitting order for {job.name}: {e}", exc_info=True)
        else:
            if response.success and response.duplicate and attempt == 1:
                # Placed by another fire with the same id, not by this one
                logger.warning(
                    f"Order for {job.name} already exists (client_order_id={client_order_id}, "
                    f"order_id={response.order_id}), recording duplicate"
                )
                return await self._record(
                    ExecutionRecord.for_job(
                        job,
                        fired_at,
                        ExecutionOutcome.SKIPPED,
                        client_order_id=client_order_id,
                        attempts=attempt,
                        reason=REASON_DUPLICATE,
                        order_id=response.order_id,
                    )
                )
            if response.success:
                logger.info(f"Order accepted for {job.name}: order_id={response.order_id}")
                return await self._record(
                    ExecutionRecord.for_job(
                        job,
                        fired_at,
                        ExecutionOutcome.SUCCESS,
                        client_order_id=client_order_id,
                        attempts=attempt,
                        order_id=response.order_id,
                    )
                )
            reason = response.error_message or "rejected"
            logger.warning(f"Order rejected for {job.name}: {reason}")

        if retryable and attempt < max_attempts:
            raise RetryableExecutionError(job.name, reason)

        return await self._record(
            ExecutionRecord.for_job(
                job,
                fired_at,
                ExecutionOutcome.FAILED,
                client_order_id=client_order_id,
                attempts=attempt,
                reason=reason,
            )
        )

    async def _record(self, record: ExecutionRecord) -> ExecutionRecord:
        """Append a record; a failing audit log never breaks the fire."""
        try:
            return await self.execution_records.append(record)
        except Exception as e:
            logger.error(f"Failed to store execution record for {record.job_name}: {e}", exc_info=True)
            return record
