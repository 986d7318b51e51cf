"""
LockPort - Interface for named mutual exclusion.

This port defines the contract for acquiring and releasing locks
to serialize critical sections.

Lock names:
- schedule_reconciliation: one reconciliation pass at a time
- job:{name}: writes to a single job definition (see job_lock_name)
"""
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncGenerator

RECONCILIATION_LOCK = "schedule_reconciliation"


def job_lock_name(job_name: str) -> str:
    """
    Lock name guarding writes to one job.

    Example:
        >>> job_lock_name("buy-tsla")
        'job:buy-tsla'
    """
    return f"job:{job_name}"


class LockPort(ABC):
    """
    Port interface for named locking.

    This interface defines operations for acquiring and releasing
    locks to ensure mutual exclusion of critical sections.

    Usage:
        # Using context manager (recommended)
        async with lock_port.lock("schedule_reconciliation", blocking=True):
            # Critical section
            await reconcile()

        # Manual acquire/release
        if await lock_port.acquire("job:buy-tsla"):
            try:
                await update_job()
            finally:
                await lock_port.release("job:buy-tsla")
    """

    @abstractmethod
    async def acquire(
        self,
        lock_name: str,
        timeout_seconds: float = 30,
        blocking: bool = False
    ) -> bool:
        """
        Attempt to acquire a lock.

        Args:
            lock_name: Name of the lock (e.g., "schedule_reconciliation")
            timeout_seconds: Maximum time to wait when blocking
            blocking: If True, wait up to timeout_seconds for the lock

        Returns:
            True if lock was acquired
            False if lock is held elsewhere (or the wait timed out)
        """
        pass

    @abstractmethod
    async def release(self, lock_name: str) -> None:
        """
        Release a held lock.

        Args:
            lock_name: Name of the lock to release

        Note:
            Releasing a lock that is not held is a no-op.
        """
        pass

    @abstractmethod
    async def is_locked(self, lock_name: str) -> bool:
        """
        Check if a lock is currently held.

        Args:
            lock_name: Name of the lock to check

        Returns:
            True if lock is held
            False if lock is available
        """
        pass

    @asynccontextmanager
    async def lock(
        self,
        lock_name: str,
        timeout_seconds: float = 30,
        blocking: bool = True,
        raise_on_failure: bool = True
    ) -> AsyncGenerator[bool, None]:
        """
        Context manager for lock acquisition and release.

        Args:
            lock_name: Name of the lock
            timeout_seconds: Maximum time to wait for the lock
            blocking: Wait for the lock instead of failing fast
            raise_on_failure: If True, raise exception when lock unavailable

        Yields:
            True if lock was acquired, False otherwise

        Raises:
            LockAcquisitionError: If raise_on_failure=True and lock unavailable

        Example:
            async with lock_port.lock("job:buy-tsla") as acquired:
                await repository.put(job)
        """
        acquired = await self.acquire(lock_name, timeout_seconds, blocking=blocking)

        if not acquired and raise_on_failure:
            raise LockAcquisitionError(f"Could not acquire lock: {lock_name}")

        try:
            yield acquired
        finally:
            if acquired:
                await self.release(lock_name)


class LockAcquisitionError(Exception):
    """Raised when lock cannot be acquired."""
    pass
