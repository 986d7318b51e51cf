"""
InMemoryLockAdapter - In-memory implementation of LockPort.

One asyncio.Lock per lock name. Only works within a single process and a
single event loop, which is how the API and the scheduler run together.
"""
import asyncio
from typing import Dict, Set

from src.application.ports.outbound.lock_port import LockPort


class InMemoryLockAdapter(LockPort):
    """
    In-memory named lock adapter.

    Locks are created lazily per name, so writers to different names never
    contend with each other. An entry is dropped once it is released with
    nobody waiting, so deleted jobs leave nothing behind.
    """

    def __init__(self):
        """Initialize empty lock registry."""
        self._locks: Dict[str, asyncio.Lock] = {}
        self._waiters: Dict[str, int] = {}

    def clear(self):
        """Forget all locks. Useful for test cleanup."""
        self._locks.clear()
        self._waiters.clear()

    def _get_lock(self, lock_name: str) -> asyncio.Lock:
        lock = self._locks.get(lock_name)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[lock_name] = lock
        return lock

    def _prune(self, lock_name: str) -> None:
        lock = self._locks.get(lock_name)
        if lock is not None and not lock.locked() and not self._waiters.get(lock_name):
            del self._locks[lock_name]
            self._waiters.pop(lock_name, None)

    async def acquire(
        self,
        lock_name: str,
        timeout_seconds: float = 30,
        blocking: bool = False
    ) -> bool:
        """
        Attempt to acquire a lock.

        Args:
            lock_name: Name of the lock
            timeout_seconds: Maximum wait when blocking
            blocking: If True, wait until lock is available or timeout

        Returns:
            True if lock was acquired
            False if lock is held
        """
        lock = self._get_lock(lock_name)
        if not blocking:
            if lock.locked():
                return False
            await lock.acquire()
            return True

        self._waiters[lock_name] = self._waiters.get(lock_name, 0) + 1
        try:
            await asyncio.wait_for(lock.acquire(), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            return False
        finally:
            self._waiters[lock_name] = self._waiters.get(lock_name, 1) - 1
        return True

    async def release(self, lock_name: str) -> None:
        """
        Release a held lock.

        Args:
            lock_name: Name of the lock to release
        """
        lock = self._locks.get(lock_name)
        if lock is not None and lock.locked():
            lock.release()
        self._prune(lock_name)

    async def is_locked(self, lock_name: str) -> bool:
        """
        Check if a lock is currently held.

        Args:
            lock_name: Name of the lock to check

        Returns:
            True if lock is held
            False if lock is available
        """
        lock = self._locks.get(lock_name)
        return lock is not None and lock.locked()

    @property
    def known_locks(self) -> Set[str]:
        """Get set of lock names currently tracked (for testing)."""
        return set(self._locks)

    @property
    def held_locks(self) -> Set[str]:
        """Get set of currently held locks (for testing)."""
        return {name for name, lock in self._locks.items() if lock.locked()}
