"""
Keyed mutual exclusion for backend provisioning.

Provisioning for one storage account must never run twice at the same time
inside a process, otherwise two tasks could both see the account name as
available and race to create it. Locks are keyed by account name and created
on first use in the running event loop.
"""

import asyncio
import logging
import threading
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Dict, Optional, Set, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AccountLockRegistry:
    """
    Table of per-account asyncio locks.

    An asyncio.Lock belongs to the event loop that first waits on it, so the
    table is kept per running loop; each ``asyncio.run`` gets its own locks
    and they are dropped with the loop.
    """

    def __init__(self):
        self._locks: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()
        self._guard = threading.Lock()

    def get(self, key: str) -> asyncio.Lock:
        """
        Return the running loop's lock for ``key``, creating it on first use.

        Raises:
            RuntimeError: If called outside a running event loop
        """
        loop = asyncio.get_running_loop()
        with self._guard:
            locks = self._locks.setdefault(loop, {})
            lock = locks.get(key)
            if lock is None:
                lock = asyncio.Lock()
                locks[key] = lock
            return lock

    def keys(self) -> Set[str]:
        """Account keys with a lock in the running loop."""
        loop = asyncio.get_running_loop()
        with self._guard:
            return set(self._locks.get(loop, {}))

    def __contains__(self, key: str) -> bool:
        return key in self.keys()

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        lock = self.get(key)
        if lock.locked():
            logger.debug(f"Waiting for provisioning lock on '{key}'")
        async with lock:
            logger.debug(f"Acquired provisioning lock on '{key}'")
            try:
                yield
            finally:
                logger.debug(f"Released provisioning lock on '{key}'")


# Process-wide registry
_registry: Optional[AccountLockRegistry] = None
_registry_guard = threading.Lock()


def get_lock_registry() -> AccountLockRegistry:
    """Get the process-wide registry, creating it on first call."""
    global _registry
    with _registry_guard:
        if _registry is None:
            _registry = AccountLockRegistry()
        return _registry


def reset_lock_registry() -> AccountLockRegistry:
    """
    Replace the process-wide registry with an empty one.

    Only safe when no provisioning is in flight; meant for tests.
    """
    global _registry
    with _registry_guard:
        _registry = AccountLockRegistry()
        return _registry


def account_lock(key: str):
    """Async context manager holding the process-wide lock for ``key``."""
    return get_lock_registry().hold(key)


async def with_account_lock(key: str, fn: Callable[[], Awaitable[T]]) -> T:
    """
    Run ``fn`` while holding the provisioning lock for ``key``.

    Args:
        key: Storage account name
        fn: Coroutine function to run inside the critical section

    Returns:
        Whatever ``fn`` returns
    """
    async with account_lock(key):
        return await fn()
