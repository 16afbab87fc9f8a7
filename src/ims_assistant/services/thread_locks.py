"""Per-thread serialization of chat turns."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

logger = logging.getLogger(__name__)


class ThreadLockManager:
    """
    One asyncio.Lock per conversation thread.

    CRITICAL: Turns on the same thread run one at a time, in arrival order
    GOTCHA: Locks are dropped once nobody holds or waits for them
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, thread_id: str) -> AsyncIterator[None]:
        """
        Hold the thread's lock for the duration of the block.

        Args:
            thread_id: Conversation thread
        """
        lock = self._locks.setdefault(thread_id, asyncio.Lock())
        self._users[thread_id] = self._users.get(thread_id, 0) + 1

        if lock.locked():
            logger.debug(f"Waiting for in-flight turn on thread {thread_id}")

        try:
            async with lock:
                yield
        finally:
            self._users[thread_id] -= 1
            if self._users[thread_id] == 0:
                del self._users[thread_id]
                del self._locks[thread_id]

    def active_threads(self) -> int:
        return len(self._locks)
