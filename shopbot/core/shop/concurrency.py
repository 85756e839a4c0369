"""
Per-user serialization and deferred tasks.
"""

import asyncio
import logging
import weakref
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class KeyedLocks:
    """
    One asyncio.Lock per key.

    Locks are held weakly, so entries for idle users disappear once nobody
    is waiting on them.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def get(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)


class DeferredTasks:
    """Delayed callbacks keyed by user id; scheduling again replaces the old one."""

    def __init__(self):
        self._tasks: dict[str, asyncio.Task] = {}

    def schedule(
        self,
        key: str,
        delay: float,
        callback: Callable[[], Awaitable[None]],
    ) -> asyncio.Task:
        self.cancel(key)
        task = asyncio.create_task(self._run(key, delay, callback))
        self._tasks[key] = task
        return task

    async def _run(self, key: str, delay: float, callback: Callable[[], Awaitable[None]]) -> None:
        try:
            await asyncio.sleep(delay)
            await callback()
        except asyncio.CancelledError:
            logger.debug(f"Deferred task for {key} cancelled")
            raise
        except Exception as e:
            logger.error(f"Deferred task for {key} failed: {e}", exc_info=True)
        finally:
            if self._tasks.get(key) is asyncio.current_task():
                del self._tasks[key]

    def cancel(self, key: str) -> bool:
        task = self._tasks.pop(key, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def pending(self, key: str) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    async def cancel_all(self) -> None:
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
