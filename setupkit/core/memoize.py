"""
Idempotency cache for expensive asynchronous side effects.

Installing a tool, bootstrapping Homebrew or probing the pipx home are
expensive and must not be repeated when several call sites ask for the same
thing. IdempotencyCache keeps an explicit map from key to the asyncio task
running the producer:

- the producer for a key is started at most once per process
- callers arriving while it runs await the same task
- callers arriving afterwards get the stored result (or the stored error)

Cancelling one waiter never cancels the shared task; there is no
cancellation of in-flight installation work.

Usage:
    cache = IdempotencyCache("installations")
    bin_dir = await cache.memoize(("gcc", "11", "x64"), lambda: install_gcc("11"))
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Generic, Hashable, List, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class IdempotencyCache(Generic[T]):
    """
    Map of cache key to the single shared task producing its value.

    Attributes:
        name: Label used in log messages
    """

    def __init__(self, name: str = "cache"):
        self.name = name
        self._tasks: Dict[Hashable, "asyncio.Future[T]"] = {}

    async def memoize(self, key: Hashable, producer: Callable[[], Awaitable[T]]) -> T:
        """
        Return the value for key, running producer only if no task exists yet.

        Args:
            key: Hashable cache key
            producer: Zero-argument callable returning an awaitable

        Returns:
            The producer's result

        Raises:
            Exception: Whatever the producer raised, re-raised to every caller
        """
        task = self._tasks.get(key)
        if task is None:
            logger.debug(f"[{self.name}] starting producer for {key!r}")
            task = asyncio.ensure_future(producer())
            task.add_done_callback(_mark_retrieved)
            self._tasks[key] = task
        else:
            logger.debug(f"[{self.name}] reusing result for {key!r}")

        return await asyncio.shield(task)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def completed(self) -> List[Tuple[Hashable, T]]:
        """Keys and values of producers that finished successfully."""
        return [
            (key, task.result())
            for key, task in self._tasks.items()
            if task.done() and not task.cancelled() and task.exception() is None
        ]

    def clear(self) -> None:
        """Forget every entry. Tasks still running are left to finish."""
        self._tasks.clear()


def _mark_retrieved(task: "asyncio.Future") -> None:
    # every waiter re-raises the error itself; mark it read for when none remain
    if not task.cancelled():
        task.exception()
