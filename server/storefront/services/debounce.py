from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Hashable, TypeVar

logger = logging.getLogger("storefront.debounce")

T = TypeVar("T")


class Debouncer:
    """
    Delays calls per input stream so that only the last one scheduled during
    a quiet period runs.

    Scheduling on a stream cancels that stream's task if it is still waiting
    out its delay. Once a task has started running it is left alone, so an
    in-flight catalog fetch is never aborted halfway.
    """

    def __init__(self, delay_seconds: float) -> None:
        self.delay_seconds = max(0.0, delay_seconds)
        self._tasks: dict[Hashable, asyncio.Task[Any]] = {}
        self._started: set[asyncio.Task[Any]] = set()

    @classmethod
    def from_milliseconds(cls, delay_ms: int) -> "Debouncer":
        return cls(delay_ms / 1000)

    def schedule(self, key: Hashable, factory: Callable[[], Awaitable[T]]) -> asyncio.Task[T]:
        self.cancel(key)
        task: asyncio.Task[T] = asyncio.create_task(self._run(factory))
        self._tasks[key] = task
        task.add_done_callback(lambda done: self._forget(key, done))
        return task

    def pending(self, key: Hashable) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done() and task not in self._started

    def cancel(self, key: Hashable) -> bool:
        task = self._tasks.get(key)
        if task is None or task.done() or task in self._started:
            return False
        del self._tasks[key]
        task.cancel()
        logger.debug("debounce.cancelled", extra={"stream": str(key)})
        return True

    def cancel_all(self) -> int:
        return sum(1 for key in list(self._tasks) if self.cancel(key))

    async def _run(self, factory: Callable[[], Awaitable[T]]) -> T:
        await asyncio.sleep(self.delay_seconds)
        current = asyncio.current_task()
        if current is not None:
            self._started.add(current)
        return await factory()

    def _forget(self, key: Hashable, task: asyncio.Task[Any]) -> None:
        self._started.discard(task)
        if self._tasks.get(key) is task:
            del self._tasks[key]
