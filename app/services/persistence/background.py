"""Fire-and-forget remote writes."""
import asyncio
import logging
from typing import Awaitable, Set, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BackgroundWriter:
    """
    Spawns remote writes as asyncio tasks and keeps them referenced.

    Callers never await the tasks they spawn; ``drain`` exists for shutdown
    and for tests that need to observe the outcome.
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task] = set()

    def spawn(self, coro: Awaitable[T], name: str) -> "asyncio.Task[T]":
        """Schedule a write on the running loop."""
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._finished)
        return task

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning(f"[BACKGROUND] Task {task.get_name()} was cancelled")
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"[BACKGROUND] Task {task.get_name()} crashed: {type(error).__name__}: {error}",
                exc_info=error,
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every spawned write has finished, including ones spawned meanwhile."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
