"""Detached background work."""

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class BackgroundDispatcher:
    """Run coroutines as detached tasks that never affect their caller.

    Tasks are held until they finish so the event loop cannot garbage collect
    them mid-flight. Failures are logged and dropped.
    """

    _tasks: set[asyncio.Task[None]] = field(default_factory=set)

    def spawn(self, work: Coroutine[object, object, None], name: str) -> None:
        """Schedule ``work`` on the running loop without awaiting it."""
        task = asyncio.get_running_loop().create_task(work, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._finish)

    @property
    def pending(self) -> int:
        """Number of tasks that have not finished yet."""
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every outstanding task to finish."""
        while self._tasks:
            await asyncio.gather(*tuple(self._tasks), return_exceptions=True)

    def _finish(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Background task cancelled", extra={"task": task.get_name()})
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Background task failed",
                exc_info=exc,
                extra={"task": task.get_name()},
            )
