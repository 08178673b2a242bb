"""
Auth Service — Best-effort background writes

Audit rows and refresh-token records are written off the response path.
Each write runs as its own task, bounded by SIDE_WRITE_TIMEOUT_SECONDS;
a failure or timeout is logged at WARNING and never reaches the caller.
"""
import asyncio
import logging
from typing import Any, Coroutine

logger = logging.getLogger(__name__)


class SideWriter:
    def __init__(self, timeout: float):
        self._timeout = timeout
        # Strong references: the event loop only keeps weak ones to tasks.
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, description: str, write: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Schedule `write` and return immediately."""
        task = asyncio.create_task(self._run(description, write))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, description: str, write: Coroutine[Any, Any, Any]) -> bool:
        try:
            await asyncio.wait_for(write, timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Best-effort write timed out after %.2fs: %s", self._timeout, description)
            return False
        except Exception:
            logger.warning("Best-effort write failed: %s", description, exc_info=True)
            return False
        return True

    async def drain(self) -> None:
        """Wait until every submitted write has finished."""
        while self._tasks:
            await asyncio.gather(*self._tasks)
