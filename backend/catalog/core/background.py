"""Fire-and-forget tasks that must not fail the request that spawned them."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class BackgroundRunner:
    """Tracks spawned tasks so shutdown can wait for them.

    Exceptions raised by a task are logged here and never reach the caller.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[None]] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(
        self,
        fn: Callable[..., Awaitable[Any]],
        *args: Any,
        name: str | None = None,
    ) -> asyncio.Task[None]:
        task = asyncio.create_task(self._guard(fn, *args), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guard(self, fn: Callable[..., Awaitable[Any]], *args: Any) -> None:
        try:
            await fn(*args)
        except Exception:
            logger.exception("Background task %s failed", getattr(fn, "__qualname__", fn))

    async def wait(self, timeout: float | None = None) -> None:
        """Wait for every in-flight task, cancelling what is left after ``timeout``."""
        if not self._tasks:
            return
        pending = set(self._tasks)
        logger.info("Waiting for %d background task(s)", len(pending))
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning("Cancelled %d background task(s) at shutdown", len(still_running))
            await asyncio.gather(*still_running, return_exceptions=True)
