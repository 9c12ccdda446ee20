"""
Background Task Runner

Fire-and-forget task spawning for best-effort cache writes and warmup items.

Each spawned coroutine runs in its own asyncio task:
- it is not cancelled when the request that spawned it is cancelled
- its failure is logged with the context it was spawned with and goes
  nowhere else
- a strong reference is held until it finishes, so the event loop cannot
  garbage-collect it mid-flight

Callers get nothing back to wait on. ``drain`` exists for application
shutdown and for tests.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

from watermark_service.config.constants import Stage
from watermark_service.core.logging.logger import get_logger

logger = get_logger(__name__)


class BackgroundTaskRunner:
    """
    Spawns and tracks fire-and-forget tasks.

    Usage:
        runner = BackgroundTaskRunner()
        runner.spawn(cache.set(key, data), name="cache-set", cache_key=key)
        ...
        await runner.drain(timeout=5.0)  # on shutdown
    """

    def __init__(self):
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of tasks not finished yet."""
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str, **log_context: Any) -> None:
        """
        Schedule ``coro`` as an independent task.

        Args:
            coro: Coroutine to run
            name: Short task name used in logs
            **log_context: Fields attached to the failure log entry
        """
        task = asyncio.create_task(self._run(coro, name, log_context), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, coro: Coroutine[Any, Any, Any], name: str, log_context: dict[str, Any]) -> None:
        try:
            await coro
        except asyncio.CancelledError:
            logger.warning(
                "Background task cancelled",
                stage=Stage.BACKGROUND,
                task=name,
                **log_context,
            )
            raise
        except Exception as e:
            logger.error(
                "Background task failed",
                stage=Stage.BACKGROUND,
                task=name,
                error=str(e),
                error_type=type(e).__name__,
                **log_context,
            )

    async def drain(self, timeout: float | None = None) -> None:
        """
        Wait until no tasks are left, including tasks spawned while draining.

        Tasks still running after ``timeout`` seconds are cancelled.
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout

        while self._tasks:
            remaining = None if deadline is None else max(0.0, deadline - loop.time())
            _, pending = await asyncio.wait(list(self._tasks), timeout=remaining)

            if pending and deadline is not None and loop.time() >= deadline:
                logger.warning(
                    "Cancelling background tasks still running after drain timeout",
                    stage=Stage.BACKGROUND,
                    pending=len(pending),
                    timeout=timeout,
                )
                for task in pending:
                    task.cancel()
                await asyncio.gather(*pending, return_exceptions=True)
                return
