"""Semaphore-gated launcher for per-transaction units of work."""

import asyncio
from collections.abc import Coroutine
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class BoundedTaskLauncher:
    """Schedules independent coroutines with an optional cap on concurrency.

    ``spawn`` returns as soon as the unit is scheduled. It only waits when
    ``max_in_flight`` units are already running. Unit exceptions are logged
    and never reach the caller.
    """

    def __init__(self, max_in_flight: int | None = None) -> None:
        """Initialize launcher.

        Args:
            max_in_flight: Maximum concurrently running units (None = unbounded)
        """
        if max_in_flight is not None and max_in_flight < 1:
            raise ValueError("max_in_flight must be at least 1")
        self.max_in_flight = max_in_flight
        self._semaphore = asyncio.Semaphore(max_in_flight) if max_in_flight else None
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def in_flight(self) -> int:
        """Number of units scheduled and not yet finished."""
        return len(self._tasks)

    async def spawn(self, coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task[Any]:
        """Schedule a unit of work.

        Args:
            coro: Coroutine to run
            name: Optional task name for debugging

        Returns:
            The created task
        """
        if self._semaphore is not None:
            try:
                await self._semaphore.acquire()
            except asyncio.CancelledError:
                coro.close()
                raise

        task = asyncio.create_task(self._run(coro), name=name)
        # Strong reference until done, otherwise the task may be collected
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if self._semaphore is not None:
            self._semaphore.release()

    async def _run(self, coro: Coroutine[Any, Any, Any]) -> Any:
        try:
            return await coro
        except Exception as e:
            logger.error("unit_of_work_failed", error=str(e), error_type=type(e).__name__)
            return None

    async def drain(self) -> None:
        """Wait until every scheduled unit has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        """Cancel every running unit and wait for them to exit."""
        for task in list(self._tasks):
            task.cancel()
        await self.drain()
