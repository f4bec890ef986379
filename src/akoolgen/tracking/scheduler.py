"""Per-job polling cycles.

A polling cycle repeatedly awaits a callback for one job id until it is
cancelled.  The tracker only talks to the :class:`PollScheduler` protocol,
so tests can drive cycles by hand instead of waiting on real timers.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

logger = logging.getLogger(__name__)

PollCallback = Callable[[], Awaitable[object]]


class PollScheduler(Protocol):
    """Start/cancel interface for keyed polling cycles.

    Every cancel operation must be idempotent: cancelling an unknown,
    finished or already-cancelled cycle does nothing.
    """

    def start(self, job_id: str, callback: PollCallback) -> None: ...

    def cancel(self, job_id: str) -> None: ...

    def cancel_all(self) -> None: ...

    def is_active(self, job_id: str) -> bool: ...

    def active_ids(self) -> list[str]: ...


class AsyncioPollScheduler:
    """Runs each polling cycle as an asyncio task on the running loop.

    A cycle polls immediately, then once every *interval* seconds.  The next
    poll is only scheduled after the previous one has been applied, so a
    job never has two polls in flight.

    Args:
        interval: Seconds between the end of one poll and the start of the next.
    """

    def __init__(self, interval: float = 3.0):
        self.interval = interval
        self._tasks: dict[str, asyncio.Task] = {}

    def start(self, job_id: str, callback: PollCallback) -> None:
        """Start a cycle for *job_id*, replacing any cycle already running for it.

        Must be called from within a running event loop.
        """
        self.cancel(job_id)
        task = asyncio.get_running_loop().create_task(
            self._run(job_id, callback), name=f"poll-{job_id}"
        )
        self._tasks[job_id] = task
        logger.debug(f"Started polling {job_id} every {self.interval}s")

    async def _run(self, job_id: str, callback: PollCallback) -> None:
        try:
            while True:
                try:
                    await callback()
                except Exception as e:
                    # The cycle outlives a failed tick; the next tick retries.
                    logger.error(f"Poll of {job_id} raised: {e}", exc_info=True)
                await asyncio.sleep(self.interval)
        finally:
            if self._tasks.get(job_id) is asyncio.current_task():
                del self._tasks[job_id]

    def cancel(self, job_id: str) -> None:
        task = self._tasks.pop(job_id, None)
        if task is not None and not task.done():
            task.cancel()
            logger.debug(f"Cancelled polling {job_id}")

    def cancel_all(self) -> None:
        for job_id in list(self._tasks):
            self.cancel(job_id)

    def is_active(self, job_id: str) -> bool:
        task = self._tasks.get(job_id)
        return task is not None and not task.done()

    def active_ids(self) -> list[str]:
        return [job_id for job_id in self._tasks if self.is_active(job_id)]
