"""FIFO admission queue limiting how many pipelines run at once."""

import asyncio
import contextlib
from collections import deque
from collections.abc import Awaitable, Callable
from datetime import datetime

import structlog

from src.speech_translator.errors import QueueFull
from src.speech_translator.models.pipeline import PipelineResult, TranslationJob

logger = structlog.get_logger()


class AdmissionQueue:
    """Admits at most ``concurrency`` jobs at a time, the rest wait in FIFO order.

    A finishing job hands its slot straight to the oldest waiter, so a newly
    submitted job can never overtake one that is already waiting. With
    ``max_waiting=0`` the backlog is unbounded.
    """

    def __init__(
        self,
        runner: Callable[[TranslationJob], Awaitable[PipelineResult]],
        concurrency: int,
        max_waiting: int = 0,
    ) -> None:
        if concurrency <= 0:
            raise ValueError(f"Concurrency must be positive, got {concurrency}")
        if max_waiting < 0:
            raise ValueError(f"max_waiting must not be negative, got {max_waiting}")

        self._runner = runner
        self.concurrency = concurrency
        self.max_waiting = max_waiting
        self._running = 0
        self._waiters: deque[asyncio.Future[None]] = deque()

    @property
    def running(self) -> int:
        return self._running

    @property
    def waiting(self) -> int:
        return sum(1 for w in self._waiters if not w.done())

    async def submit(self, job: TranslationJob) -> PipelineResult:
        """Wait for a slot, run the job, free the slot. Raises QueueFull when the backlog is full."""
        await self._admit(job)
        wait = (datetime.now() - job.submitted_at).total_seconds()
        logger.info("Job admitted", job_id=job.job_id, queue_wait=round(wait, 3))
        try:
            return await self._runner(job)
        finally:
            self._release()

    async def _admit(self, job: TranslationJob) -> None:
        if self._running < self.concurrency and not self._waiters:
            self._running += 1
            return

        if self.max_waiting and self.waiting >= self.max_waiting:
            logger.warning("Admission rejected, queue full", job_id=job.job_id, waiting=self.waiting)
            raise QueueFull(f"too many requests waiting ({self.max_waiting}), try again later")

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        logger.info("Job queued", job_id=job.job_id, running=self._running, waiting=self.waiting)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                # slot was handed over just as we got cancelled
                self._release()
            else:
                self._discard(waiter)
            raise

    def _release(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                # slot passes to the waiter, running count unchanged
                waiter.set_result(None)
                return
        self._running -= 1

    def _discard(self, waiter: asyncio.Future[None]) -> None:
        with contextlib.suppress(ValueError):
            self._waiters.remove(waiter)
