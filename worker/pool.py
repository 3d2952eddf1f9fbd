"""
Worker pool: runs independent preview jobs concurrently, at most N at a time.

Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    WorkerPool                        │
    │                                                      │
    │  submit(job) → asyncio.Task                          │
    │             │                                        │
    │             ▼                                        │
    │  ┌───────────────────────────────────────────┐       │
    │  │ Semaphore (WORKER_POOL_SIZE = 4)          │       │
    │  │  ┌────────┐ ┌────────┐ ┌────────┐ ┌─────┐ │       │
    │  │  │ job 1  │ │ job 2  │ │ job 3  │ │idle │ │       │
    │  │  │execute │ │execute │ │execute │ │     │ │       │
    │  │  └────────┘ └────────┘ └────────┘ └─────┘ │       │
    │  └───────────────────────────────────────────┘       │
    └──────────────────────────────────────────────────────┘

Every submitted job gets its own task right away; the semaphore decides
when it starts working. Most of a job's time is spent waiting on the
network or on a subprocess, so tasks rather than threads.

shutdown() cancels everything still in flight. Cancellation reaches the
running httpx request or subprocess (which is killed) before the task ends.
"""

import asyncio
import logging
from typing import Iterable, Optional

from config.settings import settings
from models.job import PreviewJob
from worker.executor import PreviewExecutor

logger = logging.getLogger(__name__)


class WorkerPool:

    def __init__(self, executor: Optional[PreviewExecutor] = None, size: Optional[int] = None):
        self._executor = executor or PreviewExecutor()
        self._size = size or settings.WORKER_POOL_SIZE
        self._semaphore = asyncio.Semaphore(self._size)
        self._tasks: set[asyncio.Task] = set()

    @property
    def size(self) -> int:
        return self._size

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def submit(self, job: PreviewJob) -> asyncio.Task:
        """Schedule a job. Must be called from inside the running event loop."""
        task = asyncio.create_task(self._run(job))
        self._tasks.add(task)
        task.add_done_callback(self._on_job_done)
        return task

    async def run_all(self, jobs: Iterable[PreviewJob]) -> list[dict]:
        """Run jobs concurrently and return their outcomes in submission order."""
        tasks = [self.submit(job) for job in jobs]
        return list(await asyncio.gather(*tasks))

    async def shutdown(self) -> None:
        """Cancel every job still pending or running and wait for them to unwind."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info(f"Worker pool stopped, {len(tasks)} job(s) cancelled")

    async def _run(self, job: PreviewJob) -> dict:
        async with self._semaphore:
            logger.debug(f"Starting {job!r}")
            return await self._executor.execute(job)

    def _on_job_done(self, task: asyncio.Task) -> None:
        """
        Done callback. Only used for bookkeeping and for logging exceptions
        that escaped the executor; normal success/failure handling happens
        inside PreviewExecutor.execute().
        """
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc:
            logger.error(f"Unhandled worker exception: {exc}")
