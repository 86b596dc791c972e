"""Cron style scheduling of background jobs on the running event loop."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Awaitable, Callable

from croniter import croniter

from ..logger import get_logger
from .clock import now as clock_now


logger = get_logger(__name__)

JobFunc = Callable[[], Awaitable[object]]


class Job:
    def __init__(self, name: str, expression: str, func: JobFunc, timeout: float | None = None):
        if not croniter.is_valid(expression):
            raise ValueError(f"Invalid cron expression for job {name}: {expression!r}")

        self.name = name
        self.expression = expression
        self.func = func
        self.timeout = timeout
        self.due: datetime | None = None
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    def next_run(self, after: datetime) -> datetime:
        return croniter(self.expression, after).get_next(datetime)

    async def fire(self) -> bool:
        """
        Run the job once.

        Returns False if the previous run of this job is still in progress, in which case this firing is skipped.
        Failures and timeouts are logged and end the run, they are never raised.
        """

        if self.running:
            logger.warning("job %s is still running, skipping this firing", self.name)
            return False

        async with self._lock:
            logger.info("running job %s", self.name)
            try:
                await asyncio.wait_for(self.func(), self.timeout)
            except asyncio.TimeoutError:
                logger.error("job %s timed out after %s seconds", self.name, self.timeout)
            except Exception:
                logger.exception("job %s failed", self.name)
            else:
                logger.info("job %s finished", self.name)
        return True


class Scheduler:
    def __init__(self, clock: Callable[[], datetime] = clock_now):
        self.clock = clock
        self.jobs: list[Job] = []
        self._loop_task: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[bool]] = set()

    def add(self, job: Job) -> Job:
        job.due = job.next_run(self.clock())
        self.jobs.append(job)
        logger.debug("registered job %s (%s), next run at %s", job.name, job.expression, job.due)
        return job

    def cron(
        self, expression: str, *, name: str | None = None, timeout: float | None = None
    ) -> Callable[[JobFunc], JobFunc]:
        """Decorator registering a coroutine function as a job."""

        def deco(func: JobFunc) -> JobFunc:
            self.add(Job(name or func.__name__, expression, func, timeout))
            return func

        return deco

    def get(self, name: str) -> Job | None:
        return next((job for job in self.jobs if job.name == name), None)

    async def run_pending(self, now: datetime | None = None, *, wait: bool = True) -> list[str]:
        """
        Fire every job that is due at `now` and compute its next run.

        Missed firings are not caught up. With `wait` the call returns after the fired jobs have finished.
        """

        now = now or self.clock()
        fired: list[Job] = []
        for job in self.jobs:
            if job.due is not None and job.due <= now:
                job.due = job.next_run(now)
                fired.append(job)

        tasks = [self._spawn(job) for job in fired]
        if wait and tasks:
            await asyncio.gather(*tasks)
        return [job.name for job in fired]

    def _spawn(self, job: Job) -> asyncio.Task[bool]:
        task = asyncio.create_task(job.fire(), name=f"job:{job.name}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self) -> None:
        while True:
            await self.run_pending(wait=False)
            if not self.jobs:
                return
            next_due = min(job.due for job in self.jobs if job.due is not None)
            delay = (next_due - self.clock()).total_seconds()
            await asyncio.sleep(min(max(delay, 0), 60))

    def start(self) -> None:
        if self._loop_task is None:
            logger.info("starting scheduler with %d job(s)", len(self.jobs))
            self._loop_task = asyncio.create_task(self._run(), name="scheduler")

    async def stop(self) -> None:
        tasks = [*self._tasks, *([self._loop_task] if self._loop_task else [])]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._loop_task = None
        logger.info("scheduler stopped")
