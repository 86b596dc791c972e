import asyncio
from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from wizard.jobs.schedule import create_scheduler
from wizard.utils.clock import localize
from wizard.utils.scheduler import Job, Scheduler


START = localize(datetime(2025, 6, 1, 10, 0))


def test__job__invalid_expression() -> None:
    with pytest.raises(ValueError):
        Job("broken", "every hour", AsyncMock())


def test__job__next_run() -> None:
    job = Job("sweep", "4 * * * *", AsyncMock())

    assert job.next_run(START) == localize(datetime(2025, 6, 1, 10, 4))
    assert job.next_run(localize(datetime(2025, 6, 1, 10, 4))) == localize(datetime(2025, 6, 1, 11, 4))


def test__create_scheduler__default_jobs() -> None:
    scheduler = create_scheduler()

    assert (sweep := scheduler.get("webinar_sweep")) and sweep.expression == "4 * * * *"
    assert (mirror := scheduler.get("mirror")) and mirror.expression == "10 1,13 * * *"
    assert scheduler.get("reconcile")


async def test__run_pending() -> None:
    func = AsyncMock()
    scheduler = Scheduler(clock=lambda: START)
    job = scheduler.add(Job("sweep", "4 * * * *", func))

    assert job.due == localize(datetime(2025, 6, 1, 10, 4))
    assert await scheduler.run_pending(localize(datetime(2025, 6, 1, 10, 3))) == []
    func.assert_not_called()

    assert await scheduler.run_pending(localize(datetime(2025, 6, 1, 10, 4))) == ["sweep"]
    func.assert_awaited_once()
    assert job.due == localize(datetime(2025, 6, 1, 11, 4))


async def test__run_pending__missed_firings_not_caught_up() -> None:
    func = AsyncMock()
    scheduler = Scheduler(clock=lambda: START)
    job = scheduler.add(Job("sweep", "4 * * * *", func))

    assert await scheduler.run_pending(localize(datetime(2025, 6, 1, 15, 30))) == ["sweep"]
    assert func.await_count == 1
    assert job.due == localize(datetime(2025, 6, 1, 16, 4))


async def test__cron_decorator() -> None:
    scheduler = Scheduler(clock=lambda: START)
    calls: list[str] = []

    @scheduler.cron("10 1,13 * * *", name="mirror")
    async def mirror() -> None:
        calls.append("mirror")

    assert await scheduler.run_pending(localize(datetime(2025, 6, 1, 13, 10))) == ["mirror"]
    assert calls == ["mirror"]


async def test__fire__skips_overlapping_run() -> None:
    release = asyncio.Event()
    started = asyncio.Event()

    async def slow() -> None:
        started.set()
        await release.wait()

    job = Job("mirror", "10 1,13 * * *", slow)
    first = asyncio.create_task(job.fire())
    await started.wait()

    assert job.running
    assert await job.fire() is False

    release.set()
    assert await first is True
    assert not job.running


async def test__fire__timeout_is_contained() -> None:
    async def hang() -> None:
        await asyncio.sleep(10)

    job = Job("sweep", "4 * * * *", hang, timeout=0.01)

    assert await job.fire() is True
    assert not job.running


async def test__fire__failure_is_contained() -> None:
    job = Job("sweep", "4 * * * *", AsyncMock(side_effect=RuntimeError("boom")))

    assert await job.fire() is True


async def test__start_stop() -> None:
    func = AsyncMock()
    scheduler = Scheduler(clock=lambda: START)
    scheduler.add(Job("sweep", "4 * * * *", func))

    scheduler.start()
    await asyncio.sleep(0)
    await scheduler.stop()

    func.assert_not_called()
