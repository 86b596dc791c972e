from datetime import datetime, timedelta
from typing import Any

import pytest
from pytest_mock import MockerFixture

from conftest import at, reload
from wizard.jobs import lifecycle
from wizard.jobs.lifecycle import evaluate, sweep
from wizard.models import Webinar, WebinarStatus
from wizard.services.notifications import NotificationKind


START = at(1, 6, 2025, 10)
SCHEDULED = WebinarStatus.SCHEDULED
IN_PROGRESS = WebinarStatus.IN_PROGRESS
COMPLETED = WebinarStatus.COMPLETED


@pytest.mark.parametrize(
    "now,status,remind,expected",
    [
        (at(1, 6, 2025, 9, 0), SCHEDULED, False, SCHEDULED),
        (at(1, 6, 2025, 9, 29), SCHEDULED, False, SCHEDULED),
        (at(1, 6, 2025, 9, 30), SCHEDULED, True, SCHEDULED),
        (at(1, 6, 2025, 9, 31), SCHEDULED, True, SCHEDULED),
        (at(1, 6, 2025, 9, 34), SCHEDULED, True, SCHEDULED),
        (at(1, 6, 2025, 9, 35), SCHEDULED, False, SCHEDULED),
        (at(1, 6, 2025, 9, 36), SCHEDULED, False, SCHEDULED),
        (at(1, 6, 2025, 9, 40), SCHEDULED, False, SCHEDULED),
        (at(1, 6, 2025, 10, 0), SCHEDULED, False, IN_PROGRESS),
        (at(1, 6, 2025, 10, 4), SCHEDULED, False, IN_PROGRESS),
        (at(1, 6, 2025, 10, 59), IN_PROGRESS, False, IN_PROGRESS),
        (at(1, 6, 2025, 11, 0), IN_PROGRESS, False, COMPLETED),
        (at(1, 6, 2025, 12, 4), SCHEDULED, False, COMPLETED),
        (at(1, 6, 2025, 9, 31), IN_PROGRESS, False, IN_PROGRESS),
    ],
)
def test__evaluate(now: datetime, status: WebinarStatus, remind: bool, expected: WebinarStatus) -> None:
    evaluation = evaluate(START, 60, status, now)

    assert evaluation.remind is remind
    assert evaluation.status == expected


@pytest.mark.parametrize("minutes", range(0, 24 * 60, 7))
def test__evaluate__never_moves_backwards(minutes: int) -> None:
    now = at(1, 6, 2025, 0) + timedelta(minutes=minutes)

    for status in WebinarStatus:
        assert evaluate(START, 60, status, now).status.rank >= status.rank


async def test__sweep__lifecycle_of_a_webinar(mocker: MockerFixture, make_user: Any, make_webinar: Any) -> None:
    notify = mocker.patch("wizard.jobs.lifecycle.notify")
    user = await make_user("Ana")
    webinar = await make_webinar(date="01/06/2025 10:00:00", duration=60, attendees=[user.id])

    report = await sweep(at(1, 6, 2025, 9, 31))
    assert report.reminded == [webinar.id]
    assert report.started == report.completed == report.failed == []
    notify.assert_awaited_once()
    kind, recipients, data = notify.await_args.args
    assert kind == NotificationKind.REMINDER
    assert recipients == [user.email]
    assert data["id"] == webinar.id
    assert (await reload(Webinar, webinar.id)).status == SCHEDULED

    notify.reset_mock()
    report = await sweep(at(1, 6, 2025, 9, 50))
    assert report.reminded == report.started == []
    notify.assert_not_awaited()

    report = await sweep(at(1, 6, 2025, 10, 4))
    assert report.started == [webinar.id]
    stored = await reload(Webinar, webinar.id)
    assert stored.status == IN_PROGRESS
    assert stored.updated_at == "01/06/2025 10:04:00"

    report = await sweep(at(1, 6, 2025, 11, 4))
    assert report.completed == [webinar.id]
    assert (await reload(Webinar, webinar.id)).status == COMPLETED

    report = await sweep(at(1, 6, 2025, 12, 4))
    assert report.completed == report.started == report.reminded == []
    notify.assert_not_awaited()


async def test__sweep__scheduled_webinar_past_its_end_completes(mocker: MockerFixture, make_webinar: Any) -> None:
    mocker.patch("wizard.jobs.lifecycle.notify")
    webinar = await make_webinar(date="01/06/2025 10:00:00", duration=60)

    report = await sweep(at(1, 6, 2025, 13, 4))

    assert report.started == report.completed == [webinar.id]
    assert (await reload(Webinar, webinar.id)).status == COMPLETED


async def test__sweep__is_idempotent(mocker: MockerFixture, make_webinar: Any) -> None:
    mocker.patch("wizard.jobs.lifecycle.notify")
    webinar = await make_webinar(date="01/06/2025 10:00:00", duration=60)

    first = await sweep(at(1, 6, 2025, 10, 4))
    second = await sweep(at(1, 6, 2025, 10, 4))

    assert first.started == [webinar.id]
    assert second.started == []
    assert (await reload(Webinar, webinar.id)).status == IN_PROGRESS


async def test__sweep__ignores_deleted_and_completed(mocker: MockerFixture, make_webinar: Any) -> None:
    notify = mocker.patch("wizard.jobs.lifecycle.notify")
    deleted = await make_webinar("Deleted", deleted=True)
    completed = await make_webinar("Done", status=COMPLETED)

    report = await sweep(at(1, 6, 2025, 9, 31))

    assert report.reminded == []
    notify.assert_not_awaited()
    assert (await reload(Webinar, deleted.id)).status == SCHEDULED
    assert (await reload(Webinar, completed.id)).status == COMPLETED


async def test__sweep__reminder_skips_missing_attendees(
    mocker: MockerFixture, make_user: Any, make_webinar: Any
) -> None:
    notify = mocker.patch("wizard.jobs.lifecycle.notify")
    user = await make_user("Ana")
    webinar = await make_webinar(attendees=["does-not-exist", user.id])

    report = await sweep(at(1, 6, 2025, 9, 31))

    assert report.reminded == [webinar.id]
    assert notify.await_args.args[1] == [user.email]


async def test__sweep__failure_is_isolated(mocker: MockerFixture, make_user: Any, make_webinar: Any) -> None:
    notify = mocker.patch("wizard.jobs.lifecycle.notify")
    user = await make_user("Ana")
    broken = await make_webinar("Broken", attendees=[user.id])
    healthy = await make_webinar("Healthy", attendees=[user.id])

    original = lifecycle._attendee_emails

    async def attendee_emails(webinar: Webinar) -> list[str]:
        if webinar.id == broken.id:
            raise RuntimeError("store unavailable")
        return await original(webinar)

    mocker.patch("wizard.jobs.lifecycle._attendee_emails", attendee_emails)

    report = await sweep(at(1, 6, 2025, 9, 31))

    assert report.failed == [broken.id]
    assert report.reminded == [healthy.id]
    notify.assert_awaited_once()

