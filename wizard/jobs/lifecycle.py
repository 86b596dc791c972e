"""Periodic sweep advancing the lifecycle of active webinars."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from ..database import db, db_wrapper
from ..logger import get_logger
from ..models import User, Webinar, WebinarStatus
from ..services.notifications import NotificationKind, notify
from ..settings import settings
from ..utils.clock import format_date, now as clock_now


logger = get_logger(__name__)


@dataclass(frozen=True)
class Evaluation:
    remind: bool
    status: WebinarStatus


@dataclass
class SweepReport:
    reminded: list[str] = field(default_factory=list)
    started: list[str] = field(default_factory=list)
    completed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def reminder_window(start: datetime) -> tuple[datetime, datetime]:
    return (
        start - timedelta(minutes=settings.reminder_window_start),
        start - timedelta(minutes=settings.reminder_window_end),
    )


def evaluate(start: datetime, duration: int, status: WebinarStatus, now: datetime) -> Evaluation:
    """
    Decide what the sweep does with a webinar at `now`.

    The checks are applied in order and are not mutually exclusive: a scheduled webinar whose end has already
    passed goes straight to completed within a single pass.
    """

    window_start, window_end = reminder_window(start)
    is_reminder_window = window_start <= now < window_end
    is_past_start = now >= start
    is_past_end = now >= start + timedelta(minutes=duration)

    remind = status == WebinarStatus.SCHEDULED and is_reminder_window

    if status == WebinarStatus.SCHEDULED and is_past_start:
        status = WebinarStatus.IN_PROGRESS

    if is_past_end:
        status = WebinarStatus.COMPLETED

    return Evaluation(remind=remind, status=status)


async def _attendee_emails(webinar: Webinar) -> list[str]:
    users = {user.id: user for user in await User.get_many(webinar.attendees)}
    for user_id in webinar.attendees:
        if user_id not in users:
            logger.warning("attendee %s of webinar %s does not exist, skipping", user_id, webinar.id)
    return [users[user_id].email for user_id in webinar.attendees if user_id in users]


async def process(webinar: Webinar, now: datetime, report: SweepReport) -> None:
    previous = webinar.status
    evaluation = evaluate(webinar.start, webinar.duration, previous, now)

    if webinar.advance(evaluation.status):
        webinar.updated_at = format_date(now)
        logger.info("webinar %s: %s -> %s", webinar.id, previous.value, webinar.status.value)
        if previous == WebinarStatus.SCHEDULED:
            report.started.append(webinar.id)
        if webinar.status == WebinarStatus.COMPLETED:
            report.completed.append(webinar.id)

    recipients = await _attendee_emails(webinar) if evaluation.remind else []
    await db.commit()

    if evaluation.remind:
        report.reminded.append(webinar.id)
        await notify(NotificationKind.REMINDER, recipients, webinar.serialize)


@db_wrapper
async def sweep(now: datetime | None = None) -> SweepReport:
    """
    Walk all scheduled and in-progress webinars once.

    Each webinar is its own unit of work: a failure is logged, rolled back and the sweep continues with the next one.
    Failing to list the webinars ends the run. Nothing is ever raised to the caller.
    """

    now = now or clock_now()
    report = SweepReport()
    logger.info("starting webinar sweep at %s", format_date(now))

    try:
        webinar_ids = [webinar.id for webinar in await Webinar.list_active()]
    except Exception:
        logger.exception("could not load active webinars, aborting sweep")
        return report

    for webinar_id in webinar_ids:
        try:
            if not (webinar := await db.get(Webinar, id=webinar_id, deleted=False)):
                logger.warning("webinar %s disappeared during the sweep, skipping", webinar_id)
                continue
            await process(webinar, now, report)
        except Exception:
            logger.exception("could not process webinar %s", webinar_id)
            report.failed.append(webinar_id)
            await db.rollback()

    logger.info(
        "finished webinar sweep: %d reminded, %d started, %d completed, %d failed",
        len(report.reminded),
        len(report.started),
        len(report.completed),
        len(report.failed),
    )
    return report
