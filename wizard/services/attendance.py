"""
Attendance coordination between webinars and users.

A webinar keeps the ids of its attendees and every user keeps the ids of the webinars they attend. These two lists
must always mirror each other, so the functions in this module are the only place where either side is changed.

Lock order: the webinar lock first, then the locks of the users involved in ascending id order. Rows are read again
with a locking select once the locks are held, so a change committed by another request is never overwritten.
"""

import asyncio
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import Any, Iterable
from weakref import WeakValueDictionary

from sqlalchemy.sql import Select

from ..database import db, db_wrapper, filter_by, select
from ..exceptions.users import UserNotFoundError
from ..exceptions.webinars import (
    AlreadyAttendingError,
    NotAttendingError,
    WebinarDeletedError,
    WebinarFullError,
    WebinarNotFoundError,
)
from ..logger import get_logger
from ..models import Track, User, Webinar
from ..utils.clock import current_date
from .notifications import NotificationKind, notify


logger = get_logger(__name__)

_webinar_locks: WeakValueDictionary[str, asyncio.Lock] = WeakValueDictionary()
_user_locks: WeakValueDictionary[str, asyncio.Lock] = WeakValueDictionary()


def _get_lock(locks: WeakValueDictionary[str, asyncio.Lock], key: str) -> asyncio.Lock:
    if (lock := locks.get(key)) is None:
        lock = locks[key] = asyncio.Lock()
    return lock


def webinar_lock(webinar_id: str) -> asyncio.Lock:
    """Serialize attendance changes of one webinar within this process."""

    return _get_lock(_webinar_locks, webinar_id)


def user_lock(user_id: str) -> asyncio.Lock:
    """Serialize changes of one user's webinar list within this process."""

    return _get_lock(_user_locks, user_id)


async def lock_users(stack: AsyncExitStack, user_ids: Iterable[str]) -> None:
    for user_id in sorted(set(user_ids)):
        await stack.enter_async_context(user_lock(user_id))


def fresh(statement: Select[Any]) -> Select[Any]:
    """Lock the selected rows and replace any stale copy in the session."""

    return statement.with_for_update().execution_options(populate_existing=True)


async def _load(webinar_id: str, user_id: str) -> tuple[Webinar, User]:
    if not (webinar := await db.first(fresh(filter_by(Webinar, id=webinar_id)))):
        raise WebinarNotFoundError
    if webinar.deleted:
        raise WebinarDeletedError
    if not (user := await db.first(fresh(filter_by(User, id=user_id, deleted=False)))):
        raise UserNotFoundError
    return webinar, user


async def join(webinar_id: str, user_id: str, ip: str | None = None) -> Webinar:
    """Register a user as attendee of a webinar."""

    async with webinar_lock(webinar_id), user_lock(user_id):
        webinar, user = await _load(webinar_id, user_id)

        if user.attends(webinar.id):
            raise AlreadyAttendingError
        if len(webinar.attendees) >= webinar.max_attendees:
            raise WebinarFullError

        now = current_date()
        if not webinar.has_attendee(user.id):
            webinar.attendees = [*webinar.attendees, user.id]
        webinar.updated_at = now
        await db.flush()

        user.webinars = [*user.webinars, webinar.id]
        user.updated_at = now
        await db.flush()

        await Track.create(f"User {user.email} attends webinar {webinar.title}.", "Webinars", user.id, ip)
        await db.commit()

    logger.info("user %s joined webinar %s", user.id, webinar.id)
    await notify(NotificationKind.ATTENDEE_JOINED, [user.email], webinar.serialize, user.mail_context)
    return webinar


async def leave(webinar_id: str, user_id: str, ip: str | None = None) -> Webinar:
    """Remove a user from the attendees of a webinar."""

    async with webinar_lock(webinar_id), user_lock(user_id):
        webinar, user = await _load(webinar_id, user_id)

        if not user.attends(webinar.id):
            raise NotAttendingError

        now = current_date()
        webinar.attendees = [attendee for attendee in webinar.attendees if attendee != user.id]
        webinar.updated_at = now
        await db.flush()

        user.webinars = [w for w in user.webinars if w != webinar.id]
        user.updated_at = now
        await db.flush()

        await Track.create(f"User {user.email} no longer attends webinar {webinar.title}.", "Webinars", user.id, ip)
        await db.commit()

    logger.info("user %s left webinar %s", user.id, webinar.id)
    await notify(NotificationKind.ATTENDEE_LEFT, [user.email], webinar.serialize, user.mail_context)
    return webinar


async def cancel(webinar_id: str, by_user_id: str | None = None, ip: str | None = None) -> Webinar:
    """Soft delete a webinar and detach it from all of its attendees."""

    async with AsyncExitStack() as stack:
        await stack.enter_async_context(webinar_lock(webinar_id))
        if not (webinar := await db.first(fresh(filter_by(Webinar, id=webinar_id, deleted=False)))):
            raise WebinarNotFoundError

        await lock_users(stack, webinar.attendees)
        roster: list[User] = await User.get_many(webinar.attendees, lock=True)
        if len(roster) != len(set(webinar.attendees)):
            logger.warning("webinar %s references attendees that do not exist", webinar.id)

        now = current_date()
        for attendee in roster:
            attendee.webinars = [w for w in attendee.webinars if w != webinar.id]
            attendee.updated_at = now
        await db.flush()

        webinar.deleted = True
        webinar.attendees = []
        webinar.updated_at = now
        webinar.deleted_at = now
        await db.flush()

        await Track.create(f"Webinar {webinar.id} was deactivated.", "Webinars", by_user_id, ip)
        await db.commit()

    logger.info("cancelled webinar %s with %d attendee(s)", webinar.id, len(roster))
    await notify(
        NotificationKind.WEBINAR_CANCELLED,
        [attendee.email for attendee in roster if not attendee.deleted],
        webinar.serialize,
    )
    return webinar


@dataclass
class ReconcileReport:
    repaired_users: list[str] = field(default_factory=list)
    cleared_webinars: list[str] = field(default_factory=list)
    missing_users: list[str] = field(default_factory=list)


async def _clear_deleted(webinar_id: str, report: ReconcileReport) -> None:
    async with webinar_lock(webinar_id):
        webinar = await db.first(fresh(filter_by(Webinar, id=webinar_id)))
        if webinar and webinar.deleted and webinar.attendees:
            webinar.attendees = []
            webinar.updated_at = current_date()
            report.cleared_webinars.append(webinar.id)
        await db.commit()


async def _repair_user(user_id: str, candidates: set[str], report: ReconcileReport) -> None:
    """
    Bring one user's webinar list in line with the attendee lists of the webinars.

    `candidates` are the webinars that listed the user when the run started. The user and every webinar either side
    refers to are read again under the user's lock, so joins and leaves that happened in the meantime are kept.
    """

    async with user_lock(user_id):
        if not (user := await db.first(fresh(filter_by(User, id=user_id)))):
            return

        webinar_ids = candidates | set(user.webinars)
        webinars: list[Webinar] = await db.all(fresh(select(Webinar).where(Webinar.id.in_(webinar_ids))))
        attending = {w.id for w in webinars if not w.deleted and w.has_attendee(user.id)}

        keep = list(dict.fromkeys(w for w in user.webinars if w in attending))
        expected = keep + sorted(attending - set(keep))
        if expected != user.webinars:
            logger.warning("repairing webinar list of user %s", user_id)
            user.webinars = expected
            user.updated_at = current_date()
            report.repaired_users.append(user_id)
        await db.commit()


@db_wrapper
async def reconcile() -> ReconcileReport:
    """
    Repair attendance lists that no longer mirror each other.

    The webinar side is authoritative: it is always written first, so after an interrupted operation the user side
    is brought in line with it. Deleted webinars lose their attendees and disappear from every user. Every webinar
    and user is repaired in its own transaction.
    """

    report = ReconcileReport()
    webinars: list[Webinar] = await db.all(select(Webinar))
    user_ids: list[str] = [user.id for user in await db.all(select(User))]

    candidates: dict[str, set[str]] = {user_id: set() for user_id in user_ids}
    for webinar in webinars:
        if webinar.deleted:
            if webinar.attendees:
                await _clear_deleted(webinar.id, report)
            continue

        for user_id in webinar.attendees:
            if user_id not in candidates:
                report.missing_users.append(user_id)
                logger.warning("webinar %s references missing user %s", webinar.id, user_id)
                continue
            candidates[user_id].add(webinar.id)

    for user_id in user_ids:
        await _repair_user(user_id, candidates[user_id], report)

    logger.info(
        "reconciled attendance: %d user(s) repaired, %d webinar(s) cleared",
        len(report.repaired_users),
        len(report.cleared_webinars),
    )
    return report
