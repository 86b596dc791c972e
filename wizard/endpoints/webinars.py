"""Endpoints related to webinars."""

from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import func, or_

from wizard import models
from wizard.auth import client_auth, staff_auth, user_auth
from wizard.database import db, select
from wizard.exceptions.auth import client_responses, staff_responses, user_responses
from wizard.exceptions.users import UserNotFoundError
from wizard.exceptions.webinars import (
    AlreadyAttendingError,
    InvalidStateTransitionError,
    NotAttendingError,
    SlugAlreadyExistsError,
    WebinarDeletedError,
    WebinarFullError,
    WebinarNotFoundError,
)
from wizard.models.webinars import WebinarStatus
from wizard.schemas.user import User
from wizard.schemas.webinars import CreateWebinar, UpdateWebinar, Webinar, WebinarList
from wizard.services import attendance
from wizard.settings import settings
from wizard.utils.cache import clear_cache, redis_cached
from wizard.utils.clock import current_date, parse_date
from wizard.utils.slug import convert_to_slug


router = APIRouter()

MY_WEBINARS = "my-webinars"


@Depends
async def get_webinar(webinar_id: str) -> models.Webinar:
    webinar = await db.get(models.Webinar, id=webinar_id, deleted=False)
    if not webinar:
        raise WebinarNotFoundError

    return webinar


def client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


def visible_attendees(webinar: models.Webinar, user: User) -> int | list[str]:
    """Staff see how many people attend, clients only see whether they attend themselves."""

    if user.staff:
        return len(webinar.attendees)
    return [user.id] if webinar.has_attendee(user.id) else []


@redis_cached("webinars", "user_id", "staff", "limit", "offset", "search")
async def list_webinars(user_id: str, staff: bool, limit: int, offset: int, search: str) -> dict[str, Any]:
    user = User(id=user_id, email="", role="administrator" if staff else "client")

    query = select(models.Webinar).where(models.Webinar.deleted.is_(False))
    if search:
        statuses = [status for status in WebinarStatus if search.lower() in status.value]
        query = query.where(
            or_(
                func.lower(models.Webinar.slug).contains(search.lower(), autoescape=True),
                func.lower(models.Webinar.title).contains(search.lower(), autoescape=True),
                models.Webinar.status.in_(statuses),
            )
        )

    # timestamps are stored as wall-clock strings, so order after loading
    webinars: list[models.Webinar] = sorted(await db.all(query), key=lambda w: (parse_date(w.created_at), w.id))
    page = webinars[offset : offset + limit]

    return WebinarList(
        pagination={"total": len(webinars), "limit": limit, "offset": offset},
        webinars=[webinar.to_schema(visible_attendees(webinar, user)) for webinar in page],
    ).model_dump(mode="json")


@router.get("/webinars", responses=user_responses(WebinarList))
async def get_webinars(
    limit: int = Query(settings.default_limit, ge=1, le=100, description="Page size"),
    offset: int = Query(0, ge=0, description="Index of the first webinar"),
    filter: str = Query("", description="Search term for slug, title or status, or `my-webinars`"),
    user: User = user_auth,
) -> Any:
    """
    Return a page of webinars.

    With `filter=my-webinars` all webinars the user attends are returned instead.
    """

    if filter != MY_WEBINARS:
        return await list_webinars(user.id, user.staff, limit, offset, filter)

    if not (me := await db.get(models.User, id=user.id)):
        raise UserNotFoundError

    webinars: list[models.Webinar] = []
    if me.webinars:
        webinars = await db.all(
            select(models.Webinar).where(models.Webinar.id.in_(me.webinars), models.Webinar.deleted.is_(False))
        )
    return WebinarList(pagination=None, webinars=[webinar.to_schema([]) for webinar in webinars])


@router.get("/webinars/{search}", responses=user_responses(Webinar, WebinarNotFoundError))
async def get_webinar_by_id_or_slug(search: str, user: User = user_auth) -> Any:
    """Return a webinar by id or slug."""

    webinar = await models.Webinar.find(search)
    if not webinar or webinar.deleted:
        raise WebinarNotFoundError

    return webinar.to_schema(visible_attendees(webinar, user))


@router.post("/webinars", status_code=201, responses=staff_responses(Webinar, SlugAlreadyExistsError))
async def create_webinar(data: CreateWebinar, request: Request, user: User = staff_auth) -> Any:
    """
    Create a new webinar.

    *Requirements:* **root** or **administrator**
    """

    if await models.Webinar.slug_taken(convert_to_slug(data.title)):
        raise SlugAlreadyExistsError

    webinar = await models.Webinar.create(**data.model_dump(), created_by=user.id)
    await models.Track.create(f"Webinar {webinar.id} was created.", "Webinars", user.id, client_ip(request))

    await clear_cache("webinars")

    return webinar.to_schema(0)


@router.patch(
    "/webinars/{webinar_id}",
    responses=staff_responses(Webinar, WebinarNotFoundError, SlugAlreadyExistsError, InvalidStateTransitionError),
)
async def update_webinar(
    data: UpdateWebinar, request: Request, user: User = staff_auth, webinar: models.Webinar = get_webinar
) -> Any:
    """
    Update a webinar.

    The status can only move forward.

    *Requirements:* **root** or **administrator**
    """

    if data.title is not None and data.title != webinar.title:
        slug = convert_to_slug(data.title)
        if await models.Webinar.slug_taken(slug, exclude_id=webinar.id):
            raise SlugAlreadyExistsError
        webinar.title = data.title
        webinar.slug = slug

    if data.description is not None and data.description != webinar.description:
        webinar.description = data.description

    if data.presenter is not None and data.presenter != webinar.presenter:
        webinar.presenter = data.presenter

    if data.registration_link is not None and data.registration_link != webinar.registration_link:
        webinar.registration_link = data.registration_link

    if data.date is not None and data.date != webinar.date:
        webinar.date = data.date

    if data.duration is not None and data.duration != webinar.duration:
        webinar.duration = data.duration

    if data.max_attendees is not None and data.max_attendees != webinar.max_attendees:
        webinar.max_attendees = data.max_attendees

    if data.status is not None:
        webinar.advance(WebinarStatus(data.status))

    webinar.updated_at = current_date()
    await models.Track.create(
        f"Webinar {webinar.id} was updated: {webinar.title} ({webinar.slug}).", "Webinars", user.id, client_ip(request)
    )

    await clear_cache("webinars")

    return webinar.to_schema(len(webinar.attendees))


@router.delete("/webinars/{webinar_id}", responses=staff_responses(bool, WebinarNotFoundError))
async def delete_webinar(webinar_id: str, request: Request, user: User = staff_auth) -> Any:
    """
    Cancel a webinar.

    All attendees are removed from the webinar and notified.

    *Requirements:* **root** or **administrator**
    """

    await attendance.cancel(webinar_id, user.id, client_ip(request))

    await clear_cache("webinars")

    return True


@router.post(
    "/webinars/attend/{webinar_id}",
    status_code=201,
    responses=client_responses(
        Webinar, WebinarNotFoundError, WebinarDeletedError, AlreadyAttendingError, WebinarFullError
    ),
)
async def attend_webinar(webinar_id: str, request: Request, user: User = client_auth) -> Any:
    """
    Register for a webinar.

    *Requirements:* **client**
    """

    webinar = await attendance.join(webinar_id, user.id, client_ip(request))

    await clear_cache("webinars")

    return webinar.to_schema(visible_attendees(webinar, user))


@router.post(
    "/webinars/not-attend/{webinar_id}",
    status_code=201,
    responses=client_responses(Webinar, WebinarNotFoundError, WebinarDeletedError, NotAttendingError),
)
async def not_attend_webinar(webinar_id: str, request: Request, user: User = client_auth) -> Any:
    """
    Cancel the registration for a webinar.

    *Requirements:* **client**
    """

    webinar = await attendance.leave(webinar_id, user.id, client_ip(request))

    await clear_cache("webinars")

    return webinar.to_schema(visible_attendees(webinar, user))
