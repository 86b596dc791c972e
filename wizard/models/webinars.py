from __future__ import annotations

import enum
from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, Boolean, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base, db, filter_by, select
from ..exceptions.webinars import InvalidStateTransitionError
from ..schemas import webinars
from ..utils.clock import current_date, parse_date
from ..utils.slug import convert_to_slug


class WebinarStatus(enum.Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return list(WebinarStatus).index(self)


ACTIVE_STATUSES = (WebinarStatus.SCHEDULED, WebinarStatus.IN_PROGRESS)


class Webinar(Base):
    __tablename__ = "wizard_webinars"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, unique=True)
    title: Mapped[str] = mapped_column(String(256))
    slug: Mapped[str] = mapped_column(String(256), unique=True)
    description: Mapped[str] = mapped_column(String(4096))
    presenter: Mapped[str] = mapped_column(String(256))
    registration_link: Mapped[str] = mapped_column(String(256))
    date: Mapped[str] = mapped_column(String(19))
    duration: Mapped[int] = mapped_column(Integer)
    status: Mapped[WebinarStatus] = mapped_column(
        Enum(WebinarStatus, values_callable=lambda e: [x.value for x in e], native_enum=False, length=16),
        default=WebinarStatus.SCHEDULED,
    )
    max_attendees: Mapped[int] = mapped_column(Integer)
    attendees: Mapped[list[str]] = mapped_column(JSON, default=list)
    created_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[str] = mapped_column(String(19))
    updated_at: Mapped[str] = mapped_column(String(19))
    deleted_at: Mapped[str | None] = mapped_column(String(19), nullable=True)
    deleted: Mapped[bool] = mapped_column(Boolean, default=False)

    @property
    def start(self) -> datetime:
        return parse_date(self.date)

    def has_attendee(self, user_id: str) -> bool:
        return user_id in self.attendees

    def advance(self, status: WebinarStatus) -> bool:
        """
        Move the webinar forward in its lifecycle.

        Returns whether the status changed. Moving backwards is rejected.
        """

        if status.rank < self.status.rank:
            raise InvalidStateTransitionError(self.status.value, status.value)
        if status == self.status:
            return False

        self.status = status
        return True

    @property
    def serialize(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "description": self.description,
            "presenter": self.presenter,
            "registration_link": self.registration_link,
            "date": self.date,
            "duration": self.duration,
            "status": self.status.value,
            "max_attendees": self.max_attendees,
            "created_by": self.created_by,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def to_schema(self, attendees: int | list[str]) -> webinars.Webinar:
        return webinars.Webinar(**self.serialize, attendees=attendees)

    @classmethod
    async def create(
        cls,
        *,
        title: str,
        description: str,
        presenter: str,
        registration_link: str,
        date: str,
        duration: int,
        max_attendees: int,
        created_by: str | None,
        status: WebinarStatus = WebinarStatus.SCHEDULED,
    ) -> Webinar:
        now = current_date()
        return await db.add(
            cls(
                id=str(uuid4()),
                title=title,
                slug=convert_to_slug(title),
                description=description,
                presenter=presenter,
                registration_link=registration_link,
                date=date,
                duration=duration,
                status=status,
                max_attendees=max_attendees,
                attendees=[],
                created_by=created_by,
                created_at=now,
                updated_at=now,
                deleted_at=None,
                deleted=False,
            )
        )

    @classmethod
    async def slug_taken(cls, slug: str, exclude_id: str | None = None) -> bool:
        query = filter_by(cls, slug=slug)
        if exclude_id:
            query = query.where(cls.id != exclude_id)
        return await db.exists(query)

    @classmethod
    async def find(cls, search: str) -> Webinar | None:
        """Look a webinar up by id or by slug."""

        if webinar := await db.get(cls, id=search):
            return webinar
        return await db.get(cls, slug=search.lower())

    @classmethod
    async def list_active(cls) -> list[Webinar]:
        return await db.all(select(cls).where(cls.status.in_(ACTIVE_STATUSES), cls.deleted.is_(False)))
