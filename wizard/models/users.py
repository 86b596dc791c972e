from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base, db, select


class User(Base):
    __tablename__ = "wizard_users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, unique=True)
    email: Mapped[str] = mapped_column(String(256), unique=True)
    password: Mapped[str] = mapped_column(String(128))
    name: Mapped[str] = mapped_column(String(256))
    surname: Mapped[str] = mapped_column(String(256))
    gender: Mapped[str] = mapped_column(String(32))
    phone_number: Mapped[str] = mapped_column(String(32))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    role_id: Mapped[str] = mapped_column(String(36))
    profile_picture_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    webinars: Mapped[list[str]] = mapped_column(JSON, default=list)
    created_at: Mapped[str] = mapped_column(String(19))
    updated_at: Mapped[str] = mapped_column(String(19))
    deleted_at: Mapped[str | None] = mapped_column(String(19), nullable=True)
    deleted: Mapped[bool] = mapped_column(Boolean, default=False)

    def attends(self, webinar_id: str) -> bool:
        return webinar_id in self.webinars

    @property
    def mail_context(self) -> dict[str, Any]:
        return {"email": self.email, "name": self.name, "surname": self.surname, "gender": self.gender}

    @classmethod
    async def get_many(cls, user_ids: list[str], lock: bool = False) -> list[User]:
        if not user_ids:
            return []
        query = select(cls).where(cls.id.in_(user_ids))
        if lock:
            query = query.with_for_update().execution_options(populate_existing=True)
        return await db.all(query)
