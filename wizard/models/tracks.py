from __future__ import annotations

from uuid import uuid4

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base, db
from ..utils.clock import current_date


class Track(Base):
    """Audit trail entry for an action performed on a module."""

    __tablename__ = "wizard_tracks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, unique=True)
    ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str] = mapped_column(String(1024))
    module: Mapped[str] = mapped_column(String(64))
    user_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[str] = mapped_column(String(19))

    @classmethod
    async def create(cls, description: str, module: str, user_id: str | None, ip: str | None) -> Track:
        return await db.add(
            cls(
                id=str(uuid4()),
                ip=ip,
                description=description,
                module=module,
                user_id=user_id,
                created_at=current_date(),
            )
        )
