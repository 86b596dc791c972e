import enum

from sqlalchemy import JSON, Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class ValidRole(enum.Enum):
    ROOT = "root"
    ADMINISTRATOR = "administrator"
    CLIENT = "client"


STAFF_ROLES = {ValidRole.ROOT.value, ValidRole.ADMINISTRATOR.value}


class Role(Base):
    __tablename__ = "wizard_roles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, unique=True)
    name: Mapped[str] = mapped_column(String(64), unique=True)
    description: Mapped[str] = mapped_column(String(1024), default="")
    primary: Mapped[bool] = mapped_column(Boolean, default=False)
    users: Mapped[list[str]] = mapped_column(JSON, default=list)
    created_at: Mapped[str] = mapped_column(String(19))
    updated_at: Mapped[str] = mapped_column(String(19))
    deleted_at: Mapped[str | None] = mapped_column(String(19), nullable=True)
    deleted: Mapped[bool] = mapped_column(Boolean, default=False)
