from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base


class Image(Base):
    __tablename__ = "wizard_images"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, unique=True)
    name: Mapped[str] = mapped_column(String(256))
    url: Mapped[str] = mapped_column(String(1024))
    public_id: Mapped[str] = mapped_column(String(256))
    created_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[str] = mapped_column(String(19))
    updated_at: Mapped[str] = mapped_column(String(19))
    deleted_at: Mapped[str | None] = mapped_column(String(19), nullable=True)
    deleted: Mapped[bool] = mapped_column(Boolean, default=False)
