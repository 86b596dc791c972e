import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable
from uuid import uuid4

import pytest


_tmp = Path(tempfile.mkdtemp(prefix="wizard-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmp / 'production.db'}"
os.environ["BACKUP_DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmp / 'backup.db'}"
os.environ["TEST_DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmp / 'test.db'}"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ.pop("OPENAI_API_KEY", None)

from wizard.database import backup_db, db, test_db  # noqa: E402
from wizard.models import Role, User, Webinar, WebinarStatus  # noqa: E402
from wizard.utils.clock import format_date, localize  # noqa: E402


STORES = [store for store in (db, backup_db, test_db) if store is not None]


@pytest.fixture(autouse=True)
async def database() -> AsyncIterator[None]:
    for store in STORES:
        await store.drop_tables()
        await store.create_tables()

    yield

    for store in STORES:
        await store.engine.dispose()


def at(day: int, month: int, year: int, hour: int, minute: int = 0) -> datetime:
    return localize(datetime(year, month, day, hour, minute))


@pytest.fixture
def make_role() -> Callable[..., Awaitable[Role]]:
    async def make(name: str = "client") -> Role:
        now = format_date(at(1, 5, 2025, 8))
        async with db.context():
            return await db.add(
                Role(
                    id=str(uuid4()),
                    name=name,
                    description=f"{name} role",
                    primary=name == "client",
                    users=[],
                    created_at=now,
                    updated_at=now,
                    deleted=False,
                )
            )

    return make


@pytest.fixture
def make_user() -> Callable[..., Awaitable[User]]:
    async def make(
        name: str = "Ana", *, webinars: list[str] | None = None, role_id: str = "", deleted: bool = False
    ) -> User:
        now = format_date(at(1, 5, 2025, 8))
        async with db.context():
            return await db.add(
                User(
                    id=str(uuid4()),
                    email=f"{name.lower()}.{uuid4().hex[:6]}@example.com",
                    password="x",
                    name=name,
                    surname="Perez",
                    gender="female",
                    phone_number="+58 212 555 0000",
                    is_active=True,
                    role_id=role_id,
                    profile_picture_id=None,
                    webinars=webinars or [],
                    created_at=now,
                    updated_at=now,
                    deleted_at=None,
                    deleted=deleted,
                )
            )

    return make


@pytest.fixture
def make_webinar() -> Callable[..., Awaitable[Webinar]]:
    async def make(
        title: str = "Python for data analysis",
        *,
        date: str = "01/06/2025 10:00:00",
        duration: int = 60,
        status: WebinarStatus = WebinarStatus.SCHEDULED,
        attendees: list[str] | None = None,
        max_attendees: int = 10,
        deleted: bool = False,
    ) -> Webinar:
        now = format_date(at(1, 5, 2025, 8))
        webinar_id = str(uuid4())
        async with db.context():
            return await db.add(
                Webinar(
                    id=webinar_id,
                    title=title,
                    slug=f"{title.lower().replace(' ', '-')}-{webinar_id[:8]}",
                    description="Hands-on session",
                    presenter="Luis Rodriguez",
                    registration_link="https://example.com/register",
                    date=date,
                    duration=duration,
                    status=status,
                    max_attendees=max_attendees,
                    attendees=attendees or [],
                    created_by=None,
                    created_at=now,
                    updated_at=now,
                    deleted_at=None,
                    deleted=deleted,
                )
            )

    return make


async def reload(cls: Any, obj_id: str) -> Any:
    async with db.context():
        return await db.get(cls, id=obj_id)
