from __future__ import annotations

from contextlib import asynccontextmanager
from contextvars import ContextVar
from functools import wraps
from typing import Any, AsyncIterator, Awaitable, Callable, Type, TypeVar, cast

from sqlalchemy import Column, Delete
from sqlalchemy import delete as sa_delete
from sqlalchemy import exists as sa_exists
from sqlalchemy.engine import Result
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.sql import Executable, Select
from sqlalchemy.sql import select as sa_select

from ..logger import get_logger
from ..settings import settings


T = TypeVar("T")

logger = get_logger(__name__)


class Base(DeclarativeBase):
    pass


def select(entity: Any, *args: Column[Any]) -> Select[Any]:
    """Shortcut for :meth:`sqlalchemy.future.select`"""

    if not args:
        return sa_select(entity)

    return sa_select(entity, *args)


def filter_by(cls: Any, *args: Column[Any], **kwargs: Any) -> Select[Any]:
    """Shortcut for :meth:`sqlalchemy.future.Select.filter_by`"""

    return select(cls, *args).filter_by(**kwargs)


def exists(statement: Select[Any]) -> Any:
    """Shortcut for :meth:`sqlalchemy.sql.expression.exists`"""

    return sa_exists(statement)


def delete(table: Any) -> Delete:
    """Shortcut for :meth:`sqlalchemy.sql.expression.delete`"""

    return sa_delete(table)


class DB:
    """An async SQLAlchemy store with one session per task context."""

    def __init__(
        self,
        url: str,
        *,
        pool_recycle: int = 300,
        pool_size: int = 20,
        max_overflow: int = 20,
        echo: bool = False,
    ):
        options: dict[str, Any] = {"echo": echo}
        if not url.startswith("sqlite"):
            options |= {"pool_recycle": pool_recycle, "pool_size": pool_size, "max_overflow": max_overflow}

        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, pool_pre_ping=True, **options)
        self._session: ContextVar[AsyncSession | None] = ContextVar(f"session:{id(self)}", default=None)
        logger.debug("created engine for %s", self.engine.url)

    async def create_tables(self) -> None:
        """Create all tables of the declarative base."""

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        """Drop all tables of the declarative base."""

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def add(self, obj: T) -> T:
        """
        Add a new row to the database

        :param obj: the row to insert
        :return: the same row
        """

        self.session.add(obj)
        return obj

    async def add_all(self, objs: list[T]) -> list[T]:
        """Add many rows to the database in one batch."""

        self.session.add_all(objs)
        return objs

    async def delete(self, obj: T) -> T:
        """
        Remove a row from the database

        :param obj: the row to remove
        :return: the same row
        """

        await self.session.delete(obj)
        return obj

    async def exec(self, statement: Executable, *_: Any, **__: Any) -> Result[Any]:
        """Execute an sql statement and return the result."""

        return await self.session.execute(statement)

    async def stream(self, statement: Executable, *_: Any, **__: Any) -> AsyncIterator[Any]:
        """Execute an sql statement and stream the result."""

        return cast(AsyncIterator[Any], (await self.session.stream(statement)).scalars())

    async def all(self, statement: Executable, *_: Any, **__: Any) -> list[Any]:
        """Execute an sql statement and return all results as a list."""

        return [x async for x in await self.stream(statement)]

    async def first(self, *args: Any, **kwargs: Any) -> Any | None:
        """Execute an sql statement and return the first result."""

        return (await self.exec(*args, **kwargs)).scalars().first()

    async def exists(self, *args: Any, **kwargs: Any) -> bool:
        """Execute an sql statement and return whether it returned anything."""

        return bool(await self.first(exists(*args, **kwargs).select()))

    async def get(self, cls: Type[T], *args: Column[Any], **kwargs: Any) -> T | None:
        """Shortcut for first(filter(...))"""

        return cast(T | None, await self.first(filter_by(cls, *args, **kwargs)))

    async def flush(self) -> None:
        await self.session.flush()

    async def commit(self) -> None:
        """Shortcut for :meth:`sqlalchemy.ext.asyncio.AsyncSession.commit`"""

        if self._session.get():
            await self.session.commit()

    async def rollback(self) -> None:
        """Shortcut for :meth:`sqlalchemy.ext.asyncio.AsyncSession.rollback`"""

        if self._session.get():
            await self.session.rollback()

    async def close(self) -> None:
        """Close the current session"""

        if self._session.get():
            await self.session.close()

    @asynccontextmanager
    async def context(self) -> AsyncIterator[DB]:
        """Open a session for the current task, commit on success and restore the previous session afterwards."""

        token = self._session.set(AsyncSession(self.engine, expire_on_commit=False))
        try:
            yield self
            await self.commit()
        except BaseException:
            await self.rollback()
            raise
        finally:
            await self.close()
            self._session.reset(token)

    def wrapper(self, f: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        """Decorator which runs a coroutine function in its own session of this store."""

        @wraps(f)
        async def inner(*args: Any, **kwargs: Any) -> T:
            async with self.context():
                return await f(*args, **kwargs)

        return inner

    @property
    def session(self) -> AsyncSession:
        """Get the session object for the current task"""

        if (session := self._session.get()) is None:
            raise RuntimeError("No database session in the current context")
        return session


def get_database(url: str) -> DB:
    """
    Create a database connection object using the environment variables

    :return: The DB object
    """

    return DB(
        url,
        pool_recycle=settings.pool_recycle,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        echo=settings.sql_show_statements,
    )


db: DB = get_database(settings.database_url)
backup_db: DB = get_database(settings.backup_database_url)
test_db: DB | None = get_database(settings.test_database_url) if settings.test_database_url else None

db_wrapper = db.wrapper
