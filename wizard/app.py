"""FastAPI application: routes, database sessions and the background scheduler."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request, Response

from .database import db
from .endpoints import ROUTERS
from .exceptions.api_exception import APIException, api_exception_handler
from .jobs.schedule import create_scheduler
from .logger import get_logger, setup_sentry
from .settings import settings
from .version import NAME, get_version


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("starting %s %s", NAME, get_version())
    if settings.sentry_dsn:
        setup_sentry(settings.sentry_dsn, NAME, get_version())

    scheduler = create_scheduler() if settings.scheduler_enabled else None
    if scheduler:
        scheduler.start()
    else:
        logger.warning("scheduler is disabled, webinars will not be swept or mirrored")

    yield

    if scheduler:
        await scheduler.stop()
    await db.engine.dispose()
    logger.info("shutdown complete")


app = FastAPI(
    title="Webinar Wizard",
    description="Webinar management: attendance, lifecycle sweeps and data mirroring.",
    version=get_version(),
    debug=settings.debug,
    root_path=settings.root_path,
    lifespan=lifespan,
)

for router in ROUTERS:
    app.include_router(router, tags=["webinars"])


@app.middleware("http")
async def db_session(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    async with db.context():
        response = await call_next(request)
        if response.status_code >= 400:
            await db.rollback()
        return response


app.exception_handler(APIException)(api_exception_handler)


@app.get("/health", include_in_schema=False)
async def health() -> dict[str, str]:
    return {"status": "ok", "version": get_version()}
