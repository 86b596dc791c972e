import logging
import sys

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from .settings import settings


logging_formatter = logging.Formatter("[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s")

logging_handler = logging.StreamHandler(sys.stdout)
logging_handler.setFormatter(logging_formatter)


def get_logger(name: str) -> logging.Logger:
    logger: logging.Logger = logging.getLogger(name)
    if logging_handler not in logger.handlers:
        logger.addHandler(logging_handler)
    logger.setLevel(settings.log_level.upper())
    return logger


def setup_sentry(dsn: str, name: str, version: str) -> None:
    logger = get_logger(__name__)
    logger.debug("initializing sentry")
    sentry_sdk.init(
        dsn=dsn,
        attach_stacktrace=True,
        shutdown_timeout=5,
        integrations=[
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
            SqlalchemyIntegration(),
        ],
        release=f"{name}@{version}",
        environment=settings.sentry_environment,
    )
