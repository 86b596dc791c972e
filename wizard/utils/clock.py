"""Wall-clock helpers bound to the fixed service timezone."""

from datetime import datetime

import pytz

from ..settings import settings


def get_timezone() -> pytz.BaseTzInfo:
    return pytz.timezone(settings.timezone)


def now() -> datetime:
    return datetime.now(get_timezone())


def localize(dt: datetime) -> datetime:
    """Attach the service timezone to a naive datetime, or convert an aware one."""

    tz = get_timezone()
    if dt.tzinfo is None:
        return tz.localize(dt)
    return tz.normalize(dt.astimezone(tz))


def parse_date(text: str) -> datetime:
    """
    Parse a `DD/MM/YYYY HH:mm:ss` wall-clock string in the service timezone.

    Raises `ValueError` if the string does not match the format.
    """

    return localize(datetime.strptime(text.strip(), settings.date_format))


def is_valid_date(text: str) -> bool:
    try:
        parse_date(text)
    except ValueError:
        return False
    return True


def format_date(dt: datetime) -> str:
    return localize(dt).strftime(settings.date_format)


def current_date() -> str:
    return format_date(now())
