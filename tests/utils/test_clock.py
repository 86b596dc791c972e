from datetime import datetime, timedelta

import pytest
import pytz

from wizard.utils.clock import current_date, format_date, is_valid_date, localize, now, parse_date


def test__parse_date__uses_service_timezone() -> None:
    date = parse_date("01/06/2025 10:00:00")

    assert (date.year, date.month, date.day, date.hour, date.minute) == (2025, 6, 1, 10, 0)
    assert date.utcoffset() == timedelta(hours=-4)
    assert date.astimezone(pytz.utc).hour == 14


@pytest.mark.parametrize("text", ["2025-06-01 10:00:00", "01/06/2025", "32/01/2025 10:00:00", "", "tomorrow"])
def test__parse_date__invalid(text: str) -> None:
    with pytest.raises(ValueError):
        parse_date(text)

    assert not is_valid_date(text)


def test__format_date() -> None:
    assert format_date(localize(datetime(2025, 12, 24, 18, 5, 9))) == "24/12/2025 18:05:09"
    assert format_date(datetime(2025, 6, 1, 14, 0, tzinfo=pytz.utc)) == "01/06/2025 10:00:00"


def test__format_date__parse_date__inverse() -> None:
    text = "05/03/2025 07:30:00"

    assert format_date(parse_date(text)) == text


def test__now() -> None:
    assert now().utcoffset() == timedelta(hours=-4)
    assert is_valid_date(current_date())
