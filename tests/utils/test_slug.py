import pytest

from wizard.utils.slug import convert_to_slug


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Introducción a Python", "introduccion-a-python"),
        ("  Data   Science 101!  ", "data-science-101"),
        ("FastAPI & SQLAlchemy: async", "fastapi-sqlalchemy-async"),
        ("snake_case_title", "snake-case-title"),
    ],
)
def test__convert_to_slug(text: str, expected: str) -> None:
    assert convert_to_slug(text) == expected

