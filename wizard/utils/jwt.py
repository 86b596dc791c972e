from datetime import timedelta
from typing import Any, cast

import jwt

from ..settings import settings
from .clock import now


def encode_jwt(data: dict[str, Any], ttl: timedelta) -> str:
    return jwt.encode({**data, "exp": now() + ttl}, settings.jwt_secret, "HS256")


def decode_jwt(token: str) -> dict[str, Any] | None:
    try:
        return cast(dict[str, Any], jwt.decode(token, settings.jwt_secret, ["HS256"]))
    except jwt.InvalidTokenError:
        return None
