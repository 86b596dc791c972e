from typing import Any, Type

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class APIException(HTTPException):
    status_code: int
    detail: Any
    description: str

    def __init__(self) -> None:
        super().__init__(self.status_code, self.detail)


class ErrorModel(BaseModel):
    detail: Any


async def api_exception_handler(_: Request, exc: APIException) -> JSONResponse:
    return JSONResponse({"detail": exc.detail}, exc.status_code, exc.headers)


def responses(default_type: Any, *args: Type[APIException]) -> dict[int | str, dict[str, Any]]:
    """Build the `responses` argument of a route from its exception classes."""

    out: dict[int | str, dict[str, Any]] = {}
    for exc in args:
        if exc.status_code in out:
            out[exc.status_code]["description"] += f" / {exc.description}"
            continue
        out[exc.status_code] = {"description": exc.description, "model": ErrorModel}

    out[200] = {"model": default_type}
    return out
