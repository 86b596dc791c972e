from typing import Any

from fastapi import Depends, Request
from fastapi.openapi.models import HTTPBearer as HTTPBearerModel
from fastapi.security.base import SecurityBase
from pydantic import ValidationError

from . import models
from .database import db
from .exceptions.auth import InvalidTokenError, PermissionDeniedError
from .models.roles import STAFF_ROLES, ValidRole
from .schemas.user import User, UserAccessToken
from .utils.jwt import decode_jwt


def get_token(request: Request) -> str:
    authorization: str = request.headers.get("Authorization", "")
    return authorization.removeprefix("Bearer ")


class HTTPAuth(SecurityBase):
    def __init__(self) -> None:
        self.model = HTTPBearerModel()
        self.scheme_name = self.__class__.__name__

    async def __call__(self, request: Request) -> Any:
        raise NotImplementedError


class UserAuth(HTTPAuth):
    def __init__(self, *roles: str) -> None:
        super().__init__()

        self.roles = set(roles)

    async def __call__(self, request: Request) -> User:
        if (data := decode_jwt(get_token(request))) is None:
            raise InvalidTokenError

        try:
            token = UserAccessToken.model_validate(data)
        except ValidationError:
            raise InvalidTokenError

        user = await db.get(models.User, id=token.uid, deleted=False, is_active=True)
        if not user:
            raise InvalidTokenError

        role = await db.get(models.Role, id=user.role_id)
        role_name = role.name if role else ValidRole.CLIENT.value
        if self.roles and role_name not in self.roles:
            raise PermissionDeniedError

        return User(id=user.id, email=user.email, role=role_name)


user_auth = Depends(UserAuth())
staff_auth = Depends(UserAuth(*STAFF_ROLES))
client_auth = Depends(UserAuth(ValidRole.CLIENT.value))
