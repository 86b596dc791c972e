from pydantic import BaseModel, ConfigDict


class User(BaseModel):
    """The authenticated caller of a request."""

    id: str
    email: str
    role: str

    @property
    def staff(self) -> bool:
        return self.role in ("root", "administrator")


class UserAccessToken(BaseModel):
    model_config = ConfigDict(extra="ignore")

    uid: str
