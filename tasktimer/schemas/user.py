from pydantic import EmailStr, field_validator

from tasktimer.schemas.base import CamelModel


def _check_password(v: str) -> str:
    if len(v) < 6:
        raise ValueError("password too short: must be at least 6 characters")
    if len(v.encode("utf-8")) > 72:
        raise ValueError("password too long: must be at most 72 bytes when UTF-8 encoded")
    return v


class UserCreate(CamelModel):
    email: EmailStr
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def username_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("username cannot be empty")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        """Enforce a minimum length and bcrypt's 72-byte limit.

        Raise a validation error so API returns a 422 with a clear message.
        """
        return _check_password(v)


class UserLogin(CamelModel):
    email: EmailStr
    password: str


class UserOut(CamelModel):
    id: int
    email: EmailStr
    username: str


class TokenOut(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut
