from typing import Optional

from pydantic import EmailStr, Field, field_validator

from app.schemas.common import CamelModel


def _validate_password_length(value: str) -> str:
    if len(value.encode("utf-8")) > 72:
        raise ValueError("Password too long (max 72 bytes)")
    return value


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RegisterRequest(CamelModel):
    username: str = Field(min_length=2, max_length=64)
    password: str = Field(min_length=4)
    email: Optional[EmailStr] = None
    full_name: Optional[str] = None
    visibility: int = 0

    _password_len = field_validator("password")(_validate_password_length)


class LoginRequest(CamelModel):
    username: Optional[str] = None
    user_id: Optional[str] = None
    password: str

    _password_len = field_validator("password")(_validate_password_length)


class RefreshRequest(CamelModel):
    refresh_token: str


class EmailVerification(CamelModel):
    token: str
