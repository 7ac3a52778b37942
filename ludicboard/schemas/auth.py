"""Pydantic schemas for authentication endpoints."""

from pydantic import Field, field_validator

from ludicboard.schemas.common import ApiModel
from ludicboard.schemas.user import UserSummary

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(ApiModel):
    """Registration payload."""

    username: str = Field(..., min_length=3, max_length=50)
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("username", "email")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()


class LoginRequest(ApiModel):
    """Login payload."""

    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(ApiModel):
    """Password change payload; length of the new password is checked by the service."""

    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class TokenResponse(ApiModel):
    """Identity plus a freshly issued bearer token."""

    user_id: int
    username: str
    email: str
    profile_picture_url: str | None = None
    token: str


class PasswordChangedResponse(ApiModel):
    message: str
    token: str
    user: UserSummary


__all__ = [
    "ChangePasswordRequest",
    "LoginRequest",
    "PasswordChangedResponse",
    "RegisterRequest",
    "TokenResponse",
]
