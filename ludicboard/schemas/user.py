"""Pydantic schemas for User model."""

from pydantic import Field

from ludicboard.schemas.common import ApiModel


class UserSummary(ApiModel):
    """Public identity record, also embedded in tasks and comments."""

    user_id: int
    username: str
    email: str
    profile_picture_url: str | None = None


class CommentAuthor(ApiModel):
    """Lightweight author block embedded with comments."""

    user_id: int
    username: str
    profile_picture_url: str | None = None


class ProfileUpdate(ApiModel):
    """Schema for updating the caller's profile."""

    username: str | None = Field(None, min_length=3, max_length=50)
    profile_picture_url: str | None = Field(None, max_length=500)


__all__ = ["CommentAuthor", "ProfileUpdate", "UserSummary"]
