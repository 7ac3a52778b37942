"""Pydantic schemas for Team model."""

from pydantic import Field, field_validator

from ludicboard.schemas.common import ApiModel


class TeamCreate(ApiModel):
    """Schema for creating a team."""

    team_name: str = Field(..., min_length=1, max_length=255)
    product_owner_user_id: int | None = Field(None, ge=1)
    project_manager_user_id: int | None = Field(None, ge=1)

    @field_validator("team_name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is not blank."""
        if len(v.strip()) == 0:
            raise ValueError("Team name cannot be empty")
        return v.strip()


class TeamResponse(TeamCreate):
    id: int


__all__ = ["TeamCreate", "TeamResponse"]
