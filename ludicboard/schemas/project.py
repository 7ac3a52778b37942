"""Pydantic schemas for projects and memberships."""

from datetime import datetime

from pydantic import Field, computed_field, field_validator

from ludicboard.models.project import ProjectRole
from ludicboard.schemas.common import ApiModel
from ludicboard.schemas.user import UserSummary


class ProjectBase(ApiModel):
    """Base schema for Project."""

    name: str = Field(..., min_length=3, max_length=50, description="Project name")
    description: str | None = Field(None, max_length=500, description="Project description")
    start_date: datetime | None = None
    end_date: datetime | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if len(stripped) < 3:
            raise ValueError("Project name must be between 3 and 50 characters")
        return stripped


class ProjectCreate(ProjectBase):
    """Schema for creating a project."""

    pass


class ProjectUpdate(ApiModel):
    """Schema for updating a project."""

    name: str | None = Field(None, min_length=3, max_length=50)
    description: str | None = Field(None, max_length=500)
    start_date: datetime | None = None
    end_date: datetime | None = None


class ProjectResponse(ApiModel):
    """Schema returned from API."""

    id: int
    name: str
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @computed_field(alias="projectId")
    @property
    def project_id(self) -> int:
        return self.id


class MembershipCreate(ApiModel):
    """Add a user to a project."""

    user_id: int = Field(..., ge=1)
    role: ProjectRole = ProjectRole.MEMBER


class MembershipRoleUpdate(ApiModel):
    role: ProjectRole


class MembershipResponse(ApiModel):
    """Membership row with the member's identity."""

    project_id: int
    user_id: int
    role: ProjectRole
    user: UserSummary


__all__ = [
    "MembershipCreate",
    "MembershipResponse",
    "MembershipRoleUpdate",
    "ProjectCreate",
    "ProjectResponse",
    "ProjectUpdate",
]
