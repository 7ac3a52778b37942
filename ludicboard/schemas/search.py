"""Pydantic schemas for search results."""

from pydantic import Field

from ludicboard.schemas.common import ApiModel
from ludicboard.schemas.project import ProjectResponse
from ludicboard.schemas.task import TaskResponse
from ludicboard.schemas.user import UserSummary


class SearchResults(ApiModel):
    """Matches per entity kind, most relevant first."""

    tasks: list[TaskResponse] = Field(default_factory=list)
    projects: list[ProjectResponse] = Field(default_factory=list)
    users: list[UserSummary] = Field(default_factory=list)


__all__ = ["SearchResults"]
