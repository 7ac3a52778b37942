"""Pydantic schemas for tasks, comments and attachments."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, computed_field, field_validator

from ludicboard.models.task import TaskPriority, TaskStatus
from ludicboard.schemas.common import ApiModel
from ludicboard.schemas.user import CommentAuthor, UserSummary


class TaskBase(ApiModel):
    """Fields shared by create and response schemas."""

    title: str = Field(..., min_length=1, max_length=255, description="Task title")
    description: str | None = Field(None, description="Task description")
    status: TaskStatus = Field(TaskStatus.TO_DO, description="Board column")
    priority: TaskPriority | None = Field(None, description="Priority bucket")
    tags: list[str] = Field(default_factory=list, description="Free-form labels")
    start_date: datetime | None = None
    due_date: datetime | None = None
    points: int | None = Field(None, ge=0)

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: object) -> object:
        """Accept the legacy comma-separated string form as well as a list."""
        if v is None:
            return []
        if isinstance(v, str):
            return [tag.strip() for tag in v.split(",") if tag.strip()]
        return v


class TaskCreate(TaskBase):
    """Schema for creating a task.

    ``assigned_user_id`` is the legacy single-assignee field; it is merged into
    ``assigned_user_ids`` and never stored on its own.
    """

    project_id: int = Field(..., ge=1)
    author_user_id: int | None = Field(None, ge=1)
    assigned_user_id: int | None = Field(None, ge=1)
    assigned_user_ids: list[int] | None = None

    def requested_assignee_ids(self) -> list[int]:
        ids = list(self.assigned_user_ids or [])
        if self.assigned_user_id is not None:
            ids.append(self.assigned_user_id)
        # Deduplicate, keep first occurrence
        return list(dict.fromkeys(ids))


class TaskUpdate(ApiModel):
    """Schema for a full (author-only) task edit."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    tags: list[str] | None = None
    start_date: datetime | None = None
    due_date: datetime | None = None
    points: int | None = Field(None, ge=0)
    assigned_user_id: int | None = Field(None, ge=1)
    assigned_user_ids: list[int] | None = None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: object) -> object:
        if isinstance(v, str):
            return [tag.strip() for tag in v.split(",") if tag.strip()]
        return v


class TaskStatusUpdate(ApiModel):
    status: TaskStatus


class CommentCreate(ApiModel):
    """New comment; ``user_id`` is optional and must match the caller when sent."""

    text: str = Field(..., max_length=5000)
    user_id: int | None = None


class CommentUpdate(ApiModel):
    text: str = Field(..., max_length=5000)


class CommentResponse(ApiModel):
    id: int
    text: str
    task_id: int
    user_id: int
    user: CommentAuthor | None = None
    created_at: datetime
    updated_at: datetime


class AttachmentCreate(ApiModel):
    file_url: str = Field(..., min_length=1, max_length=1000)
    file_name: str | None = Field(None, max_length=255)


class AttachmentResponse(ApiModel):
    id: int
    file_url: str
    file_name: str | None = None
    task_id: int
    uploaded_by_id: int


class TaskResponse(TaskBase):
    """Task with nested author, assignees, comments and attachments."""

    id: int
    project_id: int
    author_user_id: int
    assigned_user_id: int | None = None
    assigned_user_ids: list[int] = Field(default_factory=list)
    author: UserSummary | None = None
    assignees: list[UserSummary] = Field(default_factory=list)
    comments: list[CommentResponse] = Field(default_factory=list)
    attachments: list[AttachmentResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @computed_field(alias="taskId")
    @property
    def task_id(self) -> int:
        return self.id


__all__ = [
    "AttachmentCreate",
    "AttachmentResponse",
    "CommentCreate",
    "CommentResponse",
    "CommentUpdate",
    "TaskCreate",
    "TaskResponse",
    "TaskStatusUpdate",
    "TaskUpdate",
]
