"""Database models."""

from ludicboard.models.attachment import Attachment
from ludicboard.models.comment import Comment
from ludicboard.models.project import Project, ProjectMembership, ProjectRole
from ludicboard.models.task import Task, TaskPriority, TaskStatus
from ludicboard.models.team import Team
from ludicboard.models.user import User

__all__ = [
    "Attachment",
    "Comment",
    "Project",
    "ProjectMembership",
    "ProjectRole",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "Team",
    "User",
]
