"""Task model."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Column, DateTime, Enum as SQLEnum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ludicboard.database import Base
from ludicboard.models.task_assignment import task_assignments


class TaskStatus(str, Enum):
    """Board column of a task."""

    TO_DO = "To Do"
    WORK_IN_PROGRESS = "Work In Progress"
    UNDER_REVIEW = "Under Review"
    COMPLETED = "Completed"


class TaskPriority(str, Enum):
    """Priority buckets."""

    URGENT = "Urgent"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    BACKLOG = "Backlog"


class Task(Base):
    """Model for project tasks."""

    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    # Stored by enum value so the DB keeps the human-readable column names
    status = Column(
        SQLEnum(TaskStatus, values_callable=lambda enum: [item.value for item in enum]),
        nullable=False,
        default=TaskStatus.TO_DO,
    )
    priority = Column(
        SQLEnum(TaskPriority, values_callable=lambda enum: [item.value for item in enum]),
        nullable=True,
    )
    tags = Column(String(500), nullable=True)  # comma-separated
    start_date = Column(DateTime, nullable=True)
    due_date = Column(DateTime, nullable=True)
    points = Column(Integer, nullable=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    author_user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    project = relationship("Project", back_populates="tasks")
    author = relationship("User", foreign_keys=[author_user_id], lazy="joined")
    assignees = relationship(
        "User",
        secondary=task_assignments,
        back_populates="assigned_tasks",
        lazy="selectin",
        order_by="User.user_id",
    )
    comments = relationship("Comment", back_populates="task", lazy="selectin", order_by="Comment.id")
    attachments = relationship("Attachment", back_populates="task", lazy="selectin", order_by="Attachment.id")

    @property
    def assigned_user_ids(self) -> list[int]:
        return sorted(user.user_id for user in self.assignees)

    @property
    def assigned_user_id(self) -> int | None:
        """Legacy single-assignee view, derived from the assignment rows."""
        ids = self.assigned_user_ids
        return ids[0] if ids else None

    def __repr__(self) -> str:
        """String representation of Task."""
        return f"<Task(id={self.id}, title='{self.title}', status={self.status})>"


__all__ = ["Task", "TaskPriority", "TaskStatus"]
