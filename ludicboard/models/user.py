"""User model representing an account that owns and works on tasks."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from ludicboard.database import Base
from ludicboard.models.task_assignment import task_assignments


class User(Base):
    """Registered account."""

    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    profile_picture_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    memberships = relationship("ProjectMembership", back_populates="user")
    assigned_tasks = relationship(
        "Task",
        secondary=task_assignments,
        back_populates="assignees",
    )

    def __repr__(self) -> str:
        """String representation of User."""
        return f"<User(user_id={self.user_id}, username='{self.username}')>"


__all__ = ["User"]
