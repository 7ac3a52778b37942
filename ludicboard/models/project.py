"""Project and project membership models."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Column, DateTime, Enum as SQLEnum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from ludicboard.database import Base
from ludicboard.models.task_assignment import project_teams


class ProjectRole(str, Enum):
    """Authorization tier of a user within one project."""

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"
    VIEWER = "VIEWER"


class Project(Base):
    """Model for projects."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(String(500), nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    memberships = relationship("ProjectMembership", back_populates="project")
    tasks = relationship("Task", back_populates="project")
    teams = relationship("Team", secondary=project_teams, back_populates="projects")

    def __repr__(self) -> str:
        """String representation of Project."""
        return f"<Project(id={self.id}, name='{self.name}')>"


class ProjectMembership(Base):
    """(project, user) -> role row."""

    __tablename__ = "project_memberships"
    __table_args__ = (UniqueConstraint("project_id", "user_id", name="ux_project_memberships_project_user"),)

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(SQLEnum(ProjectRole), nullable=False, default=ProjectRole.MEMBER)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    project = relationship("Project", back_populates="memberships")
    user = relationship("User", back_populates="memberships", lazy="joined")

    def __repr__(self) -> str:
        return f"<ProjectMembership(project_id={self.project_id}, user_id={self.user_id}, role={self.role})>"


__all__ = ["Project", "ProjectMembership", "ProjectRole"]
