"""Association tables for task and project relations."""

from sqlalchemy import Column, ForeignKey, Table

from ludicboard.database import Base

# Canonical task assignee store (many-to-many between tasks and users)
task_assignments = Table(
    "task_assignments",
    Base.metadata,
    Column("task_id", ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True),
)

# Teams linked to projects; informational only, never consulted for access checks
project_teams = Table(
    "project_teams",
    Base.metadata,
    Column("project_id", ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("team_id", ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True),
)

__all__ = ["project_teams", "task_assignments"]
