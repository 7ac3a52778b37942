"""Team model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from ludicboard.database import Base
from ludicboard.models.task_assignment import project_teams


class Team(Base):
    """Loose grouping of users that can be linked to projects."""

    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    team_name = Column(String(255), nullable=False, unique=True, index=True)
    product_owner_user_id = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    project_manager_user_id = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    projects = relationship("Project", secondary=project_teams, back_populates="teams")

    def __repr__(self) -> str:
        """String representation of Team."""
        return f"<Team(id={self.id}, team_name='{self.team_name}')>"


__all__ = ["Team"]
