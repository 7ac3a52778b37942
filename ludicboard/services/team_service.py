"""Service for team business logic."""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from ludicboard.errors import NotFoundError, ValidationError
from ludicboard.models.team import Team
from ludicboard.models.user import User

if TYPE_CHECKING:
    from ludicboard.schemas.team import TeamCreate


class TeamService:
    """Service for managing teams."""

    @staticmethod
    def create_team(db: Session, team_data: "TeamCreate") -> Team:
        """Create a new team."""
        existing = db.query(Team).filter(Team.team_name == team_data.team_name).first()
        if existing:
            raise ValidationError(f"Team with name '{team_data.team_name}' already exists")

        for user_id in (team_data.product_owner_user_id, team_data.project_manager_user_id):
            if user_id is not None and db.get(User, user_id) is None:
                raise NotFoundError(f"User {user_id} not found")

        team = Team(**team_data.model_dump())
        db.add(team)
        db.commit()
        db.refresh(team)
        return team

    @staticmethod
    def get_all_teams(db: Session) -> list[Team]:
        """Get all teams."""
        return db.query(Team).order_by(Team.team_name).all()
