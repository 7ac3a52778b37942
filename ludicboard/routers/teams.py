"""API router for teams."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ludicboard.database import get_db
from ludicboard.dependencies import get_current_user
from ludicboard.schemas.team import TeamCreate, TeamResponse
from ludicboard.services.team_service import TeamService

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/", response_model=list[TeamResponse])
def get_teams(db: Session = Depends(get_db)) -> list[TeamResponse]:
    """Get all teams."""
    teams = TeamService.get_all_teams(db)
    return [TeamResponse.model_validate(team) for team in teams]


@router.post("/", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
def create_team(team: TeamCreate, db: Session = Depends(get_db)) -> TeamResponse:
    """Create a new team."""
    created = TeamService.create_team(db, team)
    return TeamResponse.model_validate(created)
