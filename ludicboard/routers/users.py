"""API router for users."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from ludicboard.database import get_db
from ludicboard.dependencies import get_current_user
from ludicboard.errors import NotFoundError
from ludicboard.models.user import User
from ludicboard.schemas.user import UserSummary
from ludicboard.services.user_service import UserService

router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/", response_model=list[UserSummary])
def list_users(db: Session = Depends(get_db)) -> list[UserSummary]:
    """List all users."""
    users = UserService.get_all_users(db)
    return [UserSummary.model_validate(user) for user in users]


@router.get("/{user_id}", response_model=UserSummary)
def get_user(user_id: Annotated[int, Path(ge=1)], db: Session = Depends(get_db)) -> UserSummary:
    """Get a single user."""
    user = UserService.get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return UserSummary.model_validate(user)
