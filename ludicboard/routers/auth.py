"""API router for authentication and the caller's own account."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ludicboard.database import get_db
from ludicboard.dependencies import get_current_user
from ludicboard.models.user import User
from ludicboard.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    PasswordChangedResponse,
    RegisterRequest,
    TokenResponse,
)
from ludicboard.schemas.common import MessageResponse
from ludicboard.schemas.user import ProfileUpdate, UserSummary
from ludicboard.services.auth_service import AuthService

router = APIRouter()


def _token_response(user: User, token: str) -> TokenResponse:
    return TokenResponse(
        user_id=user.user_id,
        username=user.username,
        email=user.email,
        profile_picture_url=user.profile_picture_url,
        token=token,
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> TokenResponse:
    """Create an account and return a token for it."""
    user, token = AuthService.register(db, payload)
    return _token_response(user, token)


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    """Exchange email and password for a token."""
    user, token = AuthService.login(db, payload)
    return _token_response(user, token)


@router.get("/logout", response_model=MessageResponse)
def logout() -> MessageResponse:
    """Tokens are stateless; the client simply discards its copy."""
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserSummary)
def me(current_user: User = Depends(get_current_user)) -> UserSummary:
    """Return the authenticated identity."""
    return UserSummary.model_validate(current_user)


@router.patch("/update-profile", response_model=TokenResponse)
def update_profile(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TokenResponse:
    user, token = AuthService.update_profile(db, current_user, payload)
    return _token_response(user, token)


@router.patch("/change-password", response_model=PasswordChangedResponse)
def change_password(
    payload: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PasswordChangedResponse:
    user, token = AuthService.change_password(db, current_user, payload)
    return PasswordChangedResponse(
        message="Password changed successfully",
        token=token,
        user=UserSummary.model_validate(user),
    )
