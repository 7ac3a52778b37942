"""Request-scoped FastAPI dependencies."""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ludicboard.database import get_db
from ludicboard.errors import AuthenticationError
from ludicboard.models.user import User
from ludicboard.services.auth_service import AuthService

# auto_error=False so a missing header goes through the same 401 path as a bad token
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to a user or reject with 401."""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthenticationError()
    return AuthService.resolve_token(db, credentials.credentials)
