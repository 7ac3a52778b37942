"""Password hashing, bearer tokens and account operations."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
import jwt
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ludicboard.config import get_settings
from ludicboard.errors import AuthenticationError, NotFoundError, ValidationError
from ludicboard.models.user import User

if TYPE_CHECKING:
    from ludicboard.schemas.auth import ChangePasswordRequest, LoginRequest, RegisterRequest
    from ludicboard.schemas.user import ProfileUpdate

logger = logging.getLogger("ludicboard.auth")

MIN_PASSWORD_LENGTH = 8
BCRYPT_ROUNDS = 10


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Sign a token carrying the user id."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    now = datetime.now(timezone.utc)
    payload = {"id": user_id, "iat": now, "exp": now + expires_delta}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> int:
    """Verify a token and return its user id.

    Raises:
        AuthenticationError: for any malformed, expired or badly signed token.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except jwt.PyJWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise AuthenticationError() from exc
    user_id = payload.get("id")
    if type(user_id) is not int:
        logger.info("Rejected bearer token without an integer id claim")
        raise AuthenticationError()
    return user_id


class AuthService:
    """Account lifecycle: register, login, profile and password updates."""

    @staticmethod
    def resolve_token(db: Session, token: str) -> User:
        """Return the user a bearer token belongs to."""
        user_id = decode_access_token(token)
        user = db.get(User, user_id)
        if user is None:
            logger.info("Rejected bearer token for missing user_id=%s", user_id)
            raise AuthenticationError()
        return user

    @staticmethod
    def register(db: Session, data: "RegisterRequest") -> tuple[User, str]:
        existing = (
            db.query(User)
            .filter(or_(User.email == data.email, User.username == data.username))
            .first()
        )
        if existing:
            raise ValidationError("User already exists")

        user = User(
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Registered user_id=%s username=%s", user.user_id, user.username)
        return user, create_access_token(user.user_id)

    @staticmethod
    def login(db: Session, data: "LoginRequest") -> tuple[User, str]:
        user = db.query(User).filter(User.email == data.email).first()
        if user is None or not verify_password(data.password, user.password_hash):
            logger.info("Failed login for email=%s", data.email)
            raise ValidationError("Invalid credentials")
        logger.info("User logged in: user_id=%s", user.user_id)
        return user, create_access_token(user.user_id)

    @staticmethod
    def update_profile(db: Session, user: User, data: "ProfileUpdate") -> tuple[User, str]:
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            raise ValidationError("No update data provided")

        username = update_data.get("username")
        if username:
            taken = (
                db.query(User)
                .filter(User.username == username, User.user_id != user.user_id)
                .first()
            )
            if taken:
                raise ValidationError("Username already taken")

        for key, value in update_data.items():
            setattr(user, key, value)
        db.commit()
        db.refresh(user)
        return user, create_access_token(user.user_id)

    @staticmethod
    def change_password(db: Session, user: User, data: "ChangePasswordRequest") -> tuple[User, str]:
        if db.get(User, user.user_id) is None:
            raise NotFoundError("User not found")
        if not verify_password(data.current_password, user.password_hash):
            raise ValidationError("Current password is incorrect")
        if len(data.new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"New password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        user.password_hash = hash_password(data.new_password)
        db.commit()
        db.refresh(user)
        logger.info("Password changed for user_id=%s", user.user_id)
        return user, create_access_token(user.user_id)


__all__ = [
    "AuthService",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "verify_password",
]
