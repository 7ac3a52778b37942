"""Service for reading user accounts."""

from sqlalchemy.orm import Session

from ludicboard.models.user import User


class UserService:
    """Read-only access to users; accounts are created through registration."""

    @staticmethod
    def get_user(db: Session, user_id: int) -> User | None:
        return db.get(User, user_id)

    @staticmethod
    def get_all_users(db: Session) -> list[User]:
        return db.query(User).order_by(User.username).all()
