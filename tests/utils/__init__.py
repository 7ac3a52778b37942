"""Shared helpers for the test suite."""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from typing import Callable

from fastapi.testclient import TestClient
from sqlalchemy import Delete, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ludicboard.database import Base
from ludicboard.models.project import Project, ProjectMembership, ProjectRole
from ludicboard.models.task import Task
from ludicboard.models.user import User
from ludicboard.services.auth_service import create_access_token, hash_password

from .api import api_path

__all__ = [
    "DEFAULT_PASSWORD",
    "add_membership",
    "api_path",
    "auth_headers",
    "clear_tables",
    "create_sqlite_engine",
    "fail_on_delete",
    "make_project",
    "make_task",
    "make_user",
    "test_client_with_session",
]

DEFAULT_PASSWORD = "password123"

# Hashing once keeps fixtures fast; every helper-made user shares this password
_DEFAULT_PASSWORD_HASH: str | None = None


def create_sqlite_engine() -> tuple[Engine, sessionmaker]:
    """Create an in-memory SQLite engine and session factory for tests.

    StaticPool reuses a single connection so every session sees the same
    in-memory database.
    """

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return engine, session_factory


def clear_tables(db: Session) -> None:
    """Delete every row, children first."""

    for table in reversed(Base.metadata.sorted_tables):
        db.execute(table.delete())
    db.commit()


@contextmanager
def test_client_with_session(
    app,
    dependency: Callable[..., Generator[Session, None, None]],
    session: Session,
    raise_server_exceptions: bool = True,
) -> Generator[TestClient, None, None]:
    """Provide a TestClient with the DB dependency overridden."""

    def override_dependency() -> Generator[Session, None, None]:
        yield session

    app.dependency_overrides[dependency] = override_dependency
    try:
        with TestClient(app, raise_server_exceptions=raise_server_exceptions) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


test_client_with_session.__test__ = False  # type: ignore[attr-defined]


def make_user(db: Session, username: str, email: str | None = None) -> User:
    global _DEFAULT_PASSWORD_HASH
    if _DEFAULT_PASSWORD_HASH is None:
        _DEFAULT_PASSWORD_HASH = hash_password(DEFAULT_PASSWORD)
    user = User(
        username=username,
        email=email or f"{username}@example.com",
        password_hash=_DEFAULT_PASSWORD_HASH,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_project(db: Session, owner: User, name: str = "Project Alpha", description: str | None = None) -> Project:
    project = Project(name=name, description=description)
    db.add(project)
    db.flush()
    db.add(ProjectMembership(project_id=project.id, user_id=owner.user_id, role=ProjectRole.OWNER))
    db.commit()
    db.refresh(project)
    return project


def add_membership(db: Session, project: Project, user: User, role: ProjectRole) -> ProjectMembership:
    membership = ProjectMembership(project_id=project.id, user_id=user.user_id, role=role)
    db.add(membership)
    db.commit()
    return membership


def make_task(
    db: Session,
    project: Project,
    author: User,
    title: str = "Task",
    assignees: list[User] | None = None,
    description: str | None = None,
) -> Task:
    task = Task(title=title, description=description, project_id=project.id, author_user_id=author.user_id)
    task.assignees = list(assignees or [])
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.user_id)}"}


def fail_on_delete(monkeypatch, db: Session, nth: int) -> None:
    """Make the ``nth`` DELETE statement run through ``db.execute`` raise OperationalError."""
    real_execute = db.execute
    deletes = 0

    def execute(statement, *args, **kwargs):
        nonlocal deletes
        if isinstance(statement, Delete):
            deletes += 1
            if deletes == nth:
                raise OperationalError(str(statement), {}, Exception("database is locked"))
        return real_execute(statement, *args, **kwargs)

    monkeypatch.setattr(db, "execute", execute)
