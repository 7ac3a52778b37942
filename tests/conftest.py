"""Pytest configuration: point the application at the test settings before it is imported."""

import os
from pathlib import Path

os.environ["LUDICBOARD_CONFIG"] = str(Path(__file__).resolve().parent / "settings.test.toml")
os.environ.pop("JWT_SECRET", None)

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from ludicboard.database import Base, get_db  # noqa: E402
import ludicboard.models  # noqa: E402,F401
from tests.utils import clear_tables, create_sqlite_engine, test_client_with_session  # noqa: E402

engine, SessionLocal = create_sqlite_engine()


@pytest.fixture(scope="session")
def db_setup() -> Generator[None, None, None]:
    """Create the schema once for the whole run."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_setup: None) -> Generator[Session, None, None]:
    """Session on a freshly emptied database."""
    db = SessionLocal()
    try:
        clear_tables(db)
        yield db
    finally:
        db.rollback()
        db.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Test client bound to the test session."""
    from ludicboard.main import app

    with test_client_with_session(app, get_db, db_session) as test_client:
        yield test_client
