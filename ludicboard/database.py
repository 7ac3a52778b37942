"""Database configuration and session management."""

import logging
import sqlite3

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from ludicboard.config import get_settings

logger = logging.getLogger("ludicboard.database")

settings = get_settings()

engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if "sqlite" in settings.database_url else {},
    echo=settings.debug,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """Turn on FK enforcement for SQLite connections (off by default there)."""
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Initialize database tables."""
    # Import models so every table is registered on Base.metadata
    import ludicboard.models  # noqa: F401

    logger.info("Initializing database tables...")
    logger.info("Database URL: %s", settings.database_url)
    Base.metadata.create_all(bind=engine)
    tables = inspect(engine).get_table_names()
    logger.info("Available tables after init: %s", tables)
