"""Warehouse engine and session management using SQLAlchemy 2.0.

Survey responses are written by the survey platform into a warehouse table;
this service only reads them. The engine URL comes from settings, so the
same code runs against Snowflake in production and SQLite locally.
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from survey_app.config import get_settings


class Base(DeclarativeBase):
    """Base class for ORM table definitions."""
    pass


settings = get_settings()

engine_kwargs = {
    "pool_pre_ping": True,  # Verify connections before using
}

# SQLite doesn't support pool_size/max_overflow
if not settings.database_url.startswith("sqlite"):
    engine_kwargs["pool_size"] = settings.database_pool_size
    engine_kwargs["max_overflow"] = settings.database_max_overflow

engine = create_engine(settings.database_url, **engine_kwargs)

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


def get_db() -> Generator[Session, None, None]:
    """Dependency function for FastAPI to provide database sessions.

    Yields:
        Session: SQLAlchemy database session

    Note:
        The session is automatically closed after the request completes,
        even if an exception occurs.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
