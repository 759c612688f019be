"""Database engine, session management and table definitions."""

from survey_app.models.database import Base, engine, SessionLocal, get_db
from survey_app.models.response import GameDataRecord

__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "get_db",
    "GameDataRecord",
]
