"""Default layout of the platform's survey response table.

The platform stores each submission as one row whose ``data`` column holds
the JSON payload (survey id, title and answers). Deployments may point the
API at a differently named table with alternate column names; the response
service reads those through case-insensitive column lookup.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from survey_app.models.database import Base


class GameDataRecord(Base):
    """Row of the ``GAME_DATA`` table.

    Attributes:
        id: Response identifier
        data: JSON payload, possibly double-encoded
        timestamp: When the response was recorded
        completed_at: When the respondent finished
        status: completed, partial or abandoned
        session_id: Respondent session
        time_spent: Seconds spent on the survey
        user_id: Platform user
        organization_id: Platform organization
        exercise_id: Platform exercise
    """

    __tablename__ = "GAME_DATA"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    data: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    session_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    time_spent: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    organization_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    exercise_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<GameDataRecord(id={self.id}, status={self.status}, timestamp={self.timestamp})>"
