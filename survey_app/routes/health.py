"""Health check endpoint for monitoring and deployment verification.

Reports that the application is running and that the warehouse answers a
trivial query.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from survey_app.models.database import get_db
from survey_app.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(db: Session = Depends(get_db)) -> dict:
    """Health check endpoint.

    Returns:
        dict: Status, current time and database connectivity

    Raises:
        HTTPException: If the database check fails (503 Service Unavailable)

    Example response:
        {
            "status": "ok",
            "timestamp": "2024-05-01T12:00:00+00:00",
            "database": "connected"
        }
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(
            status_code=503,
            detail="Service unavailable - database connection failed"
        )

    logger.debug("Health check passed")

    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected"
    }
