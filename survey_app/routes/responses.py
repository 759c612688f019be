"""Survey-responses endpoints for the results dashboard.

Mounted under ``settings.api_prefix`` (``/api/survey-responses`` by default).
All responses use the ``{"success": ..., ...}`` envelope the dashboard reads.
"""

from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from survey_app.models.database import get_db
from survey_app.schemas.response import ResponseStatus, SurveyResponse, SurveyResponseQuery
from survey_app.services.response_service import (
    InvalidTableNameError,
    ResponseService,
    ResponseServiceError,
)
from survey_app.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()

TableName = Annotated[Optional[str], Query(alias="tableName")]
Limit = Annotated[Optional[int], Query(ge=1)]
Offset = Annotated[Optional[int], Query(ge=0)]


def get_response_service(db: Session = Depends(get_db)) -> ResponseService:
    """Dependency providing a ResponseService bound to the request session."""
    return ResponseService(db)


def _serialize(responses: list[SurveyResponse]) -> list[dict]:
    return [r.model_dump(mode="json", by_alias=True) for r in responses]


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": str(exc)})


@router.get("")
def list_responses(
    service: ResponseService = Depends(get_response_service),
    survey_id: Annotated[Optional[str], Query(alias="surveyId")] = None,
    start_date: Annotated[Optional[datetime], Query(alias="startDate")] = None,
    end_date: Annotated[Optional[datetime], Query(alias="endDate")] = None,
    status: Optional[ResponseStatus] = None,
    limit: Limit = None,
    offset: Offset = None,
    table_name: TableName = None,
):
    """List survey responses with optional filters.

    Example response:
        {"success": true, "data": [...], "count": 2}
    """
    query = SurveyResponseQuery(
        survey_id=survey_id,
        start_date=start_date,
        end_date=end_date,
        status=status,
        limit=limit,
        offset=offset,
    )
    try:
        responses = service.get_survey_responses(query, table_name)
    except InvalidTableNameError as e:
        return _error(400, e)
    except ResponseServiceError as e:
        logger.error(f"Error in GET responses: {e}")
        return _error(500, e)

    return {"success": True, "data": _serialize(responses), "count": len(responses)}


@router.get("/{survey_id}")
def get_survey_responses(
    survey_id: str,
    service: ResponseService = Depends(get_response_service),
    limit: Limit = None,
    offset: Offset = None,
    table_name: TableName = None,
):
    """List responses for one survey along with its total response count."""
    query = SurveyResponseQuery(survey_id=survey_id, limit=limit, offset=offset)
    try:
        responses = service.get_survey_responses(query, table_name)
        total = service.get_response_count(survey_id, table_name)
    except InvalidTableNameError as e:
        return _error(400, e)
    except ResponseServiceError as e:
        logger.error(f"Error in GET responses/{survey_id}: {e}", extra={"survey_id": survey_id})
        return _error(500, e)

    return {
        "success": True,
        "data": _serialize(responses),
        "count": len(responses),
        "total": total,
    }


@router.get("/{survey_id}/count")
def count_survey_responses(
    survey_id: str,
    service: ResponseService = Depends(get_response_service),
    table_name: TableName = None,
):
    """Count responses for one survey."""
    try:
        count = service.get_response_count(survey_id, table_name)
    except InvalidTableNameError as e:
        return _error(400, e)
    except ResponseServiceError as e:
        logger.error(f"Error in GET responses/{survey_id}/count: {e}", extra={"survey_id": survey_id})
        return _error(500, e)

    return {"success": True, "count": count}
