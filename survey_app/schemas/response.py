"""Pydantic schemas for survey responses read from the warehouse.

The warehouse table is written by the survey platform; these models are the
shape the survey-responses API hands back to the results dashboard.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ResponseStatus(str, Enum):
    """Completion state of a submitted response."""
    COMPLETED = "completed"
    PARTIAL = "partial"
    ABANDONED = "abandoned"


class SurveyResponse(BaseModel):
    """A single submitted survey response.

    Attributes:
        id: Response identifier
        survey_id: Survey the response belongs to
        survey_title: Survey title at submission time
        answers: Mapping of question ID to answer value
        timestamp: ISO-8601 time the response was recorded
        completed_at: ISO-8601 completion time, if completed
        session_id: Respondent session identifier
        time_spent: Seconds spent on the survey
        status: Completion state
        user_id: Platform user identifier
        organization_id: Platform organization identifier
        exercise_id: Platform exercise identifier
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    survey_id: str = ""
    survey_title: str = ""
    answers: dict[str, Any] = Field(default_factory=dict)
    timestamp: str
    completed_at: Optional[str] = None
    session_id: Optional[str] = None
    time_spent: Optional[float] = None
    status: ResponseStatus = ResponseStatus.COMPLETED
    user_id: Optional[str] = None
    organization_id: Optional[str] = None
    exercise_id: Optional[str] = None


class SurveyResponseQuery(BaseModel):
    """Filters for listing survey responses."""
    survey_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[ResponseStatus] = None
    limit: Optional[int] = Field(None, ge=1)
    offset: Optional[int] = Field(None, ge=0)
