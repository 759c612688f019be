"""Pydantic schemas for data validation.

This package contains the Pydantic models for survey documents and the
survey responses served by the API.
"""

from survey_app.schemas.survey import (
    QuestionType,
    OPTION_TYPES,
    AnswerValue,
    SurveyQuestion,
    SurveySection,
    SurveyWelcome,
    SurveyThankYou,
    SurveyBranding,
    SurveySettings,
    Survey,
)
from survey_app.schemas.response import (
    ResponseStatus,
    SurveyResponse,
    SurveyResponseQuery,
)

__all__ = [
    "QuestionType",
    "OPTION_TYPES",
    "AnswerValue",
    "SurveyQuestion",
    "SurveySection",
    "SurveyWelcome",
    "SurveyThankYou",
    "SurveyBranding",
    "SurveySettings",
    "Survey",
    "ResponseStatus",
    "SurveyResponse",
    "SurveyResponseQuery",
]
