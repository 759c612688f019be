"""Survey document endpoints used by the form renderer.

The renderer fetches survey documents, validates documents it receives from
elsewhere (file upload, platform message), and asks for section progress as
the respondent answers.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, Field

from survey_app.services.progress import (
    build_section_progress,
    can_advance,
    compute_question_progress,
)
from survey_app.services.survey_loader import (
    SurveyLoader,
    SurveyNotFoundError,
    SurveyValidationError,
    get_survey_loader,
)
from survey_app.services.survey_validator import SurveyValidator
from survey_app.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/surveys")


class ProgressRequest(BaseModel):
    """Answers entered so far, keyed by question ID."""
    answers: dict[str, Any] = Field(default_factory=dict)


def _load(loader: SurveyLoader, survey_id: str):
    try:
        return loader.load_survey(survey_id)
    except SurveyNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SurveyValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("")
def list_surveys(loader: SurveyLoader = Depends(get_survey_loader)) -> dict:
    """List the IDs of the available survey documents."""
    return {"surveys": loader.list_surveys()}


@router.get("/{survey_id}")
def get_survey(survey_id: str, loader: SurveyLoader = Depends(get_survey_loader)) -> dict:
    """Return a validated survey document.

    Raises:
        HTTPException: 404 if the survey does not exist, 422 if it is invalid
    """
    survey = _load(loader, survey_id)
    return survey.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.post("/validate")
def validate_survey(document: Any = Body(...)) -> dict:
    """Validate a survey document without loading it.

    Example response:
        {"isValid": false, "error": "Section 1: Section must have at least one question"}
    """
    result = SurveyValidator.validate_survey(document)
    if not result.is_valid:
        logger.info(f"Rejected survey document: {result.error}")
    return result.to_dict()


@router.post("/{survey_id}/sections/{section_index}/progress")
def section_progress(
    survey_id: str,
    section_index: int,
    request: ProgressRequest,
    loader: SurveyLoader = Depends(get_survey_loader),
) -> dict:
    """Report answer progress for one section.

    Returns:
        dict with ``progress`` (current/total/percentage), ``canAdvance``
        (every required question validly answered) and ``sections`` (the
        progress strip with this section active)
    """
    survey = _load(loader, survey_id)
    sections = survey.get_sections()
    if not 0 <= section_index < len(sections):
        raise HTTPException(status_code=404, detail=f"Section {section_index} not found in survey '{survey_id}'")

    section = sections[section_index]
    progress = compute_question_progress(section, request.answers)

    return {
        "progress": progress.to_dict(),
        "canAdvance": can_advance(section, request.answers),
        "sections": [step.to_dict() for step in build_section_progress(survey, section_index)],
    }
