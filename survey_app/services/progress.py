"""Answer progress and navigation for survey sections.

Functions here accept either decoded survey documents (plain mappings) or
the typed models from ``survey_app.schemas.survey``.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Optional

from survey_app.schemas.survey import QuestionType
from survey_app.services.answer_validation import AnswerValidator
from survey_app.logging_config import get_logger

logger = get_logger(__name__)

WELCOME_ID = "welcome"
THANK_YOU_ID = "thank-you"


class SectionStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True)
class QuestionProgress:
    """Answered-question count for one section.

    Attributes:
        current: Questions with a meaningful answer
        total: Questions in the section
        percentage: current/total as a rounded percentage (0 when empty)
    """
    current: int
    total: int
    percentage: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SectionProgress:
    """One step of the progress strip shown above the survey."""
    id: str
    label: str
    title: str
    status: SectionStatus
    section_index: Optional[int] = None
    is_welcome: bool = False
    is_thank_you: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "title": self.title,
            "status": self.status.value,
            "sectionIndex": self.section_index,
            "isWelcome": self.is_welcome,
            "isThankYou": self.is_thank_you,
        }


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _questions(section: Any) -> list:
    return _field(section, "questions") or []


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_question_progress(section: Any, answers: Mapping) -> QuestionProgress:
    """Count the questions in a section that have been answered.

    An answer counts once the respondent has entered anything for it, even
    if it would not yet pass ``validate_answer``.

    Args:
        section: Section holding the questions
        answers: Mapping of question ID to answer value

    Returns:
        QuestionProgress for the section

    Example:
        >>> section = {"id": "s", "title": "S", "questions": [{"id": "q1", "type": "text"}]}
        >>> compute_question_progress(section, {"q1": "hello"})
        QuestionProgress(current=1, total=1, percentage=100)
    """
    questions = _questions(section)
    total = len(questions)
    current = sum(
        1 for q in questions
        if AnswerValidator.is_meaningful_answer(answers.get(_field(q, "id")), _field(q, "type"))
    )
    percentage = _round_half_up(current / total * 100) if total > 0 else 0
    return QuestionProgress(current=current, total=total, percentage=percentage)


def can_advance(section: Any, answers: Mapping) -> bool:
    """Check whether every required question in a section is validly answered.

    Ranking questions must rank every one of their options.

    Args:
        section: Current section, or None when out of range
        answers: Mapping of question ID to answer value

    Returns:
        True if the respondent may move past the section
    """
    if section is None:
        return False

    for q in _questions(section):
        question_type = _field(q, "type")
        total_options = None
        if question_type == QuestionType.RANKING:
            total_options = len(_field(q, "options") or [])

        if not AnswerValidator.validate_answer(
            answers.get(_field(q, "id")),
            question_type,
            _field(q, "required", False),
            total_options,
        ):
            logger.debug(f"Question {_field(q, 'id')} blocks section {_field(section, 'id')}")
            return False
    return True


def build_section_progress(
    survey: Any,
    current_section_index: int,
    is_completed: bool = False,
) -> list[SectionProgress]:
    """Build the progress strip for a survey.

    The strip holds an optional welcome step, one step per section and an
    optional thank-you step.

    Args:
        survey: Survey document or model
        current_section_index: Index of the section being shown; -1 while on
            the welcome screen
        is_completed: Whether the survey has been submitted

    Returns:
        List of SectionProgress in display order
    """
    sections = _field(survey, "sections") or []
    if not sections:
        return []

    steps: list[SectionProgress] = []

    if _field(survey, "welcome"):
        status = SectionStatus.ACTIVE if current_section_index == -1 else SectionStatus.PENDING
        steps.append(SectionProgress(
            id=WELCOME_ID, label="W", title="Welcome", status=status, is_welcome=True
        ))

    for index, section in enumerate(sections):
        if index < current_section_index:
            status = SectionStatus.COMPLETED
        elif index == current_section_index:
            status = SectionStatus.ACTIVE
        else:
            status = SectionStatus.PENDING
        steps.append(SectionProgress(
            id=_field(section, "id"),
            label=str(index + 1),
            title=_field(section, "title"),
            status=status,
            section_index=index,
        ))

    # Both the builder's camelCase key and the model attribute are accepted
    thank_you = _field(survey, "thankYou") or _field(survey, "thank_you")
    if thank_you:
        status = SectionStatus.ACTIVE if is_completed else SectionStatus.PENDING
        steps.append(SectionProgress(
            id=THANK_YOU_ID, label="T", title="Thank You", status=status, is_thank_you=True
        ))

    return steps
