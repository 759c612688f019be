"""Structural validator for survey documents.

Survey documents are plain JSON objects produced by the survey builder (or
hand-written files). Before a document is rendered, this module checks that:
- the survey has an id, a title and at least one section or question
- every section has an id, a title and at least one question
- every question has an id, prompt text and a recognised type
- option-bearing questions declare non-blank options

Checks run in document order and stop at the first failure, whose message
names the offending section/question by its 1-based position.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from survey_app.schemas.survey import QuestionType
from survey_app.logging_config import get_logger

logger = get_logger(__name__)

VALID_TYPES = [t.value for t in QuestionType]


@dataclass(frozen=True)
class ValidationResult:
    """Result of a structural check.

    Attributes:
        is_valid: Whether the document passed
        error: Human-readable reason when it did not
    """
    is_valid: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def fail(cls, error: str) -> "ValidationResult":
        return cls(is_valid=False, error=error)

    def to_dict(self) -> dict:
        """Serialise in the shape the form renderer expects."""
        if self.is_valid:
            return {"isValid": True}
        return {"isValid": False, "error": self.error}


def _non_empty_list(value: Any) -> bool:
    return isinstance(value, list) and len(value) > 0


class SurveyValidator:
    """Service for validating survey document structure."""

    @staticmethod
    def validate_survey(survey: Any) -> ValidationResult:
        """Validate a complete survey document.

        Args:
            survey: Decoded survey document

        Returns:
            ValidationResult; never raises

        Example:
            >>> SurveyValidator.validate_survey({"id": "s1", "title": "T"})
            ValidationResult(is_valid=False, error='Survey must have either "sections" or "questions" array')
        """
        try:
            if not isinstance(survey, Mapping):
                return ValidationResult.fail("Survey data is not a valid object")

            if not survey.get("id"):
                return ValidationResult.fail('Survey is missing required "id" field')

            if not survey.get("title"):
                return ValidationResult.fail('Survey is missing required "title" field')

            sections = survey.get("sections")
            questions = survey.get("questions")
            has_sections = _non_empty_list(sections)
            has_questions = _non_empty_list(questions)

            if not has_sections and not has_questions:
                return ValidationResult.fail('Survey must have either "sections" or "questions" array')

            if has_sections:
                for i, section in enumerate(sections):
                    result = SurveyValidator.validate_section(section, i)
                    if not result.is_valid:
                        return ValidationResult.fail(f"Section {i + 1}: {result.error}")

            # Legacy flat structure
            if has_questions:
                for i, question in enumerate(questions):
                    result = SurveyValidator.validate_question(question, i)
                    if not result.is_valid:
                        return ValidationResult.fail(f"Question {i + 1}: {result.error}")

            return ValidationResult.ok()
        except Exception as e:
            logger.error(f"Unexpected error validating survey: {e}", exc_info=True)
            return ValidationResult.fail(f"Validation error: {e}")

    @staticmethod
    def validate_section(section: Any, index: int) -> ValidationResult:
        """Validate one section and the questions it holds.

        Args:
            section: Decoded section object
            index: 0-based position of the section in the survey

        Returns:
            ValidationResult
        """
        if not isinstance(section, Mapping):
            return ValidationResult.fail("Section is not a valid object")

        if not section.get("id"):
            return ValidationResult.fail('Section is missing required "id" field')

        if not section.get("title"):
            return ValidationResult.fail('Section is missing required "title" field')

        questions = section.get("questions")
        if not isinstance(questions, list):
            return ValidationResult.fail('Section must have a "questions" array')

        if len(questions) == 0:
            return ValidationResult.fail("Section must have at least one question")

        for i, question in enumerate(questions):
            result = SurveyValidator.validate_question(question, i)
            if not result.is_valid:
                return ValidationResult.fail(f"Question {i + 1}: {result.error}")

        return ValidationResult.ok()

    @staticmethod
    def validate_question(question: Any, index: int) -> ValidationResult:
        """Validate a single question.

        Args:
            question: Decoded question object
            index: 0-based position of the question in its container

        Returns:
            ValidationResult
        """
        if not isinstance(question, Mapping):
            return ValidationResult.fail("Question is not a valid object")

        if not question.get("id"):
            return ValidationResult.fail('Question is missing required "id" field')

        text = question.get("question")
        if not text or not isinstance(text, str):
            return ValidationResult.fail('Question is missing required "question" field')

        question_type = question.get("type")
        if not question_type or not isinstance(question_type, str):
            return ValidationResult.fail('Question is missing required "type" field')

        if question_type not in VALID_TYPES:
            return ValidationResult.fail(
                f"Invalid question type: {question_type}. Must be one of: {', '.join(VALID_TYPES)}"
            )

        if QuestionType(question_type).requires_options:
            options = question.get("options")
            if not isinstance(options, list):
                return ValidationResult.fail(f'Question type "{question_type}" requires an "options" array')

            if len(options) == 0:
                return ValidationResult.fail(f'Question type "{question_type}" must have at least one option')

            for i, option in enumerate(options):
                if not isinstance(option, str) or option.strip() == "":
                    return ValidationResult.fail(f"Option {i + 1} must be a non-empty string")

        if "required" in question and not isinstance(question["required"], bool):
            return ValidationResult.fail('Question "required" field must be a boolean')

        return ValidationResult.ok()
