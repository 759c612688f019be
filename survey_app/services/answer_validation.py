"""Answer validation for survey questions.

Two checks are offered for an answer value:
- ``validate_answer``: is this a complete, acceptable answer for a question
  with the given type and required flag? Used to gate navigation and
  submission.
- ``is_meaningful_answer``: has the respondent entered anything at all?
  Used for progress display, so it is deliberately looser (a partial
  ranking counts, a rating has no upper bound).
"""

import math
from collections.abc import Mapping
from typing import Any, Callable, Optional, Union

from survey_app.schemas.survey import QuestionType
from survey_app.logging_config import get_logger

logger = get_logger(__name__)

MAX_RATING = 5


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a rating or rank
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_text(answer: Any) -> bool:
    return isinstance(answer, str) and len(answer.strip()) > 0


def _is_selection(answer: Any) -> bool:
    return isinstance(answer, list) and len(answer) > 0


def _is_choice(answer: Any) -> bool:
    return isinstance(answer, str) and len(answer) > 0


def _is_rating(answer: Any) -> bool:
    return _is_number(answer) and 0 < answer <= MAX_RATING


def _has_rankings(answer: Any) -> bool:
    return isinstance(answer, Mapping) and len(answer) > 0


def is_sequential_ranking(ranks: list) -> bool:
    """Check that ranks run 1..N without gaps or duplicates.

    Args:
        ranks: Rank values assigned to options

    Returns:
        True if every rank is a positive number and the ranks, sorted,
        are exactly 1..len(ranks)
    """
    if not ranks:
        return False
    if not all(_is_number(rank) and math.isfinite(rank) and rank > 0 for rank in ranks):
        return False

    return sorted(ranks) == list(range(1, len(ranks) + 1))


def _is_complete_ranking(answer: Any, total_options: Optional[int]) -> bool:
    if not isinstance(answer, Mapping):
        return False

    ranked_count = len(answer)
    if total_options is not None and ranked_count != total_options:
        return False
    if ranked_count == 0:
        return False

    return is_sequential_ranking(list(answer.values()))


# Rules for answers that must be complete (required questions)
_COMPLETE_RULES: dict[QuestionType, Callable[[Any], bool]] = {
    QuestionType.TEXT: _is_text,
    QuestionType.CHECKBOX: _is_selection,
    QuestionType.RADIO: _is_choice,
    QuestionType.LIKERT: _is_choice,
    QuestionType.YESNO: _is_choice,
    QuestionType.RATING: _is_rating,
}

# Rules for "the respondent has touched this question"
_PRESENT_RULES: dict[QuestionType, Callable[[Any], bool]] = {
    QuestionType.TEXT: _is_text,
    QuestionType.CHECKBOX: _is_selection,
    QuestionType.RADIO: _is_choice,
    QuestionType.LIKERT: _is_choice,
    QuestionType.YESNO: _is_choice,
    QuestionType.RATING: lambda answer: _is_number(answer) and answer > 0,
    QuestionType.RANKING: _has_rankings,
}


def _coerce_type(question_type: Union[QuestionType, str]) -> Optional[QuestionType]:
    try:
        return QuestionType(question_type)
    except ValueError:
        return None


class AnswerValidator:
    """Service for validating answers against their question type."""

    @staticmethod
    def validate_answer(
        answer: Any,
        question_type: Union[QuestionType, str],
        required: bool = False,
        total_ranking_options: Optional[int] = None,
    ) -> bool:
        """Validate an answer for a question.

        Optional questions accept anything, including no answer. For required
        questions the answer must match the question type:
        - text: non-blank string
        - checkbox: non-empty list
        - radio/likert/yesno: non-empty string
        - rating: number in (0, 5]
        - ranking: every option ranked once, ranks 1..N

        Args:
            answer: Answer value, or None when unanswered
            question_type: Question type (enum member or its string value)
            required: Whether the question is required
            total_ranking_options: Option count a ranking must cover, if known

        Returns:
            True if the answer is acceptable

        Example:
            >>> AnswerValidator.validate_answer({"A": 1, "B": 2}, "ranking", True, 2)
            True
        """
        if not required:
            return True

        if answer is None:
            return False

        resolved = _coerce_type(question_type)
        if resolved is None:
            logger.debug(f"Unknown question type {question_type!r}, falling back to truthiness")
            return bool(answer)

        if resolved == QuestionType.RANKING:
            return _is_complete_ranking(answer, total_ranking_options)

        return _COMPLETE_RULES[resolved](answer)

    @staticmethod
    def is_meaningful_answer(answer: Any, question_type: Union[QuestionType, str]) -> bool:
        """Check whether an answer has any content, regardless of validity.

        Args:
            answer: Answer value, or None when unanswered
            question_type: Question type (enum member or its string value)

        Returns:
            True if the respondent has entered something for the question
        """
        if answer is None:
            return False

        resolved = _coerce_type(question_type)
        if resolved is None:
            return bool(answer)

        return _PRESENT_RULES[resolved](answer)


validate_answer = AnswerValidator.validate_answer
is_meaningful_answer = AnswerValidator.is_meaningful_answer
