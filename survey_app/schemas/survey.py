"""Pydantic schemas for survey documents.

Survey documents arrive as JSON (or YAML) from the survey builder. They are
first checked structurally by ``SurveyValidator`` and then parsed into these
models so the rest of the service can work with typed objects.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class QuestionType(str, Enum):
    """Valid question types in survey definitions."""
    TEXT = "text"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    LIKERT = "likert"
    YESNO = "yesno"
    RATING = "rating"
    RANKING = "ranking"

    @property
    def requires_options(self) -> bool:
        """Whether questions of this type must declare an options list."""
        return self in OPTION_TYPES


OPTION_TYPES = frozenset({
    QuestionType.RADIO,
    QuestionType.CHECKBOX,
    QuestionType.LIKERT,
    QuestionType.RANKING,
})

# Answer value as submitted by the form renderer
AnswerValue = Union[str, int, float, list[str], dict[str, int]]


class SurveyModel(BaseModel):
    """Base for survey models; accepts the builder's camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class SurveyQuestion(SurveyModel):
    """A single question.

    Attributes:
        id: Unique question identifier (answers are keyed by it)
        question: Prompt text
        type: Question type
        options: Choices for radio/checkbox/likert/ranking questions
        required: Whether an answer is needed to advance
        description: Optional helper text
    """
    id: str = Field(..., min_length=1, description="Question identifier")
    question: str = Field(..., min_length=1, description="Prompt text")
    type: QuestionType = Field(..., description="Question type")
    options: Optional[list[str]] = Field(None, description="Answer options")
    required: bool = Field(False, description="Answer required to advance")
    description: Optional[str] = Field(None, description="Helper text")

    @field_validator("options")
    @classmethod
    def options_not_blank(cls, v):
        """Reject blank option labels."""
        if v is not None:
            for i, option in enumerate(v):
                if not option.strip():
                    raise ValueError(f"Option {i + 1} must be a non-empty string")
        return v

    @model_validator(mode="after")
    def validate_options_for_type(self):
        """Option-bearing types need at least one option."""
        if self.type.requires_options and not self.options:
            raise ValueError(f'Question type "{self.type.value}" must have at least one option')
        return self


class SurveySection(SurveyModel):
    """A named group of questions shown on one page."""
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    questions: list[SurveyQuestion] = Field(..., min_length=1)


class SurveyWelcome(SurveyModel):
    title: str
    message: str


class SurveyThankYou(SurveyModel):
    title: str
    message: str


class SurveyBranding(SurveyModel):
    company_name: Optional[str] = None
    powered_by: Optional[str] = None


class SurveySettings(SurveyModel):
    branding: Optional[SurveyBranding] = None


class Survey(SurveyModel):
    """Complete survey document.

    A survey carries either ``sections`` or, in the legacy flat form, a
    top-level ``questions`` list.
    """
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    welcome: Optional[SurveyWelcome] = None
    thank_you: Optional[SurveyThankYou] = None
    settings: Optional[SurveySettings] = None
    sections: list[SurveySection] = Field(default_factory=list)
    questions: list[SurveyQuestion] = Field(default_factory=list)

    @field_validator("sections", "questions", mode="before")
    @classmethod
    def empty_when_null(cls, v):
        """Treat a null list (a bare ``questions:`` key in YAML) as empty."""
        return [] if v is None else v

    @model_validator(mode="after")
    def validate_has_questions(self):
        """Ensure the survey has sections or flat questions."""
        if not self.sections and not self.questions:
            raise ValueError('Survey must have either "sections" or "questions" array')
        return self

    def get_sections(self) -> list[SurveySection]:
        """Return the survey's sections.

        A legacy flat survey is exposed as a single section holding all of
        its questions.
        """
        if self.sections:
            return self.sections
        return [SurveySection(id=self.id, title=self.title, questions=self.questions)]

    def get_question(self, question_id: str) -> Optional[SurveyQuestion]:
        """Get question by ID.

        Args:
            question_id: Question identifier

        Returns:
            SurveyQuestion if found, None otherwise
        """
        for section in self.get_sections():
            for question in section.questions:
                if question.id == question_id:
                    return question
        return None
