"""Survey loader service with caching and validation.

This module loads survey documents from JSON or YAML files, checks their
structure with ``SurveyValidator``, parses them into Pydantic models and
caches the results.
"""

import json
from pathlib import Path
from functools import lru_cache
from typing import Any, Optional
import yaml
from pydantic import ValidationError

from survey_app.config import get_settings
from survey_app.schemas.survey import Survey
from survey_app.services.survey_validator import SurveyValidator
from survey_app.logging_config import get_logger

logger = get_logger(__name__)

SURVEY_EXTENSIONS = (".json", ".yaml", ".yml")


class SurveyNotFoundError(Exception):
    """Raised when a survey file is not found."""
    pass


class SurveyValidationError(Exception):
    """Raised when a survey fails validation."""
    pass


class SurveyLoader:
    """Service for loading and caching survey documents.

    Surveys are read from ``<surveys_dir>/<survey_id>.json`` (or ``.yaml`` /
    ``.yml``). The first matching extension wins.
    """

    def __init__(self, surveys_dir: Optional[str] = None):
        """Initialize survey loader.

        Args:
            surveys_dir: Path to surveys directory (defaults to settings.surveys_dir)
        """
        if surveys_dir is None:
            surveys_dir = get_settings().surveys_dir

        self.surveys_dir = Path(surveys_dir)

        if not self.surveys_dir.exists():
            logger.warning(f"Surveys directory not found: {self.surveys_dir}")

    def _find_survey_file(self, survey_id: str) -> Optional[Path]:
        for extension in SURVEY_EXTENSIONS:
            path = self.surveys_dir / f"{survey_id}{extension}"
            if path.exists():
                return path
        return None

    @staticmethod
    def _read_document(path: Path, survey_id: str) -> Any:
        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.suffix == ".json":
                    return json.load(f)
                return yaml.safe_load(f)
        except json.JSONDecodeError as e:
            logger.error(f"JSON parsing error for {survey_id}: {e}")
            raise SurveyValidationError(f"Invalid JSON in survey '{survey_id}': {e}")
        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error for {survey_id}: {e}")
            raise SurveyValidationError(f"Invalid YAML in survey '{survey_id}': {e}")
        except OSError as e:
            logger.error(f"Error reading survey file {path}: {e}")
            raise SurveyValidationError(f"Error reading survey '{survey_id}': {e}")

    @lru_cache(maxsize=128)
    def load_survey(self, survey_id: str) -> Survey:
        """Load and validate a survey document.

        Results are cached. Clear cache with clear_cache() if needed.

        Args:
            survey_id: Survey identifier (file name without extension)

        Returns:
            Validated Survey object

        Raises:
            SurveyNotFoundError: If no survey file exists
            SurveyValidationError: If the file cannot be parsed or fails validation

        Example:
            >>> loader = SurveyLoader()
            >>> survey = loader.load_survey("customer_feedback")
            >>> print(survey.title)
            'Customer Feedback'
        """
        path = self._find_survey_file(survey_id)
        if path is None:
            logger.error(f"Survey file not found: {survey_id}", extra={"survey_id": survey_id})
            raise SurveyNotFoundError(f"Survey '{survey_id}' not found in {self.surveys_dir}")

        raw_data = self._read_document(path, survey_id)

        result = SurveyValidator.validate_survey(raw_data)
        if not result.is_valid:
            logger.error(f"Validation error for survey {survey_id}: {result.error}")
            raise SurveyValidationError(f"Validation failed for survey '{survey_id}': {result.error}")

        try:
            survey = Survey.model_validate(raw_data)
        except ValidationError as e:
            logger.error(f"Schema error for survey {survey_id}: {e}")
            raise SurveyValidationError(f"Validation failed for survey '{survey_id}': {e}")

        if survey.id != survey_id:
            logger.warning(f"Survey file {path.name} declares id '{survey.id}'")

        # Sections take precedence; flat questions are only used when there are none
        if survey.sections and survey.questions:
            logger.warning(
                f"Survey {survey_id} has both sections and flat questions; "
                f"ignoring {len(survey.questions)} flat questions",
                extra={"survey_id": survey_id}
            )

        logger.info(f"Successfully loaded survey: {survey_id}", extra={"survey_id": survey_id})
        return survey

    def list_surveys(self) -> list[str]:
        """List all available survey IDs.

        Returns:
            Sorted survey IDs (file names without extension)
        """
        if not self.surveys_dir.exists():
            return []

        survey_ids = {
            f.stem for f in self.surveys_dir.iterdir()
            if f.is_file() and f.suffix in SURVEY_EXTENSIONS
        }

        logger.debug(f"Found {len(survey_ids)} surveys: {sorted(survey_ids)}")
        return sorted(survey_ids)

    def clear_cache(self):
        """Clear the survey cache.

        Useful during development or when surveys are updated at runtime.
        """
        self.load_survey.cache_clear()
        logger.info("Survey cache cleared")


# Global singleton instance
_loader_instance: Optional[SurveyLoader] = None


def get_survey_loader() -> SurveyLoader:
    """Get global SurveyLoader instance.

    Creates singleton instance on first call.

    Returns:
        Global SurveyLoader instance
    """
    global _loader_instance
    if _loader_instance is None:
        _loader_instance = SurveyLoader()
    return _loader_instance
