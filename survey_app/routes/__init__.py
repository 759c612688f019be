"""Routes package for FastAPI endpoints."""

from survey_app.routes import health, responses, surveys

__all__ = ["health", "responses", "surveys"]
