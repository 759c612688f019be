"""Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import copy
import json
import os
from datetime import datetime
from typing import Generator, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Set required environment variables for tests BEFORE importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RESPONSES_TABLE", "GAME_DATA")

from survey_app.models.database import Base
from survey_app.models.response import GameDataRecord


SIMPLE_SURVEY = {
    "id": "s1",
    "title": "T",
    "sections": [
        {
            "id": "sec1",
            "title": "S",
            "questions": [
                {"id": "q1", "type": "text", "question": "Q?", "required": True}
            ],
        }
    ],
}

FEEDBACK_SURVEY = {
    "id": "customer_feedback",
    "title": "Customer Feedback",
    "description": "Tell us how we did",
    "welcome": {"title": "Welcome", "message": "Thanks for taking part."},
    "thankYou": {"title": "Thank you", "message": "Your answers were recorded."},
    "settings": {"branding": {"companyName": "Acme", "poweredBy": "Survey Taker"}},
    "sections": [
        {
            "id": "about",
            "title": "About you",
            "questions": [
                {"id": "name", "type": "text", "question": "Your name?", "required": True},
                {
                    "id": "role",
                    "type": "radio",
                    "question": "Your role?",
                    "options": ["Engineer", "Manager", "Other"],
                    "required": True,
                },
                {"id": "newsletter", "type": "yesno", "question": "Subscribe?"},
            ],
        },
        {
            "id": "product",
            "title": "The product",
            "questions": [
                {"id": "score", "type": "rating", "question": "Overall score?", "required": True},
                {
                    "id": "features",
                    "type": "checkbox",
                    "question": "Which features do you use?",
                    "options": ["Reports", "Exports", "Alerts"],
                },
                {
                    "id": "priorities",
                    "type": "ranking",
                    "question": "Rank these priorities",
                    "options": ["Speed", "Price", "Support"],
                    "required": True,
                },
                {
                    "id": "ease",
                    "type": "likert",
                    "question": "The product is easy to use",
                    "options": ["Disagree", "Neutral", "Agree"],
                },
            ],
        },
    ],
}


@pytest.fixture
def simple_survey() -> dict:
    """Provide the minimal one-question survey document."""
    return copy.deepcopy(SIMPLE_SURVEY)


@pytest.fixture
def feedback_survey() -> dict:
    """Provide a two-section survey covering every question type."""
    return copy.deepcopy(FEEDBACK_SURVEY)


@pytest.fixture
def surveys_dir(tmp_path, simple_survey, feedback_survey):
    """Create a surveys directory holding the sample documents.

    Yields:
        Path: Directory with s1.json and customer_feedback.json
    """
    (tmp_path / "s1.json").write_text(json.dumps(simple_survey))
    (tmp_path / "customer_feedback.json").write_text(json.dumps(feedback_survey))
    return tmp_path


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine with SQLite in-memory database.

    Yields:
        Engine: SQLAlchemy engine for testing

    Note:
        StaticPool shares the single in-memory connection with the threads
        the TestClient runs sync endpoints on.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session.

    Args:
        db_engine: Test database engine fixture

    Yields:
        Session: SQLAlchemy session for testing
    """
    TestSessionLocal = sessionmaker(
        bind=db_engine,
        autocommit=False,
        autoflush=False,
    )

    session = TestSessionLocal()

    yield session

    session.rollback()
    session.close()


def make_record(
    record_id: str,
    survey_id: str,
    answers: dict,
    timestamp: datetime,
    status: Optional[str] = "completed",
    nested: bool = False,
) -> GameDataRecord:
    """Build a GAME_DATA row the way the survey platform writes it."""
    payload = {"surveyId": survey_id, "surveyTitle": f"Survey {survey_id}", "answers": answers}
    if nested:
        payload = {"type": "survey", "data": json.dumps(payload)}
    return GameDataRecord(
        id=record_id,
        data=json.dumps(payload),
        timestamp=timestamp,
        status=status,
        session_id=f"session-{record_id}",
        time_spent=120.0,
    )


@pytest.fixture
def seeded_session(db_session) -> Session:
    """Provide a session whose GAME_DATA table holds four responses.

    s1 has three responses (one nested in a platform envelope, one partial);
    customer_feedback has one.
    """
    db_session.add_all([
        make_record("r1", "s1", {"q1": "first"}, datetime(2024, 1, 1, 9, 0)),
        make_record("r2", "s1", {"q1": "second"}, datetime(2024, 1, 2, 9, 0), nested=True),
        make_record("r3", "s1", {"q1": ""}, datetime(2024, 1, 3, 9, 0), status="partial"),
        make_record("r4", "customer_feedback", {"name": "Ada"}, datetime(2024, 1, 4, 9, 0)),
    ])
    db_session.commit()
    return db_session


@pytest.fixture
def record_factory():
    """Provide make_record for tests that add their own rows."""
    return make_record
