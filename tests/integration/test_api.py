"""Integration tests for the HTTP API.

Runs the FastAPI app with the warehouse session and survey loader swapped
for test doubles backed by SQLite and a temporary surveys directory.
"""

import json
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from survey_app.main import app
from survey_app.models.database import get_db
from survey_app.routes.responses import get_response_service
from survey_app.services.survey_loader import SurveyLoader, get_survey_loader

PREFIX = "/api/survey-responses"


@pytest.fixture
def client(seeded_session, surveys_dir):
    """Provide a TestClient wired to the seeded session and sample surveys."""
    loader = SurveyLoader(surveys_dir)

    def override_get_db():
        yield seeded_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_survey_loader] = lambda: loader

    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()


class TestServiceEndpoints:
    """Tests for root, health and error envelope."""

    def test_root(self, client):
        body = client.get("/").json()
        assert body["service"] == "Survey Taker"
        assert body["status"] == "operational"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["database"] == "connected"

    def test_health_database_down(self, client):
        broken = Mock()
        broken.execute.side_effect = OperationalError("SELECT 1", {}, Exception("down"))
        app.dependency_overrides[get_db] = lambda: broken

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json() == {
            "success": False,
            "error": "Service unavailable - database connection failed",
        }

    def test_unknown_route(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Route not found"}

    def test_unhandled_exception(self, client):
        failing = Mock()
        failing.get_survey_responses.side_effect = RuntimeError("boom")
        app.dependency_overrides[get_response_service] = lambda: failing

        response = client.get(PREFIX)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "boom"}


class TestResponseEndpoints:
    """Tests for the survey-responses routes."""

    def test_list_responses(self, client):
        body = client.get(PREFIX).json()

        assert body["success"] is True
        assert body["count"] == 4
        assert [r["id"] for r in body["data"]] == ["r4", "r3", "r2", "r1"]

    def test_list_uses_camel_case(self, client):
        body = client.get(PREFIX, params={"surveyId": "customer_feedback"}).json()

        record = body["data"][0]
        assert record["surveyId"] == "customer_feedback"
        assert record["sessionId"] == "session-r4"
        assert record["answers"] == {"name": "Ada"}
        assert record["timeSpent"] == 120.0

    def test_list_with_filters(self, client):
        params = {"surveyId": "s1", "status": "completed", "startDate": "2024-01-01T12:00:00"}
        body = client.get(PREFIX, params=params).json()

        assert [r["id"] for r in body["data"]] == ["r2"]

    def test_invalid_status(self, client):
        assert client.get(PREFIX, params={"status": "archived"}).status_code == 422

    def test_invalid_table_name(self, client):
        response = client.get(PREFIX, params={"tableName": "x; DROP TABLE y"})

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "Invalid table name" in response.json()["error"]

    def test_missing_table(self, client):
        response = client.get(PREFIX, params={"tableName": "NO_SUCH_TABLE"})

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert response.json()["error"].startswith("Failed to fetch survey responses")

    def test_survey_responses_with_total(self, client):
        body = client.get(f"{PREFIX}/s1", params={"limit": 1}).json()

        assert body["success"] is True
        assert body["count"] == 1
        assert body["total"] == 3
        assert body["data"][0]["id"] == "r3"

    def test_survey_response_count(self, client):
        assert client.get(f"{PREFIX}/s1/count").json() == {"success": True, "count": 3}
        assert client.get(f"{PREFIX}/unknown/count").json() == {"success": True, "count": 0}

    def test_count_missing_table(self, client):
        response = client.get(f"{PREFIX}/s1/count", params={"tableName": "NO_SUCH_TABLE"})
        assert response.status_code == 500
        assert response.json()["error"].startswith("Failed to get response count")


class TestSurveyEndpoints:
    """Tests for the survey document routes."""

    def test_list_surveys(self, client):
        assert client.get("/api/surveys").json() == {"surveys": ["customer_feedback", "s1"]}

    def test_get_survey(self, client):
        body = client.get("/api/surveys/customer_feedback").json()

        assert body["id"] == "customer_feedback"
        assert body["thankYou"]["title"] == "Thank you"
        assert body["sections"][1]["questions"][2]["type"] == "ranking"

    def test_get_missing_survey(self, client):
        response = client.get("/api/surveys/missing")

        assert response.status_code == 404
        assert "not found" in response.json()["error"]

    def test_get_invalid_survey(self, client, surveys_dir):
        (surveys_dir / "broken.json").write_text(json.dumps({"id": "broken", "title": "B", "sections": []}))

        response = client.get("/api/surveys/broken")

        assert response.status_code == 422
        assert 'must have either "sections" or "questions"' in response.json()["error"]

    def test_validate_valid_document(self, client, simple_survey):
        response = client.post("/api/surveys/validate", json=simple_survey)
        assert response.json() == {"isValid": True}

    def test_validate_invalid_document(self, client, simple_survey):
        simple_survey["sections"][0]["questions"][0]["type"] = "radio"

        body = client.post("/api/surveys/validate", json=simple_survey).json()

        assert body == {
            "isValid": False,
            "error": 'Section 1: Question 1: Question type "radio" requires an "options" array',
        }

    def test_validate_non_object(self, client):
        body = client.post("/api/surveys/validate", json=["not", "a", "survey"]).json()
        assert body == {"isValid": False, "error": "Survey data is not a valid object"}

    def test_progress_unanswered(self, client):
        body = client.post("/api/surveys/s1/sections/0/progress", json={"answers": {}}).json()

        assert body["progress"] == {"current": 0, "total": 1, "percentage": 0}
        assert body["canAdvance"] is False
        assert body["sections"][0]["status"] == "active"

    def test_progress_answered(self, client):
        body = client.post("/api/surveys/s1/sections/0/progress", json={"answers": {"q1": "hello"}}).json()

        assert body["progress"] == {"current": 1, "total": 1, "percentage": 100}
        assert body["canAdvance"] is True

    def test_progress_partial_ranking(self, client):
        """Test a partial ranking counts for progress but blocks advancing."""
        answers = {"score": 4, "priorities": {"Speed": 1}}
        body = client.post(
            "/api/surveys/customer_feedback/sections/1/progress", json={"answers": answers}
        ).json()

        assert body["progress"] == {"current": 2, "total": 4, "percentage": 50}
        assert body["canAdvance"] is False
        assert [s["status"] for s in body["sections"]] == ["pending", "completed", "active", "pending"]

    def test_progress_flat_survey(self, client, surveys_dir):
        legacy = {"id": "legacy", "title": "L", "questions": [{"id": "q", "type": "yesno", "question": "?"}]}
        (surveys_dir / "legacy.json").write_text(json.dumps(legacy))

        body = client.post("/api/surveys/legacy/sections/0/progress", json={"answers": {"q": "Yes"}}).json()

        assert body["progress"]["percentage"] == 100
        assert body["canAdvance"] is True
        assert body["sections"] == []

    def test_progress_unknown_section(self, client):
        response = client.post("/api/surveys/s1/sections/3/progress", json={"answers": {}})
        assert response.status_code == 404
