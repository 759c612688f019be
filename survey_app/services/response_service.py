"""Read access to submitted survey responses.

Responses live in a warehouse table written by the survey platform. Column
names vary between deployments (``DATA`` vs ``survey_data``, ``ID`` vs
``response_id`` and so on), and the payload column may hold JSON, JSON
encoded twice, or a platform envelope whose ``data`` key carries the actual
submission. ``map_row_to_response`` normalises all of these into
``SurveyResponse``.
"""

import json
import re
import time
from collections.abc import Iterator, Mapping
from contextlib import closing
from itertools import islice
from datetime import date, datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from survey_app.config import Settings, get_settings
from survey_app.schemas.response import ResponseStatus, SurveyResponse, SurveyResponseQuery
from survey_app.logging_config import get_logger

logger = get_logger(__name__)

# Optional database/schema qualifiers, e.g. ANALYTICS.PUBLIC.GAME_DATA
TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*(\.[A-Za-z_][A-Za-z0-9_$]*){0,2}$")

DATA_COLUMNS = ("data", "survey_data", "game_data")
ID_COLUMNS = ("id", "response_id", "game_data_id")
TIMESTAMP_COLUMNS = ("timestamp", "created_at", "created_timestamp")
COMPLETED_AT_COLUMNS = ("completed_at", "completed_timestamp")
SESSION_COLUMNS = ("session_id",)
TIME_SPENT_COLUMNS = ("time_spent", "timespent")
STATUS_COLUMNS = ("status",)
USER_COLUMNS = ("user_id", "userid")
ORGANIZATION_COLUMNS = ("organization_id", "organizationid", "org_id")
EXERCISE_COLUMNS = ("exercise_id", "exerciseid")


class ResponseServiceError(Exception):
    """Raised when survey responses cannot be read."""
    pass


class InvalidTableNameError(ResponseServiceError):
    """Raised when a requested table name is not a plain SQL identifier."""
    pass


def _get_value(row: Mapping, keys: tuple[str, ...]) -> Any:
    """Return the first non-null value among ``keys``, ignoring column case."""
    lowered = {str(k).lower(): v for k, v in row.items()}
    for key in keys:
        value = lowered.get(key.lower())
        if value is not None:
            return value
    return None


def _first(payloads: tuple[Mapping, ...], keys: tuple[str, ...]) -> Any:
    for key in keys:
        for payload in payloads:
            value = payload.get(key)
            if value:
                return value
    return None


def _decode_payload(raw: Any) -> tuple[Mapping, Mapping]:
    """Decode a payload column into (outer, inner) mappings.

    Raises:
        ValueError: If the payload is not a JSON object
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")

    parsed = json.loads(raw) if isinstance(raw, str) else raw
    # Double-encoded payloads decode to a string first
    if isinstance(parsed, str):
        parsed = json.loads(parsed)

    if not isinstance(parsed, Mapping):
        raise ValueError(f"payload is a {type(parsed).__name__}, not an object")

    inner = parsed.get("data")
    if isinstance(inner, str):
        inner = json.loads(inner)
    if not isinstance(inner, Mapping):
        inner = parsed

    return parsed, inner


def _to_iso(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _to_status(value: Any) -> ResponseStatus:
    if value is None:
        return ResponseStatus.COMPLETED
    try:
        return ResponseStatus(str(value).lower())
    except ValueError:
        logger.warning(f"Unknown response status {value!r}, treating as completed")
        return ResponseStatus.COMPLETED


def _to_float(value: Any) -> Optional[float]:
    if value in (None, "", 0):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Non-numeric time_spent {value!r}")
        return None


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value else None


def map_row_to_response(row: Mapping) -> SurveyResponse:
    """Map a warehouse row to a SurveyResponse.

    Args:
        row: Column name to value mapping for one row

    Returns:
        SurveyResponse; payload decoding failures yield empty answers

    Example:
        >>> row = {"ID": "r1", "DATA": '{"surveyId": "s1", "answers": {"q1": "yes"}}'}
        >>> map_row_to_response(row).answers
        {'q1': 'yes'}
    """
    answers: dict[str, Any] = {}
    survey_id = ""
    survey_title = ""

    raw_payload = _get_value(row, DATA_COLUMNS)
    if raw_payload is not None:
        try:
            outer, inner = _decode_payload(raw_payload)
            payloads = (inner, outer)
            answers = dict(_first(payloads, ("answers",)) or {})
            survey_id = str(_first(payloads, ("surveyId", "survey_id")) or "")
            survey_title = str(_first(payloads, ("surveyTitle", "survey_title")) or "")
        except (ValueError, TypeError) as e:
            logger.warning(f"Failed to parse response data: {e}; row keys: {list(row.keys())}")

    response_id = _get_value(row, ID_COLUMNS) or f"response_{int(time.time() * 1000)}"
    timestamp = _get_value(row, TIMESTAMP_COLUMNS) or datetime.now(timezone.utc)
    completed_at = _get_value(row, COMPLETED_AT_COLUMNS)

    return SurveyResponse(
        id=str(response_id),
        survey_id=survey_id,
        survey_title=survey_title,
        answers=answers,
        timestamp=_to_iso(timestamp),
        completed_at=_to_iso(completed_at) if completed_at else None,
        session_id=_optional_str(_get_value(row, SESSION_COLUMNS)),
        time_spent=_to_float(_get_value(row, TIME_SPENT_COLUMNS)),
        status=_to_status(_get_value(row, STATUS_COLUMNS)),
        user_id=_optional_str(_get_value(row, USER_COLUMNS)),
        organization_id=_optional_str(_get_value(row, ORGANIZATION_COLUMNS)),
        exercise_id=_optional_str(_get_value(row, EXERCISE_COLUMNS)),
    )


class ResponseService:
    """Service for reading survey responses from the warehouse."""

    def __init__(self, db: Session, settings: Optional[Settings] = None):
        """Initialize response service.

        Args:
            db: SQLAlchemy database session
            settings: Application settings (defaults to cached settings)
        """
        self.db = db
        self.settings = settings or get_settings()

    def _resolve_table(self, table_name: Optional[str]) -> str:
        name = table_name or self.settings.responses_table
        if not TABLE_NAME_PATTERN.match(name):
            raise InvalidTableNameError(f"Invalid table name: {name!r}")
        return name

    @staticmethod
    def _status_condition(status: ResponseStatus, params: dict[str, Any]) -> str:
        if status != ResponseStatus.COMPLETED:
            params["status"] = status.value
            return "LOWER(status) = :status"

        # Missing and unrecognised statuses are reported as completed
        placeholders = []
        for other in ResponseStatus:
            if other != ResponseStatus.COMPLETED:
                params[f"status_{other.value}"] = other.value
                placeholders.append(f":status_{other.value}")
        return f"(status IS NULL OR LOWER(status) NOT IN ({', '.join(placeholders)}))"

    def _iter_rows(self, query: SurveyResponseQuery, table: str, paginate: bool) -> Iterator[dict]:
        ts_column = self.settings.responses_timestamp_column
        conditions = []
        params: dict[str, Any] = {}
        bind_types = []

        if query.start_date is not None:
            conditions.append(f"{ts_column} >= :start_date")
            params["start_date"] = query.start_date
            bind_types.append(bindparam("start_date", type_=DateTime()))

        if query.end_date is not None:
            conditions.append(f"{ts_column} <= :end_date")
            params["end_date"] = query.end_date
            bind_types.append(bindparam("end_date", type_=DateTime()))

        if query.status is not None:
            conditions.append(self._status_condition(query.status, params))

        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        sql = f"SELECT * FROM {table} {where_clause} ORDER BY {ts_column} DESC"

        if paginate:
            sql += " LIMIT :limit OFFSET :offset"
            params["limit"] = query.limit or self.settings.default_query_limit
            params["offset"] = query.offset or 0

        statement = text(sql)
        if bind_types:
            statement = statement.bindparams(*bind_types)

        result = self.db.execute(statement, params)
        try:
            for row in result.mappings():
                yield dict(row)
        finally:
            result.close()

    def get_survey_responses(
        self,
        query: Optional[SurveyResponseQuery] = None,
        table_name: Optional[str] = None,
    ) -> list[SurveyResponse]:
        """Fetch survey responses, newest first.

        Date and status filters run in SQL. The survey id lives inside the
        JSON payload, so that filter (and with it pagination) is applied
        after decoding.

        Args:
            query: Filters and pagination
            table_name: Table to read instead of the configured default

        Returns:
            List of SurveyResponse

        Raises:
            InvalidTableNameError: If table_name is not a plain identifier
            ResponseServiceError: If the query fails
        """
        query = query or SurveyResponseQuery()
        table = self._resolve_table(table_name)
        rows = self._iter_rows(query, table, paginate=query.survey_id is None)

        try:
            with closing(rows):
                responses = (map_row_to_response(row) for row in rows)
                if query.survey_id is not None:
                    # Stop reading once the requested page is filled
                    offset = query.offset or 0
                    limit = query.limit or self.settings.default_query_limit
                    matching = (r for r in responses if r.survey_id == query.survey_id)
                    responses = islice(matching, offset, offset + limit)
                responses = list(responses)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching survey responses: {e}", extra={"table_name": table})
            raise ResponseServiceError(f"Failed to fetch survey responses: {e}")

        logger.debug(f"Fetched {len(responses)} responses from {table}", extra={"table_name": table})
        return responses

    def get_response_count(self, survey_id: str, table_name: Optional[str] = None) -> int:
        """Count all responses recorded for a survey.

        Args:
            survey_id: Survey identifier
            table_name: Table to read instead of the configured default

        Returns:
            Number of responses

        Raises:
            InvalidTableNameError: If table_name is not a plain identifier
            ResponseServiceError: If the query fails
        """
        table = self._resolve_table(table_name)
        rows = self._iter_rows(SurveyResponseQuery(), table, paginate=False)

        try:
            with closing(rows):
                return sum(1 for row in rows if map_row_to_response(row).survey_id == survey_id)
        except SQLAlchemyError as e:
            logger.error(f"Error getting response count: {e}", extra={"table_name": table})
            raise ResponseServiceError(f"Failed to get response count: {e}")
