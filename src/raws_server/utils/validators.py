"""
Input Validation Utilities

Checks applied to tool inputs before any upstream call. Predicates return
bool; the require_* helpers raise InputValidationError with the stable
error code the tool surface reports.
"""

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from raws_server.config.constants import (
    MAX_HISTORY_DAYS,
    MAX_SEARCH_RADIUS,
    STATION_ID_PREFIX,
)
from raws_server.errors import InputValidationError

_STATION_ID_PATTERN = re.compile(r"^[A-Z0-9]{4,6}$", re.IGNORECASE)


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def sanitize_station_id(station_id: Optional[str]) -> str:
    """Strip the optional RAWS: prefix, whitespace, and uppercase."""
    if not station_id or not isinstance(station_id, str):
        return ""
    station_id = station_id.strip()
    if station_id.upper().startswith(STATION_ID_PREFIX):
        station_id = station_id[len(STATION_ID_PREFIX):]
    return station_id.strip().upper()


def is_valid_station_id(station_id: Optional[str]) -> bool:
    """Station ids are 4-6 alphanumeric characters after normalization."""
    normalized = sanitize_station_id(station_id)
    return bool(_STATION_ID_PATTERN.match(normalized))


def is_valid_latitude(latitude: Any) -> bool:
    return _is_number(latitude) and -90 <= latitude <= 90


def is_valid_longitude(longitude: Any) -> bool:
    return _is_number(longitude) and -180 <= longitude <= 180


def is_valid_radius(radius: Any) -> bool:
    return _is_number(radius) and 0 < radius <= MAX_SEARCH_RADIUS


def is_valid_temperature(temperature: Any) -> bool:
    return _is_number(temperature) and -100 <= temperature <= 150


def is_valid_humidity(humidity: Any) -> bool:
    return _is_number(humidity) and 0 <= humidity <= 100


def is_valid_wind_speed(wind_speed: Any) -> bool:
    return _is_number(wind_speed) and 0 <= wind_speed <= 200


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 string or datetime into an aware UTC datetime.

    Naive values are taken to be UTC. Returns None when unparseable.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def validate_date_range(
    start_time: datetime, end_time: datetime, now: Optional[datetime] = None
) -> Optional[str]:
    """
    Check a history window.

    Returns:
        Optional[str]: None when valid, otherwise the reason it is not
    """
    now = now or datetime.now(timezone.utc)

    if end_time <= start_time:
        return "End time must be after start time"
    if end_time > now:
        return "End time cannot be in the future"
    if end_time - start_time > timedelta(days=MAX_HISTORY_DAYS):
        return "Date range cannot exceed 1 year"
    return None


# ============= RAISING HELPERS =============


def require_station_id(station_id: Any) -> str:
    """Normalize a station id or raise INVALID_STATION_ID."""
    if not is_valid_station_id(station_id):
        raise InputValidationError(
            f"Invalid station ID: {station_id}. Must be 4-6 alphanumeric characters.",
            code="INVALID_STATION_ID",
            details={"station_id": station_id},
        )
    return sanitize_station_id(station_id)


def require_coordinates(latitude: Any, longitude: Any) -> None:
    if not is_valid_latitude(latitude):
        raise InputValidationError(
            f"Invalid latitude: {latitude}. Must be between -90 and 90.",
            code="INVALID_LATITUDE",
            details={"latitude": latitude},
        )
    if not is_valid_longitude(longitude):
        raise InputValidationError(
            f"Invalid longitude: {longitude}. Must be between -180 and 180.",
            code="INVALID_LONGITUDE",
            details={"longitude": longitude},
        )


def require_date_range(start_time: Any, end_time: Any) -> tuple[datetime, datetime]:
    """Parse both ends of a history window or raise the matching error."""
    start = parse_date(start_time)
    if start is None:
        raise InputValidationError(
            f"Invalid start time: {start_time}. Must be ISO 8601 format.",
            code="INVALID_START_TIME",
            details={"start_time": start_time},
        )

    end = parse_date(end_time)
    if end is None:
        raise InputValidationError(
            f"Invalid end time: {end_time}. Must be ISO 8601 format.",
            code="INVALID_END_TIME",
            details={"end_time": end_time},
        )

    problem = validate_date_range(start, end)
    if problem:
        raise InputValidationError(
            problem,
            code="INVALID_DATE_RANGE",
            details={"start_time": start_time, "end_time": end_time},
        )
    return start, end
