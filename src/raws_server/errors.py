"""
Error Taxonomy

Every failure that can cross the tool boundary is a RawsError carrying a
stable machine-readable code, a human-readable message, an HTTP-like status
and a details dict for self-diagnosis.

Categories:
- Input errors (4xx): raised before any upstream call, never retried
- Upstream transient errors: retried inside the HTTP client, then failed over
- Upstream permanent errors: not retried, but still failed over
- Transformer errors: fatal for the request
"""

from typing import Any, Optional


class RawsError(Exception):
    """Base error with code, status and details."""

    code = "UNKNOWN_ERROR"
    status = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status is not None:
            self.status = status
        self.details = details or {}

    def to_dict(self) -> dict:
        """Serialize to the error payload of a tool envelope."""
        return {
            "code": self.code,
            "message": self.message,
            "status": self.status,
            "details": self.details,
        }


# ============= INPUT ERRORS =============


class InputValidationError(RawsError):
    """Bad tool input (station id, coordinates, dates, numeric ranges)."""

    status = 400


class FeatureDisabledError(RawsError):
    code = "FEATURE_DISABLED"
    status = 403


# ============= UPSTREAM ERRORS =============


class StationNotFoundError(RawsError):
    """Provider reports no station for the requested id."""

    code = "STATION_NOT_FOUND"
    status = 404


class NoDataError(RawsError):
    code = "NO_DATA"
    status = 404


class RateLimitedError(RawsError):
    """Provider throttled the request. Retryable."""

    code = "RATE_LIMITED"
    status = 429

    def __init__(self, message: str, retry_after: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class UpstreamUnavailableError(RawsError):
    """Network failure, timeout or 5xx. Retryable."""

    code = "UPSTREAM_UNAVAILABLE"
    status = 503


class UpstreamRequestError(RawsError):
    """Permanent 4xx-class rejection from a provider. Not retried."""

    code = "UPSTREAM_REQUEST_FAILED"
    status = 400


class UpstreamPayloadError(RawsError):
    """Provider answered with a body that cannot be read or adapted."""

    code = "INVALID_UPSTREAM_PAYLOAD"
    status = 502


# ============= INTERNAL ERRORS =============


class MissingRequiredFieldError(RawsError):
    """Observation lacks temperature, humidity or wind speed."""

    code = "MISSING_REQUIRED_FIELD"
    status = 422


class SchemaValidationError(RawsError):
    """Transformer produced a document violating its own invariants."""

    code = "SCHEMA_VALIDATION_FAILED"
    status = 500


class ConfigurationError(RawsError):
    code = "CONFIGURATION_ERROR"
    status = 500


# Errors the HTTP client retries before giving up
RETRYABLE_ERRORS = (RateLimitedError, UpstreamUnavailableError)
