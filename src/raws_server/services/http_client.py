"""
HTTP Client Services with Retry Logic

Provides the base HTTP client shared by every upstream provider with:
- Automatic retry logic with exponential backoff
- Retry-After aware waits when a provider throttles
- Connection pooling and timeout management
- Mapping of transport/HTTP failures onto the error taxonomy

Classes:
    BaseHTTPClient: Foundation class with retry and configuration
    wait_retry_after: tenacity wait strategy honoring provider hints
"""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional

import httpx
from fastmcp.utilities.logging import get_logger
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from raws_server.config.settings import ServerSettings, get_settings
from raws_server.errors import (
    RETRYABLE_ERRORS,
    RateLimitedError,
    StationNotFoundError,
    UpstreamPayloadError,
    UpstreamRequestError,
    UpstreamUnavailableError,
)


class wait_retry_after(wait_base):
    """
    Wait the provider's Retry-After hint when there is one.

    Falls back to the wrapped strategy for every other failure.
    """

    def __init__(self, fallback: wait_base, max_wait: float):
        self.fallback = fallback
        self.max_wait = max_wait

    def __call__(self, retry_state) -> float:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        hint = getattr(exc, "retry_after", None)
        if hint is not None:
            return min(max(0.0, hint), self.max_wait)
        return self.fallback(retry_state)


def parse_retry_after(
    value: Optional[str], now: Optional[datetime] = None
) -> Optional[float]:
    """
    Parse a Retry-After header into seconds to wait.

    Accepts delta-seconds ("120") or an HTTP-date; a date in the past
    means no wait. Returns None when the header is absent or unreadable.
    """
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        pass

    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)

    now = now or datetime.now(timezone.utc)
    return max(0.0, (retry_at - now).total_seconds())


class BaseHTTPClient:
    """
    Base HTTP client with configurable retry logic and connection pooling.

    Provides common functionality for all HTTP clients including:
    - Exponential backoff retry logic on throttling and outages
    - No retries on permanent client errors
    - Connection pooling configuration
    - Timeout management
    """

    def __init__(
        self,
        settings: Optional[ServerSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize base HTTP client with settings and retry config.

        Args:
            settings: Server settings (defaults to the global settings)
            transport: Optional httpx transport, used by tests to stub upstreams
        """
        self.settings = settings or get_settings()
        self.logger = get_logger(self.__class__.__name__)
        self.timeout = self.settings.http.timeout
        self.transport = transport

        http = self.settings.http

        # Configure retry decorator with exponential backoff
        self.retry_decorator = retry(
            stop=stop_after_attempt(http.max_retries),
            wait=wait_retry_after(
                wait_exponential(
                    multiplier=http.retry_backoff_factor,
                    min=http.retry_min_wait,
                    max=http.retry_max_wait,
                ),
                max_wait=http.retry_max_wait,
            ),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            reraise=True,  # Re-raise final exception after all retries
        )

    @property
    def default_headers(self) -> dict:
        return {
            "User-Agent": self.settings.api.user_agent,
            "Accept": "application/json",
        }

    @property
    def client_config(self) -> dict:
        """
        Get standardized HTTP client configuration.

        Returns:
            dict: Configuration for httpx.AsyncClient with timeouts,
                  redirects, and connection pooling settings
        """
        config = {
            "timeout": self.timeout,
            "follow_redirects": True,  # Handle redirects automatically
            "headers": self.default_headers,
            "limits": httpx.Limits(
                max_connections=self.settings.http.pool_connections,
                max_keepalive_connections=self.settings.http.pool_maxsize,
            ),
        }
        if self.transport is not None:
            config["transport"] = self.transport
        return config

    async def get_json(self, url: str, params: Optional[dict] = None) -> Any:
        """
        GET a JSON document with retries.

        Args:
            url: Absolute URL
            params: Query parameters

        Returns:
            Decoded JSON body

        Raises:
            RateLimitedError: Throttled on every attempt
            UpstreamUnavailableError: Network/timeout/5xx on every attempt
            StationNotFoundError: Provider answered 404
            UpstreamRequestError: Any other 4xx
            UpstreamPayloadError: Body is not JSON
        """
        attempt = 0

        @self.retry_decorator
        async def _fetch():
            nonlocal attempt
            attempt += 1
            self.logger.debug(f"GET {url} (attempt {attempt})")
            async with httpx.AsyncClient(**self.client_config) as client:
                try:
                    response = await client.get(url, params=params)
                except httpx.TimeoutException as e:
                    raise UpstreamUnavailableError(
                        f"Timed out requesting {url}",
                        details={"url": url, "type": "timeout"},
                    ) from e
                except httpx.TransportError as e:
                    raise UpstreamUnavailableError(
                        f"Network error requesting {url}: {e}",
                        details={"url": url, "type": "network_error"},
                    ) from e
                except httpx.RequestError as e:
                    # Undecodable bodies, redirect loops
                    raise UpstreamUnavailableError(
                        f"Request to {url} failed: {e}",
                        details={"url": url, "type": type(e).__name__},
                    ) from e
            return self._handle_response(url, response)

        try:
            return await _fetch()
        except (RateLimitedError, UpstreamUnavailableError) as e:
            self.logger.error(f"Request to {url} failed after {attempt} attempts: {e}")
            raise
        except Exception as e:
            self.logger.error(f"Request to {url} failed: {e}")
            raise

    def _handle_response(self, url: str, response: httpx.Response) -> Any:
        status = response.status_code

        if status == 429:
            retry_after = parse_retry_after(response.headers.get("retry-after"))
            self.logger.warning(f"Rate limited by {url} (retry after {retry_after})")
            raise RateLimitedError(
                f"Rate limited by upstream ({url})",
                retry_after=retry_after,
                details={"url": url, "retry_after": retry_after},
            )

        if status >= 500:
            self.logger.warning(f"Upstream error {status} from {url}")
            raise UpstreamUnavailableError(
                f"Upstream returned HTTP {status}",
                details={"url": url, "status": status},
            )

        if status == 404:
            raise StationNotFoundError(
                "Upstream resource not found", details={"url": url}
            )

        if status >= 400:
            raise UpstreamRequestError(
                f"Upstream rejected request with HTTP {status}",
                code=f"HTTP_{status}",
                status=status,
                details={"url": url, "body": response.text[:500]},
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamPayloadError(
                f"Upstream returned a non-JSON body from {url}",
                details={"url": url},
            ) from e
