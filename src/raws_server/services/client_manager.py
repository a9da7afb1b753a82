"""
Client Coordinator

Single entry point the tools use to reach upstream data. Every request is
cache-or-fetch: a live cache entry is returned without any upstream call,
otherwise the configured providers are tried strictly one after another in
priority order (Synoptic, then MesoWest) and the first successfully adapted
result is cached and returned, tagged with the provider that served it.

NWS alerts and forecasts follow the same cache-then-fetch shape but are
best effort: any failure is logged and an empty result is returned.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar

from fastmcp.utilities.logging import get_logger

from raws_server.config.settings import ServerSettings
from raws_server.errors import ConfigurationError, RawsError
from raws_server.schemas.adapters import (
    adapt_historical_series,
    adapt_raws_data,
    adapt_station_metadata,
)
from raws_server.schemas.models import (
    Alert,
    Forecast,
    HistoricalSeries,
    Observation,
    StationMetadata,
)
from raws_server.services.cache import TTLCache
from raws_server.services.nws_client import NWSClient
from raws_server.services.raws_clients import WeatherProvider, build_providers

T = TypeVar("T")


class ClientManager:
    """
    Cache-backed, failover-aware access to RAWS providers and the NWS.

    Concurrent requests for the same cache key share one upstream fetch:
    the second waiter finds the first one's result in the cache. Requests
    for different keys never block each other.
    """

    def __init__(
        self,
        providers: Sequence[WeatherProvider],
        cache: TTLCache,
        settings: ServerSettings,
        alerts_client: Optional[NWSClient] = None,
    ):
        """
        Args:
            providers: Providers in priority order
            cache: Shared cache
            settings: Server settings (TTLs and feature flags)
            alerts_client: NWS client for alerts and forecasts

        Raises:
            ConfigurationError: If no provider is usable
        """
        self.logger = get_logger(self.__class__.__name__)
        self.cache = cache
        self.settings = settings
        self.alerts_client = alerts_client

        self.providers = [provider for provider in providers if provider.is_available()]
        if not self.providers:
            raise ConfigurationError(
                "No RAWS data provider configured. Set SYNOPTIC_API_TOKEN "
                "or MESOWEST_API_TOKEN."
            )

        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

        self.logger.info(
            f"Client manager ready with providers: "
            f"{', '.join(provider.name for provider in self.providers)}"
        )

    @classmethod
    def from_settings(
        cls, settings: ServerSettings, cache: Optional[TTLCache] = None
    ) -> "ClientManager":
        """Build the production provider chain, cache and NWS client."""
        cache = cache or TTLCache(
            max_size=settings.cache.max_size, default_ttl=settings.cache.default_ttl
        )
        return cls(
            build_providers(settings),
            cache,
            settings,
            alerts_client=NWSClient(settings),
        )

    # ============= RAWS DATA =============

    async def get_current_observation(self, station_id: str) -> Observation:
        """
        Latest observation for a station.

        Raises:
            RawsError: The last provider's error when every provider fails
        """

        async def fetch(provider: WeatherProvider) -> Observation:
            station = await provider.fetch_current(station_id)
            return adapt_raws_data(station, provider.name)

        return await self._cached_failover(
            f"current:{station_id}",
            self.settings.cache.current_ttl,
            fetch,
            f"current observation for {station_id}",
        )

    async def search_stations(
        self, latitude: float, longitude: float, radius: float, limit: int
    ) -> list[StationMetadata]:
        """Active RAWS stations within `radius` miles of a point."""

        async def fetch(provider: WeatherProvider) -> list[StationMetadata]:
            stations = await provider.search_stations(latitude, longitude, radius, limit)
            return [adapt_station_metadata(station, provider.name) for station in stations]

        return await self._cached_failover(
            f"search:{latitude}:{longitude}:{radius}:{limit}",
            self.settings.cache.station_ttl,
            fetch,
            f"station search near ({latitude}, {longitude})",
        )

    async def get_historical_observations(
        self,
        station_id: str,
        start: datetime,
        end: datetime,
        variables: Optional[Sequence[str]] = None,
        ttl: Optional[float] = None,
    ) -> HistoricalSeries:
        """
        Time series for a station over [start, end].

        Cached for `history_ttl` unless `ttl` overrides it; windows that are
        still open should pass a shorter one.
        """
        variables = list(variables or [])
        var_key = ",".join(variables) if variables else "all"

        async def fetch(provider: WeatherProvider) -> HistoricalSeries:
            station = await provider.fetch_history(station_id, start, end, variables)
            return adapt_historical_series(station, provider.name)

        return await self._cached_failover(
            f"historical:{station_id}:{int(start.timestamp())}:{int(end.timestamp())}:{var_key}",
            ttl or self.settings.cache.history_ttl,
            fetch,
            f"history for {station_id}",
        )

    # ============= NWS DATA =============

    async def get_nws_alerts(self, latitude: float, longitude: float) -> list[Alert]:
        """Active NWS alerts for a point, or [] when disabled or failing."""
        if not self._nws_enabled():
            return []

        try:
            return await self._cached(
                f"nws:alerts:{latitude}:{longitude}",
                self.settings.cache.alerts_ttl,
                lambda: self.alerts_client.get_alerts(latitude, longitude),
            )
        except Exception as e:
            self.logger.warning(f"NWS alerts unavailable for ({latitude}, {longitude}): {e}")
            return []

    async def get_nws_forecast(
        self, latitude: float, longitude: float
    ) -> Optional[Forecast]:
        """NWS forecast for a point, or None when disabled or failing."""
        if not self._nws_enabled():
            return None

        try:
            return await self._cached(
                f"nws:forecast:{latitude}:{longitude}",
                self.settings.cache.forecast_ttl,
                lambda: self.alerts_client.get_forecast(latitude, longitude),
            )
        except Exception as e:
            self.logger.warning(f"NWS forecast unavailable for ({latitude}, {longitude}): {e}")
            return None

    def _nws_enabled(self) -> bool:
        return self.settings.features.nws_integration and self.alerts_client is not None

    # ============= CACHE =============

    def get_cache_stats(self) -> dict:
        return self.cache.stats()

    def clear_cache(self) -> None:
        self.cache.clear()

    # ============= INTERNALS =============

    async def _cached_failover(
        self,
        key: str,
        ttl: float,
        fetch: Callable[[WeatherProvider], Awaitable[T]],
        description: str,
    ) -> T:
        """
        Cache-or-fetch with sequential provider failover.

        Each provider is asked at most once. A provider whose payload fails
        adaptation counts as failed.
        """

        async def attempt_providers() -> T:
            last_error: Optional[RawsError] = None
            for provider in self.providers:
                try:
                    result = await fetch(provider)
                except RawsError as e:
                    self.logger.warning(
                        f"Provider {provider.name} failed for {description}: "
                        f"[{e.code}] {e.message}"
                    )
                    last_error = e
                    continue

                self.logger.info(f"Served {description} from {provider.name}")
                return result

            self.logger.error(f"All providers failed for {description}")
            raise last_error

        return await self._cached(key, ttl, attempt_providers)

    async def _cached(self, key: str, ttl: float, loader: Callable[[], Awaitable[Any]]) -> Any:
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        async with self._key_lock(key):
            # Another request may have filled the entry while we waited
            cached = self.cache.get(key)
            if cached is not None:
                return cached

            result = await loader()
            self.cache.set(key, result, ttl)
            return result

    @asynccontextmanager
    async def _key_lock(self, key: str):
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._lock_users[key] = self._lock_users.get(key, 0) + 1

        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]
