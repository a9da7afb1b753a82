"""
RAWS Data Providers

Clients for the Synoptic Data API (primary) and its MesoWest mirror
(backup). Both speak the same v2 API, so one implementation serves both
with a different base URL and token.

Classes:
    WeatherProvider: Interface the client coordinator fails over across
    RawsApiClient: Synoptic/MesoWest v2 implementation
    SynopticClient: Primary source
    MesoWestClient: Backup source

API Documentation: https://docs.synopticdata.com/services/weather-data-api
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

import httpx

from raws_server.config.constants import (
    RAWS_NETWORKS,
    STATION_ID_PREFIX,
    SYNOPTIC_AUTH_FAILED,
    SYNOPTIC_NO_RESULTS,
)
from raws_server.config.settings import ServerSettings
from raws_server.errors import (
    ConfigurationError,
    StationNotFoundError,
    UpstreamRequestError,
)
from raws_server.services.http_client import BaseHTTPClient


class WeatherProvider(ABC):
    """
    A source of RAWS observations.

    Methods return raw provider payloads; adaptation into canonical records
    happens in the coordinator.
    """

    name: str

    def is_available(self) -> bool:
        return True

    @abstractmethod
    async def fetch_current(self, station_id: str) -> dict:
        """Latest observation STATION payload for one station."""

    @abstractmethod
    async def search_stations(
        self, latitude: float, longitude: float, radius: float, limit: int
    ) -> list[dict]:
        """Raw station metadata near a point."""

    @abstractmethod
    async def fetch_history(
        self,
        station_id: str,
        start: datetime,
        end: datetime,
        variables: Optional[Sequence[str]] = None,
    ) -> dict:
        """Timeseries STATION payload for one station."""


class RawsApiClient(BaseHTTPClient, WeatherProvider):
    """
    Synoptic-format v2 API client.

    Requests english units and UTC timestamps. A response with no stations
    means the station is unknown to this provider.
    """

    name = "raws"

    def __init__(
        self,
        base_url: str,
        token: Optional[str],
        settings: Optional[ServerSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(settings=settings, transport=transport)
        self.base_url = base_url.rstrip("/")
        self.token = token

        if not self.token:
            self.logger.warning(f"{self.name} API token not configured")

    def is_available(self) -> bool:
        return bool(self.token)

    async def fetch_current(self, station_id: str) -> dict:
        station_id = self._normalize_station_id(station_id)
        self.logger.info(f"Fetching current observation for {station_id} from {self.name}")

        data = await self._request(
            "/stations/latest",
            {"stid": station_id, "units": "english", "obtimezone": "UTC"},
        )
        return self._first_station(data, station_id)

    async def search_stations(
        self, latitude: float, longitude: float, radius: float, limit: int
    ) -> list[dict]:
        self.logger.info(
            f"Searching {self.name} stations within {radius} mi of "
            f"({latitude}, {longitude}), limit {limit}"
        )

        data = await self._request(
            "/stations/metadata",
            {
                "radius": f"{latitude},{longitude},{radius}",
                "limit": limit,
                "network": RAWS_NETWORKS,
                "status": "active",
            },
            not_found_ok=True,
        )
        return list(data.get("STATION") or [])

    async def fetch_history(
        self,
        station_id: str,
        start: datetime,
        end: datetime,
        variables: Optional[Sequence[str]] = None,
    ) -> dict:
        station_id = self._normalize_station_id(station_id)
        self.logger.info(
            f"Fetching history for {station_id} from {self.name} ({start} to {end})"
        )

        params = {
            "stid": station_id,
            "start": self.format_date(start),
            "end": self.format_date(end),
            "units": "english",
            "obtimezone": "UTC",
        }
        if variables:
            params["vars"] = ",".join(variables)

        data = await self._request("/stations/timeseries", params)
        return self._first_station(data, station_id)

    async def _request(
        self, path: str, params: dict, not_found_ok: bool = False
    ) -> dict:
        if not self.is_available():
            raise ConfigurationError(
                f"{self.name} API token not configured", details={"source": self.name}
            )

        data = await self.get_json(f"{self.base_url}{path}", {**params, "token": self.token})
        if not isinstance(data, dict):
            data = {}

        summary = data.get("SUMMARY") or {}
        code = summary.get("RESPONSE_CODE")
        if code == SYNOPTIC_AUTH_FAILED:
            raise UpstreamRequestError(
                f"{self.name} rejected the API token: {summary.get('RESPONSE_MESSAGE')}",
                code="UPSTREAM_AUTH_FAILED",
                status=401,
                details={"source": self.name},
            )
        if code == SYNOPTIC_NO_RESULTS and not not_found_ok:
            data = {**data, "STATION": []}
        return data

    def _first_station(self, data: dict, station_id: str) -> dict:
        stations = data.get("STATION") or []
        if not stations:
            raise StationNotFoundError(
                f"Station {station_id} not found",
                details={"station_id": station_id, "source": self.name},
            )
        return stations[0]

    @staticmethod
    def _normalize_station_id(station_id: str) -> str:
        if station_id.upper().startswith(STATION_ID_PREFIX):
            station_id = station_id[len(STATION_ID_PREFIX):]
        return station_id

    @staticmethod
    def format_date(moment: datetime) -> str:
        """Format as YYYYMMDDHHmm in UTC."""
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        return moment.strftime("%Y%m%d%H%M")


class SynopticClient(RawsApiClient):
    """Primary RAWS source: Synoptic Data API."""

    name = "synoptic"

    def __init__(
        self,
        settings: ServerSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            settings.api.synoptic_base_url,
            settings.api.synoptic_api_token,
            settings=settings,
            transport=transport,
        )


class MesoWestClient(RawsApiClient):
    """Backup RAWS source: MesoWest API."""

    name = "mesowest"

    def __init__(
        self,
        settings: ServerSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(
            settings.api.mesowest_base_url,
            settings.api.mesowest_api_token,
            settings=settings,
            transport=transport,
        )


def build_providers(
    settings: ServerSettings, transport: Optional[Any] = None
) -> list[WeatherProvider]:
    """Providers in failover priority order."""
    return [
        SynopticClient(settings, transport=transport),
        MesoWestClient(settings, transport=transport),
    ]
