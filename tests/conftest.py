import asyncio
import copy
import json
from pathlib import Path

import pytest

from raws_server.config.settings import (
    ApiSettings,
    CacheSettings,
    FeatureSettings,
    HttpSettings,
    ServerSettings,
)
from raws_server.schemas.models import Observation
from raws_server.services.raws_clients import WeatherProvider

FIXTURES = Path(__file__).parent / "fixtures"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_settings(**features) -> ServerSettings:
    return ServerSettings(
        api=ApiSettings(
            synoptic_api_token="synoptic-test-token",
            mesowest_api_token="mesowest-test-token",
        ),
        http=HttpSettings(
            max_retries=3, retry_min_wait=0, retry_max_wait=0, retry_backoff_factor=0
        ),
        cache=CacheSettings(),
        features=FeatureSettings(**features),
    )


@pytest.fixture
def settings() -> ServerSettings:
    return make_settings()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def synoptic_payload() -> dict:
    with open(FIXTURES / "synoptic_response.json") as f:
        return json.load(f)


@pytest.fixture
def synoptic_station(synoptic_payload) -> dict:
    return copy.deepcopy(synoptic_payload["STATION"][0])


@pytest.fixture
def red_flag_observation() -> Observation:
    return Observation(
        station_id="MCRC2",
        station_name="Monument Creek",
        state="CO",
        latitude=39.1234,
        longitude=-104.5678,
        elevation=6420,
        timestamp="2025-08-29T20:00:00Z",
        temperature=88.2,
        relative_humidity=12.5,
        wind_speed=28.3,
        wind_gust=42.7,
        wind_direction=310,
        precip_accum=0.0,
        fuel_moisture=4.2,
        source="synoptic",
    )


class FakeProvider(WeatherProvider):
    """Provider that replays a station payload or raises a fixed error."""

    def __init__(self, name, station=None, error=None, available=True, delay=0):
        self.name = name
        self.station = station
        self.error = error
        self.available = available
        self.delay = delay
        self.calls = []

    def is_available(self):
        return self.available

    async def _respond(self, call):
        self.calls.append(call)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.station)

    async def fetch_current(self, station_id):
        return await self._respond(("current", station_id))

    async def search_stations(self, latitude, longitude, radius, limit):
        stations = await self._respond(("search", latitude, longitude, radius, limit))
        return stations if isinstance(stations, list) else [stations]

    async def fetch_history(self, station_id, start, end, variables=None):
        return await self._respond(("history", station_id, start, end, tuple(variables or ())))


class FakeNWS:
    def __init__(self, alerts=None, forecast=None, error=None):
        self.alerts = alerts or []
        self.forecast = forecast
        self.error = error
        self.calls = 0

    async def get_alerts(self, latitude, longitude):
        self.calls += 1
        if self.error:
            raise self.error
        return self.alerts

    async def get_forecast(self, latitude, longitude):
        self.calls += 1
        if self.error:
            raise self.error
        return self.forecast
