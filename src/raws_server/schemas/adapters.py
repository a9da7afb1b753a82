"""
Source Adapters

Map each upstream provider's raw payload into the canonical records in
schemas.models. Absent or non-numeric sensor values become None; nothing is
defaulted to zero here.

Synoptic and MesoWest share one STATION format (same parent organization):
- latest: OBSERVATIONS.<sensor>_value_1 = {"value": x, "date_time": "..."}
- timeseries: OBSERVATIONS.date_time = [...], OBSERVATIONS.<sensor>_set_1 = [...]
"""

import functools
import math
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pydantic import ValidationError

from raws_server.config.constants import SENSOR_FIELDS
from raws_server.errors import UpstreamPayloadError
from raws_server.schemas.models import (
    Alert,
    Forecast,
    ForecastPeriod,
    HistoricalSeries,
    HistoryPoint,
    Observation,
    StationMetadata,
)
from raws_server.utils.validators import parse_date

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def payload_adapter(func: Callable) -> Callable:
    """Report a payload that fails model validation as UpstreamPayloadError."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ValidationError as e:
            raise UpstreamPayloadError(
                f"Upstream payload rejected by {func.__name__}: "
                f"{e.error_count()} invalid field(s)",
                details={
                    "adapter": func.__name__,
                    "errors": e.errors(include_url=False, include_context=False),
                },
            ) from e

    return wrapper


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def extract_value(observation: Any, index: int = 0) -> Optional[float]:
    """
    Pull one numeric reading out of a Synoptic sensor entry.

    Accepts a {"value": ...} wrapper (scalar or list) or a bare list.
    """
    if isinstance(observation, dict):
        observation = observation.get("value")
    if isinstance(observation, list):
        if not 0 <= index < len(observation):
            return None
        observation = observation[index]
    return _to_float(observation)


def _sensor_entry(observations: dict, sensor: str, kind: str) -> Any:
    return observations.get(f"{sensor}_{kind}_1")


def _latest_timestamp(observations: dict) -> Optional[str]:
    date_times = observations.get("date_time")
    if isinstance(date_times, list) and date_times:
        return date_times[0]
    if isinstance(date_times, str):
        return date_times

    for sensor in SENSOR_FIELDS:
        entry = _sensor_entry(observations, sensor, "value")
        if isinstance(entry, dict) and entry.get("date_time"):
            return entry["date_time"]
    return None


@payload_adapter
def adapt_synoptic_data(station: Any, source: str = "synoptic") -> Observation:
    """
    Adapt a Synoptic Data API STATION object to an Observation.

    Raises:
        UpstreamPayloadError: If the payload has no station id or no
            OBSERVATIONS block
    """
    if not isinstance(station, dict) or not isinstance(
        station.get("OBSERVATIONS"), dict
    ):
        raise UpstreamPayloadError(
            f"Invalid {source} station data", details={"source": source}
        )
    if not station.get("STID"):
        raise UpstreamPayloadError(
            f"{source} station data has no STID", details={"source": source}
        )

    obs = station["OBSERVATIONS"]
    readings = {
        field: extract_value(_sensor_entry(obs, sensor, "value"))
        for sensor, field in SENSOR_FIELDS.items()
    }

    return Observation(
        station_id=station["STID"],
        station_name=station.get("NAME"),
        latitude=_to_float(station.get("LATITUDE")),
        longitude=_to_float(station.get("LONGITUDE")),
        elevation=_to_float(station.get("ELEVATION")),
        state=station.get("STATE"),
        timezone=station.get("TIMEZONE"),
        timestamp=_latest_timestamp(obs) or datetime.now(timezone.utc).isoformat(),
        source=source,
        **readings,
    )


def adapt_mesowest_data(station: Any) -> Observation:
    """MesoWest shares the Synoptic format; only the source tag differs."""
    return adapt_synoptic_data(station, source="mesowest")


OBSERVATION_ADAPTERS: dict[str, Callable[[Any], Observation]] = {
    "synoptic": adapt_synoptic_data,
    "mesowest": adapt_mesowest_data,
}


def adapt_raws_data(station: Any, source: Optional[str] = None) -> Observation:
    """
    Adapt a RAWS STATION payload from any supported provider.

    Unknown or missing sources fall back to the Synoptic adapter.
    """
    adapter = OBSERVATION_ADAPTERS.get((source or "synoptic").lower(), adapt_synoptic_data)
    return adapter(station)


@payload_adapter
def adapt_station_metadata(station: Any, source: Optional[str] = None) -> StationMetadata:
    if not isinstance(station, dict) or not station.get("STID"):
        raise UpstreamPayloadError(
            "Invalid station metadata", details={"source": source}
        )
    return StationMetadata(
        id=station["STID"],
        name=station.get("NAME"),
        latitude=_to_float(station.get("LATITUDE")),
        longitude=_to_float(station.get("LONGITUDE")),
        elevation=_to_float(station.get("ELEVATION")),
        state=station.get("STATE"),
        timezone=station.get("TIMEZONE"),
        status=station.get("STATUS"),
        network=station.get("MNET_SHORTNAME"),
        source=source,
    )


def _series_value(observations: dict, sensor: str, index: int) -> Optional[float]:
    entry = _sensor_entry(observations, sensor, "set")
    if entry is None:
        entry = _sensor_entry(observations, sensor, "value")
    return extract_value(entry, index)


@payload_adapter
def extract_time_series(station: Any) -> list[HistoryPoint]:
    """
    Extract a time series from a timeseries STATION payload.

    Returns:
        list[HistoryPoint]: One point per timestamp, oldest first;
            unparseable timestamps sort last
    """
    if not isinstance(station, dict) or not isinstance(
        station.get("OBSERVATIONS"), dict
    ):
        return []

    obs = station["OBSERVATIONS"]
    timestamps = obs.get("date_time") or []
    if not isinstance(timestamps, list):
        return []

    history_sensors = {
        sensor: field
        for sensor, field in SENSOR_FIELDS.items()
        if field in HistoryPoint.model_fields
    }

    points = [
        HistoryPoint(
            timestamp=timestamp,
            **{
                field: _series_value(obs, sensor, index)
                for sensor, field in history_sensors.items()
            },
        )
        for index, timestamp in enumerate(timestamps)
    ]
    return sorted(points, key=_timestamp_order)


def _timestamp_order(point: HistoryPoint) -> tuple[bool, datetime]:
    parsed = parse_date(point.timestamp)
    return (parsed is None, parsed or _EPOCH)


@payload_adapter
def adapt_historical_series(station: Any, source: Optional[str] = None) -> HistoricalSeries:
    if not isinstance(station, dict) or not station.get("STID"):
        raise UpstreamPayloadError(
            "Invalid historical station data", details={"source": source}
        )
    return HistoricalSeries(
        station_id=station["STID"],
        station_name=station.get("NAME"),
        latitude=_to_float(station.get("LATITUDE")),
        longitude=_to_float(station.get("LONGITUDE")),
        elevation=_to_float(station.get("ELEVATION")),
        source=source,
        points=extract_time_series(station),
    )


# ============= NWS =============


@payload_adapter
def adapt_nws_alerts(payload: Any) -> list[Alert]:
    """Adapt an NWS /alerts/active GeoJSON FeatureCollection."""
    if not isinstance(payload, dict):
        return []

    alerts = []
    for feature in payload.get("features") or []:
        props = (feature or {}).get("properties") or {}
        if not props.get("event"):
            continue
        alerts.append(
            Alert(
                event=props["event"],
                severity=props.get("severity"),
                certainty=props.get("certainty"),
                urgency=props.get("urgency"),
                headline=props.get("headline"),
                description=props.get("description"),
                instruction=props.get("instruction"),
                onset=props.get("onset"),
                expires=props.get("expires"),
                area_desc=props.get("areaDesc"),
            )
        )
    return alerts


@payload_adapter
def adapt_nws_forecast(payload: Any) -> Optional[Forecast]:
    """Adapt an NWS gridpoint forecast; None when it has no periods."""
    props = (payload or {}).get("properties") if isinstance(payload, dict) else None
    if not props or not props.get("periods"):
        return None

    periods = []
    for period in props["periods"]:
        pop = period.get("probabilityOfPrecipitation") or {}
        periods.append(
            ForecastPeriod(
                number=period.get("number"),
                name=period.get("name"),
                start_time=period.get("startTime"),
                end_time=period.get("endTime"),
                is_daytime=period.get("isDaytime"),
                temperature=_to_float(period.get("temperature")),
                temperature_unit=period.get("temperatureUnit"),
                wind_speed=period.get("windSpeed"),
                wind_direction=period.get("windDirection"),
                short_forecast=period.get("shortForecast"),
                detailed_forecast=period.get("detailedForecast"),
                probability_of_precipitation=_to_float(pop.get("value")),
            )
        )

    return Forecast(updated=props.get("updated"), periods=periods)
