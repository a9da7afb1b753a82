"""
Wildfire Schema Transformer

Turns one canonical Observation (plus optional NWS alerts and an optional
historical series) into exactly one WeatherRiskDocument.

Derived fields:
- Wind gusts estimated from sustained speed when unreported
- Rain probability estimated from humidity and recent precipitation
- Red Flag warnings from NWS alerts, else from humidity/wind thresholds
- Extreme changes from history trends and current-snapshot extremes
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from fastmcp.utilities.logging import get_logger
from pydantic import ValidationError

from raws_server.config.constants import (
    CRITICAL_HUMIDITY,
    DEFAULT_WARNING_HOURS,
    DRY_FUEL_MOISTURE,
    EXTREME_GUST,
    FIRE_WEATHER_EVENTS,
    NWS_SOURCE,
    PROVIDER_SOURCES,
    RAWS_STATION_URL,
    RED_FLAG_HUMIDITY,
    RED_FLAG_WARNING,
    RED_FLAG_WIND,
    WATCH_HUMIDITY,
    WATCH_WIND,
)
from raws_server.errors import MissingRequiredFieldError, SchemaValidationError
from raws_server.schemas.models import (
    Alert,
    DataSource,
    ExtremeChange,
    FireIndexResult,
    HistoryPoint,
    Observation,
    RedFlagWarning,
    WeatherRiskDocument,
)
from raws_server.utils.calculations import estimate_10hour_fuel_moisture
from raws_server.utils.units import degrees_to_cardinal, round_half_up
from raws_server.utils.weather import (
    detect_extreme_changes,
    estimate_probability_of_rain,
    estimate_wind_gust,
)

logger = get_logger(__name__)

REQUIRED_FIELDS = ("temperature", "relative_humidity", "wind_speed")


def transform_to_wildfire_schema(
    observation: Observation,
    alerts: Optional[Sequence[Alert]] = None,
    history: Optional[Sequence[HistoryPoint]] = None,
    fire_indices: Optional[FireIndexResult] = None,
    now: Optional[datetime] = None,
) -> WeatherRiskDocument:
    """
    Transform a RAWS observation into the wildfire risk document.

    Args:
        observation: Canonical observation (temperature, humidity and wind
            speed must be present)
        alerts: Active NWS alerts for the station location
        history: Recent observations for trend detection
        fire_indices: Precomputed indices to attach to the document
        now: Reference time for default warning windows

    Returns:
        WeatherRiskDocument: Validated document

    Raises:
        MissingRequiredFieldError: If a required field is None
        SchemaValidationError: If the built document violates its invariants
    """
    validate_required_fields(observation)

    alerts = list(alerts or [])
    history = list(history or [])
    now = now or datetime.now(timezone.utc)

    fire_alerts = [alert for alert in alerts if alert.event in FIRE_WEATHER_EVENTS]
    warnings = transform_red_flag_warnings(observation, fire_alerts, now)
    gust_estimated = observation.wind_gust is None

    document = {
        "location": build_location_string(observation),
        "as_of": observation.timestamp or now.isoformat(),
        "weather_risks": {
            "temperature": {
                "value": round_half_up(observation.temperature),
                "units": "F",
            },
            "humidity": {"percent": round_half_up(observation.relative_humidity)},
            "wind": transform_wind(observation),
            "probability_of_rain": transform_rain_probability(observation),
            "red_flag_warnings": [warning.model_dump() for warning in warnings],
            "extreme_changes": [
                change.model_dump()
                for change in transform_extreme_changes(observation, history)
            ],
        },
        "data_sources": [
            source.model_dump() for source in build_data_sources(observation, fire_alerts)
        ],
        "notes": build_notes(
            observation,
            fire_alerts,
            history,
            threshold_warning=bool(warnings) and not fire_alerts,
            gust_estimated=gust_estimated,
        ),
        "fire_indices": fire_indices.model_dump() if fire_indices else None,
    }

    try:
        validated = WeatherRiskDocument.model_validate(document)
    except ValidationError as e:
        logger.error(
            f"Transformer produced an invalid document for station "
            f"{observation.station_id}: {e}"
        )
        raise SchemaValidationError(
            "Transformed document failed schema validation",
            details={"station_id": observation.station_id, "errors": e.errors()},
        ) from e

    logger.debug(f"Transformed observation for station {observation.station_id}")
    return validated


def validate_required_fields(observation: Observation) -> None:
    missing = [field for field in REQUIRED_FIELDS if getattr(observation, field) is None]
    if missing:
        raise MissingRequiredFieldError(
            f"Missing required fields: {', '.join(missing)}. "
            f"Cannot transform incomplete RAWS data for station {observation.station_id}",
            details={"station_id": observation.station_id, "missing": missing},
        )


def build_location_string(observation: Observation) -> str:
    location = observation.station_name or observation.station_id
    if observation.state:
        location += f", {observation.state}"
    return location


def transform_wind(observation: Observation) -> dict:
    """Speed, gusts (reported or estimated) and compass direction."""
    if observation.wind_gust is not None:
        gusts = round_half_up(observation.wind_gust)
    else:
        gusts = estimate_wind_gust(observation.wind_speed)

    return {
        "speed": round_half_up(observation.wind_speed),
        "gusts": gusts,
        "direction": degrees_to_cardinal(observation.wind_direction),
    }


def transform_rain_probability(observation: Observation) -> dict:
    precip = observation.precip_accum
    return {
        "percent": estimate_probability_of_rain(
            observation.relative_humidity, precip, observation.temperature
        ),
        "time_window": "next 24h",
        "confidence": "medium" if precip is not None and precip > 0 else "low",
    }


def transform_red_flag_warnings(
    observation: Observation, fire_alerts: Sequence[Alert], now: datetime
) -> list[RedFlagWarning]:
    """
    Red Flag warnings, NWS first.

    Fire weather alerts from the NWS are used verbatim and suppress the
    threshold check. Without them:
    - humidity < 15% and max(speed, gust) > 25 mph -> Red Flag
    - humidity < 25% and speed > 15 mph -> Watch
    Threshold warnings are valid from now for six hours.
    """
    default_end = now + timedelta(hours=DEFAULT_WARNING_HOURS)

    if fire_alerts:
        return [
            RedFlagWarning(
                start_time=alert.onset or now.isoformat(),
                end_time=alert.expires or default_end.isoformat(),
                level="Red Flag" if alert.event == RED_FLAG_WARNING else "Watch",
                description=alert.headline or alert.description or alert.event,
            )
            for alert in fire_alerts
        ]

    humidity = observation.relative_humidity
    speed = observation.wind_speed
    gust = observation.wind_gust
    peak_wind = max(speed, gust if gust is not None else 0)

    # The Watch tier looks at sustained speed only
    if humidity < RED_FLAG_HUMIDITY and peak_wind > RED_FLAG_WIND:
        gust_text = f", gusts to {round_half_up(gust)} mph" if gust is not None else ""
        return [
            RedFlagWarning(
                start_time=now.isoformat(),
                end_time=default_end.isoformat(),
                level="Red Flag",
                description=(
                    f"Critical fire weather: Low humidity ({round_half_up(humidity)}%) "
                    f"and high winds ({round_half_up(speed)} mph{gust_text})"
                ),
            )
        ]

    if humidity < WATCH_HUMIDITY and speed > WATCH_WIND:
        return [
            RedFlagWarning(
                start_time=now.isoformat(),
                end_time=default_end.isoformat(),
                level="Watch",
                description=(
                    f"Elevated fire weather: Humidity {round_half_up(humidity)}%, "
                    f"winds {round_half_up(speed)} mph"
                ),
            )
        ]

    return []


def transform_extreme_changes(
    observation: Observation, history: Sequence[HistoryPoint]
) -> list[ExtremeChange]:
    """History trends first, then current-snapshot extremes."""
    changes = detect_extreme_changes(history) if history else []

    if observation.wind_gust is not None and observation.wind_gust > EXTREME_GUST:
        changes.append(
            ExtremeChange(
                parameter="wind",
                change="gusts up to",
                magnitude=f"{round_half_up(observation.wind_gust)} mph",
                time_frame="current",
            )
        )

    if observation.relative_humidity < CRITICAL_HUMIDITY:
        changes.append(
            ExtremeChange(
                parameter="humidity",
                change="critically low at",
                magnitude=f"{round_half_up(observation.relative_humidity)}%",
                time_frame="current",
            )
        )

    if observation.fuel_moisture is not None and observation.fuel_moisture < DRY_FUEL_MOISTURE:
        changes.append(
            ExtremeChange(
                parameter="fuel_moisture",
                change="very dry fuels at",
                magnitude=f"{round_half_up(observation.fuel_moisture, 1)}%",
                time_frame="current",
            )
        )

    return changes


def build_data_sources(
    observation: Observation, fire_alerts: Sequence[Alert]
) -> list[DataSource]:
    station_label = observation.station_name or observation.station_id
    sources = [
        DataSource(
            name=f"{station_label} RAWS ({observation.station_id})",
            type="weather",
            url=RAWS_STATION_URL.format(station_id=observation.station_id),
        )
    ]

    provider = PROVIDER_SOURCES.get((observation.source or "").lower())
    if provider:
        sources.append(DataSource(**provider))

    if fire_alerts:
        sources.append(DataSource(**NWS_SOURCE))

    return sources


def build_notes(
    observation: Observation,
    fire_alerts: Sequence[Alert],
    history: Sequence[HistoryPoint],
    threshold_warning: bool = False,
    gust_estimated: bool = False,
) -> str:
    notes = ["Real-time observations from RAWS station."]

    if fire_alerts:
        notes.append("Red Flag warnings from National Weather Service.")
    elif threshold_warning:
        notes.append("Red Flag conditions detected based on humidity and wind thresholds.")

    if gust_estimated:
        notes.append(
            "Wind gusts estimated as 1.5x sustained wind speed (no gust reported)."
        )

    notes.append(
        "Precipitation probability is an estimate from current humidity and "
        "recent precipitation, not a forecast."
    )
    if observation.precip_accum is not None and observation.precip_accum > 0:
        notes.append(f"Recent precipitation: {round_half_up(observation.precip_accum, 2)} inches.")

    if history:
        notes.append("Extreme weather changes analyzed from recent observations.")

    if observation.fuel_moisture is not None:
        notes.append(f"10-hour fuel moisture: {round_half_up(observation.fuel_moisture, 1)}%.")
    else:
        estimated = estimate_10hour_fuel_moisture(
            observation.temperature, observation.relative_humidity
        )
        notes.append(
            f"Estimated 10-hour fuel moisture: {round_half_up(estimated, 1)}% "
            "(calculated from temperature and humidity)."
        )

    return " ".join(notes)
