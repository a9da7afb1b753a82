"""
calculate_fire_indices

Fire weather indices for caller-supplied conditions, with a plain-language
reading of each value and supporting dewpoint, heat index and severity
factors.
"""

from datetime import datetime, timezone
from typing import Optional

from fastmcp.utilities.logging import get_logger

from raws_server.config.constants import DEFAULT_ELEVATION
from raws_server.config.settings import ServerSettings
from raws_server.errors import FeatureDisabledError, InputValidationError
from raws_server.tools import success_response
from raws_server.utils.calculations import calculate_fire_indices as compute_indices
from raws_server.utils.units import round_half_up
from raws_server.utils.validators import (
    is_valid_humidity,
    is_valid_temperature,
    is_valid_wind_speed,
)
from raws_server.utils.weather import (
    assess_fire_weather_severity,
    calculate_dewpoint,
    calculate_heat_index,
)

logger = get_logger(__name__)

CANNOT_CALCULATE = "Cannot calculate"


def interpret_fosberg(value: Optional[int]) -> str:
    if value is None:
        return CANNOT_CALCULATE
    if value < 20:
        return "Low fire danger"
    if value < 40:
        return "Moderate fire danger"
    if value < 60:
        return "High fire danger"
    if value < 80:
        return "Very high fire danger"
    return "Extreme fire danger"


def interpret_haines(value: Optional[int]) -> str:
    if value is None:
        return CANNOT_CALCULATE
    if value <= 3:
        return "Low potential for extreme fire behavior"
    if value == 4:
        return "Moderate potential for extreme fire behavior"
    return "High potential for extreme fire behavior"


def interpret_chandler(value: Optional[int]) -> str:
    if value is None:
        return CANNOT_CALCULATE
    if value < 50:
        return "Low fire danger"
    if value < 75:
        return "Moderate fire danger"
    if value < 90:
        return "High fire danger"
    return "Extreme fire danger"


def _validate_conditions(
    temperature: float, relative_humidity: float, wind_speed: float
) -> None:
    if not is_valid_temperature(temperature):
        raise InputValidationError(
            f"Invalid temperature: {temperature}. Must be between -100 and 150°F.",
            code="INVALID_TEMPERATURE",
            details={"temperature": temperature},
        )
    if not is_valid_humidity(relative_humidity):
        raise InputValidationError(
            f"Invalid relative humidity: {relative_humidity}. Must be between 0 and 100%.",
            code="INVALID_HUMIDITY",
            details={"relative_humidity": relative_humidity},
        )
    if not is_valid_wind_speed(wind_speed):
        raise InputValidationError(
            f"Invalid wind speed: {wind_speed}. Must be between 0 and 200 mph.",
            code="INVALID_WIND_SPEED",
            details={"wind_speed": wind_speed},
        )


async def calculate_fire_indices(
    settings: ServerSettings,
    temperature: float,
    relative_humidity: float,
    wind_speed: float,
    fuel_moisture: Optional[float] = None,
    elevation: float = DEFAULT_ELEVATION,
) -> dict:
    """
    Args:
        settings: Server settings (feature flags)
        temperature: Air temperature in Fahrenheit
        relative_humidity: Relative humidity in percent
        wind_speed: Sustained wind speed in mph
        fuel_moisture: 10-hour fuel moisture in percent (estimated if omitted)
        elevation: Station elevation in feet
    """
    if not settings.features.fire_indices:
        raise FeatureDisabledError(
            "Fire indices calculation is disabled. Set ENABLE_FIRE_INDICES=true to enable."
        )

    _validate_conditions(temperature, relative_humidity, wind_speed)

    logger.info(
        f"Calculating fire indices for {temperature}F, {relative_humidity}% RH, "
        f"{wind_speed} mph"
    )
    result = compute_indices(
        temperature, relative_humidity, wind_speed, fuel_moisture, elevation
    )

    dewpoint = calculate_dewpoint(temperature, relative_humidity)

    data = {
        "indices": {
            "fosberg_ffwi": {
                "value": result.fosberg_ffwi,
                "description": "Fosberg Fire Weather Index",
                "interpretation": interpret_fosberg(result.fosberg_ffwi),
            },
            "haines_index": {
                "value": result.haines_index,
                "description": "Haines Index (atmospheric stability)",
                "interpretation": interpret_haines(result.haines_index),
            },
            "chandler_burning_index": {
                "value": result.chandler_burning_index,
                "description": "Chandler Burning Index",
                "interpretation": interpret_chandler(result.chandler_burning_index),
            },
        },
        "fire_danger": {
            "class": result.fire_danger_class,
            "red_flag_conditions": result.red_flag_conditions,
            "ignition_probability": result.ignition_probability,
        },
        "severity": assess_fire_weather_severity(
            temperature, relative_humidity, wind_speed, fuel_moisture=fuel_moisture
        ),
        "derived": {
            "dewpoint": round_half_up(dewpoint, 1) if dewpoint is not None else None,
            "heat_index": calculate_heat_index(temperature, relative_humidity),
        },
        "conditions": {
            "temperature": temperature,
            "relative_humidity": relative_humidity,
            "wind_speed": wind_speed,
            "fuel_moisture": fuel_moisture,
            "elevation": elevation,
        },
    }

    logger.info(
        f"Fire danger {result.fire_danger_class} (FFWI {result.fosberg_ffwi}, "
        f"Haines {result.haines_index}, CBI {result.chandler_burning_index})"
    )
    return success_response(
        data,
        {
            "calculation_time": datetime.now(timezone.utc).isoformat(),
            "note": "Haines Index is estimated from surface conditions",
        },
    )
