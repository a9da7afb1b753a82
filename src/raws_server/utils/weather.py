"""
Weather Heuristics

Estimation rules and derived-quantity helpers used by the transformer and
the fire index tool:
- Rain probability from current humidity and recent precipitation
- Wind gust estimate from sustained speed
- Extreme change detection across a time series
- Dewpoint, heat index, severity scoring and display formatting
"""

import math
from datetime import datetime, timezone
from typing import Optional, Sequence

from raws_server.config.constants import (
    GUST_FACTOR,
    TREND_HUMIDITY_DROP,
    TREND_MAX_GAP_HOURS,
    TREND_TEMPERATURE_SPIKE,
    TREND_WIND_INCREASE,
)
from raws_server.schemas.models import ExtremeChange, HistoryPoint
from raws_server.utils.units import (
    celsius_to_fahrenheit,
    fahrenheit_to_celsius,
    round_half_up,
)


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (trailing Z allowed) as aware UTC."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def estimate_probability_of_rain(
    relative_humidity: float,
    recent_precip: Optional[float] = None,
    temperature: Optional[float] = None,
) -> int:
    """
    Estimate the probability of rain from current conditions.

    RAWS stations provide no forecast, so this is a rough estimate driven
    by humidity bands and any recent accumulated precipitation.

    Args:
        relative_humidity: Current relative humidity (0-100)
        recent_precip: Recent precipitation in inches, None if unreported
        temperature: Current temperature in Fahrenheit

    Returns:
        int: Estimated probability (0-100)
    """
    probability = 0

    if relative_humidity >= 90:
        probability += 60
    elif relative_humidity >= 80:
        probability += 40
    elif relative_humidity >= 70:
        probability += 20
    elif relative_humidity >= 60:
        probability += 10

    if recent_precip is not None:
        if recent_precip > 0.1:
            probability += 20
        elif recent_precip > 0.01:
            probability += 10

    # Below freezing precipitation is more likely snow
    if temperature is not None and temperature < 32:
        probability = max(0, probability - 10)

    return min(100, probability)


def estimate_wind_gust(wind_speed: Optional[float]) -> Optional[int]:
    """
    Estimate a gust speed when no gust sensor reports.

    Gusts run 1.3-1.5x the sustained speed; the upper factor is used.

    Returns:
        Optional[int]: round(1.5 * speed), or None if speed is missing
    """
    if wind_speed is None:
        return None
    return round_half_up(wind_speed * GUST_FACTOR)


def detect_extreme_changes(series: Sequence[HistoryPoint]) -> list[ExtremeChange]:
    """
    Scan consecutive observations for rapid fire-weather changes.

    Flags, for pairs no more than three hours apart:
    - wind speed increase above 15 mph
    - humidity drop above 20 percentage points
    - temperature rise above 20 degrees F

    Pairs where either side lacks the value are skipped.

    Args:
        series: Observations in any order

    Returns:
        list[ExtremeChange]: One entry per detected change, in time order
    """
    timed = []
    for point in series:
        moment = parse_timestamp(point.timestamp)
        if moment is not None:
            timed.append((moment, point))

    if len(timed) < 2:
        return []

    timed.sort(key=lambda item: item[0])
    changes = []

    for (start, current), (end, following) in zip(timed, timed[1:]):
        gap_hours = (end - start).total_seconds() / 3600
        if not 0 < gap_hours <= TREND_MAX_GAP_HOURS:
            continue

        minutes = round_half_up(gap_hours * 60)
        time_frame = f"{minutes} minutes ending {following.timestamp}"

        if current.wind_speed is not None and following.wind_speed is not None:
            increase = following.wind_speed - current.wind_speed
            if increase > TREND_WIND_INCREASE:
                changes.append(
                    ExtremeChange(
                        parameter="wind",
                        change="increased by",
                        magnitude=f"{round_half_up(increase)} mph",
                        time_frame=time_frame,
                    )
                )

        if (
            current.relative_humidity is not None
            and following.relative_humidity is not None
        ):
            drop = current.relative_humidity - following.relative_humidity
            if drop > TREND_HUMIDITY_DROP:
                changes.append(
                    ExtremeChange(
                        parameter="humidity",
                        change="dropped by",
                        magnitude=f"{round_half_up(drop)}%",
                        time_frame=time_frame,
                    )
                )

        if current.temperature is not None and following.temperature is not None:
            rise = following.temperature - current.temperature
            if rise > TREND_TEMPERATURE_SPIKE:
                changes.append(
                    ExtremeChange(
                        parameter="temperature",
                        change="increased by",
                        magnitude=f"{round_half_up(rise)}°F",
                        time_frame=time_frame,
                    )
                )

    return changes


def calculate_dewpoint(temperature: float, relative_humidity: float) -> Optional[float]:
    """Dewpoint in Fahrenheit via the Magnus formula."""
    if relative_humidity <= 0:
        return None

    temp_c = fahrenheit_to_celsius(temperature)
    a, b = 17.27, 237.7
    alpha = (a * temp_c) / (b + temp_c) + math.log(relative_humidity / 100)
    dewpoint_c = (b * alpha) / (a - alpha)
    return celsius_to_fahrenheit(dewpoint_c)


def calculate_heat_index(temperature: float, relative_humidity: float) -> int:
    """
    Heat index (apparent temperature) using the Rothfusz regression.

    Below 80 F the heat index is the air temperature.
    """
    if temperature < 80:
        return round_half_up(temperature)

    t = temperature
    rh = relative_humidity

    hi = (
        -42.379
        + 2.04901523 * t
        + 10.14333127 * rh
        - 0.22475541 * t * rh
        - 6.83783e-3 * t * t
        - 5.481717e-2 * rh * rh
        + 1.22874e-3 * t * t * rh
        + 8.5282e-4 * t * rh * rh
        - 1.99e-6 * t * t * rh * rh
    )

    if rh < 13 and 80 <= t <= 112:
        hi -= ((13 - rh) / 4) * math.sqrt((17 - abs(t - 95)) / 17)
    elif rh > 85 and 80 <= t <= 87:
        hi += ((rh - 85) / 10) * ((87 - t) / 5)

    return round_half_up(hi)


def assess_fire_weather_severity(
    temperature: float,
    relative_humidity: float,
    wind_speed: float,
    wind_gust: Optional[float] = None,
    fuel_moisture: Optional[float] = None,
) -> dict:
    """
    Score contributing fire weather factors and name them.

    Returns:
        dict: {"severity": tier, "score": int, "factors": [str, ...]}
    """
    factors = []
    score = 0

    if temperature >= 100:
        factors.append("Extreme temperature")
        score += 3
    elif temperature >= 90:
        factors.append("High temperature")
        score += 2
    elif temperature >= 80:
        factors.append("Elevated temperature")
        score += 1

    if relative_humidity <= 10:
        factors.append("Critically low humidity")
        score += 4
    elif relative_humidity <= 15:
        factors.append("Very low humidity")
        score += 3
    elif relative_humidity <= 25:
        factors.append("Low humidity")
        score += 2
    elif relative_humidity <= 35:
        factors.append("Below average humidity")
        score += 1

    max_wind = wind_gust if wind_gust is not None else wind_speed
    if max_wind >= 40:
        factors.append("Dangerous winds")
        score += 4
    elif max_wind >= 30:
        factors.append("Very high winds")
        score += 3
    elif max_wind >= 20:
        factors.append("High winds")
        score += 2
    elif max_wind >= 15:
        factors.append("Elevated winds")
        score += 1

    if fuel_moisture is not None:
        if fuel_moisture <= 5:
            factors.append("Critically dry fuels")
            score += 3
        elif fuel_moisture <= 8:
            factors.append("Very dry fuels")
            score += 2
        elif fuel_moisture <= 10:
            factors.append("Dry fuels")
            score += 1

    if score >= 10:
        severity = "Extreme"
    elif score >= 7:
        severity = "Very High"
    elif score >= 5:
        severity = "High"
    elif score >= 3:
        severity = "Moderate"
    else:
        severity = "Low"

    return {"severity": severity, "score": score, "factors": factors}


def format_observation(
    temperature: Optional[float],
    relative_humidity: Optional[float],
    wind_speed: Optional[float],
    wind_direction: Optional[str] = None,
    wind_gust: Optional[float] = None,
) -> str:
    """One-line human summary, e.g. '88°F, 13% RH, Wind 28 mph NW, Gusts 43 mph'."""
    parts = []

    if temperature is not None:
        parts.append(f"{round_half_up(temperature)}°F")

    if relative_humidity is not None:
        parts.append(f"{round_half_up(relative_humidity)}% RH")

    if wind_speed is not None:
        wind = f"Wind {round_half_up(wind_speed)} mph"
        if wind_direction:
            wind = f"{wind} {wind_direction}"
        parts.append(wind)

        if wind_gust is not None and wind_gust > wind_speed:
            parts.append(f"Gusts {round_half_up(wind_gust)} mph")

    return ", ".join(parts)
