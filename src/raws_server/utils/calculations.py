"""
Fire Weather Calculations

Pure functions computing fire weather indices from surface observations.
Every calculator treats a missing numeric input as "cannot compute" and
returns None rather than substituting zero.

References:
- NFDRS: https://www.nwcg.gov/publications/pms437
- Fosberg FFWI: https://www.fs.usda.gov/research/treesearch/4442
- Haines Index: https://www.weather.gov/source/zhu/ZHU_Training_Page/turbulence_stuff/haines/haines.htm
"""

import math
from typing import Optional

from raws_server.schemas.models import FireIndexResult
from raws_server.utils.units import fahrenheit_to_celsius, round_half_up

DANGER_CLASSES = ("Low", "Moderate", "High", "Very High", "Extreme")


def _missing(*values) -> bool:
    return any(value is None for value in values)


def calculate_equilibrium_moisture_content(
    temperature: Optional[float], relative_humidity: Optional[float]
) -> Optional[float]:
    """
    Calculate Equilibrium Moisture Content (EMC) with the Simard equations.

    The moisture content dead fuel would reach if left to equilibrate with
    the current air temperature and humidity.

    Args:
        temperature: Temperature in Fahrenheit
        relative_humidity: Relative humidity (0-100%)

    Returns:
        Optional[float]: EMC percentage, or None if an input is missing
    """
    if _missing(temperature, relative_humidity):
        return None

    h = max(0.0, min(100.0, relative_humidity))
    t = temperature

    if h < 10:
        emc = 0.03229 + 0.281073 * h - 0.000578 * h * t
    elif h < 50:
        emc = 2.22749 + 0.160107 * h - 0.01478 * t
    else:
        emc = 21.0606 + 0.005565 * h * h - 0.00035 * h * t - 0.483199 * h

    return max(0.0, emc)


def estimate_10hour_fuel_moisture(
    temperature: Optional[float], relative_humidity: Optional[float]
) -> Optional[float]:
    """
    Estimate 10-hour fuel moisture when no fuel sensor reports.

    10-hour fuels (0.25-1 inch dead fuels) track EMC closely, so the EMC is
    used directly as the estimate.
    """
    return calculate_equilibrium_moisture_content(temperature, relative_humidity)


def calculate_fosberg_ffwi(
    temperature: Optional[float],
    relative_humidity: Optional[float],
    wind_speed: Optional[float],
) -> Optional[int]:
    """
    Calculate the Fosberg Fire Weather Index (FFWI).

    FFWI = eta * sqrt(1 + U^2) / 0.3002, where eta is the moisture damping
    coefficient derived from the EMC and U is the wind speed in mph.

    Args:
        temperature: Temperature in Fahrenheit
        relative_humidity: Relative humidity (0-100%)
        wind_speed: Wind speed in mph

    Returns:
        Optional[int]: FFWI (0-100+), or None if an input is missing
    """
    if _missing(temperature, relative_humidity, wind_speed):
        return None

    relative_humidity = max(1.0, min(100.0, relative_humidity))
    wind_speed = max(0.0, wind_speed)

    emc = calculate_equilibrium_moisture_content(temperature, relative_humidity)
    m = min(emc, 30.0) / 30.0
    eta = 1 - 2 * m + 1.5 * m**2 - 0.5 * m**3

    ffwi = eta * math.sqrt(1 + wind_speed * wind_speed) / 0.3002
    return max(0, round_half_up(ffwi))


def calculate_haines_index(
    temperature: Optional[float],
    relative_humidity: Optional[float],
    elevation: Optional[float] = None,
) -> Optional[int]:
    """
    Approximate the Haines Index from surface conditions.

    The real index needs 850/700 mb temperature and dewpoint soundings,
    which RAWS stations do not provide. Surface temperature stands in for
    the stability term and surface humidity for the moisture term.

    Haines Index ranges:
        2-3: Low potential
        4: Moderate potential
        5-6: High potential for extreme fire behavior

    Args:
        temperature: Surface temperature in Fahrenheit
        relative_humidity: Surface relative humidity (0-100%)
        elevation: Station elevation in feet (accepted for interface
            compatibility; the surface approximation does not use it)

    Returns:
        Optional[int]: Haines Index (2-6), or None if an input is missing
    """
    if _missing(temperature, relative_humidity):
        return None

    if temperature >= 90:
        stability = 3
    elif temperature >= 75:
        stability = 2
    else:
        stability = 1

    if relative_humidity <= 20:
        moisture = 3
    elif relative_humidity <= 40:
        moisture = 2
    else:
        moisture = 1

    return stability + moisture


def calculate_chandler_burning_index(
    temperature: Optional[float],
    relative_humidity: Optional[float],
    fuel_moisture: Optional[float] = None,
) -> Optional[int]:
    """
    Calculate the Chandler Burning Index (CBI).

    CBI = ((110 - 1.373*RH) - 0.54*(10.20 - Tc)) * 124 * 10^(-0.0142*FM) / 60

    CBI ranges:
        0-50: Low fire danger
        50-75: Moderate fire danger
        75-90: High fire danger
        90+: Extreme fire danger

    Args:
        temperature: Temperature in Fahrenheit
        relative_humidity: Relative humidity (0-100%)
        fuel_moisture: 10-hour fuel moisture %; estimated from EMC when None

    Returns:
        Optional[int]: CBI (>= 0), or None if temperature/humidity missing
    """
    if _missing(temperature, relative_humidity):
        return None

    if fuel_moisture is None:
        fuel_moisture = estimate_10hour_fuel_moisture(temperature, relative_humidity)

    celsius = fahrenheit_to_celsius(temperature)
    drying = (110 - 1.373 * relative_humidity) - 0.54 * (10.20 - celsius)
    fuel = 124 * math.pow(10, -0.0142 * fuel_moisture)
    cbi = drying * fuel / 60

    return max(0, round_half_up(cbi))


def is_red_flag_conditions(
    relative_humidity: Optional[float],
    wind_speed: Optional[float],
    strict: bool = False,
) -> bool:
    """
    Check whether humidity and wind meet Red Flag criteria.

    Criteria vary by region:
        strict: RH < 15% and wind > 25 mph
        relaxed: strict, or RH < 20% and wind > 20 mph

    Returns:
        bool: True if conditions meet the criteria; False on missing input
    """
    if _missing(relative_humidity, wind_speed):
        return False

    critical = relative_humidity < 15 and wind_speed > 25
    if strict:
        return critical
    return critical or (relative_humidity < 20 and wind_speed > 20)


def calculate_fire_danger_class(
    temperature: Optional[float],
    relative_humidity: Optional[float],
    wind_speed: Optional[float],
    fuel_moisture: Optional[float] = None,
) -> Optional[str]:
    """
    Classify fire danger as Low, Moderate, High, Very High or Extreme.

    Critically low humidity (<10%), critically dry fuel (<5%) or strict
    Red Flag conditions force Extreme; otherwise the CBI is banded.
    """
    if _missing(temperature, relative_humidity, wind_speed):
        return None

    if relative_humidity < 10:
        return "Extreme"
    if fuel_moisture is not None and fuel_moisture < 5:
        return "Extreme"
    if is_red_flag_conditions(relative_humidity, wind_speed, strict=True):
        return "Extreme"

    cbi = calculate_chandler_burning_index(temperature, relative_humidity, fuel_moisture)
    if cbi >= 90:
        return "Extreme"
    if cbi >= 75:
        return "Very High"
    if cbi >= 50:
        return "High"
    if cbi >= 25:
        return "Moderate"
    return "Low"


def estimate_ignition_probability(
    temperature: Optional[float],
    relative_humidity: Optional[float],
    wind_speed: Optional[float],
) -> Optional[int]:
    """Additive point score for ignition likelihood (0-100)."""
    if _missing(temperature, relative_humidity, wind_speed):
        return None

    probability = 0

    if temperature >= 95:
        probability += 30
    elif temperature >= 85:
        probability += 20
    elif temperature >= 75:
        probability += 10

    if relative_humidity <= 10:
        probability += 40
    elif relative_humidity <= 20:
        probability += 30
    elif relative_humidity <= 30:
        probability += 20
    elif relative_humidity <= 40:
        probability += 10

    if wind_speed >= 20:
        probability += 20
    elif wind_speed >= 10:
        probability += 10
    elif wind_speed >= 5:
        probability += 5

    return min(100, probability)


def calculate_fire_indices(
    temperature: Optional[float],
    relative_humidity: Optional[float],
    wind_speed: Optional[float],
    fuel_moisture: Optional[float] = None,
    elevation: Optional[float] = None,
) -> FireIndexResult:
    """Compute every index for one set of conditions."""
    return FireIndexResult(
        fosberg_ffwi=calculate_fosberg_ffwi(temperature, relative_humidity, wind_speed),
        haines_index=calculate_haines_index(temperature, relative_humidity, elevation),
        chandler_burning_index=calculate_chandler_burning_index(
            temperature, relative_humidity, fuel_moisture
        ),
        fire_danger_class=calculate_fire_danger_class(
            temperature, relative_humidity, wind_speed, fuel_moisture
        ),
        red_flag_conditions=is_red_flag_conditions(relative_humidity, wind_speed),
        ignition_probability=estimate_ignition_probability(
            temperature, relative_humidity, wind_speed
        ),
    )
