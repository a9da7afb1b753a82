"""
Unit Conversion Utilities

Pure functions for temperature, speed, distance conversions, wind
direction labels, great-circle distance and half-up rounding.
"""

import math
from typing import Optional

from raws_server.config.constants import (
    COMPASS_POINTS,
    EARTH_RADIUS_MILES,
    UNKNOWN_DIRECTION,
)

_SECTOR = 360 / len(COMPASS_POINTS)


def fahrenheit_to_celsius(fahrenheit: float) -> float:
    return (fahrenheit - 32) * 5 / 9


def celsius_to_fahrenheit(celsius: float) -> float:
    return celsius * 9 / 5 + 32


def mph_to_kmh(mph: float) -> float:
    return mph * 1.60934


def kmh_to_mph(kmh: float) -> float:
    return kmh / 1.60934


def meters_to_feet(meters: float) -> float:
    return meters * 3.28084


def feet_to_meters(feet: float) -> float:
    return feet / 3.28084


def inches_to_millimeters(inches: float) -> float:
    return inches * 25.4


def millimeters_to_inches(millimeters: float) -> float:
    return millimeters / 25.4


def round_half_up(value: float, decimals: int = 0) -> float:
    """
    Round a number to the given decimal places, halves away from zero.

    Python's built-in round() uses banker's rounding (12.5 -> 12); reported
    weather values round the conventional way (12.5 -> 13).

    Args:
        value: Number to round
        decimals: Number of decimal places

    Returns:
        float: Rounded value (int when decimals == 0)
    """
    multiplier = 10**decimals
    rounded = math.floor(abs(value) * multiplier + 0.5) / multiplier
    rounded = math.copysign(rounded, value)
    if decimals == 0:
        return int(rounded)
    return rounded


def degrees_to_cardinal(degrees: Optional[float]) -> str:
    """
    Convert a wind direction in degrees to a 16-point compass label.

    Each label owns a 22.5 degree sector centered on it, so N covers
    348.75 up to (not including) 11.25. Any real input is normalized
    modulo 360 first.

    Args:
        degrees: Direction in degrees, or None

    Returns:
        str: Compass label, or "Unknown" for a missing/non-finite input
    """
    if degrees is None or isinstance(degrees, bool):
        return UNKNOWN_DIRECTION
    try:
        degrees = float(degrees)
    except (TypeError, ValueError):
        return UNKNOWN_DIRECTION
    if not math.isfinite(degrees):
        return UNKNOWN_DIRECTION

    normalized = degrees % 360
    index = int(math.floor((normalized + _SECTOR / 2) / _SECTOR)) % len(COMPASS_POINTS)
    return COMPASS_POINTS[index]


def cardinal_to_degrees(cardinal: Optional[str]) -> Optional[float]:
    """
    Convert a compass label to the center of its sector.

    Returns:
        Optional[float]: Degrees in [0, 360), or None for unknown labels
    """
    if not cardinal:
        return None
    label = cardinal.strip().upper()
    if label not in COMPASS_POINTS:
        return None
    return COMPASS_POINTS.index(label) * _SECTOR


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in miles between two lat/lon points."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c
