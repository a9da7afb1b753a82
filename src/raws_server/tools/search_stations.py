"""search_raws_stations: active RAWS stations near a point, nearest first."""

from datetime import datetime, timezone

from fastmcp.utilities.logging import get_logger

from raws_server.config.constants import (
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_SEARCH_RADIUS,
    MAX_SEARCH_LIMIT,
    MAX_SEARCH_RADIUS,
)
from raws_server.errors import InputValidationError
from raws_server.services.client_manager import ClientManager
from raws_server.tools import success_response
from raws_server.utils.units import haversine_miles, round_half_up
from raws_server.utils.validators import is_valid_radius, require_coordinates

logger = get_logger(__name__)


async def search_raws_stations(
    manager: ClientManager,
    latitude: float,
    longitude: float,
    radius: float = DEFAULT_SEARCH_RADIUS,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> dict:
    """
    Args:
        manager: Client coordinator
        latitude: Search center latitude
        longitude: Search center longitude
        radius: Search radius in miles (up to 500)
        limit: Maximum stations to return, clamped to 1-50
    """
    require_coordinates(latitude, longitude)
    if not is_valid_radius(radius):
        raise InputValidationError(
            f"Invalid radius: {radius}. Must be greater than 0 and at most "
            f"{MAX_SEARCH_RADIUS} miles.",
            code="INVALID_RADIUS",
            details={"radius": radius},
        )

    limit = min(max(1, int(limit)), MAX_SEARCH_LIMIT)

    logger.info(f"Searching stations within {radius} mi of ({latitude}, {longitude})")
    stations = await manager.search_stations(latitude, longitude, radius, limit)

    results = []
    for station in stations:
        entry = station.model_dump()
        if station.latitude is not None and station.longitude is not None:
            distance = haversine_miles(
                latitude, longitude, station.latitude, station.longitude
            )
            entry["distance_miles"] = round_half_up(distance, 1)
        else:
            entry["distance_miles"] = None
        results.append(entry)

    # Stations without coordinates sort last
    results.sort(
        key=lambda entry: (entry["distance_miles"] is None, entry["distance_miles"] or 0)
    )

    logger.info(f"Found {len(results)} stations near ({latitude}, {longitude})")
    return success_response(
        {
            "stations": results,
            "search_location": {"latitude": latitude, "longitude": longitude},
            "search_radius_miles": radius,
        },
        {
            "count": len(results),
            "search_time": datetime.now(timezone.utc).isoformat(),
        },
    )
