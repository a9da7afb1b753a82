"""get_raws_historical: time series from a RAWS station for trend analysis."""

from typing import Optional, Sequence

from fastmcp.utilities.logging import get_logger

from raws_server.config.constants import VARIABLE_MAPPING
from raws_server.errors import NoDataError
from raws_server.services.client_manager import ClientManager
from raws_server.tools import success_response
from raws_server.utils.validators import require_date_range, require_station_id

logger = get_logger(__name__)


def map_variables(variables: Optional[Sequence[str]]) -> list[str]:
    """Friendly variable names to API sensor names; unknown names pass through."""
    mapped = []
    for variable in variables or []:
        if not variable:
            continue
        name = VARIABLE_MAPPING.get(variable.strip().lower(), variable.strip())
        if name not in mapped:
            mapped.append(name)
    return mapped


async def get_raws_historical(
    manager: ClientManager,
    station_id: str,
    start_time: str,
    end_time: str,
    variables: Optional[list[str]] = None,
) -> dict:
    """
    Args:
        manager: Client coordinator
        station_id: RAWS station id
        start_time: ISO 8601 window start
        end_time: ISO 8601 window end (not in the future, within a year of start)
        variables: Variables to retrieve (default: all)
    """
    station_id = require_station_id(station_id)
    start, end = require_date_range(start_time, end_time)
    api_variables = map_variables(variables)

    logger.info(
        f"Fetching history for {station_id} from {start.isoformat()} to {end.isoformat()}"
    )
    series = await manager.get_historical_observations(station_id, start, end, api_variables)

    if not series.points:
        raise NoDataError(
            f"No historical data found for station {station_id} in the specified time range.",
            details={"station_id": station_id, "start_time": start_time, "end_time": end_time},
        )

    logger.info(f"Retrieved {len(series.points)} points for {station_id}")
    return success_response(
        {
            "station_id": series.station_id,
            "station_name": series.station_name,
            "time_series": [point.model_dump() for point in series.points],
            "start_time": start_time,
            "end_time": end_time,
        },
        {
            "data_points": len(series.points),
            "source": series.source,
            "elevation": series.elevation,
            "coordinates": {
                "latitude": series.latitude,
                "longitude": series.longitude,
            },
        },
    )
