"""
get_raws_current

Current conditions at a RAWS station, transformed into the wildfire risk
document. Optionally attaches fire indices and looks back over the last
few hours for rapid changes.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastmcp.utilities.logging import get_logger

from raws_server.config.constants import TREND_LOOKBACK_HOURS, TREND_WINDOW_MINUTES
from raws_server.config.settings import ServerSettings
from raws_server.errors import RawsError
from raws_server.schemas.models import HistoryPoint, Observation
from raws_server.schemas.transformer import transform_to_wildfire_schema
from raws_server.services.client_manager import ClientManager
from raws_server.tools import success_response
from raws_server.utils.calculations import calculate_fire_indices
from raws_server.utils.units import degrees_to_cardinal
from raws_server.utils.validators import require_station_id
from raws_server.utils.weather import format_observation

logger = get_logger(__name__)


async def get_raws_current(
    manager: ClientManager,
    settings: ServerSettings,
    station_id: str,
    include_fire_indices: bool = False,
    include_trends: bool = False,
    now: Optional[datetime] = None,
) -> dict:
    """
    Args:
        manager: Client coordinator
        settings: Server settings (feature flags)
        station_id: RAWS station id, optionally prefixed with "RAWS:"
        include_fire_indices: Attach Fosberg/Haines/Chandler indices
        include_trends: Fetch recent history to detect rapid changes
        now: Reference time (defaults to the current UTC time)
    """
    station_id = require_station_id(station_id)
    now = now or datetime.now(timezone.utc)

    logger.info(f"Fetching current observation for {station_id}")
    observation = await manager.get_current_observation(station_id)

    alerts = []
    if observation.latitude is not None and observation.longitude is not None:
        alerts = await manager.get_nws_alerts(observation.latitude, observation.longitude)

    history = (
        await _recent_history(manager, settings, station_id, now) if include_trends else []
    )

    fire_indices = None
    if include_fire_indices and settings.features.fire_indices:
        fire_indices = calculate_fire_indices(
            observation.temperature,
            observation.relative_humidity,
            observation.wind_speed,
            observation.fuel_moisture,
            observation.elevation,
        )

    document = transform_to_wildfire_schema(
        observation,
        alerts=alerts,
        history=history,
        fire_indices=fire_indices,
        now=now,
    )

    logger.info(f"Served current observation for {station_id} from {observation.source}")
    return success_response(
        document.model_dump(exclude_none=True),
        _build_metadata(observation, station_id),
    )


async def _recent_history(
    manager: ClientManager, settings: ServerSettings, station_id: str, now: datetime
) -> list[HistoryPoint]:
    """Last few hours of observations; trends are best effort."""
    end = trend_window_end(now)
    start = end - timedelta(hours=TREND_LOOKBACK_HOURS)
    try:
        # Open window: expires with current observations
        series = await manager.get_historical_observations(
            station_id, start, end, ttl=settings.cache.current_ttl
        )
    except RawsError as e:
        logger.warning(f"Trend history unavailable for {station_id}: {e}")
        return []
    return list(series.points)


def trend_window_end(now: datetime) -> datetime:
    """Round `now` down to the trend window boundary."""
    return now.replace(
        minute=now.minute - now.minute % TREND_WINDOW_MINUTES, second=0, microsecond=0
    )


def _build_metadata(observation: Observation, station_id: str) -> dict:
    metadata = {
        "station_id": station_id,
        "observation_time": observation.timestamp,
        "source": observation.source,
        "elevation": observation.elevation,
        "coordinates": {
            "latitude": observation.latitude,
            "longitude": observation.longitude,
        },
    }
    if None not in (
        observation.temperature,
        observation.relative_humidity,
        observation.wind_speed,
    ):
        metadata["summary"] = format_observation(
            observation.temperature,
            observation.relative_humidity,
            observation.wind_speed,
            wind_direction=degrees_to_cardinal(observation.wind_direction),
            wind_gust=observation.wind_gust,
        )
    return metadata
