"""get_nws_forecast: National Weather Service forecast for a point."""

from fastmcp.utilities.logging import get_logger

from raws_server.config.settings import ServerSettings
from raws_server.errors import FeatureDisabledError, NoDataError
from raws_server.services.client_manager import ClientManager
from raws_server.tools import success_response
from raws_server.utils.validators import require_coordinates

logger = get_logger(__name__)


async def get_nws_forecast(
    manager: ClientManager,
    settings: ServerSettings,
    latitude: float,
    longitude: float,
) -> dict:
    require_coordinates(latitude, longitude)
    if not settings.features.nws_integration:
        raise FeatureDisabledError(
            "NWS integration is disabled. Set ENABLE_NWS_INTEGRATION=true to enable."
        )

    forecast = await manager.get_nws_forecast(latitude, longitude)
    if forecast is None or not forecast.periods:
        raise NoDataError(
            f"No NWS forecast available for ({latitude}, {longitude})",
            details={"latitude": latitude, "longitude": longitude},
        )

    logger.info(f"Served {len(forecast.periods)} forecast periods for ({latitude}, {longitude})")
    return success_response(
        forecast.model_dump(),
        {
            "source": "National Weather Service",
            "coordinates": {"latitude": latitude, "longitude": longitude},
            "periods": len(forecast.periods),
        },
    )
