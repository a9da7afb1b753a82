"""
National Weather Service API Client

Fetches active alerts and gridpoint forecasts from api.weather.gov. The
NWS API needs no token but rejects requests without a User-Agent.

API Documentation: https://www.weather.gov/documentation/services-web-api
"""

from typing import Optional

import httpx

from raws_server.config.settings import ServerSettings
from raws_server.errors import UpstreamPayloadError
from raws_server.schemas.adapters import adapt_nws_alerts, adapt_nws_forecast
from raws_server.schemas.models import Alert, Forecast
from raws_server.services.http_client import BaseHTTPClient


class NWSClient(BaseHTTPClient):
    """Alerts and forecasts for a latitude/longitude point."""

    name = "nws"

    def __init__(
        self,
        settings: Optional[ServerSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(settings=settings, transport=transport)
        self.base_url = self.settings.api.nws_base_url.rstrip("/")

    @property
    def default_headers(self) -> dict:
        return {
            "User-Agent": self.settings.api.user_agent,
            "Accept": "application/geo+json",
        }

    async def get_alerts(self, latitude: float, longitude: float) -> list[Alert]:
        """Active alerts covering the point."""
        self.logger.info(f"Fetching NWS alerts for ({latitude}, {longitude})")
        payload = await self.get_json(
            f"{self.base_url}/alerts/active",
            {"point": f"{latitude:.4f},{longitude:.4f}"},
        )
        alerts = adapt_nws_alerts(payload)
        self.logger.debug(f"NWS returned {len(alerts)} active alerts")
        return alerts

    async def get_forecast(self, latitude: float, longitude: float) -> Optional[Forecast]:
        """
        Forecast for the point.

        Resolves the point to its gridpoint first, then fetches the forecast
        URL the points endpoint references.
        """
        self.logger.info(f"Fetching NWS forecast for ({latitude}, {longitude})")
        point = await self.get_json(f"{self.base_url}/points/{latitude:.4f},{longitude:.4f}")

        forecast_url = ((point or {}).get("properties") or {}).get("forecast")
        if not forecast_url:
            raise UpstreamPayloadError(
                "NWS points response has no forecast URL",
                details={"latitude": latitude, "longitude": longitude},
            )

        return adapt_nws_forecast(await self.get_json(forecast_url))
