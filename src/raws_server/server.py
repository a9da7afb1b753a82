#!/usr/bin/env python3
"""
RAWS MCP Server

Exposes Remote Automatic Weather Station data and fire weather analysis
as MCP tools. Every tool returns the envelope described in raws_server.tools.
"""

import json
from typing import Optional

from fastmcp import Context, FastMCP
from fastmcp.utilities.logging import configure_logging, get_logger

from raws_server.app_context import AppContext, app_lifespan
from raws_server.config.constants import (
    DEFAULT_ELEVATION,
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_SEARCH_RADIUS,
)
from raws_server.config.settings import get_settings
from raws_server.tools import execute_tool
from raws_server.tools.fire_indices import calculate_fire_indices as fire_indices_handler
from raws_server.tools.get_current import get_raws_current as current_handler
from raws_server.tools.get_forecast import get_nws_forecast as forecast_handler
from raws_server.tools.get_historical import get_raws_historical as historical_handler
from raws_server.tools.search_stations import search_raws_stations as search_handler

# Initialize logger for server lifecycle events
logger = get_logger(__name__)

# ============= MCP SERVER INITIALIZATION =============

mcp = FastMCP(
    name="raws-mcp",
    instructions=(
        "You provide real-time wildfire weather data from Remote Automatic "
        "Weather Stations (RAWS): current conditions, nearby stations, "
        "historical trends, fire weather indices and NWS forecasts."
    ),
    lifespan=app_lifespan,
)


def _app(ctx: Context) -> AppContext:
    return ctx.request_context.lifespan_context


# ============= TOOLS =============


@mcp.tool()
async def get_raws_current(
    station_id: str,
    include_fire_indices: bool = False,
    include_trends: bool = False,
    ctx: Context = None,
) -> dict:
    """
    Get current weather conditions from a RAWS station, formatted for
    wildfire risk assessment (temperature, humidity, wind, rain probability,
    red flag warnings and extreme changes).

    Args:
        station_id: RAWS station ID (e.g. "C5725", "CLKC1")
        include_fire_indices: Include Fosberg, Haines and Chandler indices
        include_trends: Analyze the last 6 hours for rapid changes
    """
    app = _app(ctx)
    return await execute_tool(
        "get_raws_current",
        current_handler,
        app.manager,
        app.settings,
        station_id,
        include_fire_indices=include_fire_indices,
        include_trends=include_trends,
    )


@mcp.tool()
async def search_raws_stations(
    latitude: float,
    longitude: float,
    radius: float = DEFAULT_SEARCH_RADIUS,
    limit: int = DEFAULT_SEARCH_LIMIT,
    ctx: Context = None,
) -> dict:
    """
    Find active RAWS stations near a location, nearest first.

    Args:
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees
        radius: Search radius in miles (max 500)
        limit: Maximum number of stations (1-50)
    """
    return await execute_tool(
        "search_raws_stations",
        search_handler,
        _app(ctx).manager,
        latitude,
        longitude,
        radius=radius,
        limit=limit,
    )


@mcp.tool()
async def get_raws_historical(
    station_id: str,
    start_time: str,
    end_time: str,
    variables: Optional[list[str]] = None,
    ctx: Context = None,
) -> dict:
    """
    Retrieve historical weather data from a RAWS station for trend analysis.

    Args:
        station_id: RAWS station ID
        start_time: Start time, ISO 8601 (e.g. "2025-08-29T00:00:00Z")
        end_time: End time, ISO 8601 (e.g. "2025-08-29T23:59:59Z")
        variables: air_temp, relative_humidity, wind_speed, wind_gust,
            wind_direction, precip_accum, fuel_moisture (default: all)
    """
    return await execute_tool(
        "get_raws_historical",
        historical_handler,
        _app(ctx).manager,
        station_id,
        start_time,
        end_time,
        variables=variables,
    )


@mcp.tool()
async def calculate_fire_indices(
    temperature: float,
    relative_humidity: float,
    wind_speed: float,
    fuel_moisture: Optional[float] = None,
    elevation: float = DEFAULT_ELEVATION,
    ctx: Context = None,
) -> dict:
    """
    Calculate fire weather indices (Fosberg FFWI, Haines, Chandler Burning
    Index) and overall fire danger from weather conditions.

    Args:
        temperature: Temperature in Fahrenheit
        relative_humidity: Relative humidity (0-100%)
        wind_speed: Wind speed in mph
        fuel_moisture: 10-hour fuel moisture in percent (optional)
        elevation: Elevation in feet (used for the Haines Index)
    """
    return await execute_tool(
        "calculate_fire_indices",
        fire_indices_handler,
        _app(ctx).settings,
        temperature,
        relative_humidity,
        wind_speed,
        fuel_moisture=fuel_moisture,
        elevation=elevation,
    )


@mcp.tool()
async def get_nws_forecast(latitude: float, longitude: float, ctx: Context = None) -> dict:
    """
    Get the National Weather Service forecast for a location.

    Args:
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees
    """
    app = _app(ctx)
    return await execute_tool(
        "get_nws_forecast", forecast_handler, app.manager, app.settings, latitude, longitude
    )


# ============= RESOURCES =============


@mcp.resource("raws://cache/stats")
async def cache_stats_resource(ctx: Context = None) -> str:
    """Cache size, hit counts and expired entries."""
    return json.dumps(_app(ctx).manager.get_cache_stats(), indent=2)


# ============= SERVER ENTRY POINT =============


def main():
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"Starting {settings.server_name} over stdio")
    mcp.run()


if __name__ == "__main__":
    main()
