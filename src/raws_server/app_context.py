import asyncio
import contextlib
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastmcp import FastMCP
from fastmcp.utilities.logging import get_logger

from raws_server.config.settings import ServerSettings, get_settings
from raws_server.services.cache import TTLCache
from raws_server.services.client_manager import ClientManager

logger = get_logger(__name__)


@dataclass
class AppContext:
    manager: ClientManager
    cache: TTLCache
    settings: ServerSettings


@asynccontextmanager
async def app_lifespan(mcp: FastMCP):
    """Build the cache and client coordinator shared by every tool call."""
    settings = get_settings()
    logger.info(f"Starting {settings.server_name} v{settings.server_version}")

    cache = TTLCache(
        max_size=settings.cache.max_size, default_ttl=settings.cache.default_ttl
    )
    manager = ClientManager.from_settings(settings, cache=cache)
    cleanup = asyncio.create_task(cache.run_cleanup(settings.cache.cleanup_interval))

    try:
        yield AppContext(manager=manager, cache=cache, settings=settings)
    finally:
        cleanup.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await cleanup
        logger.info(f"Shutting down {settings.server_name}")
