"""
Configuration Management System

Pydantic-based configuration system with environment variable support,
validation, and nested settings for different application components.

Features:
- Type-safe configuration with validation
- Environment variable override support (RAWS_ prefix, plus the upstream
  token names SYNOPTIC_API_TOKEN / MESOWEST_API_TOKEN)
- Nested settings for logical grouping
- Default value management with constraints
- Singleton accessor for the server entry point
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """
    Upstream provider credentials and endpoints.

    At least one of the two RAWS tokens must be set for the server to
    have a usable data source.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    synoptic_api_token: Optional[str] = Field(
        default=None, description="Synoptic Data API token (primary source)"
    )

    mesowest_api_token: Optional[str] = Field(
        default=None, description="MesoWest API token (backup source)"
    )

    synoptic_base_url: str = Field(
        default="https://api.synopticdata.com/v2",
        description="Synoptic Data API base URL",
    )

    mesowest_base_url: str = Field(
        default="https://api.mesowest.net/v2", description="MesoWest API base URL"
    )

    nws_base_url: str = Field(
        default="https://api.weather.gov", description="National Weather Service API"
    )

    user_agent: str = Field(
        default="RAWS-MCP-Server/1.0",
        description="User-Agent header (required by the NWS API)",
    )


class HttpSettings(BaseSettings):
    """
    HTTP client configuration for external API calls.

    Controls timeouts, retries, connection pooling, and other
    HTTP client behavior for reliable external service integration.
    """

    model_config = SettingsConfigDict(env_prefix="RAWS_HTTP_", extra="ignore")

    timeout: float = Field(
        default=10.0, ge=1.0, le=60.0, description="Request timeout in seconds"
    )

    max_retries: int = Field(
        default=3, ge=1, le=10, description="Maximum number of attempts per request"
    )

    retry_backoff_factor: float = Field(
        default=1.0,
        ge=0.0,
        le=5.0,
        description="Exponential backoff factor for retries",
    )

    retry_min_wait: float = Field(
        default=1.0, ge=0.0, le=60.0, description="Minimum wait between retries"
    )

    retry_max_wait: float = Field(
        default=30.0, ge=0.0, le=300.0, description="Maximum wait between retries"
    )

    pool_connections: int = Field(
        default=10, ge=1, le=100, description="Number of connection pools"
    )

    pool_maxsize: int = Field(
        default=10, ge=1, le=100, description="Maximum number of connections per pool"
    )


class CacheSettings(BaseSettings):
    """
    In-memory cache sizing and per-category lifetimes (seconds).

    Lifetimes follow data volatility: RAWS stations report every 15-60
    minutes, station metadata rarely changes, and a closed history window
    never changes.
    """

    model_config = SettingsConfigDict(env_prefix="RAWS_CACHE_", extra="ignore")

    default_ttl: float = Field(default=300, gt=0, description="Fallback TTL")

    max_size: int = Field(
        default=1000, ge=1, le=100_000, description="Maximum number of entries"
    )

    cleanup_interval: float = Field(
        default=600, gt=0, description="Seconds between expired-entry sweeps"
    )

    current_ttl: float = Field(default=300, gt=0, description="Current observations")

    station_ttl: float = Field(default=3600, gt=0, description="Station searches")

    history_ttl: float = Field(default=86400, gt=0, description="Historical series")

    alerts_ttl: float = Field(default=300, gt=0, description="NWS alerts")

    forecast_ttl: float = Field(default=3600, gt=0, description="NWS forecasts")


class FeatureSettings(BaseSettings):
    """Feature flags (ENABLE_NWS_INTEGRATION, ENABLE_FIRE_INDICES)."""

    model_config = SettingsConfigDict(env_prefix="ENABLE_", extra="ignore")

    nws_integration: bool = Field(
        default=True, description="Fetch NWS alerts and forecasts"
    )

    fire_indices: bool = Field(default=True, description="Allow fire index tools")


class ServerSettings(BaseSettings):
    """
    Main server configuration with nested settings and environment support.

    Provides centralized configuration management with:
    - Environment variable overrides (RAWS_ prefix)
    - Nested configuration sections
    - Logging configuration
    """

    model_config = SettingsConfigDict(
        env_file=".env",  # Load from .env file if present
        env_file_encoding="utf-8",  # UTF-8 encoding for env file
        env_prefix="RAWS_",  # Environment variable prefix
        extra="ignore",  # Ignore unknown env vars
    )

    # ============= Server Identity =============

    server_name: str = Field(default="raws-mcp", description="MCP server name")

    server_version: str = Field(
        default="1.0.0", description="Server version for client compatibility"
    )

    # ============= Nested Configuration Sections =============

    api: ApiSettings = Field(
        default_factory=ApiSettings, description="Upstream provider settings"
    )

    http: HttpSettings = Field(
        default_factory=HttpSettings, description="HTTP client configuration"
    )

    cache: CacheSettings = Field(
        default_factory=CacheSettings, description="Cache sizing and lifetimes"
    )

    features: FeatureSettings = Field(
        default_factory=FeatureSettings, description="Feature flags"
    )

    # ============= Logging Configuration =============

    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level for server output",
    )


# ============= Singleton Pattern =============

# Global settings instance for the server entry point
_settings: Optional[ServerSettings] = None


def get_settings() -> ServerSettings:
    """
    Get or create the global settings singleton instance.

    Only the server entry point should call this; services receive their
    settings explicitly so tests can build isolated configurations.

    Returns:
        ServerSettings: The global settings instance
    """
    global _settings
    if _settings is None:
        _settings = ServerSettings()
    return _settings
