"""
Application Constants and Configuration Values

Centralized constants for API parameters, thresholds, lookup tables and
other fixed values used throughout the application. Organized by
functional area for easy maintenance and discovery.
"""

# ============= RAWS API CONFIGURATION =============

# Synoptic/MesoWest network ids for RAWS stations
RAWS_NETWORKS = "1,2"

# Optional provider-style prefix accepted on station ids
STATION_ID_PREFIX = "RAWS:"

# Synoptic SUMMARY.RESPONSE_CODE values
SYNOPTIC_OK = 1
SYNOPTIC_NO_RESULTS = 2
SYNOPTIC_AUTH_FAILED = -1

# User-facing variable names -> Synoptic sensor names
VARIABLE_MAPPING = {
    "air_temp": "air_temp",
    "temperature": "air_temp",
    "humidity": "relative_humidity",
    "relative_humidity": "relative_humidity",
    "wind_speed": "wind_speed",
    "wind_gust": "wind_gust",
    "wind_direction": "wind_direction",
    "precip_accum": "precip_accum",
    "fuel_moisture": "fuel_moisture",
}

# Synoptic sensor name -> canonical observation field
SENSOR_FIELDS = {
    "air_temp": "temperature",
    "relative_humidity": "relative_humidity",
    "wind_speed": "wind_speed",
    "wind_gust": "wind_gust",
    "wind_direction": "wind_direction",
    "precip_accum": "precip_accum",
    "fuel_moisture": "fuel_moisture",
    "solar_radiation": "solar_radiation",
    "pressure": "pressure",
}

# ============= DATA SOURCE ATTRIBUTION =============

PROVIDER_SOURCES = {
    "synoptic": {
        "name": "Synoptic Data API",
        "type": "weather",
        "url": "https://synopticdata.com/",
    },
    "mesowest": {
        "name": "MesoWest API",
        "type": "weather",
        "url": "https://mesowest.utah.edu/",
    },
}

NWS_SOURCE = {
    "name": "National Weather Service Alerts",
    "type": "alerts",
    "url": "https://www.weather.gov/",
}

RAWS_STATION_URL = "https://raws.dri.edu/{station_id}"

# ============= NWS FIRE WEATHER EVENTS =============

RED_FLAG_WARNING = "Red Flag Warning"
FIRE_WEATHER_WATCH = "Fire Weather Watch"
FIRE_WEATHER_EVENTS = (RED_FLAG_WARNING, FIRE_WEATHER_WATCH)

# ============= FIRE WEATHER THRESHOLDS =============

# Default validity window for threshold-detected warnings (hours)
DEFAULT_WARNING_HOURS = 6

# Red Flag tier: humidity below and max(speed, gust) above
RED_FLAG_HUMIDITY = 15
RED_FLAG_WIND = 25

# Watch tier: humidity below and sustained speed above
WATCH_HUMIDITY = 25
WATCH_WIND = 15

# Current-snapshot extremes
EXTREME_GUST = 40
CRITICAL_HUMIDITY = 10
DRY_FUEL_MOISTURE = 8

# Trend detection over consecutive observations
TREND_MAX_GAP_HOURS = 3
TREND_WIND_INCREASE = 15
TREND_HUMIDITY_DROP = 20
TREND_TEMPERATURE_SPIKE = 20

# Gusts are typically 1.3-1.5x the sustained speed
GUST_FACTOR = 1.5

# Lookback used by get_raws_current when trends are requested (hours)
TREND_LOOKBACK_HOURS = 6

# Trend windows end on this boundary so nearby requests share a cache entry
TREND_WINDOW_MINUTES = 5

# ============= WIND DIRECTION =============

COMPASS_POINTS = [
    "N", "NNE", "NE", "ENE",
    "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW",
    "W", "WNW", "NW", "NNW",
]

UNKNOWN_DIRECTION = "Unknown"

# ============= TOOL INPUT LIMITS =============

DEFAULT_SEARCH_RADIUS = 50
MAX_SEARCH_RADIUS = 500
DEFAULT_SEARCH_LIMIT = 10
MAX_SEARCH_LIMIT = 50
DEFAULT_ELEVATION = 5000
MAX_HISTORY_DAYS = 365

EARTH_RADIUS_MILES = 3959
