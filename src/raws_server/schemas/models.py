"""
Typed Records

Pydantic models for the canonical observation shapes produced by the
adapters and the documents produced by the transformer. Observation-type
records are frozen: they are built once per request and never mutated.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Observation(BaseModel):
    """Canonical, provider-agnostic current observation."""

    model_config = ConfigDict(frozen=True)

    station_id: str
    station_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    elevation: Optional[float] = None
    state: Optional[str] = None
    timezone: Optional[str] = None
    timestamp: Optional[str] = None
    temperature: Optional[float] = None
    relative_humidity: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_gust: Optional[float] = None
    wind_direction: Optional[float] = None
    precip_accum: Optional[float] = None
    fuel_moisture: Optional[float] = None
    solar_radiation: Optional[float] = None
    pressure: Optional[float] = None
    source: Optional[str] = None


class HistoryPoint(BaseModel):
    """One timestamped, possibly partial observation from a time series."""

    model_config = ConfigDict(frozen=True)

    timestamp: str
    temperature: Optional[float] = None
    relative_humidity: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_gust: Optional[float] = None
    wind_direction: Optional[float] = None
    precip_accum: Optional[float] = None
    fuel_moisture: Optional[float] = None


class HistoricalSeries(BaseModel):
    model_config = ConfigDict(frozen=True)

    station_id: str
    station_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    elevation: Optional[float] = None
    source: Optional[str] = None
    points: list[HistoryPoint] = Field(default_factory=list)


class StationMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    elevation: Optional[float] = None
    state: Optional[str] = None
    timezone: Optional[str] = None
    status: Optional[str] = None
    network: Optional[str] = None
    source: Optional[str] = None


class Alert(BaseModel):
    """Active NWS alert for a point."""

    model_config = ConfigDict(frozen=True)

    event: str
    severity: Optional[str] = None
    certainty: Optional[str] = None
    urgency: Optional[str] = None
    headline: Optional[str] = None
    description: Optional[str] = None
    instruction: Optional[str] = None
    onset: Optional[str] = None
    expires: Optional[str] = None
    area_desc: Optional[str] = None


class ForecastPeriod(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: Optional[int] = None
    name: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_daytime: Optional[bool] = None
    temperature: Optional[float] = None
    temperature_unit: Optional[str] = None
    wind_speed: Optional[str] = None
    wind_direction: Optional[str] = None
    short_forecast: Optional[str] = None
    detailed_forecast: Optional[str] = None
    probability_of_precipitation: Optional[float] = None


class Forecast(BaseModel):
    model_config = ConfigDict(frozen=True)

    updated: Optional[str] = None
    periods: list[ForecastPeriod] = Field(default_factory=list)


class FireIndexResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    fosberg_ffwi: Optional[int] = Field(default=None, ge=0)
    haines_index: Optional[int] = Field(default=None, ge=2, le=6)
    chandler_burning_index: Optional[int] = Field(default=None, ge=0)
    fire_danger_class: Optional[
        Literal["Low", "Moderate", "High", "Very High", "Extreme"]
    ] = None
    red_flag_conditions: bool = False
    ignition_probability: Optional[int] = Field(default=None, ge=0, le=100)


# ============= WILDFIRE RISK DOCUMENT =============


class Temperature(BaseModel):
    value: float
    units: Literal["F", "C"]


class Humidity(BaseModel):
    percent: float = Field(ge=0, le=100)


class Wind(BaseModel):
    speed: float = Field(ge=0)
    gusts: float = Field(ge=0)
    direction: str


class RainProbability(BaseModel):
    percent: float = Field(ge=0, le=100)
    time_window: str
    confidence: Literal["high", "medium", "low"]


class RedFlagWarning(BaseModel):
    start_time: str
    end_time: str
    level: Literal["Watch", "Red Flag", "Extreme"]
    description: str


class ExtremeChange(BaseModel):
    parameter: str
    change: str
    magnitude: str
    time_frame: str


class DataSource(BaseModel):
    name: str
    type: str
    url: Optional[str] = None


class WeatherRisks(BaseModel):
    temperature: Temperature
    humidity: Humidity
    wind: Wind
    probability_of_rain: RainProbability
    red_flag_warnings: list[RedFlagWarning] = Field(default_factory=list)
    extreme_changes: list[ExtremeChange] = Field(default_factory=list)


class WeatherRiskDocument(BaseModel):
    """Externally visible wildfire weather-risk document."""

    location: str
    as_of: str
    weather_risks: WeatherRisks
    data_sources: list[DataSource] = Field(default_factory=list)
    notes: str = ""
    fire_indices: Optional[FireIndexResult] = None
