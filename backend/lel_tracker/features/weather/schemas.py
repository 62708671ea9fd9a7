"""
Weather feed schemas.

Pydantic models for the per-control weather JSON.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class Coordinates(BaseModel):
    lat: float
    lon: float


class CurrentConditions(BaseModel):
    """Conditions at the control right now."""
    temperature: Optional[float] = None
    temperature_unit: str = "C"
    condition: Optional[str] = None
    condition_code: Optional[int] = None
    description: Optional[str] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[float] = Field(None, description="Degrees the wind blows from")
    humidity: Optional[float] = None
    pressure: Optional[float] = None
    uv_index: Optional[float] = None
    feels_like: Optional[float] = None
    precipitation: Optional[float] = None


class Forecast24h(BaseModel):
    rain_probability: Optional[float] = None
    max_temp: Optional[float] = None
    min_temp: Optional[float] = None


class HourlyForecast(BaseModel):
    time: datetime
    temperature: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[float] = None
    rain_probability: Optional[float] = None
    condition: Optional[str] = None
    is_historical: bool = False


class ControlWeather(BaseModel):
    """Weather block for one control."""
    control_id: Optional[str] = None
    control_name: str
    coordinates: Optional[Coordinates] = None
    current: CurrentConditions = Field(default_factory=CurrentConditions)
    forecast_24h: Optional[Forecast24h] = None
    hourly: List[HourlyForecast] = []

    def upcoming_hours(self) -> List[HourlyForecast]:
        """Forecast hours that haven't happened yet."""
        return [h for h in self.hourly if not h.is_historical]


class WeatherReport(BaseModel):
    """Top-level weather document."""
    weather: List[ControlWeather] = []
    last_updated: Optional[datetime] = None
