"""Weather feature module — per-control weather and wind relative to the route."""

from .schemas import (
    ControlWeather,
    CurrentConditions,
    Forecast24h,
    HourlyForecast,
    WeatherReport,
)
from .wind import WindEffect, WindKind, compass_point, wind_effect
from .lookup import weather_for_control, wind_for_control

__all__ = [
    "ControlWeather",
    "CurrentConditions",
    "Forecast24h",
    "HourlyForecast",
    "WeatherReport",
    "WindEffect",
    "WindKind",
    "compass_point",
    "wind_effect",
    "weather_for_control",
    "wind_for_control",
]
