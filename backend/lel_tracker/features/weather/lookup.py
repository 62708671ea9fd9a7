"""Weather lookup by checkpoint name."""

from __future__ import annotations

from lel_tracker.features.route import RouteTable

from .schemas import ControlWeather, WeatherReport
from .wind import WindEffect, wind_effect


def weather_for_control(
    report: WeatherReport | None,
    name: str,
    route: RouteTable,
) -> ControlWeather | None:
    """Weather block for a checkpoint or control name.

    Both sides go through the route's alias table, so "Brampton S" finds
    a block published as "Brampton". Falls back to an exact name match
    for controls the route doesn't know.
    """
    if report is None or not report.weather:
        return None

    target = route.resolve(name)
    if target is not None:
        for block in report.weather:
            hit = route.resolve(block.control_name)
            if hit is not None and hit.base_name == target.base_name:
                return block

    return next((b for b in report.weather if b.control_name == name), None)


def wind_for_control(
    report: WeatherReport | None,
    name: str,
    route: RouteTable,
) -> WindEffect | None:
    """Wind effect at a control for riders on the control's leg."""
    control = route.resolve(name)
    block = weather_for_control(report, name, route)
    if control is None or block is None or block.current.wind_direction is None:
        return None
    return wind_effect(block.current.wind_direction, control.leg)
