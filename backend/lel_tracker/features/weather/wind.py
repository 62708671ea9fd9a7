"""
Wind relative to the route.

Only the wind direction and the leg being ridden matter: the North leg
is ridden towards 0°, the South leg towards 180°.
"""
import math
from dataclasses import dataclass
from enum import Enum

from lel_tracker.shared.constants import LEG_BEARINGS, Leg

COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)

# Angle between wind travel and route bearing, degrees
TAILWIND_MAX_ANGLE = 45.0
HEADWIND_MIN_ANGLE = 135.0


class WindKind(str, Enum):
    TAILWIND = "tailwind"
    HEADWIND = "headwind"
    CROSSWIND = "crosswind"


@dataclass(frozen=True)
class WindEffect:
    kind: WindKind
    component_pct: float  # share of the wind along the route, 0-100


def wind_effect(wind_direction: float, leg: Leg) -> WindEffect:
    """
    Classify wind for a rider on `leg`.

    Args:
        wind_direction: Meteorological direction, degrees the wind blows FROM
        leg: Route leg being ridden

    Returns:
        WindEffect with the kind and the along-route component in percent
    """
    blowing_to = (wind_direction + 180) % 360
    angle = abs(blowing_to - LEG_BEARINGS[leg])
    if angle > 180:
        angle = 360 - angle

    component = abs(math.cos(math.radians(angle))) * 100

    if angle <= TAILWIND_MAX_ANGLE:
        kind = WindKind.TAILWIND
    elif angle >= HEADWIND_MIN_ANGLE:
        kind = WindKind.HEADWIND
    else:
        kind = WindKind.CROSSWIND

    return WindEffect(kind=kind, component_pct=component)


def compass_point(degrees: float) -> str:
    """16-point compass name: 0 → 'N', 200 → 'SSW'."""
    index = round((degrees % 360) / 22.5) % 16
    return COMPASS_POINTS[index]
