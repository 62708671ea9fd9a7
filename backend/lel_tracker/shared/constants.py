"""
Shared constants for the tracking layer.

Single source of truth for status labels, route legs and the
checkpoint-name conventions used by the tracking feed.
"""

from enum import Enum


class RiderStatus(str, Enum):
    """
    Status labels as published by the tracking feed.

    DNF may also be inferred for display (see RiderMetrics.is_dnf);
    the inferred value never replaces the feed label on the record.
    """
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    DNF = "dnf"


class Leg(str, Enum):
    """Directional half of the route."""
    NORTH = "North"
    SOUTH = "South"


# Route bearing per leg, degrees (North leg rides towards 0°)
LEG_BEARINGS: dict[Leg, float] = {
    Leg.NORTH: 0.0,
    Leg.SOUTH: 180.0,
}

# Suffix letters that may follow a control name: "Brampton N", "Louth S"
DIRECTION_SUFFIXES = ("N", "S", "E", "W")

SUFFIX_TO_LEG: dict[str, Leg] = {
    "N": Leg.NORTH,
    "S": Leg.SOUTH,
}

# Names that always mean the rider's start control
START_ALIASES = frozenset({"Start", "Writtle", "London"})
START_MARKER = "Start"

DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * 60

# Riders within this many km of a control are "approaching" it
APPROACH_THRESHOLD_KM = 50.0

DEFAULT_WAVE_START = "06:00"
