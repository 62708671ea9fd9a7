"""
Shared utilities (NOT business logic).

Usage:
    from lel_tracker.shared import RiderStatus, Leg
    from lel_tracker.shared.formatters import format_time_ago
"""
from .constants import (
    RiderStatus,
    Leg,
    LEG_BEARINGS,
    DIRECTION_SUFFIXES,
    SUFFIX_TO_LEG,
    START_ALIASES,
    DAY_NAMES,
    MINUTES_PER_HOUR,
    MINUTES_PER_DAY,
    APPROACH_THRESHOLD_KM,
    DEFAULT_WAVE_START,
)
from .formatters import (
    format_elapsed,
    format_leg_time,
    format_time_ago,
    format_checkpoint_time,
    format_speed,
    format_distance_km,
)
