"""
Formatting utilities for display.

Used by the CLI and by the derived checkpoint history.
"""

from datetime import datetime

from .constants import MINUTES_PER_DAY, MINUTES_PER_HOUR


def format_elapsed(minutes: float) -> str:
    """
    Format elapsed minutes as 'Xd Yh Zm'.

    Args:
        minutes: Elapsed time in minutes (e.g., 1770)

    Returns:
        Formatted string (e.g., '1d 5h 30m'); '0m' for non-positive input
    """
    total = int(minutes)
    if total <= 0:
        return "0m"

    days, rest = divmod(total, MINUTES_PER_DAY)
    hours, mins = divmod(rest, MINUTES_PER_HOUR)

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if mins > 0 or not parts:
        parts.append(f"{mins}m")
    return " ".join(parts)


def format_leg_time(minutes: float) -> str:
    """
    Format a control-to-control duration as 'Xh Ym' or 'Ym'.

    Args:
        minutes: Leg duration in minutes

    Returns:
        Formatted string (e.g., '5h 30m', '45m')
    """
    hours = int(minutes // MINUTES_PER_HOUR)
    mins = round(minutes % MINUTES_PER_HOUR)
    if hours == 0:
        return f"{mins}m"
    return f"{hours}h {mins}m"


def format_time_ago(minutes: int) -> str:
    """
    Format minutes since an event as a relative 'ago' string.

    Negative input is treated as zero.

    Examples:
        45    → '45m ago'
        125   → '2h 5m ago'
        120   → '2h ago'
        1500  → '1 day 1h ago'
        3000  → '2 days ago'
    """
    minutes = max(0, int(minutes))

    if minutes < MINUTES_PER_HOUR:
        return f"{minutes}m ago"

    if minutes < MINUTES_PER_DAY:
        hours, mins = divmod(minutes, MINUTES_PER_HOUR)
        return f"{hours}h {mins}m ago" if mins > 0 else f"{hours}h ago"

    days, rest = divmod(minutes, MINUTES_PER_DAY)
    hours = rest // MINUTES_PER_HOUR
    if days == 1:
        return "1 day ago" if hours == 0 else f"1 day {hours}h ago"
    return f"{days} days ago"


def format_checkpoint_time(moment: datetime) -> str:
    """Format an instant the way the feed writes it: 'Monday 02:15'."""
    return f"{moment.strftime('%A')} {moment.strftime('%H:%M')}"


def format_speed(kmh: float) -> str:
    """Format speed as '16.7 km/h'; '—' when unknown."""
    if kmh <= 0:
        return "—"
    return f"{kmh:.1f} km/h"


def format_distance_km(km: float) -> str:
    """Format distance as '193 km'."""
    if km == int(km):
        return f"{int(km)} km"
    return f"{km:.1f} km"
