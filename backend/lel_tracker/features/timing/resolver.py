"""
Checkpoint time resolution.

The tracking feed reports arrivals as event-local strings without a full
date ("Monday 02:15", "3/8 19:32", sometimes just "19:32"). TimeResolver
turns them into aware datetimes in the event timezone, anchored to the
event start date, and measures durations between them.
"""

import logging
import math
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from lel_tracker.shared.constants import DAY_NAMES

logger = logging.getLogger(__name__)

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_DAY_MONTH_RE = re.compile(r"^(\d{1,2})/(\d{1,2})$")


def parse_clock(value: str) -> Optional[tuple[int, int]]:
    """
    Parse 'HH:MM' into (hours, minutes).

    Returns None for anything that isn't a valid time of day.
    """
    m = _CLOCK_RE.match(value.strip())
    if not m:
        return None
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours, minutes


def _day_index(name: str) -> Optional[int]:
    """Weekday index (Monday=0) for a full or three-letter day name."""
    lowered = name.strip().lower()
    if len(lowered) < 3:
        return None
    for index, day in enumerate(DAY_NAMES):
        if day.lower() == lowered or day.lower()[:3] == lowered:
            return index
    return None


class TimeResolver:
    """
    Resolves checkpoint strings to instants in the event timezone.

    The whole event is assumed to fit in one week from `event_start`,
    so a day name always means its first occurrence on or after the
    start date.

    Usage:
        resolver = TimeResolver(date(2025, 8, 3), "Europe/London")
        resolver.resolve("Monday 02:15")
        # datetime(2025, 8, 4, 2, 15, tzinfo=ZoneInfo("Europe/London"))
    """

    def __init__(self, event_start: date, tz_name: str = "Europe/London"):
        self.event_start = event_start
        self.tz_name = tz_name
        self.tz = ZoneInfo(tz_name)

    # -------------------------------------------------------------------------
    # Clock
    # -------------------------------------------------------------------------

    def now(self) -> datetime:
        """Current wall-clock time as calendar fields in the event timezone."""
        return datetime.now(self.tz)

    def localize(self, moment: datetime) -> datetime:
        """Express an instant in the event timezone.

        Naive datetimes are taken to already be event-local.
        """
        if moment.tzinfo is None:
            return moment.replace(tzinfo=self.tz)
        return moment.astimezone(self.tz)

    def at(self, day: date, hhmm: str) -> Optional[datetime]:
        """Event-local instant for a calendar day and an 'HH:MM' string."""
        clock = parse_clock(hhmm)
        if clock is None:
            return None
        return datetime.combine(day, time(*clock), tzinfo=self.tz)

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    def resolve(self, time_str: Optional[str], now: Optional[datetime] = None) -> Optional[datetime]:
        """
        Resolve a checkpoint time string to an aware datetime.

        Supported formats:
            "Monday 02:15"  day name, offset 0-6 days from the start day
            "3/8 19:32"     day/month in the event year
            "19:32"         today, or yesterday if that is still ahead of `now`

        Returns None for anything else (including '-' placeholders).
        """
        if not time_str:
            return None
        parts = time_str.split()
        if not parts or parts[0] == "-":
            return None

        clock = parse_clock(parts[-1])
        if clock is None:
            return None

        if len(parts) == 1:
            return self._resolve_bare(clock, now)

        day_part = parts[0]
        m = _DAY_MONTH_RE.match(day_part)
        if m:
            return self._resolve_day_month(int(m.group(1)), int(m.group(2)), clock)
        return self._resolve_day_name(day_part, clock)

    def _resolve_day_name(self, day_name: str, clock: tuple[int, int]) -> Optional[datetime]:
        index = _day_index(day_name)
        if index is None:
            return None
        offset = (index - self.event_start.weekday()) % 7
        day = self.event_start + timedelta(days=offset)
        return datetime.combine(day, time(*clock), tzinfo=self.tz)

    def _resolve_day_month(self, day: int, month: int, clock: tuple[int, int]) -> Optional[datetime]:
        try:
            return datetime(self.event_start.year, month, day, *clock, tzinfo=self.tz)
        except ValueError:
            return None

    def _resolve_bare(self, clock: tuple[int, int], now: Optional[datetime]) -> datetime:
        current = self.localize(now) if now else self.now()
        candidate = current.replace(hour=clock[0], minute=clock[1], second=0, microsecond=0)
        if candidate > current:
            candidate -= timedelta(days=1)
        return candidate

    # -------------------------------------------------------------------------
    # Durations
    # -------------------------------------------------------------------------

    @staticmethod
    def minutes_between(start: datetime, end: datetime) -> int:
        """Whole minutes of real elapsed time from `start` to `end` (signed)."""
        delta = end.astimezone(timezone.utc) - start.astimezone(timezone.utc)
        return math.floor(delta.total_seconds() / 60)

    def minutes_since(self, instant: datetime, now: Optional[datetime] = None) -> int:
        """Signed minutes from `instant` to now; negative for future instants.

        A naive `now` is taken as event-local time.
        """
        current = self.localize(now) if now else self.now()
        return self.minutes_between(instant, current)

    def minutes_ago(self, instant: datetime, now: Optional[datetime] = None) -> int:
        """
        Minutes since `instant`, never negative.

        A future instant (feed anomaly) is clamped to 0 and logged.
        """
        minutes = self.minutes_since(instant, now)
        if minutes < 0:
            logger.warning(
                f"Checkpoint time {instant.isoformat()} is {-minutes} min in the future; "
                f"treating as just now"
            )
            return 0
        return minutes

    def hours_since(self, instant: Optional[datetime], now: Optional[datetime] = None) -> float:
        """Hours since `instant`, never negative; 0.0 when unknown."""
        if instant is None:
            return 0.0
        return self.minutes_ago(instant, now) / 60


_resolver: Optional[TimeResolver] = None


def get_time_resolver() -> TimeResolver:
    """Resolver for the configured event start date and timezone."""
    global _resolver
    if _resolver is None:
        from lel_tracker.config import settings

        _resolver = TimeResolver(settings.event_start_date, settings.event_timezone)
    return _resolver
