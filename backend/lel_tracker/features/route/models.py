"""Route data models (dataclasses, no I/O)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date

from lel_tracker.shared.constants import DIRECTION_SUFFIXES, Leg

_SUFFIX_RE = re.compile(r"^(.*\S)\s+([%s])$" % "".join(DIRECTION_SUFFIXES))


def split_direction(name: str) -> tuple[str, str | None]:
    """Split a trailing direction letter off a control name.

    "Brampton S" → ("Brampton", "S")
    "Hawick"     → ("Hawick", None)
    """
    m = _SUFFIX_RE.match(name.strip())
    if not m:
        return name.strip(), None
    return m.group(1), m.group(2)


@dataclass(frozen=True)
class Control:
    """A named checkpoint on the route."""

    name: str  # "Brampton S"
    km: float  # cumulative distance from the start
    leg: Leg
    is_return: bool = False
    aliases: tuple[str, ...] = ()

    @property
    def base_name(self) -> str:
        """Name without the direction suffix: "Brampton S" → "Brampton"."""
        return split_direction(self.name)[0]


@dataclass(frozen=True)
class StartVariant:
    """Where a group of riders starts, and how far that shifts the route."""

    code: str  # "london"
    start_name: str  # "London"
    offset_km: float = 0.0
    rider_no_pattern: str | None = None  # "^L[A-H]"

    def matches(self, rider_no: str) -> bool:
        if not self.rider_no_pattern:
            return False
        return re.match(self.rider_no_pattern, rider_no or "") is not None


@dataclass
class EventInfo:
    """Static facts about the event edition."""

    name: str
    year: int
    start_date: date | None = None
    time_limit_hours: float | None = None
    extra: dict = field(default_factory=dict)
