"""Wave grouping — riders start in waves named by their rider number prefix."""

from __future__ import annotations

import re
from collections import defaultdict
from typing import Iterable

from lel_tracker.features.route import RouteTable

from .models import Rider

_DIGITS_RE = re.compile(r"(\d+)")


def natural_key(rider_no: str) -> list:
    """Sort key that orders "A2" before "A10"."""
    return [int(part) if part.isdigit() else part for part in _DIGITS_RE.split(rider_no)]


def sort_by_rider_no(riders: Iterable[Rider]) -> list[Rider]:
    return sorted(riders, key=lambda r: natural_key(r.rider_no))


def group_by_wave(riders: Iterable[Rider], route: RouteTable) -> dict[str, list[Rider]]:
    """Wave code → riders in that wave, waves and riders in natural order."""
    groups: dict[str, list[Rider]] = defaultdict(list)
    for rider in riders:
        groups[route.wave_code(rider.rider_no)].append(rider)
    return {code: sort_by_rider_no(groups[code]) for code in sorted(groups)}


def count_by_variant(riders: Iterable[Rider], route: RouteTable) -> dict[str, int]:
    """Number of riders per start variant code."""
    counts = {variant.code: 0 for variant in route.variants}
    for rider in riders:
        counts[route.variant_for(rider.rider_no).code] += 1
    return counts
