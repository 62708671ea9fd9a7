"""Overall rank of a rider among peers who got at least as far."""

from __future__ import annotations

from typing import Sequence

from lel_tracker.features.timing import parse_clock
from lel_tracker.shared.constants import MINUTES_PER_DAY, MINUTES_PER_HOUR, RiderStatus

from .metrics import RiderMetrics
from .models import Checkpoint, RankResult, Rider


def rank_rider(
    target: Rider,
    riders: Sequence[Rider],
    metrics: RiderMetrics,
) -> RankResult | None:
    """Position of `target` among riders at the same or a later control.

    Peers need more than one checkpoint and a distance at least the
    target's. They are ordered by time from first to last checkpoint,
    fastest first; peers with no positive time are left out entirely.

    Returns None when the target hasn't started, has only its start
    checkpoint, or itself drops out of the ranking.
    """
    if target.status == RiderStatus.NOT_STARTED or len(target.checkpoints) <= 1:
        return None

    target_distance = metrics.distance_covered(target)
    timed: list[tuple[int, Rider]] = []
    for rider in riders:
        if len(rider.checkpoints) <= 1:
            continue
        if metrics.distance_covered(rider) < target_distance:
            continue
        minutes = ride_minutes(rider, metrics)
        if minutes > 0:
            timed.append((minutes, rider))

    timed.sort(key=lambda item: item[0])

    position = next(
        (i for i, (_, r) in enumerate(timed, start=1) if r.rider_no == target.rider_no),
        None,
    )
    if position is None:
        return None
    return RankResult(position=position, total_considered=len(timed))


def ride_minutes(rider: Rider, metrics: RiderMetrics) -> int:
    """Minutes between a rider's first and last checkpoint.

    Uses the resolved instants when both are known. Otherwise falls back
    to comparing times of day, adding a day when the difference is
    negative.
    """
    if len(rider.checkpoints) < 2:
        return 0
    first, last = rider.checkpoints[0], rider.checkpoints[-1]

    start = metrics.instant(first)
    end = metrics.instant(last)
    if start is not None and end is not None:
        return metrics.resolver.minutes_between(start, end)

    return _clock_difference(first, last)


def _clock_difference(first: Checkpoint, last: Checkpoint) -> int:
    start = _minute_of_day(first.time)
    end = _minute_of_day(last.time)
    if start is None or end is None:
        return 0
    minutes = end - start
    if minutes < 0:
        minutes += MINUTES_PER_DAY
    return minutes


def _minute_of_day(time_str: str) -> int | None:
    parts = (time_str or "").split()
    if not parts:
        return None
    clock = parse_clock(parts[-1])
    if clock is None:
        return None
    return clock[0] * MINUTES_PER_HOUR + clock[1]
