"""Latest-updates feed: each rider's most recent arrival, newest first."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable

from lel_tracker.features.timing import TimeResolver
from lel_tracker.shared.constants import MINUTES_PER_HOUR

from .models import LatestUpdate, Rider

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_HOURS = 24
DEFAULT_LIMIT = 10


def latest_updates(
    riders: Iterable[Rider],
    resolver: TimeResolver,
    now: datetime | None = None,
    window_hours: int = DEFAULT_WINDOW_HOURS,
    limit: int = DEFAULT_LIMIT,
) -> list[LatestUpdate]:
    """Most recent checkpoint of every rider seen in the last `window_hours`.

    Only each rider's last checkpoint is considered. Entries that resolve
    to the future are a parsing anomaly and are dropped, not clamped.
    Sorted by minutes ago ascending, at most `limit` entries.
    """
    now = resolver.localize(now) if now else resolver.now()
    window_minutes = window_hours * MINUTES_PER_HOUR

    updates: list[LatestUpdate] = []
    for rider in riders:
        last = rider.last_checkpoint
        if last is None or not last.time:
            continue

        timestamp = last.at or resolver.resolve(last.time, now)
        if timestamp is None:
            continue

        minutes_ago = resolver.minutes_since(timestamp, now)
        if minutes_ago < 0:
            logger.debug(f"Dropping future update for {rider.rider_no}: {last.time!r}")
            continue
        if minutes_ago >= window_minutes:
            continue

        updates.append(
            LatestUpdate(
                rider_no=rider.rider_no,
                rider_name=rider.name,
                checkpoint=last.name,
                time=last.time,
                timestamp=timestamp,
                minutes_ago=minutes_ago,
            )
        )

    updates.sort(key=lambda u: u.minutes_ago)
    return updates[:limit]
