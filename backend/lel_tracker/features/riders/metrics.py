"""
Per-rider derived facts.

Everything here is a pure function of (rider, route, now). Bad input
(unparsable times, unknown control names) degrades to 0 / "" / None
instead of raising: this feeds a live display, not a ledger.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from lel_tracker.features.route import Control, RouteTable, StartVariant
from lel_tracker.features.timing import TimeResolver
from lel_tracker.shared.constants import MINUTES_PER_HOUR, RiderStatus
from lel_tracker.shared.formatters import format_time_ago

from .models import Checkpoint, CheckpointStats, NextControlEta, Rider

logger = logging.getLogger(__name__)

DEFAULT_DNF_THRESHOLD_HOURS = 16.0


class RiderMetrics:
    """
    Derived timeline facts for a rider.

    Usage:
        metrics = RiderMetrics(route, resolver)
        metrics.distance_covered(rider)   # 193.0
        metrics.average_speed(rider)      # 21.4
        metrics.is_dnf(rider, now)        # False
    """

    def __init__(
        self,
        route: RouteTable,
        resolver: TimeResolver,
        dnf_threshold_hours: float = DEFAULT_DNF_THRESHOLD_HOURS,
    ):
        self.route = route
        self.resolver = resolver
        self.dnf_threshold_hours = dnf_threshold_hours

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def variant(self, rider: Rider) -> StartVariant:
        return self.route.variant_for(rider.rider_no)

    def control_for(self, rider: Rider, checkpoint: Checkpoint) -> Optional[Control]:
        """Control a checkpoint refers to, on this rider's route."""
        return self.route.resolve(checkpoint.name, self.variant(rider))

    def instant(self, checkpoint: Checkpoint) -> Optional[datetime]:
        """Arrival instant; uses the ingestion-time value when present."""
        if checkpoint.at is not None:
            return checkpoint.at
        return self.resolver.resolve(checkpoint.time)

    def wave_start(self, rider: Rider) -> Optional[datetime]:
        """
        When the rider actually started.

        The start checkpoint's time when it resolves, otherwise the
        scheduled start of the rider's wave on the event start date.
        """
        if rider.checkpoints:
            start = self.instant(rider.checkpoints[0])
            if start is not None:
                return start
        return self.resolver.at(
            self.resolver.event_start, self.route.wave_start_time(rider.rider_no)
        )

    # -------------------------------------------------------------------------
    # Distance & time
    # -------------------------------------------------------------------------

    def distance_covered(self, rider: Rider) -> float:
        """Cumulative km of the rider's last checkpoint (0.0 if unknown)."""
        last = rider.last_checkpoint
        if last is None:
            return 0.0
        return self.route.distance_of(last.name, self.variant(rider))

    def elapsed_minutes(self, rider: Rider, checkpoint: Checkpoint) -> int:
        """
        Minutes from the rider's wave start to `checkpoint`.

        The start checkpoint is 0 by definition. Unparsable or
        non-positive results are 0.
        """
        if rider.checkpoints and checkpoint == rider.checkpoints[0]:
            return 0

        start = self.wave_start(rider)
        arrival = self.instant(checkpoint)
        if start is None or arrival is None:
            return 0

        minutes = self.resolver.minutes_between(start, arrival)
        return minutes if minutes > 0 else 0

    def elapsed_at(self, rider: Rider, index: int) -> int:
        """elapsed_minutes for the checkpoint at `index` of the rider's log."""
        if index <= 0 or index >= len(rider.checkpoints):
            return 0
        return self.elapsed_minutes(rider, rider.checkpoints[index])

    def average_speed(self, rider: Rider) -> float:
        """
        Average speed since the start, km/h.

        0.0 with fewer than 2 checkpoints, no distance, or no elapsed time.
        """
        last = rider.last_checkpoint
        if last is None or len(rider.checkpoints) < 2:
            return 0.0

        distance = self.distance_covered(rider)
        if distance <= 0:
            return 0.0

        elapsed = self.elapsed_minutes(rider, last)
        if elapsed <= 0:
            return 0.0

        return distance / elapsed * MINUTES_PER_HOUR

    def leg_speed(self, rider: Rider, index: int) -> float:
        """
        Speed between checkpoints `index - 1` and `index`, km/h.

        0.0 when either control is unknown or no time passed.
        """
        if index <= 0 or index >= len(rider.checkpoints):
            return 0.0

        distance = self._leg_distance(rider, index)
        minutes = self.elapsed_at(rider, index) - self.elapsed_at(rider, index - 1)
        if distance is None or distance <= 0 or minutes <= 0:
            return 0.0
        return distance / minutes * MINUTES_PER_HOUR

    def _leg_distance(self, rider: Rider, index: int) -> Optional[float]:
        current = self.control_for(rider, rider.checkpoints[index])
        previous = self.control_for(rider, rider.checkpoints[index - 1])
        if current is None or previous is None:
            return None
        return current.km - previous.km

    def progress_percent(self, rider: Rider) -> float:
        total = self.route.total_distance(self.variant(rider))
        if total <= 0:
            return 0.0
        return self.distance_covered(rider) / total * 100

    # -------------------------------------------------------------------------
    # Staleness
    # -------------------------------------------------------------------------

    def hours_since_last_checkpoint(self, rider: Rider, now: Optional[datetime] = None) -> float:
        last = rider.last_checkpoint
        if last is None:
            return 0.0
        return self.resolver.hours_since(self.instant(last), now)

    def is_dnf(self, rider: Rider, now: Optional[datetime] = None) -> bool:
        """
        Should the rider be shown as DNF?

        Feed labels 'dnf' and 'finished' are authoritative. Otherwise a
        rider with no checkpoint for `dnf_threshold_hours` is treated as
        DNF; a new checkpoint flips this back on the next evaluation.
        """
        if rider.status == RiderStatus.DNF:
            return True
        if rider.status == RiderStatus.FINISHED:
            return False

        last = rider.last_checkpoint
        if last is None:
            return False
        arrival = self.instant(last)
        if arrival is None:
            return False

        return self.resolver.hours_since(arrival, now) >= self.dnf_threshold_hours

    def display_status(self, rider: Rider, now: Optional[datetime] = None) -> RiderStatus:
        """Feed status with the inferred DNF applied on top."""
        if self.is_dnf(rider, now):
            return RiderStatus.DNF
        return rider.status

    def time_since_last_checkpoint(self, rider: Rider, now: Optional[datetime] = None) -> Optional[str]:
        """'2h 5m ago' style string; None without checkpoints, '' if unparsable."""
        last = rider.last_checkpoint
        if last is None:
            return None
        return self._time_ago(last, now)

    def _time_ago(self, checkpoint: Checkpoint, now: Optional[datetime]) -> str:
        arrival = self.instant(checkpoint)
        if arrival is None:
            return ""
        return format_time_ago(self.resolver.minutes_ago(arrival, now))

    # -------------------------------------------------------------------------
    # Projections
    # -------------------------------------------------------------------------

    def next_control_eta(self, rider: Rider) -> Optional[NextControlEta]:
        """
        Expected arrival at the next control at the current average speed.

        Only for riders in progress with a known speed and last arrival.
        """
        if rider.status != RiderStatus.IN_PROGRESS:
            return None

        speed = self.average_speed(rider)
        if speed <= 0:
            return None

        arrival = self.instant(rider.last_checkpoint)
        if arrival is None:
            return None

        distance = self.distance_covered(rider)
        control = self.route.next_control(distance, self.variant(rider))
        if control is None:
            return None

        to_go = control.km - distance
        hours = to_go / speed
        eta = (arrival.astimezone(timezone.utc) + timedelta(hours=hours)).astimezone(
            self.resolver.tz
        )
        return NextControlEta(control=control, distance_km=to_go, hours=hours, eta=eta)

    def checkpoint_history(self, rider: Rider, now: Optional[datetime] = None) -> list[CheckpointStats]:
        """Per-checkpoint elapsed time and control-to-control stats."""
        rows = []
        for index, checkpoint in enumerate(rider.checkpoints):
            control = self.control_for(rider, checkpoint)
            row = CheckpointStats(
                checkpoint=checkpoint,
                index=index,
                is_start=index == 0,
                km=control.km if control else None,
                elapsed_minutes=self.elapsed_at(rider, index),
                time_ago=self._time_ago(checkpoint, now),
            )
            if index > 0:
                distance = self._leg_distance(rider, index)
                row.leg_distance_km = distance if distance and distance > 0 else 0.0
                row.leg_minutes = max(
                    0, row.elapsed_minutes - self.elapsed_at(rider, index - 1)
                )
                row.leg_speed_kmh = self.leg_speed(rider, index)
            rows.append(row)
        return rows
