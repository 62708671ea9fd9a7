"""Statistics and search over a set of riders."""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from lel_tracker.features.route import RouteTable, StartVariant
from lel_tracker.shared.constants import APPROACH_THRESHOLD_KM, RiderStatus

from .metrics import RiderMetrics
from .models import ControlProgress, Rider, WaveStatistics


def wave_statistics(
    riders: Sequence[Rider],
    metrics: RiderMetrics,
    now: datetime | None = None,
) -> WaveStatistics:
    """Counts per display status plus average distance and speed.

    Average distance is over all riders; average speed only over riders
    with a known speed.
    """
    total = len(riders)
    if total == 0:
        return WaveStatistics(total=0)

    counts = {status: 0 for status in RiderStatus}
    total_distance = 0.0
    speeds = []
    for rider in riders:
        counts[metrics.display_status(rider, now)] += 1
        total_distance += metrics.distance_covered(rider)
        speed = metrics.average_speed(rider)
        if speed > 0:
            speeds.append(speed)

    return WaveStatistics(
        total=total,
        not_started=counts[RiderStatus.NOT_STARTED],
        in_progress=counts[RiderStatus.IN_PROGRESS],
        finished=counts[RiderStatus.FINISHED],
        dnf=counts[RiderStatus.DNF],
        avg_distance_km=total_distance / total,
        avg_speed_kmh=sum(speeds) / len(speeds) if speeds else 0.0,
        completion_rate=round(counts[RiderStatus.FINISHED] / total * 100, 1),
    )


def control_progress(
    route: RouteTable,
    riders: Sequence[Rider],
    metrics: RiderMetrics,
    variant: StartVariant | None = None,
    threshold_km: float = APPROACH_THRESHOLD_KM,
) -> list[ControlProgress]:
    """For each control: riders who checked in there, and riders closing in.

    A rider is approaching a control they haven't reached when it lies
    within `threshold_km` ahead of their current distance.
    """
    progress = []
    for control in route.controls_for(variant):
        entry = ControlProgress(control=control)
        for rider in riders:
            if _has_reached(route, rider, control.name):
                entry.reached.append(rider)
                continue
            if rider.status == RiderStatus.NOT_STARTED:
                continue
            own_km = route.distance_of(control.name, metrics.variant(rider))
            ahead = own_km - metrics.distance_covered(rider)
            if 0 < ahead <= threshold_km:
                entry.approaching.append(rider)
        progress.append(entry)
    return progress


def _has_reached(route: RouteTable, rider: Rider, control_name: str) -> bool:
    target = route.resolve(control_name)
    if target is None:
        return False
    for checkpoint in rider.checkpoints:
        hit = route.resolve(checkpoint.name)
        if hit is not None and hit.name == target.name:
            return True
    return False


def search_riders(riders: Sequence[Rider], query: str) -> list[Rider]:
    """Case-insensitive partial match on name or rider number."""
    query_lower = query.strip().lower()
    if not query_lower:
        return list(riders)
    return [
        r for r in riders
        if query_lower in r.name.lower() or query_lower in r.rider_no.lower()
    ]
