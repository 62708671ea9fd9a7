"""
Shared fixtures.

The event starts on Sunday 2025-08-03 in Europe/London, so day names in
test checkpoints map as Sunday → day 0, Monday → day 1, and so on.
"""

from datetime import date

import pytest

from lel_tracker.config import CONTENT_DIR
from lel_tracker.features.riders import Checkpoint, Rider, RiderMetrics
from lel_tracker.features.route import Control, RouteTable, load_route_table
from lel_tracker.features.timing import TimeResolver
from lel_tracker.shared.constants import Leg, RiderStatus

EVENT_START = date(2025, 8, 3)


@pytest.fixture
def small_route():
    """Three-control route: Start 0 km, Control A 100 km, Control B 250 km."""
    return RouteTable([
        Control(name="Start", km=0, leg=Leg.NORTH),
        Control(name="Control A", km=100, leg=Leg.NORTH),
        Control(name="Control B", km=250, leg=Leg.SOUTH, is_return=True),
    ])


@pytest.fixture(scope="session")
def lel_route():
    """The packaged LEL 2025 route."""
    return load_route_table(CONTENT_DIR / "lel2025.yaml")


@pytest.fixture
def resolver():
    return TimeResolver(EVENT_START, "Europe/London")


@pytest.fixture
def metrics(small_route, resolver):
    return RiderMetrics(small_route, resolver, dnf_threshold_hours=16)


@pytest.fixture
def lel_metrics(lel_route, resolver):
    return RiderMetrics(lel_route, resolver)


@pytest.fixture
def make_rider():
    """Factory: make_rider("A1", ("Start", "Sunday 08:00"), ("Control A", "Sunday 14:00"))."""
    def _make(rider_no, *checkpoints, status=RiderStatus.IN_PROGRESS, name=None):
        if not checkpoints and status == RiderStatus.IN_PROGRESS:
            status = RiderStatus.NOT_STARTED
        return Rider(
            rider_no=rider_no,
            name=name or f"Rider {rider_no}",
            status=status,
            checkpoints=tuple(Checkpoint(name=n, time=t) for n, t in checkpoints),
        )
    return _make
