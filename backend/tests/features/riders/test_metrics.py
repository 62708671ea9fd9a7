"""
Tests for RiderMetrics.

Uses the three-control route from conftest (Start 0, Control A 100,
Control B 250) unless a test needs the real route.
"""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from lel_tracker.features.riders import Checkpoint
from lel_tracker.shared.constants import RiderStatus


LONDON = ZoneInfo("Europe/London")


def london(day, hour, minute=0):
    return datetime(2025, 8, day, hour, minute, tzinfo=LONDON)


# =============================================================================
# Riders without checkpoints
# =============================================================================

class TestNoCheckpoints:

    def test_defaults(self, metrics, make_rider):
        rider = make_rider("A1")

        assert metrics.distance_covered(rider) == 0
        assert metrics.average_speed(rider) == 0
        assert metrics.is_dnf(rider, now=london(8, 12)) is False
        assert metrics.time_since_last_checkpoint(rider, now=london(8, 12)) is None
        assert metrics.next_control_eta(rider) is None
        assert metrics.checkpoint_history(rider) == []


# =============================================================================
# Distance, elapsed time, speed
# =============================================================================

class TestDistanceAndSpeed:

    def test_start_to_control_a(self, metrics, make_rider):
        """100 km in 6 hours."""
        rider = make_rider("A1", ("Start", "Sunday 08:00"), ("Control A", "Sunday 14:00"))

        assert metrics.distance_covered(rider) == 100
        assert metrics.elapsed_minutes(rider, rider.checkpoints[-1]) == 360
        assert metrics.average_speed(rider) == pytest.approx(16.67, abs=0.01)

    def test_only_last_checkpoint_counts(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "Sunday 08:00"), ("Mystery", "Sunday 14:00"))
        assert metrics.distance_covered(rider) == 0
        assert metrics.average_speed(rider) == 0

    @pytest.mark.parametrize("start_time", ["Sunday 08:00", "Friday 23:59", "garbage", ""])
    def test_start_elapsed_is_zero(self, metrics, make_rider, start_time):
        rider = make_rider("A1", ("Start", start_time), ("Control A", "Sunday 14:00"))
        assert metrics.elapsed_minutes(rider, rider.checkpoints[0]) == 0
        assert metrics.elapsed_at(rider, 0) == 0

    def test_elapsed_unparsable_checkpoint(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "Sunday 08:00"), ("Control A", "later"))
        assert metrics.elapsed_minutes(rider, rider.checkpoints[-1]) == 0
        assert metrics.average_speed(rider) == 0

    def test_elapsed_negative_is_zero(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "Monday 08:00"), ("Control A", "Sunday 14:00"))
        assert metrics.elapsed_minutes(rider, rider.checkpoints[-1]) == 0

    def test_wave_start_falls_back_to_schedule(self, lel_metrics, make_rider):
        """Unparsable start time: elapsed is measured from the wave's slot."""
        rider = make_rider("A1", ("Writtle", "-"), ("Northstowe N", "Sunday 09:00"))
        # Wave A starts 05:00 on the start date
        assert lel_metrics.wave_start(rider) == london(3, 5)
        assert lel_metrics.elapsed_minutes(rider, rider.checkpoints[-1]) == 240

    def test_single_checkpoint_has_no_speed(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "Sunday 08:00"))
        assert metrics.average_speed(rider) == 0

    def test_leg_speed(self, metrics, make_rider):
        rider = make_rider(
            "A1",
            ("Start", "Sunday 08:00"),
            ("Control A", "Sunday 14:00"),
            ("Control B", "Monday 00:00"),
        )
        assert metrics.leg_speed(rider, 1) == pytest.approx(100 / 6)
        assert metrics.leg_speed(rider, 2) == pytest.approx(15.0)
        assert metrics.leg_speed(rider, 0) == 0.0
        assert metrics.leg_speed(rider, 3) == 0.0

    def test_leg_speed_unknown_control(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "Sunday 08:00"), ("Elsewhere", "Sunday 14:00"))
        assert metrics.leg_speed(rider, 1) == 0.0

    def test_london_start_offset(self, lel_metrics, make_rider):
        rider = make_rider("LA1", ("London", "Sunday 08:00"), ("Boston N", "Sunday 18:00"))
        assert lel_metrics.distance_covered(rider) == 213
        assert lel_metrics.average_speed(rider) == pytest.approx(21.3)

    def test_progress_percent(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "Sunday 08:00"), ("Control A", "Sunday 14:00"))
        assert metrics.progress_percent(rider) == pytest.approx(40.0)

    def test_resolved_instant_is_preferred(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "Sunday 08:00"))
        rider = rider.with_checkpoint(
            Checkpoint(name="Control A", time="14:00", at=london(3, 14))
        )
        assert metrics.elapsed_minutes(rider, rider.checkpoints[-1]) == 360


# =============================================================================
# DNF inference
# =============================================================================

class TestDnf:

    def test_threshold_crossing(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "Sunday 08:00"))

        assert metrics.is_dnf(rider, now=london(3, 23, 59)) is False
        assert metrics.is_dnf(rider, now=london(4, 0)) is True
        assert metrics.is_dnf(rider, now=london(5, 0)) is True

    def test_new_checkpoint_flips_back(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "Sunday 08:00"))
        now = london(4, 1)
        assert metrics.is_dnf(rider, now) is True

        rider = rider.with_checkpoint(Checkpoint(name="Control A", time="Monday 00:30"))
        assert metrics.is_dnf(rider, now) is False
        assert metrics.display_status(rider, now) == RiderStatus.IN_PROGRESS

    def test_feed_labels_are_authoritative(self, metrics, make_rider):
        now = london(8, 0)
        finished = make_rider("A1", ("Start", "Sunday 08:00"), status=RiderStatus.FINISHED)
        dnf = make_rider("A2", ("Start", "Sunday 08:00"), ("Control A", "Wednesday 23:00"),
                         status=RiderStatus.DNF)

        assert metrics.is_dnf(finished, now) is False
        assert metrics.is_dnf(dnf, now=london(3, 23)) is True

    def test_unparsable_last_time(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "-"))
        assert metrics.is_dnf(rider, now=london(8, 0)) is False

    def test_display_status(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "Sunday 08:00"))
        assert metrics.display_status(rider, london(4, 12)) == RiderStatus.DNF
        assert rider.status == RiderStatus.IN_PROGRESS

    def test_custom_threshold(self, small_route, resolver, make_rider):
        from lel_tracker.features.riders import RiderMetrics

        strict = RiderMetrics(small_route, resolver, dnf_threshold_hours=12)
        rider = make_rider("A1", ("Start", "Sunday 08:00"))
        assert strict.is_dnf(rider, now=london(3, 20)) is True


# =============================================================================
# Time since last checkpoint
# =============================================================================

class TestTimeSince:

    def test_formatted(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "Sunday 08:00"))
        assert metrics.time_since_last_checkpoint(rider, now=london(3, 10, 5)) == "2h 5m ago"

    def test_unparsable(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "whenever"))
        assert metrics.time_since_last_checkpoint(rider, now=london(3, 10)) == ""

    def test_future_is_just_now(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "Sunday 12:00"))
        assert metrics.time_since_last_checkpoint(rider, now=london(3, 10)) == "0m ago"

    def test_hours_since_last_checkpoint(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "Sunday 08:00"))
        assert metrics.hours_since_last_checkpoint(rider, now=london(3, 11)) == 3.0
        assert metrics.hours_since_last_checkpoint(make_rider("A2")) == 0.0

    def test_naive_now_is_event_local(self, metrics, make_rider):
        """Naive `now` reads as London time, matching the update feed."""
        rider = make_rider("A1", ("Start", "Sunday 08:00"), ("Control A", "Sunday 18:00"))
        now = datetime(2025, 8, 4, 9, 30)

        assert metrics.hours_since_last_checkpoint(rider, now) == 15.5
        assert metrics.is_dnf(rider, now) is False
        assert metrics.time_since_last_checkpoint(rider, now) == "15h 30m ago"


# =============================================================================
# Projections
# =============================================================================

class TestProjections:

    def test_next_control_eta(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "Sunday 08:00"), ("Control A", "Sunday 14:00"))

        eta = metrics.next_control_eta(rider)

        assert eta.control.name == "Control B"
        assert eta.distance_km == 150
        assert eta.hours == pytest.approx(9.0)
        assert abs(eta.eta - london(3, 23)) < timedelta(seconds=1)
        assert eta.eta.tzinfo is not None

    def test_no_eta_when_finished(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "Sunday 08:00"), ("Control A", "Sunday 14:00"),
                           status=RiderStatus.FINISHED)
        assert metrics.next_control_eta(rider) is None

    def test_no_eta_at_last_control(self, metrics, make_rider):
        rider = make_rider("A1", ("Start", "Sunday 08:00"), ("Control B", "Monday 00:00"))
        assert metrics.next_control_eta(rider) is None

    def test_checkpoint_history(self, metrics, make_rider):
        rider = make_rider(
            "A1",
            ("Start", "Sunday 08:00"),
            ("Control A", "Sunday 14:00"),
            ("Control B", "Monday 00:00"),
        )

        rows = metrics.checkpoint_history(rider, now=london(4, 1))

        assert [r.km for r in rows] == [0, 100, 250]
        assert rows[0].is_start and rows[0].elapsed_minutes == 0
        assert rows[1].leg_distance_km == 100
        assert rows[1].leg_minutes == 360
        assert rows[2].elapsed_minutes == 960
        assert rows[2].leg_minutes == 600
        assert rows[2].leg_speed_kmh == pytest.approx(15.0)
        assert rows[2].time_ago == "1h ago"
