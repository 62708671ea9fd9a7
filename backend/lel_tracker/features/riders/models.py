"""Data models for riders and their derived views (dataclasses, no I/O)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from lel_tracker.features.route.models import Control
from lel_tracker.shared.constants import RiderStatus


@dataclass(frozen=True)
class Checkpoint:
    """One observed checkpoint arrival."""

    name: str  # "Brampton N"
    time: str  # as reported: "Monday 02:15" / "3/8 19:32"
    at: datetime | None = None  # resolved on ingestion, None if unparsable


@dataclass(frozen=True)
class Rider:
    """A rider as last seen in the tracking feed."""

    rider_no: str  # "LA15"
    name: str
    status: RiderStatus = RiderStatus.NOT_STARTED
    checkpoints: tuple[Checkpoint, ...] = ()

    def __post_init__(self):
        if not isinstance(self.checkpoints, tuple):
            object.__setattr__(self, "checkpoints", tuple(self.checkpoints))
        if not isinstance(self.status, RiderStatus):
            object.__setattr__(self, "status", RiderStatus(self.status))

    @property
    def last_checkpoint(self) -> Checkpoint | None:
        return self.checkpoints[-1] if self.checkpoints else None

    def with_checkpoint(self, checkpoint: Checkpoint) -> Rider:
        """New record with one more arrival appended."""
        return Rider(
            rider_no=self.rider_no,
            name=self.name,
            status=self.status,
            checkpoints=self.checkpoints + (checkpoint,),
        )


@dataclass
class TrackingSnapshot:
    """One parsed copy of the tracking feed."""

    riders: list[Rider] = field(default_factory=list)
    controls: list[Control] = field(default_factory=list)  # as listed by the feed
    last_updated: datetime | None = None
    skipped: int = 0  # malformed rider entries dropped during parsing

    def get_rider(self, rider_no: str) -> Rider | None:
        return next((r for r in self.riders if r.rider_no == rider_no), None)


# =============================================================================
# Derived views
# =============================================================================

@dataclass(frozen=True)
class RankResult:
    """Overall position among riders who got at least as far."""

    position: int  # 1-based
    total_considered: int


@dataclass(frozen=True)
class LatestUpdate:
    """Most recent checkpoint arrival of one rider."""

    rider_no: str
    rider_name: str
    checkpoint: str
    time: str
    timestamp: datetime
    minutes_ago: int


@dataclass(frozen=True)
class NextControlEta:
    """Expected arrival at the next control at the rider's average speed."""

    control: Control
    distance_km: float
    hours: float
    eta: datetime


@dataclass
class CheckpointStats:
    """One row of a rider's checkpoint history."""

    checkpoint: Checkpoint
    index: int
    is_start: bool
    km: float | None  # None when the name didn't resolve
    elapsed_minutes: int
    leg_distance_km: float = 0.0
    leg_minutes: int = 0
    leg_speed_kmh: float = 0.0
    time_ago: str | None = None


@dataclass
class WaveStatistics:
    """Aggregate numbers for a group of riders."""

    total: int
    not_started: int = 0
    in_progress: int = 0
    finished: int = 0
    dnf: int = 0
    avg_distance_km: float = 0.0
    avg_speed_kmh: float = 0.0
    completion_rate: float = 0.0  # percent finished


@dataclass
class ControlProgress:
    """Who has reached, and who is closing in on, one control."""

    control: Control
    reached: list[Rider] = field(default_factory=list)
    approaching: list[Rider] = field(default_factory=list)
