"""
Riders feature module — derived state from checkpoint logs.

Usage:
    from lel_tracker.features.riders import RiderMetrics, rank_rider, latest_updates

Components:
- RiderMetrics: distance, elapsed time, speed, DNF inference, ETA
- rank_rider: position among peers at the same or a later control
- latest_updates: newest arrival per rider, last 24 hours
- parse_tracking_payload: feed JSON to riders with resolved times
"""

from .models import (
    Checkpoint,
    CheckpointStats,
    ControlProgress,
    LatestUpdate,
    NextControlEta,
    RankResult,
    Rider,
    TrackingSnapshot,
    WaveStatistics,
)
from .metrics import RiderMetrics, DEFAULT_DNF_THRESHOLD_HOURS
from .ranking import rank_rider, ride_minutes
from .updates import latest_updates
from .ingest import parse_tracking_payload, rider_from_feed
from .waves import group_by_wave, sort_by_rider_no, count_by_variant
from .stats import wave_statistics, control_progress, search_riders

__all__ = [
    # Models
    "Checkpoint",
    "CheckpointStats",
    "ControlProgress",
    "LatestUpdate",
    "NextControlEta",
    "RankResult",
    "Rider",
    "TrackingSnapshot",
    "WaveStatistics",
    # Metrics
    "RiderMetrics",
    "DEFAULT_DNF_THRESHOLD_HOURS",
    # Ranking / updates
    "rank_rider",
    "ride_minutes",
    "latest_updates",
    # Ingestion
    "parse_tracking_payload",
    "rider_from_feed",
    # Grouping / statistics
    "group_by_wave",
    "sort_by_rider_no",
    "count_by_variant",
    "wave_statistics",
    "control_progress",
    "search_riders",
]
