"""Feed feature module — fetching, caching and periodic refresh of the JSON feeds."""

from .client import FeedClient, FeedError, FeedUnavailable
from .cache import CacheEntry, SnapshotCache
from .service import TrackingService
from .refresher import PeriodicRefresher

__all__ = [
    "FeedClient",
    "FeedError",
    "FeedUnavailable",
    "CacheEntry",
    "SnapshotCache",
    "TrackingService",
    "PeriodicRefresher",
]
