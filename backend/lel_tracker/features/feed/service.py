"""
Tracking service.

Keeps the latest tracking and weather snapshots, refetching when they
go stale and keeping the old copy available when a fetch fails.
"""

import logging
import time
from typing import Callable, Optional

import httpx
from pydantic import ValidationError

from lel_tracker.features.riders import TrackingSnapshot, parse_tracking_payload
from lel_tracker.features.timing import TimeResolver
from lel_tracker.features.weather import WeatherReport

from .cache import SnapshotCache
from .client import FeedClient, FeedError, FeedUnavailable

logger = logging.getLogger(__name__)


class TrackingService:
    """
    Owner of the fetched snapshots.

    Overlapping refreshes (a manual one while the periodic one is still
    running) are safe: whichever request started last wins, and an
    older response arriving late is discarded.

    Usage:
        service = TrackingService.from_settings(settings)
        snapshot = await service.refresh()
    """

    def __init__(
        self,
        client: FeedClient,
        resolver: TimeResolver,
        tracking_ttl_seconds: float = 300,
        weather_ttl_seconds: float = 600,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.resolver = resolver
        self.tracking_cache: SnapshotCache[TrackingSnapshot] = SnapshotCache(
            tracking_ttl_seconds, clock
        )
        self.weather_cache: SnapshotCache[WeatherReport] = SnapshotCache(
            weather_ttl_seconds, clock
        )

    @classmethod
    def from_settings(
        cls,
        settings,
        resolver: Optional[TimeResolver] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "TrackingService":
        client = FeedClient(
            tracking_url=settings.tracking_feed_url,
            weather_url=settings.weather_feed_url,
            timeout=settings.request_timeout,
            transport=transport,
        )
        resolver = resolver or TimeResolver(settings.event_start_date, settings.event_timezone)
        return cls(
            client,
            resolver,
            tracking_ttl_seconds=settings.tracking_cache_ttl_seconds,
            weather_ttl_seconds=settings.weather_cache_ttl_seconds,
        )

    @property
    def snapshot(self) -> Optional[TrackingSnapshot]:
        """Last good tracking snapshot (possibly stale)."""
        return self.tracking_cache.value

    @property
    def weather(self) -> Optional[WeatherReport]:
        return self.weather_cache.value

    async def refresh(self, force: bool = False) -> TrackingSnapshot:
        """
        Current tracking snapshot, fetching if the cached one is stale.

        Raises:
            FeedUnavailable: fetch or parse failed; `.stale` has the
                previous snapshot when there is one.
        """
        cache = self.tracking_cache
        if not force and cache.is_fresh():
            return cache.value

        seq = cache.next_seq()
        try:
            payload = await self.client.fetch_tracking()
            snapshot = parse_tracking_payload(payload, self.resolver)
        except (FeedError, ValidationError) as e:
            logger.error(f"Tracking refresh #{seq} failed: {e}")
            raise FeedUnavailable(f"Tracking feed unavailable: {e}", stale=cache.value) from e

        if cache.offer(seq, snapshot):
            logger.info(
                f"Tracking snapshot #{seq}: {len(snapshot.riders)} riders "
                f"(feed updated {snapshot.last_updated})"
            )
        else:
            logger.info(f"Discarding out-of-order tracking response #{seq}")
        return cache.value

    async def refresh_weather(self, force: bool = False) -> WeatherReport:
        """
        Current weather report, fetching if the cached one is stale.

        Raises:
            FeedUnavailable: as for refresh().
        """
        cache = self.weather_cache
        if not force and cache.is_fresh():
            return cache.value

        seq = cache.next_seq()
        try:
            payload = await self.client.fetch_weather()
            report = WeatherReport.model_validate(payload)
        except (FeedError, ValidationError) as e:
            logger.error(f"Weather refresh #{seq} failed: {e}")
            raise FeedUnavailable(f"Weather feed unavailable: {e}", stale=cache.value) from e

        if not cache.offer(seq, report):
            logger.info(f"Discarding out-of-order weather response #{seq}")
        return cache.value

    def invalidate(self) -> None:
        """Make the next refresh hit the network."""
        self.tracking_cache.invalidate()
        self.weather_cache.invalidate()
