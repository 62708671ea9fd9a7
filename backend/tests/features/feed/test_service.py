"""
Tests for the feed client, snapshot cache, tracking service and refresher.

HTTP is served by httpx.MockTransport; coroutines are driven with
asyncio.run so no async test plugin is needed.
"""

import asyncio

import httpx
import pytest

from lel_tracker.features.feed import (
    FeedClient,
    FeedError,
    FeedUnavailable,
    PeriodicRefresher,
    SnapshotCache,
    TrackingService,
)


TRACKING_URL = "https://feeds.test/indian-riders-tracking.json"
WEATHER_URL = "https://feeds.test/control-weather.json"


def tracking_doc(*names):
    return {
        "riders": [
            {
                "rider_no": f"A{i}",
                "name": name,
                "status": "in_progress",
                "checkpoints": [{"name": "Writtle", "time": "Sunday 05:00"}],
            }
            for i, name in enumerate(names, start=1)
        ],
        "last_updated": "2025-08-03T10:00:00Z",
    }


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class Feed:
    """Mock feed server: serves queued responses and counts requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def handler(self, request):
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, json=response)

    @property
    def transport(self):
        return httpx.MockTransport(self.handler)


def make_service(feed, resolver, clock=None):
    client = FeedClient(TRACKING_URL, WEATHER_URL, timeout=5, transport=feed.transport)
    return TrackingService(
        client,
        resolver,
        tracking_ttl_seconds=300,
        weather_ttl_seconds=600,
        clock=clock or FakeClock(),
    )


# =============================================================================
# FeedClient
# =============================================================================

class TestFeedClient:

    def test_fetch_tracking(self):
        feed = Feed(tracking_doc("Asha"))
        client = FeedClient(TRACKING_URL, WEATHER_URL, transport=feed.transport)

        data = asyncio.run(client.fetch_tracking())

        assert data["riders"][0]["name"] == "Asha"
        assert str(feed.requests[0].url) == TRACKING_URL
        assert feed.requests[0].headers["Cache-Control"] == "no-cache"

    def test_http_error(self):
        feed = Feed(httpx.Response(503))
        client = FeedClient(TRACKING_URL, WEATHER_URL, transport=feed.transport)

        with pytest.raises(FeedError, match="503"):
            asyncio.run(client.fetch_tracking())

    def test_transport_error(self):
        feed = Feed(httpx.ConnectError("connection refused"))
        client = FeedClient(TRACKING_URL, WEATHER_URL, transport=feed.transport)

        with pytest.raises(FeedError):
            asyncio.run(client.fetch_weather())

    def test_invalid_json(self):
        feed = Feed(httpx.Response(200, content=b"<html>"))
        client = FeedClient(TRACKING_URL, WEATHER_URL, transport=feed.transport)

        with pytest.raises(FeedError, match="valid JSON"):
            asyncio.run(client.fetch_tracking())

    def test_non_object_body(self):
        feed = Feed([1, 2, 3])
        client = FeedClient(TRACKING_URL, WEATHER_URL, transport=feed.transport)

        with pytest.raises(FeedError, match="expected an object"):
            asyncio.run(client.fetch_tracking())


# =============================================================================
# SnapshotCache
# =============================================================================

class TestSnapshotCache:

    def test_empty(self):
        cache = SnapshotCache(ttl_seconds=60)
        assert cache.value is None
        assert cache.age() is None
        assert not cache.is_fresh()

    def test_ttl(self):
        clock = FakeClock()
        cache = SnapshotCache(ttl_seconds=60, clock=clock)

        cache.offer(cache.next_seq(), "snapshot")
        assert cache.is_fresh()

        clock.now += 60
        assert not cache.is_fresh()
        assert cache.value == "snapshot"

    def test_stale_sequence_ignored(self):
        cache = SnapshotCache(ttl_seconds=60, clock=FakeClock())
        first = cache.next_seq()
        second = cache.next_seq()

        assert cache.offer(second, "newer") is True
        assert cache.offer(first, "older") is False
        assert cache.value == "newer"
        assert cache.applied_seq == second

    def test_same_sequence_not_applied_twice(self):
        cache = SnapshotCache(ttl_seconds=60, clock=FakeClock())
        seq = cache.next_seq()
        cache.offer(seq, "a")
        assert cache.offer(seq, "b") is False

    def test_explicit_fetch_time(self):
        clock = FakeClock()
        cache = SnapshotCache(ttl_seconds=60, clock=clock)
        cache.offer(cache.next_seq(), "a", fetched_at=clock.now - 30)
        assert cache.age() == 30

    def test_invalidate_keeps_value(self):
        cache = SnapshotCache(ttl_seconds=60, clock=FakeClock())
        cache.offer(cache.next_seq(), "a")

        cache.invalidate()

        assert not cache.is_fresh()
        assert cache.value == "a"


# =============================================================================
# TrackingService
# =============================================================================

class TestTrackingService:

    def test_refresh_parses_snapshot(self, resolver):
        service = make_service(Feed(tracking_doc("Asha", "Ravi")), resolver)

        snapshot = asyncio.run(service.refresh())

        assert [r.name for r in snapshot.riders] == ["Asha", "Ravi"]
        assert snapshot.riders[0].checkpoints[0].at is not None
        assert service.snapshot is snapshot

    def test_fresh_snapshot_is_reused(self, resolver):
        feed = Feed(tracking_doc("Asha"))
        clock = FakeClock()
        service = make_service(feed, resolver, clock)

        asyncio.run(service.refresh())
        asyncio.run(service.refresh())
        assert len(feed.requests) == 1

        clock.now += 301
        asyncio.run(service.refresh())
        assert len(feed.requests) == 2

    def test_force_refetches(self, resolver):
        feed = Feed(tracking_doc("Asha"))
        service = make_service(feed, resolver)

        asyncio.run(service.refresh())
        asyncio.run(service.refresh(force=True))

        assert len(feed.requests) == 2

    def test_failure_without_previous_snapshot(self, resolver):
        service = make_service(Feed(httpx.Response(500)), resolver)

        with pytest.raises(FeedUnavailable) as exc_info:
            asyncio.run(service.refresh())

        assert exc_info.value.stale is None
        assert service.snapshot is None

    def test_failure_keeps_stale_snapshot(self, resolver):
        feed = Feed(tracking_doc("Asha"), httpx.Response(500))
        service = make_service(feed, resolver)
        first = asyncio.run(service.refresh())

        with pytest.raises(FeedUnavailable) as exc_info:
            asyncio.run(service.refresh(force=True))

        assert exc_info.value.stale is first
        assert service.snapshot is first

    def test_invalid_document_is_unavailable(self, resolver):
        service = make_service(Feed({"riders": "nope"}), resolver)

        with pytest.raises(FeedUnavailable):
            asyncio.run(service.refresh())

    def test_late_response_does_not_overwrite_newer(self, resolver):
        """A slow refresh that started first must not replace a later one."""

        async def scenario():
            slow_started = asyncio.Event()
            release_slow = asyncio.Event()
            calls = []

            async def handler(request):
                calls.append(request)
                if len(calls) == 1:
                    slow_started.set()
                    await release_slow.wait()
                    return httpx.Response(200, json=tracking_doc("Old"))
                return httpx.Response(200, json=tracking_doc("New"))

            client = FeedClient(TRACKING_URL, WEATHER_URL, transport=httpx.MockTransport(handler))
            service = TrackingService(client, resolver, clock=FakeClock())

            slow = asyncio.create_task(service.refresh(force=True))
            await slow_started.wait()
            fast = await service.refresh(force=True)
            release_slow.set()
            late = await slow
            return service, fast, late

        service, fast, late = asyncio.run(scenario())

        assert [r.name for r in fast.riders] == ["New"]
        assert late is fast
        assert [r.name for r in service.snapshot.riders] == ["New"]

    def test_refresh_weather(self, resolver):
        feed = Feed({"weather": [{"control_name": "Hawick", "current": {"wind_direction": 90}}]})
        service = make_service(feed, resolver)

        report = asyncio.run(service.refresh_weather())

        assert report.weather[0].control_name == "Hawick"
        assert service.weather is report
        assert str(feed.requests[0].url) == WEATHER_URL

    def test_invalidate(self, resolver):
        feed = Feed(tracking_doc("Asha"))
        service = make_service(feed, resolver)
        asyncio.run(service.refresh())

        service.invalidate()
        asyncio.run(service.refresh())

        assert len(feed.requests) == 2

    def test_from_settings(self, resolver):
        from lel_tracker.config import Settings

        settings = Settings(feed_base_url="https://feeds.test/", tracking_cache_ttl_seconds=42)
        service = TrackingService.from_settings(settings, resolver=resolver)

        assert service.client.tracking_url == TRACKING_URL
        assert service.client.weather_url == WEATHER_URL
        assert service.tracking_cache.ttl_seconds == 42


# =============================================================================
# PeriodicRefresher
# =============================================================================

class TestPeriodicRefresher:

    def test_runs_until_stopped(self):
        async def scenario():
            calls = []

            async def action():
                calls.append(1)

            refresher = PeriodicRefresher(action, interval_seconds=0.01)
            await refresher.start()
            assert refresher.running
            await asyncio.sleep(0.05)
            await refresher.stop()
            count = len(calls)
            await asyncio.sleep(0.03)
            return refresher, count, len(calls)

        refresher, at_stop, later = asyncio.run(scenario())

        assert at_stop >= 2
        assert later == at_stop
        assert not refresher.running

    def test_failures_do_not_stop_loop(self):
        async def scenario():
            async def action():
                raise FeedUnavailable("down")

            refresher = PeriodicRefresher(action, interval_seconds=0.01)
            await refresher.start()
            await asyncio.sleep(0.05)
            await refresher.stop()
            return refresher

        refresher = asyncio.run(scenario())
        assert refresher.runs >= 2

    def test_stop_without_start(self):
        async def action():
            pass

        refresher = PeriodicRefresher(action, interval_seconds=1)
        asyncio.run(refresher.stop())
        assert not refresher.running
