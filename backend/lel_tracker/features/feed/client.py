"""
Feed client.

Fetches the published tracking and weather JSON documents.
"""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================

class FeedError(Exception):
    """Base feed error."""
    pass


class FeedUnavailable(FeedError):
    """
    A refresh failed.

    `stale` holds the last good value, if any, so callers can keep
    showing it and offer a retry.
    """

    def __init__(self, message: str, stale: Any = None):
        super().__init__(message)
        self.stale = stale


# =============================================================================
# Client
# =============================================================================

class FeedClient:
    """
    Async client for the tracking/weather JSON feeds.

    Usage:
        client = FeedClient(tracking_url, weather_url)
        payload = await client.fetch_tracking()
    """

    def __init__(
        self,
        tracking_url: str,
        weather_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.tracking_url = tracking_url
        self.weather_url = weather_url
        self.timeout = timeout
        self._transport = transport

    async def fetch_tracking(self) -> dict:
        """Fetch the rider tracking document."""
        return await self._get_json(self.tracking_url)

    async def fetch_weather(self) -> dict:
        """Fetch the per-control weather document."""
        return await self._get_json(self.weather_url)

    async def _get_json(self, url: str) -> dict:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(url, headers={"Cache-Control": "no-cache"})
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise FeedError(f"{url} returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FeedError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            raise FeedError(f"{url} did not return valid JSON") from e

        if not isinstance(data, dict):
            raise FeedError(f"{url} returned {type(data).__name__}, expected an object")

        logger.debug(f"Fetched {url}")
        return data
