"""
Tests for Settings.
"""

from datetime import date

import pytest
from pydantic import ValidationError

from lel_tracker.config import CONTENT_DIR, Settings


class TestSettings:

    def test_defaults(self):
        settings = Settings()
        assert settings.event_timezone == "Europe/London"
        assert settings.event_start_date == date(2025, 8, 3)
        assert settings.dnf_threshold_hours == 16.0
        assert settings.latest_updates_limit == 10
        assert settings.route_file == CONTENT_DIR / "lel2025.yaml"

    def test_feed_urls(self):
        settings = Settings(feed_base_url="https://example.org/feeds/")
        assert settings.tracking_feed_url == "https://example.org/feeds/indian-riders-tracking.json"
        assert settings.weather_feed_url == "https://example.org/feeds/control-weather.json"

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError):
            Settings(event_timezone="Mars/Olympus_Mons")

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("DNF_THRESHOLD_HOURS", "12")
        monkeypatch.setenv("EVENT_START_DATE", "2029-08-05")
        settings = Settings()
        assert settings.dnf_threshold_hours == 12.0
        assert settings.event_start_date == date(2029, 8, 5)

    def test_packaged_route_exists(self):
        assert (CONTENT_DIR / "lel2025.yaml").is_file()
