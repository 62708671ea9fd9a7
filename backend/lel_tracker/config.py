"""
Application Configuration

Uses Pydantic Settings for type-safe configuration.
"""

from datetime import date
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, ConfigDict

# Package root: backend/lel_tracker/
PACKAGE_ROOT = Path(__file__).parent
# Content directory: backend/lel_tracker/content/
CONTENT_DIR = PACKAGE_ROOT / "content"


class Settings(BaseSettings):
    """Application settings with validation."""

    # === Core ===
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # === Remote feeds ===
    feed_base_url: str = Field(
        default="https://lel-riders-data-2025.s3.ap-south-1.amazonaws.com",
        description="Base URL of the published tracking/weather JSON"
    )
    tracking_feed_path: str = Field(default="indian-riders-tracking.json")
    weather_feed_path: str = Field(default="control-weather.json")
    request_timeout: float = Field(default=30.0, description="HTTP timeout, seconds")

    # === Caching / refresh ===
    tracking_cache_ttl_seconds: int = Field(default=300)
    weather_cache_ttl_seconds: int = Field(default=600)
    refresh_interval_seconds: int = Field(default=300)

    # === Event ===
    event_timezone: str = Field(
        default="Europe/London",
        description="All checkpoint times are local to this zone"
    )
    event_start_date: date = Field(default=date(2025, 8, 3))
    secondary_timezone: str | None = Field(
        default="Asia/Kolkata",
        description="Extra zone shown next to ETAs for followers at home"
    )
    route_file: Path = Field(default=CONTENT_DIR / "lel2025.yaml")

    # === Derived-state rules ===
    dnf_threshold_hours: float = Field(
        default=16.0,
        description="Hours without a checkpoint before a rider is shown as DNF"
    )
    update_window_hours: int = Field(default=24)
    latest_updates_limit: int = Field(default=10)

    @field_validator('feed_base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator('event_timezone', 'secondary_timezone')
    @classmethod
    def check_timezone(cls, v: str | None) -> str | None:
        """Reject zone names the tz database doesn't know."""
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @property
    def tracking_feed_url(self) -> str:
        return f"{self.feed_base_url}/{self.tracking_feed_path}"

    @property
    def weather_feed_url(self) -> str:
        return f"{self.feed_base_url}/{self.weather_feed_path}"

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
