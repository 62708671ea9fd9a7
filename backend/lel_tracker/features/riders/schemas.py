"""
Tracking feed schemas.

Pydantic models for the published tracking JSON.
"""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class FeedCheckpoint(BaseModel):
    """Checkpoint arrival as published."""
    name: str
    time: str = ""
    km: Optional[float] = None


class FeedRider(BaseModel):
    """Rider entry as published."""
    rider_no: str
    name: str = ""
    status: Optional[str] = None
    checkpoints: List[FeedCheckpoint] = []
    distance_km: Optional[float] = None
    last_checkpoint: Optional[str] = None

    @field_validator('rider_no', mode='before')
    @classmethod
    def coerce_rider_no(cls, v):
        """Some exports write plain numeric bibs as numbers."""
        if isinstance(v, int):
            return str(v)
        return v


class FeedControl(BaseModel):
    """Control as listed in the feed's event block."""
    id: Optional[str] = None
    name: str
    km: float = 0.0
    leg: Optional[str] = None


class FeedEvent(BaseModel):
    name: Optional[str] = None
    distance_km: Optional[float] = None
    controls: List[FeedControl] = []


class TrackingFeed(BaseModel):
    """Top-level tracking document."""
    event: Optional[FeedEvent] = None
    riders: List[Any] = Field(
        default_factory=list,
        description="Validated one by one so a bad entry doesn't sink the snapshot"
    )
    last_updated: Optional[datetime] = None
