"""Tracking feed ingestion — raw JSON to riders with resolved checkpoint times.

Checkpoint strings are resolved here, once, so everything downstream
works with instants rather than re-parsing "Monday 02:15".
"""

from __future__ import annotations

import logging
from datetime import datetime

from pydantic import ValidationError

from lel_tracker.features.route import Control
from lel_tracker.features.timing import TimeResolver
from lel_tracker.shared.constants import Leg, RiderStatus

from .models import Checkpoint, Rider, TrackingSnapshot
from .schemas import FeedControl, FeedRider, TrackingFeed

logger = logging.getLogger(__name__)


def parse_tracking_payload(
    payload: dict,
    resolver: TimeResolver,
    now: datetime | None = None,
) -> TrackingSnapshot:
    """Parse a tracking feed document into a TrackingSnapshot.

    Malformed rider entries are logged and skipped. A document whose
    top level doesn't validate raises pydantic.ValidationError.
    """
    feed = TrackingFeed.model_validate(payload)

    riders: list[Rider] = []
    skipped = 0
    for index, raw in enumerate(feed.riders):
        try:
            entry = FeedRider.model_validate(raw)
        except ValidationError as e:
            skipped += 1
            logger.warning(f"Skipping malformed rider entry #{index}: {e.error_count()} error(s)")
            continue
        riders.append(rider_from_feed(entry, resolver, now))

    controls = [_control_from_feed(c) for c in feed.event.controls] if feed.event else []

    if skipped:
        logger.warning(f"Tracking snapshot: {skipped} of {len(feed.riders)} riders skipped")

    return TrackingSnapshot(
        riders=riders,
        controls=controls,
        last_updated=feed.last_updated,
        skipped=skipped,
    )


def rider_from_feed(
    entry: FeedRider,
    resolver: TimeResolver,
    now: datetime | None = None,
) -> Rider:
    """Build a Rider, resolving each checkpoint time against the event start."""
    checkpoints = tuple(
        Checkpoint(name=cp.name, time=cp.time, at=resolver.resolve(cp.time, now))
        for cp in entry.checkpoints
    )
    return Rider(
        rider_no=entry.rider_no,
        name=entry.name,
        status=_status(entry.status, bool(checkpoints)),
        checkpoints=checkpoints,
    )


def _status(label: str | None, has_checkpoints: bool) -> RiderStatus:
    """Feed status label, guessing from progress when it is missing or unknown."""
    if label:
        try:
            return RiderStatus(label.strip().lower())
        except ValueError:
            logger.debug(f"Unknown rider status label: {label!r}")
    return RiderStatus.IN_PROGRESS if has_checkpoints else RiderStatus.NOT_STARTED


def _control_from_feed(control: FeedControl) -> Control:
    try:
        leg = Leg(control.leg) if control.leg else Leg.NORTH
    except ValueError:
        leg = Leg.NORTH
    return Control(
        name=control.name,
        km=control.km,
        leg=leg,
        is_return=leg == Leg.SOUTH,
    )
