"""
Snapshot cache.

Holds the last good copy of a feed with its fetch time and the sequence
number of the request that produced it.
"""

import math
import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    fetched_at: float  # clock() reading when stored
    seq: int  # request sequence number that produced it


class SnapshotCache(Generic[T]):
    """
    Last-known-good value with a time-to-live.

    Requests take a sequence number before they start. A completed
    response is only stored if its number is newer than the stored one,
    so a slow request can't overwrite the result of a later one.

    Usage:
        cache = SnapshotCache(ttl_seconds=300)
        if not cache.is_fresh():
            seq = cache.next_seq()
            cache.offer(seq, await fetch())
        value = cache.value
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: Optional[CacheEntry[T]] = None
        self._issued = 0

    @property
    def value(self) -> Optional[T]:
        return self._entry.value if self._entry else None

    @property
    def applied_seq(self) -> int:
        return self._entry.seq if self._entry else 0

    def age(self) -> Optional[float]:
        """Seconds since the stored value was fetched."""
        if self._entry is None:
            return None
        return self._clock() - self._entry.fetched_at

    def is_fresh(self) -> bool:
        age = self.age()
        return age is not None and age < self.ttl_seconds

    def next_seq(self) -> int:
        """Reserve a sequence number for a request about to start."""
        self._issued += 1
        return self._issued

    def offer(self, seq: int, value: T, fetched_at: Optional[float] = None) -> bool:
        """Store `value` unless a newer request already completed."""
        if self._entry is not None and seq <= self._entry.seq:
            return False
        if fetched_at is None:
            fetched_at = self._clock()
        self._entry = CacheEntry(value=value, fetched_at=fetched_at, seq=seq)
        return True

    def invalidate(self) -> None:
        """Force the next read to refetch; the value stays available."""
        if self._entry is not None:
            self._entry = CacheEntry(
                value=self._entry.value, fetched_at=-math.inf, seq=self._entry.seq
            )
