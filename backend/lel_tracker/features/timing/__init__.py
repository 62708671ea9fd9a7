"""Timing feature module — checkpoint time strings to event-local instants."""

from .resolver import TimeResolver, get_time_resolver, parse_clock

__all__ = [
    "TimeResolver",
    "get_time_resolver",
    "parse_clock",
]
