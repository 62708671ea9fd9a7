"""Route feature module — controls, start variants, waves and name resolution."""

from .models import Control, EventInfo, StartVariant, split_direction
from .catalog import (
    RouteConfigError,
    RouteTable,
    build_route_table,
    get_route_table,
    load_route_table,
)

__all__ = [
    "Control",
    "EventInfo",
    "StartVariant",
    "split_direction",
    "RouteConfigError",
    "RouteTable",
    "build_route_table",
    "get_route_table",
    "load_route_table",
]
