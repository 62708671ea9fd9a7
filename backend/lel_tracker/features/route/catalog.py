"""Route table loader — reads the route YAML and resolves checkpoint names."""

from __future__ import annotations

import dataclasses
import logging
import re
from datetime import date
from pathlib import Path

import yaml

from lel_tracker.shared.constants import (
    DEFAULT_WAVE_START,
    START_ALIASES,
    START_MARKER,
    SUFFIX_TO_LEG,
    Leg,
)

from .models import Control, EventInfo, StartVariant, split_direction

logger = logging.getLogger(__name__)

_WAVE_RE = re.compile(r"^([A-Z]+)")

# Shorter fragments would match inside unrelated control names
_MIN_FUZZY_LENGTH = 3


class RouteConfigError(ValueError):
    """Route configuration is inconsistent."""
    pass


class RouteTable:
    """Ordered controls of the route plus the lookups built from them.

    Every name a checkpoint may be reported under (exact name, configured
    alias, name without its direction suffix, start aliases) is mapped to
    a control once, here, so lookups don't depend on scan order.
    """

    def __init__(
        self,
        controls: list[Control],
        variants: list[StartVariant] | None = None,
        waves: dict[str, str] | None = None,
        event: EventInfo | None = None,
    ):
        if not controls:
            raise RouteConfigError("Route has no controls")
        for prev, cur in zip(controls, controls[1:]):
            if cur.km <= prev.km:
                raise RouteConfigError(
                    f"Control {cur.name!r} at {cur.km} km does not follow "
                    f"{prev.name!r} at {prev.km} km"
                )

        self.controls: tuple[Control, ...] = tuple(controls)
        self.start: Control = self.controls[0]
        self.variants: tuple[StartVariant, ...] = tuple(variants or ()) or (
            StartVariant(code="default", start_name=self.start.name),
        )
        self.waves: dict[str, str] = dict(waves or {})
        self.event = event

        self._aliases: dict[str, Control] = {}
        self._by_base: dict[str, Control] = {}
        self._by_direction: dict[tuple[str, Leg], Control] = {}
        self._build_aliases()

    def _build_aliases(self) -> None:
        for control in self.controls:
            self._aliases.setdefault(control.name, control)
        for control in self.controls:
            for alias in control.aliases:
                self._aliases.setdefault(alias, control)

            base, suffix = split_direction(control.name)
            # First visit wins for a bare base name
            self._by_base.setdefault(base, control)
            leg = SUFFIX_TO_LEG.get(suffix, control.leg) if suffix else control.leg
            self._by_direction.setdefault((base, leg), control)

        start_names = set(START_ALIASES) | {v.start_name for v in self.variants}
        for name in start_names:
            self._aliases.setdefault(name, self.start)

    # -------------------------------------------------------------------------
    # Name resolution
    # -------------------------------------------------------------------------

    def resolve(self, name: str, variant: StartVariant | None = None) -> Control | None:
        """Map a checkpoint name to its control, with the variant's offset applied.

        Precedence: exact name or alias, then the name without its
        direction suffix, then substring containment either way.
        The start control is always at km 0. Returns None if nothing matches.
        """
        control = self._match(name)
        if control is None:
            return None
        return self._shift(control, variant)

    def _match(self, name: str) -> Control | None:
        name = (name or "").strip()
        if not name:
            return None

        hit = self._aliases.get(name)
        if hit is not None:
            return hit
        if START_MARKER in name:
            return self.start

        base, suffix = split_direction(name)
        if suffix:
            leg = SUFFIX_TO_LEG.get(suffix)
            if leg is not None and (base, leg) in self._by_direction:
                return self._by_direction[(base, leg)]
            hit = self._aliases.get(base) or self._by_base.get(base)
            if hit is not None:
                return hit

        hit = self._by_base.get(name)
        if hit is not None:
            return hit

        if len(base) < _MIN_FUZZY_LENGTH:
            return None
        for control in self.controls:
            if base in control.name or control.base_name in name:
                logger.debug(f"Fuzzy control match: {name!r} -> {control.name!r}")
                return control
        return None

    def _shift(self, control: Control, variant: StartVariant | None) -> Control:
        if control is self.start:
            return dataclasses.replace(control, km=0.0)
        if variant is None or not variant.offset_km:
            return control
        return dataclasses.replace(control, km=control.km + variant.offset_km)

    def is_start_name(self, name: str) -> bool:
        """True for names that mean the start control ("Start", "Writtle", ...)."""
        return self._match(name) is self.start

    def distance_of(self, name: str, variant: StartVariant | None = None) -> float:
        """Cumulative km for a checkpoint name, 0.0 when it can't be resolved."""
        control = self.resolve(name, variant)
        return control.km if control else 0.0

    # -------------------------------------------------------------------------
    # Route queries
    # -------------------------------------------------------------------------

    def controls_for(self, variant: StartVariant | None = None) -> list[Control]:
        return [self._shift(c, variant) for c in self.controls]

    def next_control(
        self, after_km: float, variant: StartVariant | None = None
    ) -> Control | None:
        """First control strictly beyond `after_km` on the rider's route."""
        return next(
            (c for c in self.controls_for(variant) if c.km > after_km), None
        )

    def total_distance(self, variant: StartVariant | None = None) -> float:
        return self._shift(self.controls[-1], variant).km

    # -------------------------------------------------------------------------
    # Rider number lookups
    # -------------------------------------------------------------------------

    def variant_for(self, rider_no: str) -> StartVariant:
        """Start variant assigned to a rider number (first variant is default)."""
        for variant in self.variants:
            if variant.matches(rider_no):
                return variant
        return self.variants[0]

    def wave_code(self, rider_no: str) -> str:
        """"LA15" → "LA"; "" when the number has no letter prefix."""
        m = _WAVE_RE.match(rider_no or "")
        return m.group(1) if m else ""

    def wave_start_time(self, rider_no: str) -> str:
        """Scheduled start for the rider's wave, HH:MM."""
        return self.waves.get(self.wave_code(rider_no), DEFAULT_WAVE_START)


# =============================================================================
# Loading
# =============================================================================

def load_route_table(path: str | Path) -> RouteTable:
    """Load a RouteTable from a route YAML file."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return build_route_table(data)


def build_route_table(data: dict) -> RouteTable:
    """Build a RouteTable from already-parsed route configuration."""
    controls = []
    for raw in data.get("controls", []):
        try:
            leg = Leg(raw.get("leg", Leg.NORTH.value))
        except ValueError as e:
            raise RouteConfigError(f"Unknown leg for {raw.get('name')!r}: {raw.get('leg')!r}") from e
        controls.append(
            Control(
                name=raw["name"],
                km=float(raw["km"]),
                leg=leg,
                is_return=bool(raw.get("is_return", False)),
                aliases=tuple(raw.get("aliases", ())),
            )
        )

    variants = [
        StartVariant(
            code=v["code"],
            start_name=v["start_name"],
            offset_km=float(v.get("offset_km", 0)),
            rider_no_pattern=v.get("rider_no_pattern"),
        )
        for v in data.get("start_variants", [])
    ]

    event = None
    raw_event = data.get("event")
    if raw_event:
        start = raw_event.get("start_date")
        event = EventInfo(
            name=raw_event.get("name", ""),
            year=int(raw_event.get("year", 0)),
            start_date=date.fromisoformat(str(start)) if start else None,
            time_limit_hours=raw_event.get("time_limit_hours"),
        )

    waves = {str(k): str(v) for k, v in (data.get("waves") or {}).items()}
    return RouteTable(controls, variants=variants, waves=waves, event=event)


_route_table: RouteTable | None = None


def get_route_table() -> RouteTable:
    """Route table from the configured route file (loaded once)."""
    global _route_table
    if _route_table is None:
        from lel_tracker.config import settings

        _route_table = load_route_table(settings.route_file)
        logger.info(
            f"Loaded route: {len(_route_table.controls)} controls, "
            f"{len(_route_table.variants)} start variants"
        )
    return _route_table
