"""Province construction from projected exterior rings."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from .colors import ColorPolicy
from .config import ProvinceDefaultsConfig
from .models import FeatureRing, Point, Province, Transform

_LOGGER = logging.getLogger("provincemap.provinces")

MIN_RING_POINTS = 3

_NAMED_KEYS = frozenset({"name", "owner", "supply", "units"})


@dataclass(frozen=True, slots=True)
class ProvinceMetadata:
    name: str
    owner: str
    supply: int
    units: int
    extra: Mapping[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class BuildStats:
    built: int = 0
    degenerate: int = 0
    bad_counts: int = 0


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _count(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float) and value.is_integer() and value >= 0:
        return int(value)
    return None


def project_ring(points: tuple[Point, ...], transform: Transform) -> tuple[Point, ...]:
    return tuple(transform.apply(lon, lat) for lon, lat in points)


class ProvinceBuilder:
    """Turn rings into `Province` records with defaults overlaid by feature properties."""

    def __init__(self, defaults: ProvinceDefaultsConfig, color_policy: ColorPolicy) -> None:
        self.defaults = defaults
        self.color_policy = color_policy
        self.stats = BuildStats()
        self._ids = itertools.count(1)

    def merge_metadata(self, properties: Mapping[str, Any]) -> ProvinceMetadata:
        """Overlay feature properties onto the default record.

        Owner precedence: `owner`, then `country`, then `name`, then the
        default owner. Unrecognised keys are kept in `extra`.
        """
        name = _text(properties.get("name")) or self.defaults.name
        owner = (
            _text(properties.get("owner"))
            or _text(properties.get("country"))
            or _text(properties.get("name"))
            or self.defaults.owner
        )

        supply = self.defaults.supply
        if "supply" in properties:
            parsed = _count(properties["supply"])
            if parsed is None:
                self.stats.bad_counts += 1
                _LOGGER.debug("Ignoring invalid supply %r for %s", properties["supply"], name)
            else:
                supply = parsed

        units = self.defaults.units
        if "units" in properties:
            parsed = _count(properties["units"])
            if parsed is None:
                self.stats.bad_counts += 1
                _LOGGER.debug("Ignoring invalid units %r for %s", properties["units"], name)
            else:
                units = parsed

        extra = {str(key): value for key, value in properties.items() if key not in _NAMED_KEYS}
        return ProvinceMetadata(name=name, owner=owner, supply=supply, units=units, extra=extra)

    def build(self, ring: FeatureRing, transform: Transform) -> Province | None:
        polygon = project_ring(ring.points, transform)
        if len(polygon) < MIN_RING_POINTS:
            self.stats.degenerate += 1
            return None

        meta = self.merge_metadata(ring.properties)
        color = self.color_policy.color_for(owner=meta.owner, name=meta.name)
        self.stats.built += 1
        return Province(
            province_id=next(self._ids),
            name=meta.name,
            owner=meta.owner,
            supply=meta.supply,
            units=meta.units,
            screen_polygon=polygon,
            base_color=color,
            color=color,
            extra=meta.extra,
            feature_index=ring.feature_index,
            part_index=ring.part_index,
        )
