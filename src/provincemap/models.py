"""Domain models shared across the projection and interaction modules."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

Point = tuple[float, float]
Color = tuple[float, float, float]

POLYGON = "Polygon"
MULTI_POLYGON = "MultiPolygon"


@dataclass(frozen=True, slots=True)
class FeatureRing:
    """Exterior ring of one polygon part plus the owning feature's properties."""

    kind: str
    points: tuple[Point, ...]
    properties: Mapping[str, Any]
    feature_index: int
    part_index: int = 0


@dataclass(frozen=True, slots=True)
class GeoBounds:
    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    @classmethod
    def empty(cls) -> GeoBounds:
        return cls(
            min_lon=math.inf,
            min_lat=math.inf,
            max_lon=-math.inf,
            max_lat=-math.inf,
        )

    @property
    def width(self) -> float:
        return self.max_lon - self.min_lon

    @property
    def height(self) -> float:
        return self.max_lat - self.min_lat

    @property
    def is_empty(self) -> bool:
        # NaN-safe: a NaN span is not "> 0".
        return not (self.width > 0.0 and self.height > 0.0)

    @property
    def center(self) -> Point:
        return ((self.min_lon + self.max_lon) / 2.0, (self.min_lat + self.max_lat) / 2.0)

    def include(self, lon: float, lat: float) -> GeoBounds:
        return GeoBounds(
            min_lon=min(self.min_lon, lon),
            min_lat=min(self.min_lat, lat),
            max_lon=max(self.max_lon, lon),
            max_lat=max(self.max_lat, lat),
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "min_lon": self.min_lon,
            "min_lat": self.min_lat,
            "max_lon": self.max_lon,
            "max_lat": self.max_lat,
        }


@dataclass(frozen=True, slots=True)
class ViewportSize:
    width: float
    height: float

    @property
    def center(self) -> Point:
        return (self.width / 2.0, self.height / 2.0)


@dataclass(frozen=True, slots=True)
class Transform:
    """Uniform scale plus offset from lon/lat to screen pixels (Y grows downward)."""

    scale: float
    offset_x: float
    offset_y: float

    def apply(self, lon: float, lat: float) -> Point:
        return (lon * self.scale + self.offset_x, -lat * self.scale + self.offset_y)

    def invert(self, x: float, y: float) -> Point:
        return ((x - self.offset_x) / self.scale, (self.offset_y - y) / self.scale)

    def to_dict(self) -> dict[str, float]:
        return {"scale": self.scale, "offset_x": self.offset_x, "offset_y": self.offset_y}


@dataclass(slots=True)
class Province:
    """Clickable screen-space polygon with merged feature metadata.

    `base_color` is fixed at creation; `color` is what the host displays and
    is the only field interaction code mutates.
    """

    province_id: int
    name: str
    owner: str
    supply: int
    units: int
    screen_polygon: tuple[Point, ...]
    base_color: Color
    color: Color
    extra: Mapping[str, Any] = field(default_factory=dict)
    feature_index: int = 0
    part_index: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.province_id,
            "name": self.name,
            "owner": self.owner,
            "supply": self.supply,
            "units": self.units,
            "color": list(self.base_color),
            "polygon": [list(point) for point in self.screen_polygon],
            "extra": dict(self.extra),
            "source": {"feature": self.feature_index, "part": self.part_index},
        }


@dataclass(slots=True)
class CameraState:
    position: Point
    zoom: float = 1.0
    target_zoom: float = 1.0
    is_panning: bool = False
    last_pointer: Point = (0.0, 0.0)


@dataclass(slots=True)
class HighlightState:
    original_color: Color
    expiry: float
    active: bool = True
