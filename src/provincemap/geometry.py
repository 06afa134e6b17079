"""Exterior-ring extraction from loosely validated GeoJSON features."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping, Sequence

from .models import MULTI_POLYGON, POLYGON, FeatureRing, Point

_SUPPORTED_KINDS = (POLYGON, MULTI_POLYGON)


@dataclass(slots=True)
class ExtractionStats:
    features_seen: int = 0
    features_skipped: int = 0
    parts_emitted: int = 0
    parts_skipped: int = 0
    coordinates_skipped: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "features_seen": self.features_seen,
            "features_skipped": self.features_skipped,
            "parts_emitted": self.parts_emitted,
            "parts_skipped": self.parts_skipped,
            "coordinates_skipped": self.coordinates_skipped,
        }


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def parse_coordinate(value: Any) -> Point | None:
    """Return `(lon, lat)` or None when the entry is not a usable position.

    Extra components (altitude, measures) are ignored.
    """
    if not isinstance(value, Sequence) or isinstance(value, (str, bytes)):
        return None
    if len(value) < 2:
        return None
    lon, lat = value[0], value[1]
    if not _is_number(lon) or not _is_number(lat):
        return None
    return (float(lon), float(lat))


def _is_array(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


class GeometryExtractor:
    """Walk features and emit one `FeatureRing` per polygon part.

    Malformed input is skipped at the finest granularity and counted in
    `stats`; nothing here raises on bad geometry. Interior rings are ignored.
    """

    def __init__(self) -> None:
        self.stats = ExtractionStats()

    def iter_rings(self, features: Iterable[Any]) -> Iterator[FeatureRing]:
        self.stats = ExtractionStats()
        for feature_index, feature in enumerate(features):
            self.stats.features_seen += 1
            emitted = False
            for ring in self._iter_feature(feature_index, feature):
                emitted = True
                self.stats.parts_emitted += 1
                yield ring
            if not emitted:
                self.stats.features_skipped += 1

    def _iter_feature(self, feature_index: int, feature: Any) -> Iterator[FeatureRing]:
        if not isinstance(feature, Mapping):
            return
        geometry = feature.get("geometry")
        if not isinstance(geometry, Mapping):
            return
        kind = geometry.get("type")
        if kind not in _SUPPORTED_KINDS:
            return
        coordinates = geometry.get("coordinates")
        if not _is_array(coordinates):
            return

        properties_raw = feature.get("properties")
        properties: Mapping[str, Any] = properties_raw if isinstance(properties_raw, Mapping) else {}

        parts: Sequence[Any] = [coordinates] if kind == POLYGON else coordinates
        for part_index, part in enumerate(parts):
            points = self._exterior_ring(part)
            if points is None:
                self.stats.parts_skipped += 1
                continue
            yield FeatureRing(
                kind=kind,
                points=points,
                properties=properties,
                feature_index=feature_index,
                part_index=part_index,
            )

    def _exterior_ring(self, polygon: Any) -> tuple[Point, ...] | None:
        if not _is_array(polygon) or not polygon:
            return None
        ring = polygon[0]
        if not _is_array(ring):
            return None
        points: list[Point] = []
        for raw in ring:
            point = parse_coordinate(raw)
            if point is None:
                self.stats.coordinates_skipped += 1
                continue
            points.append(point)
        return tuple(points)


def extract_rings(features: Iterable[Any]) -> list[FeatureRing]:
    return list(GeometryExtractor().iter_rings(features))
