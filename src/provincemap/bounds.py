"""Geographic bounding box over extracted rings."""

from __future__ import annotations

from typing import Iterable

from .models import FeatureRing, GeoBounds


def compute_bounds(rings: Iterable[FeatureRing]) -> GeoBounds:
    """Fold every ring point into one lon/lat rectangle.

    Starts from `GeoBounds.empty()` (infinite sentinels), so no points means
    a non-positive span; callers check `is_empty` before projecting.
    """
    bounds = GeoBounds.empty()
    for ring in rings:
        for lon, lat in ring.points:
            bounds = bounds.include(lon, lat)
    return bounds
