from __future__ import annotations

import math

from provincemap.bounds import compute_bounds
from provincemap.geometry import extract_rings
from provincemap.models import GeoBounds


def test_bounds_cover_exterior_rings_only(polygon_feature, square) -> None:
    far_hole = [[-170.0, -80.0], [170.0, -80.0], [170.0, 80.0], [-170.0, -80.0]]
    features = [
        polygon_feature(square(-10, -5, 4), far_hole),
        {
            "type": "Feature",
            "geometry": {
                "type": "MultiPolygon",
                "coordinates": [[square(2, 1, 8)], [[[None, 3], [6, 4], [999]]]],
            },
        },
        {"type": "Feature", "geometry": {"type": "Point", "coordinates": [100.0, 60.0]}},
    ]
    bounds = compute_bounds(extract_rings(features))

    assert bounds == GeoBounds(min_lon=-10.0, min_lat=-5.0, max_lon=10.0, max_lat=9.0)
    assert bounds.width == 20.0
    assert bounds.height == 14.0
    assert not bounds.is_empty


def test_no_valid_coordinates_yields_empty_bounds(polygon_feature) -> None:
    bounds = compute_bounds(extract_rings([polygon_feature([None, [1], ["x", "y"]]), None]))

    assert bounds.is_empty
    assert bounds.min_lon == math.inf
    assert bounds.max_lat == -math.inf
    assert bounds.width <= 0


def test_single_point_has_no_extent(polygon_feature) -> None:
    bounds = compute_bounds(extract_rings([polygon_feature([[3, 4], [3, 4], [3, 4]])]))

    assert bounds.width == 0.0
    assert bounds.height == 0.0
    assert bounds.is_empty


def test_include_and_center() -> None:
    bounds = GeoBounds.empty().include(1.0, 2.0).include(-3.0, 6.0)

    assert bounds == GeoBounds(min_lon=-3.0, min_lat=2.0, max_lon=1.0, max_lat=6.0)
    assert bounds.center == (-1.0, 4.0)
