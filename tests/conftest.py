from __future__ import annotations

from typing import Any, Callable

import pytest

from provincemap.config import AppConfig
from provincemap.models import ViewportSize
from provincemap.scene import MapScene
from provincemap.scheduler import TickScheduler


class FixedColorPolicy:
    def __init__(self, color: tuple[float, float, float] = (0.2, 0.4, 0.6)) -> None:
        self.color = color
        self.calls: list[tuple[str, str]] = []

    def color_for(self, *, owner: str, name: str) -> tuple[float, float, float]:
        self.calls.append((owner, name))
        return self.color


def _square(lon0: float, lat0: float, size: float) -> list[list[float]]:
    return [
        [lon0, lat0],
        [lon0 + size, lat0],
        [lon0 + size, lat0 + size],
        [lon0, lat0 + size],
        [lon0, lat0],
    ]


@pytest.fixture
def square() -> Callable[[float, float, float], list[list[float]]]:
    return _square


@pytest.fixture
def polygon_feature() -> Callable[..., dict[str, Any]]:
    def factory(*rings: Any, **properties: Any) -> dict[str, Any]:
        return {
            "type": "Feature",
            "properties": properties,
            "geometry": {"type": "Polygon", "coordinates": list(rings)},
        }

    return factory


@pytest.fixture
def two_squares_doc() -> dict[str, Any]:
    """Two 10x10 degree squares side by side: bounds lon 0..20, lat 0..10."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"name": "West", "owner": "Rome"},
                "geometry": {"type": "Polygon", "coordinates": [_square(0.0, 0.0, 10.0)]},
            },
            {
                "type": "Feature",
                "properties": {"name": "East", "country": "Carthage"},
                "geometry": {"type": "Polygon", "coordinates": [_square(10.0, 0.0, 10.0)]},
            },
        ],
    }


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig.default()


@pytest.fixture
def scheduler() -> TickScheduler:
    return TickScheduler()


@pytest.fixture
def color_policy() -> FixedColorPolicy:
    return FixedColorPolicy()


@pytest.fixture
def scene(app_config: AppConfig, scheduler: TickScheduler, color_policy: FixedColorPolicy) -> MapScene:
    map_scene = MapScene(
        app_config,
        scheduler=scheduler,
        color_policy=color_policy,
        viewport=ViewportSize(1000.0, 600.0),
    )
    map_scene.initialize()
    return map_scene
