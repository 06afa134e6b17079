from __future__ import annotations

from pathlib import Path

import pytest

from provincemap.colors import RandomColorPolicy
from provincemap.events import ButtonEvent, MouseButton, PointerMoveEvent, WheelEvent
from provincemap.models import ViewportSize
from provincemap.scene import MapScene, format_load_lines

SAMPLE = Path(__file__).resolve().parents[1] / "data" / "sample_provinces.geojson"


def _click(x: float, y: float, button: MouseButton = MouseButton.LEFT) -> ButtonEvent:
    return ButtonEvent(button=button, pressed=True, position=(x, y))


def _by_name(scene: MapScene, name: str):
    return next(p for p in scene.provinces if p.name == name)


def test_load_builds_provinces_and_homes_camera(scene: MapScene, two_squares_doc) -> None:
    report = scene.load_document(two_squares_doc)

    assert report.ok
    assert report.summary["provinces"] == 2
    assert scene.transform is not None
    assert scene.transform.scale == pytest.approx(45.0)
    assert scene.camera.position == pytest.approx((500.0, 300.0))
    west = _by_name(scene, "West")
    assert west.owner == "Rome"
    assert _by_name(scene, "East").owner == "Carthage"
    assert min(x for x, _ in west.screen_polygon) == pytest.approx(50.0)
    assert min(y for _, y in west.screen_polygon) == pytest.approx(75.0)


def test_click_on_province_highlights_and_reverts(scene: MapScene, two_squares_doc, scheduler) -> None:
    scene.load_document(two_squares_doc)
    west = _by_name(scene, "West")
    event = _click(275.0, 300.0)

    assert scene.handle_event(event)
    assert event.consumed
    assert west.color == pytest.approx((0.6, 0.7, 0.8))
    assert _by_name(scene, "East").color == (0.2, 0.4, 0.6)

    scheduler.advance(0.2)
    assert west.color == (0.2, 0.4, 0.6)


def test_click_outside_provinces_does_nothing(scene: MapScene, two_squares_doc) -> None:
    scene.load_document(two_squares_doc)
    event = _click(20.0, 20.0)

    assert not scene.handle_event(event)
    assert not event.consumed


def test_click_during_pan_never_selects(scene: MapScene, two_squares_doc, scheduler) -> None:
    scene.load_document(two_squares_doc)
    scene.handle_event(_click(500.0, 300.0, MouseButton.MIDDLE))
    assert scene.camera.is_panning

    scene.handle_event(_click(275.0, 300.0))
    assert all(p.color == p.base_color for p in scene.provinces)
    assert scheduler.pending == 0


def test_hit_testing_follows_the_camera(scene: MapScene, two_squares_doc) -> None:
    scene.load_document(two_squares_doc)
    assert scene.province_at((140.0, 300.0)).name == "West"

    scene.handle_event(_click(500.0, 300.0, MouseButton.MIDDLE))
    scene.handle_event(PointerMoveEvent(position=(600.0, 300.0)))
    scene.handle_event(ButtonEvent(button=MouseButton.MIDDLE, pressed=False, position=(600.0, 300.0)))

    assert scene.camera.position == pytest.approx((400.0, 300.0))
    assert scene.province_at((140.0, 300.0)) is None
    assert scene.province_at((560.0, 300.0)).name == "West"


def test_overlapping_provinces_resolve_to_topmost(scene: MapScene, square) -> None:
    doc = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"name": "Below"},
             "geometry": {"type": "Polygon", "coordinates": [square(0, 0, 10)]}},
            {"type": "Feature", "properties": {"name": "Above"},
             "geometry": {"type": "Polygon", "coordinates": [square(2, 2, 4)]}},
        ],
    }
    scene.load_document(doc)

    assert scene.province_at(scene.viewport.center).name == "Above"


def test_fatal_document_leaves_existing_map(scene: MapScene, two_squares_doc) -> None:
    scene.load_document(two_squares_doc)
    before = scene.provinces

    for bad in ({"type": "Feature"}, {"type": "FeatureCollection"}, [], None):
        report = scene.load_document(bad)
        assert not report.ok
        assert scene.provinces == before


def test_fatal_document_on_empty_scene_creates_nothing(scene: MapScene) -> None:
    report = scene.load_document({"type": "FeatureCollection", "features": "nope"})

    assert not report.ok
    assert not scene.is_loaded
    assert scene.provinces == ()
    assert any(line.startswith("[ERROR]") for line in format_load_lines(report))


def test_unprojectable_input_warns_and_camera_stays_usable(scene: MapScene) -> None:
    doc = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "geometry": {"type": "Polygon", "coordinates": [[[1, 1], [1, 1], [1, 1]]]}},
            None,
        ],
    }
    report = scene.load_document(doc)

    assert report.ok
    assert any("Cannot project" in msg for msg in report.warnings)
    assert scene.transform is None
    assert scene.provinces == ()
    assert scene.handle_event(WheelEvent(steps=1))
    assert scene.handle_event(_click(10.0, 10.0, MouseButton.MIDDLE))


def test_reload_cancels_pending_highlights(scene: MapScene, two_squares_doc, scheduler) -> None:
    scene.load_document(two_squares_doc)
    old_west = _by_name(scene, "West")
    scene.handle_event(_click(275.0, 300.0))
    generation = scene.generation

    scene.load_document(two_squares_doc)
    assert scene.generation > generation
    assert scheduler.pending == 0
    assert not scene.contains(old_west)
    scheduler.advance(1.0)
    assert all(p.color == p.base_color for p in scene.provinces)


def test_unload_before_expiry_is_safe(scene: MapScene, two_squares_doc, scheduler) -> None:
    scene.load_document(two_squares_doc)
    scene.handle_event(_click(725.0, 300.0))
    scene.unload()

    assert scheduler.advance(1.0) == 0
    assert scene.provinces == ()
    assert scene.province_at((725.0, 300.0)) is None


def test_resize_reprojects_stored_features(scene: MapScene, two_squares_doc) -> None:
    scene.load_document(two_squares_doc)
    report = scene.resize(ViewportSize(500.0, 300.0))

    assert report is not None and report.ok
    assert scene.transform.scale == pytest.approx(min(400.0 / 20.0, 200.0 / 10.0))
    assert scene.camera.position == pytest.approx((250.0, 300.0 / 2))


def test_sample_file_loads_with_warnings(scene: MapScene) -> None:
    report = scene.load_file(SAMPLE)

    assert report.ok
    assert report.summary["features_seen"] == 8
    assert report.summary["features_skipped"] == 2
    assert report.summary["coordinates_skipped"] == 2
    names = sorted(p.name for p in scene.provinces)
    assert names == [
        "Africa Proconsularis",
        "Campania",
        "Latium",
        "Numidia",
        "Sicilia",
        "Sicilia",
        "Unnamed Province",
    ]
    assert _by_name(scene, "Campania").owner == "Rome"
    assert _by_name(scene, "Unnamed Province").owner == "Neutral"


def test_missing_file_is_a_load_error(scene: MapScene, tmp_path: Path) -> None:
    report = scene.load_file(tmp_path / "missing.geojson")

    assert not report.ok
    assert "not found" in report.errors[0]


def test_resize_keeps_provinces_and_colours(app_config, scheduler, square, polygon_feature) -> None:
    scene = MapScene(
        app_config,
        scheduler=scheduler,
        color_policy=RandomColorPolicy(seed=3),
        viewport=ViewportSize(800.0, 600.0),
    )
    scene.initialize()
    scene.load_document(
        {
            "type": "FeatureCollection",
            "features": [
                polygon_feature(square(0, 0, 10), name="A"),
                polygon_feature(square(10, 0, 10), name="B"),
            ],
        }
    )
    before = {p.province_id: (p, p.base_color) for p in scene.provinces}
    first = _by_name(scene, "A")
    # Scale 35: A covers x 50..400, y 125..475.
    assert min(x for x, _ in first.screen_polygon) == pytest.approx(50.0)
    scene.handle_event(_click(225.0, 300.0))
    highlighted = first.color
    assert highlighted != first.base_color

    report = scene.resize(ViewportSize(900.0, 600.0))

    assert report is not None and report.ok
    assert {p.province_id: (p, p.base_color) for p in scene.provinces} == before
    assert all(scene.contains(p) for p, _ in before.values())
    assert first.color == highlighted
    # Scale 40: A now covers x 50..450, y 100..500.
    assert scene.transform.scale == pytest.approx(40.0)
    assert max(x for x, _ in first.screen_polygon) == pytest.approx(450.0)
    assert scene.province_at((430.0, 300.0)) is first

    scheduler.advance(1.0)
    assert first.color == first.base_color


def test_resize_that_cannot_fit_keeps_projection(scene: MapScene, two_squares_doc) -> None:
    scene.load_document(two_squares_doc)
    transform = scene.transform
    polygons = [p.screen_polygon for p in scene.provinces]

    report = scene.resize(ViewportSize(80.0, 600.0))

    assert report is not None
    assert any("Cannot fit" in msg for msg in report.warnings)
    assert scene.transform == transform
    assert [p.screen_polygon for p in scene.provinces] == polygons


def test_overflowing_coordinates_are_not_projected(scene: MapScene, polygon_feature) -> None:
    ring = [[-1e308, -1e308], [1e308, -1e308], [1e308, 1e308], [-1e308, 1e308], [-1e308, -1e308]]
    report = scene.load_document({"type": "FeatureCollection", "features": [polygon_feature(ring)]})

    assert report.ok
    assert any("Cannot project" in msg for msg in report.warnings)
    assert scene.transform is None
    assert scene.provinces == ()
