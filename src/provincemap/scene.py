"""Map scene: load pipeline, province registry, hit testing and input dispatch."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

from .bounds import compute_bounds
from .camera import CameraController
from .colors import ColorPolicy, build_color_policy
from .config import AppConfig
from .events import ButtonEvent, InputEvent, MouseButton
from .geometry import GeometryExtractor
from .io_geojson import MapLoadError, load_feature_collection, validate_feature_collection
from .models import FeatureRing, GeoBounds, Point, Province, Transform, ViewportSize
from .projection import ProjectionSolver
from .provinces import ProvinceBuilder, project_ring
from .scheduler import Scheduler
from .selection import SelectionController

_LOGGER = logging.getLogger("provincemap.scene")


@dataclass(slots=True)
class MapLoadReport:
    source: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


def format_load_lines(report: MapLoadReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    if report.ok:
        lines.append(f"[OK] Map load of {report.source} completed with no errors.")
    return lines


def log_load_report(report: MapLoadReport, logger: logging.Logger) -> None:
    for msg in report.infos:
        logger.info(msg)
    for msg in report.warnings:
        logger.warning(msg)
    for msg in report.errors:
        logger.error(msg)


class HitIndex:
    """Point-in-polygon lookup over province polygons (shapely STRtree)."""

    def __init__(self, provinces: Sequence[Province]) -> None:
        geometry = _require_shapely()
        self._provinces = tuple(provinces)
        polygons = [_hit_shape(geometry, province.screen_polygon) for province in self._provinces]
        self._tree = geometry.STRtree(polygons) if polygons else None

    def __len__(self) -> int:
        return len(self._provinces)

    def query(self, point: Point) -> Province | None:
        """Topmost (last drawn) province containing `point`, if any."""
        if self._tree is None:
            return None
        geometry = _require_shapely()
        hits = self._tree.query(geometry.Point(point), predicate="intersects")
        if len(hits) == 0:
            return None
        return self._provinces[int(max(hits))]


class MapScene:
    """Owns provinces, the current projection, the camera and selection state.

    The host calls `initialize`, then `update(dt)` every tick and
    `handle_event` for each input event, strictly in delivery order.
    """

    def __init__(
        self,
        cfg: AppConfig,
        *,
        scheduler: Scheduler,
        color_policy: ColorPolicy | None = None,
        viewport: ViewportSize | None = None,
    ) -> None:
        self.cfg = cfg
        self.solver = ProjectionSolver(cfg.projection)
        self.viewport = self.solver.resolve_viewport(viewport)
        self.color_policy = color_policy or build_color_policy(cfg.provinces, cfg.paths.owner_colors)
        self.camera = CameraController(cfg.camera, self.viewport)
        self.selection = SelectionController(cfg.selection, scheduler, self.contains)
        self.bounds = GeoBounds.empty()
        self.transform: Transform | None = None
        self.generation = 0
        self._features: Sequence[Any] | None = None
        self._rings: dict[int, FeatureRing] = {}
        self._provinces: dict[int, Province] = {}
        self._hit_index: HitIndex | None = None

    @property
    def provinces(self) -> tuple[Province, ...]:
        return tuple(self._provinces.values())

    @property
    def is_loaded(self) -> bool:
        return self._features is not None

    def contains(self, province: Province) -> bool:
        return self._provinces.get(province.province_id) is province

    def initialize(self, viewport: ViewportSize | None = None) -> None:
        if viewport is not None:
            self.viewport = self.solver.resolve_viewport(viewport)
        self.camera.set_viewport(self.viewport)
        self.camera.reset(self.solver.home_position(self.bounds, self.transform, self.viewport))

    def update(self, dt: float) -> None:
        self.camera.update(dt)

    def handle_event(self, event: InputEvent) -> bool:
        handled = False
        # Selection sees the camera state from before this press is applied.
        if isinstance(event, ButtonEvent) and event.pressed:
            handled = self._handle_click(event)
        if self.camera.handle_event(event):
            handled = True
        if handled:
            event.consume()
        return handled

    def _handle_click(self, event: ButtonEvent) -> bool:
        province = self.province_at(event.position)
        if province is None:
            return False
        return self.selection.on_click(
            province,
            event.button == MouseButton.LEFT,
            self.camera.is_panning,
        )

    def province_at(self, screen_point: Point) -> Province | None:
        if self._hit_index is None:
            return None
        return self._hit_index.query(self.camera.screen_to_world(screen_point))

    def unload(self) -> None:
        """Destroy every province and cancel pending highlight reverts."""
        self.selection.cancel_all()
        self._provinces = {}
        self._rings = {}
        self._hit_index = None
        self._features = None
        self.bounds = GeoBounds.empty()
        self.transform = None
        self.generation += 1

    def load_file(self, path: Path) -> MapLoadReport:
        report = MapLoadReport(source=str(path))
        try:
            features = load_feature_collection(path)
        except MapLoadError as exc:
            report.add_error(str(exc))
            return report
        return self._load_features(features, report)

    def load_document(self, document: Any, *, source: str = "<document>") -> MapLoadReport:
        report = MapLoadReport(source=source)
        try:
            features = validate_feature_collection(document)
        except MapLoadError as exc:
            report.add_error(str(exc))
            return report
        return self._load_features(features, report)

    def resize(self, viewport: ViewportSize) -> MapLoadReport | None:
        """Adopt a new viewport and re-project the loaded provinces in place.

        Provinces keep their identity, metadata and colours (including an
        active highlight); only `screen_polygon` and the hit index change.
        """
        self.viewport = self.solver.resolve_viewport(viewport)
        self.camera.set_viewport(self.viewport)
        if self._features is None:
            self.camera.reset(self.viewport.center)
            return None

        report = MapLoadReport(source="<resize>")
        transform = self.solver.solve(self.bounds, self.viewport)
        if transform is None:
            report.add_warning(
                f"Cannot fit map into {self.viewport.width:.0f}x{self.viewport.height:.0f} "
                "viewport. Keeping previous projection."
            )
            return report

        for province in self._provinces.values():
            province.screen_polygon = project_ring(self._rings[province.province_id].points, transform)
        self.transform = transform
        self._hit_index = HitIndex(self.provinces)
        self.camera.reset(self.solver.home_position(self.bounds, transform, self.viewport))

        report.summary["provinces"] = len(self._provinces)
        report.add_info(f"Re-projected {len(self._provinces)} provinces (scale={transform.scale:.4f}).")
        return report

    def _load_features(self, features: Sequence[Any], report: MapLoadReport) -> MapLoadReport:
        extractor = GeometryExtractor()
        rings = list(extractor.iter_rings(features))
        stats = extractor.stats
        report.summary.update(stats.to_dict())
        if stats.features_skipped:
            report.add_warning(
                f"Skipped {stats.features_skipped} of {stats.features_seen} features "
                "without usable Polygon/MultiPolygon geometry."
            )
        if stats.parts_skipped:
            report.add_warning(f"Skipped {stats.parts_skipped} malformed polygon parts.")
        if stats.coordinates_skipped:
            report.add_warning(f"Skipped {stats.coordinates_skipped} invalid coordinates.")

        bounds = compute_bounds(rings)
        transform = self.solver.solve(bounds, self.viewport)
        if transform is None:
            report.add_warning(
                "Cannot project map: bounds have no finite positive extent "
                f"(width={bounds.width}, height={bounds.height}). Keeping previous map."
            )
            return report

        builder = ProvinceBuilder(self.cfg.provinces, self.color_policy)
        built = [(ring, builder.build(ring, transform)) for ring in rings]
        provinces = [province for _, province in built if province is not None]
        if builder.stats.degenerate:
            report.add_warning(
                f"Dropped {builder.stats.degenerate} rings with fewer than 3 valid points."
            )
        if builder.stats.bad_counts:
            report.add_warning(
                f"Ignored {builder.stats.bad_counts} invalid supply/units values; defaults kept."
            )

        self.unload()
        self._features = features
        self.bounds = bounds
        self.transform = transform
        self._provinces = {province.province_id: province for province in provinces}
        self._rings = {province.province_id: ring for ring, province in built if province is not None}
        self._hit_index = HitIndex(provinces)
        self.camera.reset(self.solver.home_position(bounds, transform, self.viewport))

        report.summary["provinces"] = len(provinces)
        report.add_info(
            f"Loaded {len(provinces)} provinces from {stats.features_seen} features "
            f"(scale={transform.scale:.4f})."
        )
        _LOGGER.debug("Load generation %d: bounds=%s transform=%s", self.generation, bounds, transform)
        return report


def _hit_shape(geometry: Any, points: Sequence[Point]) -> Any:
    try:
        polygon = geometry.Polygon(points)
    except (ValueError, geometry.errors.GEOSException):
        # Closed rings with only two distinct points have no area to click.
        return geometry.Polygon()
    if not polygon.is_valid:
        polygon = geometry.make_valid(polygon)
    return polygon


@lru_cache(maxsize=1)
def _require_shapely() -> Any:
    try:
        import shapely
        import shapely.errors
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("shapely is required for province hit testing") from exc
    return shapely
