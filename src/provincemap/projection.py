"""Fit-and-center projection from geographic bounds into a padded viewport."""

from __future__ import annotations

import logging
import math

from .config import ProjectionConfig
from .models import GeoBounds, Point, Transform, ViewportSize

_LOGGER = logging.getLogger("provincemap.projection")


class ProjectionSolver:
    """Derive a uniform-scale `Transform` that fits bounds inside the viewport.

    Latitude is negated during point conversion and the vertical offset is
    anchored on `max_lat`, so north maps to the top of the screen.
    """

    def __init__(self, cfg: ProjectionConfig) -> None:
        self.cfg = cfg

    @property
    def fallback_viewport(self) -> ViewportSize:
        return ViewportSize(self.cfg.fallback_width_px, self.cfg.fallback_height_px)

    def resolve_viewport(self, viewport: ViewportSize | None) -> ViewportSize:
        if viewport is None or viewport.width <= 0 or viewport.height <= 0:
            _LOGGER.debug("Viewport unavailable; using fallback %s", self.fallback_viewport)
            return self.fallback_viewport
        return viewport

    def solve(
        self,
        bounds: GeoBounds,
        viewport: ViewportSize | None = None,
        padding: float | None = None,
    ) -> Transform | None:
        if bounds.is_empty:
            return None
        size = self.resolve_viewport(viewport)
        pad = self.cfg.padding_px if padding is None else padding
        draw_w = size.width - 2.0 * pad
        draw_h = size.height - 2.0 * pad
        if draw_w <= 0 or draw_h <= 0:
            _LOGGER.warning(
                "Padding %.1f leaves no drawing area in %.0fx%.0f viewport.",
                pad,
                size.width,
                size.height,
            )
            return None

        scale = min(draw_w / bounds.width, draw_h / bounds.height)
        projected_w = bounds.width * scale
        projected_h = bounds.height * scale
        transform = Transform(
            scale=scale,
            offset_x=(size.width - projected_w) / 2.0 - bounds.min_lon * scale,
            offset_y=(size.height - projected_h) / 2.0 + bounds.max_lat * scale,
        )
        if not (
            scale > 0.0
            and math.isfinite(scale)
            and math.isfinite(transform.offset_x)
            and math.isfinite(transform.offset_y)
        ):
            _LOGGER.warning("Bounds %s cannot be fitted with a finite transform: %s", bounds, transform)
            return None
        return transform

    def home_position(
        self,
        bounds: GeoBounds,
        transform: Transform | None,
        viewport: ViewportSize | None = None,
    ) -> Point:
        """Camera home: the projected geographic centre of the bounds."""
        if transform is None or bounds.is_empty:
            return self.resolve_viewport(viewport).center
        lon, lat = bounds.center
        return transform.apply(lon, lat)


def projected_rect(bounds: GeoBounds, transform: Transform) -> tuple[float, float, float, float]:
    """Screen rectangle `(left, top, right, bottom)` covered by `bounds`."""
    left, top = transform.apply(bounds.min_lon, bounds.max_lat)
    right, bottom = transform.apply(bounds.max_lon, bounds.min_lat)
    return (left, top, right, bottom)
