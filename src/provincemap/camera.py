"""Pan and zoom camera driven by input events and per-tick updates."""

from __future__ import annotations

import math

from .config import CameraConfig
from .events import ButtonEvent, InputEvent, PointerMoveEvent, WheelEvent
from .models import CameraState, Point, ViewportSize

_ZOOM_SNAP_EPS = 1e-4


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


class CameraController:
    """Idle/Panning state machine over `CameraState`.

    `position` is the world (projected screen-space) point shown at the
    viewport centre. A zoom above 1 magnifies.
    """

    def __init__(self, cfg: CameraConfig, viewport: ViewportSize, home: Point | None = None) -> None:
        self.cfg = cfg
        self.viewport = viewport
        self.home = home if home is not None else viewport.center
        self.state = CameraState(position=self.home)

    @property
    def is_panning(self) -> bool:
        return self.state.is_panning

    @property
    def position(self) -> Point:
        return self.state.position

    @property
    def zoom(self) -> float:
        return self.state.zoom

    def reset(self, home: Point | None = None) -> None:
        """Return to Idle at the home position with zoom 1."""
        if home is not None:
            self.home = home
        self.state = CameraState(position=self.home)

    def set_viewport(self, viewport: ViewportSize) -> None:
        self.viewport = viewport

    def handle_event(self, event: InputEvent) -> bool:
        if isinstance(event, ButtonEvent):
            handled = self._on_button(event)
        elif isinstance(event, PointerMoveEvent):
            handled = self._on_move(event)
        elif isinstance(event, WheelEvent):
            handled = self._on_wheel(event)
        else:
            handled = False
        if handled:
            event.consume()
        return handled

    def _on_button(self, event: ButtonEvent) -> bool:
        if event.button != self.cfg.pan_button:
            return False
        if event.pressed:
            self.state.is_panning = True
            self.state.last_pointer = event.position
        else:
            self.state.is_panning = False
        return True

    def _on_move(self, event: PointerMoveEvent) -> bool:
        if not self.state.is_panning:
            return False
        px, py = event.position
        lx, ly = self.state.last_pointer
        factor = self.cfg.pan_speed / self.state.zoom
        x, y = self.state.position
        self.state.position = (x - (px - lx) * factor, y - (py - ly) * factor)
        self.state.last_pointer = event.position
        return True

    def _on_wheel(self, event: WheelEvent) -> bool:
        if event.steps == 0:
            return False
        self.zoom_by(event.steps)
        return True

    def zoom_by(self, steps: int) -> float:
        """Multiply (steps > 0) or divide the target zoom by `zoom_factor` per step."""
        target = self.state.target_zoom * (self.cfg.zoom_factor ** steps)
        self.state.target_zoom = _clamp(target, self.cfg.min_zoom, self.cfg.max_zoom)
        if not self.cfg.smoothing:
            self.state.zoom = self.state.target_zoom
        return self.state.target_zoom

    def update(self, dt: float) -> None:
        """Advance zoom toward its target by exponential interpolation."""
        target = self.state.target_zoom
        if not self.cfg.smoothing:
            self.state.zoom = target
            return
        current = self.state.zoom
        if abs(target - current) <= _ZOOM_SNAP_EPS:
            self.state.zoom = target
            return
        alpha = 1.0 - math.exp(-self.cfg.smoothing_rate * max(dt, 0.0))
        zoom = current + (target - current) * alpha
        self.state.zoom = _clamp(zoom, self.cfg.min_zoom, self.cfg.max_zoom)

    def screen_to_world(self, point: Point) -> Point:
        cx, cy = self.viewport.center
        x, y = self.state.position
        zoom = self.state.zoom
        return (x + (point[0] - cx) / zoom, y + (point[1] - cy) / zoom)

    def world_to_screen(self, point: Point) -> Point:
        cx, cy = self.viewport.center
        x, y = self.state.position
        zoom = self.state.zoom
        return ((point[0] - x) * zoom + cx, (point[1] - y) * zoom + cy)

    def view_rect(self) -> tuple[float, float, float, float]:
        """Visible world rectangle `(left, top, right, bottom)`."""
        half_w = self.viewport.width / 2.0 / self.state.zoom
        half_h = self.viewport.height / 2.0 / self.state.zoom
        x, y = self.state.position
        return (x - half_w, y - half_h, x + half_w, y + half_h)
