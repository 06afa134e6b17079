"""Interactive matplotlib host for the map scene."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable

from .config import AppConfig
from .events import ButtonEvent, InputEvent, MouseButton, PointerMoveEvent, WheelEvent
from .models import ViewportSize
from .scene import MapLoadReport, MapScene, log_load_report

_LOGGER = logging.getLogger("provincemap.viewer")


class _TimerHandle:
    def __init__(self, timer: Any, callback: Callable[[], None], live: set[_TimerHandle]) -> None:
        self._timer = timer
        self._callback = callback
        self._live = live
        self.cancelled = False

    def fire(self) -> None:
        self._live.discard(self)
        if self.cancelled:
            return
        self.cancelled = True
        self._callback()

    def cancel(self) -> None:
        self.cancelled = True
        self._timer.stop()
        self._live.discard(self)


class MatplotlibScheduler:
    """One-shot callbacks on the canvas's GUI timers."""

    def __init__(self, canvas: Any) -> None:
        self.canvas = canvas
        # Timers are kept referenced until they fire or are cancelled.
        self._live: set[_TimerHandle] = set()

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> _TimerHandle:
        timer = self.canvas.new_timer(interval=max(int(round(delay_s * 1000.0)), 1))
        timer.single_shot = True
        handle = _TimerHandle(timer, callback, self._live)
        timer.add_callback(handle.fire)
        self._live.add(handle)
        timer.start()
        return handle


def to_input_event(name: str, event: Any, canvas_height: float) -> InputEvent | None:
    """Translate a matplotlib mouse event into a scene input event.

    Matplotlib reports display pixels with the origin at the bottom left;
    scene screen space has Y growing downward.
    """
    if event.x is None or event.y is None:
        return None
    position = (float(event.x), float(canvas_height) - float(event.y))
    if name in ("button_press_event", "button_release_event"):
        try:
            button = MouseButton(int(event.button))
        except (TypeError, ValueError):
            return None
        return ButtonEvent(button=button, pressed=name == "button_press_event", position=position)
    if name == "motion_notify_event":
        return PointerMoveEvent(position=position)
    if name == "scroll_event":
        steps = int(getattr(event, "step", 0) or 0)
        if steps == 0:
            steps = 1 if event.button == "up" else -1
        return WheelEvent(steps=steps, position=position)
    return None


class MapViewer:
    """Draw provinces with a PolyCollection and feed canvas events to the scene."""

    def __init__(self, cfg: AppConfig) -> None:
        plt = _require_pyplot()
        self.cfg = cfg
        viewer_cfg = cfg.viewer
        self.fig = plt.figure(
            figsize=(viewer_cfg.width_px / viewer_cfg.dpi, viewer_cfg.height_px / viewer_cfg.dpi),
            dpi=viewer_cfg.dpi,
        )
        self.fig.patch.set_facecolor(viewer_cfg.background)
        self.ax = self.fig.add_axes((0.0, 0.0, 1.0, 1.0))
        self.ax.set_axis_off()
        self.ax.set_facecolor(viewer_cfg.background)

        self.scheduler = MatplotlibScheduler(self.fig.canvas)
        self.scene = MapScene(cfg, scheduler=self.scheduler, viewport=self.canvas_viewport())
        self.scene.initialize()
        self._collection: Any | None = None
        self._tick_timer: Any | None = None
        self._last_tick: float | None = None

        canvas = self.fig.canvas
        for name in (
            "button_press_event",
            "button_release_event",
            "motion_notify_event",
            "scroll_event",
        ):
            canvas.mpl_connect(name, self._make_handler(name))
        canvas.mpl_connect("resize_event", self._on_resize)

    def canvas_viewport(self) -> ViewportSize | None:
        width = float(self.fig.bbox.width)
        height = float(self.fig.bbox.height)
        if width <= 0 or height <= 0:
            return None
        return ViewportSize(width, height)

    def load(self, path: Path) -> MapLoadReport:
        report = self.scene.load_file(path)
        log_load_report(report, _LOGGER)
        if report.ok:
            self._rebuild_collection()
        return report

    def _make_handler(self, name: str) -> Callable[[Any], None]:
        def handler(mpl_event: Any) -> None:
            event = to_input_event(name, mpl_event, self.fig.bbox.height)
            if event is not None and self.scene.handle_event(event):
                self.sync()

        return handler

    def _on_resize(self, _mpl_event: Any) -> None:
        viewport = self.canvas_viewport()
        if viewport is None:
            return
        report = self.scene.resize(viewport)
        if report is not None:
            log_load_report(report, _LOGGER)
        self._rebuild_collection()

    def _rebuild_collection(self) -> None:
        collections = _require_collections()
        if self._collection is not None:
            self._collection.remove()
            self._collection = None
        provinces = self.scene.provinces
        if provinces:
            self._collection = collections.PolyCollection(
                [province.screen_polygon for province in provinces],
                facecolors=[province.color for province in provinces],
                edgecolors=self.cfg.viewer.edge_color,
                linewidths=self.cfg.viewer.edge_width,
            )
            self.ax.add_collection(self._collection)
        self.sync()

    def sync(self) -> None:
        """Push province colours and the camera view rectangle to the axes."""
        if self._collection is not None:
            self._collection.set_facecolor([province.color for province in self.scene.provinces])
        left, top, right, bottom = self.scene.camera.view_rect()
        self.ax.set_xlim(left, right)
        # Screen Y grows downward, so the larger value sits at the bottom.
        self.ax.set_ylim(bottom, top)
        self.fig.canvas.draw_idle()

    def tick(self) -> None:
        now = time.monotonic()
        dt = 0.0 if self._last_tick is None else now - self._last_tick
        self._last_tick = now
        self.scene.update(dt)
        self.sync()

    def show(self) -> None:
        plt = _require_pyplot()
        self._tick_timer = self.fig.canvas.new_timer(interval=self.cfg.viewer.tick_interval_ms)
        self._tick_timer.add_callback(self.tick)
        self._tick_timer.start()
        plt.show()


def _require_pyplot() -> Any:
    try:
        import matplotlib.pyplot as plt
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for the interactive viewer") from exc
    return plt


def _require_collections() -> Any:
    try:
        import matplotlib.collections as collections
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for the interactive viewer") from exc
    return collections
