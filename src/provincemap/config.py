"""Typed configuration loader for `config.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

from .events import MouseButton


def _mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Expected mapping for '{field_name}'")
    return cast(Mapping[str, Any], value)


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected non-empty string for '{field_name}'")
    return value.strip()


def _int(value: Any, field_name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"Expected integer for '{field_name}'")
    return value


def _float(value: Any, field_name: str) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(f"Expected float for '{field_name}'")


def _bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"Expected bool for '{field_name}'")
    return value


def _optional_path(value: Any, field_name: str, root_dir: Path) -> Path | None:
    if value is None:
        return None
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


def _path_from_cfg(value: Any, field_name: str, root_dir: Path) -> Path:
    raw = _str(value, field_name)
    p = Path(raw)
    return p if p.is_absolute() else root_dir / p


@dataclass(frozen=True, slots=True)
class PathsConfig:
    geojson: Path | None
    owner_colors: Path | None
    export_dir: Path
    logs_dir: Path

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], root_dir: Path) -> PathsConfig:
        return cls(
            geojson=_optional_path(raw.get("geojson"), "paths.geojson", root_dir),
            owner_colors=_optional_path(raw.get("owner_colors"), "paths.owner_colors", root_dir),
            export_dir=_path_from_cfg(raw.get("export_dir", "build"), "paths.export_dir", root_dir),
            logs_dir=_path_from_cfg(raw.get("logs_dir", "build/logs"), "paths.logs_dir", root_dir),
        )


@dataclass(frozen=True, slots=True)
class ProjectionConfig:
    padding_px: float
    fallback_width_px: float
    fallback_height_px: float

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ProjectionConfig:
        fallback = _mapping(raw.get("fallback_viewport"), "projection.fallback_viewport")
        padding_px = _float(raw.get("padding_px", 50.0), "projection.padding_px")
        width = _float(fallback.get("width", 1152.0), "projection.fallback_viewport.width")
        height = _float(fallback.get("height", 648.0), "projection.fallback_viewport.height")
        if padding_px < 0:
            raise ValueError("projection.padding_px must be >= 0")
        if width <= 0 or height <= 0:
            raise ValueError("projection.fallback_viewport must be positive")
        return cls(padding_px=padding_px, fallback_width_px=width, fallback_height_px=height)


@dataclass(frozen=True, slots=True)
class CameraConfig:
    min_zoom: float
    max_zoom: float
    zoom_factor: float
    pan_speed: float
    pan_button: MouseButton
    smoothing: bool
    smoothing_rate: float

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> CameraConfig:
        min_zoom = _float(raw.get("min_zoom", 0.5), "camera.min_zoom")
        max_zoom = _float(raw.get("max_zoom", 5.0), "camera.max_zoom")
        zoom_factor = _float(raw.get("zoom_factor", 1.1), "camera.zoom_factor")
        smoothing_rate = _float(raw.get("smoothing_rate", 10.0), "camera.smoothing_rate")
        if min_zoom <= 0:
            raise ValueError("camera.min_zoom must be > 0")
        if max_zoom < min_zoom:
            raise ValueError("camera.max_zoom cannot be smaller than camera.min_zoom")
        if not min_zoom <= 1.0 <= max_zoom:
            raise ValueError("camera zoom range must include 1.0")
        if zoom_factor <= 1.0:
            raise ValueError("camera.zoom_factor must be > 1")
        if smoothing_rate <= 0:
            raise ValueError("camera.smoothing_rate must be > 0")

        # Left is the selection button; a left-button pan would select on every drag start.
        pan_choices = {b.name.casefold(): b for b in MouseButton if b is not MouseButton.LEFT}
        button_raw = _str(raw.get("pan_button", "middle"), "camera.pan_button").casefold()
        pan_button = pan_choices.get(button_raw)
        if pan_button is None:
            raise ValueError("camera.pan_button must be one of: " + ", ".join(sorted(pan_choices)))

        return cls(
            min_zoom=min_zoom,
            max_zoom=max_zoom,
            zoom_factor=zoom_factor,
            pan_speed=_float(raw.get("pan_speed", 1.0), "camera.pan_speed"),
            pan_button=pan_button,
            smoothing=_bool(raw.get("smoothing", True), "camera.smoothing"),
            smoothing_rate=smoothing_rate,
        )


@dataclass(frozen=True, slots=True)
class SelectionConfig:
    highlight_duration_ms: int
    highlight_blend: float

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> SelectionConfig:
        duration = _int(raw.get("highlight_duration_ms", 150), "selection.highlight_duration_ms")
        blend = _float(raw.get("highlight_blend", 0.5), "selection.highlight_blend")
        if duration < 0:
            raise ValueError("selection.highlight_duration_ms must be >= 0")
        if not 0.0 <= blend <= 1.0:
            raise ValueError("selection.highlight_blend must be between 0 and 1")
        return cls(highlight_duration_ms=duration, highlight_blend=blend)


@dataclass(frozen=True, slots=True)
class ProvinceDefaultsConfig:
    name: str
    owner: str
    supply: int
    units: int
    color_policy: str
    color_seed: int | None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ProvinceDefaultsConfig:
        supply = _int(raw.get("default_supply", 10), "provinces.default_supply")
        units = _int(raw.get("default_units", 0), "provinces.default_units")
        if supply < 0 or units < 0:
            raise ValueError("provinces.default_supply and provinces.default_units must be >= 0")
        color_policy = _str(raw.get("color_policy", "random"), "provinces.color_policy").casefold()
        allowed = {"random", "owner"}
        if color_policy not in allowed:
            raise ValueError("provinces.color_policy must be one of: " + ", ".join(sorted(allowed)))
        seed_raw = raw.get("color_seed")
        return cls(
            name=_str(raw.get("default_name", "Unnamed Province"), "provinces.default_name"),
            owner=_str(raw.get("default_owner", "Neutral"), "provinces.default_owner"),
            supply=supply,
            units=units,
            color_policy=color_policy,
            color_seed=None if seed_raw is None else _int(seed_raw, "provinces.color_seed"),
        )


@dataclass(frozen=True, slots=True)
class ViewerConfig:
    width_px: int
    height_px: int
    dpi: int
    background: str
    edge_color: str
    edge_width: float
    tick_interval_ms: int

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ViewerConfig:
        tick = _int(raw.get("tick_interval_ms", 16), "viewer.tick_interval_ms")
        if tick <= 0:
            raise ValueError("viewer.tick_interval_ms must be > 0")
        return cls(
            width_px=_int(raw.get("width_px", 1152), "viewer.width_px"),
            height_px=_int(raw.get("height_px", 648), "viewer.height_px"),
            dpi=_int(raw.get("dpi", 96), "viewer.dpi"),
            background=_str(raw.get("background", "#1b2838"), "viewer.background"),
            edge_color=_str(raw.get("edge_color", "#202020"), "viewer.edge_color"),
            edge_width=_float(raw.get("edge_width", 0.6), "viewer.edge_width"),
            tick_interval_ms=tick,
        )


@dataclass(frozen=True, slots=True)
class AppConfig:
    source_path: Path | None
    paths: PathsConfig
    projection: ProjectionConfig
    camera: CameraConfig
    selection: SelectionConfig
    provinces: ProvinceDefaultsConfig
    viewer: ViewerConfig

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], source_path: Path | None) -> AppConfig:
        root_dir = source_path.parent.resolve() if source_path is not None else Path.cwd()
        return cls(
            source_path=source_path.resolve() if source_path is not None else None,
            paths=PathsConfig.from_mapping(_mapping(raw.get("paths"), "paths"), root_dir),
            projection=ProjectionConfig.from_mapping(_mapping(raw.get("projection"), "projection")),
            camera=CameraConfig.from_mapping(_mapping(raw.get("camera"), "camera")),
            selection=SelectionConfig.from_mapping(_mapping(raw.get("selection"), "selection")),
            provinces=ProvinceDefaultsConfig.from_mapping(
                _mapping(raw.get("provinces"), "provinces")
            ),
            viewer=ViewerConfig.from_mapping(_mapping(raw.get("viewer"), "viewer")),
        )

    @classmethod
    def default(cls) -> AppConfig:
        return cls.from_mapping({}, None)


def load_config(path: str | Path) -> AppConfig:
    """Load and validate the YAML config file into typed settings."""
    cfg_path = Path(path).resolve()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValueError("Top-level config must be a YAML mapping")
    return AppConfig.from_mapping(cast(Mapping[str, Any], raw), cfg_path)
