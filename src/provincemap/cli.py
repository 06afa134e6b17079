"""CLI entrypoint for the province map viewer."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from .config import AppConfig, load_config
from .export import export_provinces
from .models import ViewportSize
from .scene import MapScene, format_load_lines
from .scheduler import TickScheduler
from .util import setup_logging

LOGGER = logging.getLogger("provincemap.cli")

DEFAULT_CONFIG = "config.yaml"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="provincemap",
        description="Project GeoJSON provinces into a viewport and explore them.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", default=DEFAULT_CONFIG, help="Path to YAML config.")
        p.add_argument("--geojson", default=None, help="GeoJSON file; overrides paths.geojson.")
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    validate_p = subparsers.add_parser("validate", help="Load the map and report geometry issues.")
    add_common(validate_p)
    validate_p.add_argument(
        "--strict",
        action="store_true",
        help="Treat geometry warnings as failures.",
    )

    export_p = subparsers.add_parser("export", help="Write projected provinces to JSON.")
    add_common(export_p)
    export_p.add_argument("--output", default=None, help="Output JSON path.")
    export_p.add_argument("--width", type=float, default=None, help="Viewport width in pixels.")
    export_p.add_argument("--height", type=float, default=None, help="Viewport height in pixels.")

    view_p = subparsers.add_parser("view", help="Open the interactive map viewer.")
    add_common(view_p)

    return parser


def _load_and_setup(args: argparse.Namespace) -> AppConfig:
    # Only the implicit default may be absent; an explicit --config must exist.
    use_defaults = args.config == DEFAULT_CONFIG and not Path(args.config).exists()
    cfg = AppConfig.default() if use_defaults else load_config(args.config)
    setup_logging(cfg.paths.logs_dir / "provincemap.log", verbose=args.verbose)
    if use_defaults:
        LOGGER.info("No %s in %s; using built-in defaults.", DEFAULT_CONFIG, Path.cwd())
    return cfg


def _resolve_geojson(cfg: AppConfig, args: argparse.Namespace) -> Path | None:
    if args.geojson:
        return Path(args.geojson)
    return cfg.paths.geojson


def _load_scene(cfg: AppConfig, geojson: Path, viewport: ViewportSize | None) -> tuple[MapScene, bool]:
    scene = MapScene(cfg, scheduler=TickScheduler(), viewport=viewport)
    scene.initialize()
    report = scene.load_file(geojson)
    for line in format_load_lines(report):
        LOGGER.info(line)
    return scene, report.ok and not report.warnings


def _run_validate(cfg: AppConfig, geojson: Path, *, strict: bool) -> int:
    scene, clean = _load_scene(cfg, geojson, None)
    if not scene.is_loaded:
        return 1
    if strict and not clean:
        LOGGER.error("Validation failed: geometry warnings present and --strict was given.")
        return 1
    return 0


def _run_export(
    cfg: AppConfig,
    geojson: Path,
    *,
    output: Path | None,
    width: float | None,
    height: float | None,
) -> int:
    viewport = ViewportSize(width, height) if width and height else None
    scene, _ = _load_scene(cfg, geojson, viewport)
    if not scene.is_loaded:
        LOGGER.error("Export aborted: map could not be loaded.")
        return 1
    out_path = output or cfg.paths.export_dir / "provinces.json"
    export_provinces(scene, out_path, source=str(geojson))
    LOGGER.info("Exported %d provinces to %s", len(scene.provinces), out_path)
    return 0


def _run_view(cfg: AppConfig, geojson: Path) -> int:
    from .viewer import MapViewer

    viewer = MapViewer(cfg)
    report = viewer.load(geojson)
    if not report.ok:
        return 1
    viewer.show()
    return 0


def _dispatch(args: argparse.Namespace) -> int:
    cfg = _load_and_setup(args)
    command = str(args.command)
    geojson = _resolve_geojson(cfg, args)
    if geojson is None:
        LOGGER.error("No GeoJSON input: pass --geojson or set paths.geojson in the config.")
        return 2
    if command == "validate":
        return _run_validate(cfg, geojson, strict=bool(args.strict))
    if command == "export":
        return _run_export(
            cfg,
            geojson,
            output=Path(args.output) if args.output else None,
            width=args.width,
            height=args.height,
        )
    if command == "view":
        return _run_view(cfg, geojson)
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return _dispatch(args)


if __name__ == "__main__":
    raise SystemExit(main())
