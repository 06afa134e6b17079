"""Headless export of the projected map to JSON."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .scene import MapScene
from .util import write_json


def build_export_payload(scene: MapScene, *, source: str) -> dict[str, Any]:
    transform = scene.transform
    return {
        "generated_at_utc": datetime.now(timezone.utc).isoformat(),
        "source": source,
        "viewport": {"width": scene.viewport.width, "height": scene.viewport.height},
        "padding_px": scene.cfg.projection.padding_px,
        "bounds": scene.bounds.to_dict() if not scene.bounds.is_empty else None,
        "transform": transform.to_dict() if transform is not None else None,
        "home": list(scene.camera.home),
        "provinces": [province.to_dict() for province in scene.provinces],
    }


def export_provinces(scene: MapScene, output: Path, *, source: str) -> Path:
    write_json(output, build_export_payload(scene, source=source))
    return output
