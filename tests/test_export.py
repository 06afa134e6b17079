from __future__ import annotations

import json
from pathlib import Path

import pytest

from provincemap.export import build_export_payload, export_provinces


def test_payload_before_load_has_no_transform(scene) -> None:
    payload = build_export_payload(scene, source="none")

    assert payload["bounds"] is None
    assert payload["transform"] is None
    assert payload["provinces"] == []
    assert payload["home"] == [500.0, 300.0]


def test_export_writes_provinces(scene, two_squares_doc, tmp_path: Path) -> None:
    scene.load_document(two_squares_doc, source="squares")
    output = export_provinces(scene, tmp_path / "nested" / "map.json", source="squares")

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["source"] == "squares"
    assert payload["bounds"] == {"min_lon": 0.0, "min_lat": 0.0, "max_lon": 20.0, "max_lat": 10.0}
    assert payload["transform"]["scale"] == pytest.approx(45.0)

    west = next(p for p in payload["provinces"] if p["name"] == "West")
    assert west["owner"] == "Rome"
    assert west["supply"] == 10
    assert west["color"] == pytest.approx([0.2, 0.4, 0.6])
    assert west["polygon"][0] == pytest.approx([50.0, 525.0])
    assert west["source"] == {"feature": 0, "part": 0}
