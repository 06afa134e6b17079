"""GeoJSON document loading with fatal shape checks."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Sequence


class MapLoadError(ValueError):
    """Raised when a map document cannot be loaded at all."""


def validate_feature_collection(document: Any) -> Sequence[Any]:
    """Return the feature list of a FeatureCollection or raise `MapLoadError`.

    Individual features are not checked here; malformed features are
    tolerated later by the geometry extractor.
    """
    if not isinstance(document, Mapping):
        raise MapLoadError("Top-level GeoJSON value must be an object")
    doc_type = document.get("type")
    if doc_type != "FeatureCollection":
        raise MapLoadError(f"Expected type 'FeatureCollection', got {doc_type!r}")
    features = document.get("features")
    if not isinstance(features, list):
        raise MapLoadError("FeatureCollection is missing a 'features' list")
    return features


def load_feature_collection(path: Path) -> Sequence[Any]:
    """Read `path` and return its features."""
    if not path.exists():
        raise MapLoadError(f"GeoJSON file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as fh:
            document = json.load(fh)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MapLoadError(f"Failed reading GeoJSON '{path}': {exc}") from exc
    return validate_feature_collection(document)
