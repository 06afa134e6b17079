"""Province colour assignment and owner colour registry loading."""

from __future__ import annotations

import random
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Protocol

import yaml

from .config import ProvinceDefaultsConfig
from .models import Color

WHITE: Color = (1.0, 1.0, 1.0)

# Keep random fills away from near-black and near-white so outlines and the
# highlight blend stay visible.
_CHANNEL_MIN = 0.2
_CHANNEL_MAX = 0.8


class ColorPolicy(Protocol):
    def color_for(self, *, owner: str, name: str) -> Color: ...


def blend_toward_white(color: Color, ratio: float) -> Color:
    """Linear blend: ratio 0 keeps `color`, ratio 1 yields white."""
    r, g, b = color
    return (
        r + (1.0 - r) * ratio,
        g + (1.0 - g) * ratio,
        b + (1.0 - b) * ratio,
    )


def _random_color(rng: random.Random) -> Color:
    return (
        rng.uniform(_CHANNEL_MIN, _CHANNEL_MAX),
        rng.uniform(_CHANNEL_MIN, _CHANNEL_MAX),
        rng.uniform(_CHANNEL_MIN, _CHANNEL_MAX),
    )


class RandomColorPolicy:
    """Independent random colour per province."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def color_for(self, *, owner: str, name: str) -> Color:
        return _random_color(self._rng)


class OwnerColorPolicy:
    """Colour by owner; unknown owners get a random colour that stays stable per owner."""

    def __init__(self, registry: Mapping[str, Color], seed: int | None = None) -> None:
        self._registry = {owner.casefold(): color for owner, color in registry.items()}
        self._rng = random.Random(seed)

    def color_for(self, *, owner: str, name: str) -> Color:
        key = owner.casefold()
        color = self._registry.get(key)
        if color is None:
            color = _random_color(self._rng)
            self._registry[key] = color
        return color


def load_owner_colors(path: Path) -> dict[str, Color]:
    """Load an optional `owner: colour` YAML mapping (any colour matplotlib accepts)."""
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Expected mapping in {path}")

    to_rgb = _require_to_rgb()
    colors: dict[str, Color] = {}
    for owner_raw, value in raw.items():
        if not isinstance(owner_raw, str) or not owner_raw.strip():
            raise ValueError(f"Owner colour key must be a non-empty string in {path}")
        colors[owner_raw.strip()] = parse_color(value, to_rgb=to_rgb, field_name=owner_raw)
    return colors


def parse_color(value: Any, *, to_rgb: Any = None, field_name: str = "color") -> Color:
    converter = to_rgb or _require_to_rgb()
    if isinstance(value, list):
        value = tuple(value)
    try:
        r, g, b = converter(value)
    except ValueError as exc:
        raise ValueError(f"Invalid colour for '{field_name}': {value!r}") from exc
    return (float(r), float(g), float(b))


def build_color_policy(cfg: ProvinceDefaultsConfig, owner_colors_path: Path | None) -> ColorPolicy:
    if cfg.color_policy == "owner":
        registry = load_owner_colors(owner_colors_path) if owner_colors_path is not None else {}
        return OwnerColorPolicy(registry, seed=cfg.color_seed)
    return RandomColorPolicy(seed=cfg.color_seed)


@lru_cache(maxsize=1)
def _require_to_rgb() -> Any:
    try:
        from matplotlib.colors import to_rgb
    except ImportError as exc:  # pragma: no cover
        raise RuntimeError("matplotlib is required for colour parsing") from exc
    return to_rgb
