"""Host-independent input events delivered to the map scene."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from .models import Point


class MouseButton(IntEnum):
    # Values match matplotlib's MouseButton so host adapters can pass them through.
    LEFT = 1
    MIDDLE = 2
    RIGHT = 3


@dataclass(slots=True)
class InputEvent:
    consumed: bool = field(default=False, kw_only=True)

    def consume(self) -> None:
        self.consumed = True


@dataclass(slots=True)
class ButtonEvent(InputEvent):
    button: MouseButton
    pressed: bool
    position: Point


@dataclass(slots=True)
class PointerMoveEvent(InputEvent):
    position: Point


@dataclass(slots=True)
class WheelEvent(InputEvent):
    """Wheel notch: `steps` > 0 zooms in, < 0 zooms out."""

    steps: int
    position: Point = (0.0, 0.0)
