# signature/models/pointer.py
"""Toolkit-neutral pointer input for the signature pad."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class StrokePoint:
    """Logical pixel position relative to the canvas element's top-left corner."""
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class TouchPoint:
    client_x: float
    client_y: float


@dataclass(frozen=True, slots=True)
class BoundingBox:
    left: float
    top: float
    width: float
    height: float


@dataclass(slots=True)
class PointerEvent:
    """Mouse or touch event in client (screen/window) coordinates.

    For touch input only the first entry of ``touches`` is used.
    """
    client_x: Optional[float] = None
    client_y: Optional[float] = None
    touches: Tuple[TouchPoint, ...] = ()
    default_prevented: bool = field(default=False, init=False)

    def prevent_default(self) -> None:
        self.default_prevented = True

    def client_position(self) -> Optional[Tuple[float, float]]:
        if self.touches:
            first = self.touches[0]
            return first.client_x, first.client_y
        if self.client_x is None or self.client_y is None:
            return None
        return self.client_x, self.client_y
