# signature/models/signature_config.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class SignatureConfig:
    """
    Stroke style and surface geometry of the signature pad.

    The ink style is intentionally not user-configurable: every signed
    checklist carries the same black, 2.5 px, round-capped stroke.
    """
    stroke_color: Tuple[int, int, int, int] = (0, 0, 0, 255)
    stroke_width: float = 2.5          # logical px
    pad_height: int = 200              # logical px
    border_color: str = "#d1d5db"
    clear_label: str = "Clear Signature"

    def pixel_stroke_width(self, device_pixel_ratio: float) -> int:
        """Stroke width in backing-store pixels (PIL needs an int, round half up)."""
        return max(1, int(self.stroke_width * device_pixel_ratio + 0.5))
