# signature/logic/raster_canvas.py
"""
Backing store of the signature pad.

The bitmap is sized ``display × device_pixel_ratio`` and all drawing
coordinates are given in logical pixels and scaled here, so a stroke has the
same visual thickness on every display density.
"""
from __future__ import annotations

from typing import Optional, Tuple

from PIL import Image, ImageDraw

from ..models.pointer import StrokePoint
from ..models.signature_config import SignatureConfig
from .image_codec import encode_data_url

TRANSPARENT = (0, 0, 0, 0)


class RasterCanvas:
    def __init__(self, config: SignatureConfig | None = None) -> None:
        self._config = config or SignatureConfig()
        self._image: Optional[Image.Image] = None
        self._display_size: Tuple[float, float] = (0.0, 0.0)
        self._ratio: float = 1.0

    # ------------------------------------------------------------------ #
    @property
    def is_ready(self) -> bool:
        return self._image is not None

    @property
    def display_size(self) -> Tuple[float, float]:
        return self._display_size

    @property
    def device_pixel_ratio(self) -> float:
        return self._ratio

    @property
    def pixel_size(self) -> Tuple[int, int]:
        return self._image.size if self._image is not None else (0, 0)

    # ------------------------------------------------------------------ #
    def configure(self, display_width: float, display_height: float,
                  device_pixel_ratio: float = 1.0) -> None:
        """Recreate a blank backing store for the given on-screen size."""
        ratio = device_pixel_ratio if device_pixel_ratio and device_pixel_ratio > 0 else 1.0
        width = max(1, int(round(display_width * ratio)))
        height = max(1, int(round(display_height * ratio)))
        self._display_size = (float(display_width), float(display_height))
        self._ratio = float(ratio)
        self._image = Image.new("RGBA", (width, height), TRANSPARENT)

    def draw_segment(self, start: StrokePoint, end: StrokePoint) -> None:
        if self._image is None:
            return
        width = self._config.pixel_stroke_width(self._ratio)
        a = (start.x * self._ratio, start.y * self._ratio)
        b = (end.x * self._ratio, end.y * self._ratio)
        color = self._config.stroke_color
        draw = ImageDraw.Draw(self._image)
        draw.line([a, b], fill=color, width=width, joint="curve")
        # round caps; consecutive caps double as round joins
        r = width / 2.0
        for x, y in (a, b):
            draw.ellipse([x - r, y - r, x + r, y + r], fill=color)

    def clear(self) -> None:
        if self._image is None:
            return
        self._image = Image.new("RGBA", self._image.size, TRANSPARENT)

    def paint(self, image: Image.Image) -> None:
        """Replace the contents with *image*, anchored at origin and scaled to fit."""
        if self._image is None:
            return
        source = image.convert("RGBA")
        if source.size != self._image.size:
            source = source.resize(self._image.size, Image.Resampling.LANCZOS)
        self._image = source

    def snapshot(self) -> Optional[Image.Image]:
        return self._image.copy() if self._image is not None else None

    def encode(self) -> str:
        """Signature Image of the current bitmap ("" before the first configure)."""
        if self._image is None:
            return ""
        return encode_data_url(self._image)
