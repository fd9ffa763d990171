"""Raster canvas and signature image codec."""
from __future__ import annotations

import base64
import unittest

from PIL import Image

from signature.exceptions.errors import SignatureDecodeError
from signature.logic.image_codec import (
    PNG_DATA_URL_PREFIX,
    data_url_to_bytes,
    decode_data_url,
    encode_data_url,
    encode_png,
    is_blank,
)
from signature.logic.raster_canvas import RasterCanvas
from signature.models.pointer import StrokePoint
from signature.models.signature_config import SignatureConfig


class TestRasterCanvas(unittest.TestCase):
    def test_encode_before_configure_is_empty(self) -> None:
        canvas = RasterCanvas()
        self.assertFalse(canvas.is_ready)
        self.assertEqual(canvas.encode(), "")
        canvas.draw_segment(StrokePoint(0, 0), StrokePoint(5, 5))
        self.assertIsNone(canvas.snapshot())

    def test_backing_store_follows_device_pixel_ratio(self) -> None:
        canvas = RasterCanvas()
        canvas.configure(300, 200, 1.5)
        self.assertEqual(canvas.pixel_size, (450, 300))
        self.assertEqual(canvas.display_size, (300.0, 200.0))

    def test_non_positive_ratio_falls_back_to_one(self) -> None:
        canvas = RasterCanvas()
        canvas.configure(50, 40, 0)
        self.assertEqual(canvas.pixel_size, (50, 40))

    def test_segment_is_black_with_round_caps(self) -> None:
        canvas = RasterCanvas()
        canvas.configure(100, 50)
        canvas.draw_segment(StrokePoint(20, 25), StrokePoint(80, 25))
        snap = canvas.snapshot()
        self.assertEqual(snap.getpixel((50, 25)), (0, 0, 0, 255))
        self.assertEqual(snap.getpixel((90, 25))[3], 0)

    def test_clear_erases_to_transparent(self) -> None:
        canvas = RasterCanvas()
        canvas.configure(40, 40)
        canvas.draw_segment(StrokePoint(5, 5), StrokePoint(35, 35))
        canvas.clear()
        self.assertTrue(is_blank(canvas.snapshot()))
        self.assertEqual(canvas.pixel_size, (40, 40))

    def test_paint_scales_to_backing_store(self) -> None:
        canvas = RasterCanvas()
        canvas.configure(80, 60)
        source = Image.new("RGBA", (40, 30), (0, 0, 0, 255))
        canvas.paint(source)
        snap = canvas.snapshot()
        self.assertEqual(snap.size, (80, 60))
        self.assertGreater(snap.getpixel((79, 59))[3], 200)

    def test_stroke_width_rounds_half_up(self) -> None:
        config = SignatureConfig()
        self.assertEqual(config.pixel_stroke_width(1.0), 3)
        self.assertEqual(config.pixel_stroke_width(2.0), 5)
        self.assertEqual(config.pixel_stroke_width(0.1), 1)


class TestImageCodec(unittest.TestCase):
    def test_data_url_round_trip(self) -> None:
        image = Image.new("RGBA", (12, 7), (0, 0, 0, 0))
        image.putpixel((3, 3), (0, 0, 0, 255))
        value = encode_data_url(image)
        self.assertTrue(value.startswith(PNG_DATA_URL_PREFIX))
        decoded = decode_data_url(value)
        self.assertEqual(decoded.size, (12, 7))
        self.assertEqual(decoded.tobytes(), image.tobytes())

    def test_raw_base64_is_accepted(self) -> None:
        image = Image.new("RGBA", (4, 4), (0, 0, 0, 255))
        raw = base64.b64encode(encode_png(image)).decode("ascii")
        self.assertEqual(decode_data_url(raw).size, (4, 4))

    def test_rejects_empty_and_non_base64_values(self) -> None:
        for bad in ("", "data:image/png,plain", "data:image/png;base64,%%%"):
            with self.subTest(value=bad):
                with self.assertRaises(SignatureDecodeError):
                    data_url_to_bytes(bad)

    def test_rejects_non_image_payload(self) -> None:
        value = "data:image/png;base64," + base64.b64encode(b"hello").decode("ascii")
        with self.assertRaises(SignatureDecodeError):
            decode_data_url(value)


if __name__ == "__main__":
    unittest.main()
