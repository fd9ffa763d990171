"""
signature/tests/test_signature_pad.py

Behaviour of the headless signature pad: stroke lifecycle, capture/restore
round trips, restore suppression and resize reconciliation.
"""

from __future__ import annotations

import unittest
from dataclasses import dataclass

from PIL import ImageChops

from signature.logic.image_codec import PNG_DATA_URL_PREFIX, decode_data_url, is_blank
from signature.logic.signature_pad import SignaturePad
from signature.models.pointer import BoundingBox, PointerEvent, TouchPoint
from signature.models.signature_enums import PadState


@dataclass
class FakeElement:
    left: float = 100.0
    top: float = 50.0
    width: float = 120.0
    height: float = 80.0
    ratio: float = 1.0

    def bounding_box(self) -> BoundingBox:
        return BoundingBox(self.left, self.top, self.width, self.height)

    def device_pixel_ratio(self) -> float:
        return self.ratio


class DeferredScheduler:
    """Collects decode callbacks so a test decides when they complete."""

    def __init__(self) -> None:
        self.pending: list = []

    def __call__(self, callback) -> None:
        self.pending.append(callback)

    def run_all(self) -> None:
        while self.pending:
            self.pending.pop(0)()


def event_at(element: FakeElement, x: float, y: float) -> PointerEvent:
    return PointerEvent(client_x=element.left + x, client_y=element.top + y)


def stroke(pad: SignaturePad, element: FakeElement, points) -> None:
    first, *rest = points
    pad.begin(event_at(element, *first))
    for p in rest:
        pad.move(event_at(element, *p))
    pad.end()


L_SHAPE = [(10, 10), (50, 10), (50, 50)]


class TestSignaturePad(unittest.TestCase):
    def setUp(self) -> None:
        self.changes: list[str] = []
        self.clears = 0
        self.element = FakeElement()
        self.pad = self._make_pad()
        self.pad.mount(self.element)

    def _make_pad(self, value: str = "", scheduler=None) -> SignaturePad:
        def _clear() -> None:
            self.clears += 1

        return SignaturePad(
            on_change=self.changes.append,
            on_clear=_clear,
            value=value,
            scheduler=scheduler,
        )

    # ------------------------------------------------------------------ #
    def test_operations_without_mount_are_noops(self) -> None:
        pad = self._make_pad()
        self.assertFalse(pad.begin(event_at(self.element, 5, 5)))
        pad.move(event_at(self.element, 10, 10))
        pad.end()
        pad.on_resize()
        pad.set_value("data:image/png;base64,AAAA")
        self.assertEqual(self.changes, [])
        self.assertEqual(pad.capture(), "")
        self.assertIs(pad.state, PadState.IDLE)

    def test_end_without_begin_does_not_notify(self) -> None:
        self.pad.end()
        self.assertEqual(self.changes, [])

    def test_begin_and_move_prevent_default(self) -> None:
        down = event_at(self.element, 1, 1)
        move = event_at(self.element, 20, 20)
        self.pad.begin(down)
        self.pad.move(move)
        self.assertTrue(down.default_prevented)
        self.assertTrue(move.default_prevented)

    def test_touch_uses_first_touch_point(self) -> None:
        ev = PointerEvent(touches=(TouchPoint(self.element.left + 30, self.element.top + 40),
                                   TouchPoint(0, 0)))
        self.pad.begin(ev)
        self.pad.move(PointerEvent(touches=(TouchPoint(self.element.left + 60, self.element.top + 40),)))
        self.pad.end()
        image = decode_data_url(self.changes[-1])
        self.assertGreater(image.getpixel((45, 40))[3], 0)
        self.assertEqual(image.getpixel((45, 10))[3], 0)

    def test_l_shape_restores_on_fresh_mount(self) -> None:
        stroke(self.pad, self.element, L_SHAPE)
        self.assertEqual(len(self.changes), 1)
        value = self.changes[0]
        self.assertTrue(value.startswith(PNG_DATA_URL_PREFIX))

        fresh = self._make_pad(value=value)
        fresh.mount(FakeElement())
        self.assertEqual(fresh.capture(), value)

    def test_round_trip_after_clear_is_pixel_identical(self) -> None:
        stroke(self.pad, self.element, L_SHAPE)
        first = self.changes[-1]
        self.pad.clear()
        self.pad.set_value(first)
        self.assertEqual(self.pad.capture(), first)

    def test_dot_capture_is_valid_and_byte_stable(self) -> None:
        self.pad.begin(event_at(self.element, 30, 30))
        self.pad.end()
        blank = self.changes[-1]
        self.assertTrue(is_blank(decode_data_url(blank)))

        value = blank
        for _ in range(2):
            pad = self._make_pad(value=value)
            pad.mount(FakeElement())
            again = pad.capture()
            self.assertEqual(again, value)
            value = again

    def test_echo_of_captured_value_is_swallowed(self) -> None:
        scheduler = DeferredScheduler()
        pad = self._make_pad(scheduler=scheduler)
        pad.mount(self.element)
        stroke(pad, self.element, L_SHAPE)
        self.assertIs(pad.state, PadState.SUPPRESS_NEXT_RESTORE)
        pad.set_value(self.changes[-1])
        self.assertIs(pad.state, PadState.IDLE)
        self.assertEqual(scheduler.pending, [])

    def test_external_value_does_not_clobber_stroke(self) -> None:
        stroke(self.pad, self.element, [(5, 70), (100, 70)])
        other = self.changes[-1]
        self.pad.clear()

        self.pad.begin(event_at(self.element, 10, 10))
        self.pad.move(event_at(self.element, 60, 10))
        before = self.pad.canvas.snapshot().tobytes()
        self.pad.set_value(other)
        self.assertEqual(self.pad.canvas.snapshot().tobytes(), before)

    def test_restore_rechecks_drawing_when_decode_completes(self) -> None:
        stroke(self.pad, self.element, L_SHAPE)
        value = self.changes[-1]

        scheduler = DeferredScheduler()
        pad = self._make_pad(scheduler=scheduler)
        pad.mount(self.element)
        pad.set_value(value)
        pad.begin(event_at(self.element, 100, 70))
        scheduler.run_all()
        self.assertTrue(is_blank(pad.canvas.snapshot()))

    def test_restore_completing_after_new_capture_is_discarded(self) -> None:
        stroke(self.pad, self.element, L_SHAPE)
        stale = self.changes[-1]

        scheduler = DeferredScheduler()
        pad = self._make_pad(scheduler=scheduler)
        pad.mount(self.element)
        pad.set_value(stale)
        stroke(pad, self.element, [(5, 70), (100, 70)])
        fresh = self.changes[-1]
        scheduler.run_all()
        self.assertEqual(pad.capture(), fresh)

    def test_restore_completing_after_clear_is_discarded(self) -> None:
        stroke(self.pad, self.element, L_SHAPE)
        stale = self.changes[-1]

        scheduler = DeferredScheduler()
        pad = self._make_pad(scheduler=scheduler)
        pad.mount(self.element)
        pad.set_value(stale)
        pad.clear()
        scheduler.run_all()
        self.assertTrue(is_blank(pad.canvas.snapshot()))

    def test_undecodable_value_leaves_canvas_blank(self) -> None:
        self.pad.set_value("data:image/png;base64,bm90IGFuIGltYWdl")
        self.pad.set_value("data:image/png;base64,@@@")
        self.assertTrue(is_blank(self.pad.canvas.snapshot()))
        self.assertEqual(self.changes, [])

    def test_empty_value_never_decodes(self) -> None:
        scheduler = DeferredScheduler()
        pad = self._make_pad(scheduler=scheduler)
        pad.mount(self.element)
        pad.set_value("")
        self.assertEqual(scheduler.pending, [])

    def test_clear_contract(self) -> None:
        stroke(self.pad, self.element, L_SHAPE)
        self.changes.clear()
        self.pad.clear()
        self.assertEqual(self.clears, 1)
        self.assertEqual(self.changes, [])
        self.assertTrue(is_blank(decode_data_url(self.pad.capture())))

    def test_clear_is_reported_even_when_unmounted(self) -> None:
        pad = self._make_pad()
        pad.clear()
        self.assertEqual(self.clears, 1)

    def test_second_stroke_is_superset_of_first(self) -> None:
        stroke(self.pad, self.element, L_SHAPE)
        stroke(self.pad, self.element, [(80, 20), (110, 60)])
        self.assertEqual(len(self.changes), 2)
        first = decode_data_url(self.changes[0]).getchannel("A")
        second = decode_data_url(self.changes[1]).getchannel("A")
        self.assertIsNone(ImageChops.subtract(first, second).getbbox())
        self.assertIsNotNone(ImageChops.subtract(second, first).getbbox())

    def test_resize_preserves_content(self) -> None:
        element = FakeElement(width=100, height=100)
        pad = self._make_pad()
        pad.mount(element)
        stroke(pad, element, [(10, 50), (90, 50)])

        element.width, element.height = 200, 200
        pad.on_resize()
        snap = pad.canvas.snapshot()
        self.assertEqual(snap.size, (200, 200))
        self.assertGreater(snap.getpixel((100, 100))[3], 0)
        self.assertEqual(snap.getpixel((100, 20))[3], 0)

    def test_backing_store_kept_when_unmounted(self) -> None:
        size = self.pad.canvas.pixel_size
        self.pad.unmount()
        self.element.width = 300
        self.pad._derive_backing_store()
        self.assertEqual(self.pad.canvas.pixel_size, size)

    def test_resize_ignored_while_drawing(self) -> None:
        self.pad.begin(event_at(self.element, 10, 10))
        self.element.width = 300
        self.pad.on_resize()
        self.assertEqual(self.pad.canvas.pixel_size, (120, 80))

    def test_device_pixel_ratio_scales_backing_store(self) -> None:
        element = FakeElement(ratio=2.0)
        pad = self._make_pad()
        pad.mount(element)
        self.assertEqual(pad.canvas.pixel_size, (240, 160))
        stroke(pad, element, [(10, 40), (60, 40)])
        image = decode_data_url(self.changes[-1])
        self.assertGreater(image.getpixel((70, 80))[3], 0)


if __name__ == "__main__":
    unittest.main()
