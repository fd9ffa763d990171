# signature/logic/signature_pad.py
"""
Headless controller of the freehand signature pad.

The controller owns the raster canvas and the pad state; toolkit widgets
(see ``signature.gui.signature_pad_widget``) only translate their native
events into :class:`PointerEvent` objects and forward layout changes.

Value flow:
- ``end()`` captures the bitmap and hands the encoded value to ``on_change``.
- The host stores that value and passes every stored value back through
  ``set_value``. The echo of a value the pad just captured is swallowed
  (``SUPPRESS_NEXT_RESTORE``); any other value is decoded and painted.
- Decoding runs through ``scheduler`` and may complete at any later time;
  the result is applied only if it is still valid at that moment.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from PIL import Image

from ..exceptions.errors import SignatureDecodeError
from ..models.pointer import BoundingBox, PointerEvent, StrokePoint
from ..models.signature_config import SignatureConfig
from ..models.signature_enums import PadState
from .image_codec import decode_data_url
from .raster_canvas import RasterCanvas

log = logging.getLogger(__name__)

Scheduler = Callable[[Callable[[], None]], object]


class CanvasElement(Protocol):
    """The on-screen drawing surface the pad is mounted on."""

    def bounding_box(self) -> BoundingBox: ...

    def device_pixel_ratio(self) -> float: ...


def run_now(callback: Callable[[], None]) -> None:
    callback()


class SignaturePad:
    def __init__(
        self,
        *,
        on_change: Callable[[str], None],
        on_clear: Optional[Callable[[], None]] = None,
        value: str = "",
        config: SignatureConfig | None = None,
        scheduler: Scheduler | None = None,
        on_render: Optional[Callable[[Image.Image], None]] = None,
    ) -> None:
        self._on_change = on_change
        self._on_clear = on_clear
        self._on_render = on_render
        self._scheduler: Scheduler = scheduler or run_now
        self._canvas = RasterCanvas(config)
        self._element: Optional[CanvasElement] = None
        self._state = PadState.IDLE
        self._last_point: Optional[StrokePoint] = None
        self._value = value or ""
        # bumped by capture and clear; a pending restore from an older epoch is
        # dropped instead of applied last-writer-wins, so the bitmap never shows
        # a value the form no longer holds
        self._epoch = 0

    # ------------------------------------------------------------------ #
    #  Introspection                                                     #
    # ------------------------------------------------------------------ #
    @property
    def state(self) -> PadState:
        return self._state

    @property
    def is_drawing(self) -> bool:
        return self._state is PadState.DRAWING

    @property
    def is_mounted(self) -> bool:
        return self._element is not None

    @property
    def value(self) -> str:
        """Last known Signature Image (captured or supplied by the host)."""
        return self._value

    @property
    def canvas(self) -> RasterCanvas:
        return self._canvas

    # ------------------------------------------------------------------ #
    #  Mounting                                                          #
    # ------------------------------------------------------------------ #
    def mount(self, element: CanvasElement) -> None:
        self._element = element
        self._state = PadState.IDLE
        self._derive_backing_store()
        self._render()
        if self._value:
            self._schedule_restore(self._value)

    def unmount(self) -> None:
        self._element = None
        self._state = PadState.IDLE
        self._last_point = None

    # ------------------------------------------------------------------ #
    #  Pointer tracking                                                  #
    # ------------------------------------------------------------------ #
    def begin(self, event: PointerEvent) -> bool:
        """Start a stroke. Returns True when the event was consumed."""
        if self._element is None:
            return False
        point = self._relative_point(event)
        if point is None:
            return False
        event.prevent_default()
        self._state = PadState.DRAWING
        self._last_point = point
        return True

    def move(self, event: PointerEvent) -> bool:
        if self._state is not PadState.DRAWING or self._element is None:
            return False
        point = self._relative_point(event)
        if point is None:
            return False
        event.prevent_default()
        if self._last_point is not None:
            self._canvas.draw_segment(self._last_point, point)
            self._render()
        self._last_point = point
        return True

    def end(self) -> None:
        if self._state is not PadState.DRAWING:
            return
        self._last_point = None
        if self._element is None:
            self._state = PadState.IDLE
            return
        encoded = self._canvas.encode()
        self._value = encoded
        self._epoch += 1
        self._state = PadState.SUPPRESS_NEXT_RESTORE
        self._on_change(encoded)

    # ------------------------------------------------------------------ #
    #  Persistence bridge                                                #
    # ------------------------------------------------------------------ #
    def set_value(self, value: str) -> None:
        """Externally supplied value changed (draft load, reset, echo)."""
        value = value or ""
        if self._state is PadState.DRAWING:
            return
        if self._state is PadState.SUPPRESS_NEXT_RESTORE:
            self._state = PadState.IDLE
            return
        self._value = value
        if self._element is None:
            return
        if not value:
            # nothing to decode; keep the bitmap in step with the emptied value
            self._canvas.clear()
            self._render()
            return
        self._schedule_restore(value)

    def capture(self) -> str:
        """Encode the current bitmap without notifying the host."""
        if self._element is None:
            return ""
        return self._canvas.encode()

    def clear(self) -> None:
        if self._element is not None:
            self._canvas.clear()
            self._render()
        self._last_point = None
        self._value = ""
        self._epoch += 1
        if self._state is PadState.SUPPRESS_NEXT_RESTORE:
            self._state = PadState.IDLE
        if self._on_clear is not None:
            self._on_clear()

    # ------------------------------------------------------------------ #
    #  Resize reconciliation                                             #
    # ------------------------------------------------------------------ #
    def on_resize(self) -> None:
        if self._element is None or self._state is PadState.DRAWING:
            return
        box = self._element.bounding_box()
        ratio = self._element.device_pixel_ratio()
        if (box.width, box.height) == self._canvas.display_size and ratio == self._canvas.device_pixel_ratio:
            return
        self._derive_backing_store()
        self._render()
        if self._value:
            self._schedule_restore(self._value)

    # ------------------------------------------------------------------ #
    #  Internals                                                         #
    # ------------------------------------------------------------------ #
    def _derive_backing_store(self) -> None:
        if self._element is None:
            return
        box = self._element.bounding_box()
        self._canvas.configure(box.width, box.height, self._element.device_pixel_ratio())

    def _relative_point(self, event: PointerEvent) -> Optional[StrokePoint]:
        pos = event.client_position()
        if pos is None or self._element is None:
            return None
        box = self._element.bounding_box()
        return StrokePoint(pos[0] - box.left, pos[1] - box.top)

    def _schedule_restore(self, value: str) -> None:
        epoch = self._epoch

        def _decode_and_apply() -> None:
            try:
                image = decode_data_url(value)
            except SignatureDecodeError as exc:
                log.debug("signature restore skipped: %s", exc)
                return
            self._apply_restore(image, epoch)

        self._scheduler(_decode_and_apply)

    def _apply_restore(self, image: Image.Image, epoch: int) -> None:
        if self._element is None or self._state is PadState.DRAWING:
            return
        if epoch != self._epoch:
            return
        self._canvas.paint(image)
        self._render()

    def _render(self) -> None:
        if self._on_render is None:
            return
        snap = self._canvas.snapshot()
        if snap is not None:
            self._on_render(snap)
