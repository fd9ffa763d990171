# signature/gui/signature_pad_widget.py
from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable, Optional

from PIL import Image, ImageTk

from ..models.pointer import BoundingBox, PointerEvent
from ..models.signature_config import SignatureConfig
from ..logic.signature_pad import SignaturePad


class _TkCanvasElement:
    """Adapts a tk.Canvas to the pad's CanvasElement protocol (root coordinates)."""

    def __init__(self, canvas: tk.Canvas) -> None:
        self._canvas = canvas

    def bounding_box(self) -> BoundingBox:
        c = self._canvas
        return BoundingBox(
            left=float(c.winfo_rootx()),
            top=float(c.winfo_rooty()),
            width=float(max(1, c.winfo_width())),
            height=float(max(1, c.winfo_height())),
        )

    def device_pixel_ratio(self) -> float:
        # Tk reports 96 px per inch at 100 % scaling
        return max(1.0, float(self._canvas.winfo_fpixels("1i")) / 96.0)


class SignaturePadWidget(ttk.Frame):
    """
    Label, full-width fixed-height drawing surface and a "Clear Signature" button.

    Hosts keep the signature in their own state: store what ``on_change``
    delivers, reset it in ``on_clear``, and hand every stored value back via
    :meth:`set_value`.
    """

    def __init__(
        self,
        parent: tk.Misc,
        *,
        label: str,
        on_change: Callable[[str], None],
        on_clear: Optional[Callable[[], None]] = None,
        value: str = "",
        config: SignatureConfig | None = None,
    ) -> None:
        super().__init__(parent)
        self._config = config or SignatureConfig()
        self._photo: Optional[ImageTk.PhotoImage] = None

        self.columnconfigure(0, weight=1)
        ttk.Label(self, text=label).grid(row=0, column=0, sticky="w", pady=(0, 4))

        self.canvas = tk.Canvas(
            self, height=self._config.pad_height, bg="white",
            highlightthickness=2, highlightbackground=self._config.border_color,
            cursor="crosshair",
        )
        self.canvas.grid(row=1, column=0, sticky="ew")
        self._image_id = self.canvas.create_image(0, 0, anchor="nw")

        ttk.Button(self, text=self._config.clear_label, command=self.clear).grid(
            row=2, column=0, sticky="w", pady=(6, 0)
        )

        self.pad = SignaturePad(
            on_change=on_change,
            on_clear=on_clear,
            value=value,
            config=self._config,
            scheduler=self.after_idle,
            on_render=self._show,
        )
        self._element = _TkCanvasElement(self.canvas)

        self.canvas.bind("<ButtonPress-1>", self._on_down)
        self.canvas.bind("<B1-Motion>", self._on_move)
        self.canvas.bind("<ButtonRelease-1>", self._on_up)
        self.canvas.bind("<Leave>", self._on_up)
        self.canvas.bind("<Configure>", self._on_configure)
        self.bind("<Map>", self._on_map, add="+")
        self.bind("<Destroy>", self._on_destroy, add="+")
        self._toplevel_binding: Optional[str] = None

    # ------------------------------------------------------------------ #
    def set_value(self, value: str) -> None:
        self.pad.set_value(value)

    def clear(self) -> None:
        self.pad.clear()

    # ------------------------------------------------------------------ #
    #  Mount / resize                                                    #
    # ------------------------------------------------------------------ #
    def _on_map(self, _event=None) -> None:
        if not self.pad.is_mounted:
            self.pad.mount(self._element)
            top = self.winfo_toplevel()
            self._toplevel_binding = top.bind("<Configure>", self._on_window_resize, add="+")

    def _on_destroy(self, event) -> None:
        if event.widget is not self:
            return
        if self._toplevel_binding is not None:
            try:
                self.winfo_toplevel().unbind("<Configure>", self._toplevel_binding)
            except tk.TclError:
                pass
            self._toplevel_binding = None
        self.pad.unmount()

    def _on_configure(self, _event=None) -> None:
        self.pad.on_resize()

    def _on_window_resize(self, event) -> None:
        if event.widget is self.winfo_toplevel():
            self.pad.on_resize()

    # ------------------------------------------------------------------ #
    #  Pointer events                                                    #
    # ------------------------------------------------------------------ #
    @staticmethod
    def _pointer(event) -> PointerEvent:
        return PointerEvent(client_x=float(event.x_root), client_y=float(event.y_root))

    def _on_down(self, event):
        if self.pad.begin(self._pointer(event)):
            return "break"
        return None

    def _on_move(self, event):
        if self.pad.move(self._pointer(event)):
            return "break"
        return None

    def _on_up(self, _event=None) -> None:
        self.pad.end()

    # ------------------------------------------------------------------ #
    def _show(self, image: Image.Image) -> None:
        width, height = self.pad.canvas.display_size
        shown = image
        if image.size != (int(width), int(height)) and width >= 1 and height >= 1:
            shown = image.resize((int(width), int(height)), Image.Resampling.LANCZOS)
        self._photo = ImageTk.PhotoImage(shown)
        self.canvas.itemconfigure(self._image_id, image=self._photo)
