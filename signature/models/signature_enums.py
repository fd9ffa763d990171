# signature/models/signature_enums.py
from __future__ import annotations
from enum import Enum


class PadState(str, Enum):
    """Lifecycle of the signature pad.

    IDLE                   no stroke in progress, restores are applied
    DRAWING                stroke in progress, restores and resizes are ignored
    SUPPRESS_NEXT_RESTORE  a stroke was just captured; the parent's echo of
                           that value must not repaint the canvas
    """
    IDLE = "idle"
    DRAWING = "drawing"
    SUPPRESS_NEXT_RESTORE = "suppress_next_restore"
