"""
Signature feature.

Freehand signature pad shared by every checklist form: pointer tracking,
a Pillow backing store sized for the display density, PNG data-URL
capture/restore, and resize reconciliation. The tkinter widget lives in
``signature.gui``; everything else is toolkit-neutral.
"""
