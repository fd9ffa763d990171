# signature/logic/image_codec.py
"""
Encoding between Pillow bitmaps and the Signature Image string.

A Signature Image is a PNG data URL (``data:image/png;base64,...``).
Raw base64 without the ``data:`` header is accepted on decode so values
written by older clients still load.
"""
from __future__ import annotations

import base64
import binascii
import io

from PIL import Image, UnidentifiedImageError

from ..exceptions.errors import SignatureDecodeError

PNG_DATA_URL_PREFIX = "data:image/png;base64,"


def encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def encode_data_url(image: Image.Image) -> str:
    return PNG_DATA_URL_PREFIX + base64.b64encode(encode_png(image)).decode("ascii")


def data_url_to_bytes(value: str) -> bytes:
    """Return the raw image bytes carried by *value*."""
    if not value:
        raise SignatureDecodeError("empty signature value")
    payload = value
    if value.startswith("data:"):
        header, sep, payload = value.partition(",")
        if not sep or ";base64" not in header:
            raise SignatureDecodeError("signature value is not a base64 data URL")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SignatureDecodeError(f"invalid base64 payload: {exc}") from exc


def decode_data_url(value: str) -> Image.Image:
    """Decode *value* into a fully loaded RGBA image."""
    raw = data_url_to_bytes(value)
    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            return img.convert("RGBA")
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise SignatureDecodeError(f"undecodable signature image: {exc}") from exc


def is_blank(image: Image.Image) -> bool:
    """True when no pixel carries any ink (fully transparent)."""
    alpha = image.convert("RGBA").getchannel("A")
    return alpha.getbbox() is None
