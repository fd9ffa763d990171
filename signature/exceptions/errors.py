"""Signature feature exceptions."""
from __future__ import annotations


class SignatureError(Exception):
    """Base exception for the signature feature."""


class SignatureDecodeError(SignatureError):
    """Raised when a Signature Image value cannot be decoded into a bitmap."""
