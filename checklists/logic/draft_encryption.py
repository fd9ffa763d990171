# checklists/logic/draft_encryption.py
from __future__ import annotations

import json
import logging
from typing import Any, List

from cryptography.fernet import Fernet, InvalidToken

from core.settings.logic.settings_manager import SettingsManager

log = logging.getLogger(__name__)

_FEATURE_ID = "checklists_drafts"
_KEY_FIELD = "fernet_key"
_RING_FIELD = "fernet_key_ring"


def _ring_entries(raw: Any) -> List[str]:
    # ring may come back as list or as JSON text, depending on how it was written
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return []
    return [k for k in raw or [] if isinstance(k, str)]


def _load_keyring(sm: SettingsManager) -> List[Fernet]:
    """
    List of Fernet instances:
    - first entry is the current key (used for encrypt),
    - remaining entries are retired keys (decrypt only).
    The current key is created on first use.
    """
    current = sm.get(_FEATURE_ID, _KEY_FIELD, None)
    if not current:
        current = Fernet.generate_key().decode("ascii")
        sm.set(_FEATURE_ID, _KEY_FIELD, current)
        sm.set(_FEATURE_ID, _RING_FIELD, [])

    ferns = [Fernet(current.encode("ascii"))]
    for key in _ring_entries(sm.get(_FEATURE_ID, _RING_FIELD, [])):
        try:
            ferns.append(Fernet(key.encode("ascii")))
        except ValueError:
            log.warning("ignoring malformed retired draft key")
    return ferns


def rotate_key(sm: SettingsManager) -> None:
    """New current key; the previous one moves to the ring so old drafts stay readable."""
    previous = sm.get(_FEATURE_ID, _KEY_FIELD, None)
    ring = _ring_entries(sm.get(_FEATURE_ID, _RING_FIELD, []))
    if previous:
        ring.insert(0, previous)
    sm.set(_FEATURE_ID, _KEY_FIELD, Fernet.generate_key().decode("ascii"))
    sm.set(_FEATURE_ID, _RING_FIELD, ring)


def encrypt_bytes(sm: SettingsManager, data: bytes) -> bytes:
    return _load_keyring(sm)[0].encrypt(data)


def decrypt_bytes(sm: SettingsManager, token: bytes) -> bytes:
    """Try the current key first, then the retired ones; raises InvalidToken."""
    for fern in _load_keyring(sm):
        try:
            return fern.decrypt(token)
        except InvalidToken:
            continue
    raise InvalidToken("Unable to decrypt draft")
