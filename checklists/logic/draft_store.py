"""
DraftStore
==========

Keeps one unsent draft per checklist form on disk so that a monitor can
close the application and continue later.

* a draft is written only while the form holds meaningful data; saving an
  emptied form removes the draft instead
* drafts are JSON, Fernet-encrypted unless ``Drafts.encrypt`` is off
* a draft that cannot be decrypted or parsed is discarded with a warning
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional, Type, TypeVar

from cryptography.fernet import InvalidToken

from core.settings.logic.settings_manager import SettingsManager
from ..exceptions.errors import DraftError
from ..models.base_form import ChecklistForm
from .draft_encryption import decrypt_bytes, encrypt_bytes

log = logging.getLogger(__name__)

F = TypeVar("F", bound=ChecklistForm)


class DraftStore:
    def __init__(
        self,
        directory: Path | str | None = None,
        *,
        settings: SettingsManager | None = None,
        encrypt: bool | None = None,
    ) -> None:
        if directory is None or encrypt is None:
            from core.config.config_loader import config_loader  # lazy import
            if directory is None:
                directory = config_loader.get_drafts_dir()
            if encrypt is None:
                encrypt = config_loader.drafts_encrypted()
        self._dir = Path(directory)
        self._encrypt = bool(encrypt)
        self._settings = settings
        if self._encrypt and self._settings is None:
            self._settings = SettingsManager()

    # ------------------------------------------------------------------ #
    def _path(self, key: str) -> Path:
        suffix = ".draft" if self._encrypt else ".json"
        return self._dir / f"checklist-{key}-draft{suffix}"

    def exists(self, key: str) -> bool:
        return self._path(key).exists()

    def save(self, form: ChecklistForm) -> bool:
        """Persist *form*; returns False when it was empty and no draft was kept."""
        key = form.checklist_type.key
        if not form.has_meaningful_data():
            self.clear(key)
            return False
        raw = json.dumps(form.to_dict(), ensure_ascii=False).encode("utf-8")
        if self._encrypt:
            raw = encrypt_bytes(self._settings, raw)
        path = self._path(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(raw)
            os.replace(tmp, path)
        except OSError as exc:
            raise DraftError(f"draft for {key} could not be written: {exc}") from exc
        return True

    def load(self, form_cls: Type[F]) -> Optional[F]:
        key = form_cls.checklist_type.key
        path = self._path(key)
        if not path.exists():
            return None
        try:
            raw = path.read_bytes()
            if self._encrypt:
                raw = decrypt_bytes(self._settings, raw)
            data = json.loads(raw.decode("utf-8"))
            if not isinstance(data, dict):
                raise ValueError("draft is not an object")
            return form_cls.from_dict(data)
        except (InvalidToken, ValueError, KeyError, TypeError, AttributeError) as exc:
            log.warning("discarding unreadable draft %s: %s", path.name, exc)
            self.clear(key)
            return None

    def clear(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass
