"""
core/settings/logic/settings_manager.py
=======================================

High-Level-API für Settings (z. B. Schlüsselbund der Entwurfs-Verschlüsselung).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from core.settings.logic.settings_repository import SettingsRepository

log = logging.getLogger(__name__)


class SettingsManager:
    def __init__(self, repository: SettingsRepository | None = None, *,
                 db_path: Path | str | None = None) -> None:
        if repository is None:
            if db_path is None:
                from core.config.config_loader import PLANTQC_DB_PATH  # lazy import
                db_path = PLANTQC_DB_PATH
            repository = SettingsRepository(db_path)
        self._repo = repository

    # ------------------------------------------------------------------ #
    #  API                                                               #
    # ------------------------------------------------------------------ #
    def get(
        self,
        namespace: str,
        key: str,
        fallback: Any | None = None,
        *,
        user_specific: bool = False,
        user_id: str | None = None,
    ) -> Any | None:
        if user_specific and not user_id:
            log.warning("user-specific setting %s.%s requested without user id", namespace, key)
            return fallback
        return self._repo.get(namespace, key, user_id if user_specific else None, fallback)

    def set(
        self,
        namespace: str,
        key: str,
        value: Any,
        *,
        user_specific: bool = False,
        user_id: str | None = None,
    ) -> None:
        if user_specific and not user_id:
            raise ValueError("user_id must be set when user_specific=True")
        self._repo.set(namespace, key, value, user_id if user_specific else None)

    def delete(
        self,
        namespace: str,
        key: str,
        *,
        user_specific: bool = False,
        user_id: str | None = None,
    ) -> None:
        self._repo.delete(namespace, key, user_id if user_specific else None)
