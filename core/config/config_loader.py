"""
Thin wrapper delegating to :mod:`config_service`.

Stellt die Pfade bereit, die Repositories, Logger und Storage beim Start
brauchen, ohne dass jeder Aufrufer die Dataclasses des ConfigService kennt.
"""
from __future__ import annotations

from pathlib import Path
from threading import RLock

from .config_service import (
    ConfigService,
    config_service,
    PROJECT_ROOT,
    MACHINE_INI,
)

__all__ = [
    "ConfigLoader",
    "config_loader",
    "PLANTQC_DB_PATH",
    "LOG_DB_PATH",
    "STORAGE_ROOT_PATH",
    "DRAFTS_DIR_PATH",
    "PROJECT_ROOT_PATH_T",
    "INI_PATH",
]


class ConfigLoader:
    """
    Singleton-Wrapper um :class:`ConfigService`.

    Liefert ausschließlich ``Path``-Objekte bzw. einfache Werte.
    """
    _instance: "ConfigLoader | None" = None
    _lock = RLock()

    def __new__(cls, service: ConfigService | None = None) -> "ConfigLoader":
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._service = service or config_service
            return cls._instance

    # ----------------- Paths ------------------------------------------- #
    def get_plantqc_db_path(self) -> Path:
        return self._service.database.plantqc

    def get_logging_db_path(self) -> Path:
        return self._service.database.logging

    def get_storage_root(self) -> Path:
        return self._service.storage.root

    def get_public_base_url(self) -> str:
        return self._service.storage.public_base_url

    def get_drafts_dir(self) -> Path:
        return self._service.drafts.directory

    def drafts_encrypted(self) -> bool:
        return self._service.drafts.encrypt

    # ----------------- Meta-Infos -------------------------------------- #
    def get_app_name(self) -> str:
        return self._service.general.app_name

    def get_version(self) -> str:
        return self._service.general.version

    def get_timezone(self) -> str:
        return self._service.general.timezone

    def reload(self) -> None:
        self._service.reload()


# ------------------------- Singletons/Konstanten ------------------------- #
config_loader: ConfigLoader = ConfigLoader()

PLANTQC_DB_PATH: Path = config_loader.get_plantqc_db_path()
LOG_DB_PATH: Path = config_loader.get_logging_db_path()
STORAGE_ROOT_PATH: Path = config_loader.get_storage_root()
DRAFTS_DIR_PATH: Path = config_loader.get_drafts_dir()

PROJECT_ROOT_PATH_T: Path = PROJECT_ROOT
INI_PATH: Path = MACHINE_INI
