"""Typed, layered configuration loader with precedence handling."""
from __future__ import annotations

import os
import configparser
import shutil
from dataclasses import dataclass, fields
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, List, Tuple

# --------------------------------------------------------------------------- #
#  Paths & default definitions
# --------------------------------------------------------------------------- #

ENV_PREFIX = "PLANTQC_"


def _find_project_root() -> Path:
    here = Path(__file__).resolve()
    for parent in here.parents:
        if (parent / "core").is_dir() and (parent / "checklists").is_dir():
            return parent
    return here.parents[2]


PROJECT_ROOT = _find_project_root()
CONFIG_DIR = PROJECT_ROOT / "core" / "config"
DEFAULTS_INI = CONFIG_DIR / "defaults.ini"
MACHINE_INI = CONFIG_DIR / "config.ini"


_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "Database": {
        "plantqc": (PROJECT_ROOT / "databases" / "plantqc.db").as_posix(),
        "logging": (PROJECT_ROOT / "databases" / "logs.db").as_posix(),
    },
    "Storage": {
        "root": (PROJECT_ROOT / "storage").as_posix(),
        "public_base_url": "",
    },
    "Drafts": {
        "directory": (PROJECT_ROOT / "drafts").as_posix(),
        "encrypt": "true",
    },
    "General": {
        "app_name": "PlantQC",
        "version": "1.0.0",
        "timezone": "America/New_York",
        "debug_db_paths": "false",
    },
}


# --------------------------------------------------------------------------- #
#  Datamodels
# --------------------------------------------------------------------------- #

@dataclass
class DatabaseConfig:
    plantqc: Path
    logging: Path


@dataclass
class StorageConfig:
    root: Path
    public_base_url: str = ""


@dataclass
class DraftsConfig:
    directory: Path
    encrypt: bool = True


@dataclass
class GeneralConfig:
    app_name: str = "PlantQC"
    version: str = ""
    timezone: str = "America/New_York"
    debug_db_paths: bool = False


@dataclass
class AppConfig:
    database: DatabaseConfig
    storage: StorageConfig
    drafts: DraftsConfig
    general: GeneralConfig


# --------------------------------------------------------------------------- #
#  Helpers
# --------------------------------------------------------------------------- #

def _ensure_machine_config() -> None:
    """Ensure config directory and machine config exist."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    if not MACHINE_INI.exists():
        if DEFAULTS_INI.exists():
            shutil.copy(DEFAULTS_INI, MACHINE_INI)
        else:
            parser = configparser.ConfigParser()
            parser.read_dict(_DEFAULTS)
            with MACHINE_INI.open("w", encoding="utf-8") as fh:
                parser.write(fh)


def _read_ini(path: Path) -> Dict[str, Dict[str, Any]]:
    cp = configparser.ConfigParser()
    cp.read(path, encoding="utf-8")
    return {section: dict(cp.items(section)) for section in cp.sections()}


def _apply(target: Dict[str, Dict[str, Any]], source: Dict[str, Dict[str, Any]],
           layer: str, origin: str,
           sources: Dict[Tuple[str, str], Dict[str, str]]) -> None:
    for section, items in source.items():
        sec = target.setdefault(section, {})
        for key, value in items.items():
            sec[key] = value
            sources[(section, key)] = {"layer": layer, "source": origin}


def _cast(value: Any, typ: Any) -> Any:
    # dataclass field types are strings under postponed annotations
    if isinstance(typ, str):
        typ = {"Path": Path, "bool": bool, "int": int, "float": float, "str": str}.get(typ, str)
    if typ is Path:
        path = Path(str(value)).expanduser()
        # relative paths in an INI are relative to the project, not the cwd
        return path if path.is_absolute() else PROJECT_ROOT / path
    if typ is bool:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in {"1", "true", "yes", "on"}
    if typ is int:
        return int(value)
    if typ is float:
        return float(value)
    return typ(value)


def _build_dataclass(cls: type, data: Dict[str, Any]) -> Any:
    kwargs = {}
    for field in fields(cls):
        val = data.get(field.name, field.default)
        kwargs[field.name] = _cast(val, field.type)
    return cls(**kwargs)


def _env_overlays(environ: Dict[str, str] | None = None) -> Dict[str, Dict[str, Any]]:
    """Collect ``PLANTQC_<SECTION>__<KEY>`` variables into INI-shaped dicts."""
    environ = os.environ if environ is None else environ
    result: Dict[str, Dict[str, Any]] = {}
    for env_key, value in environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        parts = env_key[len(ENV_PREFIX):].split("__", 1)
        if len(parts) != 2:
            continue
        section, key = parts
        result.setdefault(section.title(), {})[key.lower()] = value
    return result


def _user_config_path() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("APPDATA") or (Path.home() / "AppData" / "Roaming")
        return Path(appdata) / "PlantQC" / "config.ini"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "plantqc" / "config.ini"


# --------------------------------------------------------------------------- #
#  ConfigService
# --------------------------------------------------------------------------- #


class ConfigService:
    """Facade merging layered configuration with type safety.

    Environment variables win over every file layer so a test run or a
    kiosk deployment can redirect databases and storage without touching
    the machine INI.
    """

    def __init__(self, *, ensure_machine_config: bool = True) -> None:
        self._lock = RLock()
        if ensure_machine_config:
            _ensure_machine_config()
        self.reload()

    # ------------------------------------------------------------------ #
    def reload(self) -> None:
        with self._lock:
            merged: Dict[str, Dict[str, Any]] = {}
            sources: Dict[Tuple[str, str], Dict[str, str]] = {}

            # Layer 0: embedded defaults
            _apply(merged, _DEFAULTS, "code", "embedded", sources)

            # Layer 1: defaults.ini
            if DEFAULTS_INI.exists():
                _apply(merged, _read_ini(DEFAULTS_INI), "defaults.ini", str(DEFAULTS_INI), sources)

            # Layer 2: machine config
            if MACHINE_INI.exists():
                _apply(merged, _read_ini(MACHINE_INI), "machine", str(MACHINE_INI), sources)

            # Layer 3: user overrides
            user_ini = _user_config_path()
            if user_ini.exists():
                _apply(merged, _read_ini(user_ini), "user", str(user_ini), sources)

            # Layer 4: environment variables
            _apply(merged, _env_overlays(), "env", "os.environ", sources)

            self._merged = merged
            self._sources = sources

            self.database = _build_dataclass(DatabaseConfig, merged.get("Database", {}))
            self.storage = _build_dataclass(StorageConfig, merged.get("Storage", {}))
            self.drafts = _build_dataclass(DraftsConfig, merged.get("Drafts", {}))
            self.general = _build_dataclass(GeneralConfig, merged.get("General", {}))

    # ------------------------------------------------------------------ #
    def get(self, section: str, key: str, *, cast: Callable[[Any], Any] | type = str) -> Any:
        val = self._merged.get(section, {}).get(key)
        if val is None:
            return None
        if isinstance(cast, type):
            return _cast(val, cast)
        return cast(val)

    def meta_source(self, section: str, key: str) -> Dict[str, str] | None:
        return self._sources.get((section, key))

    def describe_db_paths(self) -> List[str]:
        """One line per database file: resolved path plus the layer it came from."""
        lines = []
        for key in ("plantqc", "logging"):
            meta = self.meta_source("Database", key) or {"layer": "default", "source": "-"}
            lines.append(f"Database.{key} = {getattr(self.database, key)} "
                         f"({meta['layer']}: {meta['source']})")
        return lines

    def as_app_config(self) -> AppConfig:
        return AppConfig(
            database=self.database,
            storage=self.storage,
            drafts=self.drafts,
            general=self.general,
        )


# Global singleton
config_service = ConfigService()
