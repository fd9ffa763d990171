from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from core.common.db_interface import SQLiteRepository


def _to_json(v: Any) -> str:            # serialisieren
    try:
        return json.dumps(v)
    except TypeError:
        return json.dumps(str(v))


def _from_json(txt: str) -> Any:        # deserialisieren
    try:
        return json.loads(txt)
    except ValueError:
        return txt


# ------------------------------------------------------------------ #
class SettingsRepository(SQLiteRepository):
    """Key/value settings per (namespace, key, user_id) with JSON values."""

    def __init__(self, db_path: Path | str) -> None:
        super().__init__(Path(db_path), check_same_thread=False)
        self._ensure_schema()

    # ------------------------- öffentliche API ----------------------- #
    def get(self, ns: str, key: str, uid: str | None, fb: Any = None) -> Any | None:
        row = self.conn.execute(
            "SELECT value FROM settings WHERE namespace=? AND key=? AND user_id IS ?",
            (ns, key, uid),
        ).fetchone()
        return _from_json(row["value"]) if row else fb

    def set(self, ns: str, key: str, val: Any, uid: str | None) -> None:
        with self.conn:
            # NULL user_id never conflicts on the primary key, so delete first
            self.conn.execute(
                "DELETE FROM settings WHERE namespace=? AND key=? AND user_id IS ?",
                (ns, key, uid),
            )
            self.conn.execute(
                "INSERT INTO settings (namespace, key, value, user_id) VALUES (?,?,?,?)",
                (ns, key, _to_json(val), uid),
            )

    def delete(self, ns: str, key: str, uid: str | None) -> None:
        with self.conn:
            self.conn.execute(
                "DELETE FROM settings WHERE namespace=? AND key=? AND user_id IS ?",
                (ns, key, uid),
            )

    # ------------------------- Schema -------------------------------- #
    def _ensure_schema(self) -> None:
        with self.conn:
            self.conn.execute(
                """
                CREATE TABLE IF NOT EXISTS settings(
                    namespace TEXT NOT NULL,
                    key       TEXT NOT NULL,
                    value     TEXT NOT NULL,
                    user_id   TEXT,
                    PRIMARY KEY(namespace,key,user_id)
                )
                """
            )
