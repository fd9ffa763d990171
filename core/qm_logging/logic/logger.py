"""
core/qm_logging/logic/logger.py
===============================

Thread-sicherer Audit-Logger mit SQLite-Backend.

Jede Checklisten-Einreichung, jeder Upload und jede Ticket-Transition
landet als eine Zeile in ``logs``. Wird kein Benutzername übergeben,
wird ``AppContext.current_user`` verwendet.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import List, Optional

from core.common.db_interface import DatabaseAccess, create_sqlite_connection
from core.helpers.date_time_helper import utc_now_iso
from core.qm_logging.models.log_entry import LogEntry

_SCHEMA = """
CREATE TABLE IF NOT EXISTS logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp TEXT NOT NULL,
    user_id INTEGER,
    username TEXT,
    feature TEXT NOT NULL,
    event TEXT NOT NULL,
    reference_id TEXT,
    message TEXT,
    log_level TEXT NOT NULL DEFAULT 'INFO'
)
"""


class Logger(DatabaseAccess):
    """Audit-Logger; eine Instanz pro Datenbankdatei."""

    def __init__(self, db_path: Path | str | None = None) -> None:
        if db_path is None:
            from core.config.config_loader import LOG_DB_PATH  # lazy, avoids config I/O in tests
            db_path = LOG_DB_PATH
        self._db_path = Path(db_path)
        self._lock = threading.Lock()
        self._ensure_db()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def connect(self):
        return create_sqlite_connection(self._db_path)

    # ------------------------------------------------------------------ #
    #  Öffentliche API: log                                              #
    # ------------------------------------------------------------------ #
    def log(
        self,
        feature: str,
        event: str,
        *,
        user_id: Optional[int] = None,
        username: Optional[str] = None,
        level: str = "INFO",
        reference_id: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        """Persistiert einen Logeintrag."""
        if username is None or user_id is None:
            from core.common.app_context import AppContext  # lazy import
            user = AppContext.current_user
            if user is not None:
                username = username or user.username
                user_id = user_id if user_id is not None else user.id

        with self._lock, self.connect() as conn:
            conn.execute(
                """
                INSERT INTO logs
                    (timestamp, user_id, username, feature, event,
                     reference_id, message, log_level)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    utc_now_iso(),
                    user_id,
                    username or "unknown",
                    feature,
                    event,
                    reference_id,
                    message,
                    level,
                ),
            )

    # ------------------------------------------------------------------ #
    #  Fetch / Query                                                     #
    # ------------------------------------------------------------------ #
    def fetch_logs(self, limit: int = 100) -> List[LogEntry]:
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT * FROM logs ORDER BY timestamp DESC, id DESC LIMIT ?", (limit,)
            ).fetchall()
        return [LogEntry.from_row(r) for r in rows]

    def query_logs(
        self,
        *,
        user_id: Optional[int] = None,
        username: Optional[str] = None,
        feature: Optional[str] = None,
        event: Optional[str] = None,
        reference_id: Optional[str] = None,
        level: Optional[str] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        limit: int = 1_000,
    ) -> List[LogEntry]:
        filters = {
            "user_id = ?": user_id,
            "username = ?": username,
            "feature = ?": feature,
            "event = ?": event,
            "reference_id = ?": reference_id,
            "log_level = ?": level,
            "timestamp >= ?": start_time,
            "timestamp <= ?": end_time,
        }
        query = "SELECT * FROM logs WHERE 1=1"
        params: list[object] = []
        for clause, value in filters.items():
            if value is not None:
                query += f" AND {clause}"
                params.append(value)
        query += " ORDER BY timestamp DESC, id DESC LIMIT ?"
        params.append(limit)

        with self.connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [LogEntry.from_row(r) for r in rows]

    # ------------------------------------------------------------------ #
    def _ensure_db(self) -> None:
        with self.connect() as conn:
            conn.execute(_SCHEMA)


# --------------------------------------------------------------------------- #
#  Globale Instanz (lazy)                                                     #
# --------------------------------------------------------------------------- #
_default_logger: Logger | None = None
_default_lock = threading.Lock()


def get_logger() -> Logger:
    """Return the process-wide audit logger bound to the configured log DB."""
    global _default_logger
    if _default_logger is None:
        with _default_lock:
            if _default_logger is None:
                _default_logger = Logger()
    return _default_logger
