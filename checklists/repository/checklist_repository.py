"""
checklists/repository/checklist_repository.py
=============================================

SQLite persistence of submitted checklists.

One table per checklist type (``ChecklistType.table``):

    id, created_at (UTC ISO), form_date (YYYY-MM-DD), date_string,
    summary (JSON of the form's row columns), payload (JSON), pdf_url
"""
from __future__ import annotations

import logging
import sqlite3
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from core.common.db_interface import SQLiteRepository, from_json_column, to_json_column
from core.helpers.date_time_helper import utc_now_iso
from ..exceptions.errors import ChecklistPersistenceError
from ..models.checklist_type import CHECKLIST_TYPES, ChecklistType

log = logging.getLogger(__name__)

_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at TEXT NOT NULL,
    form_date TEXT,
    date_string TEXT,
    summary TEXT,
    payload TEXT NOT NULL,
    pdf_url TEXT
);
CREATE INDEX IF NOT EXISTS idx_{table}_form_date ON {table}(form_date);
"""


class ChecklistRepository(SQLiteRepository):
    def __init__(self, db_path: Path | str | None = None) -> None:
        if db_path is None:
            from core.config.config_loader import PLANTQC_DB_PATH  # lazy import
            db_path = PLANTQC_DB_PATH
        super().__init__(Path(db_path))
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        self.executescript("".join(_TABLE_SQL.format(table=t.table) for t in CHECKLIST_TYPES.values()))

    # ------------------------------------------------------------------ #
    def insert(
        self,
        ctype: ChecklistType,
        *,
        form_date: str,
        summary: Mapping[str, Any],
        payload: Mapping[str, Any],
        pdf_url: Optional[str],
    ) -> int:
        row = {
            "created_at": utc_now_iso(),
            "form_date": form_date,
            "date_string": summary.get("date_string", ""),
            "summary": to_json_column(dict(summary)),
            "payload": to_json_column(dict(payload)),
            "pdf_url": pdf_url,
        }
        try:
            return self.insert_row(ctype.table, row)
        except sqlite3.Error as exc:
            raise ChecklistPersistenceError(f"database/insert-failed: {exc}") from exc

    def fetch(self, ctype: ChecklistType, start_date: date | None = None,
              end_date: date | None = None) -> List[Dict[str, Any]]:
        """Rows of *ctype*, newest first, optionally limited to form dates in [start, end]."""
        sql = f"SELECT * FROM {ctype.table}"
        clauses, params = [], []
        if start_date is not None:
            clauses.append("form_date >= ?")
            params.append(start_date.isoformat())
        if end_date is not None:
            clauses.append("form_date <= ?")
            params.append(end_date.isoformat())
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY created_at DESC, id DESC"
        return [self._row_to_dict(r) for r in self.fetchall(sql, params)]

    def get(self, ctype: ChecklistType, row_id: int) -> Optional[Dict[str, Any]]:
        row = self.fetchone(f"SELECT * FROM {ctype.table} WHERE id = ?", (row_id,))
        return self._row_to_dict(row) if row else None

    @staticmethod
    def _row_to_dict(row: sqlite3.Row) -> Dict[str, Any]:
        data = dict(row)
        data["summary"] = from_json_column(data.get("summary"), {})
        data["payload"] = from_json_column(data.get("payload"), {})
        return data
