"""
ChecklistHistoryView – submitted checklists of one type within a date range.

Rows come from ChecklistRepository.fetch (inclusive form-date bounds, newest
first). Double click or "Abrir PDF" opens the stored PDF.
"""
from __future__ import annotations

import logging
import os
import platform
import subprocess
import tkinter as tk
import webbrowser
from datetime import date, timedelta
from pathlib import Path
from tkinter import messagebox, ttk
from typing import Any, Dict, List, Optional
from urllib.parse import unquote, urlparse

from core.helpers.date_time_helper import format_date_display, local_now, utc_to_local_str
from ..models.checklist_type import CHECKLIST_TYPES, ChecklistType
from ..repository.checklist_repository import ChecklistRepository

log = logging.getLogger(__name__)

DEFAULT_RANGE_DAYS = 30

_COLUMNS = (
    ("date_string", "Fecha", 110),
    ("created_at", "Enviado", 150),
    ("pdf_url", "PDF", 420),
)


def open_document(url: str) -> None:
    """Open a stored PDF; local ``file://`` objects go to the desktop viewer."""
    parsed = urlparse(url)
    if parsed.scheme != "file":
        webbrowser.open(url)
        return
    path = Path(unquote(parsed.path))
    if platform.system() == "Windows":
        os.startfile(str(path))  # type: ignore[attr-defined]
    elif platform.system() == "Darwin":
        subprocess.Popen(["open", str(path)])
    else:
        subprocess.Popen(["xdg-open", str(path)])


class ChecklistHistoryView(ttk.Frame):
    def __init__(self, parent: tk.Misc, *, repository: ChecklistRepository) -> None:
        super().__init__(parent)
        self._repo = repository
        self._types: Dict[str, ChecklistType] = {t.title: t for t in CHECKLIST_TYPES.values()}
        self._rows: Dict[str, Dict[str, Any]] = {}

        today = local_now().date()
        self.type_var = tk.StringVar(value=next(iter(self._types)))
        self.from_var = tk.StringVar(value=(today - timedelta(days=DEFAULT_RANGE_DAYS)).isoformat())
        self.to_var = tk.StringVar(value=today.isoformat())

        self._build_ui()
        self.reload()

    # --------------------------------------------------------------- UI build
    def _build_ui(self) -> None:
        self.columnconfigure(0, weight=1)
        self.rowconfigure(1, weight=1)

        filters = ttk.Frame(self)
        filters.grid(row=0, column=0, sticky="ew", padx=12, pady=(12, 6))
        ttk.Label(filters, text="Checklist").pack(side="left")
        cb = ttk.Combobox(filters, textvariable=self.type_var, state="readonly", width=36,
                          values=list(self._types))
        cb.pack(side="left", padx=(4, 12))
        cb.bind("<<ComboboxSelected>>", lambda e: self.reload())
        ttk.Label(filters, text="Desde").pack(side="left")
        ttk.Entry(filters, textvariable=self.from_var, width=12).pack(side="left", padx=(4, 12))
        ttk.Label(filters, text="Hasta").pack(side="left")
        ttk.Entry(filters, textvariable=self.to_var, width=12).pack(side="left", padx=(4, 12))
        ttk.Button(filters, text="Buscar", command=self.reload).pack(side="left")
        ttk.Button(filters, text="Abrir PDF", command=self._open_selected).pack(side="right")

        body = ttk.Frame(self)
        body.grid(row=1, column=0, sticky="nsew", padx=12, pady=(0, 4))
        body.columnconfigure(0, weight=1)
        body.rowconfigure(0, weight=1)
        self.tree = ttk.Treeview(body, columns=[c for c, _t, _w in _COLUMNS], show="headings",
                                 selectmode="browse")
        for column, title, width in _COLUMNS:
            self.tree.heading(column, text=title)
            self.tree.column(column, width=width, anchor="w")
        self.tree.grid(row=0, column=0, sticky="nsew")
        sb = ttk.Scrollbar(body, orient="vertical", command=self.tree.yview)
        sb.grid(row=0, column=1, sticky="ns")
        self.tree.configure(yscrollcommand=sb.set)
        self.tree.bind("<Double-1>", lambda e: self._open_selected())

        self.count_var = tk.StringVar()
        ttk.Label(self, textvariable=self.count_var).grid(row=2, column=0, sticky="w", padx=12, pady=(0, 12))

    # ------------------------------------------------------------------ data
    def _parse_range(self) -> Optional[tuple[date, date]]:
        try:
            start = date.fromisoformat(self.from_var.get().strip())
            end = date.fromisoformat(self.to_var.get().strip())
        except ValueError:
            messagebox.showwarning("Historial", "Fechas en formato YYYY-MM-DD", parent=self)
            return None
        if start > end:
            start, end = end, start
        return start, end

    def reload(self) -> None:
        bounds = self._parse_range()
        if bounds is None:
            return
        ctype = self._types[self.type_var.get()]
        rows: List[Dict[str, Any]] = self._repo.fetch(ctype, *bounds)
        self.tree.delete(*self.tree.get_children())
        self._rows.clear()
        for row in rows:
            iid = self.tree.insert("", "end", values=(
                row.get("date_string") or format_date_display(row.get("form_date") or ""),
                utc_to_local_str(row["created_at"]),
                row.get("pdf_url") or "",
            ))
            self._rows[iid] = row
        self.count_var.set(f"{len(rows)} registros")
        log.debug("history of %s: %d rows", ctype.key, len(rows))

    def _open_selected(self) -> None:
        sel = self.tree.selection()
        row = self._rows.get(sel[0]) if sel else None
        if row is None or not row.get("pdf_url"):
            return
        try:
            open_document(row["pdf_url"])
        except OSError as exc:
            messagebox.showerror("Historial", str(exc), parent=self)
