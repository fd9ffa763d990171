"""
log_view.py

Audit-Log-Ansicht (read-only).

Filtert nach Feature, Event, Level und Referenz; ohne Filter werden die
neuesten Einträge über ``fetch_logs`` geladen, sonst über ``query_logs``.
"""
from __future__ import annotations

import logging
import tkinter as tk
from tkinter import ttk
from typing import Any, Dict, Optional

from core.qm_logging.logic.logger import Logger, get_logger

log = logging.getLogger(__name__)

FEATURES = ("", "checklists", "maintenance")
LEVELS = ("", "INFO", "WARNING", "ERROR")
LIMITS = ("100", "500", "1000")

_COLUMNS = (
    ("timestamp", "Fecha", 140),
    ("username", "Usuario", 110),
    ("feature", "Módulo", 100),
    ("event", "Evento", 120),
    ("reference_id", "Referencia", 110),
    ("message", "Mensaje", 360),
    ("log_level", "Nivel", 70),
)


class LogView(ttk.Frame):
    def __init__(self, parent: tk.Misc, *, logger: Optional[Logger] = None) -> None:
        super().__init__(parent)
        self._logger = logger or get_logger()

        self.feature_var = tk.StringVar()
        self.event_var = tk.StringVar()
        self.level_var = tk.StringVar()
        self.reference_var = tk.StringVar()
        self.limit_var = tk.StringVar(value=LIMITS[0])

        self._build_ui()
        self.reload()

    def _build_ui(self) -> None:
        filters = ttk.LabelFrame(self, text="Filtros")
        filters.pack(fill=tk.X, padx=5, pady=5)

        ttk.Label(filters, text="Módulo:").grid(row=0, column=0, sticky=tk.W, padx=2, pady=2)
        ttk.Combobox(filters, textvariable=self.feature_var, values=FEATURES,
                     state="readonly", width=14).grid(row=0, column=1, padx=2, pady=2)
        ttk.Label(filters, text="Evento:").grid(row=0, column=2, sticky=tk.W, padx=2, pady=2)
        ttk.Entry(filters, textvariable=self.event_var, width=18).grid(row=0, column=3, padx=2, pady=2)

        ttk.Label(filters, text="Nivel:").grid(row=1, column=0, sticky=tk.W, padx=2, pady=2)
        ttk.Combobox(filters, textvariable=self.level_var, values=LEVELS,
                     state="readonly", width=14).grid(row=1, column=1, padx=2, pady=2)
        ttk.Label(filters, text="Referencia:").grid(row=1, column=2, sticky=tk.W, padx=2, pady=2)
        ttk.Entry(filters, textvariable=self.reference_var, width=18).grid(row=1, column=3, padx=2, pady=2)

        ttk.Label(filters, text="Máx.:").grid(row=0, column=4, sticky=tk.W, padx=(12, 2), pady=2)
        ttk.Combobox(filters, textvariable=self.limit_var, values=LIMITS,
                     state="readonly", width=6).grid(row=0, column=5, padx=2, pady=2)
        ttk.Button(filters, text="Actualizar", command=self.reload).grid(row=1, column=5, padx=2, pady=2)

        body = ttk.Frame(self)
        body.pack(fill=tk.BOTH, expand=True, padx=5, pady=5)
        body.columnconfigure(0, weight=1)
        body.rowconfigure(0, weight=1)
        self.tree = ttk.Treeview(body, columns=[c for c, _t, _w in _COLUMNS], show="headings")
        for column, title, width in _COLUMNS:
            self.tree.heading(column, text=title)
            self.tree.column(column, width=width, anchor=tk.W)
        self.tree.grid(row=0, column=0, sticky="nsew")
        sb = ttk.Scrollbar(body, orient="vertical", command=self.tree.yview)
        sb.grid(row=0, column=1, sticky="ns")
        self.tree.configure(yscrollcommand=sb.set)

    def _filters(self) -> Dict[str, Any]:
        values = {
            "feature": self.feature_var.get(),
            "event": self.event_var.get().strip(),
            "level": self.level_var.get(),
            "reference_id": self.reference_var.get().strip(),
        }
        return {k: v for k, v in values.items() if v}

    def reload(self) -> None:
        limit = int(self.limit_var.get())
        filters = self._filters()
        if filters:
            entries = self._logger.query_logs(limit=limit, **filters)
        else:
            entries = self._logger.fetch_logs(limit=limit)

        self.tree.delete(*self.tree.get_children())
        for entry in entries:
            data = entry.as_dict()
            self.tree.insert("", "end", values=(
                data["timestamp"],
                data["username"] or (f"ID:{data['user_id']}" if data["user_id"] else "unknown"),
                data["feature"],
                data["event"],
                data["reference_id"] or "",
                data["message"] or "",
                data["log_level"],
            ))
        log.debug("audit log view: %d entries (%s)", len(entries), filters or "no filter")
