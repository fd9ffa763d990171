"""
===============================================================================
RowEditor – generic grid editor for the repeating rows of a checklist
-------------------------------------------------------------------------------
Purpose
    - One grid row per model object (staff member item, personnel entry,
      bag entry, participant, ...), one column per ``Column``.
    - Columns read and write the model through ``get``/``set`` callables, so
      the editor knows nothing about the concrete row type.
    - Optional "Add" / "Remove" buttons when a ``factory`` is given.

Notes
    - A setter may return ``False`` to reject a value; the cell then shows
      the model value again.
    - After every edit all cells are re-read from the model, since setters
      may clear dependent values.
===============================================================================
"""
from __future__ import annotations

import tkinter as tk
from dataclasses import dataclass
from tkinter import ttk
from typing import Any, Callable, List, Optional, Sequence


@dataclass(frozen=True)
class Column:
    label: str
    get: Callable[[Any], Any]
    set: Optional[Callable[[Any, str], Optional[bool]]] = None
    kind: str = "entry"                 # entry | combo | label
    values: Sequence[str] = ()
    width: int = 12


class RowEditor(ttk.Frame):
    def __init__(
        self,
        parent: tk.Misc,
        *,
        columns: Sequence[Column],
        rows: Callable[[], List[Any]],
        on_change: Optional[Callable[[], None]] = None,
        factory: Optional[Callable[[], Any]] = None,
        remove: Optional[Callable[[int], None]] = None,
        add_label: str = "Add Row",
    ) -> None:
        super().__init__(parent)
        self._columns = list(columns)
        self._rows = rows
        self._on_change = on_change
        self._factory = factory
        self._remove = remove
        self._cells: List[tuple[tk.StringVar, Column, Any]] = []

        self._grid = ttk.Frame(self)
        self._grid.grid(row=0, column=0, sticky="nsew")
        if factory is not None:
            ttk.Button(self, text=add_label, command=self._add).grid(
                row=1, column=0, sticky="w", pady=(6, 0)
            )
        self.refresh()

    # ------------------------------------------------------------------ #
    def refresh(self) -> None:
        """Rebuild all cells from the model."""
        for child in self._grid.winfo_children():
            child.destroy()
        self._cells.clear()

        for c, col in enumerate(self._columns):
            ttk.Label(self._grid, text=col.label, font=("TkDefaultFont", 9, "bold")).grid(
                row=0, column=c, sticky="w", padx=2, pady=(0, 2)
            )
        for r, obj in enumerate(self._rows(), start=1):
            for c, col in enumerate(self._columns):
                self._cell(r, c, col, obj)
            if self._remove is not None:
                ttk.Button(self._grid, text="✕", width=3,
                           command=lambda i=r - 1: self._remove_row(i)).grid(row=r, column=len(self._columns), padx=2)

    def _cell(self, r: int, c: int, col: Column, obj: Any) -> None:
        var = tk.StringVar(value=_text(col.get(obj)))
        self._cells.append((var, col, obj))
        if col.kind == "label":
            ttk.Label(self._grid, textvariable=var, width=col.width).grid(row=r, column=c, sticky="w", padx=2)
            return
        if col.kind == "combo":
            widget = ttk.Combobox(self._grid, textvariable=var, values=list(col.values),
                                  width=col.width, state="readonly")
            widget.bind("<<ComboboxSelected>>", lambda _e: self._commit(col, obj, var))
        else:
            widget = ttk.Entry(self._grid, textvariable=var, width=col.width)
            widget.bind("<FocusOut>", lambda _e: self._commit(col, obj, var))
            widget.bind("<Return>", lambda _e: self._commit(col, obj, var))
        if col.set is None:
            widget.state(["disabled"])
        widget.grid(row=r, column=c, sticky="ew", padx=2, pady=1)

    def _commit(self, col: Column, obj: Any, var: tk.StringVar) -> None:
        if col.set is None:
            return
        value = var.get()
        if _text(col.get(obj)) == value:
            return
        if col.set(obj, value) is False:
            self.bell()
        for cell_var, cell_col, cell_obj in self._cells:
            cell_var.set(_text(cell_col.get(cell_obj)))
        if self._on_change:
            self._on_change()

    # ------------------------------------------------------------------ #
    def _add(self) -> None:
        self._factory()
        self.refresh()
        if self._on_change:
            self._on_change()

    def _remove_row(self, index: int) -> None:
        self._remove(index)
        self.refresh()
        if self._on_change:
            self._on_change()


def _text(value: Any) -> str:
    return "" if value is None else str(value)
