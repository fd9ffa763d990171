"""
TicketListView – list/detail UI for maintenance tickets.

UI only. Filtering, sorting and KPIs live in maintenance.logic.ticket_query,
state changes in maintenance.logic.ticket_service. The view:
- shows KPI counters and the filtered, paged ticket list
- offers the actions the workflow allows for the selected ticket
- collects the dialog input each action needs
"""
from __future__ import annotations

import logging
import tkinter as tk
from pathlib import Path
from tkinter import filedialog, messagebox, simpledialog, ttk
from typing import Dict, List, Optional

from checklists.adapters.filesystem_storage_adapter import FilesystemStorageAdapter
from ..exceptions.errors import MaintenanceError, TicketValidationError
from ..logic.ticket_query import (
    STATUS_GROUPS,
    TicketFilter,
    compute_kpis,
    default_sort,
    paginate,
    sort_by,
)
from ..logic.ticket_service import MAX_PHOTOS, TicketService
from ..models.ticket import MaintenanceTicket, RiskLevel, TicketStatus
from ..repository.ticket_repository import TicketRepositorySQLite

log = logging.getLogger(__name__)

_ACTION_LABELS = {
    "assign": "Asignar",
    "start": "Iniciar",
    "resolve": "Resolver",
    "approve": "Validar",
    "reject": "Devolver",
    "dismiss": "No procede",
    "derive": "Derivar",
}

_GROUP_LABELS = {
    "": "Todas",
    "pendiente": "Pendientes",
    "en_proceso": "En proceso",
    "validacion": "Por validar",
    "cerradas": "Cerradas",
}

_COLUMNS = (
    ("ticket_id", "Ticket", 70),
    ("fecha", "Fecha", 90),
    ("zona", "Zona", 120),
    ("equipo", "Equipo", 120),
    ("tipo_falla", "Tipo de falla", 120),
    ("nivel_riesgo", "Riesgo", 80),
    ("estado", "Estado", 100),
    ("tecnico", "Técnico", 120),
)


class TicketListView(ttk.Frame):
    _FEATURE_ID = "maintenance"
    PAGE_SIZE = 20

    # ------------------------------------------------------------------ init
    def __init__(self, parent: tk.Misc, *, service: Optional[TicketService] = None) -> None:
        super().__init__(parent)
        self._service = service or TicketService(
            repository=TicketRepositorySQLite(),
            storage=FilesystemStorageAdapter(),
        )
        self._tickets: List[MaintenanceTicket] = []
        self._rows: Dict[str, MaintenanceTicket] = {}
        self._page = 1
        self._sort_column: Optional[str] = None
        self._sort_desc = False

        self._build_ui()
        self.reload()

    # --------------------------------------------------------------- UI build
    def _build_ui(self) -> None:
        self.columnconfigure(0, weight=1)
        self.rowconfigure(3, weight=1)

        header = ttk.Frame(self)
        header.grid(row=0, column=0, sticky="ew", padx=12, pady=(12, 4))
        ttk.Label(header, text="Mantenimiento", font=("Segoe UI", 16, "bold")).pack(side="left")
        ttk.Button(header, text="Nueva solicitud", command=self._create).pack(side="right")

        self.kpi_var = tk.StringVar()
        ttk.Label(self, textvariable=self.kpi_var).grid(row=1, column=0, sticky="w", padx=12)

        filters = ttk.Frame(self)
        filters.grid(row=2, column=0, sticky="ew", padx=12, pady=6)
        self.search_var = tk.StringVar()
        self.group_var = tk.StringVar(value=_GROUP_LABELS[""])
        self.risk_var = tk.StringVar()
        ttk.Label(filters, text="Buscar").pack(side="left")
        entry = ttk.Entry(filters, textvariable=self.search_var, width=24)
        entry.pack(side="left", padx=(4, 12))
        entry.bind("<Return>", lambda e: self._refilter())
        ttk.Label(filters, text="Estado").pack(side="left")
        group = ttk.Combobox(filters, textvariable=self.group_var, state="readonly", width=14,
                             values=list(_GROUP_LABELS.values()))
        group.pack(side="left", padx=(4, 12))
        group.bind("<<ComboboxSelected>>", lambda e: self._refilter())
        ttk.Label(filters, text="Riesgo").pack(side="left")
        risk = ttk.Combobox(filters, textvariable=self.risk_var, state="readonly", width=10,
                            values=[""] + [r.value for r in RiskLevel])
        risk.pack(side="left", padx=(4, 12))
        risk.bind("<<ComboboxSelected>>", lambda e: self._refilter())
        ttk.Button(filters, text="Actualizar", command=self.reload).pack(side="left")

        body = ttk.Panedwindow(self, orient="horizontal")
        body.grid(row=3, column=0, sticky="nsew", padx=12, pady=4)

        left = ttk.Frame(body)
        left.columnconfigure(0, weight=1)
        left.rowconfigure(0, weight=1)
        body.add(left, weight=2)
        self.tree = ttk.Treeview(left, columns=[c for c, _t, _w in _COLUMNS], show="headings",
                                 selectmode="browse")
        for column, title, width in _COLUMNS:
            self.tree.heading(column, text=title, command=lambda c=column: self._sort(c))
            self.tree.column(column, width=width, anchor="w")
        self.tree.grid(row=0, column=0, sticky="nsew")
        sb = ttk.Scrollbar(left, orient="vertical", command=self.tree.yview)
        sb.grid(row=0, column=1, sticky="ns")
        self.tree.configure(yscrollcommand=sb.set)
        self.tree.bind("<<TreeviewSelect>>", lambda e: self._on_select())

        pager = ttk.Frame(left)
        pager.grid(row=1, column=0, sticky="ew", pady=(4, 0))
        ttk.Button(pager, text="◀", width=3, command=lambda: self._goto(self._page - 1)).pack(side="left")
        self.page_var = tk.StringVar()
        ttk.Label(pager, textvariable=self.page_var).pack(side="left", padx=6)
        ttk.Button(pager, text="▶", width=3, command=lambda: self._goto(self._page + 1)).pack(side="left")

        right = ttk.Frame(body)
        right.columnconfigure(0, weight=1)
        right.rowconfigure(0, weight=1)
        body.add(right, weight=1)
        self.detail = tk.Text(right, wrap="word", height=20, width=50, state="disabled")
        self.detail.grid(row=0, column=0, sticky="nsew")
        self.actions = ttk.Frame(right)
        self.actions.grid(row=1, column=0, sticky="ew", pady=(6, 0))

    # ------------------------------------------------------------------ data
    def reload(self) -> None:
        try:
            self._tickets = self._service.list_tickets()
        except MaintenanceError as exc:
            log.error("tickets could not be loaded: %s", exc)
            messagebox.showerror("Mantenimiento", str(exc), parent=self)
            self._tickets = []
        kpis = compute_kpis(self._tickets)
        mttr = f"{kpis.mttr_hours} h" if kpis.mttr_hours is not None else "-"
        self.kpi_var.set(
            f"Total: {kpis.total}   Pendientes: {kpis.by_status[TicketStatus.PENDIENTE.value]}   "
            f"Por validar: {kpis.by_status[TicketStatus.POR_VALIDAR.value]}   "
            f"Crítico/Alto: {kpis.critical_high_pct}%   MTTR: {mttr}"
        )
        self._refilter()

    def _current_filter(self) -> TicketFilter:
        group = next((key for key, label in _GROUP_LABELS.items() if label == self.group_var.get()), "")
        return TicketFilter(search=self.search_var.get(), criticidad=self.risk_var.get(),
                            group=group if group in STATUS_GROUPS else "")

    def _visible(self) -> List[MaintenanceTicket]:
        tickets = self._current_filter().apply(self._tickets)
        if self._sort_column:
            return sort_by(tickets, self._sort_column, descending=self._sort_desc)
        return default_sort(tickets)

    def _refilter(self) -> None:
        self._page = 1
        self._render()

    def _goto(self, page: int) -> None:
        self._page = page
        self._render()

    def _sort(self, column: str) -> None:
        if self._sort_column == column:
            self._sort_desc = not self._sort_desc
        else:
            self._sort_column, self._sort_desc = column, False
        self._render()

    def _render(self) -> None:
        page = paginate(self._visible(), self._page, self.PAGE_SIZE)
        self._page = page.number
        self.page_var.set(f"Página {page.number} de {page.pages} ({page.total})")
        self.tree.delete(*self.tree.get_children())
        self._rows.clear()
        for ticket in page.items:
            iid = self.tree.insert("", "end", values=(
                ticket.display_id, ticket.fecha, ticket.zona, ticket.equipo, ticket.tipo_falla,
                ticket.nivel_riesgo, ticket.estado.label, ticket.tecnico,
            ))
            self._rows[iid] = ticket
        self._on_select()

    # --------------------------------------------------------------- detail
    def _selected(self) -> Optional[MaintenanceTicket]:
        sel = self.tree.selection()
        return self._rows.get(sel[0]) if sel else None

    def _on_select(self) -> None:
        ticket = self._selected()
        self.detail.configure(state="normal")
        self.detail.delete("1.0", "end")
        for child in self.actions.winfo_children():
            child.destroy()
        if ticket is not None:
            lines = [
                f"Ticket {ticket.display_id} – {ticket.estado.label}",
                f"{ticket.fecha} {ticket.hora} · {ticket.solicitante}",
                f"Zona: {ticket.zona}   Equipo: {ticket.equipo or '-'}",
                f"Falla: {ticket.tipo_falla}   Riesgo: {ticket.nivel_riesgo or '-'}",
                "",
                ticket.descripcion,
                "",
                "Historial:",
                *ticket.history(),
            ]
            if ticket.pdf_url:
                lines += ["", f"Reporte: {ticket.pdf_url}"]
            if ticket.solicitud_pdf_url:
                lines += [f"Solicitud: {ticket.solicitud_pdf_url}"]
            self.detail.insert("1.0", "\n".join(lines))
            for action in self._service.allowed_actions(ticket):
                ttk.Button(self.actions, text=_ACTION_LABELS.get(action, action),
                           command=lambda a=action, t=ticket: self._run(a, t)).pack(side="left", padx=(0, 6))
        self.detail.configure(state="disabled")

    # --------------------------------------------------------------- actions
    def _ask(self, title: str, prompt: str) -> Optional[str]:
        return simpledialog.askstring(title, prompt, parent=self)

    def _run(self, action: str, ticket: MaintenanceTicket) -> None:
        title = f"{_ACTION_LABELS.get(action, action)} {ticket.display_id}"
        svc = self._service
        try:
            if action == "assign":
                technician = self._ask(title, "Técnico:")
                if technician is None:
                    return
                priority = self._ask(title, "Prioridad:") or ""
                scheduled = self._ask(title, "Fecha programada (YYYY-MM-DD):") or ""
                svc.assign(ticket.id, technician, priority=priority, scheduled_date=scheduled)
            elif action == "start":
                svc.start(ticket.id)
            elif action == "resolve":
                done = self._ask(title, "Acción realizada:")
                if done is None:
                    return
                svc.resolve(ticket.id, done, observations=self._ask(title, "Observaciones:") or "")
            elif action == "approve":
                validator = self._ask(title, "Validado por:")
                if validator is None:
                    return
                svc.approve(ticket.id, validator, comment=self._ask(title, "Comentario:") or "")
            elif action == "reject":
                validator = self._ask(title, "Validador:")
                reason = self._ask(title, "Motivo de la devolución:") if validator is not None else None
                if reason is None:
                    return
                svc.reject(ticket.id, validator or "", reason,
                           reassign_to=self._ask(title, "Reasignar a (opcional):"))
            elif action in ("dismiss", "derive"):
                reason = self._ask(title, "Motivo:")
                if reason is None:
                    return
                getattr(svc, action)(ticket.id, reason)
        except TicketValidationError as exc:
            messagebox.showwarning(title, "\n".join(exc.errors), parent=self)
            return
        except MaintenanceError as exc:
            messagebox.showerror(title, str(exc), parent=self)
            return
        self.reload()

    def _create(self) -> None:
        zona = self._ask("Nueva solicitud", "Zona:")
        if zona is None:
            return
        tipo = self._ask("Nueva solicitud", "Tipo de falla:") or ""
        descripcion = self._ask("Nueva solicitud", "Descripción:") or ""
        equipo = self._ask("Nueva solicitud", "Equipo afectado:") or ""
        riesgo = self._ask("Nueva solicitud", "Nivel de riesgo (Crítico/Alto/Medio/Bajo):") or ""
        paths = filedialog.askopenfilenames(
            parent=self, title=f"Fotos (máx. {MAX_PHOTOS})",
            filetypes=[("Imágenes", "*.png *.jpg *.jpeg *.webp"), ("Todos", "*.*")],
        )
        try:
            photos = [(Path(p).name, Path(p).read_bytes()) for p in paths]
            ticket = self._service.create(solicitante="", zona=zona, tipo_falla=tipo,
                                          descripcion=descripcion, equipo=equipo,
                                          nivel_riesgo=riesgo, photos=photos)
        except OSError as exc:
            messagebox.showerror("Nueva solicitud", str(exc), parent=self)
            return
        except TicketValidationError as exc:
            messagebox.showwarning("Nueva solicitud", "\n".join(exc.errors), parent=self)
            return
        except MaintenanceError as exc:
            messagebox.showerror("Nueva solicitud", str(exc), parent=self)
            return
        messagebox.showinfo("Nueva solicitud", f"Solicitud {ticket.display_id} registrada", parent=self)
        self.reload()
