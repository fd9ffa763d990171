"""
Filtering, sorting, paging and KPIs over a list of tickets.

Pure functions; the list view fetches all tickets once and works in memory.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from ..models.ticket import MaintenanceTicket, TicketStatus

STATUS_GROUPS: Dict[str, tuple[TicketStatus, ...]] = {
    "pendiente": (TicketStatus.PENDIENTE,),
    "en_proceso": (TicketStatus.PROGRAMADA, TicketStatus.EN_EJECUCION, TicketStatus.DERIVADA),
    "validacion": (TicketStatus.POR_VALIDAR,),
    "cerradas": (TicketStatus.FINALIZADA, TicketStatus.NO_PROCEDE),
}

_CRITICALITY = (("crítico", 0), ("critico", 0), ("alto", 1), ("medio", 2), ("bajo", 3))

DEFAULT_PAGE_SIZE = 20


def criticality_rank(nivel_riesgo: Optional[str]) -> int:
    """0 for critical ... 3 for low; 99 when the level is unknown."""
    text = (nivel_riesgo or "").lower()
    for needle, rank in _CRITICALITY:
        if needle in text:
            return rank
    return 99


def _created(ticket: MaintenanceTicket) -> str:
    return f"{ticket.fecha} {ticket.hora}"


def default_sort(tickets: Iterable[MaintenanceTicket]) -> List[MaintenanceTicket]:
    """Most critical first; newest first within the same level."""
    newest_first = sorted(tickets, key=_created, reverse=True)
    return sorted(newest_first, key=lambda t: criticality_rank(t.nivel_riesgo))


def sort_by(tickets: Iterable[MaintenanceTicket], column: str, *, descending: bool = False) -> List[MaintenanceTicket]:
    """Sort on a ticket attribute; text compares case-insensitively, empty values go last."""
    def value(ticket: MaintenanceTicket):
        raw = getattr(ticket, column, None)
        if isinstance(raw, TicketStatus):
            raw = raw.value
        if isinstance(raw, str):
            raw = raw.lower()
        return raw

    tickets = list(tickets)
    present = [t for t in tickets if value(t) not in (None, "")]
    missing = [t for t in tickets if value(t) in (None, "")]
    return sorted(present, key=value, reverse=descending) + missing


@dataclass
class TicketFilter:
    search: str = ""
    estado: str = ""
    criticidad: str = ""
    zona: str = ""
    equipo: str = ""
    tecnico: str = ""
    group: str = ""

    def matches(self, ticket: MaintenanceTicket) -> bool:
        needle = self.search.strip().lower()
        if needle:
            haystack = [str(ticket.ticket_id or ""), ticket.zona, ticket.equipo,
                        ticket.solicitante, ticket.tecnico]
            if not any(needle in (h or "").lower() for h in haystack):
                return False
        if self.estado:
            wanted = self.estado.strip().lower()
            if wanted not in (ticket.estado.value, (ticket.estado_final or "").lower()):
                return False
        if self.criticidad and self.criticidad.lower() not in (ticket.nivel_riesgo or "").lower():
            return False
        for attr in ("zona", "equipo", "tecnico"):
            wanted = getattr(self, attr)
            if wanted and (getattr(ticket, attr) or "") != wanted:
                return False
        if self.group and ticket.estado not in STATUS_GROUPS.get(self.group, ()):
            return False
        return True

    def apply(self, tickets: Iterable[MaintenanceTicket]) -> List[MaintenanceTicket]:
        return [t for t in tickets if self.matches(t)]


@dataclass
class Page:
    items: List[MaintenanceTicket]
    number: int          # 1-based, clamped to the available pages
    pages: int
    total: int


def paginate(tickets: Sequence[MaintenanceTicket], page: int = 1, size: int = DEFAULT_PAGE_SIZE) -> Page:
    size = max(1, size)
    pages = max(1, math.ceil(len(tickets) / size))
    number = min(max(1, page), pages)
    start = (number - 1) * size
    return Page(items=list(tickets[start:start + size]), number=number, pages=pages, total=len(tickets))


@dataclass
class TicketKpis:
    total: int = 0
    by_status: Dict[str, int] = field(default_factory=dict)
    critical_high_pct: float = 0.0
    mttr_hours: Optional[float] = None


def _resolution_hours(ticket: MaintenanceTicket) -> Optional[float]:
    if not ticket.fecha_ejecucion:
        return None
    try:
        opened = datetime.fromisoformat(f"{ticket.fecha}T{ticket.hora}")
        closed = datetime.fromisoformat(ticket.fecha_ejecucion)
    except ValueError:
        return None
    if opened.tzinfo is not None or closed.tzinfo is not None:
        opened, closed = opened.replace(tzinfo=None), closed.replace(tzinfo=None)
    hours = (closed - opened).total_seconds() / 3600
    return hours if hours > 0 else None


def compute_kpis(tickets: Sequence[MaintenanceTicket]) -> TicketKpis:
    """Counts per status, share of critical/high tickets and mean time to repair."""
    kpis = TicketKpis(total=len(tickets))
    for status in TicketStatus:
        kpis.by_status[status.value] = 0
    for ticket in tickets:
        kpis.by_status[ticket.estado.value] += 1
    if tickets:
        urgent = sum(1 for t in tickets if criticality_rank(t.nivel_riesgo) in (0, 1))
        kpis.critical_high_pct = round(urgent * 100 / len(tickets), 1)
    durations = [h for h in (_resolution_hours(t) for t in tickets) if h is not None]
    if durations:
        kpis.mttr_hours = round(sum(durations) / len(durations), 1)
    return kpis
