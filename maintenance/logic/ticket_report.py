"""
PDF documents of a ticket, built with the checklist renderer's blocks:

* request PDF written when a ticket is created
  (``06.{yyyy}{MMM}{dd}-{NNNN}.pdf``, NNNN = number of the ticket in its year)
* full report of a validated ticket (``Ticket_{ticket_id}_Full_Report.pdf``)
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Sequence

from checklists.logic.pdf_renderer import ChecklistPdfRenderer
from checklists.logic.pdf_tools import stamp_metadata
from checklists.models.base_form import PdfTable
from core.helpers.date_time_helper import MONTH_NAMES_SHORT
from ..models.ticket import MaintenanceTicket

REQUEST_CODE = "SOLICITUD-MTTO"
REPORT_CODE = "REPORTE-MTTO"


def request_pdf_filename(moment: datetime, number: int, suffix: str = "") -> str:
    """``06.2025DEC15-0007.pdf``; *suffix* (``a``..``z``) resolves name clashes."""
    stamp = f"{moment.year}{MONTH_NAMES_SHORT[moment.month - 1]}{moment.day:02d}"
    tail = f"-{suffix}" if suffix else ""
    return f"06.{stamp}-{number:04d}{tail}.pdf"


def full_report_filename(ticket: MaintenanceTicket) -> str:
    return f"Ticket_{ticket.ticket_id}_Full_Report.pdf"


def _request_header(ticket: MaintenanceTicket) -> List[tuple[str, str]]:
    return [
        ("Fecha", ticket.fecha),
        ("Hora", ticket.hora),
        ("Solicitante", ticket.solicitante),
        ("Zona", ticket.zona),
        ("Equipo afectado", ticket.equipo),
        ("Tipo de falla", ticket.tipo_falla),
        ("Nivel de riesgo", ticket.nivel_riesgo),
        ("Ticket", ticket.display_id),
    ]


def _text_table(title: str, value: str) -> PdfTable:
    return PdfTable(title=title, columns=[title], rows=[[value or "-"]], widths=[1.0])


def render_request_pdf(renderer: ChecklistPdfRenderer, ticket: MaintenanceTicket,
                       photos: Sequence[bytes] = (), *, author: str | None = None) -> bytes:
    title = "Solicitud de Mantenimiento"
    raw = renderer.render_document(
        title=title,
        code=REQUEST_CODE,
        header=_request_header(ticket),
        tables=[
            _text_table("Descripción del problema", ticket.descripcion),
            _text_table("Recomendación del solicitante", ticket.recomendacion),
        ],
        photos=photos,
    )
    return stamp_metadata(raw, title=f"{title} {ticket.display_id}", subject=REQUEST_CODE, author=author)


def render_full_report(renderer: ChecklistPdfRenderer, ticket: MaintenanceTicket,
                       photos: Sequence[bytes] = (), *, validated_at: str,
                       comment: str = "", author: str | None = None) -> bytes:
    title = "Reporte Completo de Mantenimiento"
    work = PdfTable(
        title="2. Trabajo Realizado",
        columns=["Campo", "Valor"],
        rows=[
            ["Técnico responsable", ticket.tecnico],
            ["Prioridad", ticket.prioridad],
            ["Fecha programada", ticket.fecha_programada],
            ["Fecha de ejecución", ticket.fecha_ejecucion or ""],
            ["Acción realizada", ticket.accion_realizada],
        ],
        widths=[0.3, 0.7],
    )
    validation = PdfTable(
        title="3. Validación",
        columns=["Campo", "Valor"],
        rows=[["Validado por", ticket.validado_por], ["Fecha", validated_at],
              ["Comentario", comment or "-"]],
        widths=[0.3, 0.7],
    )
    history = PdfTable(title="Historial", columns=["Entrada"],
                       rows=[[entry] for entry in ticket.history()], widths=[1.0])
    raw = renderer.render_document(
        title=title,
        code=f"{REPORT_CODE} {ticket.display_id}",
        header=_request_header(ticket),
        tables=[
            _text_table("1. Descripción del problema", ticket.descripcion),
            _text_table("Recomendación del solicitante", ticket.recomendacion),
            work,
            validation,
            history,
        ],
        photos=photos,
    )
    return stamp_metadata(raw, title=f"{title} {ticket.display_id}", subject=REPORT_CODE, author=author)
