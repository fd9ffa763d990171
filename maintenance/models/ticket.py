"""
Maintenance ticket model.

A ticket is one maintenance request ("solicitud de mantenimiento"). The
``observaciones`` column is its append-only history: entries are separated
by a blank line and start with ``[dd-MM-yyyy HH:mm:ss] who - action``.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from core.common.db_interface import from_json_column, to_json_column

HISTORY_SEPARATOR = "\n\n"
FINAL_RESOLVED = "resuelta"


class TicketStatus(str, Enum):
    PENDIENTE = "pendiente"
    PROGRAMADA = "programada"
    EN_EJECUCION = "en_ejecucion"
    POR_VALIDAR = "por_validar"
    FINALIZADA = "finalizada"
    NO_PROCEDE = "no procede"
    DERIVADA = "derivada"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> Optional["TicketStatus"]:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return None


_STATUS_LABELS = {
    TicketStatus.PENDIENTE: "Pendiente",
    TicketStatus.PROGRAMADA: "Programada",
    TicketStatus.EN_EJECUCION: "En ejecución",
    TicketStatus.POR_VALIDAR: "Por validar",
    TicketStatus.FINALIZADA: "Finalizada",
    TicketStatus.NO_PROCEDE: "No procede",
    TicketStatus.DERIVADA: "Derivada",
}


class RiskLevel(str, Enum):
    CRITICO = "Crítico"
    ALTO = "Alto"
    MEDIO = "Medio"
    BAJO = "Bajo"


@dataclass
class MaintenanceTicket:
    id: str
    fecha: str                       # YYYY-MM-DD, plant time
    hora: str                        # HH:MM:SS, plant time
    solicitante: str
    zona: str
    tipo_falla: str
    descripcion: str
    ticket_id: Optional[int] = None  # sequential number, assigned on insert
    equipo: str = ""
    nivel_riesgo: str = ""
    recomendacion: str = ""
    fotos: List[str] = field(default_factory=list)   # object names in the photo bucket
    estado: TicketStatus = TicketStatus.PENDIENTE
    estado_final: Optional[str] = None
    tecnico: str = ""
    prioridad: str = ""
    fecha_programada: str = ""
    fecha_ejecucion: Optional[str] = None            # ISO date-time of the resolution
    accion_realizada: str = ""
    observaciones: str = ""
    validado_por: str = ""
    pdf_url: Optional[str] = None                    # full report of a closed ticket
    solicitud_pdf_url: Optional[str] = None          # request PDF written on creation

    # ------------------------------------------------------------------ #
    def append_history(self, entry: str) -> None:
        entry = entry.strip()
        if not entry:
            return
        self.observaciones = (
            f"{self.observaciones}{HISTORY_SEPARATOR}{entry}" if self.observaciones else entry
        )

    def history(self) -> List[str]:
        return [e for e in self.observaciones.split(HISTORY_SEPARATOR) if e.strip()]

    @property
    def display_id(self) -> str:
        return f"#{self.ticket_id}" if self.ticket_id is not None else self.id[:8]

    # ------------------------------------------------------------------ #
    #  Row mapping                                                       #
    # ------------------------------------------------------------------ #
    def to_row(self) -> Dict[str, Any]:
        row = {f.name: getattr(self, f.name) for f in fields(self)}
        row["estado"] = self.estado.value
        row["fotos"] = to_json_column(self.fotos)
        return row

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "MaintenanceTicket":
        data = {f.name: row[f.name] for f in fields(cls) if f.name in row.keys()}
        data["fotos"] = from_json_column(data.get("fotos"), []) or []
        data["estado"] = TicketStatus.parse(data.get("estado")) or TicketStatus.PENDIENTE
        for name in ("equipo", "nivel_riesgo", "recomendacion", "tecnico", "prioridad",
                     "fecha_programada", "accion_realizada", "observaciones", "validado_por"):
            data[name] = data.get(name) or ""
        return cls(**data)
