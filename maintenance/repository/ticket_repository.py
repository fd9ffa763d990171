"""
TicketRepositorySQLite
======================

Table ``solicitudes_mantenimiento``; one row per ticket, photos as JSON.
``ticket_id`` is the sequential number shown to users, assigned on insert.
"""
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import List, Optional

from core.common.db_interface import SQLiteRepository
from core.helpers.date_time_helper import utc_now_iso
from ..exceptions.errors import MaintenanceError, TicketNotFoundError
from ..models.ticket import MaintenanceTicket

log = logging.getLogger(__name__)

TABLE = "solicitudes_mantenimiento"

_SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {TABLE} (
    id TEXT PRIMARY KEY,
    ticket_id INTEGER UNIQUE,
    fecha TEXT NOT NULL,
    hora TEXT NOT NULL,
    solicitante TEXT,
    zona TEXT NOT NULL,
    equipo TEXT,
    tipo_falla TEXT NOT NULL,
    nivel_riesgo TEXT,
    descripcion TEXT NOT NULL,
    recomendacion TEXT,
    fotos TEXT,
    estado TEXT NOT NULL,
    estado_final TEXT,
    tecnico TEXT,
    prioridad TEXT,
    fecha_programada TEXT,
    fecha_ejecucion TEXT,
    accion_realizada TEXT,
    observaciones TEXT,
    validado_por TEXT,
    pdf_url TEXT,
    solicitud_pdf_url TEXT,
    created_at TEXT,
    updated_at TEXT
);
CREATE INDEX IF NOT EXISTS idx_{TABLE}_estado ON {TABLE}(estado);
CREATE INDEX IF NOT EXISTS idx_{TABLE}_fecha ON {TABLE}(fecha);
"""


class TicketRepositorySQLite(SQLiteRepository):
    def __init__(self, db_path: Path | str | None = None) -> None:
        if db_path is None:
            from core.config.config_loader import PLANTQC_DB_PATH  # lazy import
            db_path = PLANTQC_DB_PATH
        super().__init__(Path(db_path))
        self.executescript(_SCHEMA)

    # ------------------------------------------------------------------ #
    def insert(self, ticket: MaintenanceTicket) -> MaintenanceTicket:
        """Store a new ticket and give it the next sequential ``ticket_id``."""
        now = utc_now_iso()
        try:
            with self.conn:
                row = self.conn.execute(f"SELECT COALESCE(MAX(ticket_id), 0) + 1 FROM {TABLE}").fetchone()
                ticket.ticket_id = int(row[0])
                data = ticket.to_row()
                data.update(created_at=now, updated_at=now)
                columns = list(data)
                self.conn.execute(
                    f"INSERT INTO {TABLE} ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
                    [data[c] for c in columns],
                )
        except sqlite3.Error as exc:
            ticket.ticket_id = None
            raise MaintenanceError(f"ticket could not be stored: {exc}") from exc
        return ticket

    def update(self, ticket: MaintenanceTicket) -> None:
        data = ticket.to_row()
        data.pop("id")
        data["updated_at"] = utc_now_iso()
        assignments = ", ".join(f"{c} = ?" for c in data)
        try:
            with self.conn:
                cur = self.conn.execute(f"UPDATE {TABLE} SET {assignments} WHERE id = ?",
                                        [*data.values(), ticket.id])
        except sqlite3.Error as exc:
            raise MaintenanceError(f"ticket {ticket.display_id} could not be updated: {exc}") from exc
        if cur.rowcount == 0:
            raise TicketNotFoundError(ticket.id)

    def get(self, ticket_uuid: str) -> MaintenanceTicket:
        row = self.fetchone(f"SELECT * FROM {TABLE} WHERE id = ?", (ticket_uuid,))
        if row is None:
            raise TicketNotFoundError(ticket_uuid)
        return MaintenanceTicket.from_row(row)

    def find_by_ticket_id(self, ticket_id: int) -> Optional[MaintenanceTicket]:
        row = self.fetchone(f"SELECT * FROM {TABLE} WHERE ticket_id = ?", (ticket_id,))
        return MaintenanceTicket.from_row(row) if row else None

    def list_all(self) -> List[MaintenanceTicket]:
        rows = self.fetchall(f"SELECT * FROM {TABLE} ORDER BY fecha DESC, hora DESC")
        return [MaintenanceTicket.from_row(r) for r in rows]

    def count_in_year(self, year: int) -> int:
        row = self.fetchone(
            f"SELECT COUNT(*) FROM {TABLE} WHERE fecha BETWEEN ? AND ?",
            (f"{year}-01-01", f"{year}-12-31"),
        )
        return int(row[0]) if row else 0

    def technicians(self) -> List[str]:
        """Technicians that appear on any ticket, for the assignment dialog."""
        rows = self.fetchall(
            f"SELECT DISTINCT tecnico FROM {TABLE} WHERE tecnico IS NOT NULL AND tecnico != '' ORDER BY tecnico"
        )
        return [r[0] for r in rows]
