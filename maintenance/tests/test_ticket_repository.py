from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from maintenance.exceptions.errors import TicketNotFoundError
from maintenance.models.ticket import MaintenanceTicket, TicketStatus
from maintenance.repository.ticket_repository import TicketRepositorySQLite


def _ticket(uid: str, fecha: str = "2025-12-15", hora: str = "08:00:00") -> MaintenanceTicket:
    return MaintenanceTicket(id=uid, fecha=fecha, hora=hora, solicitante="Ana",
                             zona="Packing", tipo_falla="Mecánica", descripcion="Ruido")


class TestTicketRepository(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.repo = TicketRepositorySQLite(Path(self._tmp.name) / "plantqc.db")

    def tearDown(self) -> None:
        self.repo.close()
        self._tmp.cleanup()

    def test_insert_assigns_sequential_numbers(self) -> None:
        first = self.repo.insert(_ticket("a"))
        second = self.repo.insert(_ticket("b"))
        self.assertEqual((first.ticket_id, second.ticket_id), (1, 2))
        self.assertEqual(self.repo.find_by_ticket_id(2).id, "b")
        self.assertIsNone(self.repo.find_by_ticket_id(9))

    def test_update_round_trips_fields(self) -> None:
        ticket = self.repo.insert(_ticket("a"))
        ticket.estado = TicketStatus.PROGRAMADA
        ticket.tecnico = "Luis"
        ticket.fotos = ["a-1.png", "a-2.png"]
        ticket.append_history("[15-12-2025 08:10:00] Jefa - Asignó la solicitud")
        self.repo.update(ticket)

        stored = self.repo.get("a")
        self.assertEqual(stored.estado, TicketStatus.PROGRAMADA)
        self.assertEqual(stored.fotos, ["a-1.png", "a-2.png"])
        self.assertEqual(stored.history(), ["[15-12-2025 08:10:00] Jefa - Asignó la solicitud"])
        self.assertEqual(self.repo.technicians(), ["Luis"])

    def test_unknown_ticket(self) -> None:
        with self.assertRaises(TicketNotFoundError):
            self.repo.get("missing")
        with self.assertRaises(TicketNotFoundError):
            self.repo.update(_ticket("missing"))

    def test_count_in_year_and_order(self) -> None:
        self.repo.insert(_ticket("old", fecha="2024-12-31"))
        self.repo.insert(_ticket("early", fecha="2025-01-01", hora="07:00:00"))
        self.repo.insert(_ticket("late", fecha="2025-01-01", hora="09:00:00"))
        self.assertEqual(self.repo.count_in_year(2025), 2)
        self.assertEqual([t.id for t in self.repo.list_all()], ["late", "early", "old"])


if __name__ == "__main__":
    unittest.main()
