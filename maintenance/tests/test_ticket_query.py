from __future__ import annotations

import unittest

from maintenance.logic.ticket_query import (
    TicketFilter,
    compute_kpis,
    criticality_rank,
    default_sort,
    paginate,
    sort_by,
)
from maintenance.models.ticket import MaintenanceTicket, TicketStatus


def _t(n: int, *, riesgo: str = "", estado: TicketStatus = TicketStatus.PENDIENTE,
       fecha: str = "2025-12-15", hora: str = "08:00:00", zona: str = "Packing",
       tecnico: str = "", ejecucion: str | None = None) -> MaintenanceTicket:
    return MaintenanceTicket(id=f"u{n}", ticket_id=n, fecha=fecha, hora=hora, solicitante="Ana",
                             zona=zona, tipo_falla="Mecánica", descripcion="x", nivel_riesgo=riesgo,
                             estado=estado, tecnico=tecnico, fecha_ejecucion=ejecucion)


class TestCriticality(unittest.TestCase):
    def test_rank(self) -> None:
        self.assertEqual(criticality_rank("Crítico"), 0)
        self.assertEqual(criticality_rank("Riesgo alto"), 1)
        self.assertEqual(criticality_rank("Medio"), 2)
        self.assertEqual(criticality_rank("BAJO"), 3)
        self.assertEqual(criticality_rank(None), 99)

    def test_default_sort(self) -> None:
        tickets = [_t(1, riesgo="Bajo"), _t(2, riesgo="Crítico", hora="07:00:00"),
                   _t(3, riesgo="Crítico", hora="09:00:00"), _t(4)]
        self.assertEqual([t.ticket_id for t in default_sort(tickets)], [3, 2, 1, 4])


class TestFilterAndSort(unittest.TestCase):
    def setUp(self) -> None:
        self.tickets = [
            _t(1, zona="Packing", tecnico="Luis"),
            _t(2, zona="Cámara fría", estado=TicketStatus.EN_EJECUCION),
            _t(3, zona="packing 2", estado=TicketStatus.FINALIZADA, riesgo="Alto"),
        ]

    def test_search_is_case_insensitive(self) -> None:
        ids = [t.ticket_id for t in TicketFilter(search="PACK").apply(self.tickets)]
        self.assertEqual(ids, [1, 3])
        self.assertEqual([t.ticket_id for t in TicketFilter(search="luis").apply(self.tickets)], [1])

    def test_status_group_and_exact_fields(self) -> None:
        self.assertEqual([t.ticket_id for t in TicketFilter(group="en_proceso").apply(self.tickets)], [2])
        self.assertEqual([t.ticket_id for t in TicketFilter(group="cerradas").apply(self.tickets)], [3])
        self.assertEqual([t.ticket_id for t in TicketFilter(zona="Packing").apply(self.tickets)], [1])
        self.assertEqual([t.ticket_id for t in TicketFilter(criticidad="alto").apply(self.tickets)], [3])

    def test_sort_by_puts_empty_last(self) -> None:
        ordered = sort_by(self.tickets, "tecnico")
        self.assertEqual(ordered[0].ticket_id, 1)
        ordered = sort_by(self.tickets, "zona", descending=True)
        self.assertEqual([t.ticket_id for t in ordered], [3, 1, 2])


class TestPaginate(unittest.TestCase):
    def test_pages_and_clamping(self) -> None:
        tickets = [_t(i) for i in range(45)]
        page = paginate(tickets, 3, 20)
        self.assertEqual((page.number, page.pages, page.total, len(page.items)), (3, 3, 45, 5))
        self.assertEqual(paginate(tickets, 10, 20).number, 3)
        self.assertEqual(paginate([], 1, 20).pages, 1)


class TestKpis(unittest.TestCase):
    def test_empty(self) -> None:
        kpis = compute_kpis([])
        self.assertEqual(kpis.total, 0)
        self.assertEqual(kpis.critical_high_pct, 0.0)
        self.assertIsNone(kpis.mttr_hours)

    def test_counts_share_and_mttr(self) -> None:
        tickets = [
            _t(1, riesgo="Crítico", estado=TicketStatus.FINALIZADA, hora="08:00:00",
               ejecucion="2025-12-15T10:00:00"),
            _t(2, riesgo="Bajo", estado=TicketStatus.POR_VALIDAR, hora="08:00:00",
               ejecucion="2025-12-15T13:00:00"),
            _t(3, riesgo="Alto"),
            _t(4, riesgo="Medio", hora="09:00:00", ejecucion="2025-12-15T08:00:00"),
        ]
        kpis = compute_kpis(tickets)
        self.assertEqual(kpis.total, 4)
        self.assertEqual(kpis.by_status["pendiente"], 2)
        self.assertEqual(kpis.by_status["finalizada"], 1)
        self.assertEqual(kpis.critical_high_pct, 50.0)
        self.assertEqual(kpis.mttr_hours, 3.5)


if __name__ == "__main__":
    unittest.main()
