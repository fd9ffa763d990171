"""Ticket life cycle: creation, transitions, history and PDFs."""
from __future__ import annotations

import io
import re
import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from unittest import mock

from PIL import Image

from checklists.adapters.filesystem_storage_adapter import FilesystemStorageAdapter
from checklists.logic.pdf_tools import extract_text, page_count, read_title
from core.qm_logging.logic.logger import Logger
from maintenance.exceptions.errors import TicketValidationError, TransitionNotAllowedError
from maintenance.logic.ticket_service import (
    MAX_PHOTO_BYTES,
    PHOTO_BUCKET,
    REPORT_BUCKET,
    REQUEST_BUCKET,
    TicketService,
    validate_photos,
)
from maintenance.models.ticket import FINAL_RESOLVED, TicketStatus
from maintenance.repository.ticket_repository import TicketRepositorySQLite

NOW = datetime(2025, 12, 15, 14, 5, 9)
HISTORY_LINE = re.compile(r"^\[\d{2}-\d{2}-\d{4} \d{2}:\d{2}:\d{2}\] ")


def _png(color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (64, 48), color).save(buf, format="PNG")
    return buf.getvalue()


class TestValidatePhotos(unittest.TestCase):
    def test_valid_photo(self) -> None:
        self.assertEqual(validate_photos([("a.png", _png())]), [])

    def test_too_many_photos(self) -> None:
        errors = validate_photos([(f"{i}.png", _png()) for i in range(4)])
        self.assertIn("Máximo 3 fotos por solicitud", errors)

    def test_oversize_and_unreadable(self) -> None:
        errors = validate_photos([("big.png", b"x" * (MAX_PHOTO_BYTES + 1)), ("doc.png", b"not an image")])
        self.assertEqual(errors, ["La foto big.png supera 5MB", "La foto doc.png no es una imagen válida"])


class TestTicketService(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.storage = FilesystemStorageAdapter(root / "files", public_base_url="http://files.local")
        self.repo = TicketRepositorySQLite(root / "plantqc.db")
        self.audit = Logger(db_path=root / "logs.db")
        self.service = TicketService(repository=self.repo, storage=self.storage, audit=self.audit)
        patcher = mock.patch("maintenance.logic.ticket_service.local_now", return_value=NOW)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self.repo.close()
        self._tmp.cleanup()

    def _create(self, **kwargs):
        data = dict(solicitante="Ana Perez", zona="Packing", tipo_falla="Eléctrica",
                    descripcion="Motor de la cinta no arranca", equipo="Cinta 2",
                    nivel_riesgo="Alto", photos=[("motor.png", _png())])
        data.update(kwargs)
        return self.service.create(**data)

    # ------------------------------------------------------------------ create
    def test_create_stores_ticket_photos_and_request_pdf(self) -> None:
        ticket = self._create()
        self.assertEqual(ticket.ticket_id, 1)
        self.assertEqual((ticket.fecha, ticket.hora), ("2025-12-15", "14:05:09"))
        self.assertEqual(ticket.estado, TicketStatus.PENDIENTE)
        self.assertEqual(ticket.fotos, [f"{ticket.id}-motor.png"])
        self.assertTrue(self.storage.exists(PHOTO_BUCKET, ticket.fotos[0]))
        self.assertEqual(ticket.solicitud_pdf_url,
                         "http://files.local/mtto-pdf-solicitudes/06.2025DEC15-0001.pdf")

        pdf = self.storage.download(REQUEST_BUCKET, "06.2025DEC15-0001.pdf")
        self.assertEqual(read_title(pdf), "Solicitud de Mantenimiento #1")
        self.assertGreaterEqual(page_count(pdf), 1)

        stored = self.repo.get(ticket.id)
        self.assertEqual(stored.solicitud_pdf_url, ticket.solicitud_pdf_url)
        entries = self.audit.query_logs(feature="maintenance", event="created")
        self.assertEqual([e.reference_id for e in entries], ["1"])

    def test_request_pdf_name_clash_gets_suffix(self) -> None:
        self.storage.upload(REQUEST_BUCKET, "06.2025DEC15-0001.pdf", b"%PDF-old")
        ticket = self._create(photos=[])
        self.assertTrue(ticket.solicitud_pdf_url.endswith("/06.2025DEC15-0001-a.pdf"))
        self.assertEqual(self.storage.download(REQUEST_BUCKET, "06.2025DEC15-0001.pdf"), b"%PDF-old")

    def test_create_collects_all_errors(self) -> None:
        with self.assertRaises(TicketValidationError) as ctx:
            self._create(zona=" ", descripcion="", photos=[("doc.png", b"nope")])
        self.assertEqual(ctx.exception.errors, [
            "Zona es obligatorio",
            "Descripción es obligatorio",
            "La foto doc.png no es una imagen válida",
        ])
        self.assertEqual(self.repo.list_all(), [])
        self.assertEqual(self.storage.list(PHOTO_BUCKET), [])

    # ------------------------------------------------------------- transitions
    def test_full_flow_to_approval(self) -> None:
        ticket = self._create()
        self.service.assign(ticket.id, "Luis", priority="Alta", scheduled_date="2025-12-16",
                            notes="Traer repuesto", actor="Jefa Mtto")
        self.service.start(ticket.id, actor="Luis")
        resolved = self.service.resolve(ticket.id, "Cambio de contactor", observations="OK", actor="Luis")
        self.assertEqual(resolved.estado, TicketStatus.POR_VALIDAR)
        self.assertEqual(resolved.estado_final, FINAL_RESOLVED)
        self.assertEqual(resolved.fecha_ejecucion, "2025-12-15T14:05:09")

        done = self.service.approve(ticket.id, "Carla", comment="Funciona")
        self.assertEqual(done.estado, TicketStatus.FINALIZADA)
        self.assertEqual(done.validado_por, "Carla")
        self.assertEqual(done.pdf_url, "http://files.local/mtto-pdf-reportes/Ticket_1_Full_Report.pdf")

        report = self.storage.download(REPORT_BUCKET, "Ticket_1_Full_Report.pdf")
        self.assertEqual(read_title(report), "Reporte Completo de Mantenimiento #1")
        text = " ".join(extract_text(report).split())
        self.assertIn("Cambio de contactor", text)
        self.assertIn("Carla", text)

        stored = self.repo.get(ticket.id)
        history = stored.history()
        self.assertEqual(len(history), 4)
        for entry in history:
            self.assertRegex(entry, HISTORY_LINE)
        self.assertIn("Jefa Mtto - Asignó la solicitud | Técnico: Luis | Prioridad: Alta", history[0])
        self.assertIn("Notas: Traer repuesto", history[0])
        self.assertIn("Carla - Validó el trabajo\nComentario: Funciona", history[3])
        self.assertEqual((stored.tecnico, stored.prioridad, stored.fecha_programada),
                         ("Luis", "Alta", "2025-12-16"))
        self.assertEqual(self.service.allowed_actions(stored), [])

        events = [e.event for e in self.audit.query_logs(feature="maintenance", reference_id="1")]
        self.assertEqual(sorted(events), ["approve", "assign", "created", "resolve", "start"])

    def test_action_not_allowed_in_status(self) -> None:
        ticket = self._create(photos=[])
        with self.assertRaises(TransitionNotAllowedError):
            self.service.start(ticket.id)
        self.assertEqual(self.repo.get(ticket.id).observaciones, "")

    def test_reject_requires_reason_and_can_reassign(self) -> None:
        ticket = self._create(photos=[])
        self.service.assign(ticket.id, "Luis", actor="Jefa")
        self.service.start(ticket.id, actor="Luis")
        self.service.resolve(ticket.id, "Ajuste", actor="Luis")
        with self.assertRaises(TicketValidationError):
            self.service.reject(ticket.id, "Carla", "  ")

        back = self.service.reject(ticket.id, "Carla", "Sigue vibrando", reassign_to="Marta")
        self.assertEqual(back.estado, TicketStatus.EN_EJECUCION)
        self.assertEqual(back.tecnico, "Marta")
        self.assertIsNone(back.estado_final)
        self.assertIn("Devolvió el trabajo para corrección", back.history()[-1])
        self.assertIn("[Reasignación] Técnico: Marta | Motivo: Devolución por corrección", back.history()[-1])

    def test_dismiss_closes_ticket(self) -> None:
        ticket = self._create(photos=[])
        closed = self.service.dismiss(ticket.id, "Duplicada", actor="Jefa")
        self.assertEqual(closed.estado, TicketStatus.NO_PROCEDE)
        with self.assertRaises(TransitionNotAllowedError):
            self.service.derive(ticket.id, "Proveedor externo")

    def test_assign_requires_technician(self) -> None:
        ticket = self._create(photos=[])
        with self.assertRaises(TicketValidationError):
            self.service.assign(ticket.id, "")


if __name__ == "__main__":
    unittest.main()
