"""
TicketService
=============

Life cycle of a maintenance ticket:

    create -> pendiente
    assign   pendiente    -> programada
    start    programada   -> en_ejecucion
    resolve  en_ejecucion -> por_validar   (estado_final "resuelta")
    approve  por_validar  -> finalizada    (full report PDF)
    reject   por_validar  -> en_ejecucion  (reason, optional reassignment)
    dismiss  pendiente    -> no procede    (reason)
    derive   pendiente    -> derivada      (reason)

Allowed moves come from :class:`WorkflowPolicy`. Each transition appends a
history entry ``[dd-MM-yyyy HH:mm:ss] who - action`` to ``observaciones``
and writes one audit row.
"""
from __future__ import annotations

import io
import logging
import uuid
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from PIL import Image, UnidentifiedImageError

from checklists.adapters.storage_adapter import StorageAdapter
from checklists.exceptions.errors import StorageUploadError
from checklists.logic.pdf_renderer import ChecklistPdfRenderer
from core.common.app_context import AppContext
from core.helpers.date_time_helper import history_timestamp, local_now
from core.qm_logging.logic.logger import Logger, get_logger
from ..exceptions.errors import MaintenanceError, TicketValidationError, TransitionNotAllowedError
from ..models.ticket import FINAL_RESOLVED, MaintenanceTicket, TicketStatus
from ..repository.ticket_repository import TicketRepositorySQLite
from .ticket_report import (
    full_report_filename,
    render_full_report,
    render_request_pdf,
    request_pdf_filename,
)
from .workflow_policy import WorkflowPolicy

log = logging.getLogger(__name__)

FEATURE_ID = "maintenance"

PHOTO_BUCKET = "mtto-fotos"
REQUEST_BUCKET = "mtto-pdf-solicitudes"
REPORT_BUCKET = "mtto-pdf-reportes"

MAX_PHOTOS = 3
MAX_PHOTO_BYTES = 5 * 1024 * 1024

# (file name, content)
Photo = Tuple[str, bytes]


def validate_photos(photos: Sequence[Photo]) -> List[str]:
    """Problems with the attached photos; empty when all may be stored."""
    errors = []
    if len(photos) > MAX_PHOTOS:
        errors.append(f"Máximo {MAX_PHOTOS} fotos por solicitud")
    for name, data in photos:
        if len(data) > MAX_PHOTO_BYTES:
            errors.append(f"La foto {name} supera 5MB")
            continue
        try:
            with Image.open(io.BytesIO(data)) as img:
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError):
            errors.append(f"La foto {name} no es una imagen válida")
    return errors


def _content_type(name: str) -> str:
    ext = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    return {"png": "image/png", "jpg": "image/jpeg", "jpeg": "image/jpeg",
            "webp": "image/webp", "gif": "image/gif"}.get(ext, "application/octet-stream")


class TicketService:
    def __init__(
        self,
        *,
        repository: TicketRepositorySQLite,
        storage: StorageAdapter,
        policy: Optional[WorkflowPolicy] = None,
        renderer: Optional[ChecklistPdfRenderer] = None,
        audit: Optional[Logger] = None,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self._repo = repository
        self._storage = storage
        self._policy = policy or WorkflowPolicy.load_from_directory()
        self._renderer = renderer or ChecklistPdfRenderer()
        self._audit = audit
        self._new_id = id_factory

    @property
    def audit(self) -> Logger:
        if self._audit is None:
            self._audit = get_logger()
        return self._audit

    @property
    def policy(self) -> WorkflowPolicy:
        return self._policy

    # ------------------------------------------------------------------ #
    #  Queries                                                           #
    # ------------------------------------------------------------------ #
    def get(self, ticket_uuid: str) -> MaintenanceTicket:
        return self._repo.get(ticket_uuid)

    def list_tickets(self) -> List[MaintenanceTicket]:
        return self._repo.list_all()

    def allowed_actions(self, ticket: MaintenanceTicket) -> List[str]:
        return self._policy.allowed_actions(ticket.estado)

    def photo_bytes(self, ticket: MaintenanceTicket) -> List[bytes]:
        images = []
        for name in ticket.fotos:
            try:
                images.append(self._storage.download(PHOTO_BUCKET, name))
            except FileNotFoundError:
                log.warning("photo %s of ticket %s is missing", name, ticket.display_id)
        return images

    # ------------------------------------------------------------------ #
    #  Creation                                                          #
    # ------------------------------------------------------------------ #
    def create(
        self,
        *,
        solicitante: str,
        zona: str,
        tipo_falla: str,
        descripcion: str,
        equipo: str = "",
        nivel_riesgo: str = "",
        recomendacion: str = "",
        photos: Sequence[Photo] = (),
    ) -> MaintenanceTicket:
        errors = [f"{label} es obligatorio" for label, value in
                  (("Zona", zona), ("Tipo de falla", tipo_falla), ("Descripción", descripcion))
                  if not (value or "").strip()]
        errors += validate_photos(photos)
        if errors:
            raise TicketValidationError(errors)

        now = local_now()
        ticket = MaintenanceTicket(
            id=self._new_id(),
            fecha=now.strftime("%Y-%m-%d"),
            hora=now.strftime("%H:%M:%S"),
            solicitante=(solicitante or "").strip() or AppContext.current_display_name(),
            zona=zona.strip(),
            tipo_falla=tipo_falla.strip(),
            descripcion=descripcion.strip(),
            equipo=(equipo or "").strip(),
            nivel_riesgo=(nivel_riesgo or "").strip(),
            recomendacion=(recomendacion or "").strip(),
        )
        for name, data in photos:
            object_name = f"{ticket.id}-{Path(name).name}"
            try:
                self._storage.upload(PHOTO_BUCKET, object_name, data,
                                     content_type=_content_type(name), upsert=True)
            except StorageUploadError as exc:
                raise MaintenanceError(f"photo {name} could not be stored: {exc}") from exc
            ticket.fotos.append(object_name)

        self._repo.insert(ticket)
        self._store_request_pdf(ticket, [data for _name, data in photos])
        self.audit.log(FEATURE_ID, "created", reference_id=str(ticket.ticket_id),
                       message=f"{ticket.zona} / {ticket.tipo_falla}")
        log.info("maintenance ticket %s created", ticket.display_id)
        return ticket

    def _store_request_pdf(self, ticket: MaintenanceTicket, photos: Sequence[bytes]) -> None:
        """The ticket is kept even when its request PDF cannot be stored."""
        moment = local_now()
        number = self._repo.count_in_year(moment.year)
        try:
            pdf = render_request_pdf(self._renderer, ticket, photos, author=ticket.solicitante or None)
            existing = set(self._storage.list(REQUEST_BUCKET))
            filename = request_pdf_filename(moment, number)
            for suffix in "abcdefghijklmnopqrstuvwxyz":
                if filename not in existing:
                    break
                filename = request_pdf_filename(moment, number, suffix)
            else:
                raise StorageUploadError(f"storage/already-exists: {filename}")
            ticket.solicitud_pdf_url = self._storage.upload(
                REQUEST_BUCKET, filename, pdf, content_type="application/pdf", upsert=False
            )
        except StorageUploadError as exc:
            log.warning("request PDF of ticket %s not stored: %s", ticket.display_id, exc)
            self.audit.log(FEATURE_ID, "request_pdf_failed", level="WARNING",
                           reference_id=str(ticket.ticket_id), message=str(exc))
            return
        self._repo.update(ticket)

    # ------------------------------------------------------------------ #
    #  Transitions                                                       #
    # ------------------------------------------------------------------ #
    def assign(self, ticket_uuid: str, technician: str, *, priority: str = "",
               scheduled_date: str = "", notes: str = "", actor: Optional[str] = None) -> MaintenanceTicket:
        if not (technician or "").strip():
            raise TicketValidationError(["Técnico es obligatorio"])
        technician = technician.strip()
        detail = f"Asignó la solicitud | Técnico: {technician} | Prioridad: {priority or '-'}" \
                 f" | Fecha programada: {scheduled_date or '-'}"
        if notes.strip():
            detail += f" | Notas: {notes.strip()}"

        def apply(t: MaintenanceTicket) -> None:
            t.tecnico = technician
            t.prioridad = priority
            t.fecha_programada = scheduled_date

        return self._transition(ticket_uuid, "assign", detail, apply, actor=actor)

    def start(self, ticket_uuid: str, *, actor: Optional[str] = None) -> MaintenanceTicket:
        return self._transition(ticket_uuid, "start", "Inició el trabajo", actor=actor)

    def resolve(self, ticket_uuid: str, action_taken: str, *, observations: str = "",
                actor: Optional[str] = None) -> MaintenanceTicket:
        if not (action_taken or "").strip():
            raise TicketValidationError(["Acción realizada es obligatoria"])
        detail = f"Marcó la solicitud como {FINAL_RESOLVED}"
        if observations.strip():
            detail += f"\nObservaciones: {observations.strip()}"

        def apply(t: MaintenanceTicket) -> None:
            t.accion_realizada = action_taken.strip()
            t.estado_final = FINAL_RESOLVED
            t.fecha_ejecucion = local_now().strftime("%Y-%m-%dT%H:%M:%S")

        return self._transition(ticket_uuid, "resolve", detail, apply, actor=actor)

    def approve(self, ticket_uuid: str, validator: str, *, comment: str = "") -> MaintenanceTicket:
        if not (validator or "").strip():
            raise TicketValidationError(["Validador es obligatorio"])
        validator = validator.strip()
        detail = "Validó el trabajo" + (f"\nComentario: {comment.strip()}" if comment.strip() else "")
        validated_at = history_timestamp()

        def apply(t: MaintenanceTicket) -> None:
            t.validado_por = validator
            t.estado_final = FINAL_RESOLVED
            t.pdf_url = self._store_full_report(t, validated_at, comment.strip())

        return self._transition(ticket_uuid, "approve", detail, apply, actor=validator)

    def _store_full_report(self, ticket: MaintenanceTicket, validated_at: str, comment: str) -> Optional[str]:
        """URL of the uploaded report; None when the upload failed (the validation still stands)."""
        try:
            pdf = render_full_report(self._renderer, ticket, self.photo_bytes(ticket),
                                     validated_at=validated_at, comment=comment,
                                     author=ticket.validado_por or None)
            return self._storage.upload(REPORT_BUCKET, full_report_filename(ticket), pdf,
                                        content_type="application/pdf", upsert=True)
        except StorageUploadError as exc:
            log.warning("full report of ticket %s not stored: %s", ticket.display_id, exc)
            self.audit.log(FEATURE_ID, "report_failed", level="WARNING",
                           reference_id=str(ticket.ticket_id), message=str(exc))
            return None

    def reject(self, ticket_uuid: str, validator: str, reason: str, *,
               reassign_to: Optional[str] = None) -> MaintenanceTicket:
        self._require_reason("reject", reason)
        reassign_to = (reassign_to or "").strip() or None
        detail = f"Devolvió el trabajo para corrección\nComentario: {reason.strip()}"
        if reassign_to:
            detail += f"\n[Reasignación] Técnico: {reassign_to} | Motivo: Devolución por corrección"

        def apply(t: MaintenanceTicket) -> None:
            if reassign_to:
                t.tecnico = reassign_to
            t.estado_final = None

        return self._transition(ticket_uuid, "reject", detail, apply, actor=validator)

    def dismiss(self, ticket_uuid: str, reason: str, *, actor: Optional[str] = None) -> MaintenanceTicket:
        self._require_reason("dismiss", reason)

        def apply(t: MaintenanceTicket) -> None:
            t.estado_final = TicketStatus.NO_PROCEDE.value

        return self._transition(ticket_uuid, "dismiss", f"Marcó la solicitud como no procede\nMotivo: {reason.strip()}",
                                apply, actor=actor)

    def derive(self, ticket_uuid: str, reason: str, *, actor: Optional[str] = None) -> MaintenanceTicket:
        self._require_reason("derive", reason)
        return self._transition(ticket_uuid, "derive", f"Derivó la solicitud\nMotivo: {reason.strip()}",
                                actor=actor)

    # ------------------------------------------------------------------ #
    def _require_reason(self, action: str, reason: str) -> None:
        if self._policy.requires_reason(action) and not (reason or "").strip():
            raise TicketValidationError(["Debe indicar un motivo"])

    def _transition(
        self,
        ticket_uuid: str,
        action: str,
        detail: str,
        apply: Optional[Callable[[MaintenanceTicket], None]] = None,
        *,
        actor: Optional[str] = None,
    ) -> MaintenanceTicket:
        ticket = self._repo.get(ticket_uuid)
        target = self._policy.next_status(action=action, status=ticket.estado)
        if target is None:
            raise TransitionNotAllowedError(action, ticket.estado.value)

        who = (actor or "").strip() or AppContext.current_display_name("Sistema")
        previous = ticket.estado
        ticket.estado = target
        if apply is not None:
            apply(ticket)
        ticket.append_history(f"[{history_timestamp()}] {who} - {detail}")
        self._repo.update(ticket)

        self.audit.log(FEATURE_ID, action, reference_id=str(ticket.ticket_id),
                       message=f"{previous.value} -> {target.value} ({who})")
        log.info("ticket %s: %s (%s -> %s)", ticket.display_id, action, previous.value, target.value)
        return ticket
