"""
ChecklistSubmissionService
==========================

One submission, in this order:

    1. validate the form          -> ChecklistValidationError
    2. warnings need confirmation -> ConfirmationRequiredError
    3. render the PDF
    4. pick the file name (next NN in the bucket, or HHMMSS)
    5. upload                     -> StorageUploadError
    6. insert the row with pdf_url -> ChecklistPersistenceError
    7. clear the draft, write the audit log

Nothing is written to the database when the upload fails.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from core.common.app_context import AppContext
from core.qm_logging.logic.logger import Logger, get_logger
from ..adapters.storage_adapter import StorageAdapter
from ..exceptions.errors import ChecklistError, ConfirmationRequiredError, ChecklistValidationError
from ..models.base_form import ChecklistForm
from ..repository.checklist_repository import ChecklistRepository
from .draft_store import DraftStore
from .pdf_numbering import build_filename
from .pdf_renderer import ChecklistPdfRenderer

log = logging.getLogger(__name__)

FEATURE_ID = "checklists"


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    filename: str
    pdf_url: str
    row_id: int


class ChecklistSubmissionService:
    def __init__(
        self,
        *,
        storage: StorageAdapter,
        repository: ChecklistRepository,
        drafts: Optional[DraftStore] = None,
        renderer: Optional[ChecklistPdfRenderer] = None,
        audit: Optional[Logger] = None,
    ) -> None:
        self._storage = storage
        self._repo = repository
        self._drafts = drafts
        self._renderer = renderer or ChecklistPdfRenderer()
        self._audit = audit

    @property
    def audit(self) -> Logger:
        if self._audit is None:
            self._audit = get_logger()
        return self._audit

    # ------------------------------------------------------------------ #
    def check(self, form: ChecklistForm) -> list[str]:
        """Raise on blocking problems; return the warnings that need confirmation."""
        errors = form.validate()
        if errors:
            raise ChecklistValidationError(errors)
        return form.warnings()

    def submit(self, form: ChecklistForm, *, confirm_warnings: bool = False) -> SubmissionResult:
        ctype = form.checklist_type
        warnings = self.check(form)
        if warnings and not confirm_warnings:
            raise ConfirmationRequiredError(warnings)

        author = AppContext.current_display_name() or form.monitor_name or None
        pdf_bytes = self._renderer.render(form, author=author)

        existing = self._storage.list(ctype.bucket) if ctype.numbered else ()
        filename = build_filename(ctype, form.date, existing)
        pdf_url = self._storage.upload(ctype.bucket, filename, pdf_bytes,
                                       content_type="application/pdf", upsert=True)

        payload = form.payload()
        summary = form.db_row()
        try:
            row_id = self._repo.insert(ctype, form_date=form.date, summary=summary,
                                       payload=payload, pdf_url=pdf_url)
        except ChecklistError:
            self.audit.log(FEATURE_ID, "submit_failed", level="ERROR",
                           reference_id=filename, message=f"{ctype.key}: row not stored")
            raise

        if self._drafts is not None:
            self._drafts.clear(ctype.key)

        self.audit.log(FEATURE_ID, "submitted", reference_id=str(row_id),
                       message=f"{ctype.key}: {filename}")
        log.info("checklist %s submitted as %s (row %s)", ctype.key, filename, row_id)
        return SubmissionResult(filename=filename, pdf_url=pdf_url, row_id=row_id)
