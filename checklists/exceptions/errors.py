"""Checklists feature exceptions."""
from __future__ import annotations

from typing import Iterable


class ChecklistError(Exception):
    """Base exception for the checklists feature."""


class ChecklistValidationError(ChecklistError):
    """Raised when a form is not ready for submission.

    ``errors`` holds every problem found, in form order.
    """

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "checklist is incomplete")


class ConfirmationRequiredError(ChecklistError):
    """Raised when a form has warnings that the user has not confirmed yet."""

    def __init__(self, warnings: Iterable[str]) -> None:
        self.warnings = list(warnings)
        super().__init__("; ".join(self.warnings))


class StorageUploadError(ChecklistError):
    """Raised when a PDF could not be stored."""


class ChecklistPersistenceError(ChecklistError):
    """Raised when the checklist row could not be written."""


class DraftError(ChecklistError):
    """Raised when a draft cannot be written."""
