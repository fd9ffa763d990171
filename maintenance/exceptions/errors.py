"""Maintenance feature exceptions."""
from __future__ import annotations

from typing import Iterable


class MaintenanceError(Exception):
    """Base exception for the maintenance feature."""


class TicketValidationError(MaintenanceError):
    """Raised when ticket input is incomplete; ``errors`` lists every problem."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "invalid ticket")


class TransitionNotAllowedError(MaintenanceError):
    """Raised when an action is not allowed from the ticket's current status."""

    def __init__(self, action: str, status: str) -> None:
        self.action = action
        self.status = status
        super().__init__(f"action '{action}' not allowed in status '{status}'")


class TicketNotFoundError(MaintenanceError):
    """Raised when a ticket id is unknown."""
