"""Common shape of every checklist form."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple, TypeVar

from core.helpers.date_time_helper import format_date_display
from .checklist_type import ChecklistType

F = TypeVar("F", bound="ChecklistForm")


@dataclass(frozen=True, slots=True)
class PdfTable:
    """A titled table in the rendered checklist; ``widths`` are page-width fractions."""
    title: str
    columns: List[str]
    rows: List[List[str]]
    widths: Optional[List[float]] = None
    note: str = ""


@dataclass(frozen=True, slots=True)
class SignatureBlock:
    label: str
    name: str
    image: str          # Signature Image data URL, may be empty


def text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def yes_no(value: Optional[bool], yes: str = "Comply", no: str = "Not Comply") -> str:
    if value is None:
        return ""
    return yes if value else no


@dataclass
class ChecklistForm(ABC):
    """Base of all forms.

    Subclasses are dataclasses that describe one checklist; they know how to
    validate themselves, how they look in the PDF and how they are stored.
    """
    checklist_type: ClassVar[ChecklistType]

    date: str = ""
    monitor_name: str = ""
    monitor_signature: str = ""

    # ------------------------------------------------------------------ #
    @abstractmethod
    def validate(self) -> List[str]:
        """Every problem that blocks submission, in form order."""

    def warnings(self) -> List[str]:
        """Problems the user may confirm and submit anyway."""
        return []

    @abstractmethod
    def has_meaningful_data(self) -> bool:
        """True once the user entered anything worth keeping as a draft."""

    # ------------------------------------------------------------------ #
    #  Serialisation                                                     #
    # ------------------------------------------------------------------ #
    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        ...

    @classmethod
    @abstractmethod
    def from_dict(cls: type[F], data: Mapping[str, Any]) -> F:
        ...

    def payload(self) -> Dict[str, Any]:
        """JSON document stored with the row."""
        return self.to_dict()

    def db_row(self) -> Dict[str, Any]:
        """Columns stored next to the JSON payload."""
        return {"date_string": format_date_display(self.date)}

    # ------------------------------------------------------------------ #
    #  PDF description                                                   #
    # ------------------------------------------------------------------ #
    def header_fields(self) -> List[Tuple[str, str]]:
        return [
            ("Date", format_date_display(self.date)),
            ("Monitor Name", self.monitor_name),
        ]

    @abstractmethod
    def pdf_tables(self) -> List[PdfTable]:
        ...

    def signatures(self) -> List[SignatureBlock]:
        return [SignatureBlock("Monitor Signature", self.monitor_name, self.monitor_signature)]

    # ------------------------------------------------------------------ #
    def _section1_errors(self, *extra: Tuple[str, Any]) -> List[str]:
        required = [("Date", self.date), ("Monitor Name", self.monitor_name),
                    *extra, ("Monitor Signature", self.monitor_signature)]
        missing = [label for label, value in required if not text(value)]
        if missing:
            return [f"Please fill in all required fields in Section 1: {', '.join(missing)}"]
        return []


def base_fields(data: Mapping[str, Any]) -> Dict[str, str]:
    return {
        "date": text(data.get("date")),
        "monitor_name": text(data.get("monitor_name")),
        "monitor_signature": data.get("monitor_signature") or "",
    }


def base_dict(form: ChecklistForm) -> Dict[str, Any]:
    return {
        "date": form.date,
        "monitor_name": form.monitor_name,
        "monitor_signature": form.monitor_signature,
    }
