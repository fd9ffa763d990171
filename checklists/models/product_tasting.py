"""Final product tasting (CF/PC-ASC-006-RG008)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

from core.helpers.date_time_helper import format_date_display
from ..logic.calculations import final_grade, is_valid_grade, mean_grade
from .base_form import ChecklistForm, PdfTable, SignatureBlock, text
from .checklist_type import FINAL_PRODUCT_TASTING

ATTRIBUTES = ("appearance", "color", "smell", "texture", "taste")

RESULT_APPROVED = "approved"
RESULT_REJECTED = "rejected"
RESULT_HOLD = "hold"
RESULTS = (RESULT_APPROVED, RESULT_REJECTED, RESULT_HOLD)


@dataclass
class Participant:
    name: str = ""
    grades: Dict[str, str] = field(default_factory=lambda: {a: "" for a in ATTRIBUTES})

    def set_grade(self, attribute: str, value: str) -> bool:
        """Store *value* if it is blank or a grade in range; returns False if rejected."""
        if attribute not in ATTRIBUTES:
            raise KeyError(f"unknown attribute: {attribute!r}")
        value = (value or "").strip()
        if value and not is_valid_grade(value):
            return False
        self.grades[attribute] = value
        return True


@dataclass
class FinalProductTastingForm(ChecklistForm):
    """Tasting panel of one finished batch.

    ``monitor_name`` is the panel monitor; the analyst signs the result.
    The checker fields stay empty until QA verifies the record.
    """
    checklist_type = FINAL_PRODUCT_TASTING

    turno: str = ""
    formato: str = ""
    bar_code: str = ""
    best_before: str = ""
    brix: str = ""
    ph: str = ""
    product: str = ""
    client: str = ""
    process_date: str = ""
    batch: str = ""
    variety: str = ""
    participants: List[Participant] = field(default_factory=list)
    comments: str = ""
    result: str = RESULT_APPROVED
    analyst_name: str = ""
    analyst_signature: str = ""

    # ------------------------------------------------------------------ #
    def mean(self, attribute: str) -> float:
        return mean_grade(p.grades.get(attribute, "") for p in self.participants)

    def means(self) -> Dict[str, float]:
        return {a: self.mean(a) for a in ATTRIBUTES}

    @property
    def final_grade(self) -> float:
        return final_grade(list(self.means().values()))

    def add_participant(self, name: str = "") -> Participant:
        participant = Participant(name)
        self.participants.append(participant)
        return participant

    # ------------------------------------------------------------------ #
    def validate(self) -> List[str]:
        errors = []
        if not self.participants:
            errors.append("Please add at least one participant")
        if not self.analyst_name.strip() or not self.analyst_signature:
            errors.append("Analyst name and signature are required")
        if self.result not in RESULTS:
            errors.append("Please select a result: approved, rejected or hold")
        return errors

    def has_meaningful_data(self) -> bool:
        return bool(
            self.turno or self.formato or self.bar_code or self.product or self.client
            or self.batch or self.comments or self.analyst_name or self.analyst_signature
            or self.participants
        )

    # ------------------------------------------------------------------ #
    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "monitor_name": self.monitor_name,
            "monitor_signature": self.monitor_signature,
            "turno": self.turno,
            "formato": self.formato,
            "bar_code": self.bar_code,
            "best_before": self.best_before,
            "brix": self.brix,
            "ph": self.ph,
            "product": self.product,
            "client": self.client,
            "process_date": self.process_date,
            "batch": self.batch,
            "variety": self.variety,
            "participants": [{"name": p.name, **p.grades} for p in self.participants],
            "comments": self.comments,
            "result": self.result,
            "analyst_name": self.analyst_name,
            "analyst_signature": self.analyst_signature,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FinalProductTastingForm":
        participants = []
        for raw in data.get("participants") or []:
            participant = Participant(text(raw.get("name")))
            for attribute in ATTRIBUTES:
                participant.set_grade(attribute, text(raw.get(attribute)))
            participants.append(participant)
        simple = {k: text(data.get(k)) for k in (
            "date", "monitor_name", "turno", "formato", "bar_code", "best_before", "brix",
            "ph", "product", "client", "process_date", "batch", "variety", "comments",
            "analyst_name",
        )}
        return cls(
            **simple,
            monitor_signature=data.get("monitor_signature") or "",
            participants=participants,
            result=text(data.get("result")) or RESULT_APPROVED,
            analyst_signature=data.get("analyst_signature") or "",
        )

    def db_row(self) -> Dict[str, Any]:
        means = self.means()
        row = {
            "turno": self.turno,
            "monitor": self.monitor_name,
            "formato": self.formato,
            "bar_code": self.bar_code,
            "best_before": self.best_before,
            "brix": self.brix,
            "ph": self.ph,
            "date": self.date,
            "product": self.product,
            "client": self.client,
            "process_date": self.process_date,
            "batch": self.batch,
            "variety": self.variety,
            "mean_appearance": means["appearance"],
            "mean_color": means["color"],
            "mean_smell": means["smell"],
            "mean_texture": means["texture"],
            "mean_taste": means["taste"],
            "final_grade": self.final_grade,
            "comments": self.comments or None,
            "result": self.result,
            "analyst_name": self.analyst_name,
            "checker_name": None,
            "checker_date": None,
        }
        row.update(super().db_row())
        return row

    # ------------------------------------------------------------------ #
    def header_fields(self) -> List[Tuple[str, str]]:
        return [
            ("Shift", self.turno),
            ("Monitor", self.monitor_name),
            ("Format", self.formato),
            ("Bar Code", self.bar_code),
            ("Best Before", self.best_before),
            ("Brix", self.brix),
            ("pH", self.ph),
            ("Date", format_date_display(self.date)),
            ("Product", self.product),
            ("Client", self.client),
            ("Process Date", format_date_display(self.process_date)),
            ("Batch", self.batch),
            ("Variety", self.variety),
        ]

    def pdf_tables(self) -> List[PdfTable]:
        means = self.means()
        rows = [[p.name] + [p.grades.get(a, "") for a in ATTRIBUTES] for p in self.participants]
        rows.append(["Mean"] + [f"{means[a]:.1f}" for a in ATTRIBUTES])
        grades = PdfTable(
            title="Sensory Evaluation",
            columns=["Participant", "Appearance", "Color", "Smell", "Texture", "Taste"],
            rows=rows,
            note="Scale 3.0 - 6.0",
        )
        verdict = PdfTable(
            title="Result",
            columns=["Final Grade", "Result", "Comments"],
            rows=[[f"{self.final_grade:.1f}", self.result.upper(), self.comments]],
            widths=[0.2, 0.2, 0.6],
        )
        return [grades, verdict]

    def signatures(self) -> List[SignatureBlock]:
        return [SignatureBlock("Analyst Signature", self.analyst_name, self.analyst_signature)]
