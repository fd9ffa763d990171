"""Check weighing and sealing of packaged products (CF/PC-ASC-006-RG005)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

from ..logic.calculations import format_average_weight
from .base_form import ChecklistForm, PdfTable, base_dict, base_fields, text
from .checklist_type import WEIGHING_SEALING

BAGS_PER_ENTRY = 10
COMPLY = "Comply"
NOT_COMPLY = "Not comply"


def _ten(values: Any) -> List[str]:
    items = [text(v) for v in (values or [])][:BAGS_PER_ENTRY]
    return items + [""] * (BAGS_PER_ENTRY - len(items))


@dataclass
class BagEntry:
    time: str = ""
    bag_code: str = ""
    weights: List[str] = field(default_factory=lambda: [""] * BAGS_PER_ENTRY)
    sealed: List[str] = field(default_factory=lambda: [""] * BAGS_PER_ENTRY)
    other_codification: str = ""
    declaration_of_origin: str = ""

    @property
    def has_missing_data(self) -> bool:
        if not (self.time and self.bag_code and self.other_codification
                and self.declaration_of_origin):
            return True
        if all(not w.strip() for w in self.weights):
            return True
        # sealed answers are only required next to a filled weight
        return any(w.strip() and not s.strip() for w, s in zip(self.weights, self.sealed))

    def missing_weight_positions(self) -> List[int]:
        """1-based positions of the empty weights."""
        return [i for i, w in enumerate(self.weights, start=1) if not w.strip()]

    @property
    def average_weight(self) -> str:
        return format_average_weight(self.weights)


@dataclass
class WeighingSealingForm(ChecklistForm):
    checklist_type = WEIGHING_SEALING

    shift: str = ""
    process_room: str = ""
    brand: str = ""
    product: str = ""
    bag_entries: List[BagEntry] = field(default_factory=lambda: [BagEntry()])
    comments: str = ""

    def validate(self) -> List[str]:
        errors = self._section1_errors(("Shift", self.shift), ("Process Room", self.process_room),
                                       ("Brand", self.brand), ("Product", self.product))
        if not self.bag_entries:
            errors.append("Please add at least one bag entry")
        elif any(e.has_missing_data for e in self.bag_entries):
            errors.append("Please fill in all required fields for all bag entries")
        return errors

    def warnings(self) -> List[str]:
        """One line per bag entry with empty weight columns."""
        lines = []
        for index, entry in enumerate(self.bag_entries, start=1):
            missing = entry.missing_weight_positions()
            if missing:
                label = entry.bag_code or f"Entry #{index}"
                lines.append(
                    f"Bag Entry #{index} ({label}): Missing weights #"
                    + ", ".join(str(m) for m in missing)
                )
        return lines

    def has_meaningful_data(self) -> bool:
        return bool(self.shift or self.process_room or self.brand or self.product
                    or self.monitor_name or self.monitor_signature or self.comments) or any(
            e.time or e.bag_code or any(w.strip() for w in e.weights) for e in self.bag_entries
        )

    # ------------------------------------------------------------------ #
    def to_dict(self) -> Dict[str, Any]:
        data = base_dict(self)
        data.update(
            shift=self.shift,
            process_room=self.process_room,
            brand=self.brand,
            product=self.product,
            bag_entries=[
                {
                    "time": e.time,
                    "bag_code": e.bag_code,
                    "weights": list(e.weights),
                    "sealed": list(e.sealed),
                    "other_codification": e.other_codification,
                    "declaration_of_origin": e.declaration_of_origin,
                }
                for e in self.bag_entries
            ],
            comments=self.comments,
        )
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WeighingSealingForm":
        entries = [
            BagEntry(
                time=text(e.get("time")),
                bag_code=text(e.get("bag_code")),
                weights=_ten(e.get("weights")),
                sealed=_ten(e.get("sealed")),
                other_codification=text(e.get("other_codification")),
                declaration_of_origin=text(e.get("declaration_of_origin")),
            )
            for e in data.get("bag_entries") or []
        ]
        return cls(
            **base_fields(data),
            shift=text(data.get("shift")),
            process_room=text(data.get("process_room")),
            brand=text(data.get("brand")),
            product=text(data.get("product")),
            bag_entries=entries,
            comments=text(data.get("comments")),
        )

    def db_row(self) -> Dict[str, Any]:
        row = super().db_row()
        row["comments"] = self.comments.strip() or None
        return row

    # ------------------------------------------------------------------ #
    def header_fields(self) -> List[Tuple[str, str]]:
        fields = super().header_fields()
        fields[1:1] = [("Shift", self.shift), ("Process Room", self.process_room),
                       ("Brand", self.brand), ("Product", self.product)]
        return fields

    def pdf_tables(self) -> List[PdfTable]:
        columns = ["Time", "Bag Code"] + [str(i) for i in range(1, BAGS_PER_ENTRY + 1)] + ["Avg"]
        weights = PdfTable(
            title="Weights (g)",
            columns=columns,
            rows=[[e.time, e.bag_code, *e.weights, e.average_weight] for e in self.bag_entries],
            note="Average over the filled weights only",
        )
        sealing = PdfTable(
            title="Sealing and Codification",
            columns=["Bag Code"] + [str(i) for i in range(1, BAGS_PER_ENTRY + 1)]
                    + ["Other Codification", "Declaration of Origin"],
            rows=[
                [e.bag_code, *(s[:1] for s in e.sealed), e.other_codification,
                 e.declaration_of_origin]
                for e in self.bag_entries
            ],
            note="C = Comply, N = Not comply",
        )
        tables = [weights, sealing]
        if self.comments.strip():
            tables.append(PdfTable(title="Comments", columns=["Comments"],
                                   rows=[[self.comments.strip()]]))
        return tables
