"""Internal control of materials used in production areas (CF/PC-ASC-004-RG008)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .base_form import ChecklistForm, PdfTable, base_dict, base_fields, text
from .checklist_type import MATERIALS_CONTROL

MATERIAL_OPTIONS = ("Scoop/Cucharón", "Scissors/Tijeras", "Gloves/Guantes", "Awl", "Punzón")

STATUS_GOOD = "Good/Bueno"
STATUS_BAD = "Bad/Malo"
MATERIAL_STATUSES = (STATUS_GOOD, STATUS_BAD)


def _opt_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class PersonnelMaterial:
    person_name: str = ""
    material: str = ""
    quantity: int = 0
    material_status: str = ""
    observation: str = ""
    return_motive: str = ""
    quantity_received: Optional[int] = None
    material_status_received: str = ""
    observation_received: str = ""

    def set_status(self, status: str) -> None:
        self.material_status = status
        if status == STATUS_GOOD:
            self.observation = ""

    def set_status_received(self, status: str) -> None:
        self.material_status_received = status
        if status == STATUS_GOOD:
            self.observation_received = ""

    @property
    def quantities_match(self) -> bool:
        """Unfilled received quantities count as matching."""
        return self.quantity_received is None or self.quantity_received == self.quantity

    @property
    def quantity_exceeds(self) -> bool:
        return self.quantity_received is not None and self.quantity_received > self.quantity

    @property
    def has_missing_data(self) -> bool:
        if not self.person_name.strip() or not self.material or self.quantity <= 0 \
                or not self.material_status:
            return True
        if self.material_status == STATUS_BAD and not self.observation.strip():
            return True
        if not self.return_motive.strip() or self.quantity_received is None \
                or self.quantity_received < 0 or not self.material_status_received:
            return True
        if self.quantity_exceeds:
            return True
        if not self.quantities_match and not self.observation_received.strip():
            return True
        return self.material_status_received == STATUS_BAD and not self.observation_received.strip()

    @property
    def has_quantity_issue(self) -> bool:
        if self.quantity_received is None:
            return False
        return self.quantity_exceeds or (
            not self.quantities_match and not self.observation_received.strip()
        )

    @property
    def has_any_input(self) -> bool:
        return bool(self.person_name.strip() or self.material or self.quantity
                    or self.return_motive.strip() or self.quantity_received is not None)


@dataclass
class MaterialsControlForm(ChecklistForm):
    checklist_type = MATERIALS_CONTROL

    productive_area: str = ""
    line_manager_name: str = ""
    personnel: List[PersonnelMaterial] = field(default_factory=lambda: [PersonnelMaterial()])

    def validate(self) -> List[str]:
        errors = self._section1_errors(("Productive Area", self.productive_area),
                                       ("Line Manager", self.line_manager_name))
        if not self.personnel or any(p.has_missing_data for p in self.personnel):
            errors.append("Please fill in all required fields for all personnel entries")
        if any(p.has_quantity_issue for p in self.personnel):
            errors.append("Please fix quantity mismatches and add required observations")
        return errors

    def has_meaningful_data(self) -> bool:
        return bool(self.productive_area or self.line_manager_name or self.monitor_name
                    or self.monitor_signature) or any(p.has_any_input for p in self.personnel)

    # ------------------------------------------------------------------ #
    def to_dict(self) -> Dict[str, Any]:
        data = base_dict(self)
        data.update(
            productive_area=self.productive_area,
            line_manager_name=self.line_manager_name,
            personnel=[
                {
                    "person_name": p.person_name,
                    "material": p.material,
                    "quantity": p.quantity,
                    "material_status": p.material_status,
                    "observation": p.observation,
                    "return_motive": p.return_motive,
                    "quantity_received": p.quantity_received,
                    "material_status_received": p.material_status_received,
                    "observation_received": p.observation_received,
                }
                for p in self.personnel
            ],
        )
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MaterialsControlForm":
        personnel = [
            PersonnelMaterial(
                person_name=text(p.get("person_name")),
                material=text(p.get("material")),
                quantity=_opt_int(p.get("quantity")) or 0,
                material_status=text(p.get("material_status")),
                observation=text(p.get("observation")),
                return_motive=text(p.get("return_motive")),
                quantity_received=_opt_int(p.get("quantity_received")),
                material_status_received=text(p.get("material_status_received")),
                observation_received=text(p.get("observation_received")),
            )
            for p in data.get("personnel") or []
        ]
        return cls(
            **base_fields(data),
            productive_area=text(data.get("productive_area")),
            line_manager_name=text(data.get("line_manager_name")),
            personnel=personnel or [PersonnelMaterial()],
        )

    def payload(self) -> Dict[str, Any]:
        data = self.to_dict()
        for row in data["personnel"]:
            row["quantity_received"] = row["quantity_received"] or 0
        return data

    # ------------------------------------------------------------------ #
    def header_fields(self) -> List[Tuple[str, str]]:
        fields = super().header_fields()
        fields[1:1] = [("Productive Area", self.productive_area),
                       ("Line Manager", self.line_manager_name)]
        return fields

    def pdf_tables(self) -> List[PdfTable]:
        handed_out = PdfTable(
            title="Materials Handed Out",
            columns=["Person", "Material", "Quantity", "Status", "Observation"],
            rows=[[p.person_name, p.material, str(p.quantity), p.material_status, p.observation]
                  for p in self.personnel],
            widths=[0.22, 0.2, 0.12, 0.16, 0.3],
        )
        returned = PdfTable(
            title="Materials Returned",
            columns=["Person", "Return Motive", "Qty Received", "Status", "Observation"],
            rows=[[p.person_name, p.return_motive, str(p.quantity_received or 0),
                   p.material_status_received, p.observation_received]
                  for p in self.personnel],
            widths=[0.22, 0.22, 0.12, 0.16, 0.28],
        )
        return [handed_out, returned]
