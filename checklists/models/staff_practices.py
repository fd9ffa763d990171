"""Staff good practices control (CF/PC-ASC-004-RG003)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

from .base_form import ChecklistForm, PdfTable, base_dict, base_fields, text
from .checklist_type import STAFF_PRACTICES

SHIFTS = ("Morning", "Afternoon", "Night")

COMPLY = "comply"
NOT_COMPLY = "not_comply"


@dataclass(frozen=True, slots=True)
class ComplianceItem:
    key: str
    label: str
    description_en: str
    description_es: str


COMPLIANCE_ITEMS: Tuple[ComplianceItem, ...] = (
    ComplianceItem("staff_appearance", "Staff Appearance",
                   "Clean and tidy uniform.",
                   "Uniforme limpio y ordenado."),
    ComplianceItem("complete_uniform", "Complete Uniform",
                   "Wears all the clothes given by the Factory",
                   "Uso de toda la vestimenta otorgada por la Empresa"),
    ComplianceItem("accessories_absence", "Accessories Absence",
                   "Rings, earrings, watches, bracelets, piercings, candies, etc. Absence",
                   "Ausencia de anillos, aros, reloj, pulseras, piercing, dulces, etc."),
    ComplianceItem("work_tools_usage", "Work Tools Usage",
                   "Head net, mask, gloves, etc. use",
                   "Uso de toca, mascarilla, guantes, etc."),
    ComplianceItem("cut_clean_not_polished_nails", "Cut, Clean, Not Polished Nails",
                   "Nails with the conditions mentioned",
                   "Uñas en las condiciones mencionadas"),
    ComplianceItem("no_makeup_on", "No Makeup On",
                   "Lipstick, eye shadow, eyeliner, etc. Absence",
                   "Ausencia de lápiz labial, sombra, delineador, etc."),
    ComplianceItem("staff_behavior", "Staff Behavior",
                   "Wash their hands in sanitary filter previous entering processing area, "
                   "not to chew gum",
                   "Lavarse las manos en filtro sanitario, no masticar chicle, etc."),
    ComplianceItem("staff_health", "Staff Health",
                   "Staff should not be sick. If so, they can't enter the process room "
                   "until they feel better",
                   "El personal no debe estar resfriado. Si está resfriado, no puede entrar "
                   "a la sala de producción"),
)
ITEM_KEYS = tuple(i.key for i in COMPLIANCE_ITEMS)


@dataclass
class ComplianceAnswer:
    status: str = ""                 # "" | comply | not_comply
    corrective_action: str = ""
    observation: str = ""

    @property
    def is_incomplete_non_compliance(self) -> bool:
        return self.status == NOT_COMPLY and (
            not self.corrective_action.strip() or not self.observation.strip()
        )


def _blank_answers() -> Dict[str, ComplianceAnswer]:
    return {key: ComplianceAnswer() for key in ITEM_KEYS}


@dataclass
class StaffMember:
    name: str = ""
    area: str = ""
    answers: Dict[str, ComplianceAnswer] = field(default_factory=_blank_answers)

    def set_status(self, item: str, status: str) -> None:
        if item not in self.answers:
            raise KeyError(f"unknown compliance item: {item!r}")
        if status not in ("", COMPLY, NOT_COMPLY):
            raise ValueError(f"invalid compliance status: {status!r}")
        answer = self.answers[item]
        answer.status = status
        if status == COMPLY:
            answer.corrective_action = ""
            answer.observation = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.name.strip() and self.area.strip()) and all(
            self.answers[k].status for k in ITEM_KEYS
        )

    @property
    def has_any_input(self) -> bool:
        return bool(self.name.strip() or self.area.strip()) or any(
            a.status or a.observation or a.corrective_action for a in self.answers.values()
        )


@dataclass
class StaffPracticesForm(ChecklistForm):
    checklist_type = STAFF_PRACTICES

    shift: str = ""
    staff_members: List[StaffMember] = field(default_factory=lambda: [StaffMember()])

    def add_member(self) -> StaffMember:
        member = StaffMember()
        self.staff_members.append(member)
        return member

    def remove_member(self, index: int) -> None:
        """The last remaining member cannot be removed."""
        if len(self.staff_members) > 1:
            del self.staff_members[index]

    # ------------------------------------------------------------------ #
    def validate(self) -> List[str]:
        errors = self._section1_errors(("Shift", self.shift))
        if self.shift and self.shift not in SHIFTS:
            errors.append(f"Unknown shift: {self.shift}")
        if not self.staff_members or not all(m.is_complete for m in self.staff_members):
            errors.append("Please fill in all required fields for all staff members")
        if any(a.is_incomplete_non_compliance
               for m in self.staff_members for a in m.answers.values()):
            errors.append(
                "Please provide corrective action and observation for all non-compliant items"
            )
        return errors

    def has_meaningful_data(self) -> bool:
        return bool(self.shift or self.monitor_name or self.monitor_signature) or any(
            m.has_any_input for m in self.staff_members
        )

    # ------------------------------------------------------------------ #
    def to_dict(self) -> Dict[str, Any]:
        data = base_dict(self)
        data["shift"] = self.shift
        data["staff_members"] = [
            {
                "name": m.name,
                "area": m.area,
                "answers": {
                    key: {
                        "status": a.status,
                        "corrective_action": a.corrective_action,
                        "observation": a.observation,
                    }
                    for key, a in m.answers.items()
                },
            }
            for m in self.staff_members
        ]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StaffPracticesForm":
        members = []
        for raw in data.get("staff_members") or []:
            answers = _blank_answers()
            for key, value in (raw.get("answers") or {}).items():
                if key in answers and isinstance(value, Mapping):
                    answers[key] = ComplianceAnswer(
                        status=text(value.get("status")),
                        corrective_action=text(value.get("corrective_action")),
                        observation=text(value.get("observation")),
                    )
            members.append(StaffMember(text(raw.get("name")), text(raw.get("area")), answers))
        return cls(**base_fields(data), shift=text(data.get("shift")),
                   staff_members=members or [StaffMember()])

    def header_fields(self) -> List[Tuple[str, str]]:
        fields = super().header_fields()
        fields.insert(1, ("Shift", self.shift))
        return fields

    def pdf_tables(self) -> List[PdfTable]:
        tables = []
        for index, member in enumerate(self.staff_members, start=1):
            rows = []
            for item in COMPLIANCE_ITEMS:
                answer = member.answers[item.key]
                rows.append([
                    item.label,
                    {COMPLY: "Comply", NOT_COMPLY: "Not Comply"}.get(answer.status, ""),
                    answer.corrective_action,
                    answer.observation,
                ])
            tables.append(PdfTable(
                title=f"Staff Member {index}: {member.name} ({member.area})",
                columns=["Item", "Status", "Corrective Action", "Observation"],
                rows=rows,
                widths=[0.3, 0.16, 0.27, 0.27],
            ))
        return tables
