"""Cleanliness control of the packing room (CF/PC-PG-SAN-001-RG005)."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..logic.calculations import RluStatus, rlu_status
from .base_form import ChecklistForm, PdfTable, base_dict, base_fields, text, yes_no
from .checklist_type import CLEANLINESS_PACKING

AREAS_FILE = Path(__file__).resolve().parents[1] / "data" / "cleanliness_areas.json"
BIOLUMINESCENCE_ROWS = 5


@lru_cache(maxsize=1)
def _area_catalogue() -> tuple:
    with AREAS_FILE.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    return tuple((a["area_name"], tuple(a["parts"])) for a in data.get("areas", []))


@dataclass
class PartCheck:
    part_name: str
    comply: Optional[bool] = None
    observation: str = ""
    corrective_action: str = ""
    corrective_action_comply: Optional[bool] = None

    def set_comply(self, value: Optional[bool]) -> None:
        """Complying parts carry no observation or corrective action."""
        self.comply = value
        if value is True:
            self.observation = ""
            self.corrective_action = ""
            self.corrective_action_comply = None

    @property
    def is_incomplete_non_compliance(self) -> bool:
        return self.comply is False and (
            not self.observation.strip()
            or not self.corrective_action.strip()
            or self.corrective_action_comply is None
        )


@dataclass
class CleanlinessArea:
    area_name: str
    parts: List[PartCheck] = field(default_factory=list)

    @property
    def has_missing_answers(self) -> bool:
        return any(p.comply is None for p in self.parts)


@dataclass
class BioluminescenceResult:
    part_name: str = ""
    rlu: str = ""
    retest_rlu: str = ""

    @property
    def status(self) -> RluStatus:
        return rlu_status(self.rlu)

    def set_rlu(self, value: str) -> None:
        """An accepted reading needs no retest, so any retest value is dropped."""
        self.rlu = value
        if self.status is RluStatus.ACCEPT:
            self.retest_rlu = ""

    @property
    def is_filled(self) -> bool:
        return bool(self.part_name.strip() or self.rlu.strip())

    @property
    def missing_retest(self) -> bool:
        return self.status.needs_retest and not self.retest_rlu.strip()


def default_areas() -> List[CleanlinessArea]:
    return [CleanlinessArea(name, [PartCheck(p) for p in parts])
            for name, parts in _area_catalogue()]


def _blank_results() -> List[BioluminescenceResult]:
    return [BioluminescenceResult() for _ in range(BIOLUMINESCENCE_ROWS)]


def _opt_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


@dataclass
class CleanlinessControlForm(ChecklistForm):
    checklist_type = CLEANLINESS_PACKING

    areas: List[CleanlinessArea] = field(default_factory=default_areas)
    bioluminescence: List[BioluminescenceResult] = field(default_factory=_blank_results)

    # ------------------------------------------------------------------ #
    def validate(self) -> List[str]:
        errors = self._section1_errors()
        missing = [a.area_name for a in self.areas if a.has_missing_answers]
        if missing:
            errors.append(
                "Please select Comply or Not Comply for all parts in the following areas: "
                + ", ".join(missing)
            )
        if any(p.is_incomplete_non_compliance for a in self.areas for p in a.parts):
            errors.append(
                "Please fill in observation, corrective action, and corrective action "
                "status for all Not Comply parts"
            )
        if any(r.missing_retest for r in self.bioluminescence):
            errors.append("Please enter retest RLU values for all CAUTION or REJECTS results in Section 3")
        return errors

    def has_meaningful_data(self) -> bool:
        return bool(
            self.monitor_name or self.monitor_signature
            or any(p.comply is not None or p.observation for a in self.areas for p in a.parts)
            or any(r.is_filled for r in self.bioluminescence)
        )

    def recorded_results(self) -> List[BioluminescenceResult]:
        return [r for r in self.bioluminescence if r.is_filled][:BIOLUMINESCENCE_ROWS]

    # ------------------------------------------------------------------ #
    def to_dict(self) -> Dict[str, Any]:
        data = base_dict(self)
        data["areas"] = [
            {
                "area_name": a.area_name,
                "parts": [
                    {
                        "part_name": p.part_name,
                        "comply": p.comply,
                        "observation": p.observation,
                        "corrective_action": p.corrective_action,
                        "corrective_action_comply": p.corrective_action_comply,
                    }
                    for p in a.parts
                ],
            }
            for a in self.areas
        ]
        data["bioluminescence"] = [
            {"part_name": r.part_name, "rlu": r.rlu, "retest_rlu": r.retest_rlu}
            for r in self.bioluminescence
        ]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CleanlinessControlForm":
        areas = default_areas()
        if data.get("areas"):
            areas = [
                CleanlinessArea(
                    text(a.get("area_name")),
                    [
                        PartCheck(
                            part_name=text(p.get("part_name")),
                            comply=_opt_bool(p.get("comply")),
                            observation=text(p.get("observation")),
                            corrective_action=text(p.get("corrective_action")),
                            corrective_action_comply=_opt_bool(p.get("corrective_action_comply")),
                        )
                        for p in a.get("parts", [])
                    ],
                )
                for a in data["areas"]
            ]
        results = [
            BioluminescenceResult(text(r.get("part_name")), text(r.get("rlu")), text(r.get("retest_rlu")))
            for r in data.get("bioluminescence", [])
        ][:BIOLUMINESCENCE_ROWS]
        results += [BioluminescenceResult() for _ in range(BIOLUMINESCENCE_ROWS - len(results))]
        return cls(**base_fields(data), areas=areas, bioluminescence=results)

    def payload(self) -> Dict[str, Any]:
        """Stored form: only the recorded bioluminescence rows."""
        data = self.to_dict()
        data["bioluminescence"] = [
            {"part_name": r.part_name, "rlu": r.rlu, "retest_rlu": r.retest_rlu or None}
            for r in self.recorded_results()
        ]
        return data

    # ------------------------------------------------------------------ #
    def pdf_tables(self) -> List[PdfTable]:
        tables = []
        for area in self.areas:
            rows = [
                [p.part_name, yes_no(p.comply), p.observation, p.corrective_action,
                 yes_no(p.corrective_action_comply) if p.comply is False else ""]
                for p in area.parts
            ]
            tables.append(PdfTable(
                title=area.area_name,
                columns=["Part", "Status", "Observation", "Corrective Action", "C.A. Status"],
                rows=rows,
                widths=[0.26, 0.14, 0.24, 0.22, 0.14],
            ))
        tables.append(PdfTable(
            title="Bioluminescence Results (ATP)",
            columns=["Part", "RLU", "Result", "Retest RLU", "Retest Result"],
            rows=[
                [r.part_name, r.rlu, r.status.label, r.retest_rlu, rlu_status(r.retest_rlu).label]
                for r in self.recorded_results()
            ],
            note="Limits: < 20 ACCEPT, 20-60 CAUTION, > 60 REJECTS",
        ))
        return tables
