"""Registry of the checklist forms: titles, document codes, buckets and file naming."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True, slots=True)
class ChecklistType:
    key: str
    title: str
    code: str
    bucket: str
    table: str
    filename_name: str
    numbered: bool = True        # "-NN" suffix; otherwise "-HHMMSS-" time stamp
    full_month: bool = False     # JANUARY instead of JAN in file names


CLEANLINESS_PACKING = ChecklistType(
    key="cleanliness_packing",
    title="Cleanliness Control Packing",
    code="CF/PC-PG-SAN-001-RG005",
    bucket="checklist-cleanliness-control-packing",
    table="checklist_cleanliness_control_packing",
    filename_name="Cleanliness-Control-Packing",
    full_month=True,
)

STAFF_PRACTICES = ChecklistType(
    key="staff_practices",
    title="Staff Good Practices Control",
    code="CF/PC-ASC-004-RG003",
    bucket="checklist-staff-practices",
    table="checklist_staff_practices",
    filename_name="Staff-Good-Practices-Control",
    full_month=True,
)

MATERIALS_CONTROL = ChecklistType(
    key="materials_control",
    title="Internal Control of Materials Used in Production Areas",
    code="CF/PC-ASC-004-RG008",
    bucket="checklist-materials-control",
    table="checklist_materials_control",
    filename_name="Internal-Control-Materials",
)

FINAL_PRODUCT_TASTING = ChecklistType(
    key="final_product_tasting",
    title="Final Product Tasting",
    code="CF/PC-ASC-006-RG008",
    bucket="checklist-final-product-tasting",
    table="checklist_final_product_tasting",
    filename_name="Final-Product-Tasting",
    numbered=False,
)

WEIGHING_SEALING = ChecklistType(
    key="weighing_sealing",
    title="Check Weighing and Sealing of Packaged Products",
    code="CF/PC-ASC-006-RG005",
    bucket="checklist-weighing-sealing",
    table="checklist_weighing_sealing",
    filename_name="Check-Weighing-Sealing",
    full_month=True,
)

PRODUCTO_MIX = ChecklistType(
    key="producto_mix",
    title="Quality Control Mixed Product",
    code="CF/PC-PG-ASC-006-RG001",
    bucket="checklist-producto-mix",
    table="checklist_producto_mix",
    filename_name="Producto-Mix",
    numbered=False,
)

CHECKLIST_TYPES: Dict[str, ChecklistType] = {
    t.key: t for t in (
        CLEANLINESS_PACKING,
        STAFF_PRACTICES,
        MATERIALS_CONTROL,
        FINAL_PRODUCT_TASTING,
        WEIGHING_SEALING,
        PRODUCTO_MIX,
    )
}


def get_checklist_type(key: str) -> ChecklistType:
    try:
        return CHECKLIST_TYPES[key]
    except KeyError:
        raise KeyError(f"unknown checklist type: {key!r}") from None
