"""Quality control of mixed product (CF/PC-PG-ASC-006-RG001).

A pallet is laid out from the product's recipe: one section per fruit group
(highest share first) plus the fields every group shares. Group field values
are keyed ``"{group}-{campo}"``, shared fields by their plain name and the
fruit weight of a group by ``"Peso Fruta {group}"``.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..exceptions.errors import ChecklistError
from ..logic.calculations import mix_percentage, mix_within_tolerance
from .base_form import ChecklistForm, PdfTable, SignatureBlock, text
from .checklist_type import PRODUCTO_MIX

PREDEFINED_COMMON_FIELDS = (
    "Peso Bolsa (gr)",
    "Temperatura Pulpa (F)",
    "Temperatura Sala (F)",
    "Código Caja",
    "Código Barra Pallet",
    "Observaciones",
)
BAG_WEIGHT_KEYS = ("Peso Bolsa (gr)", "Peso Bolsa")
HIDDEN_IN_PDF = "Temperatura Sala"

INCOMPLETE_PALLET = "Completa todos los campos antes de finalizar el pallet"

_pallet_ids = itertools.count(1)


@dataclass(frozen=True, slots=True)
class FieldSpec:
    campo: str
    unidad: str = ""

    @property
    def label(self) -> str:
        return f"{self.campo} ({self.unidad})" if self.unidad and self.unidad not in self.campo \
            else self.campo


def group_key(group: str, campo: str) -> str:
    return f"{group}-{campo}"


def fruit_weight_key(group: str) -> str:
    return f"Peso Fruta {group}"


@dataclass
class Pallet:
    id: int = field(default_factory=lambda: next(_pallet_ids))
    collapsed: bool = False
    fields_by_fruit: Dict[str, List[FieldSpec]] = field(default_factory=dict)
    common_fields: List[FieldSpec] = field(default_factory=list)
    expected_compositions: Dict[str, float] = field(default_factory=dict)
    values: Dict[str, str] = field(default_factory=dict)

    def set_value(self, key: str, value: str) -> None:
        self.values[key] = value

    def missing_fields(self) -> List[str]:
        """Value keys still blank, group fields first."""
        missing = [group_key(g, f.campo)
                   for g, specs in self.fields_by_fruit.items() for f in specs
                   if not self.values.get(group_key(g, f.campo), "").strip()]
        missing += [f.campo for f in self.common_fields
                    if not self.values.get(f.campo, "").strip()]
        return missing

    def finalize(self) -> None:
        """Collapse the pallet; raises :class:`ChecklistError` while fields are blank."""
        if self.missing_fields():
            raise ChecklistError(INCOMPLETE_PALLET)
        self.collapsed = True

    def expand(self) -> None:
        self.collapsed = False

    # ------------------------------------------------------------------ #
    def bag_weight(self) -> str:
        for key in BAG_WEIGHT_KEYS:
            if self.values.get(key):
                return self.values[key]
        return ""

    def fruit_percentage(self, group: str) -> Optional[float]:
        """Share of the bag weight taken by *group*; None until both weights are entered."""
        fruit = self.values.get(fruit_weight_key(group), "")
        bag = self.bag_weight()
        if not fruit or not bag:
            return None
        return mix_percentage(fruit, bag)

    def fruit_within_tolerance(self, group: str) -> Optional[bool]:
        """None when either the percentage or the recipe share is unknown."""
        percentage = self.fruit_percentage(group)
        expected = self.expected_compositions.get(group)
        if percentage is None or expected is None:
            return None
        return mix_within_tolerance(percentage, expected)

    # ------------------------------------------------------------------ #
    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "collapsed": self.collapsed,
            "fieldsByFruit": {
                g: [{"campo": f.campo, "unidad": f.unidad} for f in specs]
                for g, specs in self.fields_by_fruit.items()
            },
            "commonFields": [{"campo": f.campo, "unidad": f.unidad} for f in self.common_fields],
            "expectedCompositions": dict(self.expected_compositions),
            "values": dict(self.values),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Pallet":
        def specs(raw: Iterable[Mapping[str, Any]]) -> List[FieldSpec]:
            return [FieldSpec(text(f.get("campo")), text(f.get("unidad"))) for f in raw or []]

        return cls(
            id=int(data.get("id") or next(_pallet_ids)),
            collapsed=bool(data.get("collapsed")),
            fields_by_fruit={g: specs(v) for g, v in (data.get("fieldsByFruit") or {}).items()},
            common_fields=specs(data.get("commonFields")),
            expected_compositions={g: float(v) for g, v in
                                   (data.get("expectedCompositions") or {}).items()},
            values={k: "" if v is None else str(v) for k, v in (data.get("values") or {}).items()},
        )


def build_pallet(composition: Sequence[Tuple[str, float]],
                 fields_by_group: Mapping[str, Sequence[FieldSpec]]) -> Pallet:
    """
    Lay out a new pallet.

    *composition* holds ``(agrupacion, fraction)`` rows of the recipe and
    *fields_by_group* the fields of each group. The predefined shared fields
    are taken from the first group that defines them and removed from all groups.
    """
    if not composition:
        raise ChecklistError("No composition data found for the selected SKU")
    ordered = sorted(composition, key=lambda row: row[1], reverse=True)
    fields: Dict[str, List[FieldSpec]] = {}
    for group, _fraction in ordered:
        specs = list(fields_by_group.get(group) or [])
        if not specs:
            raise ChecklistError(f"No fields found for agrupacion {group}")
        fields[group] = specs

    common: List[FieldSpec] = []
    for name in PREDEFINED_COMMON_FIELDS:
        found = next((f for specs in fields.values() for f in specs if f.campo == name), None)
        if found is not None:
            common.append(found)
    for group in fields:
        fields[group] = [f for f in fields[group] if f.campo not in PREDEFINED_COMMON_FIELDS]

    return Pallet(
        fields_by_fruit=fields,
        common_fields=common,
        expected_compositions={group: float(fraction) for group, fraction in ordered},
    )


def variety_label(composition: Sequence[Tuple[str, float]]) -> str:
    """``"Blueberry"`` for a single fruit, ``"Mango (60.0%), Pineapple (40.0%)"`` for a mix."""
    ordered = sorted(composition, key=lambda row: row[1], reverse=True)
    if not ordered:
        return ""
    if len(ordered) == 1:
        return ordered[0][0]
    return ", ".join(f"{group} ({fraction * 100:.1f}%)" for group, fraction in ordered)


@dataclass
class ProductoMixForm(ChecklistForm):
    """``monitor_name`` is the quality controller, ``monitor_signature`` their signature."""
    checklist_type = PRODUCTO_MIX

    orden_fabricacion: str = ""
    jefe_linea: str = ""
    cliente: str = ""
    producto: str = ""
    sku: str = ""
    pallets: List[Pallet] = field(default_factory=list)

    def add_pallet(self, pallet: Pallet) -> Pallet:
        self.pallets.append(pallet)
        return pallet

    def remove_pallet(self, pallet_id: int) -> None:
        self.pallets = [p for p in self.pallets if p.id != pallet_id]

    def validate(self) -> List[str]:
        errors = []
        required = [("Fecha", self.date), ("Orden de Fabricación", self.orden_fabricacion),
                    ("Jefe de Línea", self.jefe_linea), ("Control Calidad", self.monitor_name),
                    ("Cliente", self.cliente), ("Producto", self.producto), ("SKU", self.sku),
                    ("Firma Monitor Calidad", self.monitor_signature)]
        missing = [label for label, value in required if not text(value)]
        if missing:
            errors.append(f"Completa los campos del encabezado: {', '.join(missing)}")
        if not self.pallets:
            errors.append("Agrega al menos un pallet")
        elif any(p.missing_fields() for p in self.pallets):
            errors.append(INCOMPLETE_PALLET)
        return errors

    def warnings(self) -> List[str]:
        lines = []
        for index, pallet in enumerate(self.pallets, start=1):
            for group in pallet.fields_by_fruit:
                if pallet.fruit_within_tolerance(group) is False:
                    lines.append(
                        f"Pallet #{index}: {group} {pallet.fruit_percentage(group):.1f}% "
                        f"(Esperado: {pallet.expected_compositions[group] * 100:.1f}%)"
                    )
        return lines

    def has_meaningful_data(self) -> bool:
        return bool(self.orden_fabricacion or self.jefe_linea or self.monitor_name
                    or self.cliente or self.producto or self.monitor_signature or self.pallets)

    # ------------------------------------------------------------------ #
    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "monitor_name": self.monitor_name,
            "monitor_signature": self.monitor_signature,
            "orden_fabricacion": self.orden_fabricacion,
            "jefe_linea": self.jefe_linea,
            "cliente": self.cliente,
            "producto": self.producto,
            "sku": self.sku,
            "pallets": [p.to_dict() for p in self.pallets],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProductoMixForm":
        return cls(
            date=text(data.get("date")),
            monitor_name=text(data.get("monitor_name")),
            monitor_signature=data.get("monitor_signature") or "",
            orden_fabricacion=text(data.get("orden_fabricacion")),
            jefe_linea=text(data.get("jefe_linea")),
            cliente=text(data.get("cliente")),
            producto=text(data.get("producto")),
            sku=text(data.get("sku")),
            pallets=[Pallet.from_dict(p) for p in data.get("pallets") or []],
        )

    def db_row(self) -> Dict[str, Any]:
        row = super().db_row()
        row.update(
            orden_fabricacion=self.orden_fabricacion,
            jefe_linea=self.jefe_linea,
            control_calidad=self.monitor_name,
            cliente=self.cliente,
            producto=self.producto,
            sku=self.sku,
        )
        return row

    # ------------------------------------------------------------------ #
    def header_fields(self) -> List[Tuple[str, str]]:
        return [
            ("Fecha", self.date),
            ("Orden de Fabricación", self.orden_fabricacion),
            ("Jefe de Línea", self.jefe_linea),
            ("Control Calidad", self.monitor_name),
            ("Cliente", self.cliente),
            ("Producto", self.producto),
            ("SKU", self.sku),
        ]

    def pdf_tables(self) -> List[PdfTable]:
        tables = []
        for index, pallet in enumerate(self.pallets, start=1):
            rows = [[f.label, pallet.values.get(f.campo, "")]
                    for f in pallet.common_fields if HIDDEN_IN_PDF not in f.campo]
            for group, specs in pallet.fields_by_fruit.items():
                expected = pallet.expected_compositions.get(group)
                title = group if expected is None else f"{group} (Esperado: {expected * 100:.1f}%)"
                fruit = pallet.values.get(fruit_weight_key(group), "")
                percentage = pallet.fruit_percentage(group)
                if fruit:
                    shown = fruit if percentage is None else f"{fruit}  [{percentage:.1f}%]"
                    rows.append([f"{title} - Peso Fruta (gr)", shown])
                else:
                    rows.append([title, ""])
                rows += [[f"  {f.label}", pallet.values.get(group_key(group, f.campo), "")]
                         for f in specs]
            tables.append(PdfTable(title=f"Pallet #{index}", columns=["Campo", "Valor"],
                                   rows=rows, widths=[0.55, 0.45]))
        return tables

    def signatures(self) -> List[SignatureBlock]:
        return [SignatureBlock("Firma Monitor Calidad", self.monitor_name, self.monitor_signature)]
