"""Concrete views of the six checklist forms."""
from __future__ import annotations

import logging
import tkinter as tk
from tkinter import messagebox, ttk
from typing import Any, List, Optional

from ..exceptions.errors import ChecklistError
from ..models.base_form import yes_no
from ..models.cleanliness import CleanlinessControlForm
from ..models.materials_control import (
    MATERIAL_OPTIONS,
    MATERIAL_STATUSES,
    MaterialsControlForm,
    PersonnelMaterial,
)
from ..models.product_tasting import ATTRIBUTES, RESULTS, FinalProductTastingForm
from ..models.producto_mix import Pallet, ProductoMixForm, fruit_weight_key, group_key
from ..models.staff_practices import (
    COMPLIANCE_ITEMS,
    COMPLY,
    NOT_COMPLY,
    SHIFTS,
    StaffPracticesForm,
)
from ..models.weighing_sealing import BAGS_PER_ENTRY, BagEntry, WeighingSealingForm
from ..models.weighing_sealing import COMPLY as SEALED_OK
from ..models.weighing_sealing import NOT_COMPLY as SEALED_NOK
from ..repository.product_catalog_repository import ProductCatalogRepository
from .checklist_form_view import ChecklistFormView, HeaderField
from .row_editor import Column, RowEditor

log = logging.getLogger(__name__)

COMPLY_CHOICES = ("", "Comply", "Not Comply")
STATUS_TEXT = {COMPLY: "Comply", NOT_COMPLY: "Not Comply"}


def _to_bool(value: str) -> Optional[bool]:
    return {"Comply": True, "Not Comply": False}.get(value)


def _int_setter(attr: str, optional: bool = False):
    def _set(obj: Any, value: str) -> bool:
        value = value.strip()
        if not value:
            setattr(obj, attr, None if optional else 0)
            return True
        try:
            number = int(value)
        except ValueError:
            return False
        if number < 0:
            return False
        setattr(obj, attr, number)
        return True
    return _set


def _attr(name: str) -> Column:
    """Plain text column bound to ``obj.<name>``."""
    return Column(name.replace("_", " ").title(), get=lambda o: getattr(o, name),
                  set=lambda o, v: setattr(o, name, v))


# --------------------------------------------------------------------------- #
class CleanlinessControlView(ChecklistFormView):
    form_cls = CleanlinessControlForm

    def build_body(self, parent: ttk.Frame) -> None:
        form: CleanlinessControlForm = self.form
        for i, area in enumerate(form.areas):
            box = ttk.LabelFrame(parent, text=area.area_name, padding=6)
            box.grid(row=i, column=0, sticky="ew", pady=4)
            RowEditor(
                box,
                rows=lambda a=area: a.parts,
                on_change=self.changed,
                columns=[
                    Column("Part", get=lambda p: p.part_name, kind="label", width=28),
                    Column("Comply", get=lambda p: yes_no(p.comply), kind="combo",
                           values=COMPLY_CHOICES, set=lambda p, v: p.set_comply(_to_bool(v))),
                    Column("Observation", get=lambda p: p.observation,
                           set=lambda p, v: setattr(p, "observation", v), width=22),
                    Column("Corrective Action", get=lambda p: p.corrective_action,
                           set=lambda p, v: setattr(p, "corrective_action", v), width=22),
                    Column("C.A. Comply", get=lambda p: yes_no(p.corrective_action_comply),
                           kind="combo", values=COMPLY_CHOICES,
                           set=lambda p, v: setattr(p, "corrective_action_comply", _to_bool(v))),
                ],
            ).grid(row=0, column=0, sticky="ew")

        bio = ttk.LabelFrame(parent, text="Bioluminescence (ATP)", padding=6)
        bio.grid(row=len(form.areas), column=0, sticky="ew", pady=(10, 4))
        RowEditor(
            bio,
            rows=lambda: self.form.bioluminescence,
            on_change=self.changed,
            columns=[
                Column("Part", get=lambda r: r.part_name,
                       set=lambda r, v: setattr(r, "part_name", v), width=28),
                Column("RLU", get=lambda r: r.rlu, set=lambda r, v: r.set_rlu(v), width=8),
                Column("Result", get=lambda r: r.status.label, kind="label", width=10),
                Column("Retest RLU", get=lambda r: r.retest_rlu,
                       set=lambda r, v: setattr(r, "retest_rlu", v), width=8),
            ],
        ).grid(row=0, column=0, sticky="ew")
        ttk.Label(bio, text="< 20 accept · 20-60 caution · > 60 reject (retest required)").grid(
            row=1, column=0, sticky="w", pady=(4, 0)
        )


# --------------------------------------------------------------------------- #
class StaffPracticesView(ChecklistFormView):
    form_cls = StaffPracticesForm

    def header_fields(self) -> List[HeaderField]:
        return [("Shift", "shift", SHIFTS)]

    def build_body(self, parent: ttk.Frame) -> None:
        self._members = ttk.Frame(parent)
        self._members.grid(row=0, column=0, sticky="ew")
        self._members.columnconfigure(0, weight=1)
        ttk.Button(parent, text="Add Staff Member", command=self._add_member).grid(
            row=1, column=0, sticky="w", pady=(6, 0)
        )
        self._render_members()

    def _render_members(self) -> None:
        for child in self._members.winfo_children():
            child.destroy()
        form: StaffPracticesForm = self.form
        for i, member in enumerate(form.staff_members):
            box = ttk.LabelFrame(self._members, text=f"Staff Member #{i + 1}", padding=6)
            box.grid(row=i, column=0, sticky="ew", pady=4)
            head = ttk.Frame(box)
            head.grid(row=0, column=0, sticky="w")
            for c, (label, attr) in enumerate((("Name", "name"), ("Area", "area"))):
                ttk.Label(head, text=label).grid(row=0, column=c * 2, padx=(0, 4))
                var = tk.StringVar(value=getattr(member, attr))
                var.trace_add("write", lambda *_a, m=member, a=attr, v=var: self._set(m, a, v.get()))
                ttk.Entry(head, textvariable=var, width=24).grid(row=0, column=c * 2 + 1, padx=(0, 12))
            if len(form.staff_members) > 1:
                ttk.Button(head, text="Remove", command=lambda idx=i: self._remove_member(idx)).grid(
                    row=0, column=4
                )
            RowEditor(
                box,
                rows=lambda: list(COMPLIANCE_ITEMS),
                on_change=self.changed,
                columns=[
                    Column("Item", get=lambda it: it.label, kind="label", width=26),
                    Column("Status", get=lambda it, m=member: STATUS_TEXT.get(m.answers[it.key].status, ""),
                           kind="combo", values=COMPLY_CHOICES,
                           set=lambda it, v, m=member: m.set_status(it.key, _status_key(v))),
                    Column("Corrective Action", get=lambda it, m=member: m.answers[it.key].corrective_action,
                           set=lambda it, v, m=member: setattr(m.answers[it.key], "corrective_action", v),
                           width=24),
                    Column("Observation", get=lambda it, m=member: m.answers[it.key].observation,
                           set=lambda it, v, m=member: setattr(m.answers[it.key], "observation", v),
                           width=24),
                ],
            ).grid(row=1, column=0, sticky="ew", pady=(6, 0))

    def _set(self, obj: Any, attr: str, value: str) -> None:
        setattr(obj, attr, value)
        self.changed()

    def _add_member(self) -> None:
        self.form.add_member()
        self._render_members()
        self.changed()

    def _remove_member(self, index: int) -> None:
        self.form.remove_member(index)
        self._render_members()
        self.changed()


def _status_key(value: str) -> str:
    return {"Comply": COMPLY, "Not Comply": NOT_COMPLY}.get(value, "")


# --------------------------------------------------------------------------- #
class MaterialsControlView(ChecklistFormView):
    form_cls = MaterialsControlForm

    def header_fields(self) -> List[HeaderField]:
        return [("Productive Area", "productive_area", None),
                ("Line Manager", "line_manager_name", None)]

    def build_body(self, parent: ttk.Frame) -> None:
        box = ttk.LabelFrame(parent, text="Personnel and Materials", padding=6)
        box.grid(row=0, column=0, sticky="ew")
        RowEditor(
            box,
            rows=lambda: self.form.personnel,
            on_change=self.changed,
            factory=lambda: self.form.personnel.append(PersonnelMaterial()),
            remove=self._remove,
            add_label="Add Person",
            columns=[
                Column("Person", get=lambda r: r.person_name,
                       set=lambda r, v: setattr(r, "person_name", v), width=18),
                Column("Material", get=lambda r: r.material, kind="combo", values=MATERIAL_OPTIONS,
                       set=lambda r, v: setattr(r, "material", v), width=16),
                Column("Qty", get=lambda r: r.quantity or "", set=_int_setter("quantity"), width=5),
                Column("Status", get=lambda r: r.material_status, kind="combo",
                       values=MATERIAL_STATUSES, set=lambda r, v: r.set_status(v), width=11),
                Column("Observation", get=lambda r: r.observation,
                       set=lambda r, v: setattr(r, "observation", v), width=18),
                Column("Return Motive", get=lambda r: r.return_motive,
                       set=lambda r, v: setattr(r, "return_motive", v), width=16),
                Column("Qty Received", get=lambda r: r.quantity_received,
                       set=_int_setter("quantity_received", optional=True), width=6),
                Column("Status Received", get=lambda r: r.material_status_received, kind="combo",
                       values=MATERIAL_STATUSES, set=lambda r, v: r.set_status_received(v), width=11),
                Column("Observation Received", get=lambda r: r.observation_received,
                       set=lambda r, v: setattr(r, "observation_received", v), width=18),
            ],
        ).grid(row=0, column=0, sticky="ew")

    def _remove(self, index: int) -> None:
        if len(self.form.personnel) > 1:
            del self.form.personnel[index]


# --------------------------------------------------------------------------- #
class FinalProductTastingView(ChecklistFormView):
    form_cls = FinalProductTastingForm
    signature_attr = "analyst_signature"
    signature_label = "Analyst Signature"
    monitor_label = "Monitor"

    def header_fields(self) -> List[HeaderField]:
        return [
            ("Shift", "turno", None),
            ("Format", "formato", None),
            ("Bar Code", "bar_code", None),
            ("Best Before", "best_before", None),
            ("Brix", "brix", None),
            ("pH", "ph", None),
            ("Product", "product", None),
            ("Client", "client", None),
            ("Process Date", "process_date", None),
            ("Batch", "batch", None),
            ("Variety", "variety", None),
            ("Analyst Name", "analyst_name", None),
            ("Result", "result", RESULTS),
        ]

    def build_body(self, parent: ttk.Frame) -> None:
        box = ttk.LabelFrame(parent, text="Participants (grades 3.0 - 6.0)", padding=6)
        box.grid(row=0, column=0, sticky="ew")
        columns = [_attr("name")]
        for attribute in ATTRIBUTES:
            columns.append(Column(attribute.title(), width=7,
                                  get=lambda p, a=attribute: p.grades[a],
                                  set=lambda p, v, a=attribute: p.set_grade(a, v)))
        RowEditor(
            box,
            rows=lambda: self.form.participants,
            on_change=self._grades_changed,
            factory=self.form.add_participant,
            remove=lambda i: self.form.participants.pop(i),
            add_label="Add Participant",
            columns=columns,
        ).grid(row=0, column=0, sticky="ew")

        self._means = tk.StringVar()
        ttk.Label(parent, textvariable=self._means).grid(row=1, column=0, sticky="w", pady=6)
        self._update_means()

        ttk.Label(parent, text="Comments").grid(row=2, column=0, sticky="w")
        self.text_box(parent, "comments").grid(row=3, column=0, sticky="ew")

    def _grades_changed(self) -> None:
        self._update_means()
        self.changed()

    def _update_means(self) -> None:
        form: FinalProductTastingForm = self.form
        parts = [f"{a.title()}: {m:.1f}" for a, m in form.means().items()]
        self._means.set("Means  " + "  ·  ".join(parts) + f"   |   Final grade: {form.final_grade:.1f}")


# --------------------------------------------------------------------------- #
class WeighingSealingView(ChecklistFormView):
    form_cls = WeighingSealingForm

    def header_fields(self) -> List[HeaderField]:
        return [("Shift", "shift", SHIFTS), ("Process Room", "process_room", None),
                ("Brand", "brand", None), ("Product", "product", None)]

    def build_body(self, parent: ttk.Frame) -> None:
        columns = [
            Column("Time", get=lambda e: e.time, set=lambda e, v: setattr(e, "time", v), width=6),
            Column("Bag Code", get=lambda e: e.bag_code, set=lambda e, v: setattr(e, "bag_code", v), width=10),
        ]
        for n in range(BAGS_PER_ENTRY):
            columns.append(Column(f"W{n + 1}", width=6, get=lambda e, i=n: e.weights[i],
                                  set=lambda e, v, i=n: e.weights.__setitem__(i, v.strip())))
        columns.append(Column("Avg", get=lambda e: e.average_weight, kind="label", width=8))
        for n in range(BAGS_PER_ENTRY):
            columns.append(Column(f"S{n + 1}", kind="combo", values=("", SEALED_OK, SEALED_NOK), width=9,
                                  get=lambda e, i=n: e.sealed[i],
                                  set=lambda e, v, i=n: e.sealed.__setitem__(i, v)))
        columns += [
            Column("Other Codification", get=lambda e: e.other_codification,
                   set=lambda e, v: setattr(e, "other_codification", v), width=12),
            Column("Declaration of Origin", kind="combo", values=("", SEALED_OK, SEALED_NOK), width=10,
                   get=lambda e: e.declaration_of_origin,
                   set=lambda e, v: setattr(e, "declaration_of_origin", v)),
        ]
        box = ttk.LabelFrame(parent, text="Bag Entries (W = weight, S = sealed)", padding=6)
        box.grid(row=0, column=0, sticky="ew")
        RowEditor(
            box,
            rows=lambda: self.form.bag_entries,
            on_change=self.changed,
            factory=lambda: self.form.bag_entries.append(BagEntry()),
            remove=lambda i: self.form.bag_entries.pop(i),
            add_label="Add Bag Entry",
            columns=columns,
        ).grid(row=0, column=0, sticky="ew")

        ttk.Label(parent, text="Comments").grid(row=1, column=0, sticky="w", pady=(8, 0))
        self.text_box(parent, "comments").grid(row=2, column=0, sticky="ew")


# --------------------------------------------------------------------------- #
class ProductoMixView(ChecklistFormView):
    """Pallets are laid out from the product catalogue of the selected SKU."""
    form_cls = ProductoMixForm
    monitor_label = "Control Calidad"
    signature_label = "Firma Monitor Calidad"

    def __init__(self, parent: tk.Misc, *, catalog: Optional[ProductCatalogRepository] = None, **kwargs) -> None:
        self._catalog = catalog or ProductCatalogRepository()
        super().__init__(parent, **kwargs)

    def header_fields(self) -> List[HeaderField]:
        return [("Orden de Fabricación", "orden_fabricacion", None),
                ("Jefe de Línea", "jefe_linea", None),
                ("Cliente", "cliente", None),
                ("Producto", "producto", None),
                ("SKU", "sku", None)]

    def build_body(self, parent: ttk.Frame) -> None:
        pick = ttk.LabelFrame(parent, text="Producto", padding=6)
        pick.grid(row=0, column=0, sticky="ew")
        self._brand = tk.StringVar()
        self._material = tk.StringVar()
        ttk.Label(pick, text="Marca").grid(row=0, column=0, padx=(0, 4))
        brand_box = ttk.Combobox(pick, textvariable=self._brand, values=self._catalog.brands(),
                                 state="readonly", width=24)
        brand_box.grid(row=0, column=1, padx=(0, 12))
        ttk.Label(pick, text="Material").grid(row=0, column=2, padx=(0, 4))
        self._material_box = ttk.Combobox(pick, textvariable=self._material, state="readonly", width=32)
        self._material_box.grid(row=0, column=3, padx=(0, 12))
        ttk.Button(pick, text="Agregar Pallet", command=self._add_pallet).grid(row=0, column=4)
        brand_box.bind("<<ComboboxSelected>>", self._on_brand)
        self._material_box.bind("<<ComboboxSelected>>", self._on_material)

        self._pallets = ttk.Frame(parent)
        self._pallets.grid(row=1, column=0, sticky="ew", pady=(8, 0))
        self._pallets.columnconfigure(0, weight=1)
        self._render_pallets()

    # ------------------------------------------------------------------ #
    def _on_brand(self, _event=None) -> None:
        self._material.set("")
        self._material_box.configure(values=self._catalog.materials(self._brand.get()))

    def _on_material(self, _event=None) -> None:
        sku = self._catalog.sku_for(self._brand.get(), self._material.get())
        self.set_header("producto", self._material.get())
        self.set_header("sku", sku or "")

    def _add_pallet(self) -> None:
        sku = self.form.sku.strip()
        if not sku:
            messagebox.showwarning("Pallet", "Selecciona primero un producto (SKU).", parent=self)
            return
        try:
            pallet = self._catalog.new_pallet(sku)
        except ChecklistError as exc:
            messagebox.showerror("Pallet", str(exc), parent=self)
            return
        self.form.add_pallet(pallet)
        self._render_pallets()
        self.changed()

    # ------------------------------------------------------------------ #
    def _render_pallets(self) -> None:
        for child in self._pallets.winfo_children():
            child.destroy()
        for i, pallet in enumerate(self.form.pallets):
            box = ttk.LabelFrame(self._pallets, text=f"Pallet #{i + 1}", padding=6)
            box.grid(row=i, column=0, sticky="ew", pady=4)
            box.columnconfigure(1, weight=1)
            if pallet.collapsed:
                self._render_collapsed(box, pallet)
            else:
                self._render_open(box, pallet)

    def _render_collapsed(self, box: ttk.LabelFrame, pallet: Pallet) -> None:
        summary = []
        for group in pallet.fields_by_fruit:
            pct = pallet.fruit_percentage(group)
            summary.append(f"{group}: {'-' if pct is None else f'{pct:.1f}%'}")
        ttk.Label(box, text="Finalizado  ·  " + "  ·  ".join(summary)).grid(row=0, column=0, sticky="w")
        bar = ttk.Frame(box)
        bar.grid(row=0, column=1, sticky="e")
        ttk.Button(bar, text="Editar", command=lambda: self._expand(pallet)).grid(row=0, column=0, padx=4)
        ttk.Button(bar, text="Eliminar", command=lambda: self._remove(pallet)).grid(row=0, column=1)

    def _render_open(self, box: ttk.LabelFrame, pallet: Pallet) -> None:
        row = 0
        for spec in pallet.common_fields:
            self._value_entry(box, row, spec.label, pallet, spec.campo)
            row += 1
        for group, specs in pallet.fields_by_fruit.items():
            expected = pallet.expected_compositions.get(group)
            title = group if expected is None else f"{group} (Esperado: {expected * 100:.1f}%)"
            sub = ttk.LabelFrame(box, text=title, padding=4)
            sub.grid(row=row, column=0, columnspan=2, sticky="ew", pady=4)
            sub.columnconfigure(1, weight=1)
            row += 1
            pct_var = tk.StringVar(value=self._pct_text(pallet, group))
            self._value_entry(sub, 0, "Peso Fruta (gr)", pallet, fruit_weight_key(group),
                              after=lambda p=pallet, g=group, v=pct_var: v.set(self._pct_text(p, g)))
            ttk.Label(sub, textvariable=pct_var).grid(row=0, column=2, padx=6)
            for j, spec in enumerate(specs, start=1):
                self._value_entry(sub, j, spec.label, pallet, group_key(group, spec.campo))
        bar = ttk.Frame(box)
        bar.grid(row=row, column=0, columnspan=2, sticky="e", pady=(4, 0))
        ttk.Button(bar, text="Finalizar Pallet", command=lambda: self._finalize(pallet)).grid(row=0, column=0, padx=4)
        ttk.Button(bar, text="Eliminar", command=lambda: self._remove(pallet)).grid(row=0, column=1)

    def _value_entry(self, parent, row: int, label: str, pallet: Pallet, key: str, after=None) -> None:
        ttk.Label(parent, text=label).grid(row=row, column=0, sticky="w", padx=(0, 6), pady=1)
        var = tk.StringVar(value=pallet.values.get(key, ""))

        def _write(*_args) -> None:
            pallet.set_value(key, var.get())
            if after is not None:
                after()
            self.changed()

        var.trace_add("write", _write)
        ttk.Entry(parent, textvariable=var, width=30).grid(row=row, column=1, sticky="ew", pady=1)

    def _pct_text(self, pallet: Pallet, group: str) -> str:
        pct = pallet.fruit_percentage(group)
        if pct is None:
            return ""
        ok = pallet.fruit_within_tolerance(group)
        return f"{pct:.1f}%" + ("" if ok in (True, None) else "  fuera de tolerancia")

    def _finalize(self, pallet: Pallet) -> None:
        try:
            pallet.finalize()
        except ChecklistError as exc:
            messagebox.showerror("Pallet", str(exc), parent=self)
            return
        self._render_pallets()
        self.changed()

    def _expand(self, pallet: Pallet) -> None:
        pallet.expand()
        self._render_pallets()
        self.changed()

    def _remove(self, pallet: Pallet) -> None:
        self.form.remove_pallet(pallet.id)
        self._render_pallets()
        self.changed()


FORM_VIEWS = (
    CleanlinessControlView,
    StaffPracticesView,
    MaterialsControlView,
    FinalProductTastingView,
    WeighingSealingView,
    ProductoMixView,
)
