"""Mixed product pallets and the product catalogue."""
from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from checklists.exceptions.errors import ChecklistError
from checklists.models.producto_mix import (
    INCOMPLETE_PALLET,
    FieldSpec,
    Pallet,
    ProductoMixForm,
    build_pallet,
    fruit_weight_key,
    group_key,
    variety_label,
)
from checklists.repository.product_catalog_repository import ProductCatalogRepository

BERRY_FIELDS = [
    FieldSpec("Peso Bolsa (gr)", "gr"),
    FieldSpec("Brix", "°Bx"),
    FieldSpec("Temperatura Sala (F)", "F"),
    FieldSpec("Observaciones"),
]
MANGO_FIELDS = [
    FieldSpec("Peso Bolsa (gr)", "gr"),
    FieldSpec("Color"),
    FieldSpec("Código Caja"),
]


class TestBuildPallet(unittest.TestCase):
    def setUp(self) -> None:
        self.pallet = build_pallet(
            [("Mango", 0.4), ("Blueberry", 0.6)],
            {"Mango": MANGO_FIELDS, "Blueberry": BERRY_FIELDS},
        )

    def test_groups_sorted_by_share(self) -> None:
        self.assertEqual(list(self.pallet.fields_by_fruit), ["Blueberry", "Mango"])
        self.assertEqual(self.pallet.expected_compositions, {"Blueberry": 0.6, "Mango": 0.4})

    def test_common_fields_split_out_in_predefined_order(self) -> None:
        names = [f.campo for f in self.pallet.common_fields]
        self.assertEqual(names, ["Peso Bolsa (gr)", "Temperatura Sala (F)", "Código Caja",
                                 "Observaciones"])
        self.assertEqual([f.campo for f in self.pallet.fields_by_fruit["Blueberry"]], ["Brix"])
        self.assertEqual([f.campo for f in self.pallet.fields_by_fruit["Mango"]], ["Color"])

    def test_missing_catalogue_data(self) -> None:
        with self.assertRaises(ChecklistError):
            build_pallet([], {})
        with self.assertRaises(ChecklistError):
            build_pallet([("Kiwi", 1.0)], {})

    def test_finalize_requires_every_field(self) -> None:
        pallet = self.pallet
        with self.assertRaises(ChecklistError) as ctx:
            pallet.finalize()
        self.assertEqual(str(ctx.exception), INCOMPLETE_PALLET)
        for group, specs in pallet.fields_by_fruit.items():
            for spec in specs:
                pallet.set_value(group_key(group, spec.campo), "x")
        for spec in pallet.common_fields:
            pallet.set_value(spec.campo, "1")
        pallet.set_value("Observaciones", "   ")
        with self.assertRaises(ChecklistError):
            pallet.finalize()
        pallet.set_value("Observaciones", "none")
        pallet.finalize()
        self.assertTrue(pallet.collapsed)
        pallet.expand()
        self.assertFalse(pallet.collapsed)

    def test_fruit_percentage(self) -> None:
        pallet = self.pallet
        self.assertIsNone(pallet.fruit_percentage("Mango"))
        pallet.set_value("Peso Bolsa (gr)", "500 gr")
        pallet.set_value(fruit_weight_key("Mango"), "210")
        self.assertAlmostEqual(pallet.fruit_percentage("Mango"), 42.0)
        self.assertTrue(pallet.fruit_within_tolerance("Mango"))
        pallet.set_value(fruit_weight_key("Blueberry"), "250")
        self.assertFalse(pallet.fruit_within_tolerance("Blueberry"))

    def test_bag_weight_falls_back_to_short_key(self) -> None:
        pallet = Pallet(expected_compositions={"Mango": 1.0})
        pallet.set_value("Peso Bolsa", "400")
        pallet.set_value(fruit_weight_key("Mango"), "400")
        self.assertAlmostEqual(pallet.fruit_percentage("Mango"), 100.0)

    def test_pallet_dict_round_trip(self) -> None:
        self.pallet.set_value("Peso Bolsa (gr)", "500")
        again = Pallet.from_dict(self.pallet.to_dict())
        self.assertEqual(again.to_dict(), self.pallet.to_dict())

    def test_variety_label(self) -> None:
        self.assertEqual(variety_label([("Blueberry", 1.0)]), "Blueberry")
        self.assertEqual(variety_label([("Mango", 0.4), ("Pineapple", 0.6)]),
                         "Pineapple (60.0%), Mango (40.0%)")
        self.assertEqual(variety_label([]), "")


class TestProductoMixForm(unittest.TestCase):
    def _form(self) -> ProductoMixForm:
        pallet = build_pallet([("Mango", 1.0)], {"Mango": MANGO_FIELDS})
        pallet.values.update({"Mango-Color": "yellow", "Peso Bolsa (gr)": "500",
                              "Código Caja": "C-1", fruit_weight_key("Mango"): "480"})
        return ProductoMixForm(date="2025-12-15", monitor_name="QC", monitor_signature="sig",
                               orden_fabricacion="OF-1", jefe_linea="Jefe", cliente="Acme",
                               producto="Mango 500g", sku="SKU1", pallets=[pallet])

    def test_complete_form_is_valid(self) -> None:
        form = self._form()
        self.assertEqual(form.validate(), [])
        self.assertEqual(form.warnings(), [])

    def test_header_and_pallets_required(self) -> None:
        form = ProductoMixForm()
        errors = form.validate()
        self.assertTrue(errors[0].startswith("Completa los campos del encabezado"))
        self.assertEqual(errors[1], "Agrega al menos un pallet")

    def test_out_of_tolerance_is_a_warning(self) -> None:
        form = self._form()
        form.pallets[0].set_value(fruit_weight_key("Mango"), "400")
        self.assertEqual(form.warnings(), ["Pallet #1: Mango 80.0% (Esperado: 100.0%)"])

    def test_row_columns(self) -> None:
        row = self._form().db_row()
        self.assertEqual(row["control_calidad"], "QC")
        self.assertEqual(row["orden_fabricacion"], "OF-1")
        self.assertEqual(row["date_string"], "DEC-15-2025")

    def test_pdf_hides_room_temperature(self) -> None:
        pallet = build_pallet([("Blueberry", 1.0)], {"Blueberry": BERRY_FIELDS})
        form = ProductoMixForm(pallets=[pallet])
        labels = [row[0] for row in form.pdf_tables()[0].rows]
        self.assertFalse(any("Temperatura Sala" in label for label in labels))
        self.assertTrue(any("Esperado: 100.0%" in label for label in labels))


class TestProductCatalogRepository(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.repo = ProductCatalogRepository(Path(self._tmp.name) / "catalog.db")
        self.repo.import_products([
            {"brand": "Acme", "material": "Tropical Mix 1kg", "sku": "100"},
            {"brand": "Acme", "material": "Blueberry 500g", "sku": "101"},
            {"brand": "Zeta", "material": "Mango 1kg", "sku": "200"},
        ])
        self.repo.set_composition("100", [("Mango", 0.4), ("Pineapple", 0.6)])
        self.repo.set_group_fields("Mango", MANGO_FIELDS)
        self.repo.set_group_fields("Pineapple", [FieldSpec("Peso Bolsa (gr)", "gr"),
                                                 FieldSpec("Brix", "°Bx")])

    def tearDown(self) -> None:
        self.repo.close()
        self._tmp.cleanup()

    def test_lookups(self) -> None:
        self.assertEqual(self.repo.brands(), ["Acme", "Zeta"])
        self.assertEqual(self.repo.materials("Acme"), ["Blueberry 500g", "Tropical Mix 1kg"])
        self.assertEqual(self.repo.sku_for("Acme", "Tropical Mix 1kg"), "100")
        self.assertIsNone(self.repo.sku_for("Acme", "Unknown"))
        self.assertEqual(self.repo.composition("100"), [("Pineapple", 0.6), ("Mango", 0.4)])
        self.assertEqual(self.repo.variety("100"), "Pineapple (60.0%), Mango (40.0%)")

    def test_new_pallet(self) -> None:
        pallet = self.repo.new_pallet("100")
        self.assertEqual(list(pallet.fields_by_fruit), ["Pineapple", "Mango"])
        self.assertEqual([f.campo for f in pallet.common_fields], ["Peso Bolsa (gr)", "Código Caja"])

    def test_new_pallet_without_composition(self) -> None:
        with self.assertRaises(ChecklistError):
            self.repo.new_pallet("101")


if __name__ == "__main__":
    unittest.main()
