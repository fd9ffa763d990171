"""
Product catalogue used by the tasting and mixed product forms.

Tables:
    productos(brand, material, sku)
    composicion_productos(sku, agrupacion, composicion)   composicion is a fraction 0..1
    campos_por_agrupacion(agrupacion, campo, unidad)
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from core.common.db_interface import SQLiteRepository
from ..models.producto_mix import FieldSpec, Pallet, build_pallet, variety_label

_SCHEMA = """
CREATE TABLE IF NOT EXISTS productos (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    brand TEXT NOT NULL DEFAULT '',
    material TEXT NOT NULL DEFAULT '',
    sku TEXT NOT NULL DEFAULT ''
);
CREATE TABLE IF NOT EXISTS composicion_productos (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    sku TEXT NOT NULL,
    agrupacion TEXT NOT NULL,
    composicion REAL NOT NULL DEFAULT 0
);
CREATE TABLE IF NOT EXISTS campos_por_agrupacion (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    agrupacion TEXT NOT NULL,
    campo TEXT NOT NULL,
    unidad TEXT NOT NULL DEFAULT ''
);
CREATE INDEX IF NOT EXISTS idx_composicion_sku ON composicion_productos(sku);
CREATE INDEX IF NOT EXISTS idx_campos_agrupacion ON campos_por_agrupacion(agrupacion);
"""


class ProductCatalogRepository(SQLiteRepository):
    def __init__(self, db_path: Path | str | None = None) -> None:
        if db_path is None:
            from core.config.config_loader import PLANTQC_DB_PATH  # lazy import
            db_path = PLANTQC_DB_PATH
        super().__init__(Path(db_path))
        self.executescript(_SCHEMA)

    # ------------------------------------------------------------------ #
    #  Lookups                                                           #
    # ------------------------------------------------------------------ #
    def brands(self) -> List[str]:
        rows = self.fetchall("SELECT DISTINCT brand FROM productos WHERE brand <> '' ORDER BY brand")
        return [r["brand"] for r in rows]

    def materials(self, brand: str) -> List[str]:
        rows = self.fetchall(
            "SELECT DISTINCT material FROM productos WHERE brand = ? AND material <> '' ORDER BY material",
            (brand,),
        )
        return [r["material"] for r in rows]

    def sku_for(self, brand: str, material: str) -> Optional[str]:
        row = self.fetchone(
            "SELECT sku FROM productos WHERE brand = ? AND material = ? ORDER BY id LIMIT 1",
            (brand, material),
        )
        return row["sku"] if row else None

    def composition(self, sku: str) -> List[Tuple[str, float]]:
        """``(agrupacion, fraction)`` rows, highest share first."""
        rows = self.fetchall(
            "SELECT agrupacion, composicion FROM composicion_productos WHERE sku = ? "
            "ORDER BY composicion DESC, id",
            (sku,),
        )
        return [(r["agrupacion"], float(r["composicion"])) for r in rows]

    def fields_for(self, agrupacion: str) -> List[FieldSpec]:
        rows = self.fetchall(
            "SELECT campo, unidad FROM campos_por_agrupacion WHERE agrupacion = ? ORDER BY id",
            (agrupacion,),
        )
        return [FieldSpec(r["campo"], r["unidad"] or "") for r in rows]

    def variety(self, sku: str) -> str:
        return variety_label(self.composition(sku))

    def new_pallet(self, sku: str) -> Pallet:
        """Lay out an empty pallet for *sku*; raises ChecklistError on missing catalogue data."""
        composition = self.composition(sku)
        fields: Dict[str, List[FieldSpec]] = {g: self.fields_for(g) for g, _ in composition}
        return build_pallet(composition, fields)

    # ------------------------------------------------------------------ #
    #  Import                                                            #
    # ------------------------------------------------------------------ #
    def import_products(self, rows: Iterable[Mapping[str, str]]) -> int:
        data = [((r.get("brand") or "").strip(), (r.get("material") or "").strip(),
                 str(r.get("sku") or "").strip()) for r in rows]
        with self.conn:
            self.conn.executemany("INSERT INTO productos (brand, material, sku) VALUES (?,?,?)", data)
        return len(data)

    def set_composition(self, sku: str, composition: Iterable[Tuple[str, float]]) -> None:
        with self.conn:
            self.conn.execute("DELETE FROM composicion_productos WHERE sku = ?", (sku,))
            self.conn.executemany(
                "INSERT INTO composicion_productos (sku, agrupacion, composicion) VALUES (?,?,?)",
                [(sku, g, float(c)) for g, c in composition],
            )

    def set_group_fields(self, agrupacion: str, fields: Iterable[FieldSpec]) -> None:
        with self.conn:
            self.conn.execute("DELETE FROM campos_por_agrupacion WHERE agrupacion = ?", (agrupacion,))
            self.conn.executemany(
                "INSERT INTO campos_por_agrupacion (agrupacion, campo, unidad) VALUES (?,?,?)",
                [(agrupacion, f.campo, f.unidad) for f in fields],
            )
