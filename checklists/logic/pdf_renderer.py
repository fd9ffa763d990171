"""
ChecklistPdfRenderer
====================

Renders a checklist form into a PDF with reportlab platypus:

    title / document code
    header key-value table
    one table per PdfTable of the form
    signature blocks (image embedded from the Signature Image data URL)
    footer with page number and generation time

pypdf stamps the document metadata afterwards (see ``pdf_tools``).
"""
from __future__ import annotations

import logging
from io import BytesIO
from typing import List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Image, KeepTogether, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from core.helpers.date_time_helper import local_now
from signature.exceptions.errors import SignatureDecodeError
from signature.logic.image_codec import data_url_to_bytes
from ..models.base_form import ChecklistForm, PdfTable, SignatureBlock
from .pdf_tools import stamp_metadata

log = logging.getLogger(__name__)

HEADER_BG = colors.HexColor("#1f3a5f")
GRID = colors.HexColor("#9ca3af")
ZEBRA = [colors.white, colors.HexColor("#f3f4f6")]

SIGNATURE_WIDTH = 6 * cm
SIGNATURE_HEIGHT = 2 * cm


class ChecklistPdfRenderer:
    """Stateless; one instance may render any number of forms."""

    def __init__(self, *, pagesize=A4, wide_pagesize=landscape(A4)) -> None:
        self._pagesize = pagesize
        self._wide_pagesize = wide_pagesize
        styles = getSampleStyleSheet()
        self._title = styles["Title"]
        self._heading = styles["Heading3"]
        self._normal = styles["Normal"]
        self._cell = ParagraphStyle("cell", parent=styles["Normal"], fontSize=8, leading=10)
        self._cell_bold = ParagraphStyle("cell_bold", parent=self._cell, fontName="Helvetica-Bold",
                                         textColor=colors.white)
        self._note = ParagraphStyle("note", parent=styles["Normal"], fontSize=7,
                                    textColor=colors.HexColor("#4b5563"))

    # ------------------------------------------------------------------ #
    #  Public API                                                        #
    # ------------------------------------------------------------------ #
    def render(self, form: ChecklistForm, *, author: Optional[str] = None) -> bytes:
        ctype = form.checklist_type
        tables = form.pdf_tables()
        wide = any(len(t.columns) > 8 for t in tables)
        raw = self.render_document(
            title=ctype.title,
            code=ctype.code,
            header=form.header_fields(),
            tables=tables,
            signatures=form.signatures(),
            wide=wide,
        )
        return stamp_metadata(raw, title=ctype.title, subject=ctype.code, author=author)

    def render_document(
        self,
        *,
        title: str,
        code: str,
        header: Sequence[Tuple[str, str]],
        tables: Sequence[PdfTable],
        signatures: Sequence[SignatureBlock] = (),
        photos: Sequence[bytes] = (),
        wide: bool = False,
    ) -> bytes:
        """Building block shared by checklists and maintenance reports."""
        pagesize = self._wide_pagesize if wide else self._pagesize
        buf = BytesIO()
        doc = SimpleDocTemplate(buf, pagesize=pagesize, leftMargin=1.5 * cm, rightMargin=1.5 * cm,
                                topMargin=1.5 * cm, bottomMargin=1.8 * cm, title=title)
        width = pagesize[0] - doc.leftMargin - doc.rightMargin

        elems: List = [Paragraph(escape(title), self._title)]
        if code:
            elems.append(Paragraph(escape(code), self._normal))
        elems.append(Spacer(1, 0.4 * cm))
        if header:
            elems.append(self._header_table(header, width))
            elems.append(Spacer(1, 0.5 * cm))
        for table in tables:
            elems.extend(self._body_table(table, width))
            elems.append(Spacer(1, 0.4 * cm))
        for image in photos:
            flowable = self._photo(image, width)
            if flowable is not None:
                elems.append(flowable)
                elems.append(Spacer(1, 0.3 * cm))
        if signatures:
            elems.append(self._signature_table(signatures, width))

        generated = local_now().strftime("%m/%d/%Y %H:%M")

        def _footer(canvas, document) -> None:
            canvas.saveState()
            canvas.setFont("Helvetica", 7)
            canvas.setFillColor(colors.HexColor("#6b7280"))
            canvas.drawString(document.leftMargin, 0.9 * cm, f"{code}  |  Generated {generated}")
            canvas.drawRightString(pagesize[0] - document.rightMargin, 0.9 * cm,
                                   f"Page {document.page}")
            canvas.restoreState()

        doc.build(elems, onFirstPage=_footer, onLaterPages=_footer)
        return buf.getvalue()

    # ------------------------------------------------------------------ #
    #  Building blocks                                                   #
    # ------------------------------------------------------------------ #
    def _p(self, value: object, style: Optional[ParagraphStyle] = None) -> Paragraph:
        return Paragraph(escape("" if value is None else str(value)), style or self._cell)

    def _header_table(self, header: Sequence[Tuple[str, str]], width: float) -> Table:
        # two key/value pairs per row
        rows = []
        pairs = list(header)
        for i in range(0, len(pairs), 2):
            row = []
            for label, value in pairs[i:i + 2]:
                row += [self._p(f"{label}:", self._cell_bold), self._p(value)]
            row += [""] * (4 - len(row))
            rows.append(row)
        table = Table(rows, colWidths=[width * 0.18, width * 0.32] * 2)
        style = [
            ("GRID", (0, 0), (-1, -1), 0.4, GRID),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("BACKGROUND", (0, 0), (0, -1), HEADER_BG),
            ("BACKGROUND", (2, 0), (2, -1), HEADER_BG),
        ]
        table.setStyle(TableStyle(style))
        return table

    def _body_table(self, spec: PdfTable, width: float) -> List:
        data = [[self._p(c, self._cell_bold) for c in spec.columns]]
        if spec.rows:
            data += [[self._p(v) for v in row] for row in spec.rows]
        else:
            data.append([self._p("-")] + [""] * (len(spec.columns) - 1))
        col_widths = None
        if spec.widths and len(spec.widths) == len(spec.columns):
            col_widths = [width * w for w in spec.widths]
        elif spec.columns:
            col_widths = [width / len(spec.columns)] * len(spec.columns)
        table = Table(data, colWidths=col_widths, repeatRows=1)
        table.setStyle(TableStyle([
            ("GRID", (0, 0), (-1, -1), 0.4, GRID),
            ("BACKGROUND", (0, 0), (-1, 0), HEADER_BG),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), ZEBRA),
        ]))
        parts = [Paragraph(escape(spec.title), self._heading), table]
        if spec.note:
            parts.append(Paragraph(escape(spec.note), self._note))
        # short tables stay on one page with their title
        return [KeepTogether(parts)] if len(data) <= 12 else parts

    def _signature_image(self, data_url: str):
        if not data_url:
            return ""
        try:
            png = data_url_to_bytes(data_url)
        except SignatureDecodeError as exc:
            log.warning("signature not embedded: %s", exc)
            return ""
        return Image(BytesIO(png), width=SIGNATURE_WIDTH, height=SIGNATURE_HEIGHT, kind="proportional")

    def _signature_table(self, blocks: Sequence[SignatureBlock], width: float) -> Table:
        labels = [self._p(b.label, self._cell_bold) for b in blocks]
        images = [self._signature_image(b.image) for b in blocks]
        names = [self._p(b.name) for b in blocks]
        col = width / max(1, len(blocks))
        table = Table([labels, images, names], colWidths=[col] * len(blocks),
                      rowHeights=[None, SIGNATURE_HEIGHT + 0.3 * cm, None])
        table.setStyle(TableStyle([
            ("BOX", (0, 0), (-1, -1), 0.4, GRID),
            ("INNERGRID", (0, 0), (-1, -1), 0.4, GRID),
            ("BACKGROUND", (0, 0), (-1, 0), HEADER_BG),
            ("ALIGN", (0, 1), (-1, 1), "CENTER"),
            ("VALIGN", (0, 1), (-1, 1), "MIDDLE"),
        ]))
        return KeepTogether([Spacer(1, 0.3 * cm), table])

    def _photo(self, data: bytes, width: float):
        try:
            return Image(BytesIO(data), width=width * 0.5, height=8 * cm, kind="proportional")
        except (OSError, ValueError) as exc:
            log.warning("photo not embedded: %s", exc)
            return None
