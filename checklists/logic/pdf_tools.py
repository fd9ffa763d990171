"""
PDF post-processing with pypdf:
- stamp document metadata (title, subject, author) onto a rendered PDF
- read back metadata and text of a rendered PDF
"""
from __future__ import annotations

from io import BytesIO
from typing import Optional

from pypdf import PdfReader, PdfWriter


def stamp_metadata(pdf_bytes: bytes, *, title: str, subject: str = "",
                   author: Optional[str] = None) -> bytes:
    reader = PdfReader(BytesIO(pdf_bytes))
    writer = PdfWriter()
    for page in reader.pages:
        writer.add_page(page)
    meta = {"/Title": title, "/Subject": subject, "/Producer": "PlantQC"}
    if author:
        meta["/Author"] = author
    writer.add_metadata(meta)
    out = BytesIO()
    writer.write(out)
    return out.getvalue()


def page_count(pdf_bytes: bytes) -> int:
    return len(PdfReader(BytesIO(pdf_bytes)).pages)


def extract_text(pdf_bytes: bytes) -> str:
    reader = PdfReader(BytesIO(pdf_bytes))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def read_title(pdf_bytes: bytes) -> str:
    meta = PdfReader(BytesIO(pdf_bytes)).metadata
    return (meta.title if meta is not None else None) or ""
