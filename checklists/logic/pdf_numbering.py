"""File names of the generated checklist PDFs."""
from __future__ import annotations

import re
from datetime import datetime
from typing import Iterable, Optional

from core.helpers.date_time_helper import format_date_for_filename, time_for_filename
from ..models.checklist_type import ChecklistType


def next_pdf_number(existing: Iterable[str], date_prefix: str, name: str) -> str:
    """
    Next two-digit sequence number for ``{date_prefix}-{name}-NN.pdf``.

    Only names of exactly that shape count; the result is ``"01"`` when there
    is none yet.
    """
    pattern = re.compile(rf"^{re.escape(date_prefix)}-{re.escape(name)}-(\d+)\.pdf$")
    numbers = [int(m.group(1)) for m in (pattern.match(f) for f in existing) if m]
    return f"{(max(numbers) + 1) if numbers else 1:02d}"


def build_filename(ctype: ChecklistType, date_str: str, existing: Iterable[str] = (),
                   moment: Optional[datetime] = None) -> str:
    date_prefix = format_date_for_filename(date_str, full_month=ctype.full_month)
    if ctype.numbered:
        number = next_pdf_number(existing, date_prefix, ctype.filename_name)
        return f"{date_prefix}-{ctype.filename_name}-{number}.pdf"
    return f"{date_prefix}-{time_for_filename(moment)}-{ctype.filename_name}.pdf"
