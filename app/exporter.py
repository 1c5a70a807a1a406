"""
Preview → downloadable files. One-way: nothing here feeds back into the record.
"""
from __future__ import annotations
from typing import Mapping

from weasyprint import HTML

from preview_renderer import render_document


def export_html(record: Mapping, style_id: str) -> str:
    """Standalone HTML page of the preview with its stylesheet inlined."""
    return render_document(record, style_id, inline=True)


def export_pdf(record: Mapping, style_id: str) -> bytes:
    """A4 PDF of the preview."""
    page = export_html(record, style_id)
    page = page.replace("</style>", "@page { size: A4 portrait; margin: 0.5in; }</style>", 1)
    return HTML(string=page).write_pdf()
