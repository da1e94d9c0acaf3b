"""Rendering slide scripts as downloadable documents."""

import io
from collections.abc import Sequence

from docx import Document
from docx.shared import Pt
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font

from services.pptx_notes.notes_xml import strip_illegal_xml_chars
from services.script_generation.transcript import compose_full_script
from shared.enums import ExportFormat
from shared.models import Slide

MISSING_SCRIPT = "No script generated"

MEDIA_TYPES = {
    ExportFormat.TEXT: "text/plain; charset=utf-8",
    ExportFormat.EXCEL: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ExportFormat.WORD: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

DOWNLOAD_SUFFIXES = {
    ExportFormat.TEXT: "_script.txt",
    ExportFormat.EXCEL: "_scripts.xlsx",
    ExportFormat.WORD: "_scripts.docx",
}


def _ordered(slides: Sequence[Slide]) -> list[Slide]:
    return sorted(slides, key=lambda slide: slide.slide_number)


def export_script_text(slides: Sequence[Slide]) -> str:
    return compose_full_script(_ordered(slides))


def export_scripts_xlsx(slides: Sequence[Slide]) -> bytes:
    """One row per slide on a ``Scripts`` sheet: number, title, script."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Scripts"
    sheet.append(["Slide", "Title", "Script"])
    for cell in sheet[1]:
        cell.font = Font(bold=True)

    for slide in _ordered(slides):
        sheet.append(
            [
                slide.slide_number,
                strip_illegal_xml_chars(slide.title),
                strip_illegal_xml_chars(slide.script or MISSING_SCRIPT),
            ]
        )

    sheet.column_dimensions["A"].width = 8
    sheet.column_dimensions["B"].width = 40
    sheet.column_dimensions["C"].width = 120
    for row in sheet.iter_rows(min_row=2, min_col=3, max_col=3):
        for cell in row:
            cell.alignment = Alignment(wrap_text=True, vertical="top")

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def export_scripts_docx(slides: Sequence[Slide]) -> bytes:
    """A heading per slide followed by its script, one paragraph per line."""
    document = Document()
    document.add_heading("Presentation Script", level=0)

    for slide in _ordered(slides):
        document.add_heading(strip_illegal_xml_chars(f"Slide {slide.slide_number}: {slide.title}"), level=1)
        lines = [line.strip() for line in (slide.script or "").splitlines() if line.strip()]
        if not lines:
            paragraph = document.add_paragraph(MISSING_SCRIPT)
            for run in paragraph.runs:
                run.italic = True
            continue
        for line in lines:
            paragraph = document.add_paragraph(strip_illegal_xml_chars(line))
            for run in paragraph.runs:
                run.font.size = Pt(11)

    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def render_export(export_format: ExportFormat, slides: Sequence[Slide]) -> bytes:
    if export_format is ExportFormat.TEXT:
        return export_script_text(slides).encode("utf-8")
    if export_format is ExportFormat.EXCEL:
        return export_scripts_xlsx(slides)
    return export_scripts_docx(slides)
