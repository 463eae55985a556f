"""Shared fixtures and file builders for Document Analyst tests."""

import io

import fitz  # PyMuPDF
import pytest
from openpyxl import Workbook

from docanalyst.config import Config
from docanalyst.extraction.models import FileDescriptor

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def make_workbook_bytes(sheets: dict[str, list[list]]) -> bytes:
    """
    Build an .xlsx file in memory.

    Args:
        sheets: Sheet name -> rows; None cells are left unwritten, so a row of
            Nones is a fully blank row
    """
    workbook = Workbook()
    workbook.remove(workbook.active)

    for name, rows in sheets.items():
        sheet = workbook.create_sheet(title=name)
        for row_idx, row in enumerate(rows, 1):
            for col_idx, value in enumerate(row, 1):
                if value is not None:
                    sheet.cell(row=row_idx, column=col_idx, value=value)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def make_pdf_bytes(page_texts: list[str]) -> bytes:
    """Build a PDF with one page per entry; empty strings give blank pages."""
    doc = fitz.open()
    for text in page_texts:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def descriptor_for(name: str, content: bytes, file_type: str = "") -> FileDescriptor:
    """Descriptor whose declared size is the content length."""
    return FileDescriptor(name=name, type=file_type, size=len(content))


@pytest.fixture(autouse=True)
def default_limits(monkeypatch):
    """Pin configuration values so tests do not depend on the environment."""
    monkeypatch.setattr(Config, "SPREADSHEET_PREVIEW_ROWS", 10)
    monkeypatch.setattr(Config, "CSV_PREVIEW_ROWS", 20)
    monkeypatch.setattr(Config, "PDF_EXTRACTION_TIMEOUT", 30.0)
    monkeypatch.setattr(Config, "PDF_EXTRACTION_URL", "")
    monkeypatch.setattr(Config, "MAX_UPLOAD_SIZE_MB", 10)
