"""
Excel document parser using pandas and openpyxl.

Renders every sheet of a workbook as a bounded text preview.
"""

import io
import logging

import pandas as pd

from docanalyst.config import get_config
from .models import DocumentMetadata, FileDescriptor, ParsedDocument, file_extension
from .preview import join_cells, render_data_rows

logger = logging.getLogger(__name__)


def extract_excel(file_bytes: bytes, descriptor: FileDescriptor) -> ParsedDocument:
    """
    Extract a preview of every sheet in an Excel workbook.

    The first used row of each sheet is treated as its header row. Fully blank
    data rows are dropped; only the first SPREADSHEET_PREVIEW_ROWS surviving
    rows per sheet are rendered, followed by a count of the rest.

    Args:
        file_bytes: Raw workbook content
        descriptor: Declared name, MIME type and size of the upload

    Returns:
        ParsedDocument with sheet names, total data rows and widest header
    """
    engine = "xlrd" if file_extension(descriptor.name) == "xls" else "openpyxl"
    preview_rows = get_config().SPREADSHEET_PREVIEW_ROWS

    logger.info(f"Processing Excel file: {descriptor.name}")

    sections = []
    total_rows = 0
    total_columns = 0

    with pd.ExcelFile(io.BytesIO(file_bytes), engine=engine) as excel_file:
        sheet_names = tuple(str(name) for name in excel_file.sheet_names)

        for sheet_name in excel_file.sheet_names:
            df = pd.read_excel(excel_file, sheet_name=sheet_name, header=None)
            lines = [f"=== Sheet: {sheet_name} ==="]

            rows = _sheet_rows(df)
            if not rows:
                logger.debug(f"Empty sheet: {sheet_name}")
                sections.append("\n".join(lines))
                continue

            headers = rows[0]
            if any(headers):
                lines.append(f"Headers: {join_cells(headers)}")

            data_rows = [row for row in rows[1:] if any(row)]
            lines.extend(render_data_rows(data_rows, preview_rows))
            sections.append("\n".join(lines))

            total_rows += len(data_rows)
            total_columns = max(total_columns, len(headers))

    logger.info(
        f"Extracted {len(sheet_names)} sheets ({total_rows} data rows) from {descriptor.name}"
    )

    return ParsedDocument(
        content="\n\n".join(sections).strip(),
        metadata=DocumentMetadata.for_file(
            descriptor,
            sheet_names=sheet_names,
            row_count=total_rows,
            column_count=total_columns,
        ),
    )


def _sheet_rows(df: pd.DataFrame) -> list[list[str]]:
    """
    Convert a raw sheet to rows of cell strings.

    The grid starts at the sheet's used range: leading blank rows and
    columns are removed, so the first row returned is the header row.
    Trailing empty cells are trimmed from each row, so a row's length is the
    position of its last non-empty cell.
    """
    rows = []
    for values in df.itertuples(index=False, name=None):
        row = [_clean_cell_value(value) for value in values]
        while row and row[-1] == "":
            row.pop()
        rows.append(row)

    while rows and not any(rows[0]):
        rows.pop(0)
    if not rows:
        return []

    # Leading columns that are blank in every row
    offset = min(
        next(i for i, cell in enumerate(row) if cell) for row in rows if any(row)
    )
    return [row[offset:] for row in rows]


def _clean_cell_value(value) -> str:
    """Clean a cell value for display."""
    try:
        if pd.isna(value):
            return ""
    except (ValueError, TypeError):
        # Non-scalar values make the truth test ambiguous
        pass

    # Handle floats that are actually integers
    if isinstance(value, float) and value.is_integer():
        return str(int(value))

    # Remove newlines and excessive whitespace
    return " ".join(str(value).split())
