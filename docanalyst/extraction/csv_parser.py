"""
CSV document parser using pandas.

The first record supplies the field names; every value is kept as text.
"""

import io
import logging
import warnings

import pandas as pd

from docanalyst.config import get_config
from .models import DocumentMetadata, FileDescriptor, ParsedDocument, placeholder_content
from .preview import join_cells, render_data_rows

logger = logging.getLogger(__name__)


def extract_csv(file_bytes: bytes, descriptor: FileDescriptor) -> ParsedDocument:
    """
    Extract a preview of a CSV file.

    Args:
        file_bytes: Raw CSV content
        descriptor: Declared name, MIME type and size of the upload

    Returns:
        ParsedDocument whose row count covers every record, not just the
        rendered preview

    Raises:
        pandas.errors.ParserError, UnicodeDecodeError: on malformed input
    """
    preview_rows = get_config().CSV_PREVIEW_ROWS

    logger.info(f"Processing CSV file: {descriptor.name}")

    df = _read_records(file_bytes)
    headers = [str(column) for column in df.columns]
    records = [list(values) for values in df.itertuples(index=False, name=None)]

    if records:
        lines = [f"Headers: {join_cells(headers)}"]
        lines.extend(render_data_rows(records, preview_rows))
        content = "\n".join(lines)
    else:
        content = placeholder_content(descriptor.name, "This CSV file contains no data rows.")

    logger.info(f"Extracted {len(records)} rows from {descriptor.name}")

    return ParsedDocument(
        content=content,
        metadata=DocumentMetadata.for_file(
            descriptor,
            row_count=len(records),
            column_count=len(headers) if records else 0,
        ),
    )


def _read_records(file_bytes: bytes) -> pd.DataFrame:
    """
    Parse CSV bytes into a DataFrame of strings, missing values as ''.

    Values always line up with the header row: short rows are padded with ''
    and extra trailing fields are dropped with a warning rather than being
    taken as a row index. Rows that disagree with their neighbours raise
    pandas.errors.ParserError.
    """
    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", pd.errors.ParserWarning)
            df = pd.read_csv(
                io.BytesIO(file_bytes),
                dtype=str,
                keep_default_na=False,
                encoding="utf-8-sig",
                index_col=False,
            )
    except pd.errors.EmptyDataError:
        # No header line at all
        return pd.DataFrame()

    for warning in caught:
        if issubclass(warning.category, pd.errors.ParserWarning):
            logger.warning(f"CSV rows wider than the header were truncated: {warning.message}")

    return df.fillna("")
