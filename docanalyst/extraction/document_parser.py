"""
Document normalizer.

Picks an extractor from the file extension and gives every failure the same
ParsingError shape.
"""

import logging
from typing import Callable

from .csv_parser import extract_csv
from .errors import ParsingError
from .excel_parser import extract_excel
from .models import FileDescriptor, FileFormat, ParsedDocument
from .pdf_parser import extract_pdf

logger = logging.getLogger(__name__)

Extractor = Callable[[bytes, FileDescriptor], ParsedDocument]

EXTRACTORS: dict[FileFormat, Extractor] = {
    FileFormat.PDF: extract_pdf,
    FileFormat.SPREADSHEET: extract_excel,
    FileFormat.CSV: extract_csv,
}


def parse_document(descriptor: FileDescriptor, file_bytes: bytes) -> ParsedDocument:
    """
    Parse an uploaded file into a ParsedDocument.

    Args:
        descriptor: Declared name, MIME type and size of the upload
        file_bytes: Raw file content

    Returns:
        ParsedDocument whose metadata carries the descriptor's name, type
        and size

    Raises:
        UnsupportedFileTypeError: If the extension has no extractor
        ParsingError: If the extractor fails
    """
    file_format = FileFormat.from_filename(descriptor.name)
    extractor = EXTRACTORS[file_format]

    try:
        return extractor(file_bytes, descriptor)
    except Exception as e:
        logger.error(f"Document parsing error for {descriptor.name}: {e}")
        raise ParsingError(f"Failed to parse document: {str(e) or type(e).__name__}") from e
