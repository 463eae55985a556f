"""Document extraction: format dispatch and per-format extractors."""

from .errors import ParsingError, UnsupportedFileTypeError, PdfExtractionError
from .models import (
    FileDescriptor,
    FileFormat,
    DocumentMetadata,
    ParsedDocument,
    PDF_NO_TEXT_MARKER,
    SUPPORTED_EXTENSIONS,
    format_file_size,
)
from .document_parser import parse_document
from .pdf_parser import extract_pdf
from .excel_parser import extract_excel
from .csv_parser import extract_csv

__all__ = [
    "ParsingError",
    "UnsupportedFileTypeError",
    "PdfExtractionError",
    "FileDescriptor",
    "FileFormat",
    "DocumentMetadata",
    "ParsedDocument",
    "PDF_NO_TEXT_MARKER",
    "SUPPORTED_EXTENSIONS",
    "format_file_size",
    "parse_document",
    "extract_pdf",
    "extract_excel",
    "extract_csv",
]
