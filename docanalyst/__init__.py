"""Document Analyst - AI analysis of uploaded PDF, CSV and Excel documents"""

__version__ = "0.1.0"

from docanalyst.extraction import (
    FileDescriptor,
    ParsedDocument,
    ParsingError,
    UnsupportedFileTypeError,
    parse_document,
)
from docanalyst.analysis import (
    DocumentAnalyst,
    SyncDocumentAnalyst,
    UploadedFile,
    generate_analysis_prompt,
)

__all__ = [
    "FileDescriptor",
    "ParsedDocument",
    "ParsingError",
    "UnsupportedFileTypeError",
    "parse_document",
    "DocumentAnalyst",
    "SyncDocumentAnalyst",
    "UploadedFile",
    "generate_analysis_prompt",
]
