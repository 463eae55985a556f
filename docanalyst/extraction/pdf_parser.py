"""
PDF document parser.

Text comes from a PdfTextService under a fixed deadline. When extraction
fails for any reason the document degrades to a metadata-only description
instead of raising.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

from docanalyst.config import get_config
from .errors import PdfExtractionError
from .models import PDF_NO_TEXT_MARKER, DocumentMetadata, FileDescriptor, ParsedDocument
from .pdf_text_service import PdfText, PdfTextService, get_pdf_text_service

logger = logging.getLogger(__name__)


def extract_pdf(
    file_bytes: bytes,
    descriptor: FileDescriptor,
    service: PdfTextService | None = None,
) -> ParsedDocument:
    """
    Extract text from a PDF file.

    Never raises for extraction failures: network errors, timeouts, error
    responses and unreadable files all produce fallback content.

    Args:
        file_bytes: Raw PDF content
        descriptor: Declared name, MIME type and size of the upload
        service: Text service to use (defaults to the configured one)

    Returns:
        ParsedDocument with extracted text, or metadata-only content
    """
    service = service or get_pdf_text_service()
    timeout = get_config().PDF_EXTRACTION_TIMEOUT

    logger.info(f"Processing PDF: {descriptor.name} via {type(service).__name__}")

    try:
        pdf_text = _extract_with_deadline(service, file_bytes, descriptor, timeout)
    except Exception as e:
        logger.warning(f"PDF text extraction failed for {descriptor.name}, using metadata only: {e}")
        return _fallback_document(descriptor)

    if pdf_text.content.strip():
        content = pdf_text.content
    else:
        content = f"PDF file: {descriptor.name}\n\nNote: {PDF_NO_TEXT_MARKER}."

    logger.info(f"Extracted {len(pdf_text.content)} chars from {descriptor.name}")

    return ParsedDocument(
        content=content,
        metadata=DocumentMetadata.for_file(descriptor, page_count=pdf_text.page_count or 1),
    )


def _extract_with_deadline(
    service: PdfTextService,
    file_bytes: bytes,
    descriptor: FileDescriptor,
    timeout: float,
) -> PdfText:
    """
    Run the service call, giving up once `timeout` seconds have passed.

    The worker is told to stop on every exit path, so an abandoned call
    ends at the service's next deadline check instead of running on.
    """
    cancel = threading.Event()
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pdf-text")
    try:
        future = executor.submit(
            service.extract_text,
            file_bytes,
            descriptor.name,
            descriptor.type,
            timeout,
            cancel=cancel,
        )
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as e:
            raise PdfExtractionError(f"PDF text extraction exceeded {timeout}s") from e
    finally:
        cancel.set()
        executor.shutdown(wait=False, cancel_futures=True)


def _fallback_document(descriptor: FileDescriptor) -> ParsedDocument:
    """Metadata-only document used when no text could be extracted."""
    metadata = DocumentMetadata.for_file(descriptor, page_count=1)

    content = "\n".join([
        f"PDF file: {descriptor.name}",
        "",
        "File Information:",
        f"- File Name: {descriptor.name}",
        f"- File Type: {descriptor.type}",
        f"- File Size: {metadata.size_kb:.2f} KB",
        "- Document Format: PDF",
        "",
        f"Note: {PDF_NO_TEXT_MARKER} file. Please try uploading a CSV or Excel file "
        "for full content analysis, or describe what you're looking for in this PDF "
        "and I can provide guidance.",
    ])

    return ParsedDocument(content=content, metadata=metadata)
