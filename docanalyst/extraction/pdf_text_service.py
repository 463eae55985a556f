"""
PDF text extraction services.

A service turns raw PDF bytes into plain text and a page count. The remote
service posts the file to an HTTP extraction endpoint; the local service
reads it in-process with PyMuPDF.

Both services treat `timeout` as an overall deadline and also stop early
when the caller sets the `cancel` event.
"""

import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

import fitz  # PyMuPDF
import httpx

from docanalyst.config import get_config
from .errors import PdfExtractionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PdfText:
    """Text extracted from a PDF."""
    content: str
    page_count: int | None = None


class PdfTextService(ABC):
    """Extracts plain text from PDF bytes."""

    @abstractmethod
    def extract_text(
        self,
        file_bytes: bytes,
        file_name: str,
        content_type: str,
        timeout: float,
        cancel: threading.Event | None = None,
    ) -> PdfText:
        """
        Extract text from a PDF.

        Args:
            file_bytes: Raw PDF content
            file_name: Original file name
            content_type: Declared MIME type
            timeout: Seconds allowed for the whole extraction
            cancel: Set by the caller to ask a running extraction to stop

        Raises:
            PdfExtractionError: If no text could be obtained
        """


class RemotePdfTextService(PdfTextService):
    """
    Posts the PDF to an HTTP text extraction endpoint.

    The endpoint accepts a multipart `file` field and answers with
    {"content": str, "pageCount": int} or, on failure, {"error": str}.
    The response body is streamed so a slowly trickling reply is cut off
    at the deadline rather than at each per-read timeout.
    """

    def __init__(self, url: str, transport: httpx.BaseTransport | None = None):
        self.url = url
        self.transport = transport

    def extract_text(
        self,
        file_bytes: bytes,
        file_name: str,
        content_type: str,
        timeout: float,
        cancel: threading.Event | None = None,
    ) -> PdfText:
        files = {"file": (file_name, file_bytes, content_type or "application/pdf")}
        deadline = time.monotonic() + timeout

        try:
            with httpx.Client(timeout=httpx.Timeout(timeout), transport=self.transport) as client:
                with client.stream("POST", self.url, files=files) as response:
                    chunks = []
                    for chunk in response.iter_bytes():
                        _check_deadline(deadline, cancel, timeout)
                        chunks.append(chunk)
        except httpx.TimeoutException as e:
            raise PdfExtractionError(f"PDF text extraction timed out after {timeout}s") from e
        except httpx.RequestError as e:
            raise PdfExtractionError(f"PDF text extraction request failed: {e}") from e

        payload = _json_payload(b"".join(chunks))

        if response.is_error:
            detail = payload.get("error") if isinstance(payload, dict) else None
            raise PdfExtractionError(
                detail or f"PDF text extraction failed with status {response.status_code}"
            )

        if not isinstance(payload, dict):
            raise PdfExtractionError("PDF text extraction returned a malformed response")

        content = payload.get("content") or ""
        if not isinstance(content, str):
            raise PdfExtractionError("PDF text extraction returned non-text content")

        page_count = payload.get("pageCount")
        if not isinstance(page_count, int) or isinstance(page_count, bool):
            page_count = None

        return PdfText(content=content, page_count=page_count)


class LocalPdfTextService(PdfTextService):
    """
    Extracts text in-process with PyMuPDF.

    The deadline and cancel event are checked between pages, so an abandoned
    extraction stops after the page it is currently reading.
    """

    def extract_text(
        self,
        file_bytes: bytes,
        file_name: str,
        content_type: str,
        timeout: float,
        cancel: threading.Event | None = None,
    ) -> PdfText:
        deadline = time.monotonic() + timeout

        try:
            doc = fitz.open(stream=file_bytes, filetype="pdf")
        except Exception as e:
            raise PdfExtractionError(f"Could not open PDF {file_name}: {e}") from e

        try:
            page_count = len(doc)
            page_texts = []
            for page in doc:
                _check_deadline(deadline, cancel, timeout)
                page_texts.append(page.get_text("text"))
        except PdfExtractionError:
            raise
        except Exception as e:
            raise PdfExtractionError(f"Could not read text from {file_name}: {e}") from e
        finally:
            doc.close()

        text = _clean_pdf_text("\n".join(page_texts))
        logger.debug(f"PyMuPDF extracted {len(text)} chars from {page_count} pages of {file_name}")

        return PdfText(content=text, page_count=page_count)


def _check_deadline(deadline: float, cancel: threading.Event | None, timeout: float):
    """Raise once the caller has cancelled or the deadline has passed."""
    if cancel is not None and cancel.is_set():
        raise PdfExtractionError("PDF text extraction cancelled")
    if time.monotonic() > deadline:
        raise PdfExtractionError(f"PDF text extraction exceeded {timeout}s")


def _json_payload(body: bytes):
    """Decoded JSON body, or None when the body is not JSON."""
    try:
        return json.loads(body)
    except ValueError:
        return None


def _clean_pdf_text(text: str) -> str:
    """
    Clean extracted PDF text.

    - Strip whitespace around lines
    - Collapse runs of blank lines into one
    """
    cleaned_lines = []

    for line in text.split("\n"):
        line = line.strip()

        # Skip empty lines in sequence
        if not line and cleaned_lines and not cleaned_lines[-1]:
            continue

        cleaned_lines.append(line)

    return "\n".join(cleaned_lines).strip()


def get_pdf_text_service() -> PdfTextService:
    """
    Get the configured PDF text service.

    Uses the remote service when PDF_EXTRACTION_URL is set, PyMuPDF otherwise.
    """
    url = get_config().PDF_EXTRACTION_URL
    if url:
        return RemotePdfTextService(url)
    return LocalPdfTextService()
