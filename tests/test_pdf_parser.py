"""
Tests for the PDF extractor and text services.

Run with: pytest tests/test_pdf_parser.py -v
"""

import threading
import time

import httpx
import pytest

from docanalyst.config import Config
from docanalyst.extraction.errors import PdfExtractionError
from docanalyst.extraction.models import PDF_NO_TEXT_MARKER, FileDescriptor
from docanalyst.extraction.pdf_parser import extract_pdf
from docanalyst.extraction.pdf_text_service import (
    LocalPdfTextService,
    PdfText,
    PdfTextService,
    RemotePdfTextService,
    get_pdf_text_service,
)

from conftest import descriptor_for, make_pdf_bytes

EXTRACTION_URL = "http://extractor.test/api/parse-pdf"


class FailingService(PdfTextService):
    """Text service that always fails."""

    def extract_text(self, file_bytes, file_name, content_type, timeout, cancel=None):
        raise PdfExtractionError("service unavailable")


class StaticService(PdfTextService):
    """Text service returning a fixed result."""

    def __init__(self, result: PdfText):
        self.result = result

    def extract_text(self, file_bytes, file_name, content_type, timeout, cancel=None):
        return self.result


class BlockingService(PdfTextService):
    """Text service that blocks until cancelled or released."""

    def __init__(self):
        self.release = threading.Event()
        self.cancelled = threading.Event()

    def extract_text(self, file_bytes, file_name, content_type, timeout, cancel=None):
        deadline = time.monotonic() + 5
        while time.monotonic() < deadline and not self.release.is_set():
            if cancel.wait(0.01):
                self.cancelled.set()
                raise PdfExtractionError("cancelled")
        return PdfText(content="too late", page_count=9)


def remote_service(handler) -> RemotePdfTextService:
    return RemotePdfTextService(EXTRACTION_URL, transport=httpx.MockTransport(handler))


def trickling_handler(request: httpx.Request) -> httpx.Response:
    """Reply that sends one byte every 50ms for several seconds."""
    def body():
        yield b'{"content": "'
        for _ in range(100):
            time.sleep(0.05)
            yield b"a"
        yield b'"}'

    return httpx.Response(200, content=body())


def wait_for_pdf_workers(seconds: float = 2.0) -> list[threading.Thread]:
    """Join extraction worker threads; return any still running."""
    workers = [t for t in threading.enumerate() if t.name.startswith("pdf-text")]
    for worker in workers:
        worker.join(seconds)
    return [worker for worker in workers if worker.is_alive()]


@pytest.fixture
def descriptor():
    return FileDescriptor(name="annual-report.pdf", type="application/pdf", size=12288)


class TestExtractPdfFallback:
    """Tests for the metadata-only fallback."""

    def test_failing_service_falls_back(self, descriptor):
        """Test that a failing service yields metadata-only content."""
        doc = extract_pdf(b"%PDF-1.4", descriptor, service=FailingService())

        assert doc.metadata.page_count == 1
        assert "annual-report.pdf" in doc.content
        assert "12.00 KB" in doc.content
        assert PDF_NO_TEXT_MARKER in doc.content
        assert "CSV or Excel" in doc.content

    def test_fallback_keeps_descriptor_metadata(self, descriptor):
        """Test that the fallback copies name, type and size."""
        doc = extract_pdf(b"", descriptor, service=FailingService())

        assert doc.metadata.file_name == descriptor.name
        assert doc.metadata.file_type == descriptor.type
        assert doc.metadata.file_size == descriptor.size

    def test_unexpected_exception_absorbed(self, descriptor):
        """Test that any exception type is absorbed, not just PdfExtractionError."""

        class BrokenService(PdfTextService):
            def extract_text(self, file_bytes, file_name, content_type, timeout, cancel=None):
                raise RuntimeError("boom")

        doc = extract_pdf(b"", descriptor, service=BrokenService())

        assert doc.metadata.page_count == 1
        assert PDF_NO_TEXT_MARKER in doc.content

    def test_deadline_exceeded_falls_back(self, descriptor, monkeypatch):
        """Test that a slow service is abandoned after the timeout."""
        monkeypatch.setattr(Config, "PDF_EXTRACTION_TIMEOUT", 0.1)
        service = BlockingService()

        try:
            doc = extract_pdf(b"", descriptor, service=service)
        finally:
            service.release.set()

        assert "too late" not in doc.content
        assert doc.metadata.page_count == 1
        assert PDF_NO_TEXT_MARKER in doc.content

    def test_worker_cancelled_after_deadline(self, descriptor, monkeypatch):
        """Test that the abandoned service call is told to stop."""
        monkeypatch.setattr(Config, "PDF_EXTRACTION_TIMEOUT", 0.1)
        service = BlockingService()

        try:
            extract_pdf(b"", descriptor, service=service)
            assert service.cancelled.wait(2)
        finally:
            service.release.set()

        assert wait_for_pdf_workers() == []

    def test_trickling_remote_worker_stops(self, descriptor, monkeypatch):
        """Test that a slow remote reply is abandoned and its worker exits."""
        monkeypatch.setattr(Config, "PDF_EXTRACTION_TIMEOUT", 0.2)

        doc = extract_pdf(b"%PDF-1.4", descriptor, service=remote_service(trickling_handler))

        assert doc.metadata.page_count == 1
        assert PDF_NO_TEXT_MARKER in doc.content
        assert wait_for_pdf_workers() == []


class TestExtractPdfSuccess:
    """Tests for successful extraction."""

    def test_text_and_page_count(self, descriptor):
        """Test that service text and page count are used."""
        service = StaticService(PdfText(content="Revenue grew 12% in 2024.", page_count=4))

        doc = extract_pdf(b"", descriptor, service=service)

        assert doc.content == "Revenue grew 12% in 2024."
        assert doc.metadata.page_count == 4

    def test_missing_page_count_defaults_to_one(self, descriptor):
        service = StaticService(PdfText(content="Some text", page_count=None))

        doc = extract_pdf(b"", descriptor, service=service)

        assert doc.metadata.page_count == 1

    def test_empty_text_uses_placeholder(self, descriptor):
        """Test that empty extracted text becomes the no-text placeholder."""
        service = StaticService(PdfText(content="  \n ", page_count=2))

        doc = extract_pdf(b"", descriptor, service=service)

        assert PDF_NO_TEXT_MARKER in doc.content
        assert "annual-report.pdf" in doc.content
        assert doc.metadata.page_count == 2


class TestRemotePdfTextService:
    """Tests for the HTTP text service, through extract_pdf."""

    def test_success(self, descriptor):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert b"annual-report.pdf" in request.content
            return httpx.Response(200, json={"content": "Extracted body text", "pageCount": 7})

        doc = extract_pdf(b"%PDF-1.4", descriptor, service=remote_service(handler))

        assert doc.content == "Extracted body text"
        assert doc.metadata.page_count == 7

    def test_error_status_falls_back(self, descriptor):
        def handler(request):
            return httpx.Response(500, json={"error": "Failed to extract text from PDF"})

        doc = extract_pdf(b"", descriptor, service=remote_service(handler))

        assert doc.metadata.page_count == 1
        assert "12.00 KB" in doc.content

    def test_timeout_falls_back(self, descriptor):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        doc = extract_pdf(b"", descriptor, service=remote_service(handler))

        assert PDF_NO_TEXT_MARKER in doc.content

    def test_malformed_response_falls_back(self, descriptor):
        def handler(request):
            return httpx.Response(200, text="<html>not json</html>")

        doc = extract_pdf(b"", descriptor, service=remote_service(handler))

        assert PDF_NO_TEXT_MARKER in doc.content
        assert doc.metadata.page_count == 1

    def test_error_payload_message(self):
        """Test that the service raises with the payload's error text."""
        def handler(request):
            return httpx.Response(400, json={"error": "No file provided"})

        with pytest.raises(PdfExtractionError, match="No file provided"):
            remote_service(handler).extract_text(b"", "a.pdf", "application/pdf", 1.0)

    def test_missing_content_is_empty_text(self):
        def handler(request):
            return httpx.Response(200, json={"pageCount": 2})

        result = remote_service(handler).extract_text(b"", "a.pdf", "application/pdf", 1.0)

        assert result == PdfText(content="", page_count=2)

    def test_overall_deadline_on_slow_body(self):
        """Test that a body arriving byte by byte is cut off at the deadline."""
        started = time.monotonic()

        with pytest.raises(PdfExtractionError, match="exceeded"):
            remote_service(trickling_handler).extract_text(b"", "a.pdf", "application/pdf", 0.2)

        assert time.monotonic() - started < 2

    def test_cancel_stops_read(self):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(PdfExtractionError, match="cancelled"):
            remote_service(trickling_handler).extract_text(
                b"", "a.pdf", "application/pdf", 30.0, cancel=cancel
            )


class TestLocalPdfTextService:
    """Tests for the PyMuPDF text service."""

    def test_extracts_text(self):
        data = make_pdf_bytes(["Quarterly revenue grew twelve percent", "Second page"])

        result = LocalPdfTextService().extract_text(data, "q.pdf", "application/pdf", 30.0)

        assert "Quarterly revenue grew twelve percent" in result.content
        assert "Second page" in result.content
        assert result.page_count == 2

    def test_invalid_pdf_raises(self):
        with pytest.raises(PdfExtractionError):
            LocalPdfTextService().extract_text(b"not a pdf", "bad.pdf", "application/pdf", 30.0)

    def test_cancelled_before_first_page(self):
        """Test that a set cancel event stops extraction between pages."""
        data = make_pdf_bytes(["Page one", "Page two"])
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(PdfExtractionError, match="cancelled"):
            LocalPdfTextService().extract_text(data, "q.pdf", "application/pdf", 30.0, cancel=cancel)

    def test_blank_pdf_through_extractor(self):
        """Test that a PDF without text gets the placeholder and real page count."""
        data = make_pdf_bytes(["", ""])

        doc = extract_pdf(data, descriptor_for("blank.pdf", data, "application/pdf"),
                          service=LocalPdfTextService())

        assert PDF_NO_TEXT_MARKER in doc.content
        assert doc.metadata.page_count == 2


class TestGetPdfTextService:
    """Tests for service selection."""

    def test_local_by_default(self):
        assert isinstance(get_pdf_text_service(), LocalPdfTextService)

    def test_remote_when_url_configured(self, monkeypatch):
        monkeypatch.setattr(Config, "PDF_EXTRACTION_URL", EXTRACTION_URL)

        service = get_pdf_text_service()

        assert isinstance(service, RemotePdfTextService)
        assert service.url == EXTRACTION_URL


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
