"""
Document analysis requests.

Turns a chat request (a question, an uploaded file, or both) into a single
LLM call and returns the reply.
"""

import asyncio
import logging
from dataclasses import dataclass

from docanalyst.config import Config
from docanalyst.extraction.document_parser import parse_document
from docanalyst.extraction.models import FileDescriptor, ParsedDocument, format_file_size
from docanalyst.utils.llm_client import LLMClient, LLMProvider, get_default_client
from .prompt_composer import generate_analysis_prompt

logger = logging.getLogger(__name__)


class AnalysisRequestError(Exception):
    """Raised when a request cannot be analyzed as submitted."""
    pass


class FileTooLargeError(AnalysisRequestError):
    """Raised when an upload exceeds the configured size limit."""
    pass


@dataclass(frozen=True)
class UploadedFile:
    """An uploaded file: its declared properties plus raw content."""
    descriptor: FileDescriptor
    content: bytes

    @classmethod
    def from_bytes(cls, name: str, content: bytes, content_type: str = "") -> "UploadedFile":
        """Build an upload whose declared size is the content length."""
        return cls(
            descriptor=FileDescriptor(name=name, type=content_type, size=len(content)),
            content=content,
        )


@dataclass
class AnalysisResult:
    """
    Outcome of an analysis request.

    Attributes:
        response: Reply text from the model
        prompt: The prompt that was sent
        document: Parsed upload, if a file was submitted
    """
    response: str
    prompt: str
    document: ParsedDocument | None = None


class DocumentAnalyst:
    """
    Answers questions about uploaded documents using an LLM.

    Usage:
        async with DocumentAnalyst() as analyst:
            result = await analyst.analyze("What is total revenue?", upload)
    """

    def __init__(
        self,
        llm_client: LLMClient | None = None,
        model: str | None = None,
        provider: LLMProvider | str | None = None,
        max_upload_bytes: int | None = None,
    ):
        """
        Initialize the analyst.

        Args:
            llm_client: Optional pre-configured LLM client
            model: Model to use (defaults to DEFAULT_ANALYSIS_MODEL)
            provider: LLM provider if creating new client (defaults to DEFAULT_LLM_PROVIDER)
            max_upload_bytes: Upload size limit (defaults to MAX_UPLOAD_SIZE_MB)
        """
        self.llm_client = llm_client
        self.model = model or Config.DEFAULT_ANALYSIS_MODEL
        self.provider = provider
        self.max_upload_bytes = max_upload_bytes or Config.max_upload_size_bytes()
        self._owns_client = False

    async def _get_client(self) -> LLMClient:
        """Get or create the LLM client."""
        if self.llm_client is None:
            self.llm_client = get_default_client(self.provider)
            self._owns_client = True
        return self.llm_client

    def check_upload(self, upload: UploadedFile):
        """
        Reject uploads over the size limit.

        Raises:
            FileTooLargeError: If the declared size exceeds the limit
        """
        size = upload.descriptor.size
        if size > self.max_upload_bytes:
            raise FileTooLargeError(
                f"File size {format_file_size(size)} exceeds the limit of "
                f"{format_file_size(self.max_upload_bytes)}"
            )

    async def prepare_prompt(
        self,
        message: str | None = None,
        upload: UploadedFile | None = None,
    ) -> tuple[str, ParsedDocument | None]:
        """
        Build the prompt for a request without calling the LLM.

        Returns:
            Tuple of (prompt, parsed document or None)

        Raises:
            AnalysisRequestError: If neither a message nor a file was given
            ParsingError: If the upload cannot be parsed
        """
        if not message and upload is None:
            raise AnalysisRequestError("Message or file is required")

        if upload is None:
            return message, None

        self.check_upload(upload)

        # Parsing may block on the PDF text service, keep it off the event loop
        document = await asyncio.to_thread(parse_document, upload.descriptor, upload.content)
        prompt = generate_analysis_prompt(document, message or None)

        return prompt, document

    async def analyze(
        self,
        message: str | None = None,
        upload: UploadedFile | None = None,
    ) -> AnalysisResult:
        """
        Answer a message, optionally about an uploaded document.

        Args:
            message: The user's question (may be empty when a file is given)
            upload: The uploaded file, if any

        Returns:
            AnalysisResult with the model's reply

        Raises:
            AnalysisRequestError: For empty or oversized requests
            ParsingError: If the upload cannot be parsed
            LLMClientError: If the model call fails
        """
        prompt, document = await self.prepare_prompt(message, upload)

        if document is not None:
            logger.info(
                f"Analyzing {document.metadata.file_name} ({len(prompt)} char prompt)"
            )
        else:
            logger.info(f"Answering message without document ({len(prompt)} chars)")

        client = await self._get_client()
        response = await client.generate_text(prompt, model=self.model)

        return AnalysisResult(response=response, prompt=prompt, document=document)

    async def close(self):
        """Close the LLM client if we own it."""
        if self._owns_client and self.llm_client:
            await self.llm_client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


# Synchronous wrapper
class SyncDocumentAnalyst:
    """Synchronous wrapper for DocumentAnalyst."""

    def __init__(self, **kwargs):
        self._async_analyst = DocumentAnalyst(**kwargs)
        self._loop: asyncio.AbstractEventLoop | None = None

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None or self._loop.is_closed():
            self._loop = asyncio.new_event_loop()
        return self._loop

    def analyze(
        self,
        message: str | None = None,
        upload: UploadedFile | None = None,
    ) -> AnalysisResult:
        """Synchronous analysis."""
        loop = self._get_loop()
        return loop.run_until_complete(self._async_analyst.analyze(message, upload))

    def close(self):
        if self._loop and not self._loop.is_closed():
            self._loop.run_until_complete(self._async_analyst.close())
            self._loop.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
