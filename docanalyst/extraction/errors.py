"""Exceptions raised while turning uploads into parsed documents."""


class ParsingError(Exception):
    """Raised when a document cannot be parsed."""
    pass


class UnsupportedFileTypeError(ParsingError):
    """Raised when the file extension has no extractor."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"Unsupported file type: {extension}")


class PdfExtractionError(Exception):
    """
    Raised by PDF text services when text extraction fails.

    Never escapes the PDF extractor, which falls back to metadata-only content.
    """
    pass
