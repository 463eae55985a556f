"""
Data structures shared by the extractors and the prompt composer.

Every extractor produces a ParsedDocument: bounded plain-text content plus
metadata describing the upload.
"""

from dataclasses import dataclass, asdict
from enum import Enum

from .errors import UnsupportedFileTypeError


# Shared by both PDF placeholders and by the prompt composer, which uses it to
# tell placeholder text apart from real extracted content.
PDF_NO_TEXT_MARKER = "Could not extract text content from this PDF"


class FileFormat(str, Enum):
    """Document formats with an extractor."""
    PDF = "pdf"
    SPREADSHEET = "spreadsheet"
    CSV = "csv"

    @classmethod
    def from_extension(cls, extension: str) -> "FileFormat":
        """Resolve a lowercase extension (without the dot)."""
        try:
            return _EXTENSION_FORMATS[extension]
        except KeyError:
            raise UnsupportedFileTypeError(extension) from None

    @classmethod
    def from_filename(cls, file_name: str) -> "FileFormat":
        """Resolve the format from the text after the last '.' in a file name."""
        return cls.from_extension(file_extension(file_name))


_EXTENSION_FORMATS = {
    "pdf": FileFormat.PDF,
    "xlsx": FileFormat.SPREADSHEET,
    "xls": FileFormat.SPREADSHEET,
    "csv": FileFormat.CSV,
}

SUPPORTED_EXTENSIONS = tuple(_EXTENSION_FORMATS)


def file_extension(file_name: str) -> str:
    """Lowercased text after the last '.', or the whole name if it has none."""
    return file_name.rsplit(".", 1)[-1].lower()


@dataclass(frozen=True)
class FileDescriptor:
    """
    Declared properties of an uploaded file.

    Attributes:
        name: Original file name, used for format dispatch
        type: Declared MIME type (may be empty)
        size: Size in bytes
    """
    name: str
    type: str
    size: int


@dataclass(frozen=True)
class DocumentMetadata:
    """
    Metadata for a parsed document.

    file_name, file_type and file_size are always copied from the upload.
    The remaining fields are format specific and stay None when they do not
    apply.
    """
    file_name: str
    file_type: str
    file_size: int
    page_count: int | None = None
    sheet_names: tuple[str, ...] | None = None
    row_count: int | None = None
    column_count: int | None = None

    @classmethod
    def for_file(cls, descriptor: FileDescriptor, **fields) -> "DocumentMetadata":
        """Build metadata for a descriptor plus any format-specific fields."""
        return cls(
            file_name=descriptor.name,
            file_type=descriptor.type,
            file_size=descriptor.size,
            **fields,
        )

    @property
    def size_kb(self) -> float:
        return self.file_size / 1024

    def to_dict(self) -> dict:
        """Metadata as a dict, leaving out fields that do not apply."""
        data = {k: v for k, v in asdict(self).items() if v is not None}
        if "sheet_names" in data:
            data["sheet_names"] = list(data["sheet_names"])
        return data


@dataclass(frozen=True)
class ParsedDocument:
    """
    A document normalized for prompting.

    Attributes:
        content: Bounded plain-text rendering, never empty
        metadata: Description of the source file
    """
    content: str
    metadata: DocumentMetadata

    def __post_init__(self):
        if not self.content.strip():
            object.__setattr__(
                self,
                "content",
                placeholder_content(self.metadata.file_name, "No content could be extracted from this file."),
            )


def placeholder_content(file_name: str, note: str) -> str:
    """Descriptive content used when an extractor produced no text."""
    return f"File: {file_name}\n\nNote: {note}"


def format_file_size(size: int) -> str:
    """
    Format a byte count for display.

    Examples: 0 -> "0 Bytes", 1536 -> "1.5 KB", 2097152 -> "2 MB".
    """
    if size <= 0:
        return "0 Bytes"

    units = ["Bytes", "KB", "MB", "GB"]
    exponent = 0
    while exponent < len(units) - 1 and size >= 1024 ** (exponent + 1):
        exponent += 1
    value = f"{size / 1024 ** exponent:.2f}".rstrip("0").rstrip(".")
    return f"{value} {units[exponent]}"
