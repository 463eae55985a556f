"""
Analysis prompt composition.

Builds the single prompt sent to the language model for an uploaded document.
"""

from docanalyst.extraction.models import PDF_NO_TEXT_MARKER, ParsedDocument

# Extracted text at or below this length is treated as no real content
MIN_CONTENT_CHARS = 200

ANALYSIS_PREAMBLE = (
    "You are analyzing a document to answer a user's question. "
    "Please focus on answering their specific question using the document content."
)

QUESTION_INSTRUCTIONS = (
    "Please answer the user's question using the document content above. "
    "If the document doesn't contain enough information to fully answer their question, "
    "let them know what information is available and suggest what additional information "
    "might be needed."
)

GENERAL_ANALYSIS_INSTRUCTIONS = (
    "The user has uploaded this document without a specific question. "
    "Please provide a comprehensive analysis."
)

PDF_GUIDANCE = """Since this is a PDF with limited text extraction, please:
1. Answer the user's question based on available metadata and any extracted content
2. Explain what types of information could be found in this PDF
3. Suggest alternative ways to get the information they need"""

ANALYSIS_GUIDANCE = """Please provide a helpful response that:
1. Directly answers the user's question using the document content
2. References specific text, data, or sections from the document when relevant
3. Highlights key insights, patterns, or trends found in the document
4. Provides actionable recommendations based on the document findings
5. If the document doesn't contain enough information to fully answer the question, explain what information is available and what additional details might be needed"""


def is_pdf_document(parsed_doc: ParsedDocument) -> bool:
    """Whether the document was declared or named as a PDF."""
    metadata = parsed_doc.metadata
    return (
        metadata.file_type == "application/pdf"
        or metadata.file_name.lower().endswith(".pdf")
    )


def has_extracted_content(parsed_doc: ParsedDocument) -> bool:
    """Whether the content is real extracted text rather than a placeholder."""
    content = parsed_doc.content
    return len(content) > MIN_CONTENT_CHARS and PDF_NO_TEXT_MARKER not in content


def format_metadata_block(parsed_doc: ParsedDocument) -> str:
    """Render the document information block, one line per known field."""
    metadata = parsed_doc.metadata

    lines = [
        "Document Information:",
        f"- File: {metadata.file_name}",
        f"- Type: {metadata.file_type}",
        f"- Size: {metadata.size_kb:.2f} KB",
    ]

    if metadata.page_count is not None:
        lines.append(f"- Pages: {metadata.page_count}")
    if metadata.sheet_names:
        lines.append(f"- Sheets: {', '.join(metadata.sheet_names)}")
    if metadata.row_count is not None:
        lines.append(f"- Rows: {metadata.row_count}")
    if metadata.column_count is not None:
        lines.append(f"- Columns: {metadata.column_count}")

    return "\n".join(lines)


def generate_analysis_prompt(parsed_doc: ParsedDocument, user_message: str | None = None) -> str:
    """
    Build the analysis prompt for a parsed document.

    Pure function: the same document and message always give the same prompt.

    Args:
        parsed_doc: The normalized document
        user_message: Optional question from the user; blank counts as none

    Returns:
        Prompt text for the language model
    """
    parts = [
        ANALYSIS_PREAMBLE,
        format_metadata_block(parsed_doc),
        f"Document Content:\n{parsed_doc.content}",
    ]

    if user_message and user_message.strip():
        parts.append(f'USER\'S QUESTION: "{user_message}"')
        parts.append(QUESTION_INSTRUCTIONS)
    else:
        parts.append(GENERAL_ANALYSIS_INSTRUCTIONS)

    if is_pdf_document(parsed_doc) and not has_extracted_content(parsed_doc):
        parts.append(PDF_GUIDANCE)
    else:
        parts.append(ANALYSIS_GUIDANCE)

    return "\n\n".join(parts) + "\n"
