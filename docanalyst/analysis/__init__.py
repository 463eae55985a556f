"""Prompt composition and LLM-backed document analysis."""

from .prompt_composer import generate_analysis_prompt
from .document_analyst import (
    DocumentAnalyst,
    SyncDocumentAnalyst,
    UploadedFile,
    AnalysisResult,
    AnalysisRequestError,
    FileTooLargeError,
)

__all__ = [
    "generate_analysis_prompt",
    "DocumentAnalyst",
    "SyncDocumentAnalyst",
    "UploadedFile",
    "AnalysisResult",
    "AnalysisRequestError",
    "FileTooLargeError",
]
