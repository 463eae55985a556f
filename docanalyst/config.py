"""
Configuration management for Document Analyst.

Centralizes environment variable loading and application settings.
"""

import os
import logging
from typing import Literal

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # API Keys
    OPENROUTER_API_KEY: str = os.getenv("OPENROUTER_API_KEY", "")
    GROQ_API_KEY: str = os.getenv("GROQ_API_KEY", "")

    # LLM Settings
    DEFAULT_LLM_PROVIDER: Literal["openrouter", "groq"] = os.getenv(
        "DEFAULT_LLM_PROVIDER", "openrouter"
    )  # type: ignore
    DEFAULT_ANALYSIS_MODEL: str = os.getenv(
        "DEFAULT_ANALYSIS_MODEL", "openai/gpt-4"
    )

    # PDF text extraction service. Empty URL means extract in-process with PyMuPDF.
    PDF_EXTRACTION_URL: str = os.getenv("PDF_EXTRACTION_URL", "")
    PDF_EXTRACTION_TIMEOUT: float = float(os.getenv("PDF_EXTRACTION_TIMEOUT", "30"))

    # Content preview limits (rows rendered into the prompt)
    SPREADSHEET_PREVIEW_ROWS: int = int(os.getenv("SPREADSHEET_PREVIEW_ROWS", "10"))
    CSV_PREVIEW_ROWS: int = int(os.getenv("CSV_PREVIEW_ROWS", "20"))

    # Uploads
    MAX_UPLOAD_SIZE_MB: int = int(os.getenv("MAX_UPLOAD_SIZE_MB", "10"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def max_upload_size_bytes(cls) -> int:
        """Upload limit in bytes."""
        return cls.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @classmethod
    def validate(cls) -> list[str]:
        """
        Validate configuration and return any issues.

        Returns:
            List of validation error messages (empty if valid)
        """
        issues = []

        provider = (cls.DEFAULT_LLM_PROVIDER or "").lower()
        if provider not in ("openrouter", "groq"):
            issues.append(f"DEFAULT_LLM_PROVIDER '{cls.DEFAULT_LLM_PROVIDER}' is not supported")
        elif provider == "groq" and not cls.GROQ_API_KEY:
            issues.append("GROQ_API_KEY is not set")
        elif provider == "openrouter" and not cls.OPENROUTER_API_KEY:
            issues.append("OPENROUTER_API_KEY is not set")

        if cls.PDF_EXTRACTION_TIMEOUT <= 0:
            issues.append("PDF_EXTRACTION_TIMEOUT must be positive")

        return issues

    @classmethod
    def is_valid(cls) -> bool:
        """Check if configuration is valid for operation."""
        return len(cls.validate()) == 0

    @classmethod
    def setup_logging(cls, level: str | None = None):
        """
        Configure application logging.

        Args:
            level: Optional override for log level
        """
        log_level = level or cls.LOG_LEVEL

        # Configure root logger
        logging.basicConfig(
            level=getattr(logging, log_level.upper(), logging.INFO),
            format=cls.LOG_FORMAT,
        )

        # Reduce noise from third-party libraries
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


# Singleton config instance
config = Config()


def get_config() -> Config:
    """Get the configuration instance."""
    return config
