"""Utility modules."""

from .llm_client import LLMClient, LLMClientError, LLMProvider, LLMResponse, get_default_client

__all__ = [
    "LLMClient",
    "LLMClientError",
    "LLMProvider",
    "LLMResponse",
    "get_default_client",
]
