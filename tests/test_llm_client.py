"""
Tests for the LLM client.

Run with: pytest tests/test_llm_client.py -v
"""

import json

import httpx
import pytest
from unittest.mock import AsyncMock, patch

from docanalyst.config import Config
from docanalyst.utils.llm_client import LLMClient, LLMClientError, LLMProvider, get_default_client


def completion(content: str, model: str = "openai/gpt-4") -> dict:
    return {
        "model": model,
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 5},
    }


def make_client(handler, **kwargs) -> LLMClient:
    return LLMClient(
        provider=LLMProvider.OPENROUTER,
        api_key="test-key",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestLLMClientInit:
    """Tests for client construction."""

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("GROQ_API_KEY", raising=False)

        with pytest.raises(LLMClientError, match="GROQ_API_KEY"):
            LLMClient(provider="groq")

    def test_provider_from_string(self):
        client = LLMClient(provider="GROQ", api_key="k")

        assert client.provider == LLMProvider.GROQ
        assert client.base_url == LLMClient.GROQ_BASE_URL

    def test_default_client_uses_configured_provider(self, monkeypatch):
        """Test that get_default_client reads DEFAULT_LLM_PROVIDER in any case."""
        monkeypatch.setattr(Config, "DEFAULT_LLM_PROVIDER", "GROQ")

        client = get_default_client(api_key="k")

        assert client.provider == LLMProvider.GROQ

    def test_default_client_override(self, monkeypatch):
        monkeypatch.setattr(Config, "DEFAULT_LLM_PROVIDER", "groq")

        client = get_default_client("OpenRouter", api_key="k")

        assert client.provider == LLMProvider.OPENROUTER


@pytest.mark.asyncio
class TestLLMClientRequests:
    """Async tests for completion requests."""

    async def test_generate_text_sends_single_user_message(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=completion("Revenue is up."))

        async with make_client(handler) as client:
            text = await client.generate_text("Analyze this", model="openai/gpt-4")

        assert text == "Revenue is up."
        assert seen["url"] == "https://openrouter.ai/api/v1/chat/completions"
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"]["messages"] == [{"role": "user", "content": "Analyze this"}]
        assert seen["body"]["model"] == "openai/gpt-4"

    async def test_default_model(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=completion("ok"))

        async with make_client(handler) as client:
            await client.generate_text("hi")

        assert seen["body"]["model"] == LLMClient.DEFAULT_MODELS[LLMProvider.OPENROUTER]

    async def test_client_error_raises_with_detail(self):
        def handler(request):
            return httpx.Response(400, json={"error": {"message": "context length exceeded"}})

        async with make_client(handler) as client:
            with pytest.raises(LLMClientError, match="context length exceeded"):
                await client.generate_text("too long")

    async def test_server_error_retries_then_fails(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503, json={"error": "unavailable"})

        with patch("docanalyst.utils.llm_client.asyncio.sleep", new=AsyncMock()):
            async with make_client(handler, max_retries=2) as client:
                with pytest.raises(LLMClientError, match="Failed after 2 attempts"):
                    await client.generate_text("hello")

        assert len(calls) == 2

    async def test_retry_recovers(self):
        responses = [
            httpx.Response(429),
            httpx.Response(200, json=completion("second time lucky")),
        ]

        def handler(request):
            return responses.pop(0)

        with patch("docanalyst.utils.llm_client.asyncio.sleep", new=AsyncMock()):
            async with make_client(handler) as client:
                text = await client.generate_text("hello")

        assert text == "second time lucky"

    async def test_malformed_response(self):
        def handler(request):
            return httpx.Response(200, json={"choices": []})

        async with make_client(handler) as client:
            with pytest.raises(LLMClientError, match="Malformed"):
                await client.generate_text("hello")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
