"""Unit tests for the completion-service client."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from openai import OpenAIError

from tablestakes.core.config import Settings
from tablestakes.core.exceptions import GenerationError
from tablestakes.nlq.llm_client import CompletionClient


def _response(content):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


class TestCompletionClient:
    """Tests for CompletionClient.complete()."""

    @pytest.mark.asyncio
    async def test_sends_system_and_user_messages(self, mock_async_openai, test_settings):
        """Test the request shape sent to the chat completions API."""
        sdk = mock_async_openai.return_value
        sdk.chat.completions.create = AsyncMock(return_value=_response("SELECT 1"))
        client = CompletionClient(test_settings)

        text = await client.complete("system text", "user text", temperature=0.1, max_tokens=500)

        assert text == "SELECT 1"
        kwargs = sdk.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["messages"] == [
            {"role": "system", "content": "system text"},
            {"role": "user", "content": "user text"},
        ]
        assert kwargs["temperature"] == 0.1
        assert kwargs["max_tokens"] == 500
        assert "response_format" not in kwargs

    @pytest.mark.asyncio
    async def test_json_response_sets_response_format(self, mock_async_openai, test_settings):
        sdk = mock_async_openai.return_value
        sdk.chat.completions.create = AsyncMock(return_value=_response("{}"))
        client = CompletionClient(test_settings)

        await client.complete("s", "u", json_response=True)

        kwargs = sdk.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_client_is_created_once_with_settings(self, mock_async_openai):
        settings = Settings(
            _env_file=None,
            OPENAI_API_KEY="sk-test-key-1234567890",
            OPENAI_BASE_URL="https://llm.example.com/v1",
            LLM_TIMEOUT_SECONDS=15,
        )
        client = CompletionClient(settings)

        await client.complete("s", "u")
        await client.complete("s", "u")

        mock_async_openai.assert_called_once_with(
            api_key="sk-test-key-1234567890",
            base_url="https://llm.example.com/v1",
            timeout=15,
        )

    @pytest.mark.asyncio
    async def test_none_content_becomes_empty_string(self, mock_async_openai, test_settings):
        sdk = mock_async_openai.return_value
        sdk.chat.completions.create = AsyncMock(return_value=_response(None))

        assert await CompletionClient(test_settings).complete("s", "u") == ""

    @pytest.mark.asyncio
    async def test_api_error_raises_generation_error(self, mock_async_openai, test_settings):
        """Test that provider errors are wrapped in GenerationError."""
        sdk = mock_async_openai.return_value
        sdk.chat.completions.create = AsyncMock(side_effect=OpenAIError("API timeout"))

        with pytest.raises(GenerationError, match="API call failed"):
            await CompletionClient(test_settings).complete("s", "u")

    @pytest.mark.asyncio
    async def test_missing_api_key_raises(self, mock_async_openai):
        client = CompletionClient(Settings(_env_file=None, OPENAI_API_KEY=""))

        with pytest.raises(GenerationError, match="API key not configured"):
            await client.complete("s", "u")
        mock_async_openai.assert_not_called()

    @pytest.mark.asyncio
    async def test_disabled_llm_raises(self, mock_async_openai):
        client = CompletionClient(Settings(_env_file=None, OPENAI_API_KEY="sk-x", LLM_ENABLED=False))

        with pytest.raises(GenerationError, match="disabled"):
            await client.complete("s", "u")
        mock_async_openai.assert_not_called()
