"""Completion-service client for SQL and chart generation.

Talks to OpenAI or any OpenAI-compatible endpoint through the async SDK.
"""

import logging

from openai import AsyncOpenAI, OpenAIError

from tablestakes.core.config import Settings, obfuscate_secret
from tablestakes.core.exceptions import GenerationError

logger = logging.getLogger(__name__)


class CompletionClient:
    """Client for a chat-completion LLM API."""

    def __init__(self, settings: Settings):
        """Initialize LLM client. The SDK client is created on first use.

        Args:
            settings: Application settings with the API key and model
        """
        self.model_name = settings.OPENAI_MODEL
        self.enabled = settings.LLM_ENABLED
        self._api_key = settings.OPENAI_API_KEY
        self._base_url = settings.OPENAI_BASE_URL
        self._timeout = settings.LLM_TIMEOUT_SECONDS
        self._client: AsyncOpenAI | None = None

        if not self.enabled:
            logger.warning("LLM is disabled in settings")

    def _get_client(self) -> AsyncOpenAI:
        if not self.enabled:
            raise GenerationError("LLM is disabled")
        if not self._api_key:
            logger.error("OPENAI_API_KEY not configured")
            raise GenerationError("LLM API key not configured")

        if self._client is None:
            logger.info(
                f"Initializing LLM client: {self.model_name}",
                extra={"api_key": obfuscate_secret(self._api_key), "base_url": self._base_url},
            )
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
            )
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.1,
        max_tokens: int = 500,
        json_response: bool = False,
    ) -> str:
        """Request a single completion.

        Args:
            system_prompt: System message
            user_prompt: User message
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate
            json_response: Constrain the model to emit a JSON object

        Returns:
            Completion text, empty string when the model returned nothing

        Raises:
            GenerationError: If the LLM is unavailable or the call fails
        """
        client = self._get_client()

        kwargs = {}
        if json_response:
            kwargs["response_format"] = {"type": "json_object"}

        logger.debug(
            "Calling LLM API",
            extra={"model": self.model_name, "json_response": json_response},
        )

        try:
            response = await client.chat.completions.create(
                model=self.model_name,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
                **kwargs,
            )
        except OpenAIError as e:
            logger.error(f"LLM API error: {e}")
            raise GenerationError(f"LLM API call failed: {e}") from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
