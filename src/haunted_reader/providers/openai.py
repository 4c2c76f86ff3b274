"""OpenAI chat-completions generation provider."""

from __future__ import annotations

from typing import Any

import httpx
import openai
from loguru import logger

from ..errors import HauntedReaderError, ProviderFatalError, ProviderRetryableError
from .base import GenerationProvider, SamplingParameters


def classify_openai_error(error: Exception) -> HauntedReaderError:
    """Normalize an ``openai`` SDK exception into a classified provider error"""
    name = type(error).__name__

    if isinstance(error, (openai.APITimeoutError, openai.APIConnectionError)):
        return ProviderRetryableError(f"{name}: {error}", cause=error, code=name)

    if isinstance(error, openai.APIStatusError):
        status = error.status_code
        if status == 429 or status >= 500:
            return ProviderRetryableError(
                f"{name}: {error}", cause=error, status_code=status, code=name
            )
        return ProviderFatalError(f"{name}: {error}", cause=error, status_code=status, code=name)

    return ProviderFatalError(f"{name}: {error}", cause=error, code=name)


class OpenAIGenerationProvider(GenerationProvider):
    """Generates text with the OpenAI chat completions API.

    Usage:
        provider = OpenAIGenerationProvider({"api_key": "sk-...", "timeout_seconds": 30})
        text = await provider.invoke("gpt-4o-mini", "Hello", None, parameters)
    """

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        client: openai.AsyncOpenAI | None = None,
    ):
        """Initialize the provider.

        Args:
            config: Provider settings (api_key, base_url, timeout_seconds)
            client: Pre-built client, mainly for tests
        """
        super().__init__(config)
        self._client = client

    @property
    def client(self) -> openai.AsyncOpenAI:
        """Lazily initialize the OpenAI client."""
        if self._client is None:
            timeout = float(self.config.get("timeout_seconds") or 60.0)
            self._client = openai.AsyncOpenAI(
                api_key=self.config.get("api_key") or None,
                base_url=self.config.get("base_url") or None,
                timeout=httpx.Timeout(timeout, connect=min(timeout, 10.0)),
                # Retries are handled by RetryableBackoffExecutor
                max_retries=0,
            )
        return self._client

    async def invoke(
        self,
        model_id: str,
        user_message: str,
        system_prompt: str | None,
        parameters: SamplingParameters,
    ) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_message})

        try:
            response = await self.client.chat.completions.create(
                model=model_id,
                messages=messages,
                temperature=parameters.temperature,
                top_p=parameters.top_p,
                max_tokens=parameters.max_tokens,
            )
        except openai.OpenAIError as e:
            raise classify_openai_error(e) from e

        if not response.choices or response.choices[0].message.content is None:
            raise ProviderFatalError(f"Empty response from model {model_id}")

        content = response.choices[0].message.content
        logger.debug(f"{model_id} returned {len(content)} chars")
        return content

    def get_provider_name(self) -> str:
        return "openai"

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
