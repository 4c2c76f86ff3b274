"""
Base provider classes - Abstract interface for generation backends
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SamplingParameters:
    """Resolved sampling parameters for one provider call"""

    temperature: float
    top_p: float
    max_tokens: int


class GenerationProvider(ABC):
    """Abstract base class for text-generation backends (OpenAI, etc.).

    Implementations must normalize their SDK errors into
    ``ProviderRetryableError`` / ``ProviderFatalError`` so the retry
    classifier never has to inspect provider-specific exception types.
    """

    def __init__(self, config: dict[str, Any] | None = None):
        """Initialize with provider configuration"""
        self.config = config or {}

    @abstractmethod
    async def invoke(
        self,
        model_id: str,
        user_message: str,
        system_prompt: str | None,
        parameters: SamplingParameters,
    ) -> str:
        """Generate text for a single prompt

        Args:
            model_id: Provider model identifier
            user_message: The user prompt
            system_prompt: Optional system prompt
            parameters: Sampling parameters

        Returns:
            Generated text

        Raises:
            ProviderRetryableError: On throttling, timeouts or server errors
            ProviderFatalError: On any other provider failure
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Get the name of the provider"""

    async def close(self) -> None:
        """Release provider resources"""
