"""
Provider Factory - Creates generation providers based on configuration
"""

from __future__ import annotations

from ..config import Settings
from ..providers import GenerationProvider, OpenAIGenerationProvider


class ProviderFactory:
    """Factory class for creating provider instances"""

    @staticmethod
    def create_generation_provider(settings: Settings) -> GenerationProvider:
        """Create the generation provider named in settings

        Args:
            settings: Application settings

        Returns:
            GenerationProvider instance

        Raises:
            ValueError: If provider type is not supported
        """
        provider_settings = settings.provider
        provider_type = provider_settings.type.lower()

        if provider_type == "openai":
            return OpenAIGenerationProvider({
                "api_key": provider_settings.api_key,
                "base_url": provider_settings.base_url,
                "timeout_seconds": provider_settings.timeout_seconds,
            })
        raise ValueError(f"Unsupported generation provider type: {provider_type}")
