"""
Generation provider implementations
"""
from .base import GenerationProvider, SamplingParameters
from .openai import OpenAIGenerationProvider, classify_openai_error
from .tiers import TIER_PARAMETERS, QualityTier, resolve_parameters, select_tier

__all__ = [
    # Base classes
    "GenerationProvider",
    "SamplingParameters",

    # Implementations
    "OpenAIGenerationProvider",
    "classify_openai_error",

    # Quality tiers
    "QualityTier",
    "TIER_PARAMETERS",
    "resolve_parameters",
    "select_tier",
]
