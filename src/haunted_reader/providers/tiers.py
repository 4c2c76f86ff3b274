"""Quality tiers - which model and sampling defaults an operation gets."""

from __future__ import annotations

from enum import Enum

from loguru import logger

from ..models import GenerationOptions, OperationType
from ..prompts import estimate_tokens
from .base import SamplingParameters


class QualityTier(str, Enum):
    """Trade-off between latency and output quality"""

    FAST = "fast"
    BALANCED = "balanced"
    QUALITY = "quality"


TIER_PARAMETERS: dict[QualityTier, SamplingParameters] = {
    QualityTier.FAST: SamplingParameters(temperature=0.7, top_p=0.9, max_tokens=2000),
    QualityTier.BALANCED: SamplingParameters(temperature=0.7, top_p=0.9, max_tokens=3000),
    QualityTier.QUALITY: SamplingParameters(temperature=0.9, top_p=0.95, max_tokens=4096),
}


def select_tier(
    operation: OperationType, text: str, fast_token_threshold: int = 2000
) -> QualityTier:
    """Pick the quality tier for an operation.

    Short summaries go to the fast tier; rewrites and endings must keep the
    meaning of the source and always get the quality tier.
    """
    if operation is OperationType.SUMMARY:
        tokens = estimate_tokens(text)
        tier = QualityTier.FAST if tokens < fast_token_threshold else QualityTier.QUALITY
        logger.debug(f"Summary of ~{tokens} tokens -> {tier.value} tier")
        return tier
    if operation in (OperationType.REWRITE, OperationType.ENDING):
        return QualityTier.QUALITY
    return QualityTier.BALANCED


def resolve_parameters(tier: QualityTier, options: GenerationOptions) -> SamplingParameters:
    """Tier defaults with any caller overrides applied"""
    defaults = TIER_PARAMETERS[tier]
    return SamplingParameters(
        temperature=options.temperature if options.temperature is not None else defaults.temperature,
        top_p=options.top_p if options.top_p is not None else defaults.top_p,
        max_tokens=options.max_tokens if options.max_tokens is not None else defaults.max_tokens,
    )
