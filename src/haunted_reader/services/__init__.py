"""
Core services for interpretation generation
"""
from .cache import CacheEntry, CacheStats, ResultCache, cache_key, get_default_cache
from .orchestrator import InterpretationOrchestrator
from .provider_factory import ProviderFactory
from .retry import RETRYABLE_ERROR_NAMES, RetryableBackoffExecutor, is_retryable

__all__ = [
    "CacheEntry",
    "CacheStats",
    "InterpretationOrchestrator",
    "ProviderFactory",
    "RETRYABLE_ERROR_NAMES",
    "ResultCache",
    "RetryableBackoffExecutor",
    "cache_key",
    "get_default_cache",
    "is_retryable",
]
