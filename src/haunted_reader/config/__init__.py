"""
Configuration module for the Haunted Reader generation core
"""

from .config import (
    CacheSettings,
    GenerationSettings,
    ProviderSettings,
    RetrySettings,
    Settings,
    get_settings,
    set_settings,
)

__all__ = [
    "CacheSettings",
    "GenerationSettings",
    "ProviderSettings",
    "RetrySettings",
    "Settings",
    "get_settings",
    "set_settings",
]
