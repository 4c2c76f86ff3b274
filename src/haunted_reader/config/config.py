"""
Configuration Management for the Haunted Reader generation core
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from loguru import logger

DEFAULT_CONFIG_FILE = "haunted_reader.yaml"
DEFAULT_ENV_FILE = ".env.local"


def _find_file(filename: str) -> Path | None:
    """Find a file by walking up from the current working directory.

    Args:
        filename: Name of the file to find

    Returns:
        Path to the file if found, None otherwise
    """
    current = Path.cwd()
    for parent in [current, *current.parents]:
        candidate = parent / filename
        if candidate.exists():
            return candidate
    return None


def _load_env_file(env_file: Path | None = None) -> bool:
    """Load environment variables from a .env file.

    Args:
        env_file: Path to the env file, or None to auto-discover

    Returns:
        True if file was loaded, False otherwise
    """
    if env_file is None:
        env_file = _find_file(DEFAULT_ENV_FILE)

    if env_file and env_file.exists():
        loaded = load_dotenv(env_file, override=True)
        if loaded:
            logger.debug(f"Loaded environment from {env_file}")
        return loaded
    return False


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid {name} '{raw}', keeping {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid {name} '{raw}', keeping {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _merge(instance: Any, data: dict[str, Any] | None) -> Any:
    """Overlay known keys from a mapping onto a settings dataclass"""
    if not data:
        return instance
    known = {f.name for f in fields(instance)}
    for key, value in data.items():
        if key not in known:
            logger.warning(f"Ignoring unknown setting '{key}' for {type(instance).__name__}")
            continue
        current = getattr(instance, key)
        if isinstance(current, dict) and isinstance(value, dict):
            current.update(value)
        else:
            setattr(instance, key, value)
    return instance


@dataclass
class ProviderSettings:
    """Generation provider configuration"""

    type: str = "openai"
    api_key: str = ""
    base_url: str | None = None
    timeout_seconds: float = 60.0
    models: dict[str, str] = field(default_factory=lambda: {
        "fast": "gpt-4o-mini",
        "balanced": "gpt-4o-mini",
        "quality": "gpt-4o",
    })


@dataclass
class RetrySettings:
    """Retry/backoff configuration"""

    max_attempts: int = 3
    base_delay_seconds: float = 1.0


@dataclass
class CacheSettings:
    """Result cache configuration"""

    enabled: bool = True
    max_size_bytes: int = 50 * 1024 * 1024
    entry_overhead_bytes: int = 500


@dataclass
class GenerationSettings:
    """Orchestration configuration"""

    fast_tier_token_threshold: int = 2000
    include_voice_profile: bool = True
    max_concurrency: int | None = None
    personas_file: str | None = None


@dataclass
class Settings:
    """Main configuration class.

    Usage:
        # Defaults, then haunted_reader.yaml, then environment (.env.local)
        settings = Settings.load()

        # Or build explicitly
        settings = Settings(cache=CacheSettings(max_size_bytes=1024))
    """

    provider: ProviderSettings = field(default_factory=ProviderSettings)
    retry: RetrySettings = field(default_factory=RetrySettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    generation: GenerationSettings = field(default_factory=GenerationSettings)

    @classmethod
    def load_from_file(cls, config_path: Path | str | None = None) -> Settings:
        """Load configuration from a YAML file.

        Args:
            config_path: Path to configuration file (auto-discovered if None)

        Returns:
            Settings object, defaults where the file is silent
        """
        settings = cls()

        path = Path(config_path) if config_path else _find_file(DEFAULT_CONFIG_FILE)
        if path is None or not path.exists():
            return settings

        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        _merge(settings.provider, yaml_data.get("provider"))
        _merge(settings.retry, yaml_data.get("retry"))
        _merge(settings.cache, yaml_data.get("cache"))
        _merge(settings.generation, yaml_data.get("generation"))
        logger.debug(f"Loaded configuration from {path}")
        return settings

    def apply_env(self) -> Settings:
        """Override settings with environment variables.

        Returns:
            Self for method chaining
        """
        provider = self.provider
        provider.type = os.environ.get("HAUNTED_PROVIDER", provider.type)
        provider.api_key = os.environ.get("OPENAI_API_KEY", provider.api_key)
        provider.base_url = os.environ.get("OPENAI_BASE_URL", provider.base_url)
        provider.timeout_seconds = _env_float("HAUNTED_TIMEOUT_SECONDS", provider.timeout_seconds)
        for tier in ("fast", "balanced", "quality"):
            model = os.environ.get(f"HAUNTED_MODEL_{tier.upper()}")
            if model:
                provider.models[tier] = model

        self.retry.max_attempts = _env_int("HAUNTED_RETRY_MAX_ATTEMPTS", self.retry.max_attempts)
        self.retry.base_delay_seconds = _env_float(
            "HAUNTED_RETRY_BASE_DELAY", self.retry.base_delay_seconds
        )

        self.cache.enabled = _env_bool("HAUNTED_CACHE_ENABLED", self.cache.enabled)
        self.cache.max_size_bytes = _env_int("HAUNTED_CACHE_MAX_BYTES", self.cache.max_size_bytes)

        generation = self.generation
        generation.fast_tier_token_threshold = _env_int(
            "HAUNTED_FAST_TIER_THRESHOLD", generation.fast_tier_token_threshold
        )
        generation.max_concurrency = _env_int("HAUNTED_MAX_CONCURRENCY", generation.max_concurrency)
        generation.personas_file = os.environ.get("HAUNTED_PERSONAS_FILE", generation.personas_file)
        return self

    @classmethod
    def load(
        cls,
        config_path: Path | str | None = None,
        env_file: Path | str | None = None,
    ) -> Settings:
        """Load configuration from file and environment.

        Environment takes precedence over the YAML file.

        Args:
            config_path: Optional path to config file
            env_file: Path to .env file, or None to auto-discover

        Returns:
            Settings with merged configuration
        """
        if isinstance(env_file, str):
            env_file = Path(env_file)

        loaded = _load_env_file(env_file)
        settings = cls.load_from_file(config_path).apply_env()

        # Log the loaded configuration (redacting secrets)
        logger.info("Settings loaded:")
        logger.info(f"  Provider: {settings.provider.type}")
        logger.info(
            f"  API Key: {'***' + settings.provider.api_key[-4:] if settings.provider.api_key else 'NOT SET'}"
        )
        logger.info(f"  Models: {settings.provider.models}")
        logger.info(
            f"  Cache: {'enabled' if settings.cache.enabled else 'disabled'}, "
            f"max {settings.cache.max_size_bytes} bytes"
        )
        if not loaded:
            logger.warning("No .env file was loaded - using system environment only")

        return settings

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary (API key redacted)"""
        data = asdict(self)
        if data["provider"]["api_key"]:
            data["provider"]["api_key"] = "***"
        return data

    def save_to_file(self, config_path: Path | str):
        """Save configuration to a YAML file (API key redacted)"""
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def set_settings(settings: Settings | None):
    """Set (or reset, with None) the global settings instance"""
    global _settings
    _settings = settings
