"""
Interpretation Orchestrator - Composes prompts, retries, caching and providers
into single- and multi-persona generation flows
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from loguru import logger

from ..config import ProviderSettings, Settings
from ..errors import ValidationError, describe_error
from ..models import (
    ErrorDescriptor,
    GenerationOptions,
    GenerationOutcome,
    GenerationRequest,
    Interpretation,
    OperationType,
    Persona,
    PersonaCategory,
)
from ..personas import PersonaRegistry
from ..prompts import PromptBuilder, ensure_text
from ..providers import GenerationProvider, resolve_parameters, select_tier
from .cache import CacheStats, ResultCache, get_default_cache
from .provider_factory import ProviderFactory
from .retry import RetryableBackoffExecutor

if TYPE_CHECKING:
    from ..documents import TextDocument


class InterpretationOrchestrator:
    """Facade for generating persona interpretations.

    Usage:
        orchestrator = InterpretationOrchestrator(provider)
        summary = await orchestrator.generate_one(text, "poe", OperationType.SUMMARY)
        results = await orchestrator.generate_many(text, ["poe", "child"], "ending")
    """

    def __init__(
        self,
        provider: GenerationProvider,
        registry: PersonaRegistry | None = None,
        cache: ResultCache | None = None,
        executor: RetryableBackoffExecutor | None = None,
        models: dict[str, str] | None = None,
        fast_tier_token_threshold: int = 2000,
        include_voice_profile: bool = True,
        max_concurrency: int | None = None,
        cache_enabled: bool = True,
    ):
        """Initialize the orchestrator.

        Args:
            provider: Generation backend
            registry: Persona catalogue (shipped catalogue if None)
            cache: Result cache (process-wide cache if None)
            executor: Retry executor (3 attempts, 1s base if None)
            models: Model id per quality tier name
            fast_tier_token_threshold: Summaries below this many tokens use the fast tier
            include_voice_profile: Send a voice-profile system prompt
            max_concurrency: Cap on in-flight provider calls per batch (None for no cap)
            cache_enabled: Master switch; when False no call reads or writes the cache
        """
        self.provider = provider
        self.registry = registry or PersonaRegistry.default()
        self.cache = cache if cache is not None else get_default_cache()
        self.executor = executor or RetryableBackoffExecutor()
        self.models = models or dict(ProviderSettings().models)
        self.cache_enabled = cache_enabled
        self.fast_tier_token_threshold = fast_tier_token_threshold
        self.prompt_builder = PromptBuilder(self.registry, include_voice_profile)
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.max_concurrency = max_concurrency

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        provider: GenerationProvider | None = None,
        registry: PersonaRegistry | None = None,
    ) -> InterpretationOrchestrator:
        """Create an orchestrator wired from settings.

        Args:
            settings: Application settings
            provider: Override the configured provider
            registry: Override the configured persona catalogue
        """
        if registry is None and settings.generation.personas_file:
            registry = PersonaRegistry.from_yaml(settings.generation.personas_file)

        return cls(
            provider=provider or ProviderFactory.create_generation_provider(settings),
            registry=registry,
            cache=cls._cache_for(settings),
            executor=RetryableBackoffExecutor(
                max_attempts=settings.retry.max_attempts,
                base_delay=settings.retry.base_delay_seconds,
            ),
            models=dict(settings.provider.models),
            fast_tier_token_threshold=settings.generation.fast_tier_token_threshold,
            include_voice_profile=settings.generation.include_voice_profile,
            max_concurrency=settings.generation.max_concurrency,
            cache_enabled=settings.cache.enabled,
        )

    @staticmethod
    def _cache_for(settings: Settings) -> ResultCache:
        """Shared process-wide cache unless settings ask for a different budget"""
        shared = get_default_cache()
        if (
            settings.cache.max_size_bytes == shared.max_size_bytes
            and settings.cache.entry_overhead_bytes == shared.entry_overhead_bytes
        ):
            return shared
        logger.debug(f"Using a private cache of {settings.cache.max_size_bytes} bytes")
        return ResultCache(
            max_size_bytes=settings.cache.max_size_bytes,
            entry_overhead_bytes=settings.cache.entry_overhead_bytes,
        )

    # Catalogue

    def list_personas(self) -> list[Persona]:
        return self.registry.list_personas()

    def list_categories(self) -> list[PersonaCategory]:
        return self.registry.list_categories()

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    # Generation

    async def generate_one(
        self,
        text: str,
        persona_id: str,
        operation: OperationType | str,
        options: GenerationOptions | None = None,
        variables: dict[str, Any] | None = None,
    ) -> Interpretation:
        """Generate one persona's interpretation of a text.

        A cache hit returns without calling the provider.

        Args:
            text: Input text (never modified)
            persona_id: Persona to channel
            operation: Summary, rewrite, ending or analysis
            options: Sampling overrides and cache policy
            variables: Extra template substitutions

        Returns:
            The interpretation

        Raises:
            ValidationError: Blank text or unknown operation
            PersonaNotFoundError: Unknown persona
            RetryExhaustedError: Provider kept failing with retryable errors
            ProviderFatalError: Provider rejected the request
        """
        request = GenerationRequest(
            input_text=text,
            persona_id=persona_id,
            operation=OperationType.coerce(operation),
            options=options or GenerationOptions(),
        )
        return await self._generate(request, variables)

    async def _generate(
        self, request: GenerationRequest, variables: dict[str, Any] | None = None
    ) -> Interpretation:
        use_cache = self.cache_enabled and request.options.use_cache
        if use_cache and isinstance(request.input_text, str):
            cached = self.cache.get(request.input_text, request.persona_id, request.operation)
            if cached is not None:
                return cached

        prompt = self.prompt_builder.build(
            request.persona_id, request.operation, request.input_text, variables=variables
        )
        persona = self.registry.lookup_by_id(request.persona_id)

        tier = select_tier(request.operation, request.input_text, self.fast_tier_token_threshold)
        model_id = (
            request.options.model_override
            or self.models.get(tier.value)
            or self.models.get("balanced")
        )
        if not model_id:
            raise ValidationError(f"No model configured for the {tier.value} tier")
        parameters = resolve_parameters(tier, request.options)

        logger.debug(
            f"Generating {request.operation.value} for {persona.id} with {model_id} ({tier.value})"
        )
        content = await self.executor.execute(
            lambda: self.provider.invoke(
                model_id, prompt.user_message, prompt.system_prompt, parameters
            )
        )

        interpretation = Interpretation.create(
            persona_id=persona.id,
            persona_name=persona.name,
            operation=request.operation,
            content=content,
            original_text=request.input_text,
        )
        if use_cache:
            self.cache.set(request.input_text, request.persona_id, request.operation, interpretation)
        return interpretation

    async def generate_many(
        self,
        text: str,
        persona_ids: Sequence[str],
        operation: OperationType | str,
        options: GenerationOptions | None = None,
    ) -> list[GenerationOutcome]:
        """Generate interpretations for several personas concurrently.

        One persona failing never affects the others: each slot holds either
        an Interpretation or an ErrorDescriptor, in ``persona_ids`` order.

        Raises:
            ValidationError: Empty persona list, blank text or unknown operation
        """
        if isinstance(persona_ids, str) or not persona_ids:
            raise ValidationError("persona_ids must be a non-empty list")
        ensure_text(text)
        operation = OperationType.coerce(operation)
        options = options or GenerationOptions()

        logger.info(f"Generating {operation.value} for {len(persona_ids)} personas")
        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        async def run(persona_id: str) -> GenerationOutcome:
            try:
                if semaphore is None:
                    return await self.generate_one(text, persona_id, operation, options)
                async with semaphore:
                    return await self.generate_one(text, persona_id, operation, options)
            except Exception as e:
                logger.error(f"{operation.value} for {persona_id} failed: {e}")
                persona = self.registry.get(persona_id)
                return ErrorDescriptor(
                    persona_id=persona_id,
                    persona_name=persona.name if persona else None,
                    operation=operation,
                    error_message=describe_error(e),
                    error_kind=getattr(getattr(e, "kind", None), "value", "unexpected"),
                )

        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(run(persona_id)) for persona_id in persona_ids]

        outcomes = [task.result() for task in tasks]
        failed = sum(1 for outcome in outcomes if not outcome.succeeded)
        logger.info(f"Batch finished: {len(outcomes) - failed} succeeded, {failed} failed")
        return outcomes

    async def regenerate(
        self,
        text: str,
        persona_id: str,
        operation: OperationType | str,
        options: GenerationOptions | None = None,
        *,
        use_cache: bool = True,
    ) -> Interpretation:
        """Generate again for the same input.

        With ``use_cache=True`` this returns the cached interpretation when
        there is one. Pass ``use_cache=False`` for a fresh provider call; the
        fresh result is not written back to the cache.
        """
        options = options or GenerationOptions()
        if options.use_cache != use_cache:
            options = GenerationOptions(
                temperature=options.temperature,
                top_p=options.top_p,
                max_tokens=options.max_tokens,
                model_override=options.model_override,
                use_cache=use_cache,
            )
        return await self.generate_one(text, persona_id, operation, options)

    # Operation shortcuts

    async def summarize(
        self, text: str, persona_id: str, options: GenerationOptions | None = None
    ) -> Interpretation:
        return await self.generate_one(text, persona_id, OperationType.SUMMARY, options)

    async def rewrite(
        self, text: str, persona_id: str, options: GenerationOptions | None = None
    ) -> Interpretation:
        return await self.generate_one(text, persona_id, OperationType.REWRITE, options)

    async def analyze(
        self, text: str, persona_id: str, options: GenerationOptions | None = None
    ) -> Interpretation:
        return await self.generate_one(text, persona_id, OperationType.ANALYSIS, options)

    async def generate_endings(
        self, text: str, persona_ids: Sequence[str], options: GenerationOptions | None = None
    ) -> list[GenerationOutcome]:
        return await self.generate_many(text, persona_ids, OperationType.ENDING, options)

    async def interpret_document(
        self,
        document: TextDocument,
        persona_ids: Sequence[str],
        operation: OperationType | str,
        options: GenerationOptions | None = None,
    ) -> list[GenerationOutcome]:
        """Run a batch over an ingested document's content"""
        return await self.generate_many(document.content, persona_ids, operation, options)
