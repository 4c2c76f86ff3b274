"""Shared fixtures: a reduced persona catalogue and a scriptable provider."""

from collections.abc import Callable

import pytest
from haunted_reader import (
    GenerationProvider,
    InterpretationOrchestrator,
    OperationType,
    Persona,
    PersonaCategory,
    PersonaRegistry,
    ResultCache,
    RetryableBackoffExecutor,
    VoiceProfile,
)


def make_persona(
    persona_id: str,
    name: str | None = None,
    category: PersonaCategory = PersonaCategory.AUTHOR,
    template_prefix: str | None = None,
) -> Persona:
    """Build a valid persona whose templates are '<prefix> <op>: {text}'."""
    prefix = template_prefix or persona_id.upper()
    return Persona(
        id=persona_id,
        name=name or persona_id.title(),
        category=category,
        voice=VoiceProfile(
            tone="Plain",
            vocabulary=("alpha", "beta", "gamma", "delta", "epsilon", "zeta"),
            structure="Short sentences",
            focus="Facts",
        ),
        templates={op: f"{prefix} {op.value}: {{text}}" for op in OperationType},
    )


class StubProvider(GenerationProvider):
    """Provider that records calls and answers from a script.

    ``reply`` is either a fixed string or a callable receiving the call
    arguments; a callable may raise to simulate provider failures.
    """

    def __init__(self, reply: str | Callable = "Generated text."):
        super().__init__({})
        self.reply = reply
        self.calls: list[dict] = []

    async def invoke(self, model_id, user_message, system_prompt, parameters):
        self.calls.append({
            "model_id": model_id,
            "user_message": user_message,
            "system_prompt": system_prompt,
            "parameters": parameters,
        })
        if callable(self.reply):
            result = self.reply(model_id, user_message, system_prompt, parameters)
            if hasattr(result, "__await__"):
                result = await result
            return result
        return self.reply

    def get_provider_name(self) -> str:
        return "stub"


class RecordingSleep:
    """Awaitable sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float):
        self.delays.append(delay)


@pytest.fixture
def registry() -> PersonaRegistry:
    return PersonaRegistry([
        make_persona("a", "Persona A"),
        make_persona("b", "Persona B", PersonaCategory.CHARACTER),
        make_persona("c", "Persona C", PersonaCategory.PERSPECTIVE),
    ])


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def executor(recording_sleep) -> RetryableBackoffExecutor:
    return RetryableBackoffExecutor(max_attempts=3, base_delay=1.0, sleep=recording_sleep)


@pytest.fixture
def provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def orchestrator(provider, registry, executor) -> InterpretationOrchestrator:
    return InterpretationOrchestrator(
        provider,
        registry=registry,
        cache=ResultCache(),
        executor=executor,
        models={"fast": "fast-model", "balanced": "balanced-model", "quality": "quality-model"},
    )
