"""Prompt building - turns (persona, operation, text) into a provider-agnostic prompt.

Everything here is pure: no I/O, no provider calls.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .errors import ValidationError
from .models import TEXT_PLACEHOLDER, OperationType, Persona
from .personas import PersonaRegistry

VOCABULARY_SAMPLE_SIZE = 5
MIN_TEMPLATE_LENGTH = 20


@dataclass(frozen=True)
class Prompt:
    """A built prompt, ready for any generation provider"""

    user_message: str
    system_prompt: str | None
    persona_id: str
    operation: OperationType

    def to_messages(self) -> list[dict[str, str]]:
        """Render as chat messages (system first, when present)"""
        messages = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": self.user_message})
        return messages


def ensure_text(text: Any) -> str:
    """Validate that text is a non-blank string.

    Raises:
        ValidationError: If text is missing, not a string, or whitespace-only
    """
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Text is required and must be a non-empty string")
    return text


def substitute_variables(template: str, variables: Mapping[str, Any]) -> str:
    """Replace every ``{name}`` occurrence with its value.

    Placeholders without a matching variable are left as they are.
    """
    result = template
    for key, value in variables.items():
        result = result.replace(f"{{{key}}}", str(value))
    return result


def build_system_prompt(persona: Persona) -> str:
    """Describe a persona's voice for the provider's system prompt"""
    voice = persona.voice
    vocabulary = ", ".join(voice.vocabulary[:VOCABULARY_SAMPLE_SIZE])
    return (
        f"You are channeling the spirit of {persona.name}.\n"
        "\n"
        "Voice Characteristics:\n"
        f"- Tone: {voice.tone}\n"
        f"- Vocabulary: Use words and phrases like: {vocabulary}\n"
        f"- Structure: {voice.structure}\n"
        f"- Focus: {voice.focus}\n"
        "\n"
        "Maintain this voice consistently throughout your response. "
        "Embody this spirit's unique perspective and style."
    )


def build_prompt(
    registry: PersonaRegistry,
    persona_id: str,
    operation: OperationType | str,
    text: str,
    variables: Mapping[str, Any] | None = None,
    include_voice_profile: bool = True,
) -> Prompt:
    """Build a prompt from a persona's template.

    The text is trimmed before substitution. Caller variables are applied
    after ``text`` and may not override it.

    Args:
        registry: Persona catalogue
        persona_id: Persona to channel
        operation: Operation selecting the template
        text: Input text
        variables: Extra ``{name}`` substitutions
        include_voice_profile: Build a system prompt from the voice profile

    Returns:
        Prompt with user message and optional system prompt

    Raises:
        PersonaNotFoundError: If the persona is unknown
        ValidationError: If the operation is unknown or the text is blank
    """
    persona = registry.lookup_by_id(persona_id)
    operation = OperationType.coerce(operation)
    ensure_text(text)

    template = persona.template_for(operation)
    if not template:
        # Registry validation makes this unreachable for loaded catalogues
        raise ValidationError(f"Persona {persona_id} has no {operation.value} template")

    substitutions: dict[str, Any] = {"text": text.strip()}
    for key, value in (variables or {}).items():
        substitutions.setdefault(key, value)

    return Prompt(
        user_message=substitute_variables(template, substitutions),
        system_prompt=build_system_prompt(persona) if include_voice_profile else None,
        persona_id=persona.id,
        operation=operation,
    )


class PromptBuilder:
    """``build_prompt`` bound to a registry"""

    def __init__(self, registry: PersonaRegistry, include_voice_profile: bool = True):
        self.registry = registry
        self.include_voice_profile = include_voice_profile

    def build(
        self,
        persona_id: str,
        operation: OperationType | str,
        text: str,
        variables: Mapping[str, Any] | None = None,
        include_voice_profile: bool | None = None,
    ) -> Prompt:
        if include_voice_profile is None:
            include_voice_profile = self.include_voice_profile
        return build_prompt(
            self.registry,
            persona_id,
            operation,
            text,
            variables=variables,
            include_voice_profile=include_voice_profile,
        )


def validate_prompt_template(
    template: Any, required_placeholders: tuple[str, ...] = (TEXT_PLACEHOLDER,)
) -> list[str]:
    """Check a template for required placeholders and a sensible length.

    Returns:
        List of problems, empty when the template is usable
    """
    if not isinstance(template, str) or not template:
        return ["Template must be a non-empty string"]

    errors = [
        f"Template missing required placeholder: {placeholder}"
        for placeholder in required_placeholders
        if placeholder not in template
    ]
    if len(template.strip()) < MIN_TEMPLATE_LENGTH:
        errors.append("Template seems too short to be meaningful")
    return errors


def estimate_tokens(text: str | None) -> int:
    """Rough token count: mean of a character-based and a word-based estimate"""
    if not text:
        return 0
    char_estimate = len(text) / 4
    word_estimate = len(text.split()) * 1.3
    return round((char_estimate + word_estimate) / 2)


def optimize_prompt(prompt: str) -> str:
    """Collapse redundant whitespace while keeping paragraph breaks"""
    if not prompt:
        return prompt
    collapsed = re.sub(r" +", " ", prompt)
    lines = "\n".join(line.strip() for line in collapsed.split("\n"))
    return re.sub(r"\n{3,}", "\n\n", lines).strip()
