"""
Interpretation Model - Generation requests and their outcomes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from .persona import OperationType


def count_words(text: str) -> int:
    """Count whitespace-separated tokens"""
    return len(text.split())


@dataclass(frozen=True)
class GenerationOptions:
    """Per-call generation options.

    ``None`` sampling values fall back to the quality tier defaults.
    """

    temperature: float | None = None
    top_p: float | None = None
    max_tokens: int | None = None
    model_override: str | None = None
    use_cache: bool = True


@dataclass(frozen=True)
class GenerationRequest:
    """A single persona generation request"""

    input_text: str
    persona_id: str
    operation: OperationType
    options: GenerationOptions = field(default_factory=GenerationOptions)


@dataclass(frozen=True)
class Interpretation:
    """Text generated by one persona for one operation"""

    persona_id: str
    persona_name: str
    operation: OperationType
    content: str
    generated_at: datetime
    word_count: int
    original_word_count: int

    succeeded = True

    @classmethod
    def create(
        cls,
        persona_id: str,
        persona_name: str,
        operation: OperationType,
        content: str,
        original_text: str,
    ) -> Interpretation:
        """Build an interpretation from raw provider output"""
        return cls(
            persona_id=persona_id,
            persona_name=persona_name,
            operation=operation,
            content=content,
            generated_at=datetime.now(UTC),
            word_count=count_words(content),
            original_word_count=count_words(original_text),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "persona_id": self.persona_id,
            "persona_name": self.persona_name,
            "operation": self.operation.value,
            "content": self.content,
            "generated_at": self.generated_at.isoformat(),
            "word_count": self.word_count,
            "original_word_count": self.original_word_count,
        }


@dataclass(frozen=True)
class ErrorDescriptor:
    """Failed slot in a multi-persona batch"""

    persona_id: str
    persona_name: str | None
    operation: OperationType
    error_message: str
    error_kind: str
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    succeeded = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "persona_id": self.persona_id,
            "persona_name": self.persona_name,
            "operation": self.operation.value,
            "error_message": self.error_message,
            "error_kind": self.error_kind,
            "generated_at": self.generated_at.isoformat(),
        }


GenerationOutcome = Interpretation | ErrorDescriptor
