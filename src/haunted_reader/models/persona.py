"""
Persona Model - Named generation voices and their prompt templates
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from ..errors import ValidationError

TEXT_PLACEHOLDER = "{text}"


class PersonaCategory(str, Enum):
    """Kinds of persona"""

    AUTHOR = "author"
    CHARACTER = "character"
    PERSPECTIVE = "perspective"
    ABSTRACT = "abstract"


class OperationType(str, Enum):
    """Generation operations every persona supports"""

    SUMMARY = "summary"
    REWRITE = "rewrite"
    ENDING = "ending"
    ANALYSIS = "analysis"

    @classmethod
    def coerce(cls, value: OperationType | str) -> OperationType:
        """Convert a string to an OperationType.

        Raises:
            ValidationError: If the value is not a recognized operation
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = ", ".join(op.value for op in cls)
            raise ValidationError(
                f"Invalid operation type: {value!r}. Must be one of: {valid}"
            ) from None


@dataclass(frozen=True)
class VoiceProfile:
    """How a persona sounds"""

    tone: str
    vocabulary: tuple[str, ...]
    structure: str
    focus: str

    def missing_fields(self) -> list[str]:
        """Names of fields that are empty"""
        return [
            name
            for name in ("tone", "vocabulary", "structure", "focus")
            if not getattr(self, name)
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "tone": self.tone,
            "vocabulary": list(self.vocabulary),
            "structure": self.structure,
            "focus": self.focus,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> VoiceProfile:
        return cls(
            tone=data.get("tone", ""),
            vocabulary=tuple(data.get("vocabulary") or ()),
            structure=data.get("structure", ""),
            focus=data.get("focus", ""),
        )


@dataclass(frozen=True)
class Persona:
    """A named generation voice with one prompt template per operation"""

    id: str
    name: str
    category: PersonaCategory
    voice: VoiceProfile
    templates: Mapping[OperationType, str] = field(default_factory=dict)
    icon: str = ""
    description: str = ""

    def __post_init__(self):
        # Freeze the template table so the persona stays immutable
        object.__setattr__(self, "templates", MappingProxyType(dict(self.templates)))

    def template_for(self, operation: OperationType) -> str | None:
        """Get the prompt template for an operation"""
        return self.templates.get(operation)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "icon": self.icon,
            "description": self.description,
            "voice": self.voice.to_dict(),
            "templates": {op.value: tpl for op, tpl in self.templates.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Persona:
        """Create from dictionary.

        Unknown template keys are ignored; missing ones are reported by
        registry validation, not here.

        Raises:
            ValidationError: If the category is not recognized
        """
        try:
            category = PersonaCategory(data.get("category", ""))
        except ValueError:
            raise ValidationError(
                f"Persona {data.get('id')!r} has invalid category: {data.get('category')!r}"
            ) from None

        templates = {}
        for key, template in (data.get("templates") or {}).items():
            try:
                templates[OperationType(key)] = template
            except ValueError:
                continue

        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            category=category,
            voice=VoiceProfile.from_dict(data.get("voice") or {}),
            templates=templates,
            icon=data.get("icon", ""),
            description=data.get("description", ""),
        )
