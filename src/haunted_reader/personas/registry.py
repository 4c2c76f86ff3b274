"""Persona registry - the read-only catalogue of generation voices."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from ..errors import PersonaCatalogError, PersonaNotFoundError, ValidationError
from ..models import TEXT_PLACEHOLDER, OperationType, Persona, PersonaCategory

DEFAULT_CATALOGUE = "personas.yaml"


def validate_personas(personas: Iterable[Persona]) -> list[str]:
    """Check a persona set for catalogue violations.

    Returns:
        List of problems, empty when the set is valid
    """
    errors: list[str] = []
    seen: set[str] = set()

    for persona in personas:
        if not persona.id:
            errors.append(f"Persona {persona.name!r} has no id")
        elif persona.id in seen:
            errors.append(f"Duplicate persona id: {persona.id}")
        seen.add(persona.id)

        for operation in OperationType:
            template = persona.template_for(operation)
            if not template:
                errors.append(f"Persona {persona.id} missing {operation.value} template")
            elif TEXT_PLACEHOLDER not in template:
                errors.append(
                    f"Persona {persona.id} {operation.value} template missing "
                    f"{TEXT_PLACEHOLDER} placeholder"
                )

        for name in persona.voice.missing_fields():
            errors.append(f"Persona {persona.id} missing voice.{name}")

    return errors


class PersonaRegistry:
    """Immutable catalogue of personas, validated once at construction.

    Pass a reduced persona set to substitute a test catalogue.
    """

    def __init__(self, personas: Iterable[Persona], source: str = "persona catalogue"):
        """Initialize the registry.

        Args:
            personas: Personas in declaration order
            source: Label used in validation errors

        Raises:
            PersonaCatalogError: If any persona violates the catalogue rules
        """
        ordered = tuple(personas)
        errors = validate_personas(ordered)
        if errors:
            raise PersonaCatalogError(errors, source)

        self._personas = ordered
        self._by_id = {persona.id: persona for persona in ordered}
        logger.debug(f"Persona registry loaded {len(ordered)} personas from {source}")

    @classmethod
    def from_dicts(
        cls, entries: Iterable[Mapping[str, Any]], source: str = "persona catalogue"
    ) -> PersonaRegistry:
        """Build a registry from raw persona dictionaries.

        Raises:
            PersonaCatalogError: If any entry is malformed or violates catalogue rules
        """
        personas: list[Persona] = []
        errors: list[str] = []
        for entry in entries:
            try:
                personas.append(Persona.from_dict(entry))
            except ValidationError as e:
                errors.append(e.message)
        if errors:
            raise PersonaCatalogError(errors, source)
        return cls(personas, source)

    @classmethod
    def from_yaml(cls, path: Path | str) -> PersonaRegistry:
        """Load a registry from a YAML catalogue file.

        The file holds a top-level ``personas`` list.
        """
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dicts(data.get("personas") or [], source=str(path))

    @classmethod
    def default(cls) -> PersonaRegistry:
        """The shipped persona catalogue (process-wide, loaded once)"""
        return _load_default_registry()

    def lookup_by_id(self, persona_id: str) -> Persona:
        """Get a persona by id.

        Raises:
            PersonaNotFoundError: If the id is not registered
        """
        try:
            return self._by_id[persona_id]
        except (KeyError, TypeError):
            raise PersonaNotFoundError(str(persona_id)) from None

    def get(self, persona_id: str) -> Persona | None:
        """Get a persona by id, or None"""
        return self._by_id.get(persona_id)

    def list_personas(self) -> list[Persona]:
        """All personas in declaration order"""
        return list(self._personas)

    def list_by_category(self, category: PersonaCategory | str) -> list[Persona]:
        """Personas in a category, in declaration order.

        Raises:
            ValidationError: If the category is not recognized
        """
        try:
            category = PersonaCategory(category)
        except ValueError:
            raise ValidationError(f"Unknown persona category: {category!r}") from None
        return [persona for persona in self._personas if persona.category == category]

    def list_categories(self) -> list[PersonaCategory]:
        """Distinct categories in first-occurrence order"""
        return list(dict.fromkeys(persona.category for persona in self._personas))

    def __contains__(self, persona_id: object) -> bool:
        return persona_id in self._by_id

    def __iter__(self) -> Iterator[Persona]:
        return iter(self._personas)

    def __len__(self) -> int:
        return len(self._personas)


@lru_cache(maxsize=1)
def _load_default_registry() -> PersonaRegistry:
    catalogue = resources.files(__package__).joinpath(DEFAULT_CATALOGUE)
    data = yaml.safe_load(catalogue.read_text(encoding="utf-8")) or {}
    return PersonaRegistry.from_dicts(data.get("personas") or [], source=DEFAULT_CATALOGUE)
