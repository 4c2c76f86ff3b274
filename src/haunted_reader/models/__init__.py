"""
Domain models for interpretation generation
"""
from .persona import (
    TEXT_PLACEHOLDER,
    OperationType,
    Persona,
    PersonaCategory,
    VoiceProfile,
)
from .interpretation import (
    ErrorDescriptor,
    GenerationOptions,
    GenerationOutcome,
    GenerationRequest,
    Interpretation,
    count_words,
)

__all__ = [
    # Persona models
    "TEXT_PLACEHOLDER",
    "OperationType",
    "Persona",
    "PersonaCategory",
    "VoiceProfile",

    # Generation models
    "ErrorDescriptor",
    "GenerationOptions",
    "GenerationOutcome",
    "GenerationRequest",
    "Interpretation",
    "count_words",
]
