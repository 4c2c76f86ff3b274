"""
Haunted Reader - Persona-voiced text interpretation

Generates summaries, rewrites, endings and analyses of a text in the voice
of one or more literary personas, with retry/backoff around the generation
provider and a size-bounded result cache.
"""

__version__ = "1.0.0"

# Make key components available at package level
from .errors import (
    ErrorKind,
    HauntedReaderError,
    PersonaCatalogError,
    PersonaNotFoundError,
    ProviderFatalError,
    ProviderRetryableError,
    RetryExhaustedError,
    ValidationError,
)
from .models import (
    ErrorDescriptor,
    GenerationOptions,
    Interpretation,
    OperationType,
    Persona,
    PersonaCategory,
    VoiceProfile,
)
from .personas import PersonaRegistry
from .prompts import Prompt, PromptBuilder, build_prompt
from .providers import GenerationProvider, OpenAIGenerationProvider
from .services import (
    InterpretationOrchestrator,
    ProviderFactory,
    ResultCache,
    RetryableBackoffExecutor,
)

__all__ = [
    # Errors
    "ErrorKind",
    "HauntedReaderError",
    "PersonaCatalogError",
    "PersonaNotFoundError",
    "ProviderFatalError",
    "ProviderRetryableError",
    "RetryExhaustedError",
    "ValidationError",

    # Models
    "ErrorDescriptor",
    "GenerationOptions",
    "Interpretation",
    "OperationType",
    "Persona",
    "PersonaCategory",
    "VoiceProfile",

    # Core
    "GenerationProvider",
    "InterpretationOrchestrator",
    "OpenAIGenerationProvider",
    "PersonaRegistry",
    "Prompt",
    "PromptBuilder",
    "ProviderFactory",
    "ResultCache",
    "RetryableBackoffExecutor",
    "build_prompt",
]
