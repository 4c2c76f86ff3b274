"""Exception hierarchy for interpretation generation.

Every failure the core raises is a ``HauntedReaderError`` tagged with an
``ErrorKind`` so callers can branch on the kind instead of parsing messages.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of failure kinds."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PROVIDER_RETRYABLE = "provider_retryable"
    PROVIDER_FATAL = "provider_fatal"
    RETRY_EXHAUSTED = "retry_exhausted"


class HauntedReaderError(Exception):
    """Base exception for all interpretation errors.

    Attributes:
        kind: Classified failure kind
        message: Human-readable description
        cause: Underlying exception, if any
    """

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.message = message
        self.cause = cause
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a structured ``{kind, message, cause}`` dictionary."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "cause": repr(self.cause) if self.cause is not None else None,
        }


class ValidationError(HauntedReaderError):
    """Raised for malformed input (empty text, unknown operation, empty batch)."""

    kind = ErrorKind.VALIDATION


class PersonaCatalogError(ValidationError):
    """Raised when a persona catalogue fails validation at load time.

    Attributes:
        errors: Every problem found in the catalogue
    """

    def __init__(self, errors: list[str], source: str = "persona catalogue") -> None:
        self.errors: list[str] = errors
        summary = "\n  - " + "\n  - ".join(errors) if errors else " (no details)"
        super().__init__(f"Invalid {source}:{summary}")


class PersonaNotFoundError(HauntedReaderError):
    """Raised when a persona id is not in the registry."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, persona_id: str) -> None:
        self.persona_id = persona_id
        super().__init__(f"Persona not found: {persona_id}")


class ProviderRetryableError(HauntedReaderError):
    """Transient provider failure (throttling, timeout, 5xx)."""

    kind = ErrorKind.PROVIDER_RETRYABLE

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.code = code
        super().__init__(message, cause)


class ProviderFatalError(HauntedReaderError):
    """Provider failure that retrying cannot fix (auth, bad request)."""

    kind = ErrorKind.PROVIDER_FATAL

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.code = code
        super().__init__(message, cause)


class RetryExhaustedError(HauntedReaderError):
    """Raised when every attempt failed with a retryable error."""

    kind = ErrorKind.RETRY_EXHAUSTED

    def __init__(self, attempts: int, cause: BaseException) -> None:
        self.attempts = attempts
        super().__init__(f"Failed after {attempts} attempts: {cause}", cause)


_FRIENDLY_MESSAGES = {
    ErrorKind.VALIDATION: "The request was malformed. Check the input text and operation.",
    ErrorKind.NOT_FOUND: "The requested persona does not exist.",
    ErrorKind.PROVIDER_RETRYABLE: "The generation service is busy. Please try again shortly.",
    ErrorKind.PROVIDER_FATAL: "The generation service rejected the request.",
    ErrorKind.RETRY_EXHAUSTED: "The generation service kept failing. Please try again later.",
}


def describe_error(error: BaseException) -> str:
    """Return a short message suitable for an error descriptor."""
    if isinstance(error, HauntedReaderError):
        return f"{_FRIENDLY_MESSAGES[error.kind]} ({error.message})"
    return f"Unexpected error: {str(error) or type(error).__name__}"
