"""Text ingestion - where input text comes from."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from .errors import ValidationError


@dataclass(frozen=True)
class TextDocument:
    """Extracted text plus whatever the source knew about it."""

    content: str
    metadata: dict[str, Any] = field(default_factory=dict)


class TextIngestion(Protocol):
    """Protocol for text sources.

    Implementations extract text from files, uploads, etc. The generation
    core only requires a non-empty ``content``.
    """

    def load(self, path: Path | str) -> TextDocument:
        """Extract a document from a source path."""
        ...


class PlainTextIngestion:
    """Reads UTF-8 ``.txt`` files."""

    SUPPORTED_SUFFIXES = (".txt", ".text", ".md")

    def load(self, path: Path | str) -> TextDocument:
        """Read a plain text file.

        Raises:
            ValidationError: If the file type is unsupported or the file is empty
            OSError: If the file cannot be read
        """
        path = Path(path)
        if path.suffix.lower() not in self.SUPPORTED_SUFFIXES:
            raise ValidationError(f"Unsupported file type: {path.suffix or path.name}")

        content = path.read_text(encoding="utf-8")
        if not content.strip():
            raise ValidationError(f"No text found in {path.name}")

        logger.debug(f"Loaded {len(content)} chars from {path}")
        return TextDocument(
            content=content,
            metadata={
                "filename": path.name,
                "size_bytes": path.stat().st_size,
                "word_count": len(content.split()),
            },
        )
