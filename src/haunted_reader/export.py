"""Export sinks - where finished interpretations go."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from loguru import logger

from .models import GenerationOutcome, Interpretation

RULE_WIDTH = 70


class ExportSink(Protocol):
    """Protocol for export formats."""

    def export(self, original_text: str, outcomes: Sequence[GenerationOutcome]) -> str:
        """Render the original text and its interpretations."""
        ...


class TextExportSink:
    """Plain-text report: header, original text, one section per interpretation.

    Failed slots (error descriptors) are left out.
    """

    def __init__(self, clock=lambda: datetime.now(UTC)):
        self._clock = clock

    def export(self, original_text: str, outcomes: Sequence[GenerationOutcome]) -> str:
        interpretations = [o for o in outcomes if isinstance(o, Interpretation)]
        exported_at = self._clock()

        sections = [self._header(exported_at, interpretations)]
        sections.append(self._section("ORIGINAL TEXT", original_text))
        for interpretation in interpretations:
            title = (
                f"{interpretation.operation.value.upper()} BY "
                f"{interpretation.persona_name.upper()}"
            )
            body = "\n".join([
                f"Generated: {interpretation.generated_at.isoformat(timespec='seconds')}",
                f"Word Count: {interpretation.word_count}",
                "",
                interpretation.content,
            ])
            sections.append(self._section(title, body))
        sections.append(self._footer(exported_at))
        return "\n\n".join(sections)

    def write(
        self, path: Path | str, original_text: str, outcomes: Sequence[GenerationOutcome]
    ) -> Path:
        """Export to a UTF-8 file and return its path"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.export(original_text, outcomes), encoding="utf-8")
        logger.info(f"Exported {len(outcomes)} results to {path}")
        return path

    def _header(self, exported_at: datetime, interpretations: Sequence[Interpretation]) -> str:
        personas = ", ".join(dict.fromkeys(i.persona_name for i in interpretations)) or "none"
        return "\n".join([
            "=" * RULE_WIDTH,
            "THE HAUNTED READER - TEXT EXPORT",
            "=" * RULE_WIDTH,
            "",
            f"Export Date: {exported_at.isoformat(timespec='seconds')}",
            f"Personas: {personas}",
            "=" * RULE_WIDTH,
        ])

    def _section(self, title: str, content: str) -> str:
        return "\n".join(["", "-" * RULE_WIDTH, title, "-" * RULE_WIDTH, "", content, ""])

    def _footer(self, exported_at: datetime) -> str:
        return "\n".join([
            "=" * RULE_WIDTH,
            "End of Haunted Reader Export",
            f"Generated on {exported_at.date().isoformat()}",
            "=" * RULE_WIDTH,
        ])
