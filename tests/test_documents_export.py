"""Tests for text ingestion and export."""

from datetime import UTC, datetime

import pytest
from haunted_reader import ErrorDescriptor, Interpretation, OperationType, ValidationError
from haunted_reader.documents import PlainTextIngestion
from haunted_reader.export import TextExportSink

EXPORTED_AT = datetime(2024, 10, 31, 23, 59, tzinfo=UTC)


def interpretation(persona_id, name, content, operation=OperationType.ENDING):
    return Interpretation(
        persona_id=persona_id,
        persona_name=name,
        operation=operation,
        content=content,
        generated_at=EXPORTED_AT,
        word_count=len(content.split()),
        original_word_count=4,
    )


class TestPlainTextIngestion:
    """Tests for reading plain text files."""

    def test_load_text_file(self, tmp_path):
        """Test content and metadata are extracted."""
        path = tmp_path / "story.txt"
        path.write_text("The house was old.\n", encoding="utf-8")

        document = PlainTextIngestion().load(path)

        assert document.content == "The house was old.\n"
        assert document.metadata["filename"] == "story.txt"
        assert document.metadata["word_count"] == 4
        assert document.metadata["size_bytes"] == path.stat().st_size

    def test_markdown_is_supported(self, tmp_path):
        """Test markdown files load as plain text."""
        path = tmp_path / "notes.md"
        path.write_text("# Title\nBody", encoding="utf-8")

        assert PlainTextIngestion().load(path).content == "# Title\nBody"

    def test_unsupported_suffix(self, tmp_path):
        """Test binary formats are rejected."""
        path = tmp_path / "story.pdf"
        path.write_bytes(b"%PDF-1.4")

        with pytest.raises(ValidationError, match="Unsupported"):
            PlainTextIngestion().load(path)

    def test_empty_file(self, tmp_path):
        """Test whitespace-only files are rejected."""
        path = tmp_path / "empty.txt"
        path.write_text("  \n\t", encoding="utf-8")

        with pytest.raises(ValidationError, match="No text"):
            PlainTextIngestion().load(path)


class TestTextExportSink:
    """Tests for the plain-text export format."""

    def test_export_layout(self):
        """Test header, original text, sections and footer."""
        sink = TextExportSink(clock=lambda: EXPORTED_AT)
        outcomes = [
            interpretation("poe", "Edgar Allan Poe", "Nevermore, the house said."),
            interpretation("child", "Curious Child", "And then a puppy came!"),
        ]

        report = sink.export("The house was old.", outcomes)

        assert report.startswith("=" * 70)
        assert "THE HAUNTED READER - TEXT EXPORT" in report
        assert "Export Date: 2024-10-31T23:59:00+00:00" in report
        assert "Personas: Edgar Allan Poe, Curious Child" in report
        assert "ORIGINAL TEXT\n" in report
        assert "ENDING BY EDGAR ALLAN POE" in report
        assert "ENDING BY CURIOUS CHILD" in report
        assert "Word Count: 4" in report
        assert report.index("Edgar Allan Poe") < report.index("Curious Child")
        assert "End of Haunted Reader Export" in report
        assert "Generated on 2024-10-31" in report

    def test_failed_slots_are_skipped(self):
        """Test error descriptors do not appear in the export."""
        sink = TextExportSink(clock=lambda: EXPORTED_AT)
        outcomes = [
            interpretation("poe", "Edgar Allan Poe", "Nevermore."),
            ErrorDescriptor(
                persona_id="ghost",
                persona_name=None,
                operation=OperationType.ENDING,
                error_message="The requested persona does not exist.",
                error_kind="not_found",
            ),
        ]

        report = sink.export("The house was old.", outcomes)

        assert "ghost" not in report
        assert "Personas: Edgar Allan Poe\n" in report

    def test_write_creates_file(self, tmp_path):
        """Test write() saves the export as UTF-8."""
        sink = TextExportSink(clock=lambda: EXPORTED_AT)
        target = tmp_path / "exports" / "report.txt"

        path = sink.write(target, "Text", [interpretation("poe", "Poe", "Nevermore, Lénore.")])

        assert path == target
        assert "Nevermore, Lénore." in target.read_text(encoding="utf-8")
