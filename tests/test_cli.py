"""Tests for the command line interface."""

from unittest.mock import AsyncMock, MagicMock, patch

from haunted_reader import ErrorDescriptor, Interpretation, OperationType
from haunted_reader.cli import main, parse_args
from haunted_reader.config import Settings


def make_orchestrator(outcomes):
    orchestrator = MagicMock()
    orchestrator.interpret_document = AsyncMock(return_value=outcomes)
    orchestrator.provider.close = AsyncMock()
    return orchestrator


class TestParseArgs:
    """Tests for argument parsing."""

    def test_interpret_arguments(self):
        """Test repeated personas and overrides are collected."""
        args = parse_args([
            "interpret", "story.txt", "-p", "poe", "-p", "child",
            "-o", "ending", "--no-cache", "--temperature", "0.2",
        ])

        assert args.command == "interpret"
        assert args.personas == ["poe", "child"]
        assert args.operation == "ending"
        assert args.no_cache is True
        assert args.temperature == 0.2
        assert args.model is None

    def test_default_operation(self):
        """Test summary is the default operation."""
        args = parse_args(["interpret", "story.txt", "-p", "poe"])

        assert args.operation == "summary"


class TestMain:
    """Tests for command dispatch."""

    @patch("haunted_reader.cli.Settings.load", return_value=Settings())
    def test_personas_lists_catalogue(self, mock_load, capsys):
        """Test the personas command prints the shipped catalogue."""
        assert main(["personas"]) == 0

        out = capsys.readouterr().out
        assert "AUTHOR" in out
        assert "Edgar Allan Poe" in out
        assert "child" in out

    @patch("haunted_reader.cli.InterpretationOrchestrator.from_settings")
    @patch("haunted_reader.cli.Settings.load", return_value=Settings())
    def test_interpret_prints_export(self, mock_load, mock_from_settings, tmp_path, capsys):
        """Test a successful batch is exported to stdout."""
        story = tmp_path / "story.txt"
        story.write_text("The house was old.", encoding="utf-8")
        outcome = Interpretation.create(
            persona_id="poe",
            persona_name="Edgar Allan Poe",
            operation=OperationType.SUMMARY,
            content="Nevermore.",
            original_text="The house was old.",
        )
        orchestrator = make_orchestrator([outcome])
        mock_from_settings.return_value = orchestrator

        code = main(["interpret", str(story), "-p", "poe", "--no-cache"])

        assert code == 0
        out = capsys.readouterr().out
        assert "SUMMARY BY EDGAR ALLAN POE" in out
        assert "Nevermore." in out
        document, persona_ids, operation, options = orchestrator.interpret_document.call_args.args
        assert document.content == "The house was old."
        assert persona_ids == ["poe"]
        assert operation == "summary"
        assert options.use_cache is False
        orchestrator.provider.close.assert_awaited_once()

    @patch("haunted_reader.cli.InterpretationOrchestrator.from_settings")
    @patch("haunted_reader.cli.Settings.load", return_value=Settings())
    def test_interpret_partial_failure(self, mock_load, mock_from_settings, tmp_path, capsys):
        """Test a failed slot is reported and sets exit code 1."""
        story = tmp_path / "story.txt"
        story.write_text("The house was old.", encoding="utf-8")
        failure = ErrorDescriptor(
            persona_id="ghost",
            persona_name=None,
            operation=OperationType.ENDING,
            error_message="The requested persona does not exist.",
            error_kind="not_found",
        )
        mock_from_settings.return_value = make_orchestrator([failure])
        output = tmp_path / "report.txt"

        code = main(["interpret", str(story), "-p", "ghost", "-o", "ending", "--output", str(output)])

        assert code == 1
        captured = capsys.readouterr()
        assert "ghost" in captured.err
        assert output.exists()

    @patch("haunted_reader.cli.Settings.load", return_value=Settings())
    def test_validation_error_exit_code(self, mock_load, tmp_path, capsys):
        """Test ingestion errors exit with code 2."""
        empty = tmp_path / "empty.txt"
        empty.write_text("", encoding="utf-8")

        assert main(["interpret", str(empty), "-p", "poe"]) == 2
        assert "No text found" in capsys.readouterr().err

    @patch("haunted_reader.cli.Settings.load", return_value=Settings())
    def test_missing_file_exit_code(self, mock_load, tmp_path, capsys):
        """Test an unreadable input file exits with code 2 instead of a traceback."""
        missing = tmp_path / "missing.txt"

        assert main(["interpret", str(missing), "-p", "poe"]) == 2
        err = capsys.readouterr().err
        assert err.startswith("Error:")
        assert "missing.txt" in err
