"""
Haunted Reader command line

Usage:
    haunted-reader personas
    haunted-reader interpret story.txt --persona poe --persona child --operation ending
    haunted-reader interpret story.txt -p scholar -o analysis --output report.txt --no-cache
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from loguru import logger

from .config import Settings
from .documents import PlainTextIngestion
from .errors import HauntedReaderError
from .export import TextExportSink
from .models import ErrorDescriptor, GenerationOptions, OperationType
from .personas import PersonaRegistry
from .services import InterpretationOrchestrator


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="haunted-reader",
        description="Retell a text through literary persona voices",
    )
    parser.add_argument("--config", help="Path to haunted_reader.yaml")
    parser.add_argument("--env-file", help="Path to .env file (default: discover .env.local)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("personas", help="List available personas")

    interpret = commands.add_parser("interpret", help="Interpret a text file")
    interpret.add_argument("file", help="Plain text file to interpret")
    interpret.add_argument(
        "--persona", "-p", dest="personas", action="append", required=True,
        help="Persona id (repeatable)",
    )
    interpret.add_argument(
        "--operation", "-o", choices=[op.value for op in OperationType],
        default=OperationType.SUMMARY.value, help="Operation (default: summary)",
    )
    interpret.add_argument("--output", help="Write the text export here instead of stdout")
    interpret.add_argument("--no-cache", action="store_true", help="Skip the result cache")
    interpret.add_argument("--temperature", type=float, help="Sampling temperature override")
    interpret.add_argument("--model", help="Model id override")

    return parser.parse_args(argv)


def print_personas(registry: PersonaRegistry):
    """Print the catalogue grouped by category"""
    for category in registry.list_categories():
        print(f"\n{category.value.upper()}")
        print("-" * 50)
        for persona in registry.list_by_category(category):
            print(f"  {persona.icon} {persona.id:<10} {persona.name} - {persona.description}")


async def run_interpret(args: argparse.Namespace, settings: Settings) -> int:
    """Run a batch for the interpret command"""
    document = PlainTextIngestion().load(args.file)
    orchestrator = InterpretationOrchestrator.from_settings(settings)
    options = GenerationOptions(
        temperature=args.temperature,
        model_override=args.model,
        use_cache=not args.no_cache,
    )

    try:
        outcomes = await orchestrator.interpret_document(
            document, args.personas, args.operation, options
        )
    finally:
        await orchestrator.provider.close()

    for outcome in outcomes:
        if isinstance(outcome, ErrorDescriptor):
            print(f"✗ {outcome.persona_id}: {outcome.error_message}", file=sys.stderr)

    sink = TextExportSink()
    if args.output:
        path = sink.write(args.output, document.content, outcomes)
        print(f"📁 Export saved to {path}")
    else:
        print(sink.export(document.content, outcomes))

    return 0 if all(outcome.succeeded for outcome in outcomes) else 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point"""
    args = parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "WARNING")

    try:
        settings = Settings.load(config_path=args.config, env_file=args.env_file)
        if args.command == "personas":
            registry = (
                PersonaRegistry.from_yaml(settings.generation.personas_file)
                if settings.generation.personas_file
                else PersonaRegistry.default()
            )
            print_personas(registry)
            return 0
        return asyncio.run(run_interpret(args, settings))
    except HauntedReaderError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
