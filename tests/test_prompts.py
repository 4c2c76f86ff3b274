"""Tests for prompt building."""

import pytest
from conftest import make_persona
from haunted_reader import (
    OperationType,
    PersonaNotFoundError,
    PersonaRegistry,
    PromptBuilder,
    ValidationError,
    build_prompt,
)
from haunted_reader.prompts import (
    estimate_tokens,
    optimize_prompt,
    substitute_variables,
    validate_prompt_template,
)

SAMPLE_TEXT = "The old house stood at the end of the lane."


class TestBuildPrompt:
    """Tests for build_prompt."""

    def test_every_persona_and_operation(self):
        """Test every catalogue pair yields the text and a system prompt."""
        registry = PersonaRegistry.default()

        for persona in registry:
            for operation in OperationType:
                prompt = build_prompt(registry, persona.id, operation, SAMPLE_TEXT)

                assert SAMPLE_TEXT in prompt.user_message
                assert prompt.system_prompt
                assert prompt.persona_id == persona.id
                assert prompt.operation is operation

    def test_operation_accepts_string(self, registry):
        """Test operations can be given by value."""
        prompt = build_prompt(registry, "a", "rewrite", SAMPLE_TEXT)

        assert prompt.operation is OperationType.REWRITE
        assert prompt.user_message == f"A rewrite: {SAMPLE_TEXT}"

    def test_unknown_persona(self, registry):
        """Test unknown personas raise NotFound."""
        with pytest.raises(PersonaNotFoundError):
            build_prompt(registry, "ghost-writer", OperationType.SUMMARY, SAMPLE_TEXT)

    def test_invalid_operation(self, registry):
        """Test unrecognized operations raise a validation error."""
        with pytest.raises(ValidationError, match="Invalid operation type"):
            build_prompt(registry, "a", "limerick", SAMPLE_TEXT)

    @pytest.mark.parametrize("text", ["", "   ", "\n\t", None])
    def test_blank_text(self, registry, text):
        """Test empty or whitespace-only text raises a validation error."""
        with pytest.raises(ValidationError, match="Text is required"):
            build_prompt(registry, "a", OperationType.SUMMARY, text)

    def test_system_prompt_can_be_disabled(self, registry):
        """Test the voice profile system prompt is optional."""
        prompt = build_prompt(
            registry, "a", OperationType.SUMMARY, SAMPLE_TEXT, include_voice_profile=False
        )

        assert prompt.system_prompt is None
        assert prompt.to_messages() == [{"role": "user", "content": prompt.user_message}]

    def test_system_prompt_uses_first_five_vocabulary_words(self, registry):
        """Test the system prompt describes the voice with five vocabulary words."""
        prompt = build_prompt(registry, "a", OperationType.SUMMARY, SAMPLE_TEXT)

        assert "Persona A" in prompt.system_prompt
        assert "Tone: Plain" in prompt.system_prompt
        assert "alpha, beta, gamma, delta, epsilon" in prompt.system_prompt
        assert "zeta" not in prompt.system_prompt
        assert "Structure: Short sentences" in prompt.system_prompt
        assert "Focus: Facts" in prompt.system_prompt

    def test_deterministic(self, registry):
        """Test identical inputs build identical prompts."""
        first = build_prompt(registry, "b", OperationType.ANALYSIS, SAMPLE_TEXT)
        second = build_prompt(registry, "b", OperationType.ANALYSIS, SAMPLE_TEXT)

        assert first == second

    def test_input_text_not_modified(self, registry):
        """Test surrounding whitespace is trimmed in the prompt only."""
        text = "  padded text  "

        prompt = build_prompt(registry, "a", OperationType.SUMMARY, text)

        assert prompt.user_message == "A summary: padded text"
        assert text == "  padded text  "

    def test_extra_variables_and_unresolved_placeholders(self):
        """Test caller variables are substituted and unknown placeholders stay verbatim."""
        persona = make_persona("v")
        templates = dict(persona.templates)
        templates[OperationType.SUMMARY] = "For {audience}: {text} ({tone})"
        registry = PersonaRegistry([
            type(persona)(
                id="v", name="V", category=persona.category, voice=persona.voice, templates=templates
            )
        ])

        prompt = build_prompt(
            registry, "v", OperationType.SUMMARY, "Hello", variables={"audience": "kids"}
        )

        assert prompt.user_message == "For kids: Hello ({tone})"

    def test_text_variable_cannot_be_overridden(self, registry):
        """Test a caller-supplied 'text' variable does not replace the input."""
        prompt = build_prompt(
            registry, "a", OperationType.SUMMARY, "real", variables={"text": "fake"}
        )

        assert prompt.user_message == "A summary: real"


class TestPromptBuilder:
    """Tests for the registry-bound builder."""

    def test_builder_default_voice_flag(self, registry):
        """Test the builder's voice profile default can be overridden per call."""
        builder = PromptBuilder(registry, include_voice_profile=False)

        assert builder.build("a", "summary", SAMPLE_TEXT).system_prompt is None
        assert builder.build("a", "summary", SAMPLE_TEXT, include_voice_profile=True).system_prompt


class TestPromptUtilities:
    """Tests for template validation and token helpers."""

    def test_substitute_all_occurrences(self):
        """Test every occurrence of a placeholder is replaced."""
        assert substitute_variables("{x} and {x}", {"x": 1}) == "1 and 1"

    def test_validate_good_template(self):
        """Test a usable template has no problems."""
        assert validate_prompt_template("Summarize the following text: {text}") == []

    def test_validate_bad_templates(self):
        """Test missing placeholders and short templates are reported."""
        assert validate_prompt_template("") == ["Template must be a non-empty string"]

        problems = validate_prompt_template("Too short")
        assert "Template missing required placeholder: {text}" in problems
        assert "Template seems too short to be meaningful" in problems

    def test_estimate_tokens(self):
        """Test the blended character/word token estimate."""
        assert estimate_tokens("") == 0
        assert estimate_tokens(None) == 0
        # 9 chars / 4 = 2.25, 2 words * 1.3 = 2.6 -> mean 2.425
        assert estimate_tokens("abcd efgh") == 2

    def test_optimize_prompt(self):
        """Test whitespace is collapsed but paragraphs survive."""
        prompt = "  Hello    world  \n\n\n\n  Second   paragraph  "

        assert optimize_prompt(prompt) == "Hello world\n\nSecond paragraph"
