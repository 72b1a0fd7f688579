"""
Prompt regression tests for the summarization prompts.

Checks structural properties (placeholders filled, positions stated,
format instructions carried through) rather than exact wording.
"""

import pytest

from web_digest.core.models import BatchResult, PageMetadata, SummaryOptions
from web_digest.llm.prompts import (
    FORMAT_INSTRUCTIONS,
    LENGTH_DESCRIPTIONS,
    PromptTemplate,
    SummaryPrompts,
    build_chunk_prompt,
    build_comparative_prompt,
    build_direct_prompt,
    build_synthesis_prompt,
    format_instruction,
)


class TestPromptTemplate:
    """Tests for PromptTemplate."""

    def test_format_substitutes_and_strips(self):
        """format() should substitute variables and strip whitespace."""
        template = PromptTemplate(name="t", text="  Hello {name}!\n")
        assert template.format(name="world") == "Hello world!"

    @pytest.mark.parametrize(
        "template",
        [SummaryPrompts.DIRECT, SummaryPrompts.CHUNK, SummaryPrompts.SYNTHESIS, SummaryPrompts.COMPARATIVE],
    )
    def test_templates_named(self, template):
        """Every template should carry a name."""
        assert template.name


class TestFormatInstruction:
    """Tests for the length/format instruction."""

    def test_paragraph_instruction_uses_length(self):
        """Paragraph format should mention the requested length."""
        instruction = format_instruction(SummaryOptions(length="long"))
        assert LENGTH_DESCRIPTIONS["long"] in instruction

    def test_bullets_instruction(self):
        """Bullet format should ask for bullet points."""
        instruction = format_instruction(SummaryOptions(format="bullets"))
        assert "bullet" in instruction.lower()

    def test_json_instruction(self):
        """JSON format should name the expected keys."""
        instruction = format_instruction(SummaryOptions(format="json"))
        assert instruction == FORMAT_INSTRUCTIONS["json"]
        assert "keyPoints" in instruction


class TestBuilders:
    """Tests for the prompt builders."""

    def test_direct_prompt(self):
        """Direct prompt should contain the content and instruction."""
        prompt = build_direct_prompt("Page body text.", SummaryOptions(length="short"))

        assert "Page body text." in prompt
        assert LENGTH_DESCRIPTIONS["short"] in prompt
        assert "{instruction}" not in prompt

    def test_chunk_prompt_states_position(self):
        """Chunk prompt should state the 1-based position and total."""
        prompt = build_chunk_prompt("Chunk body.", 1, 5, SummaryOptions())

        assert "part 2 of 5" in prompt
        assert "Chunk body." in prompt

    @pytest.mark.parametrize("fmt", ["paragraphs", "bullets", "json"])
    def test_format_propagates_through_chunk_and_synthesis(self, fmt):
        """The final format instruction should reach chunk and synthesis prompts."""
        options = SummaryOptions(format=fmt)
        instruction = format_instruction(options)

        assert instruction in build_chunk_prompt("body", 0, 2, options)
        assert instruction in build_synthesis_prompt(["a", "b"], options)
        assert instruction in build_direct_prompt("body", options)

    def test_synthesis_sections_in_order(self):
        """Synthesis prompt should label chunk summaries Section 1..n in order."""
        prompt = build_synthesis_prompt(["first", "second", "third"], SummaryOptions())

        positions = [prompt.index(f"Section {k}:") for k in (1, 2, 3)]
        assert positions == sorted(positions)
        assert prompt.index("first") < prompt.index("second") < prompt.index("third")

    def test_comparative_prompt_lists_sources(self):
        """Comparative prompt should enumerate each result's title and summary."""
        results = [
            BatchResult(
                url="https://a.example",
                summary="Summary A",
                metadata=PageMetadata(title="Page A", description="", url="https://a.example"),
            ),
            BatchResult(url="https://b.example", summary="Summary B"),
        ]

        prompt = build_comparative_prompt(results)

        assert "Source 1 (Page A):" in prompt
        assert "Source 2 (https://b.example):" in prompt
        assert "Summary A" in prompt and "Summary B" in prompt
        assert "Common themes" in prompt
