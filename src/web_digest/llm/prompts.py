"""
Prompt templates for summarization.

Provides prompts for:
- Direct summarization of short content
- Per-chunk extracts of long content
- Synthesis of chunk extracts into one summary
- Comparative analysis across several pages

The requested length and format instructions are carried by the direct,
chunk and synthesis prompts alike.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    from web_digest.core.models import BatchResult, SummaryOptions


@dataclass(frozen=True)
class PromptTemplate:
    """
    A reusable prompt template with variable substitution.

    Example:
        >>> template = PromptTemplate(name="direct", text="Summarize:\\n{content}")
        >>> prompt = template.format(content="Long article here...")
    """

    name: str
    text: str

    def format(self, **kwargs: Any) -> str:
        """Substitute variables and strip surrounding whitespace."""
        return self.text.format(**kwargs).strip()


LENGTH_DESCRIPTIONS = {
    "short": "one paragraph",
    "medium": "two paragraphs",
    "long": "three to four paragraphs",
}

FORMAT_INSTRUCTIONS = {
    "paragraphs": "Provide a concise {length} summary in paragraph form.",
    "bullets": "Summarize as 5-7 concise bullet points covering the key ideas.",
    "json": (
        'Return only a JSON object with keys: "mainTopic" (string), '
        '"keyPoints" (array of strings), "conclusion" (string).'
    ),
}


def format_instruction(options: "SummaryOptions") -> str:
    """Instruction line for the requested length and format."""
    length = LENGTH_DESCRIPTIONS[options.length]
    return FORMAT_INSTRUCTIONS[options.format].format(length=length)


class SummaryPrompts:
    """Prompt templates for the summarization pipeline."""

    DIRECT = PromptTemplate(
        name="direct",
        text=(
            "{instruction}\n"
            "Focus on the core ideas and conclusions.\n\n"
            "Content:\n"
            "{content}"
        ),
    )

    CHUNK = PromptTemplate(
        name="chunk",
        text=(
            "You are summarizing part {position} of {total} from a longer document.\n"
            "Extract and summarize the key information from this section in 2-3 paragraphs.\n"
            "Focus on main ideas, important details, and conclusions.\n"
            "Maintain context awareness that this is part of a larger document.\n"
            "Your extract will be merged with the other parts into a final summary "
            "that must follow this instruction: {instruction}\n"
            "Keep the details that final summary will need.\n\n"
            "Content:\n"
            "{content}"
        ),
    )

    SYNTHESIS = PromptTemplate(
        name="synthesis",
        text=(
            "You are synthesizing summaries from multiple sections of a single document.\n"
            "{instruction}\n"
            "Create a coherent, unified summary that captures the document's overall message.\n\n"
            "Section Summaries:\n"
            "{sections}"
        ),
    )

    COMPARATIVE = PromptTemplate(
        name="comparative",
        text=(
            "Compare and contrast the following summaries from different web pages. Identify:\n"
            "1. Common themes and overlapping topics\n"
            "2. Unique perspectives or information in each source\n"
            "3. Contradictions or differing viewpoints\n"
            "4. Overall synthesis of the information\n\n"
            "Sources:\n"
            "{sources}\n\n"
            "Provide a comparative analysis in clear paragraphs."
        ),
    )


SECTION_SEPARATOR = "\n\n---\n\n"


def build_direct_prompt(content: str, options: "SummaryOptions") -> str:
    """Prompt for summarizing content that fits in one chunk."""
    return SummaryPrompts.DIRECT.format(
        instruction=format_instruction(options),
        content=content,
    )


def build_chunk_prompt(
    content: str,
    index: int,
    total: int,
    options: "SummaryOptions",
) -> str:
    """Prompt for one chunk, stating its 1-based position."""
    return SummaryPrompts.CHUNK.format(
        position=index + 1,
        total=total,
        instruction=format_instruction(options),
        content=content,
    )


def build_synthesis_prompt(chunk_summaries: Sequence[str], options: "SummaryOptions") -> str:
    """Prompt merging chunk summaries, labeled Section 1..n in order."""
    sections = SECTION_SEPARATOR.join(
        f"Section {i + 1}:\n{summary}" for i, summary in enumerate(chunk_summaries)
    )
    return SummaryPrompts.SYNTHESIS.format(
        instruction=format_instruction(options),
        sections=sections,
    )


def build_comparative_prompt(results: Sequence["BatchResult"]) -> str:
    """Prompt comparing the summaries of several pages."""
    sources = SECTION_SEPARATOR.join(
        f"Source {i + 1} ({result.title}):\n{result.summary}"
        for i, result in enumerate(results)
    )
    return SummaryPrompts.COMPARATIVE.format(sources=sources)
