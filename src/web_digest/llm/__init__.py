"""
LLM module for Web Digest.

Provides the model client capability and summarization prompts.
"""

from web_digest.llm.client import (
    LanguageModelClient,
    AnthropicClient,
    create_client,
)
from web_digest.llm.prompts import (
    PromptTemplate,
    SummaryPrompts,
    LENGTH_DESCRIPTIONS,
    FORMAT_INSTRUCTIONS,
    build_direct_prompt,
    build_chunk_prompt,
    build_synthesis_prompt,
    build_comparative_prompt,
)

__all__ = [
    # Client
    "LanguageModelClient",
    "AnthropicClient",
    "create_client",
    # Prompts
    "PromptTemplate",
    "SummaryPrompts",
    "LENGTH_DESCRIPTIONS",
    "FORMAT_INSTRUCTIONS",
    "build_direct_prompt",
    "build_chunk_prompt",
    "build_synthesis_prompt",
    "build_comparative_prompt",
]
