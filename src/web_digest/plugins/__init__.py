"""
Plugins module for Web Digest.

Content analyzers run on each page after summarization.
"""

from web_digest.plugins.base import (
    PluginProcessor,
    PluginRegistry,
    PluginReport,
    PluginResult,
    run_plugins,
)
from web_digest.plugins.keywords import KeywordsPlugin
from web_digest.plugins.readability import ReadabilityPlugin
from web_digest.plugins.sentiment import SentimentPlugin


def default_registry() -> PluginRegistry:
    """Registry holding the built-in plugins."""
    return PluginRegistry([KeywordsPlugin(), ReadabilityPlugin(), SentimentPlugin()])


__all__ = [
    "PluginProcessor",
    "PluginRegistry",
    "PluginReport",
    "PluginResult",
    "run_plugins",
    "default_registry",
    "KeywordsPlugin",
    "ReadabilityPlugin",
    "SentimentPlugin",
]
