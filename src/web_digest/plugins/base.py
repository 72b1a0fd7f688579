"""
Content analysis plugins.

A plugin receives the extracted page text and metadata after summarization
and contributes an analysis payload and/or tags to the result. Plugins are
looked up by name in a PluginRegistry.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol, runtime_checkable

from web_digest.core.exceptions import ErrorCode, validation_error
from web_digest.core.models import PageMetadata
from web_digest.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class PluginResult:
    """Output of one plugin run."""

    analysis: dict[str, Any] | None = None
    tags: list[str] | None = None


@runtime_checkable
class PluginProcessor(Protocol):
    """A named content analyzer."""

    name: str
    description: str

    async def process(self, content: str, metadata: PageMetadata) -> PluginResult:
        ...


@dataclass
class PluginReport:
    """Merged output of several plugins for one page."""

    analysis: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)


class PluginRegistry:
    """
    Name-to-plugin lookup.

    Example:
        >>> registry = PluginRegistry([KeywordsPlugin()])
        >>> plugins = registry.resolve(["keywords"])
    """

    def __init__(self, plugins: Iterable[PluginProcessor] = ()) -> None:
        self._plugins: dict[str, PluginProcessor] = {}
        for plugin in plugins:
            self.register(plugin)

    def register(self, plugin: PluginProcessor) -> None:
        """Add a plugin, replacing any plugin with the same name."""
        self._plugins[plugin.name.lower()] = plugin

    def get(self, name: str) -> PluginProcessor:
        """
        Look up one plugin.

        Raises:
            WebDigestError: VALIDATION error (UNKNOWN_PLUGIN)
        """
        plugin = self._plugins.get(name.lower())
        if plugin is None:
            raise validation_error(
                f"Unknown plugin: {name}",
                code=ErrorCode.UNKNOWN_PLUGIN,
                plugin=name,
                available=self.names,
            )
        return plugin

    def resolve(self, names: Iterable[str]) -> list[PluginProcessor]:
        """Look up several plugins, failing on the first unknown name."""
        return [self.get(name) for name in names]

    @property
    def names(self) -> list[str]:
        return sorted(self._plugins)

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)


async def run_plugins(
    plugins: Iterable[PluginProcessor],
    content: str,
    metadata: PageMetadata,
) -> PluginReport:
    """
    Run plugins in order and merge their output.

    A failing plugin does not affect the others: its error is recorded as
    `analysis[name] = {"error": message}`.
    """
    report = PluginReport()

    for plugin in plugins:
        try:
            result = await plugin.process(content, metadata)
        except Exception as e:
            logger.warning(f"Plugin {plugin.name} failed: {e}")
            report.analysis[plugin.name] = {"error": str(e)}
            continue

        if result.analysis is not None:
            report.analysis[plugin.name] = result.analysis
        for tag in result.tags or []:
            if tag not in report.tags:
                report.tags.append(tag)

    return report
