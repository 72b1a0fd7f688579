"""
Main CLI application for Web Digest.

Provides the command-line interface for:
- Summarizing a single page
- Summarizing a batch of pages with optional comparative analysis
- Listing plugins
- Managing configuration
"""

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from web_digest import __version__
from web_digest.cli.output import render_report, render_result, write_output
from web_digest.config import Settings, get_default_config_path, load_config
from web_digest.core.exceptions import WebDigestError, validation_error
from web_digest.core.models import SummaryOptions
from web_digest.pipeline.facade import PipelineFacade
from web_digest.plugins import default_registry
from web_digest.utils.logging import get_logger, setup_logging
from web_digest.utils.metrics import Metrics

app = typer.Typer(
    name="web-digest",
    help="Web Digest - Summarize web pages with a language model",
    add_completion=False,
    no_args_is_help=True,
)
config_app = typer.Typer(help="Configuration management", no_args_is_help=True)
app.add_typer(config_app, name="config")

console = Console()
logger = get_logger(__name__)

# Set by the global callback
_state: dict = {"config_file": None, "verbose": False}


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]Web Digest[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """
    Web Digest - Summarize web pages with a language model.

    Use 'web-digest --help' for command list.
    """
    _state["config_file"] = config_file
    _state["verbose"] = verbose


def _load_settings() -> Settings:
    settings = load_config(_state["config_file"] or get_default_config_path())
    # Console logs share stdout with the rendered output
    setup_logging(settings.logging, level="DEBUG" if _state["verbose"] else "WARNING")
    return settings


def build_pipeline(settings: Settings) -> PipelineFacade:
    """Production pipeline for the given settings."""
    return PipelineFacade.from_settings(settings)


def _build_options(
    settings: Settings,
    length: str,
    format: str,
    plugins: Optional[List[str]],
    retries: Optional[int],
    follow_links: int = 0,
    comparative: bool = False,
    as_json: bool = False,
    metadata: bool = False,
) -> SummaryOptions:
    try:
        return SummaryOptions(
            length=length,
            format=format,
            plugins=plugins or (),
            max_retries=settings.retry.max_retries if retries is None else retries,
            retry_delay=settings.retry.base_delay_seconds,
            follow_links=follow_links,
            comparative=comparative,
            output="json" if as_json else "text",
            include_metadata=metadata,
        )
    except ValidationError as e:
        raise validation_error(
            "Invalid options: "
            + "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
        ) from e


def _fail(error: WebDigestError) -> None:
    console.print(f"[red]Error ({escape(error.code)}):[/red] {escape(error.message)}")
    logger.debug(f"Command failed: {error!r}")
    raise typer.Exit(1)


def _emit(text: str, output: Optional[Path]) -> None:
    if output is None:
        typer.echo(text)
        return
    path = write_output(text, output)
    console.print(f"[green]✓[/green] Output saved to: {escape(str(path))}")


def read_url_file(path: Path) -> list[str]:
    """URLs from a file: one per line, blank lines and # comments ignored."""
    urls = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            urls.append(line)
    return urls


@app.command()
def summarize(
    url: str = typer.Argument(..., help="URL of the page to summarize"),
    length: str = typer.Option("medium", "--length", "-l", help="short, medium or long"),
    format: str = typer.Option("paragraphs", "--format", "-f", help="paragraphs, bullets or json"),
    plugin: Optional[List[str]] = typer.Option(
        None, "--plugin", "-p", help="Analysis plugin to run (repeatable)"
    ),
    retries: Optional[int] = typer.Option(
        None, "--retries", "-r", help="Attempt budget per operation", min=0, max=10
    ),
    follow_links: int = typer.Option(
        0, "--follow-links", help="Also summarize up to N same-site links", min=0, max=20
    ),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
    metadata: bool = typer.Option(False, "--metadata", "-m", help="Include page metadata"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write output to file"),
) -> None:
    """
    Summarize a web page.

    Example:
        web-digest summarize https://example.com --length short --plugin keywords
    """
    try:
        settings = _load_settings()
        options = _build_options(
            settings, length, format, plugin, retries,
            follow_links=follow_links, as_json=as_json, metadata=metadata,
        )
        text = asyncio.run(_summarize_async(settings, url, options))
    except WebDigestError as e:
        _fail(e)
        return

    _emit(text, output)


async def _summarize_async(settings: Settings, url: str, options: SummaryOptions) -> str:
    async with build_pipeline(settings) as pipeline:
        with console.status(f"Summarizing {escape(url)}..."):
            result = await pipeline.summarize_url(url, options)
    logger.debug(Metrics.get().summary())
    return render_result(result, options)


@app.command()
def batch(
    urls: Optional[List[str]] = typer.Argument(None, help="URLs to summarize"),
    file: Optional[Path] = typer.Option(
        None, "--file", "-F", help="File with one URL per line", exists=True, dir_okay=False
    ),
    compare: bool = typer.Option(False, "--compare", help="Add a comparative analysis"),
    length: str = typer.Option("medium", "--length", "-l", help="short, medium or long"),
    format: str = typer.Option("paragraphs", "--format", "-f", help="paragraphs, bullets or json"),
    plugin: Optional[List[str]] = typer.Option(
        None, "--plugin", "-p", help="Analysis plugin to run (repeatable)"
    ),
    retries: Optional[int] = typer.Option(
        None, "--retries", "-r", help="Attempt budget per operation", min=0, max=10
    ),
    as_json: bool = typer.Option(False, "--json", help="Output JSON"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write output to file"),
) -> None:
    """
    Summarize several web pages.

    Example:
        web-digest batch https://a.example https://b.example --compare
    """
    all_urls = list(urls or [])
    if file is not None:
        all_urls.extend(read_url_file(file))

    if not all_urls:
        console.print("[red]Error:[/red] No URLs given. Pass URLs or --file.")
        raise typer.Exit(1)

    try:
        settings = _load_settings()
        options = _build_options(
            settings, length, format, plugin, retries,
            comparative=compare, as_json=as_json,
        )
        text = asyncio.run(_batch_async(settings, all_urls, options))
    except WebDigestError as e:
        _fail(e)
        return

    _emit(text, output)


async def _batch_async(settings: Settings, urls: list[str], options: SummaryOptions) -> str:
    async with build_pipeline(settings) as pipeline:
        with console.status(f"Summarizing {len(urls)} pages..."):
            report = await pipeline.summarize_batch(urls, options)
    logger.debug(Metrics.get().summary())
    return render_report(report, options)


@app.command()
def plugins() -> None:
    """List available analysis plugins."""
    registry = default_registry()

    table = Table(title="Plugins", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Description")

    for name in registry.names:
        table.add_row(name, registry.get(name).description)

    console.print(table)


@config_app.command("show")
def config_show() -> None:
    """Show current configuration."""
    try:
        settings = _load_settings()
    except WebDigestError as e:
        _fail(e)
        return

    console.print(Panel("[bold]Current Configuration[/bold]", border_style="blue"))

    for section, values in settings.model_dump(mode="json").items():
        console.print(f"\n[bold cyan]{section}:[/bold cyan]")
        for key, value in values.items():
            console.print(f"  {key}: [dim]{escape(str(value))}[/dim]")


@config_app.command("init")
def config_init(
    output: Path = typer.Option(
        Path("config.yaml"), "--output", "-o", help="Output path for config file"
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Create a configuration file with the default settings."""
    import yaml

    if output.exists() and not force:
        if not typer.confirm(f"File {output} exists. Overwrite?"):
            raise typer.Exit(0)

    with open(output, "w") as f:
        yaml.dump(Settings().model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)

    console.print(f"[green]✓[/green] Configuration saved to: {escape(str(output))}")


if __name__ == "__main__":
    app()
