"""
CLI module for Web Digest.

Provides command-line interface using Typer:
- summarize: Summarize one page, optionally following its links
- batch: Summarize a list of pages
- plugins: List content analysis plugins
- config: Configuration management
"""

from web_digest.cli.main import app

__all__ = ["app"]
