"""Network commands: ``fetch-text`` and ``download-extension``."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markup import escape

from crxforge.cli._context import configure_logging, console, load_config
from crxforge.core.errors import TransientNetworkError
from crxforge.core.fetch import HttpFetcher, download_extension_from_cws


def _fetcher() -> HttpFetcher:
    config = load_config()
    configure_logging(config.log_level)
    return HttpFetcher(
        max_attempts=config.fetch_max_attempts,
        delay_seconds=config.fetch_delay_seconds,
    )


def fetch_text_cmd(
    url: str = typer.Argument(..., help="URL of a text resource (e.g. a filter list)."),
    output: Path = typer.Option(None, "--output", "-o", help="Write the body here instead of stdout."),
) -> None:
    """Fetch a text resource, retrying transient failures."""
    try:
        text = _fetcher().fetch_text(url)
    except TransientNetworkError as exc:
        console.print(f"[bold red]Fetch failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    if output is None:
        console.print(text, markup=False, highlight=False, end="")
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
        console.print(f"Wrote {len(text)} characters to {output}")


def download_extension_cmd(
    component_id: str = typer.Argument(..., help="Chrome Web Store extension id."),
    chromium_version: str = typer.Argument(..., help="Chromium version to request the build for."),
    output: Path = typer.Option(..., "--output", "-o", help="Destination .crx file."),
) -> None:
    """Download an extension from the Chrome Web Store."""
    try:
        path = download_extension_from_cws(component_id, chromium_version, output, _fetcher())
    except TransientNetworkError as exc:
        console.print(f"[bold red]Download failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    console.print(f"Downloaded {component_id} to [cyan]{path}[/cyan]")
