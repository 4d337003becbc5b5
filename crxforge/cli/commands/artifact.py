"""Commands operating on already packed ``.crx`` files.

``fetch-previous``, ``generate-patches``, ``upload`` and ``update-db`` are
the individual steps of ``publish``, for release jobs that pack artifacts
by other means.
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.markup import escape

from crxforge.cli._context import build_orchestrator, configure_logging, console, load_config

logger = logging.getLogger(__name__)

_CRX_FILES = typer.Argument(..., exists=True, dir_okay=False, help="Packed .crx files.")
_CRX_FILE = typer.Argument(..., exists=True, dir_okay=False, help="A packed .crx file.")
_COMPONENT_ID = typer.Option(
    None, "--id", help="Component id; derived from the manifest key when omitted."
)
_ENDPOINT = typer.Option("", "--endpoint", "-e", help="DynamoDB endpoint to connect to.")
_REGION = typer.Option(None, "--region", "-r", help="The AWS region to use (default us-west-2).")


def _failed(action: str, crx_file: Path, exc: Exception) -> None:
    logger.error("%s %s failed: %s", action, crx_file, exc)
    console.print(f"[bold red]{action} {crx_file} failed:[/bold red] {escape(str(exc))}")


def fetch_previous_cmd(
    crx_file: Path = _CRX_FILE,
    component_id: str = _COMPONENT_ID,
    count: int = typer.Option(None, "--count", "-n", help="Number of previous versions."),
) -> None:
    """Download the previous-version window for a packed artifact."""
    config = load_config()
    if count is not None:
        config = config.model_copy(update={"previous_versions": count})
    configure_logging(config.log_level)
    paths = build_orchestrator(config).fetch_previous_versions(crx_file, component_id)
    console.print(f"[green]Fetched {len(paths)} previous versions.[/green]")


def generate_patches_cmd(
    crx_file: Path = _CRX_FILE,
    component_id: str = _COMPONENT_ID,
) -> None:
    """Diff the fetched previous versions against a packed artifact."""
    config = load_config()
    configure_logging(config.log_level)
    manifest = build_orchestrator(config).generate_patches(crx_file, component_id)
    for name, entry in manifest.items():
        console.print(f"  {name}: {entry.diff_size} bytes")
    console.print(f"[green]Generated {len(manifest)} patches.[/green]")


def upload_cmd(
    crx_files: list[Path] = _CRX_FILES,
    component_id: str = _COMPONENT_ID,
) -> None:
    """Upload packed artifacts and their patches, then move the latest tag."""
    config = load_config()
    configure_logging(config.log_level)
    orchestrator = build_orchestrator(config)
    failed = 0
    for crx_file in crx_files:
        try:
            key = orchestrator.upload_crx(crx_file, component_id)
        except Exception as exc:
            _failed("Uploading", crx_file, exc)
            failed += 1
            continue
        console.print(f"Uploaded {crx_file} to [cyan]{key}[/cyan]")
    if failed:
        raise typer.Exit(code=1)


def update_db_cmd(
    crx_files: list[Path] = _CRX_FILES,
    component_id: str = _COMPONENT_ID,
    content_hash: str = typer.Option(None, "--content-hash", help="Change-detection hash to store."),
    endpoint: str = _ENDPOINT,
    region: str = _REGION,
) -> None:
    """Record packed artifacts and their patches in the ledger."""
    config = load_config(endpoint=endpoint, region=region)
    configure_logging(config.log_level)
    orchestrator = build_orchestrator(config)
    orchestrator.ledger.ensure_table()
    failed = 0
    for crx_file in crx_files:
        try:
            record = orchestrator.update_db_for_crx(crx_file, component_id, content_hash)
        except Exception as exc:
            _failed("Updating DB for", crx_file, exc)
            failed += 1
            continue
        console.print(
            f"Updated DB for {crx_file}, ID: {record.identity}, "
            f"hash: {record.sha256}, name: {record.title}"
        )
    if failed:
        raise typer.Exit(code=1)
