"""``crxforge publish WORKFILE``: build and publish a set of components.

WORKFILE is a JSON list of component jobs, e.g.::

    [
      {
        "name": "ad-block-updater-default",
        "private_key_file": "keys/ad-block-updater-default.pem",
        "resource_dir": "build/ad-block-updater/default",
        "manifest_template": "manifests/ad-block-default-manifest.json"
      }
    ]

Relative paths are resolved against the current directory.
"""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import TypeAdapter, ValidationError
from rich.markup import escape

from crxforge.cli._context import (
    build_orchestrator,
    configure_logging,
    console,
    load_config,
)
from crxforge.cli.render import render_results
from crxforge.core.errors import ConfigurationError
from crxforge.models.publish import ComponentJob

_JOBS = TypeAdapter(list[ComponentJob])


def load_jobs(work_file: Path) -> list[ComponentJob]:
    """Parse and validate a work file."""
    return _JOBS.validate_json(Path(work_file).read_bytes())


def publish_cmd(
    work_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON list of component jobs."),
    binary: str = typer.Option(
        None, "--binary", "-b", help="Path to the Chromium based executable used to generate CRX files."
    ),
    publisher_proof_key: Path = typer.Option(
        None, "--publisher-proof-key", "-p", help="File containing the private key for the publisher proof."
    ),
    endpoint: str = typer.Option(
        "", "--endpoint", "-e", help="DynamoDB endpoint to connect to (e.g. http://localhost:8000)."
    ),
    region: str = typer.Option(None, "--region", "-r", help="The AWS region to use (default us-west-2)."),
) -> None:
    """Publish every component in WORKFILE; exits non-zero if any failed."""
    config = load_config(endpoint=endpoint, region=region)
    configure_logging(config.log_level)

    try:
        jobs = load_jobs(work_file)
    except ValidationError as exc:
        console.print(f"[bold red]Invalid work file:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    try:
        orchestrator = build_orchestrator(config, binary, publisher_proof_key, needs_packer=True)
        results = orchestrator.run(jobs)
    except ConfigurationError as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    console.print(render_results(results))
    if not all(r.ok for r in results):
        raise typer.Exit(code=1)
