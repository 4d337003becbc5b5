"""Ledger inspection commands: ``next-version``, ``ensure-table``,
``reconcile`` and ``component-id``."""

from __future__ import annotations

import typer

from crxforge.backends.dynamodb import DynamoDBStore
from crxforge.backends.s3 import S3ObjectStore
from crxforge.cli._context import configure_logging, console, load_config
from crxforge.cli.render import render_findings
from crxforge.config import PublishConfig
from crxforge.core.hasher import component_id_from_public_key
from crxforge.core.reconcile import reconcile
from crxforge.core.version_ledger import VersionLedger

_ENDPOINT = typer.Option("", "--endpoint", "-e", help="DynamoDB endpoint to connect to.")
_REGION = typer.Option(None, "--region", "-r", help="The AWS region to use (default us-west-2).")


def _ledger(endpoint: str, region: str) -> tuple[VersionLedger, PublishConfig]:
    config = load_config(endpoint=endpoint, region=region)
    configure_logging(config.log_level)
    return VersionLedger(DynamoDBStore(config), config.table_name), config


def next_version_cmd(
    component_id: str = typer.Argument(..., help="Component id."),
    content_hash: str = typer.Argument(..., help="Content hash of the new build."),
    endpoint: str = _ENDPOINT,
    region: str = _REGION,
) -> None:
    """Print the version the next publish would use, or 'unchanged'."""
    ledger, _ = _ledger(endpoint, region)
    version = ledger.get_next_version(component_id, content_hash)
    console.print(str(version) if version is not None else "unchanged")


def ensure_table_cmd(endpoint: str = _ENDPOINT, region: str = _REGION) -> None:
    """Create the ledger table if it does not exist."""
    ledger, _ = _ledger(endpoint, region)
    created = ledger.ensure_table()
    console.print(
        f"[green]Created table {ledger.table_name}.[/green]"
        if created
        else f"Table {ledger.table_name} already exists."
    )


def reconcile_cmd(
    component_ids: list[str] = typer.Argument(..., help="Component ids to audit."),
    endpoint: str = _ENDPOINT,
    region: str = _REGION,
) -> None:
    """Report drift between storage tags and ledger records (read-only)."""
    ledger, config = _ledger(endpoint, region)
    findings = reconcile(ledger, S3ObjectStore(config), component_ids)
    console.print(render_findings(findings))
    if not all(f.consistent for f in findings):
        raise typer.Exit(code=1)


def component_id_cmd(
    public_key: str = typer.Argument(..., help="Base64 encoded public key."),
) -> None:
    """Print the component id derived from a public key."""
    console.print(component_id_from_public_key(public_key))
