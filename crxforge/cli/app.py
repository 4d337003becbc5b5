"""Main Typer application: imports and registers all CLI commands.

Entry point: ``crxforge`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import typer

from crxforge.cli.commands.artifact import (
    fetch_previous_cmd,
    generate_patches_cmd,
    update_db_cmd,
    upload_cmd,
)
from crxforge.cli.commands.fetch import download_extension_cmd, fetch_text_cmd
from crxforge.cli.commands.ledger import (
    component_id_cmd,
    ensure_table_cmd,
    next_version_cmd,
    reconcile_cmd,
)
from crxforge.cli.commands.publish import publish_cmd

app = typer.Typer(
    name="crxforge",
    help="crxforge: version, patch and publish CRX components.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="publish", help="Build, pack and publish components from a work file.")(publish_cmd)
app.command(name="next-version", help="Show the next version for a component.")(next_version_cmd)
app.command(name="fetch-previous", help="Download earlier releases of a packed component.")(fetch_previous_cmd)
app.command(name="generate-patches", help="Generate delta patches for a packed component.")(generate_patches_cmd)
app.command(name="upload", help="Upload packed components and their patches.")(upload_cmd)
app.command(name="update-db", help="Record packed components in the ledger.")(update_db_cmd)
app.command(name="ensure-table", help="Create the ledger table if missing.")(ensure_table_cmd)
app.command(name="reconcile", help="Audit storage tags against the ledger.")(reconcile_cmd)
app.command(name="component-id", help="Derive a component id from a public key.")(component_id_cmd)
app.command(name="fetch-text", help="Fetch a text resource with retries.")(fetch_text_cmd)
app.command(name="download-extension", help="Download an extension from the Chrome Web Store.")(download_extension_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
