"""crxforge CLI: Typer-based command-line interface.

Provides the ``crxforge`` command with subcommands for publishing
components, inspecting the ledger and running the individual pipeline
steps on already packed artifacts.

All output uses Rich for formatted terminal display.
"""
