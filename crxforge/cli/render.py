"""Rich rendering of publish results and reconcile findings.

Color scheme
------------
- green  : RECORDED
- dim    : NO_CHANGE
- red    : FAILED
- yellow : anything else (a run that stopped part way)
"""

from __future__ import annotations

from rich.table import Table

from crxforge.core.reconcile import ReconcileFinding
from crxforge.models.publish import PublishResult, PublishState

_STATE_LABELS: dict[PublishState, str] = {
    PublishState.RECORDED: "[green]PUBLISHED[/green]",
    PublishState.NO_CHANGE: "[dim]NO CHANGE[/dim]",
    PublishState.FAILED: "[bold red]FAILED[/bold red]",
}


def render_results(results: list[PublishResult]) -> Table:
    """Build a table with one row per component."""
    table = Table(title="Publish Results")
    table.add_column("Component", style="cyan")
    table.add_column("ID")
    table.add_column("State", justify="center")
    table.add_column("Version", style="green")
    table.add_column("Patches", justify="right")
    table.add_column("Detail", overflow="fold")

    for r in results:
        label = _STATE_LABELS.get(r.state, f"[yellow]{r.state.value.upper()}[/yellow]")
        detail = r.error or r.storage_key
        table.add_row(
            r.name,
            r.identity,
            label,
            r.version or "-",
            str(len(r.patches)),
            detail,
        )
    return table


def render_findings(findings: list[ReconcileFinding]) -> Table:
    table = Table(title="Storage / Ledger Reconciliation")
    table.add_column("ID", style="cyan")
    table.add_column("Ledger Version", style="green")
    table.add_column("Status", justify="center")
    table.add_column("Problems", overflow="fold")

    for f in findings:
        status = "[green]OK[/green]" if f.consistent else "[bold red]DRIFT[/bold red]"
        table.add_row(f.identity, f.ledger_version or "-", status, "\n".join(f.problems))
    return table
