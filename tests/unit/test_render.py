"""Unit tests for Rich rendering of results and findings."""

from __future__ import annotations

from rich.console import Console

from crxforge.cli.render import render_findings, render_results
from crxforge.core.reconcile import ReconcileFinding
from crxforge.models.publish import PublishResult, PublishState


def _text(renderable) -> str:
    console = Console(width=200, record=True)
    console.print(renderable)
    return console.export_text()


class TestRenderResults:

    def test_one_row_per_component(self):
        results = [
            PublishResult(name="a", state=PublishState.RECORDED, version="1.0.1", storage_key="k"),
            PublishResult(name="b", state=PublishState.NO_CHANGE),
            PublishResult(name="c", state=PublishState.FAILED, error="DiffError: boom"),
        ]
        table = render_results(results)
        assert table.row_count == 3
        text = _text(table)
        assert "PUBLISHED" in text
        assert "NO CHANGE" in text
        assert "DiffError: boom" in text

    def test_unfinished_state_shown_verbatim(self):
        table = render_results([PublishResult(name="a", state=PublishState.UPLOADED)])
        assert "UPLOADED" in _text(table)


class TestRenderFindings:

    def test_drift_and_ok(self):
        findings = [
            ReconcileFinding(identity="a" * 32, ledger_version="1.0.0"),
            ReconcileFinding(identity="b" * 32, problems=["no ledger record"]),
        ]
        text = _text(render_findings(findings))
        assert "OK" in text
        assert "DRIFT" in text
        assert "no ledger record" in text
