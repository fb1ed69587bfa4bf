# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Presentation helpers for the ``sync`` command."""

from __future__ import annotations

from pathlib import Path

import typer
from rich import box
from rich.table import Table

from ....config import ORCHESTRATION_FILENAME
from ....findings import FindingSeverity, count_by_severity
from ....matcher import MatchResult
from ....pipeline import SyncPlan, SyncReport, SyncState
from ...core.shared import CLILogger


def build_match_table(match: MatchResult, *, title: str | None = None) -> Table:
    """Return a table listing every catalog entry and its selection decision.

    Args:
        match: Selection decisions in catalog order.
        title: Optional table title.

    Returns:
        Table: Rich table with ``Skill``, ``Status`` and ``Reason`` columns.
    """

    table = Table(title=title, box=box.SIMPLE, show_edge=False, pad_edge=False)
    table.add_column("Skill", style="bold", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Reason")
    for identifier, decision in match.decisions.items():
        status = "[green]Active[/green]" if decision.selected else "[dim]Available[/dim]"
        table.add_row(identifier, status, decision.justification)
    return table


def render_plan(plan: SyncPlan, *, logger: CLILogger) -> None:
    """Print the selection plan shown before confirmation.

    Args:
        plan: Discovery and matching outcome.
        logger: CLI logger used for output.
    """

    fingerprint = plan.fingerprint
    logger.section("Sync plan")
    logger.echo(f"Catalog: {plan.catalog_origin}")
    logger.echo(f"Project: {plan.project_root}")
    logger.echo(f"Detected stack: {fingerprint.stack_summary() or 'none detected'}")
    logger.console.print(build_match_table(plan.match))
    selected = len(plan.match.selected_ids)
    logger.echo(f"{selected} of {len(plan.match.entries)} entries will be active.")
    if plan.added:
        logger.echo(f"Newly active: {', '.join(plan.added)}")
    if plan.removed:
        logger.echo(f"No longer active: {', '.join(plan.removed)}")


def confirm_plan(plan: SyncPlan, *, logger: CLILogger) -> bool:
    """Render ``plan`` and ask the user whether to proceed."""

    render_plan(plan, logger=logger)
    return typer.confirm("Write skills and orchestration files?", default=False)


def render_report(report: SyncReport, *, root: Path, logger: CLILogger) -> None:
    """Render the terminal outcome of a sync run.

    Args:
        report: Pipeline report.
        root: Project root used to shorten written paths.
        logger: CLI logger used for output.
    """

    if report.state is SyncState.ABORTED:
        logger.warn("Sync aborted at confirmation; nothing was written.")
        return

    if report.state is SyncState.FAILED:
        phase = report.failed_phase.value if report.failed_phase else "unknown"
        error = report.error
        cause = f"{type(error).__name__}: {error}" if error is not None else "unknown error"
        logger.fail(f"Sync failed during {phase}: {cause}")
        if report.failed_phase is not SyncState.WRITING:
            logger.echo("No files were written.")
        _render_findings(report, logger=logger)
        return

    for result in report.written:
        action = "created" if result.created else ("updated" if result.changed else "unchanged")
        logger.echo(f"{action}: {_display(result.target_path, root)}")
    if report.installed:
        logger.echo(f"installed skills: {', '.join(report.installed)}")

    _render_findings(report, logger=logger)
    match = report.match
    active = len(match.selected_ids) if match else 0
    total = len(match.entries) if match else 0
    if report.findings:
        counts = count_by_severity(report.findings)
        summary = logger.fail if report.has_errors else logger.warn
        summary(
            f"Sync completed with {counts[FindingSeverity.ERROR]} error(s) and "
            f"{counts[FindingSeverity.WARNING]} warning(s); {active} of {total} skills active.",
        )
    else:
        logger.ok(f"Sync verified; {active} of {total} skills active.")
    logger.info(f"Next: ask your AI assistant to read {ORCHESTRATION_FILENAME} and follow its active skills.")


def _render_findings(report: SyncReport, *, logger: CLILogger) -> None:
    for finding in report.findings:
        if finding.severity is FindingSeverity.ERROR:
            logger.fail(finding.render())
        else:
            logger.warn(finding.render())


def _display(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


__all__ = ["build_match_table", "confirm_plan", "render_plan", "render_report"]
