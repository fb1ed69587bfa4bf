# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Rendering helpers for the ``list-catalog`` command."""

from __future__ import annotations

from collections.abc import Sequence

from rich import box
from rich.table import Table

from ....catalog.models import CatalogEntry
from ....matcher import MatchResult, trigger_tags_for
from ...core.shared import CLILogger


def build_catalog_table(entries: Sequence[CatalogEntry], match: MatchResult) -> Table:
    """Return a table describing each entry and its match preview.

    Args:
        entries: Catalog entries sorted by identifier.
        match: Match preview for the inspected project.

    Returns:
        Table: Rich table with identifier, tier, tags, trigger and preview columns.
    """

    table = Table(box=box.SIMPLE, show_edge=False, pad_edge=False)
    table.add_column("Skill", style="bold", no_wrap=True)
    table.add_column("Tier", no_wrap=True)
    table.add_column("Tags")
    table.add_column("Trigger")
    table.add_column("Preview", no_wrap=True)
    for entry in entries:
        decision = match.decisions.get(entry.identifier)
        preview = "active" if decision is not None and decision.selected else "available"
        table.add_row(
            entry.identifier,
            entry.tier.value,
            ", ".join(trigger_tags_for(entry)) or "-",
            entry.trigger or "-",
            preview,
        )
    return table


def render_catalog(entries: Sequence[CatalogEntry], match: MatchResult, *, origin: str, logger: CLILogger) -> None:
    """Print the catalog listing followed by preview warnings.

    Args:
        entries: Catalog entries sorted by identifier.
        match: Match preview for the inspected project.
        origin: Catalog origin shown in the header.
        logger: CLI logger used for output.
    """

    logger.section(f"Catalog: {origin}")
    if not entries:
        logger.warn("The catalog contains no entries.")
        return
    logger.console.print(build_catalog_table(entries, match))
    logger.info(f"{len(match.selected_ids)} of {len(entries)} entries would be active.")


__all__ = ["build_catalog_table", "render_catalog"]
