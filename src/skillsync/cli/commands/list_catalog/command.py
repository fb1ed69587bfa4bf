# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI entry point listing catalog entries with a match preview."""

from __future__ import annotations

from pathlib import Path

import typer

from ....catalog import open_catalog_source
from ....config import DEFAULT_TIMEOUT_SECONDS, MatchPolicy
from ....errors import SkillSyncError
from ....inspector import ProjectInspector
from ....matcher import SkillMatcher
from ...core.shared import CLIError, build_cli_logger, unexpected_failure
from ...typer_ext import create_typer
from ..sync.models import (
    CATALOG_ORIGIN_OPTION,
    DEBUG_OPTION,
    EMOJI_OPTION,
    MATCH_POLICY_OPTION,
    ROOT_OPTION,
    TIMEOUT_OPTION,
    SyncCLIOptions,
)
from .rendering import render_catalog

list_catalog_app = create_typer(
    name="list-catalog",
    help_text="List catalog entries and preview which would be active for a project.",
    invoke_without_command=True,
)


@list_catalog_app.callback(invoke_without_command=True)
def main(
    catalog_origin: CATALOG_ORIGIN_OPTION = None,
    project_root: ROOT_OPTION = Path("."),
    match_policy: MATCH_POLICY_OPTION = MatchPolicy.ANY,
    timeout: TIMEOUT_OPTION = DEFAULT_TIMEOUT_SECONDS,
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """List identifiers, tiers and triggers of the catalog.

    Raises:
        typer.Exit: ``0`` on success, ``1`` when the origin is unreachable or invalid.
    """

    logger = build_cli_logger(emoji=emoji, debug=debug)
    options = SyncCLIOptions(
        catalog_origin=catalog_origin,
        project_root=project_root,
        assume_yes=True,
        match_policy=match_policy,
        timeout=timeout,
    )
    try:
        config = options.to_config()
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    try:
        with open_catalog_source(config.catalog_origin, timeout=config.timeout) as source:
            entries = source.list_entries()
        fingerprint = ProjectInspector().inspect(config.project_root)
        match = SkillMatcher(policy=config.match_policy).match(fingerprint, entries)
    except SkillSyncError as exc:
        logger.fail(f"Cannot list catalog: {type(exc).__name__}: {exc}")
        raise typer.Exit(code=1) from exc
    except Exception as exc:
        raise unexpected_failure(logger, exc, context="Cannot list catalog") from exc

    render_catalog(entries, match, origin=config.catalog_origin, logger=logger)
    for warning in (*fingerprint.warnings, *match.warnings):
        logger.warn(warning)
    raise typer.Exit(code=0)


__all__ = ["list_catalog_app"]
