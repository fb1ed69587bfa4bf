# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI entry point synchronizing a skill catalog into a project."""

from __future__ import annotations

from pathlib import Path

import typer

from ....catalog import open_catalog_source
from ....config import DEFAULT_TIMEOUT_SECONDS, MatchPolicy, SyncConfig
from ....pipeline import SyncPipeline
from ...core.shared import CLIError, build_cli_logger, unexpected_failure
from ...typer_ext import create_typer
from .models import (
    CATALOG_ORIGIN_OPTION,
    DEBUG_OPTION,
    EMOJI_OPTION,
    MATCH_POLICY_OPTION,
    PROJECT_NAME_OPTION,
    PURPOSE_OPTION,
    ROOT_OPTION,
    STRICT_TEMPLATES_OPTION,
    TIMEOUT_OPTION,
    YES_OPTION,
    SyncCLIOptions,
)
from .services import confirm_plan, render_plan, render_report

sync_app = create_typer(
    name="sync",
    help_text="Install the catalog and regenerate AGENTS.md and skills/README.md.",
    invoke_without_command=True,
)


@sync_app.callback(invoke_without_command=True)
def main(
    catalog_origin: CATALOG_ORIGIN_OPTION = None,
    project_root: ROOT_OPTION = Path("."),
    assume_yes: YES_OPTION = False,
    match_policy: MATCH_POLICY_OPTION = MatchPolicy.ANY,
    project_name: PROJECT_NAME_OPTION = None,
    purpose: PURPOSE_OPTION = None,
    timeout: TIMEOUT_OPTION = DEFAULT_TIMEOUT_SECONDS,
    strict_templates: STRICT_TEMPLATES_OPTION = False,
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Synchronize the skill catalog into the project.

    Raises:
        typer.Exit: Always raised; ``0`` when verified cleanly, ``2`` when
            findings were reported, ``1`` on failure or when aborted.
    """

    options = SyncCLIOptions(
        catalog_origin=catalog_origin,
        project_root=project_root,
        assume_yes=assume_yes,
        match_policy=match_policy,
        timeout=timeout,
        project_name=project_name,
        purpose=purpose,
        strict_templates=strict_templates,
        emoji=emoji,
        debug=debug,
    )
    logger = build_cli_logger(emoji=options.emoji, debug=options.debug)
    try:
        config = _load_config(options)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    logger.debug(f"sync origin={config.catalog_origin} root={config.project_root} policy={config.match_policy.value}")
    source = open_catalog_source(config.catalog_origin, timeout=config.timeout)
    pipeline = SyncPipeline(config, source, confirm=lambda plan: confirm_plan(plan, logger=logger))
    try:
        report = pipeline.run()
    except (typer.Abort, typer.Exit):
        raise
    except Exception as exc:
        raise unexpected_failure(logger, exc, context="Sync failed") from exc
    if config.assume_yes and report.plan is not None:
        render_plan(report.plan, logger=logger)
    logger.debug(f"sync history={'->'.join(state.value for state in report.history)}")
    render_report(report, root=config.project_root, logger=logger)
    raise typer.Exit(code=report.exit_code)


def _load_config(options: SyncCLIOptions) -> SyncConfig:
    config = options.to_config()
    if not config.project_root.is_dir():
        raise CLIError(f"project root '{config.project_root}' is not a directory")
    return config


__all__ = ["sync_app"]
