# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Option aliases and input models shared by the skillsync commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from ....config import MatchPolicy, SyncConfig, resolve_catalog_origin
from ...core.shared import CLIError

CATALOG_ORIGIN_OPTION = Annotated[
    str | None,
    typer.Option(
        "--catalog-origin",
        help="Catalog directory, local .zip, or http(s) archive URL. Defaults to $CATALOG_ORIGIN or the upstream catalog.",
    ),
]
ROOT_OPTION = Annotated[
    Path,
    typer.Option("--project-root", "-r", help="Target project root.", file_okay=False),
]
YES_OPTION = Annotated[
    bool,
    typer.Option("--yes", "-y", help="Skip the confirmation prompt."),
]
MATCH_POLICY_OPTION = Annotated[
    MatchPolicy,
    typer.Option("--match-policy", case_sensitive=False, help="Select entries matching any or all declared tags."),
]
PROJECT_NAME_OPTION = Annotated[
    str | None,
    typer.Option("--project-name", help="Project name written to AGENTS.md."),
]
PURPOSE_OPTION = Annotated[
    str | None,
    typer.Option("--purpose", help="One-line project purpose written to AGENTS.md."),
]
TIMEOUT_OPTION = Annotated[
    float,
    typer.Option("--timeout", min=0.1, help="Archive download timeout in seconds."),
]
STRICT_TEMPLATES_OPTION = Annotated[
    bool,
    typer.Option("--strict-templates", help="Treat unknown template tokens as errors."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
DEBUG_OPTION = Annotated[
    bool,
    typer.Option("--debug", help="Print debug traces from the sync pipeline."),
]


@dataclass(slots=True)
class SyncCLIOptions:
    """Raw CLI inputs before they are validated into a :class:`SyncConfig`."""

    catalog_origin: str | None
    project_root: Path
    assume_yes: bool
    match_policy: MatchPolicy
    timeout: float
    project_name: str | None = None
    purpose: str | None = None
    strict_templates: bool = False
    emoji: bool = True
    debug: bool = False

    def to_config(self) -> SyncConfig:
        """Return the validated run configuration.

        Returns:
            SyncConfig: Configuration with the catalog origin resolved.

        Raises:
            CLIError: If an option value is rejected by validation.
        """

        try:
            return SyncConfig(
                catalog_origin=resolve_catalog_origin(self.catalog_origin),
                project_root=self.project_root.expanduser().resolve(),
                assume_yes=self.assume_yes,
                timeout=self.timeout,
                match_policy=self.match_policy,
                project_name=self.project_name,
                purpose=self.purpose,
                strict_templates=self.strict_templates,
            )
        except ValidationError as exc:
            raise CLIError(f"invalid options: {exc}") from exc


__all__ = [
    "CATALOG_ORIGIN_OPTION",
    "DEBUG_OPTION",
    "EMOJI_OPTION",
    "MATCH_POLICY_OPTION",
    "PROJECT_NAME_OPTION",
    "PURPOSE_OPTION",
    "ROOT_OPTION",
    "STRICT_TEMPLATES_OPTION",
    "SyncCLIOptions",
    "TIMEOUT_OPTION",
    "YES_OPTION",
]
