# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for a single skillsync run."""

from __future__ import annotations

import os
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CATALOG_ORIGIN: Final[str] = "https://github.com/gpolanco/skills-as-context/archive/refs/heads/main.zip"
CATALOG_ORIGIN_ENV: Final[str] = "CATALOG_ORIGIN"
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0

SKILLS_DIR_NAME: Final[str] = "skills"
ORCHESTRATION_FILENAME: Final[str] = "AGENTS.md"
CATALOG_LISTING_FILENAME: Final[str] = "README.md"


class MatchPolicy(str, Enum):
    """Enumerate how multi-tag trigger declarations select an entry."""

    ANY = "any"
    ALL = "all"


class SyncConfig(BaseModel):
    """Explicit settings threaded through every pipeline phase."""

    model_config = ConfigDict(validate_assignment=True, frozen=False)

    catalog_origin: str = DEFAULT_CATALOG_ORIGIN
    project_root: Path = Field(default_factory=Path.cwd)
    assume_yes: bool = False
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    match_policy: MatchPolicy = MatchPolicy.ANY
    project_name: str | None = None
    purpose: str | None = None
    strict_templates: bool = False

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be positive")
        return value

    @field_validator("project_name", "purpose")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None

    @property
    def skills_dir(self) -> Path:
        """Return the directory receiving copied catalog entries."""

        return self.project_root / SKILLS_DIR_NAME

    @property
    def orchestration_path(self) -> Path:
        """Return the path of the rendered ``AGENTS.md`` file."""

        return self.project_root / ORCHESTRATION_FILENAME

    @property
    def listing_path(self) -> Path:
        """Return the path of the rendered ``skills/README.md`` file."""

        return self.skills_dir / CATALOG_LISTING_FILENAME


def resolve_catalog_origin(explicit: str | None, environ: Mapping[str, str] | None = None) -> str:
    """Return the catalog origin honouring CLI, environment, then defaults.

    Args:
        explicit: Origin supplied on the command line, if any.
        environ: Environment mapping consulted for ``CATALOG_ORIGIN``.

    Returns:
        str: Local path or URL pointing at the catalog.
    """

    if explicit and explicit.strip():
        return explicit.strip()
    env = os.environ if environ is None else environ
    candidate = env.get(CATALOG_ORIGIN_ENV, "").strip()
    return candidate or DEFAULT_CATALOG_ORIGIN


__all__ = [
    "CATALOG_LISTING_FILENAME",
    "CATALOG_ORIGIN_ENV",
    "DEFAULT_CATALOG_ORIGIN",
    "DEFAULT_TIMEOUT_SECONDS",
    "MatchPolicy",
    "ORCHESTRATION_FILENAME",
    "SKILLS_DIR_NAME",
    "SyncConfig",
    "resolve_catalog_origin",
]
