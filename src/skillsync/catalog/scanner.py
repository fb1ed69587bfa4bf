# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Filesystem scanning utilities for an extracted skill catalog."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from ..config import SKILLS_DIR_NAME
from ..errors import CatalogIntegrityError
from .frontmatter import parse_skill_frontmatter
from .models import PRIMARY_DOCUMENT, CatalogEntry, is_valid_identifier

TEMPLATES_DIR_NAME: Final[str] = "templates"

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CatalogScanner:
    """Scan ``<catalog_root>/skills`` for entry directories."""

    catalog_root: Path

    @property
    def skills_root(self) -> Path:
        """Return the directory holding one sub-directory per entry."""

        return self.catalog_root / SKILLS_DIR_NAME

    @property
    def templates_root(self) -> Path:
        """Return the directory holding canonical templates."""

        return self.catalog_root / TEMPLATES_DIR_NAME

    def entry_directories(self) -> tuple[Path, ...]:
        """Return sorted entry directories that contain a primary document.

        Returns:
            tuple[Path, ...]: Entry directory paths sorted by name.
        """

        if not self.skills_root.is_dir():
            return ()
        paths: list[Path] = []
        for candidate in self.skills_root.iterdir():
            if not candidate.is_dir() or candidate.name.startswith((".", "_")):
                continue
            if not (candidate / PRIMARY_DOCUMENT).is_file():
                logger.debug("skipping %s: no %s", candidate, PRIMARY_DOCUMENT)
                continue
            paths.append(candidate)
        return tuple(sorted(paths, key=lambda path: path.name))

    def resource_paths(self, entry_dir: Path) -> tuple[str, ...]:
        """Return sub-resource paths of ``entry_dir`` relative to it.

        Args:
            entry_dir: Directory of a single catalog entry.

        Returns:
            tuple[str, ...]: POSIX relative paths excluding the primary document.
        """

        resources = [
            path.relative_to(entry_dir).as_posix()
            for path in entry_dir.rglob("*")
            if path.is_file() and path != entry_dir / PRIMARY_DOCUMENT
        ]
        return tuple(sorted(resources))

    def load_entry(self, entry_dir: Path) -> CatalogEntry:
        """Build a :class:`CatalogEntry` from ``entry_dir``.

        Args:
            entry_dir: Directory of a single catalog entry.

        Returns:
            CatalogEntry: Entry metadata derived from the frontmatter.

        Raises:
            CatalogIntegrityError: If the directory name is not a valid identifier
                or the primary document is not UTF-8 or its
                frontmatter is malformed.
        """

        identifier = entry_dir.name
        if not is_valid_identifier(identifier):
            raise CatalogIntegrityError(f"{entry_dir}: '{identifier}' is not a kebab-case identifier")
        primary = entry_dir / PRIMARY_DOCUMENT
        try:
            text = primary.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise CatalogIntegrityError(f"{primary}: not valid UTF-8 ({exc.reason} at byte {exc.start})") from exc
        frontmatter = parse_skill_frontmatter(text, context=str(primary))
        return CatalogEntry(
            identifier=identifier,
            trigger=frontmatter.description,
            resources=self.resource_paths(entry_dir),
            trigger_tags=frontmatter.trigger_tags,
            tier=frontmatter.tier,
            always_include=frontmatter.always_include,
        )

    def entries(self) -> tuple[CatalogEntry, ...]:
        """Return every catalog entry sorted by identifier."""

        return tuple(self.load_entry(path) for path in self.entry_directories())


__all__ = ["CatalogScanner", "TEMPLATES_DIR_NAME"]
