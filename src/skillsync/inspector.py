# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Read-only inspection of a target project's stack signals."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from .config import ORCHESTRATION_FILENAME
from .markdown import find_section, iter_table_rows

MANIFEST_FILENAME: Final[str] = "package.json"
EMPTY_VALUE_MARKER: Final[str] = "_(not set)_"
LAYOUT_SINGLE_APP: Final[str] = "single-app"
LAYOUT_MONOREPO: Final[str] = "monorepo"

_MONOREPO_DIRS: Final[tuple[str, ...]] = ("apps", "packages")
_WORKSPACE_FILES: Final[tuple[str, ...]] = ("pnpm-workspace.yaml", "turbo.json", "nx.json", "lerna.json")
_DEPENDENCY_SECTIONS: Final[tuple[str, ...]] = ("dependencies", "devDependencies", "peerDependencies")
_OVERVIEW_LINE_RE: Final[re.Pattern[str]] = re.compile(r"^\s*[-*]\s+\*\*(?P<label>[^*:]+):?\*\*:?\s*(?P<value>.*?)\s*$")
_ROW_ID_RE: Final[re.Pattern[str]] = re.compile(r"^`?(?P<id>[a-z0-9]+(?:-[a-z0-9]+)*)`?$")

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StackSignature:
    """Detection rule mapping dependency names and marker files to a tag."""

    tag: str
    category: str
    packages: tuple[str, ...] = ()
    markers: tuple[str, ...] = ()

    def matches_package(self, name: str) -> bool:
        """Return whether dependency ``name`` signals this tag.

        Entries ending in ``/`` match any package within that scope.
        """

        return any(name.startswith(pkg) if pkg.endswith("/") else name == pkg for pkg in self.packages)


SIGNATURES: Final[tuple[StackSignature, ...]] = (
    StackSignature("nextjs", "framework", ("next",), ("next.config.js", "next.config.mjs", "next.config.ts")),
    StackSignature("react", "framework", ("react", "react-dom")),
    StackSignature("vue", "framework", ("vue", "nuxt"), ("nuxt.config.ts",)),
    StackSignature("svelte", "framework", ("svelte", "@sveltejs/kit"), ("svelte.config.js",)),
    StackSignature("express", "framework", ("express",)),
    StackSignature("typescript", "language", ("typescript",), ("tsconfig.json",)),
    StackSignature(
        "tailwind",
        "styling",
        ("tailwindcss", "@tailwindcss/"),
        ("tailwind.config.js", "tailwind.config.ts", "tailwind.config.mjs"),
    ),
    StackSignature("shadcn", "ui", ("@radix-ui/", "class-variance-authority"), ("components.json",)),
    StackSignature("zod", "validation", ("zod",)),
    StackSignature("react-hook-form", "forms", ("react-hook-form",)),
    StackSignature("supabase", "backend", ("@supabase/supabase-js", "@supabase/ssr"), ("supabase/config.toml",)),
    StackSignature("prisma", "data", ("prisma", "@prisma/client"), ("prisma/schema.prisma",)),
    StackSignature("drizzle", "data", ("drizzle-orm",), ("drizzle.config.ts",)),
    StackSignature("tanstack-query", "data", ("@tanstack/react-query",)),
    StackSignature("vitest", "testing", ("vitest",), ("vitest.config.ts",)),
    StackSignature("jest", "testing", ("jest",), ("jest.config.js", "jest.config.ts")),
    StackSignature("playwright", "testing", ("@playwright/test",), ("playwright.config.ts",)),
)

CATEGORY_BY_TAG: Final[dict[str, str]] = {signature.tag: signature.category for signature in SIGNATURES}


@dataclass(frozen=True, slots=True)
class StackFingerprint:
    """Deterministic summary of the technology signals found in a project."""

    tags: frozenset[str] = frozenset()
    project_name: str | None = None
    purpose: str | None = None
    layout: str = LAYOUT_SINGLE_APP
    dependencies: tuple[tuple[str, str], ...] = ()
    previous_entries: frozenset[str] = frozenset()
    warnings: tuple[str, ...] = field(default=(), compare=False)

    @property
    def is_empty(self) -> bool:
        """Return ``True`` when no technology tag was detected."""

        return not self.tags

    def stack_summary(self) -> str:
        """Return a stable, human-readable summary of detected tags.

        Returns:
            str: Tags grouped by category, e.g. ``framework: nextjs, react; styling: tailwind``.
        """

        grouped: dict[str, list[str]] = {}
        for tag in sorted(self.tags):
            grouped.setdefault(CATEGORY_BY_TAG.get(tag, "other"), []).append(tag)
        return "; ".join(f"{category}: {', '.join(tags)}" for category, tags in sorted(grouped.items()))


@dataclass(frozen=True, slots=True)
class PreviousOrchestration:
    """Values recovered leniently from an existing ``AGENTS.md``."""

    project_name: str | None = None
    purpose: str | None = None
    entries: frozenset[str] = frozenset()


class ProjectInspector:
    """Produce a :class:`StackFingerprint` without executing project code."""

    def __init__(
        self,
        *,
        project_name: str | None = None,
        purpose: str | None = None,
        signatures: tuple[StackSignature, ...] = SIGNATURES,
    ) -> None:
        """Configure explicit overrides and the signature table.

        Args:
            project_name: Name that takes precedence over detected values.
            purpose: One-line purpose that takes precedence over detected values.
            signatures: Detection rules evaluated against the project.
        """

        self._project_name = project_name
        self._purpose = purpose
        self._signatures = signatures

    def inspect(self, project_root: Path) -> StackFingerprint:
        """Return the fingerprint of ``project_root``.

        Args:
            project_root: Directory of the target project.

        Returns:
            StackFingerprint: Detected tags, identity strings and layout.
        """

        warnings: list[str] = []
        manifest = load_manifest(project_root / MANIFEST_FILENAME, warnings=warnings)
        dependencies = flatten_dependencies(manifest)
        previous = parse_orchestration_file(project_root / ORCHESTRATION_FILENAME)

        tags = {
            signature.tag
            for signature in self._signatures
            if any(signature.matches_package(name) for name in dependencies)
            or any((project_root / marker).is_file() for marker in signature.markers)
        }
        logger.debug("inspected root=%s tags=%s", project_root, sorted(tags))

        return StackFingerprint(
            tags=frozenset(tags),
            project_name=self._project_name or _manifest_string(manifest, "name") or previous.project_name,
            purpose=self._purpose or _manifest_string(manifest, "description") or previous.purpose,
            layout=detect_layout(project_root, manifest),
            dependencies=tuple(sorted(dependencies.items())),
            previous_entries=previous.entries,
            warnings=tuple(warnings),
        )


def load_manifest(path: Path, *, warnings: list[str]) -> Mapping[str, object]:
    """Return the parsed ``package.json`` or an empty mapping.

    Args:
        path: Manifest path.
        warnings: List receiving a message when the manifest is unreadable.

    Returns:
        Mapping[str, object]: Parsed manifest, empty when absent or invalid.
    """

    if not path.is_file():
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        warnings.append(f"{path.name} could not be parsed ({exc}); no dependencies detected")
        return {}
    if not isinstance(payload, Mapping):
        warnings.append(f"{path.name} is not a JSON object; no dependencies detected")
        return {}
    return payload


def flatten_dependencies(manifest: Mapping[str, object]) -> dict[str, str]:
    """Return a flat ``name -> version`` mapping across dependency sections."""

    flat: dict[str, str] = {}
    for key in _DEPENDENCY_SECTIONS:
        section = manifest.get(key)
        if not isinstance(section, Mapping):
            continue
        for name, version in section.items():
            flat.setdefault(str(name), str(version))
    return flat


def detect_layout(project_root: Path, manifest: Mapping[str, object]) -> str:
    """Return ``monorepo`` or ``single-app`` for ``project_root``.

    Only directory names are consulted; file contents under them are never read.
    """

    if manifest.get("workspaces"):
        return LAYOUT_MONOREPO
    if any((project_root / name).is_file() for name in _WORKSPACE_FILES):
        return LAYOUT_MONOREPO
    for name in _MONOREPO_DIRS:
        candidate = project_root / name
        if candidate.is_dir() and any(child.is_dir() for child in candidate.iterdir()):
            return LAYOUT_MONOREPO
    return LAYOUT_SINGLE_APP


def parse_orchestration_file(path: Path) -> PreviousOrchestration:
    """Leniently extract known values from an existing ``AGENTS.md``.

    Unknown structure is tolerated; only overview bullet lines and rows of the
    ``Active Skills`` table are read.

    Args:
        path: Orchestration file path.

    Returns:
        PreviousOrchestration: Recovered values, empty when the file is absent.
    """

    if not path.is_file():
        return PreviousOrchestration()
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return PreviousOrchestration()

    labels: dict[str, str] = {}
    overview = find_section(text, "Project Overview")
    for line in (overview.body(text) if overview else "").splitlines():
        match = _OVERVIEW_LINE_RE.match(line)
        if match and match.group("value") and match.group("value") != EMPTY_VALUE_MARKER:
            labels[match.group("label").strip().casefold()] = match.group("value")

    return PreviousOrchestration(
        project_name=labels.get("project name"),
        purpose=labels.get("purpose"),
        entries=frozenset(parse_active_rows(text)),
    )


def parse_active_rows(text: str) -> tuple[str, ...]:
    """Return identifiers listed in the ``Active Skills`` table of ``text``.

    Args:
        text: Orchestration document.

    Returns:
        tuple[str, ...]: Identifiers in table order; header and placeholder rows are skipped.
    """

    section = find_section(text, "Active Skills")
    if section is None:
        return ()
    identifiers: list[str] = []
    for cells in iter_table_rows(section.body(text)):
        match = _ROW_ID_RE.match(cells[0]) if cells else None
        if match is None or cells[0].casefold() == "skill":
            continue
        identifiers.append(match.group("id"))
    return tuple(identifiers)


def _manifest_string(manifest: Mapping[str, object], key: str) -> str | None:
    value = manifest.get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


__all__ = [
    "CATEGORY_BY_TAG",
    "EMPTY_VALUE_MARKER",
    "LAYOUT_MONOREPO",
    "LAYOUT_SINGLE_APP",
    "ProjectInspector",
    "SIGNATURES",
    "StackFingerprint",
    "StackSignature",
    "detect_layout",
    "flatten_dependencies",
    "load_manifest",
    "parse_active_rows",
    "parse_orchestration_file",
]
