# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Post-write consistency checks between orchestration files and the catalog."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

from .config import SKILLS_DIR_NAME
from .findings import Finding
from .markdown import find_section, iter_table_rows
from .matcher import MatchResult

PHASE: Final[str] = "verify"

_LINK_TARGET_RE: Final[re.Pattern[str]] = re.compile(r"\]\((?P<target>[^)\s]+)\)")
_CODE_ID_RE: Final[re.Pattern[str]] = re.compile(r"`(?P<id>[a-z0-9]+(?:-[a-z0-9]+)*)`")
_SKILL_PATH_RE: Final[re.Pattern[str]] = re.compile(
    rf"(?<![\w/.-]){SKILLS_DIR_NAME}/(?P<id>[A-Za-z0-9_.-]+)/(?P<rest>[^\s)|`\]]+)",
)


def _row_path(cell: str) -> str:
    match = _LINK_TARGET_RE.search(cell)
    return match.group("target") if match else cell.strip("` ")


def _row_identifier(cell: str) -> str | None:
    match = _CODE_ID_RE.search(cell)
    return match.group("id") if match else None


def verify(
    target_path: Path,
    match_result: MatchResult,
    catalog_root: Path,
    *,
    listing_path: Path | None = None,
) -> list[Finding]:
    """Return findings describing inconsistencies in the written files.

    Args:
        target_path: Rendered ``AGENTS.md``.
        match_result: Selection decisions used for rendering.
        catalog_root: Installed ``skills`` directory inside the project.
        listing_path: Optional rendered ``skills/README.md`` to check for completeness.

    Returns:
        list[Finding]: Errors and warnings; empty when everything is consistent.
    """

    try:
        text = target_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return [Finding.error(PHASE, f"cannot read {target_path.name}: {exc}", subject=str(target_path))]

    findings: list[Finding] = []
    base = target_path.parent
    catalog_root = catalog_root.resolve()
    rows = _active_rows(text)
    row_ids = {identifier for identifier, _ in rows}

    for identifier in match_result.selected_ids:
        if identifier not in row_ids:
            findings.append(
                Finding.error(PHASE, f"selected skill '{identifier}' has no row in {target_path.name}", subject=identifier),
            )

    for identifier, path in rows:
        if identifier not in match_result:
            findings.append(
                Finding.error(PHASE, f"row references '{identifier}', which is not in the catalog", subject=identifier),
            )
        elif not match_result.is_selected(identifier):
            findings.append(
                Finding.warning(PHASE, f"row lists '{identifier}' although it was not selected", subject=identifier),
            )
        if not (base / path).is_file():
            findings.append(Finding.error(PHASE, f"referenced path '{path}' does not exist", subject=identifier))

    findings.extend(_orphan_references(text, base, catalog_root, match_result, skip={path for _, path in rows}))

    if listing_path is not None:
        findings.extend(_verify_listing(listing_path, match_result))
    return findings


def _active_rows(text: str) -> list[tuple[str, str]]:
    section = find_section(text, "Active Skills")
    if section is None:
        return []
    rows: list[tuple[str, str]] = []
    for cells in iter_table_rows(section.body(text)):
        if len(cells) < 3:
            continue
        identifier = _row_identifier(cells[0])
        if identifier is None:
            continue
        rows.append((identifier, _row_path(cells[2])))
    return rows


def _orphan_references(
    text: str,
    base: Path,
    catalog_root: Path,
    match_result: MatchResult,
    *,
    skip: set[str],
) -> list[Finding]:
    findings: list[Finding] = []
    seen: set[str] = set()
    for match in _SKILL_PATH_RE.finditer(text):
        reference = match.group(0).rstrip(".,;:")
        if reference in skip or reference in seen:
            continue
        seen.add(reference)
        identifier = match.group("id")
        resolved = (base / reference).resolve()
        if identifier not in match_result:
            findings.append(
                Finding.warning(PHASE, f"orphan reference '{reference}' matches no catalog entry", subject=identifier),
            )
        elif catalog_root not in resolved.parents or not resolved.exists():
            findings.append(Finding.warning(PHASE, f"referenced path '{reference}' does not exist", subject=identifier))
    return findings


def _verify_listing(listing_path: Path, match_result: MatchResult) -> list[Finding]:
    try:
        text = listing_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return [Finding.error(PHASE, f"cannot read catalog listing: {exc}", subject=str(listing_path))]
    section = find_section(text, "Catalog")
    listed: set[str] = set()
    for cells in iter_table_rows(section.body(text) if section else text):
        identifier = _row_identifier(cells[0]) if cells else None
        if identifier is not None:
            listed.add(identifier)
    return [
        Finding.warning(PHASE, f"catalog entry '{identifier}' is missing from the catalog listing", subject=identifier)
        for identifier in match_result
        if identifier not in listed
    ]


__all__ = ["PHASE", "verify"]
