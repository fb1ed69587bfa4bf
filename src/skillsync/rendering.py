# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Template validation and single-pass placeholder substitution."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Final

from .catalog.models import CatalogEntry
from .config import SKILLS_DIR_NAME
from .documents import RenderedDocument, TemplateDocument, TemplateKind
from .errors import TemplateSchemaError
from .inspector import EMPTY_VALUE_MARKER, StackFingerprint
from .markdown import escape_cell, normalize_table_header, section_titles
from .matcher import MatchResult

TEMPLATE_SCHEMA_VERSION: Final[int] = 1
TOKEN_RE: Final[re.Pattern[str]] = re.compile(r"\{\s*(?P<name>[A-Z][A-Z0-9_]*)\s*\}")

DEFAULT_PROJECT_RULES: Final[str] = "_Add rules that apply only to this project here. This section is preserved across syncs._"
EMPTY_ACTIVE_ROW: Final[str] = "| _(none)_ | - | - |"
EMPTY_CATALOG_ROW: Final[str] = "| _(none)_ | - | - | - |"
STATUS_ACTIVE: Final[str] = "Active"
STATUS_AVAILABLE: Final[str] = "Available"


class TemplateToken(str, Enum):
    """Closed set of placeholder names recognised by the renderer."""

    PROJECT_NAME = "PROJECT_NAME"
    PROJECT_PURPOSE = "PROJECT_PURPOSE"
    PROJECT_LAYOUT = "PROJECT_LAYOUT"
    STACK_SUMMARY = "STACK_SUMMARY"
    ACTIVE_SKILLS_TABLE = "ACTIVE_SKILLS_TABLE"
    CATALOG_TABLE = "CATALOG_TABLE"
    ACTIVE_COUNT = "ACTIVE_COUNT"
    CATALOG_COUNT = "CATALOG_COUNT"
    PROJECT_RULES = "PROJECT_RULES"


KNOWN_TOKENS: Final[frozenset[str]] = frozenset(token.value for token in TemplateToken)


@dataclass(frozen=True, slots=True)
class TemplateSchema:
    """Anchors a template of a given kind must contain verbatim."""

    version: int
    headings: tuple[str, ...]
    table_headers: tuple[str, ...]
    user_sections: tuple[str, ...] = ()

    @property
    def anchors(self) -> tuple[str, ...]:
        """Return every anchor as it appears in documents."""

        return tuple(f"## {heading}" for heading in self.headings) + self.table_headers


SCHEMAS: Final[Mapping[TemplateKind, TemplateSchema]] = {
    TemplateKind.ORCHESTRATION: TemplateSchema(
        version=TEMPLATE_SCHEMA_VERSION,
        headings=("Project Overview", "Active Skills", "Project-Specific Rules"),
        table_headers=("| Skill | Trigger | Path |",),
        user_sections=("Project-Specific Rules",),
    ),
    TemplateKind.CATALOG_LISTING: TemplateSchema(
        version=TEMPLATE_SCHEMA_VERSION,
        headings=("Catalog",),
        table_headers=("| Skill | Status | Tier | Description |",),
    ),
}


def missing_anchors(text: str, schema: TemplateSchema) -> tuple[str, ...]:
    """Return the anchors of ``schema`` that ``text`` lacks.

    Args:
        text: Template or rendered document.
        schema: Anchor schema to check against.

    Returns:
        tuple[str, ...]: Missing anchors in schema order.
    """

    titles = {title.casefold() for title in section_titles(text)}
    headers = {normalize_table_header(line) for line in text.splitlines() if line.lstrip().startswith("|")}
    missing = [f"## {heading}" for heading in schema.headings if heading.casefold() not in titles]
    missing.extend(header for header in schema.table_headers if normalize_table_header(header) not in headers)
    return tuple(missing)


def unknown_tokens(text: str) -> tuple[str, ...]:
    """Return placeholder names in ``text`` outside the closed token set."""

    names = {match.group("name") for match in TOKEN_RE.finditer(text)}
    return tuple(sorted(names - KNOWN_TOKENS))


def validate_template(template: TemplateDocument, *, strict: bool = False) -> tuple[str, ...]:
    """Validate ``template`` against the anchor schema for its kind.

    Args:
        template: Template to validate.
        strict: When ``True`` unknown tokens are an error instead of a warning.

    Returns:
        tuple[str, ...]: Warnings about unknown tokens (empty in strict mode).

    Raises:
        TemplateSchemaError: If anchors are missing, or unknown tokens exist in strict mode.
    """

    schema = SCHEMAS[template.kind]
    missing = missing_anchors(template.text, schema)
    if missing:
        raise TemplateSchemaError(
            f"{template.origin}: template drifted from schema v{schema.version}; "
            f"missing {', '.join(repr(anchor) for anchor in missing)}",
        )
    unknown = unknown_tokens(template.text)
    if unknown and strict:
        raise TemplateSchemaError(f"{template.origin}: unknown template tokens {', '.join(unknown)}")
    return tuple(f"unknown template token {{{name}}} left untouched" for name in unknown)


class TemplateRenderer:
    """Fill template tokens from a fingerprint and match result."""

    def __init__(self, *, strict: bool = False) -> None:
        """Configure whether unknown tokens abort rendering."""

        self.strict = strict

    def render(
        self,
        template: TemplateDocument,
        fingerprint: StackFingerprint,
        match_result: MatchResult,
    ) -> RenderedDocument:
        """Return ``template`` with recognised tokens substituted.

        Args:
            template: Template to render.
            fingerprint: Project fingerprint supplying identity values.
            match_result: Selection decisions supplying table rows.

        Returns:
            RenderedDocument: Rendered text and any warnings.

        Raises:
            TemplateSchemaError: If the template fails schema validation.
        """

        warnings = list(validate_template(template, strict=self.strict))
        values = compute_token_values(fingerprint, match_result)
        missing_reported: set[str] = set()

        def _substitute(match: re.Match[str]) -> str:
            name = match.group("name")
            if name not in KNOWN_TOKENS:
                return match.group(0)
            value = values.get(name)
            if value is None:
                if name not in missing_reported:
                    missing_reported.add(name)
                    warnings.append(f"no value for {{{name}}}; rendered as {EMPTY_VALUE_MARKER}")
                return EMPTY_VALUE_MARKER
            return value

        text = TOKEN_RE.sub(_substitute, template.text)
        return RenderedDocument(kind=template.kind, text=text, warnings=tuple(warnings))


def compute_token_values(fingerprint: StackFingerprint, match_result: MatchResult) -> dict[str, str | None]:
    """Return the value of every token; ``None`` marks a missing value.

    Args:
        fingerprint: Project fingerprint.
        match_result: Selection decisions.

    Returns:
        dict[str, str | None]: Token name to substitution text.
    """

    return {
        TemplateToken.PROJECT_NAME.value: fingerprint.project_name,
        TemplateToken.PROJECT_PURPOSE.value: fingerprint.purpose,
        TemplateToken.PROJECT_LAYOUT.value: fingerprint.layout,
        TemplateToken.STACK_SUMMARY.value: fingerprint.stack_summary() or "none detected",
        TemplateToken.ACTIVE_SKILLS_TABLE.value: active_skills_table(match_result),
        TemplateToken.CATALOG_TABLE.value: catalog_table(match_result),
        TemplateToken.ACTIVE_COUNT.value: str(len(match_result.selected_ids)),
        TemplateToken.CATALOG_COUNT.value: str(len(match_result.entries)),
        TemplateToken.PROJECT_RULES.value: DEFAULT_PROJECT_RULES,
    }


def skill_document_path(entry: CatalogEntry) -> str:
    """Return the project-relative path of ``entry``'s primary document."""

    return f"{SKILLS_DIR_NAME}/{entry.document_path}"


def active_skills_table(match_result: MatchResult) -> str:
    """Return the ``| Skill | Trigger | Path |`` rows for selected entries."""

    rows = []
    for entry in match_result.selected_entries:
        path = skill_document_path(entry)
        trigger = escape_cell(entry.trigger) or "-"
        rows.append(f"| `{entry.identifier}` | {trigger} | [{path}]({path}) |")
    return "\n".join(rows) if rows else EMPTY_ACTIVE_ROW


def catalog_table(match_result: MatchResult) -> str:
    """Return the ``| Skill | Status | Tier | Description |`` rows for every entry."""

    rows = []
    for entry in match_result.entries:
        status = STATUS_ACTIVE if match_result.is_selected(entry.identifier) else STATUS_AVAILABLE
        link = f"[`{entry.identifier}`]({entry.document_path})"
        rows.append(f"| {link} | {status} | {entry.tier.value} | {escape_cell(entry.trigger) or '-'} |")
    return "\n".join(rows) if rows else EMPTY_CATALOG_ROW


__all__ = [
    "DEFAULT_PROJECT_RULES",
    "KNOWN_TOKENS",
    "SCHEMAS",
    "STATUS_ACTIVE",
    "STATUS_AVAILABLE",
    "TEMPLATE_SCHEMA_VERSION",
    "TemplateRenderer",
    "TemplateSchema",
    "TemplateToken",
    "active_skills_table",
    "catalog_table",
    "compute_token_values",
    "missing_anchors",
    "skill_document_path",
    "unknown_tokens",
    "validate_template",
]
