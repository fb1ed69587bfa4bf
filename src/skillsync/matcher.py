# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Select catalog entries relevant to a stack fingerprint."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Final

from .catalog.models import CatalogEntry
from .config import MatchPolicy
from .inspector import StackFingerprint

# Trigger tags for entries of the upstream catalog that predate frontmatter tags.
TRIGGER_TABLE: Final[Mapping[str, tuple[str, ...]]] = MappingProxyType(
    {
        "developing-with-nextjs": ("nextjs",),
        "building-react-components": ("react",),
        "writing-typescript": ("typescript",),
        "styling-with-tailwind": ("tailwind",),
        "using-shadcn-ui": ("shadcn",),
        "validating-with-zod": ("zod",),
        "handling-forms": ("react-hook-form",),
        "integrating-supabase": ("supabase",),
        "querying-with-tanstack": ("tanstack-query",),
        "testing-with-vitest": ("vitest",),
        "testing-with-playwright": ("playwright",),
    },
)

# Orchestration meta-entries selected for every project.
ALWAYS_INCLUDE: Final[frozenset[str]] = frozenset({"skill-creator", "skill-integrator", "skill-sync"})


@dataclass(frozen=True, slots=True)
class MatchDecision:
    """Selection outcome for one catalog entry."""

    selected: bool
    justification: str


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Ordered selection decisions keyed by entry identifier."""

    decisions: Mapping[str, MatchDecision]
    entries: tuple[CatalogEntry, ...] = ()
    warnings: tuple[str, ...] = field(default=(), compare=False)

    def __iter__(self) -> Iterator[str]:
        return iter(self.decisions)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self.decisions

    @property
    def selected_ids(self) -> tuple[str, ...]:
        """Return identifiers marked as selected, in catalog order."""

        return tuple(identifier for identifier, decision in self.decisions.items() if decision.selected)

    @property
    def selected_entries(self) -> tuple[CatalogEntry, ...]:
        """Return selected catalog entries in catalog order."""

        chosen = set(self.selected_ids)
        return tuple(entry for entry in self.entries if entry.identifier in chosen)

    def is_selected(self, identifier: str) -> bool:
        """Return whether ``identifier`` was selected."""

        decision = self.decisions.get(identifier)
        return decision is not None and decision.selected


def trigger_tags_for(entry: CatalogEntry, table: Mapping[str, tuple[str, ...]] = TRIGGER_TABLE) -> tuple[str, ...]:
    """Return the trigger tags declared for ``entry``.

    Frontmatter tags take precedence; the static table covers entries without them.
    """

    if entry.trigger_tags:
        return entry.trigger_tags
    return tuple(table.get(entry.identifier, ()))


class SkillMatcher:
    """Pure set-membership matcher between fingerprints and catalog entries."""

    def __init__(
        self,
        *,
        policy: MatchPolicy = MatchPolicy.ANY,
        table: Mapping[str, tuple[str, ...]] = TRIGGER_TABLE,
        always_include: frozenset[str] = ALWAYS_INCLUDE,
    ) -> None:
        """Configure the matching policy and lookup tables.

        Args:
            policy: Whether any or all declared tags must be detected.
            table: Static identifier to trigger-tag table.
            always_include: Identifiers selected regardless of the fingerprint.
        """

        self.policy = policy
        self._table = table
        self._always_include = always_include

    def match(self, fingerprint: StackFingerprint, entries: Sequence[CatalogEntry]) -> MatchResult:
        """Return selection decisions for ``entries`` against ``fingerprint``.

        Args:
            fingerprint: Detected project signals.
            entries: Catalog entries in catalog order.

        Returns:
            MatchResult: One decision per entry plus any warnings.
        """

        decisions: dict[str, MatchDecision] = {}
        for entry in entries:
            decisions[entry.identifier] = self._decide(entry, fingerprint.tags)

        warnings: list[str] = []
        if fingerprint.is_empty:
            warnings.append("stack detection found no technology tags; only always-include skills were selected")
        return MatchResult(
            decisions=MappingProxyType(decisions),
            entries=tuple(entries),
            warnings=tuple(warnings),
        )

    def _decide(self, entry: CatalogEntry, tags: frozenset[str]) -> MatchDecision:
        if entry.always_include or entry.identifier in self._always_include:
            return MatchDecision(True, "always included")
        declared = trigger_tags_for(entry, self._table)
        if not declared:
            return MatchDecision(False, "no trigger tags declared")
        present = [tag for tag in declared if tag in tags]
        if self.policy is MatchPolicy.ALL:
            selected = len(present) == len(declared)
        else:
            selected = bool(present)
        if selected:
            return MatchDecision(True, f"detected {', '.join(present)}")
        if present:
            missing = [tag for tag in declared if tag not in tags]
            return MatchDecision(False, f"missing {', '.join(missing)}")
        return MatchDecision(False, f"requires {', '.join(declared)}")


__all__ = [
    "ALWAYS_INCLUDE",
    "MatchDecision",
    "MatchResult",
    "SkillMatcher",
    "TRIGGER_TABLE",
    "trigger_tags_for",
]
