# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Immutable models describing catalog entries and their fetched payloads."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Final

PRIMARY_DOCUMENT: Final[str] = "SKILL.md"
IDENTIFIER_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class CapabilityTier(str, Enum):
    """Enumerate whether an entry only informs, acts, or both."""

    KNOWLEDGE = "knowledge"
    TOOL = "tool"
    HYBRID = "hybrid"


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    """Metadata describing a single skill directory within the catalog."""

    identifier: str
    trigger: str
    primary_document: str = PRIMARY_DOCUMENT
    resources: tuple[str, ...] = ()
    trigger_tags: tuple[str, ...] = ()
    tier: CapabilityTier = CapabilityTier.KNOWLEDGE
    always_include: bool = False

    @property
    def document_path(self) -> str:
        """Return the primary document path relative to the skills directory."""

        return f"{self.identifier}/{self.primary_document}"


@dataclass(frozen=True, slots=True)
class FetchedEntry:
    """Catalog entry together with the raw bytes of every document it owns."""

    entry: CatalogEntry
    primary: bytes
    resources: Mapping[str, bytes] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def identifier(self) -> str:
        """Return the identifier of the wrapped entry."""

        return self.entry.identifier

    def files(self) -> tuple[tuple[str, bytes], ...]:
        """Return ``(relative_path, payload)`` pairs sorted by path.

        Returns:
            tuple[tuple[str, bytes], ...]: Primary document followed by sub-resources.
        """

        pairs = [(self.entry.primary_document, self.primary)]
        pairs.extend(sorted(self.resources.items()))
        return tuple(pairs)


def is_valid_identifier(value: str) -> bool:
    """Return whether ``value`` is a kebab-case catalog identifier."""

    return bool(IDENTIFIER_PATTERN.match(value))


__all__ = [
    "CapabilityTier",
    "CatalogEntry",
    "FetchedEntry",
    "IDENTIFIER_PATTERN",
    "PRIMARY_DOCUMENT",
    "is_valid_identifier",
]
