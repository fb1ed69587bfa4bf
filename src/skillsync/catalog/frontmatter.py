# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers for reading YAML frontmatter from skill documents."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Final

import yaml

from ..errors import CatalogIntegrityError
from .models import CapabilityTier

_FRONTMATTER_RE: Final[re.Pattern[str]] = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)
_TAG_KEYS: Final[tuple[str, ...]] = ("triggers", "tags")


@dataclass(frozen=True, slots=True)
class SkillFrontmatter:
    """Normalised subset of frontmatter keys consumed by skillsync."""

    name: str | None
    description: str
    trigger_tags: tuple[str, ...]
    tier: CapabilityTier
    always_include: bool


def split_frontmatter(text: str) -> tuple[Mapping[str, object], str]:
    """Split ``text`` into its frontmatter mapping and markdown body.

    Args:
        text: Full document text.

    Returns:
        tuple[Mapping[str, object], str]: Parsed frontmatter (empty when absent) and body.

    Raises:
        CatalogIntegrityError: If the frontmatter is not valid YAML or not a mapping.
    """

    match = _FRONTMATTER_RE.match(text)
    if match is None:
        return {}, text
    try:
        payload = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as exc:
        raise CatalogIntegrityError(f"invalid YAML frontmatter: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise CatalogIntegrityError("YAML frontmatter must be a mapping")
    return payload, text[match.end() :]


def parse_skill_frontmatter(text: str, *, context: str) -> SkillFrontmatter:
    """Return the normalised frontmatter of a skill document.

    Args:
        text: Primary document text.
        context: Human-readable prefix used in error messages.

    Returns:
        SkillFrontmatter: Values with defaults applied.

    Raises:
        CatalogIntegrityError: If a known key carries an unsupported value.
    """

    try:
        payload, _ = split_frontmatter(text)
    except CatalogIntegrityError as exc:
        raise CatalogIntegrityError(f"{context}: {exc}") from exc

    metadata = payload.get("metadata")
    nested = metadata if isinstance(metadata, Mapping) else {}

    name = payload.get("name")
    description = payload.get("description", "")
    if not isinstance(description, str):
        raise CatalogIntegrityError(f"{context}: expected 'description' to be a string")

    return SkillFrontmatter(
        name=str(name) if name is not None else None,
        description=" ".join(description.split()),
        trigger_tags=_collect_tags(payload, nested, context=context),
        tier=_parse_tier(payload.get("tier", nested.get("tier")), context=context),
        always_include=_parse_bool(
            payload.get("always_include", nested.get("always_include")),
            key="always_include",
            context=context,
        ),
    )


def _collect_tags(*sources: Mapping[str, object], context: str) -> tuple[str, ...]:
    tags: list[str] = []
    for source in sources:
        for key in _TAG_KEYS:
            value = source.get(key)
            if value is None:
                continue
            if isinstance(value, str):
                candidates: Sequence[object] = value.split(",")
            elif isinstance(value, Sequence):
                candidates = value
            else:
                raise CatalogIntegrityError(f"{context}: expected '{key}' to be a list of strings")
            tags.extend(str(item).strip().lower() for item in candidates if str(item).strip())
    return tuple(sorted(set(tags)))


def _parse_tier(value: object, *, context: str) -> CapabilityTier:
    if value is None:
        return CapabilityTier.KNOWLEDGE
    try:
        return CapabilityTier(str(value).strip().lower())
    except ValueError as exc:
        allowed = ", ".join(tier.value for tier in CapabilityTier)
        raise CatalogIntegrityError(f"{context}: tier must be one of {allowed}") from exc


def _parse_bool(value: object, *, key: str, context: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    raise CatalogIntegrityError(f"{context}: expected '{key}' to be a boolean")


__all__ = ["SkillFrontmatter", "parse_skill_frontmatter", "split_frontmatter"]
