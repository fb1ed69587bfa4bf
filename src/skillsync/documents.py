# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Template and rendered document models plus the bundled template set."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from importlib import resources
from typing import Final


class TemplateKind(str, Enum):
    """Enumerate the two canonical templates consumed by the renderer."""

    ORCHESTRATION = "orchestration"
    CATALOG_LISTING = "catalog-listing"

    @property
    def filename(self) -> str:
        """Return the template filename shipped under ``templates/``."""

        return _TEMPLATE_FILENAMES[self]


_TEMPLATE_FILENAMES: Final[dict[TemplateKind, str]] = {
    TemplateKind.ORCHESTRATION: "AGENTS.template.md",
    TemplateKind.CATALOG_LISTING: "SKILLS_README.template.md",
}

BUNDLED_ORIGIN: Final[str] = "<bundled>"


@dataclass(frozen=True, slots=True)
class TemplateDocument:
    """Raw template text containing ``{TOKEN}`` placeholders and anchors."""

    kind: TemplateKind
    text: str
    origin: str = BUNDLED_ORIGIN


@dataclass(frozen=True, slots=True)
class RenderedDocument:
    """Template output with every recognised token substituted."""

    kind: TemplateKind
    text: str
    warnings: tuple[str, ...] = field(default_factory=tuple)


def load_bundled_template(kind: TemplateKind) -> TemplateDocument:
    """Return the template of ``kind`` packaged with skillsync.

    Args:
        kind: Template to load.

    Returns:
        TemplateDocument: Bundled template text.
    """

    resource = resources.files("skillsync").joinpath("data", kind.filename)
    return TemplateDocument(kind=kind, text=resource.read_text(encoding="utf-8"))


__all__ = [
    "BUNDLED_ORIGIN",
    "RenderedDocument",
    "TemplateDocument",
    "TemplateKind",
    "load_bundled_template",
]
