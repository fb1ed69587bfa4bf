# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Minimal, lossless Markdown structure helpers.

Only second-level headings (``## Title``) delimit sections. Headings inside
fenced code blocks are ignored so that example snippets never split a section.
Section spans cover the original text exactly, which lets callers splice
bodies between documents without disturbing surrounding bytes.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Final

_HEADING_RE: Final[re.Pattern[str]] = re.compile(r"^##[ \t]+(?P<title>.+?)[ \t#]*$")
_FENCE_RE: Final[re.Pattern[str]] = re.compile(r"^[ \t]{0,3}(```|~~~)")
_SEPARATOR_CELL_RE: Final[re.Pattern[str]] = re.compile(r"^:?-{3,}:?$")
_CELL_SPLIT_RE: Final[re.Pattern[str]] = re.compile(r"(?<!\\)\|")


@dataclass(frozen=True, slots=True)
class Section:
    """Span of a ``##`` section within a document."""

    title: str
    heading_start: int
    body_start: int
    end: int

    def body(self, text: str) -> str:
        """Return the section body (everything after the heading line)."""

        return text[self.body_start : self.end]


def _iter_lines(text: str) -> Iterator[tuple[int, str]]:
    offset = 0
    for line in text.splitlines(keepends=True):
        yield offset, line
        offset += len(line)


def iter_sections(text: str) -> Iterator[Section]:
    """Yield every ``##`` section of ``text`` in document order.

    Args:
        text: Markdown document.

    Yields:
        Section: Spans whose bodies run until the next heading or end of text.
    """

    headings: list[tuple[str, int, int]] = []
    fence: str | None = None
    for offset, line in _iter_lines(text):
        stripped = line.rstrip("\r\n")
        fence_match = _FENCE_RE.match(stripped)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = marker
            elif fence == marker:
                fence = None
            continue
        if fence is not None:
            continue
        match = _HEADING_RE.match(stripped)
        if match:
            headings.append((match.group("title").strip(), offset, offset + len(line)))
    for index, (title, start, body_start) in enumerate(headings):
        end = headings[index + 1][1] if index + 1 < len(headings) else len(text)
        yield Section(title=title, heading_start=start, body_start=body_start, end=end)


def find_section(text: str, title: str) -> Section | None:
    """Return the first section titled ``title`` (case-insensitive)."""

    wanted = title.casefold()
    return next((section for section in iter_sections(text) if section.title.casefold() == wanted), None)


def section_titles(text: str) -> tuple[str, ...]:
    """Return the titles of every ``##`` section in ``text``."""

    return tuple(section.title for section in iter_sections(text))


def replace_section_body(text: str, title: str, body: str) -> str:
    """Return ``text`` with the body of section ``title`` replaced by ``body``.

    Args:
        text: Markdown document.
        title: Section title to update.
        body: Replacement body, inserted verbatim.

    Returns:
        str: Updated document; unchanged when the section is missing.
    """

    section = find_section(text, title)
    if section is None:
        return text
    return text[: section.body_start] + body + text[section.end :]


def split_table_row(line: str) -> tuple[str, ...] | None:
    """Return the stripped cells of a pipe table row, or ``None``.

    Separator rows (``|---|---|``) and non-table lines return ``None``.
    """

    stripped = line.strip()
    if not stripped.startswith("|") or not stripped.endswith("|") or len(stripped) < 2:
        return None
    cells = tuple(cell.strip() for cell in _CELL_SPLIT_RE.split(stripped[1:-1]))
    if all(_SEPARATOR_CELL_RE.match(cell) for cell in cells if cell):
        return None
    return cells


def normalize_table_header(line: str) -> str:
    """Return a whitespace-insensitive form of a table header line."""

    cells = split_table_row(line)
    if cells is None:
        return line.strip()
    return "| " + " | ".join(cells) + " |"


def iter_table_rows(text: str) -> Iterator[tuple[str, ...]]:
    """Yield the cells of every table row in ``text`` outside fenced code."""

    fence: str | None = None
    for _, line in _iter_lines(text):
        stripped = line.rstrip("\r\n")
        fence_match = _FENCE_RE.match(stripped)
        if fence_match:
            marker = fence_match.group(1)
            fence = marker if fence is None else (None if fence == marker else fence)
            continue
        if fence is not None:
            continue
        cells = split_table_row(stripped)
        if cells is not None:
            yield cells


def escape_cell(value: str) -> str:
    """Return ``value`` safe for inclusion inside a pipe table cell."""

    return " ".join(value.split()).replace("|", "\\|")


__all__ = [
    "Section",
    "escape_cell",
    "find_section",
    "iter_sections",
    "iter_table_rows",
    "normalize_table_header",
    "replace_section_body",
    "section_titles",
    "split_table_row",
]
