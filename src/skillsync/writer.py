# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Merge rendered documents with user-owned sections and persist them atomically."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .catalog.models import FetchedEntry
from .documents import RenderedDocument
from .errors import ConflictError
from .markdown import find_section, iter_sections, replace_section_body, section_titles
from .rendering import SCHEMAS, missing_anchors

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PreparedWrite:
    """Merged content ready to be written to ``target_path``."""

    target_path: Path
    content: str
    previous_content: str | None
    preserved_sections: tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        """Return whether writing would alter the file on disk."""

        return self.previous_content != self.content


@dataclass(frozen=True, slots=True)
class WriteResult:
    """Outcome of persisting a single document."""

    target_path: Path
    changed: bool
    created: bool
    preserved_sections: tuple[str, ...] = ()


class OrchestrationWriter:
    """Write rendered documents while keeping user-authored sections intact."""

    def prepare(self, target_path: Path, rendered: RenderedDocument, previous_content: str | None) -> PreparedWrite:
        """Merge ``rendered`` with ``previous_content`` without touching disk.

        Args:
            target_path: Destination of the document.
            rendered: Freshly rendered document.
            previous_content: Existing file content, or ``None`` when absent.

        Returns:
            PreparedWrite: Merged content.

        Raises:
            ConflictError: If ``previous_content`` lacks the template anchors.
        """

        schema = SCHEMAS[rendered.kind]
        if previous_content is None:
            return PreparedWrite(target_path=target_path, content=rendered.text, previous_content=None)

        missing = missing_anchors(previous_content, schema)
        if missing:
            raise ConflictError(target_path, missing)

        content = rendered.text
        preserved: list[str] = []
        for title in schema.user_sections:
            section = find_section(previous_content, title)
            if section is None:
                continue
            content = replace_section_body(content, title, _carry_body(section.body(previous_content), content, title))
            preserved.append(title)
        content, carried = _carry_unknown_sections(previous_content, content, schema.user_sections)
        return PreparedWrite(
            target_path=target_path,
            content=content,
            previous_content=previous_content,
            preserved_sections=(*preserved, *carried),
        )

    def commit(self, prepared: PreparedWrite) -> WriteResult:
        """Persist ``prepared`` via a temporary file and atomic rename.

        Args:
            prepared: Content produced by :meth:`prepare`.

        Returns:
            WriteResult: Whether the file changed or was created.
        """

        created = prepared.previous_content is None
        if prepared.changed:
            atomic_write_text(prepared.target_path, prepared.content)
            logger.debug("wrote %s", prepared.target_path)
        return WriteResult(
            target_path=prepared.target_path,
            changed=prepared.changed,
            created=created,
            preserved_sections=prepared.preserved_sections,
        )

    def write(self, target_path: Path, rendered: RenderedDocument, previous_content: str | None) -> WriteResult:
        """Merge and persist ``rendered`` in one step.

        Args:
            target_path: Destination of the document.
            rendered: Freshly rendered document.
            previous_content: Existing file content, or ``None`` when absent.

        Returns:
            WriteResult: Outcome of the write.

        Raises:
            ConflictError: If ``previous_content`` lacks the template anchors.
        """

        return self.commit(self.prepare(target_path, rendered, previous_content))


def _carry_body(previous_body: str, rendered: str, title: str) -> str:
    """Return the previous body adjusted to the rendered section's trailing layout.

    A user section that ended the old file keeps its text while adopting the
    separator the rendered document places before the next heading.
    """

    rendered_section = find_section(rendered, title)
    if rendered_section is None:
        return previous_body
    rendered_body = rendered_section.body(rendered)
    if rendered_section.end == len(rendered):
        return previous_body if previous_body.endswith("\n") else previous_body + "\n"
    trailing = rendered_body[len(rendered_body.rstrip("\n")) :]
    return previous_body.rstrip("\n") + trailing


def _carry_unknown_sections(
    previous: str,
    merged: str,
    user_sections: tuple[str, ...],
) -> tuple[str, tuple[str, ...]]:
    """Return ``merged`` with previous sections the template lacks re-inserted verbatim.

    Unknown sections keep their relative order and land after the last
    user-owned section, or at the end when the schema declares none.
    """

    known = {title.casefold() for title in section_titles(merged)}
    extras = [section for section in iter_sections(previous) if section.title.casefold() not in known]
    if not extras:
        return merged, ()
    block = "".join(previous[section.heading_start : section.end] for section in extras)
    anchor = find_section(merged, user_sections[-1]) if user_sections else None
    position = anchor.end if anchor is not None else len(merged)
    head, tail = merged[:position], merged[position:]
    if head and not head.endswith("\n"):
        head += "\n"
    if not block.endswith("\n"):
        block += "\n"
    if tail and not block.endswith("\n\n"):
        block += "\n"
    return head + block + tail, tuple(section.title for section in extras)


def read_previous(path: Path) -> str | None:
    """Return the text of ``path`` or ``None`` when it does not exist.

    Raises:
        ConflictError: If ``path`` exists but is not valid UTF-8.
    """

    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except UnicodeDecodeError as exc:
        reason = f"existing file is not valid UTF-8 ({exc.reason} at byte {exc.start})"
        raise ConflictError(path, reason=reason) from exc


def atomic_write_text(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` through a same-directory temporary file.

    Args:
        path: Destination file.
        content: UTF-8 text to persist.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def install_entries(skills_dir: Path, entries: Iterable[FetchedEntry]) -> tuple[str, ...]:
    """Copy fetched entries byte-for-byte into ``skills_dir/<id>/``.

    Each entry is staged in a hidden sibling directory and swapped into place,
    so an entry directory is never observed half-copied.

    Args:
        skills_dir: Project ``skills`` directory.
        entries: Entries to install.

    Returns:
        tuple[str, ...]: Identifiers whose files changed on disk.
    """

    skills_dir.mkdir(parents=True, exist_ok=True)
    changed: list[str] = []
    for fetched in entries:
        target = skills_dir / fetched.identifier
        if _entry_matches(target, fetched):
            continue
        staging = Path(tempfile.mkdtemp(prefix=f".{fetched.identifier}.", dir=skills_dir))
        try:
            for relative, payload in fetched.files():
                destination = staging / relative
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_bytes(payload)
            backup: Path | None = None
            if target.exists():
                backup = target.with_name(f".{fetched.identifier}.old")
                shutil.rmtree(backup, ignore_errors=True)
                os.replace(target, backup)
            os.replace(staging, target)
            if backup is not None:
                shutil.rmtree(backup, ignore_errors=True)
        finally:
            shutil.rmtree(staging, ignore_errors=True)
        changed.append(fetched.identifier)
    return tuple(changed)


def _entry_matches(target: Path, fetched: FetchedEntry) -> bool:
    if not target.is_dir():
        return False
    expected = dict(fetched.files())
    existing = {path.relative_to(target).as_posix() for path in target.rglob("*") if path.is_file()}
    if existing != set(expected):
        return False
    return all((target / relative).read_bytes() == payload for relative, payload in expected.items())


__all__ = [
    "OrchestrationWriter",
    "PreparedWrite",
    "WriteResult",
    "atomic_write_text",
    "install_entries",
    "read_previous",
]
