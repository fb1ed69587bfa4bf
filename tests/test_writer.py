# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for merging user sections and atomic persistence."""

from __future__ import annotations

import os
from pathlib import Path
from types import MappingProxyType

import pytest

from skillsync.catalog.models import CatalogEntry, FetchedEntry
from skillsync.documents import RenderedDocument, TemplateKind
from skillsync.errors import ConflictError
from skillsync.writer import OrchestrationWriter, atomic_write_text, install_entries, read_previous

RENDERED = RenderedDocument(
    kind=TemplateKind.ORCHESTRATION,
    text=(
        "# AGENTS.md\n\n"
        "## Project Overview\n\n- **Project name:** acme\n\n"
        "## Active Skills\n\n| Skill | Trigger | Path |\n|-------|---------|------|\n| _(none)_ | - | - |\n\n"
        "## Project-Specific Rules\n\n_Add rules here._\n"
    ),
)


def test_first_write_creates_file(tmp_path: Path) -> None:
    target = tmp_path / "AGENTS.md"

    result = OrchestrationWriter().write(target, RENDERED, read_previous(target))

    assert result.created and result.changed
    assert target.read_text(encoding="utf-8") == RENDERED.text


def test_user_section_is_preserved_verbatim(tmp_path: Path) -> None:
    target = tmp_path / "AGENTS.md"
    writer = OrchestrationWriter()
    writer.write(target, RENDERED, None)
    edited = target.read_text(encoding="utf-8").replace("_Add rules here._", "- Custom rule X\n- Never | escape me")
    target.write_text(edited, encoding="utf-8")

    result = writer.write(target, RENDERED, read_previous(target))
    merged = target.read_text(encoding="utf-8")

    assert result.preserved_sections == ("Project-Specific Rules",)
    assert "- Custom rule X\n- Never | escape me\n" in merged
    assert "_Add rules here._" not in merged


def test_rewrite_of_identical_content_is_skipped(tmp_path: Path) -> None:
    target = tmp_path / "AGENTS.md"
    writer = OrchestrationWriter()
    writer.write(target, RENDERED, None)
    before = target.stat().st_mtime_ns

    result = writer.write(target, RENDERED, read_previous(target))

    assert not result.changed
    assert target.stat().st_mtime_ns == before


def test_missing_anchors_raise_conflict_and_write_nothing(tmp_path: Path) -> None:
    target = tmp_path / "AGENTS.md"
    original = "# Hand written\n\nSome notes without the expected headings.\n"
    target.write_text(original, encoding="utf-8")

    with pytest.raises(ConflictError) as excinfo:
        OrchestrationWriter().write(target, RENDERED, read_previous(target))

    assert "## Active Skills" in excinfo.value.missing
    assert target.read_text(encoding="utf-8") == original


def test_unknown_previous_sections_are_carried_after_user_rules(tmp_path: Path) -> None:
    target = tmp_path / "AGENTS.md"
    writer = OrchestrationWriter()
    writer.write(target, RENDERED, None)
    with target.open("a", encoding="utf-8") as handle:
        handle.write("## Deployment Notes\n\nCustom rule X: deploy via blue/green")

    first = writer.write(target, RENDERED, read_previous(target))
    after_first = target.read_text(encoding="utf-8")
    second = writer.write(target, RENDERED, read_previous(target))

    assert first.preserved_sections == ("Project-Specific Rules", "Deployment Notes")
    assert after_first.endswith("_Add rules here._\n## Deployment Notes\n\nCustom rule X: deploy via blue/green\n")
    assert not second.changed
    assert target.read_text(encoding="utf-8") == after_first


def test_unknown_sections_before_template_headings_move_after_user_rules(tmp_path: Path) -> None:
    previous = RENDERED.text.replace("## Active Skills", "## Team Contacts\n\n- ops@example.test\n\n## Active Skills")

    prepared = OrchestrationWriter().prepare(tmp_path / "AGENTS.md", RENDERED, previous)

    assert prepared.content == RENDERED.text + "## Team Contacts\n\n- ops@example.test\n\n"


def test_non_utf8_previous_file_raises_conflict(tmp_path: Path) -> None:
    target = tmp_path / "AGENTS.md"
    target.write_bytes(b"# Notes caf\xe9\n")

    with pytest.raises(ConflictError, match="not valid UTF-8"):
        read_previous(target)

    assert target.read_bytes() == b"# Notes caf\xe9\n"


def test_atomic_write_leaves_original_on_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    target = tmp_path / "AGENTS.md"
    target.write_text("original", encoding="utf-8")

    def failing_replace(src: object, dst: object) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", failing_replace)
    with pytest.raises(OSError, match="disk full"):
        atomic_write_text(target, "new content")

    assert target.read_text(encoding="utf-8") == "original"
    assert [path.name for path in tmp_path.iterdir()] == ["AGENTS.md"]


def _fetched(identifier: str, body: bytes, **resources: bytes) -> FetchedEntry:
    return FetchedEntry(
        entry=CatalogEntry(identifier, "trigger", resources=tuple(sorted(resources))),
        primary=body,
        resources=MappingProxyType(dict(resources)),
    )


def test_install_entries_copies_bytes_and_replaces_stale_files(tmp_path: Path) -> None:
    skills = tmp_path / "skills"
    stale = skills / "writing-typescript" / "old.md"
    stale.parent.mkdir(parents=True)
    stale.write_text("stale", encoding="utf-8")

    changed = install_entries(skills, [_fetched("writing-typescript", b"# TS\r\n\xe2\x9c\x93", **{"ref.md": b"ref"})])

    entry_dir = skills / "writing-typescript"
    assert changed == ("writing-typescript",)
    assert (entry_dir / "SKILL.md").read_bytes() == b"# TS\r\n\xe2\x9c\x93"
    assert (entry_dir / "ref.md").read_bytes() == b"ref"
    assert not stale.exists()
    assert sorted(path.name for path in skills.iterdir()) == ["writing-typescript"]


def test_install_entries_skips_identical_entries(tmp_path: Path) -> None:
    skills = tmp_path / "skills"
    entry = _fetched("writing-typescript", b"# TS\n")
    install_entries(skills, [entry])

    assert install_entries(skills, [entry]) == ()
