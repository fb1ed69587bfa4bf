# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for catalog sources, archive handling and frontmatter parsing."""

from __future__ import annotations

import itertools
import zipfile
from collections.abc import Iterator
from pathlib import Path

import pytest
import requests

from skillsync.catalog import ArchiveCatalogSource, CapabilityTier, DirectoryCatalogSource, open_catalog_source
from skillsync.catalog.archive import download_archive, extract_archive
from skillsync.catalog.frontmatter import parse_skill_frontmatter
from skillsync.documents import BUNDLED_ORIGIN, TemplateKind
from skillsync.errors import CatalogIntegrityError, NotFoundError, TemplateSchemaError, TransportError


def test_directory_source_lists_entries_sorted(catalog_dir: Path) -> None:
    with DirectoryCatalogSource(catalog_dir) as source:
        entries = source.list_entries()
        again = source.list_entries()

    assert [entry.identifier for entry in entries] == [
        "developing-with-nextjs",
        "styling-with-tailwind",
        "testing-with-playwright",
        "validating-with-zod",
        "writing-typescript",
    ]
    assert entries == again
    nextjs = entries[0]
    assert nextjs.resources == ("assets/page.tsx",)
    assert nextjs.trigger == "Use when building Next.js App Router pages."


def test_directory_without_primary_document_is_ignored(catalog_dir: Path) -> None:
    (catalog_dir / "skills" / "drafts").mkdir()
    (catalog_dir / "skills" / "drafts" / "notes.md").write_text("wip", encoding="utf-8")

    with DirectoryCatalogSource(catalog_dir) as source:
        identifiers = {entry.identifier for entry in source.list_entries()}

    assert "drafts" not in identifiers


def test_fetch_entry_returns_bytes(catalog_dir: Path) -> None:
    with DirectoryCatalogSource(catalog_dir) as source:
        fetched = source.fetch_entry("developing-with-nextjs")

    expected = (catalog_dir / "skills" / "developing-with-nextjs" / "SKILL.md").read_bytes()
    assert fetched.primary == expected
    assert dict(fetched.files())["assets/page.tsx"].startswith(b"export default")


def test_fetch_unknown_entry_raises_not_found(catalog_dir: Path) -> None:
    with DirectoryCatalogSource(catalog_dir) as source, pytest.raises(NotFoundError) as excinfo:
        source.fetch_entry("does-not-exist")
    assert excinfo.value.identifier == "does-not-exist"


def test_missing_directory_is_transport_error(tmp_path: Path) -> None:
    with pytest.raises(TransportError), DirectoryCatalogSource(tmp_path / "absent"):
        pass


def test_invalid_frontmatter_raises_integrity_error(tmp_path: Path) -> None:
    entry_dir = tmp_path / "catalog" / "skills" / "broken-entry"
    entry_dir.mkdir(parents=True)
    (entry_dir / "SKILL.md").write_text("---\nname: [unclosed\n---\nbody\n", encoding="utf-8")

    with DirectoryCatalogSource(tmp_path / "catalog") as source, pytest.raises(CatalogIntegrityError):
        source.list_entries()


def test_non_utf8_primary_document_raises_integrity_error(catalog_dir: Path) -> None:
    (catalog_dir / "skills" / "writing-typescript" / "SKILL.md").write_bytes(b"---\ndescription: caf\xe9\n---\n")

    with DirectoryCatalogSource(catalog_dir) as source, pytest.raises(CatalogIntegrityError, match="not valid UTF-8"):
        source.list_entries()


def test_frontmatter_tags_tier_and_always_include() -> None:
    text = (
        "---\n"
        "name: skill-sync\n"
        "description: >\n  Keeps AGENTS.md\n  in sync.\n"
        "metadata:\n  triggers: React, nextjs\n"
        "tier: hybrid\n"
        "always_include: true\n"
        "---\nbody\n"
    )

    parsed = parse_skill_frontmatter(text, context="SKILL.md")

    assert parsed.description == "Keeps AGENTS.md in sync."
    assert parsed.trigger_tags == ("nextjs", "react")
    assert parsed.tier is CapabilityTier.HYBRID
    assert parsed.always_include is True


def test_templates_fall_back_to_bundled(catalog_dir: Path) -> None:
    with DirectoryCatalogSource(catalog_dir) as source:
        template = source.load_template(TemplateKind.ORCHESTRATION)
    assert template.origin == BUNDLED_ORIGIN
    assert "## Active Skills" in template.text


def test_catalog_templates_take_precedence(catalog_dir: Path) -> None:
    templates = catalog_dir / "templates"
    templates.mkdir()
    (templates / "SKILLS_README.template.md").write_text("custom\n## Catalog\n", encoding="utf-8")

    with DirectoryCatalogSource(catalog_dir) as source:
        template = source.load_template(TemplateKind.CATALOG_LISTING)

    assert template.text.startswith("custom")
    assert template.origin.endswith("templates/SKILLS_README.template.md")


def test_non_utf8_catalog_template_raises_schema_error(catalog_dir: Path) -> None:
    templates = catalog_dir / "templates"
    templates.mkdir()
    (templates / "AGENTS.template.md").write_bytes(b"# AGENTS caf\xe9\n")

    with DirectoryCatalogSource(catalog_dir) as source, pytest.raises(TemplateSchemaError, match="not valid UTF-8"):
        source.load_template(TemplateKind.ORCHESTRATION)


def test_local_zip_source_extracts_and_cleans_up(catalog_zip: Path) -> None:
    source = open_catalog_source(str(catalog_zip), timeout=5)
    assert isinstance(source, ArchiveCatalogSource)

    with source:
        temp_dir = source.temp_directory
        assert temp_dir is not None and temp_dir.is_dir()
        assert source.catalog_root.name == "skills-as-context-main"
        assert len(source.list_entries()) == 5

    assert not temp_dir.exists()
    assert source.temp_directory is None


class _FakeResponse:
    def __init__(self, payload: bytes, status: int = 200) -> None:
        self._payload = payload
        self.status_code = status

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def iter_content(self, chunk_size: int) -> list[bytes]:
        return [self._payload[index : index + chunk_size] for index in range(0, len(self._payload), chunk_size)]

    def close(self) -> None:
        self.closed = True


def test_remote_source_downloads_with_timeout(monkeypatch: pytest.MonkeyPatch, catalog_zip: Path) -> None:
    payload = catalog_zip.read_bytes()
    calls: list[dict[str, object]] = []

    def fake_get(url: str, **kwargs: object) -> _FakeResponse:
        calls.append({"url": url, **kwargs})
        return _FakeResponse(payload)

    monkeypatch.setattr("skillsync.catalog.archive.requests.get", fake_get)

    with open_catalog_source("https://example.test/catalog.zip", timeout=7.5) as source:
        identifiers = [entry.identifier for entry in source.list_entries()]

    assert identifiers[0] == "developing-with-nextjs"
    assert calls[0]["timeout"] == 7.5


def test_remote_timeout_becomes_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    created: list[Path] = []

    def fake_get(url: str, **kwargs: object) -> _FakeResponse:
        raise requests.Timeout("read timed out")

    monkeypatch.setattr("skillsync.catalog.archive.requests.get", fake_get)
    source = ArchiveCatalogSource("https://example.test/catalog.zip", timeout=0.5)

    with pytest.raises(TransportError, match="timed out"):
        with source:
            created.append(source.catalog_root)

    assert created == []
    assert source.temp_directory is None


class _TricklingResponse(_FakeResponse):
    def iter_content(self, chunk_size: int) -> Iterator[bytes]:
        while True:
            yield b"x"


def test_trickling_download_is_bounded_by_total_timeout(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    response = _TricklingResponse(b"")
    clock = itertools.count(0.0, 0.1)
    monkeypatch.setattr("skillsync.catalog.archive.requests.get", lambda url, **kwargs: response)
    monkeypatch.setattr("skillsync.catalog.archive.time.monotonic", lambda: next(clock))

    with pytest.raises(TransportError, match="timed out after 0.5s"):
        download_archive("https://example.test/catalog.zip", tmp_path / "catalog.zip", timeout=0.5)

    assert response.closed
    assert (tmp_path / "catalog.zip").stat().st_size <= 6


def test_http_error_status_is_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "skillsync.catalog.archive.requests.get",
        lambda url, **kwargs: _FakeResponse(b"", status=404),
    )
    with pytest.raises(TransportError, match="failed to download"):
        with open_catalog_source("https://example.test/missing.zip", timeout=1):
            pass


def test_corrupt_archive_is_transport_error(tmp_path: Path) -> None:
    archive = tmp_path / "broken.zip"
    archive.write_bytes(b"not a zip file")
    with pytest.raises(TransportError, match="corrupt"):
        with open_catalog_source(str(archive), timeout=1):
            pass


def test_archive_member_escaping_destination_is_rejected(tmp_path: Path) -> None:
    archive = tmp_path / "evil.zip"
    with zipfile.ZipFile(archive, "w") as handle:
        handle.writestr("../escape.txt", "boom")

    with pytest.raises(TransportError, match="unsafe path"):
        extract_archive(archive, tmp_path / "out")
    assert not (tmp_path / "escape.txt").exists()
