# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the sync pipeline state machine."""

from __future__ import annotations

from pathlib import Path

import pytest
import requests

from skillsync.catalog import DirectoryCatalogSource, FetchedEntry, open_catalog_source
from skillsync.config import SyncConfig
from skillsync.errors import ConflictError, NotFoundError, TransportError
from skillsync.findings import FindingSeverity
from skillsync.pipeline import EXIT_FAILED, EXIT_FINDINGS, EXIT_OK, SyncPipeline, SyncPlan, SyncState


def _config(project: Path, origin: Path | str, **overrides: object) -> SyncConfig:
    return SyncConfig(catalog_origin=str(origin), project_root=project, **{"assume_yes": True, **overrides})


def _run(project: Path, catalog: Path, **overrides: object):
    config = _config(project, catalog, **overrides)
    return SyncPipeline(config, DirectoryCatalogSource(catalog)).run()


def test_clean_run_reaches_verified(catalog_dir: Path, nextjs_project: Path) -> None:
    report = _run(nextjs_project, catalog_dir)

    assert report.state is SyncState.VERIFIED
    assert report.history == [
        SyncState.IDLE,
        SyncState.DISCOVERING,
        SyncState.MATCHING,
        SyncState.CONFIRMING,
        SyncState.RENDERING,
        SyncState.WRITING,
        SyncState.VERIFIED,
    ]
    assert report.state.is_terminal
    assert report.findings == []
    assert report.exit_code == EXIT_OK
    assert report.match is not None
    assert report.match.selected_ids == ("developing-with-nextjs", "styling-with-tailwind")
    assert len(report.installed) == 5
    assert (nextjs_project / "skills" / "developing-with-nextjs" / "assets" / "page.tsx").is_file()


def test_catalog_readme_is_not_copied_over_listing(catalog_dir: Path, nextjs_project: Path) -> None:
    _run(nextjs_project, catalog_dir)

    listing = (nextjs_project / "skills" / "README.md").read_text(encoding="utf-8")
    assert "Upstream catalog readme" not in listing
    assert "## Catalog" in listing


def test_second_run_is_byte_identical(catalog_dir: Path, nextjs_project: Path) -> None:
    _run(nextjs_project, catalog_dir)
    snapshot = {path: path.read_bytes() for path in nextjs_project.rglob("*") if path.is_file()}

    report = _run(nextjs_project, catalog_dir)

    assert report.installed == ()
    assert all(not result.changed for result in report.written)
    assert {path: path.read_bytes() for path in nextjs_project.rglob("*") if path.is_file()} == snapshot


def test_declining_confirmation_aborts_without_writing(catalog_dir: Path, nextjs_project: Path) -> None:
    seen: list[SyncPlan] = []

    def decline(plan: SyncPlan) -> bool:
        seen.append(plan)
        return False

    config = _config(nextjs_project, catalog_dir, assume_yes=False)
    report = SyncPipeline(config, DirectoryCatalogSource(catalog_dir), confirm=decline).run()

    assert report.state is SyncState.ABORTED
    assert report.exit_code == EXIT_FAILED
    assert seen[0].added == ("developing-with-nextjs", "styling-with-tailwind")
    assert not (nextjs_project / "AGENTS.md").exists()
    assert not (nextjs_project / "skills").exists()


def test_empty_manifest_verifies_with_warnings(catalog_dir: Path, empty_project: Path) -> None:
    report = _run(empty_project, catalog_dir)

    assert report.state is SyncState.VERIFIED
    assert report.exit_code == EXIT_FINDINGS
    assert report.match is not None and report.match.selected_ids == ()
    assert all(item.severity is FindingSeverity.WARNING for item in report.findings)
    assert not report.has_errors
    phases = {item.phase for item in report.findings}
    assert {"matching", "rendering"} <= phases
    assert "_(not set)_" in (empty_project / "AGENTS.md").read_text(encoding="utf-8")


def test_conflicting_agents_file_fails_before_any_write(catalog_dir: Path, nextjs_project: Path) -> None:
    agents = nextjs_project / "AGENTS.md"
    agents.write_text("# My own notes\n", encoding="utf-8")

    report = _run(nextjs_project, catalog_dir)

    assert report.state is SyncState.FAILED
    assert report.failed_phase is SyncState.WRITING
    assert isinstance(report.error, ConflictError)
    assert agents.read_text(encoding="utf-8") == "# My own notes\n"
    assert not (nextjs_project / "skills").exists()


def test_transport_timeout_fails_during_discovery(monkeypatch: pytest.MonkeyPatch, nextjs_project: Path) -> None:
    def fake_get(url: str, **kwargs: object) -> None:
        raise requests.Timeout("timed out")

    monkeypatch.setattr("skillsync.catalog.archive.requests.get", fake_get)
    origin = "https://example.test/catalog.zip"
    config = _config(nextjs_project, origin, timeout=0.1)

    report = SyncPipeline(config, open_catalog_source(origin, timeout=0.1)).run()

    assert report.state is SyncState.FAILED
    assert report.failed_phase is SyncState.DISCOVERING
    assert isinstance(report.error, TransportError)
    assert report.exit_code == EXIT_FAILED
    assert sorted(path.name for path in nextjs_project.iterdir()) == ["package.json"]


class _FlakySource(DirectoryCatalogSource):
    def fetch_entry(self, identifier: str) -> FetchedEntry:
        if identifier == "writing-typescript":
            raise NotFoundError(identifier)
        return super().fetch_entry(identifier)


def test_missing_entry_during_fetch_is_a_warning(catalog_dir: Path, nextjs_project: Path) -> None:
    config = _config(nextjs_project, catalog_dir)

    report = SyncPipeline(config, _FlakySource(catalog_dir)).run()

    assert report.state is SyncState.VERIFIED
    assert [(item.severity, item.subject) for item in report.findings] == [
        (FindingSeverity.WARNING, "writing-typescript"),
    ]
    assert not (nextjs_project / "skills" / "writing-typescript").exists()


def test_failed_run_has_terminal_state_and_preserves_report(catalog_dir: Path, nextjs_project: Path) -> None:
    (nextjs_project / "AGENTS.md").write_bytes(b"# Notes caf\xe9\n")

    report = _run(nextjs_project, catalog_dir)

    assert report.state.is_terminal
    assert report.failed_phase is SyncState.WRITING
    assert isinstance(report.error, ConflictError)
    assert report.history[-1] is SyncState.FAILED


def test_pipeline_runs_only_once(catalog_dir: Path, nextjs_project: Path) -> None:
    pipeline = SyncPipeline(_config(nextjs_project, catalog_dir), DirectoryCatalogSource(catalog_dir))
    pipeline.run()
    with pytest.raises(RuntimeError):
        pipeline.run()
