# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures building catalogs and target projects on disk."""

from __future__ import annotations

import json
import zipfile
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path

import pytest

SkillWriter = Callable[..., Path]

FIVE_ENTRY_CATALOG: tuple[tuple[str, str], ...] = (
    ("developing-with-nextjs", "Use when building Next.js App Router pages."),
    ("styling-with-tailwind", "Use when styling components with Tailwind CSS."),
    ("testing-with-playwright", "Use when writing end-to-end tests."),
    ("validating-with-zod", "Use when validating input with Zod schemas."),
    ("writing-typescript", "Use when writing strict TypeScript."),
)


def write_skill(
    catalog_root: Path,
    identifier: str,
    description: str,
    *,
    tags: Sequence[str] | None = None,
    tier: str | None = None,
    always_include: bool = False,
    resources: Mapping[str, str] | None = None,
    body: str = "Follow these instructions.\n",
) -> Path:
    """Create ``skills/<identifier>/SKILL.md`` (plus resources) under ``catalog_root``."""

    entry_dir = catalog_root / "skills" / identifier
    entry_dir.mkdir(parents=True, exist_ok=True)
    lines = ["---", f"name: {identifier}", f"description: {description}"]
    if tags is not None:
        lines.append("triggers: [" + ", ".join(tags) + "]")
    if tier is not None:
        lines.append(f"tier: {tier}")
    if always_include:
        lines.append("always_include: true")
    lines.extend(["---", "", f"# {identifier}", "", body])
    (entry_dir / "SKILL.md").write_text("\n".join(lines), encoding="utf-8")
    for relative, content in (resources or {}).items():
        target = entry_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return entry_dir


def write_manifest(project_root: Path, payload: Mapping[str, object]) -> Path:
    """Write ``package.json`` for ``project_root``."""

    project_root.mkdir(parents=True, exist_ok=True)
    path = project_root / "package.json"
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def zip_directory(source: Path, archive_path: Path, *, prefix: str = "skills-as-context-main") -> Path:
    """Zip ``source`` beneath a single top-level ``prefix`` folder."""

    with zipfile.ZipFile(archive_path, "w") as archive:
        for path in sorted(source.rglob("*")):
            if path.is_file():
                archive.write(path, f"{prefix}/{path.relative_to(source).as_posix()}")
    return archive_path


@pytest.fixture
def skill_writer() -> SkillWriter:
    """Return the helper that writes catalog entries."""

    return write_skill


@pytest.fixture
def catalog_dir(tmp_path: Path) -> Path:
    """Return a five-entry catalog directory using the bundled templates."""

    root = tmp_path / "catalog"
    for identifier, description in FIVE_ENTRY_CATALOG:
        write_skill(root, identifier, description)
    write_skill(
        root,
        "developing-with-nextjs",
        FIVE_ENTRY_CATALOG[0][1],
        resources={"assets/page.tsx": "export default function Page() { return null }\n"},
    )
    (root / "skills" / "README.md").write_text("# Upstream catalog readme\n", encoding="utf-8")
    return root


@pytest.fixture
def catalog_zip(tmp_path: Path, catalog_dir: Path) -> Path:
    """Return ``catalog_dir`` packed the way GitHub serves branch archives."""

    return zip_directory(catalog_dir, tmp_path / "catalog.zip")


@pytest.fixture
def nextjs_project(tmp_path: Path) -> Path:
    """Return a project whose manifest declares Next.js and Tailwind."""

    root = tmp_path / "project"
    write_manifest(
        root,
        {
            "name": "acme-storefront",
            "description": "Online storefront for Acme",
            "dependencies": {"next": "14.2.3", "tailwindcss": "3.4.1"},
        },
    )
    return root


@pytest.fixture
def empty_project(tmp_path: Path) -> Path:
    """Return a project with an empty ``package.json``."""

    root = tmp_path / "empty-project"
    write_manifest(root, {})
    return root
