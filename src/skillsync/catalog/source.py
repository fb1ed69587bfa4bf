# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Catalog origins exposing a uniform list/fetch interface."""

from __future__ import annotations

import logging
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from types import MappingProxyType, TracebackType

from ..documents import TemplateDocument, TemplateKind, load_bundled_template
from ..errors import NotFoundError, TemplateSchemaError, TransportError
from .archive import download_archive, extract_archive, is_remote_origin
from .models import CatalogEntry, FetchedEntry
from .scanner import CatalogScanner

logger = logging.getLogger(__name__)


class CatalogSource(ABC):
    """Enumerate and fetch catalog entries from a concrete origin."""

    def __init__(self, origin: str) -> None:
        """Record the human-readable ``origin`` of the catalog."""

        self.origin = origin
        self._entries: tuple[CatalogEntry, ...] | None = None

    @property
    @abstractmethod
    def catalog_root(self) -> Path:
        """Return the local directory containing ``skills/`` and ``templates/``."""

    def open(self) -> None:
        """Materialise the catalog locally; a no-op for directory origins."""

    def close(self) -> None:
        """Release any temporary storage owned by the source."""

    def __enter__(self) -> CatalogSource:
        try:
            self.open()
        except BaseException:
            self.close()
            raise
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def scanner(self) -> CatalogScanner:
        """Return a scanner bound to :attr:`catalog_root`."""

        return CatalogScanner(self.catalog_root)

    def list_entries(self) -> tuple[CatalogEntry, ...]:
        """Return catalog entries sorted by identifier.

        Returns:
            tuple[CatalogEntry, ...]: Entry metadata; repeated calls return the same tuple.

        Raises:
            TransportError: If the catalog directory cannot be read.
        """

        if self._entries is None:
            try:
                self._entries = self.scanner.entries()
            except OSError as exc:
                raise TransportError(f"{self.origin}: failed to read catalog: {exc}") from exc
        return self._entries

    def fetch_entry(self, identifier: str) -> FetchedEntry:
        """Return the primary document and sub-resources of ``identifier``.

        Args:
            identifier: Catalog entry identifier.

        Returns:
            FetchedEntry: Entry metadata with raw document bytes.

        Raises:
            NotFoundError: If ``identifier`` is not part of the catalog.
            TransportError: If reading the entry fails.
        """

        entry = next((item for item in self.list_entries() if item.identifier == identifier), None)
        if entry is None:
            raise NotFoundError(identifier)
        entry_dir = self.scanner.skills_root / identifier
        try:
            primary = (entry_dir / entry.primary_document).read_bytes()
            resources = {relative: (entry_dir / relative).read_bytes() for relative in entry.resources}
        except FileNotFoundError as exc:
            raise NotFoundError(identifier) from exc
        except OSError as exc:
            raise TransportError(f"{self.origin}: failed to read entry '{identifier}': {exc}") from exc
        return FetchedEntry(entry=entry, primary=primary, resources=MappingProxyType(resources))

    def load_template(self, kind: TemplateKind) -> TemplateDocument:
        """Return the catalog template of ``kind`` or the bundled fallback.

        Args:
            kind: Template to load.

        Returns:
            TemplateDocument: Template text and its origin.

        Raises:
            TransportError: If the catalog template cannot be read.
            TemplateSchemaError: If the catalog template is not UTF-8.
        """

        path = self.scanner.templates_root / kind.filename
        if not path.is_file():
            logger.debug("catalog has no %s; using bundled template", kind.filename)
            return load_bundled_template(kind)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise TransportError(f"{self.origin}: failed to read {kind.filename}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise TemplateSchemaError(
                f"{self.origin}: {kind.filename} is not valid UTF-8 ({exc.reason} at byte {exc.start})",
            ) from exc
        return TemplateDocument(kind=kind, text=text, origin=f"{self.origin}:templates/{kind.filename}")


class DirectoryCatalogSource(CatalogSource):
    """Catalog backed by a pre-populated local directory."""

    def __init__(self, root: Path) -> None:
        """Bind the source to ``root``."""

        super().__init__(str(root))
        self._root = root

    @property
    def catalog_root(self) -> Path:
        return self._root

    def open(self) -> None:
        if not self._root.is_dir():
            raise TransportError(f"catalog directory '{self._root}' does not exist")


class ArchiveCatalogSource(CatalogSource):
    """Catalog backed by a zip archive, remote or local, extracted to a temp directory."""

    def __init__(self, origin: str, *, timeout: float) -> None:
        """Bind the source to the archive ``origin``.

        Args:
            origin: HTTP(S) URL or local path of the zip archive.
            timeout: Download timeout in seconds for remote origins.
        """

        super().__init__(origin)
        self.timeout = timeout
        self._tempdir: Path | None = None
        self._root: Path | None = None

    @property
    def catalog_root(self) -> Path:
        if self._root is None:
            raise RuntimeError("archive catalog source used before open()")
        return self._root

    @property
    def temp_directory(self) -> Path | None:
        """Return the temporary directory owned by this source, if any."""

        return self._tempdir

    def open(self) -> None:
        if self._root is not None:
            return
        self._tempdir = Path(tempfile.mkdtemp(prefix="skillsync-"))
        if is_remote_origin(self.origin):
            archive_path = download_archive(self.origin, self._tempdir / "catalog.zip", timeout=self.timeout)
        else:
            archive_path = Path(self.origin).expanduser()
            if not archive_path.is_file():
                raise TransportError(f"catalog archive '{self.origin}' does not exist")
        self._root = extract_archive(archive_path, self._tempdir / "extracted")
        logger.debug("extracted catalog origin=%s root=%s", self.origin, self._root)

    def close(self) -> None:
        if self._tempdir is not None:
            shutil.rmtree(self._tempdir, ignore_errors=True)
        self._tempdir = None
        self._root = None
        self._entries = None


def open_catalog_source(origin: str, *, timeout: float) -> CatalogSource:
    """Return an unopened source appropriate for ``origin``.

    Args:
        origin: Local directory, local ``.zip`` file, or HTTP(S) archive URL.
        timeout: Download timeout in seconds for remote origins.

    Returns:
        CatalogSource: Source to be used as a context manager.
    """

    if is_remote_origin(origin):
        return ArchiveCatalogSource(origin, timeout=timeout)
    path = Path(origin).expanduser()
    if path.suffix.lower() == ".zip":
        return ArchiveCatalogSource(str(path), timeout=timeout)
    return DirectoryCatalogSource(path)


__all__ = [
    "ArchiveCatalogSource",
    "CatalogSource",
    "DirectoryCatalogSource",
    "open_catalog_source",
]
