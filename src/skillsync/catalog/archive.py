# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Download and extraction helpers for zipped catalog archives."""

from __future__ import annotations

import logging
import time
import zipfile
from pathlib import Path, PurePosixPath
from typing import Final
from urllib.parse import urlparse

import requests

from ..errors import TransportError

_SUPPORTED_SCHEMES: Final[frozenset[str]] = frozenset({"http", "https"})
_CHUNK_SIZE: Final[int] = 64 * 1024
_USER_AGENT: Final[str] = "skillsync/1.0"

logger = logging.getLogger(__name__)


def is_remote_origin(origin: str) -> bool:
    """Return whether ``origin`` is an HTTP(S) URL."""

    return urlparse(origin).scheme.lower() in _SUPPORTED_SCHEMES


def download_archive(url: str, destination: Path, *, timeout: float) -> Path:
    """Download ``url`` into ``destination`` within ``timeout`` seconds overall.

    ``timeout`` applies to the connection and to each read as well as to the
    whole transfer; a server trickling bytes cannot stall the download.

    Args:
        url: HTTP(S) URL of the catalog archive.
        destination: File path receiving the archive bytes.
        timeout: Connect, read and overall transfer limit in seconds.

    Returns:
        Path: ``destination`` once the download completes.

    Raises:
        TransportError: If the request fails, times out, or returns an error status.
    """

    if not is_remote_origin(url):
        raise TransportError(f"unsupported download scheme for '{url}'")
    logger.debug("downloading catalog archive url=%s timeout=%s", url, timeout)
    deadline = time.monotonic() + timeout
    try:
        response = requests.get(url, timeout=timeout, stream=True, headers={"User-Agent": _USER_AGENT})
        try:
            response.raise_for_status()
            destination.parent.mkdir(parents=True, exist_ok=True)
            with destination.open("wb") as handle:
                for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                    if time.monotonic() > deadline:
                        raise TransportError(f"timed out after {timeout:g}s fetching {url}")
                    if chunk:
                        handle.write(chunk)
        finally:
            response.close()
    except requests.Timeout as exc:
        raise TransportError(f"timed out after {timeout:g}s fetching {url}") from exc
    except requests.RequestException as exc:
        raise TransportError(f"failed to download {url}: {exc}") from exc
    return destination


def extract_archive(archive_path: Path, destination: Path) -> Path:
    """Safely extract ``archive_path`` and return the catalog root inside it.

    The catalog root is the archive's single top-level directory when there is
    one (GitHub archives wrap everything in ``<repo>-<branch>/``), otherwise
    ``destination`` itself.

    Args:
        archive_path: Zip archive to extract.
        destination: Empty directory receiving the extracted members.

    Returns:
        Path: Directory containing ``skills/`` and ``templates/``.

    Raises:
        TransportError: If the archive is corrupt or contains unsafe member paths.
    """

    root = destination.resolve()
    try:
        with zipfile.ZipFile(archive_path) as archive:
            for name in archive.namelist():
                _ensure_safe_member(name, root)
            archive.extractall(root)
    except zipfile.BadZipFile as exc:
        raise TransportError(f"{archive_path.name}: catalog archive is corrupt") from exc
    except OSError as exc:
        raise TransportError(f"{archive_path.name}: failed to extract archive: {exc}") from exc

    children = [child for child in root.iterdir() if not child.name.startswith("__MACOSX")]
    if len(children) == 1 and children[0].is_dir():
        return children[0]
    return root


def _ensure_safe_member(name: str, root: Path) -> None:
    member = PurePosixPath(name)
    if member.is_absolute() or ".." in member.parts:
        raise TransportError(f"unsafe path detected in archive: {name}")
    resolved = (root / name).resolve()
    if resolved != root and root not in resolved.parents:
        raise TransportError(f"unsafe path detected in archive: {name}")


__all__ = ["download_archive", "extract_archive", "is_remote_origin"]
