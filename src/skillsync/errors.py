# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Exception hierarchy raised by the skillsync pipeline."""

from __future__ import annotations


class SkillSyncError(RuntimeError):
    """Base class for failures raised by skillsync components."""


class TransportError(SkillSyncError):
    """Raised when the catalog origin is unreachable or the archive is corrupt."""


class NotFoundError(SkillSyncError, LookupError):
    """Raised when a requested catalog entry does not exist."""

    def __init__(self, identifier: str) -> None:
        """Create the error for the missing ``identifier``.

        Args:
            identifier: Catalog entry identifier that could not be resolved.
        """

        super().__init__(f"catalog entry '{identifier}' does not exist")
        self.identifier = identifier


class ConflictError(SkillSyncError):
    """Raised when an existing orchestration file cannot be merged safely."""

    def __init__(self, path: object, missing: tuple[str, ...] = (), *, reason: str | None = None) -> None:
        """Create the error describing why the existing file cannot be merged.

        Args:
            path: Filesystem path of the conflicting document.
            missing: Anchors the previous document was expected to contain.
            reason: Explanation used instead of the missing-anchor summary.
        """

        if reason is None:
            joined = ", ".join(repr(anchor) for anchor in missing)
            reason = f"existing file does not match the expected structure (missing {joined})"
        super().__init__(f"{path}: {reason}; resolve manually or move it aside")
        self.path = path
        self.missing = missing


class TemplateSchemaError(SkillSyncError):
    """Raised when a template drifts from the supported anchor schema."""


class CatalogIntegrityError(SkillSyncError):
    """Raised when catalog metadata violates structural invariants."""


__all__ = [
    "CatalogIntegrityError",
    "ConflictError",
    "NotFoundError",
    "SkillSyncError",
    "TemplateSchemaError",
    "TransportError",
]
