# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Synchronize a skill catalog into a project and render its orchestration files."""

from __future__ import annotations

from .config import MatchPolicy, SyncConfig
from .errors import (
    CatalogIntegrityError,
    ConflictError,
    NotFoundError,
    SkillSyncError,
    TemplateSchemaError,
    TransportError,
)
from .findings import Finding, FindingSeverity
from .pipeline import SyncPipeline, SyncPlan, SyncReport, SyncState

__version__ = "0.1.0"

__all__ = [
    "CatalogIntegrityError",
    "ConflictError",
    "Finding",
    "FindingSeverity",
    "MatchPolicy",
    "NotFoundError",
    "SkillSyncError",
    "SyncConfig",
    "SyncPipeline",
    "SyncPlan",
    "SyncReport",
    "SyncState",
    "TemplateSchemaError",
    "TransportError",
    "__version__",
]
