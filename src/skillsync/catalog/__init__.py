# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Catalog discovery, models, and origin adapters."""

from __future__ import annotations

from .models import CapabilityTier, CatalogEntry, FetchedEntry
from .scanner import CatalogScanner
from .source import ArchiveCatalogSource, CatalogSource, DirectoryCatalogSource, open_catalog_source

__all__ = [
    "ArchiveCatalogSource",
    "CapabilityTier",
    "CatalogEntry",
    "CatalogScanner",
    "CatalogSource",
    "DirectoryCatalogSource",
    "FetchedEntry",
    "open_catalog_source",
]
