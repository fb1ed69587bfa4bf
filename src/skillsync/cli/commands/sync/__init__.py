# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Sync CLI command package."""

from __future__ import annotations

from typer import Typer

from .command import sync_app

__all__ = ["register"]


def register(app: Typer) -> None:
    """Attach the ``sync`` command to the CLI application.

    Args:
        app: Typer application receiving the command.
    """

    app.add_typer(sync_app, name="sync")
