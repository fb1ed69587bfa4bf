# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""List-catalog CLI command package."""

from __future__ import annotations

from typer import Typer

from .command import list_catalog_app

__all__ = ["register"]


def register(app: Typer) -> None:
    """Attach the ``list-catalog`` command to the CLI application.

    Args:
        app: Typer application receiving the command.
    """

    app.add_typer(list_catalog_app, name="list-catalog")
