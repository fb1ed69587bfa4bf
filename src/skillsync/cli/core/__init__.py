# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Core helpers shared by CLI command packages."""

from __future__ import annotations

from .shared import CLIError, CLILogger, build_cli_logger

__all__ = ["CLIError", "CLILogger", "build_cli_logger"]
