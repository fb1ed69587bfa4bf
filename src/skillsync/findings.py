# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Finding records surfaced in the final sync report."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class FindingSeverity(str, Enum):
    """Enumerate the severities a finding may carry."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class Finding:
    """Describe a non-fatal problem discovered during a sync run."""

    severity: FindingSeverity
    phase: str
    message: str
    subject: str | None = None

    @classmethod
    def warning(cls, phase: str, message: str, *, subject: str | None = None) -> Finding:
        """Return a warning finding for ``phase``."""

        return cls(FindingSeverity.WARNING, phase, message, subject)

    @classmethod
    def error(cls, phase: str, message: str, *, subject: str | None = None) -> Finding:
        """Return an error finding for ``phase``."""

        return cls(FindingSeverity.ERROR, phase, message, subject)

    def render(self) -> str:
        """Return a single-line, human-readable representation.

        Returns:
            str: Message prefixed with the severity and phase.
        """

        return f"[{self.severity.value}] {self.phase}: {self.message}"


def count_by_severity(findings: Iterable[Finding]) -> dict[FindingSeverity, int]:
    """Return the number of findings recorded per severity.

    Args:
        findings: Findings to tally.

    Returns:
        dict[FindingSeverity, int]: Counts keyed by every known severity.
    """

    counts = {severity: 0 for severity in FindingSeverity}
    for finding in findings:
        counts[finding.severity] += 1
    return counts


__all__ = ["Finding", "FindingSeverity", "count_by_severity"]
