# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Sequential state machine that drives one catalog synchronization."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .catalog.models import FetchedEntry
from .catalog.source import CatalogSource
from .config import SyncConfig
from .documents import RenderedDocument, TemplateKind
from .errors import NotFoundError, SkillSyncError
from .findings import Finding, FindingSeverity
from .inspector import ProjectInspector, StackFingerprint
from .matcher import MatchResult, SkillMatcher
from .rendering import TemplateRenderer
from .verifier import verify
from .writer import OrchestrationWriter, PreparedWrite, WriteResult, install_entries, read_previous

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_FINDINGS = 2


class SyncState(str, Enum):
    """Enumerate pipeline states in the order they are entered."""

    IDLE = "idle"
    DISCOVERING = "discovering"
    MATCHING = "matching"
    CONFIRMING = "confirming"
    RENDERING = "rendering"
    WRITING = "writing"
    VERIFIED = "verified"
    FAILED = "failed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        """Return whether no further transition can follow this state."""

        return self in {SyncState.VERIFIED, SyncState.FAILED, SyncState.ABORTED}


@dataclass(frozen=True, slots=True)
class SyncPlan:
    """Selection summary presented to the user before anything is written."""

    project_root: Path
    catalog_origin: str
    fingerprint: StackFingerprint
    match: MatchResult

    @property
    def added(self) -> tuple[str, ...]:
        """Return selected identifiers absent from the previous ``AGENTS.md``."""

        return tuple(item for item in self.match.selected_ids if item not in self.fingerprint.previous_entries)

    @property
    def removed(self) -> tuple[str, ...]:
        """Return identifiers listed previously that are no longer selected."""

        selected = set(self.match.selected_ids)
        return tuple(sorted(item for item in self.fingerprint.previous_entries if item not in selected))


ConfirmCallback = Callable[[SyncPlan], bool]


@dataclass(slots=True)
class SyncReport:
    """Terminal outcome of a pipeline run."""

    state: SyncState
    history: list[SyncState] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)
    failed_phase: SyncState | None = None
    error: Exception | None = None
    plan: SyncPlan | None = None
    written: tuple[WriteResult, ...] = ()
    installed: tuple[str, ...] = ()

    @property
    def match(self) -> MatchResult | None:
        """Return the match result when matching completed."""

        return self.plan.match if self.plan is not None else None

    @property
    def has_errors(self) -> bool:
        """Return whether any finding carries error severity."""

        return any(finding.severity is FindingSeverity.ERROR for finding in self.findings)

    @property
    def exit_code(self) -> int:
        """Return the process exit code implied by the outcome.

        Returns:
            int: ``0`` for a clean verified run, ``2`` when findings exist, ``1`` otherwise.
        """

        if self.state is not SyncState.VERIFIED:
            return EXIT_FAILED
        return EXIT_FINDINGS if self.findings else EXIT_OK


class SyncPipeline:
    """Run discovery, matching, confirmation, rendering, writing and verification."""

    def __init__(
        self,
        config: SyncConfig,
        source: CatalogSource,
        confirm: ConfirmCallback | None = None,
        *,
        writer: OrchestrationWriter | None = None,
    ) -> None:
        """Bind the pipeline to its configuration and collaborators.

        Args:
            config: Settings for this run.
            source: Unopened catalog source; the pipeline opens and closes it.
            confirm: Callback deciding whether to proceed past ``Confirming``.
                Ignored when ``config.assume_yes`` is set.
            writer: Optional writer override.
        """

        self.config = config
        self.source = source
        self.confirm = confirm
        self.writer = writer or OrchestrationWriter()
        self.state = SyncState.IDLE
        self.history: list[SyncState] = [SyncState.IDLE]
        self._findings: list[Finding] = []

    def _enter(self, state: SyncState) -> None:
        if self.state.is_terminal:
            raise RuntimeError(f"cannot leave terminal state {self.state.value}")
        logger.debug("sync state %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _record(self, phase: SyncState, messages: tuple[str, ...] | list[str]) -> None:
        self._findings.extend(Finding.warning(phase.value, message) for message in messages)

    def run(self) -> SyncReport:
        """Execute the pipeline once and return its report.

        Returns:
            SyncReport: Terminal state, findings and written files.
        """

        if self.state is not SyncState.IDLE:
            raise RuntimeError("a SyncPipeline instance runs only once")
        report = SyncReport(state=SyncState.IDLE)
        try:
            with self.source:
                self._run_phases(report)
        except (SkillSyncError, OSError) as exc:
            report.failed_phase = self.state
            report.error = exc
            logger.debug("sync failed during %s: %s", self.state.value, exc)
            self._enter(SyncState.FAILED)
        report.state = self.state
        report.history = list(self.history)
        report.findings = list(self._findings)
        return report

    def _run_phases(self, report: SyncReport) -> None:
        config = self.config

        self._enter(SyncState.DISCOVERING)
        entries = self.source.list_entries()
        inspector = ProjectInspector(project_name=config.project_name, purpose=config.purpose)
        fingerprint = inspector.inspect(config.project_root)
        self._record(SyncState.DISCOVERING, fingerprint.warnings)

        self._enter(SyncState.MATCHING)
        match = SkillMatcher(policy=config.match_policy).match(fingerprint, entries)
        self._record(SyncState.MATCHING, match.warnings)
        report.plan = SyncPlan(
            project_root=config.project_root,
            catalog_origin=self.source.origin,
            fingerprint=fingerprint,
            match=match,
        )

        self._enter(SyncState.CONFIRMING)
        if not config.assume_yes and self.confirm is not None and not self.confirm(report.plan):
            self._enter(SyncState.ABORTED)
            return

        self._enter(SyncState.RENDERING)
        renderer = TemplateRenderer(strict=config.strict_templates)
        rendered = {
            kind: renderer.render(self.source.load_template(kind), fingerprint, match) for kind in TemplateKind
        }
        for document in rendered.values():
            self._record(SyncState.RENDERING, document.warnings)
        fetched = self._fetch_all(match)

        self._enter(SyncState.WRITING)
        prepared = self._prepare(rendered)
        report.installed = install_entries(config.skills_dir, fetched)
        report.written = tuple(self.writer.commit(item) for item in prepared)

        self._findings.extend(verify(config.orchestration_path, match, config.skills_dir, listing_path=config.listing_path))
        self._enter(SyncState.VERIFIED)

    def _fetch_all(self, match: MatchResult) -> list[FetchedEntry]:
        fetched: list[FetchedEntry] = []
        for identifier in match:
            try:
                fetched.append(self.source.fetch_entry(identifier))
            except NotFoundError as exc:
                self._findings.append(Finding.warning(SyncState.RENDERING.value, str(exc), subject=identifier))
        return fetched

    def _prepare(self, rendered: dict[TemplateKind, RenderedDocument]) -> tuple[PreparedWrite, ...]:
        """Merge both documents before the first mutation; README is committed first."""

        targets = (
            (self.config.listing_path, rendered[TemplateKind.CATALOG_LISTING]),
            (self.config.orchestration_path, rendered[TemplateKind.ORCHESTRATION]),
        )
        prepared = tuple(self.writer.prepare(path, document, read_previous(path)) for path, document in targets)
        for item in prepared:
            if item.preserved_sections:
                logger.debug("preserving sections of %s: %s", item.target_path.name, ", ".join(item.preserved_sections))
        return prepared


__all__ = [
    "ConfirmCallback",
    "EXIT_FAILED",
    "EXIT_FINDINGS",
    "EXIT_OK",
    "SyncPipeline",
    "SyncPlan",
    "SyncReport",
    "SyncState",
]
