"""Capture/apply sessions over the templates of one build target.

A session snapshots every asset referenced by the target's templates, lets
the build regenerate the minified artifacts, then timestamps whatever
changed and rewrites the templates:

    with StampSession(target) as session:
        session.capture()
        run_the_minifier()
        report = session.apply()
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from .config import TargetConfig
from .detector import changed_references
from .errors import (
    ArtifactWriteError,
    MissingAssetError,
    SessionStateError,
    StampError,
    TemplateNotFoundError,
)
from .reconcile import reconcile
from .rewriter import rewrite_template
from .scanner import extract_asset_references, unique_in_order
from .schemas.report import (
    ApplyReport,
    ArtifactUpdate,
    AssetRecord,
    CaptureReport,
    TemplateCapture,
)
from .snapshot import AssetSnapshot, SnapshotOutcome, read_asset
from .versions import TimestampClock

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Lifecycle of a session."""

    NEW = "new"
    OPEN = "open"
    CAPTURED = "captured"
    APPLIED = "applied"
    CLOSED = "closed"


@dataclass(slots=True)
class TemplateSnapshot:
    """Assets captured on one template, keyed by reference."""

    template: Path
    references: list[str]
    assets: dict[str, AssetSnapshot] = field(default_factory=dict)
    outcomes: list[SnapshotOutcome] = field(default_factory=list)


class SessionStore:
    """Template snapshots of one session; read-only once frozen."""

    def __init__(self) -> None:
        self._templates: dict[Path, TemplateSnapshot] = {}
        self._frozen = False

    def add(self, snapshot: TemplateSnapshot) -> None:
        if self._frozen:
            raise SessionStateError("Session store is read-only after capture")
        if snapshot.template in self._templates:
            raise SessionStateError(f"Template captured twice: {snapshot.template}")
        self._templates[snapshot.template] = snapshot

    def freeze(self) -> None:
        self._frozen = True

    def get(self, template: Path) -> TemplateSnapshot | None:
        return self._templates.get(template)

    def clear(self) -> None:
        self._templates.clear()

    def __iter__(self) -> Iterator[TemplateSnapshot]:
        return iter(self._templates.values())

    def __len__(self) -> int:
        return len(self._templates)

    def to_report(self, target: str) -> CaptureReport:
        templates = []
        for snapshot in self:
            records = []
            for outcome in snapshot.outcomes:
                asset = outcome.snapshot
                resolved = asset.resolved_path if asset else outcome.missing_path
                records.append(
                    AssetRecord(
                        reference=outcome.reference,
                        status=outcome.kind,
                        resolved_path=str(resolved) if resolved else None,
                        canonical_path=str(asset.canonical_path) if asset else None,
                        digest=asset.digest if asset else None,
                        mtime=asset.mtime.isoformat() if asset else None,
                    )
                )
            templates.append(TemplateCapture(template=str(snapshot.template), assets=records))
        return CaptureReport(target=target, templates=templates)


class StampSession:
    """One capture-then-apply cycle for a build target."""

    def __init__(
        self,
        target: TargetConfig,
        base_dir: Path | None = None,
        *,
        clock: TimestampClock | None = None,
    ):
        self.base_dir = base_dir or Path.cwd()
        self.target = target.rooted(self.base_dir)
        self.clock = clock or TimestampClock()
        self.state = SessionState.NEW
        self._store: SessionStore | None = None

    def __enter__(self) -> StampSession:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def store(self) -> SessionStore:
        if self._store is None:
            raise SessionStateError(f"Session is {self.state.value}; no store available")
        return self._store

    def _require(self, state: SessionState, action: str) -> None:
        if self.state is not state:
            raise SessionStateError(
                f"Cannot {action} a session in state {self.state.value!r} "
                f"(expected {state.value!r})"
            )

    def open(self) -> StampSession:
        self._require(SessionState.NEW, "open")
        self._store = SessionStore()
        self.state = SessionState.OPEN
        return self

    def close(self) -> None:
        if self._store is not None:
            self._store.clear()
        self._store = None
        self.state = SessionState.CLOSED

    def capture(self, templates: Iterable[Path] | None = None) -> SessionStore:
        """Snapshot every asset referenced by the target's templates.

        Args:
            templates: Explicit template list; defaults to the target's globs

        Raises:
            TemplateNotFoundError: A template cannot be read
            MissingAssetError: A local reference is missing and the policy is fatal
        """
        self._require(SessionState.OPEN, "capture")
        if templates is None:
            templates = self.target.template_paths(self.base_dir)
        paths = list(templates)
        patterns = self.target.compiled_patterns()
        try:
            for template in paths:
                self.store.add(self._capture_template(template, patterns))
        except StampError:
            self.close()
            raise
        self.store.freeze()
        self.state = SessionState.CAPTURED
        return self.store

    def _capture_template(
        self, template: Path, patterns: list[re.Pattern[str]]
    ) -> TemplateSnapshot:
        logger.info("Looking for assets on file: %s", template)
        try:
            text = template.read_text(encoding=self.target.template_encoding)
        except (FileNotFoundError, IsADirectoryError) as exc:
            raise TemplateNotFoundError(template) from exc

        references = extract_asset_references(patterns, text)
        snapshot = TemplateSnapshot(template=template, references=references)
        for reference in unique_in_order(references):
            outcome = read_asset(reference, self.target.asset_path)
            snapshot.outcomes.append(outcome)
            if outcome.kind == "missing":
                if self.target.missing_policy == "fatal":
                    raise MissingAssetError(reference, outcome.missing_path)
                logger.warning("Skipping missing asset: %s", outcome.missing_path)
            elif outcome.snapshot is not None:
                snapshot.assets[reference] = outcome.snapshot
        return snapshot

    def changed_references(self) -> list[str]:
        """Changed references across all templates, first-seen order."""
        changed: list[str] = []
        for snapshot in self.store:
            changed.extend(
                changed_references(
                    snapshot.assets,
                    self.target.asset_path,
                    template=snapshot.template,
                )
            )
        return unique_in_order(changed)

    def apply(self) -> ApplyReport:
        """Timestamp the changed artifacts and rewrite every template using them.

        Raises:
            SessionStateError: Capture has not completed
            AssetVanishedError: A captured asset no longer exists
            ArtifactWriteError: A new copy or a template could not be written
        """
        self._require(SessionState.CAPTURED, "apply")
        report = ApplyReport(target=self.target.name, timestamp=datetime.now(UTC).isoformat())
        try:
            report.changed_references = self.changed_references()
            if report.changed_references:
                self._apply_changes(report)
        except StampError:
            self.close()
            raise
        except OSError as exc:
            self.close()
            raise ArtifactWriteError(exc.filename, exc.strerror or str(exc)) from exc
        self.state = SessionState.APPLIED
        return report

    def _apply_changes(self, report: ApplyReport) -> None:
        plan = reconcile(report.changed_references, self.target.asset_path, self.clock)
        for snapshot in self.store:
            if rewrite_template(
                plan,
                snapshot.assets,
                snapshot.template,
                encoding=self.target.template_encoding,
            ):
                report.rewritten_templates.append(str(snapshot.template))

        report.artifacts = [
            ArtifactUpdate(
                canonical_path=str(artifact.details.canonical_path),
                new_path=str(artifact.details.new_path),
                references=artifact.references,
                deleted=[str(path) for path in artifact.deleted],
            )
            for artifact in plan.artifacts
        ]
