"""Version reconciliation: one new timestamped copy per changed artifact."""

from __future__ import annotations

import logging
import re
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .paths import canonical_artifact_path, relative_to_root, resolve_asset_path
from .scanner import unique_in_order
from .versions import TimestampClock, VersionDetails, build_version_details, reference_pattern

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ArtifactVersion:
    """A canonical artifact that received a new timestamped copy."""

    details: VersionDetails
    references: list[str]
    deleted: list[Path] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class RewriteEntry:
    """Where one reference points after reconciliation."""

    reference: str
    new_path: Path
    pattern: re.Pattern[str]


@dataclass(slots=True)
class RewritePlan:
    """Mapping from every changed reference to its artifact's new copy."""

    asset_path: str
    entries: dict[str, RewriteEntry] = field(default_factory=dict)
    artifacts: list[ArtifactVersion] = field(default_factory=list)

    def __contains__(self, reference: object) -> bool:
        return reference in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def new_reference(self, reference: str) -> str:
        """Text that replaces ``reference``'s path inside a template."""
        return relative_to_root(str(self.entries[reference].new_path), self.asset_path)


def group_by_canonical(references: Iterable[str], asset_path: str) -> dict[Path, list[str]]:
    """Group references by the canonical artifact they resolve to, first-seen order."""
    groups: dict[Path, list[str]] = {}
    for reference in unique_in_order(references):
        canonical = Path(canonical_artifact_path(resolve_asset_path(reference, asset_path)))
        groups.setdefault(canonical, []).append(reference)
    return groups


def delete_old_versions(details: VersionDetails) -> list[Path]:
    """Delete every previous timestamped copy of the artifact.

    Failures are logged and skipped; the returned list holds what was removed.
    """
    deleted: list[Path] = []
    for path in sorted(details.directory.iterdir()):
        if not path.is_file() or not details.is_old_sibling(path):
            continue
        try:
            path.unlink()
        except OSError as exc:
            logger.warning("Could not delete old timestamped file %s: %s", path, exc)
            continue
        logger.info("Deleting old timestamped file: %s", path)
        deleted.append(path)
    return deleted


def write_timestamped_copy(details: VersionDetails) -> Path:
    """Copy the canonical artifact's current bytes to the new timestamped name."""
    shutil.copyfile(details.canonical_path, details.new_path)
    logger.info("Created timestamped file: %s", details.new_path)
    return details.new_path


def reconcile(
    references: Iterable[str],
    asset_path: str,
    clock: TimestampClock,
) -> RewritePlan:
    """Create the new timestamped copies and build the rewrite plan.

    Args:
        references: Changed references across all templates of a target
        asset_path: Asset root the references are relative to
        clock: Token source shared by the whole apply phase

    Returns:
        Plan mapping each reference to its artifact's single new copy
    """
    plan = RewritePlan(asset_path=asset_path)
    for references_group in group_by_canonical(references, asset_path).values():
        details = build_version_details(references_group[0], asset_path, clock)
        artifact = ArtifactVersion(details=details, references=references_group)
        artifact.deleted = delete_old_versions(details)
        write_timestamped_copy(details)
        plan.artifacts.append(artifact)

        for reference in references_group:
            plan.entries[reference] = RewriteEntry(
                reference=reference,
                new_path=details.new_path,
                pattern=reference_pattern(reference, asset_path),
            )
    return plan
