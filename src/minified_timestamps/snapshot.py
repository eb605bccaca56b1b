"""Asset snapshot reading.

A snapshot always describes the canonical (un-timestamped) artifact, because
the timestamp segment is the part of the reference that gets rewritten:
comparing the timestamped copy would never show drift.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Literal

from .paths import canonical_artifact_path, is_external, resolve_asset_path

logger = logging.getLogger(__name__)

SnapshotKind = Literal["tracked", "external", "missing"]


@dataclass(frozen=True, slots=True)
class AssetSnapshot:
    """Content and identity of the artifact behind one reference."""

    content: bytes
    canonical_path: Path
    resolved_path: Path
    mtime: datetime

    @property
    def digest(self) -> str:
        return f"sha256:{hashlib.sha256(self.content).hexdigest()}"


@dataclass(frozen=True, slots=True)
class SnapshotOutcome:
    """Tagged result of reading one reference.

    ``snapshot`` is set only for ``tracked`` outcomes; ``missing_path`` only
    for ``missing`` ones.
    """

    reference: str
    kind: SnapshotKind
    snapshot: AssetSnapshot | None = None
    missing_path: Path | None = None

    @property
    def tracked(self) -> bool:
        return self.kind == "tracked"


def read_asset(reference: str, asset_path: str) -> SnapshotOutcome:
    """Read the canonical artifact behind ``reference``.

    Args:
        reference: Asset reference exactly as written in the template
        asset_path: Asset root the reference is relative to

    Returns:
        ``external`` for URLs outside the filesystem, ``missing`` when the
        referenced file or its canonical parent does not exist, otherwise a
        ``tracked`` outcome carrying the snapshot.
    """
    if is_external(reference):
        logger.debug("No info for external file: %s", reference)
        return SnapshotOutcome(reference=reference, kind="external")

    resolved = Path(resolve_asset_path(reference, asset_path))
    if not resolved.is_file():
        return SnapshotOutcome(reference=reference, kind="missing", missing_path=resolved)

    canonical = Path(canonical_artifact_path(str(resolved)))
    try:
        stats = canonical.stat()
        content = canonical.read_bytes()
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
        return SnapshotOutcome(reference=reference, kind="missing", missing_path=canonical)

    snapshot = AssetSnapshot(
        content=content,
        canonical_path=canonical,
        resolved_path=resolved,
        mtime=datetime.fromtimestamp(stats.st_mtime, tz=UTC),
    )
    return SnapshotOutcome(reference=reference, kind="tracked", snapshot=snapshot)
