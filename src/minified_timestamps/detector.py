"""Change detection against the snapshots taken during capture."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from .errors import AssetVanishedError
from .snapshot import AssetSnapshot, read_asset


def has_changed(
    old: AssetSnapshot,
    reference: str,
    asset_path: str,
    *,
    template: Path | None = None,
) -> bool:
    """Re-read ``reference`` and compare its bytes with the captured snapshot.

    Raises:
        AssetVanishedError: The asset can no longer be read.
    """
    outcome = read_asset(reference, asset_path)
    if outcome.snapshot is None:
        raise AssetVanishedError(reference, template)
    return outcome.snapshot.content != old.content


def changed_references(
    snapshots: Mapping[str, AssetSnapshot],
    asset_path: str,
    *,
    template: Path | None = None,
) -> list[str]:
    """Return the references of a template whose artifact changed, in order."""
    return [
        reference
        for reference, snapshot in snapshots.items()
        if has_changed(snapshot, reference, asset_path, template=template)
    ]
