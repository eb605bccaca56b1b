"""Version details: everything needed to replace the timestamped copies of an asset."""

from __future__ import annotations

import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .paths import canonical_artifact_path, relative_to_root, resolve_asset_path

# characters that may continue a path on either side of a reference
_PATH_CHARS = r"\w./-"


class TimestampClock:
    """Wall-clock millisecond tokens that never repeat within one clock."""

    def __init__(self, now: Callable[[], float] = time.time):
        self._now = now
        self._last = 0

    def next_token(self) -> int:
        token = max(int(self._now() * 1000), self._last + 1)
        self._last = token
        return token


@dataclass(frozen=True, slots=True)
class VersionDetails:
    """Filesystem facts for managing the timestamped copies of one artifact."""

    directory: Path
    canonical_path: Path
    old_sibling_pattern: re.Pattern[str]
    new_path: Path
    token: int

    def is_old_sibling(self, path: Path) -> bool:
        return path.parent == self.directory and bool(self.old_sibling_pattern.match(path.name))


def _split_extension(name: str) -> tuple[str, str]:
    stem, dot, extension = name.rpartition(".")
    if not dot or not stem:
        return name, ""
    return stem, extension


def old_sibling_pattern(canonical: Path) -> re.Pattern[str]:
    """Match ``<stem>.<digits>.<ext>`` file names for a canonical artifact."""
    stem, extension = _split_extension(canonical.name)
    suffix = rf"\.{re.escape(extension)}" if extension else ""
    return re.compile(rf"^{re.escape(stem)}\.\d+{suffix}$")


def timestamped_name(canonical: Path, token: int) -> str:
    stem, extension = _split_extension(canonical.name)
    if not extension:
        return f"{stem}.{token}"
    return f"{stem}.{token}.{extension}"


def reference_pattern(reference: str, asset_path: str) -> re.Pattern[str]:
    """Locate a reference's root-relative path inside template text.

    The match must not be embedded in a longer path, and an optional leading
    slash is captured so the rewrite keeps it.
    """
    relative = relative_to_root(resolve_asset_path(reference, asset_path), asset_path)
    relative = relative.lstrip("/")
    return re.compile(rf"(?<![{_PATH_CHARS}])(/?){re.escape(relative)}(?![\w.-])")


def build_version_details(
    reference: str,
    asset_path: str,
    clock: TimestampClock,
) -> VersionDetails:
    """Compute the version details of the artifact behind ``reference``.

    The new token is bumped until its file name is free, so the new copy
    can never overwrite an existing file.
    """
    canonical = Path(canonical_artifact_path(resolve_asset_path(reference, asset_path)))
    directory = canonical.parent

    token = clock.next_token()
    new_path = directory / timestamped_name(canonical, token)
    while new_path.exists():
        token = clock.next_token()
        new_path = directory / timestamped_name(canonical, token)

    return VersionDetails(
        directory=directory,
        canonical_path=canonical,
        old_sibling_pattern=old_sibling_pattern(canonical),
        new_path=new_path,
        token=token,
    )
