"""Error kinds raised by the timestamping engine.

Every fatal condition derives from ``StampError`` so the host can turn it
into a non-zero process exit with a single ``except`` clause.
"""

from __future__ import annotations

from pathlib import Path


class StampError(RuntimeError):
    """Base class for conditions that abort a whole session."""

    exit_code = 3


class ConfigError(StampError):
    """The configuration file or the requested target is unusable."""


class SessionStateError(StampError):
    """A session operation was called out of lifecycle order."""


class TemplateNotFoundError(StampError):
    """A template listed for a target could not be read."""

    def __init__(self, template: Path):
        super().__init__(f"Template not found: {template}")
        self.template = template


class MissingAssetError(StampError):
    """A local asset referenced from a template does not exist on disk."""

    def __init__(self, reference: str, path: Path):
        super().__init__(f"Asset not found: {path} (referenced as {reference!r})")
        self.reference = reference
        self.path = path


class AssetVanishedError(StampError):
    """An asset tracked during capture is gone by the time changes are applied."""

    def __init__(self, reference: str, template: Path | None = None):
        where = f" in {template}" if template is not None else ""
        super().__init__(f"Asset {reference!r}{where} disappeared since it was captured")
        self.reference = reference
        self.template = template


class ArtifactWriteError(StampError):
    """A timestamped copy or a rewritten template could not be written."""

    def __init__(self, path: str | Path | None, reason: str):
        super().__init__(f"Could not write {path}: {reason}")
        self.path = path
