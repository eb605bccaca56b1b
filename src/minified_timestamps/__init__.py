"""Cache-busting timestamps for minified assets referenced from templates."""

from .config import StampConfig, TargetConfig, load_stamp_config
from .errors import (
    ArtifactWriteError,
    AssetVanishedError,
    ConfigError,
    MissingAssetError,
    SessionStateError,
    StampError,
    TemplateNotFoundError,
)
from .session import SessionState, SessionStore, StampSession, TemplateSnapshot

__all__ = [
    "ArtifactWriteError",
    "AssetVanishedError",
    "ConfigError",
    "MissingAssetError",
    "SessionState",
    "SessionStateError",
    "SessionStore",
    "StampConfig",
    "StampError",
    "StampSession",
    "TargetConfig",
    "TemplateNotFoundError",
    "TemplateSnapshot",
    "load_stamp_config",
]
