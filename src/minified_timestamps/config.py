"""Centralized configuration using pydantic-settings.

Process-wide defaults live in ``StampSettings`` and can be overridden via
environment variables with the MINSTAMP_ prefix. Build targets are declared
in a YAML file and validated into ``TargetConfig`` models.

Example:
    MINSTAMP_ASSET_PATH="public/"
    MINSTAMP_MISSING_POLICY=skip
"""

from __future__ import annotations

import glob
import re
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

# <script ... src="..."> pointing at a js file, helper-call wrapped or not
SCRIPT_SRC_PATTERN = r'<script[^>]*?\ssrc="([^"]+?\.js[^"]*)"'
# <link ... href="..."> except links whose rel is not a stylesheet
STYLESHEET_HREF_PATTERN = (
    r'<link(?![^>]*\srel="(?:canonical|alternate|[^"]*icon|preconnect|dns-prefetch)")'
    r'[^>]*?\shref="([^"]+)"'
)
DEFAULT_PATTERNS: tuple[str, ...] = (SCRIPT_SRC_PATTERN, STYLESHEET_HREF_PATTERN)

MissingPolicy = Literal["fatal", "skip"]


class StampSettings(BaseSettings):
    """Root configuration for the timestamping engine.

    Values here are the defaults every target falls back to.
    """

    model_config = SettingsConfigDict(env_prefix="MINSTAMP_")

    asset_path: str = Field(
        default="./",
        description="Directory the asset references in templates are relative to",
    )
    patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PATTERNS),
        description="Regular expressions extracting asset references (one capturing group)",
    )
    missing_policy: MissingPolicy = Field(
        default="fatal",
        description="What to do with a local reference whose file is missing",
    )
    template_encoding: str = Field(default="utf-8", description="Encoding of template files")


# Singleton instance
settings = StampSettings()


def reload_settings() -> StampSettings:
    """Re-read the defaults, e.g. after a .env file was loaded."""
    global settings
    settings = StampSettings()
    return settings


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile an extraction pattern, rejecting ones without exactly one group."""
    try:
        compiled = re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise ValueError(f"Invalid pattern {pattern!r}: {exc}") from exc
    if compiled.groups != 1:
        raise ValueError(
            f"Pattern {pattern!r} must have exactly one capturing group, has {compiled.groups}"
        )
    return compiled


def _has_magic(pattern: str) -> bool:
    return any(char in pattern for char in "*?[")


class TargetConfig(BaseModel):
    """Configuration of one build target."""

    name: str = Field(default="default", description="Target identifier")
    asset_path: str = Field(
        default_factory=lambda: settings.asset_path,
        validate_default=True,
        description="Asset root; always ends with a slash",
    )
    patterns: list[str] = Field(
        default_factory=lambda: list(settings.patterns),
        min_length=1,
        description="Extraction patterns applied in order",
    )
    templates: list[str] = Field(
        default_factory=list,
        description="Template files or glob patterns, in listing order",
    )
    missing_policy: MissingPolicy = Field(default_factory=lambda: settings.missing_policy)
    template_encoding: str = Field(default_factory=lambda: settings.template_encoding)

    @field_validator("asset_path")
    @classmethod
    def _ensure_trailing_slash(cls, value: str) -> str:
        if not value:
            return "./"
        return value if value.endswith("/") else value + "/"

    @field_validator("patterns")
    @classmethod
    def _check_patterns(cls, value: list[str]) -> list[str]:
        for pattern in value:
            compile_pattern(pattern)
        return value

    def compiled_patterns(self) -> list[re.Pattern[str]]:
        return [compile_pattern(pattern) for pattern in self.patterns]

    def rooted(self, base_dir: Path) -> TargetConfig:
        """Return a copy whose asset root is anchored at ``base_dir``."""
        root = Path(self.asset_path)
        if root.is_absolute():
            return self
        anchored = str(base_dir.resolve() / root).rstrip("/") + "/"
        return self.model_copy(update={"asset_path": anchored})

    def template_paths(self, base_dir: Path | None = None) -> list[Path]:
        """Expand the template globs in listing order.

        Plain (non-glob) entries are kept even when missing so the capture
        phase can report them.
        """
        base = base_dir or Path.cwd()
        found: list[Path] = []
        seen: set[Path] = set()
        for pattern in self.templates:
            if _has_magic(pattern):
                matches = [
                    Path(match)
                    for match in sorted(glob.glob(str(base / pattern), recursive=True))
                    if Path(match).is_file()
                ]
            else:
                matches = [base / pattern]
            for match in matches:
                if match not in seen:
                    seen.add(match)
                    found.append(match)
        return found


class StampConfig(BaseModel):
    """All build targets declared in a configuration file."""

    targets: dict[str, TargetConfig] = Field(min_length=1)

    @field_validator("targets", mode="before")
    @classmethod
    def _name_targets(cls, value: object) -> object:
        if not isinstance(value, dict):
            return value
        named: dict[str, object] = {}
        for name, target in value.items():
            if isinstance(target, dict):
                target = {"name": name, **target}
            named[name] = target
        return named

    def target(self, name: str) -> TargetConfig:
        try:
            return self.targets[name]
        except KeyError:
            available = ", ".join(sorted(self.targets))
            raise ConfigError(f"Unknown target {name!r} (available: {available})") from None


def load_stamp_config(path: Path) -> StampConfig:
    """Load target configuration from a YAML file.

    Relative asset roots are anchored at the file's directory.
    """
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping")
    try:
        config = StampConfig.model_validate(data.get("minified_timestamps", data))
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {path}:\n{exc}") from exc
    base_dir = path.resolve().parent
    return StampConfig(
        targets={name: target.rooted(base_dir) for name, target in config.targets.items()}
    )


def create_example_config() -> str:
    """Create example target configuration YAML."""
    return """# Minified asset timestamping configuration
minified_timestamps:
  targets:
    default:
      asset_path: public/
      templates:
        - templates/**/*.html
      missing_policy: fatal
    spa:
      asset_path: public/spa/
      templates:
        - spa/index.html
      patterns:
        - '<script[^>]*?\\ssrc="([^"]+?\\.js[^"]*)"'
"""
