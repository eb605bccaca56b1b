"""Shared test fixtures for the timestamping engine."""

from pathlib import Path

import pytest

from minified_timestamps.config import TargetConfig
from minified_timestamps.versions import TimestampClock

FIXED_NOW = 1_700_000_000.0
FIXED_TOKEN = 1_700_000_000_000

INDEX_HTML = """<!doctype html>
<html>
<head>
  <link rel="stylesheet" href="/css/style.min.123.css">
  <link rel="icon" href="/favicon.ico">
  <script src="{{ asset('js/app.min.77.js') }}"></script>
  <script src="//cdn.example.com/lib.js"></script>
</head>
<body></body>
</html>
"""

ABOUT_HTML = """<!doctype html>
<html>
<head>
  <link rel="stylesheet" media="screen" href="css/style.min.456.css">
  <link rel="stylesheet" href="/vendor/css/style.min.123.css">
</head>
</html>
"""


@pytest.fixture
def asset_root(tmp_path: Path) -> Path:
    """Create an asset tree with canonical artifacts and timestamped siblings."""
    root = tmp_path / "public"
    css = root / "css"
    js = root / "js"
    vendor = root / "vendor" / "css"
    css.mkdir(parents=True)
    js.mkdir()
    vendor.mkdir(parents=True)

    (css / "style.min.css").write_text("body{color:red}")
    (css / "style.min.123.css").write_text("body{color:red}")
    (css / "style.min.456.css").write_text("body{color:blue}")
    (css / "other.min.css").write_text("p{margin:0}")
    (css / "other.min.9.css").write_text("p{margin:0}")
    (js / "app.min.js").write_text("var a=1;")
    (js / "app.min.77.js").write_text("var a=1;")
    (vendor / "style.min.css").write_text("html{}")
    (vendor / "style.min.123.css").write_text("html{}")
    (root / "favicon.ico").write_bytes(b"\x00\x01")
    return root


@pytest.fixture
def templates(tmp_path: Path) -> list[Path]:
    """Create two templates sharing the same stylesheet under different names."""
    template_dir = tmp_path / "templates"
    template_dir.mkdir()
    index = template_dir / "index.html"
    about = template_dir / "about.html"
    index.write_text(INDEX_HTML)
    about.write_text(ABOUT_HTML)
    return [index, about]


@pytest.fixture
def target(asset_root: Path) -> TargetConfig:
    """Target rooted at the temporary asset tree."""
    return TargetConfig(name="default", asset_path=str(asset_root), templates=["templates/*.html"])


@pytest.fixture
def clock() -> TimestampClock:
    """Deterministic clock whose first token is FIXED_TOKEN."""
    return TimestampClock(now=lambda: FIXED_NOW)


@pytest.fixture
def config_file(tmp_path: Path, asset_root: Path, templates: list[Path]) -> Path:
    """Write a YAML configuration describing the temporary project."""
    path = tmp_path / "stamps.yaml"
    path.write_text(
        """minified_timestamps:
  targets:
    default:
      asset_path: public/
      templates:
        - templates/index.html
        - templates/about.html
"""
    )
    return path


@pytest.fixture
def fixed_token() -> int:
    """First token handed out by the ``clock`` fixture."""
    return FIXED_TOKEN
