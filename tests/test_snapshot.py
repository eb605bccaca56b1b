"""Tests for asset snapshot reading."""

from pathlib import Path

from minified_timestamps.snapshot import read_asset


def _root(asset_root: Path) -> str:
    return f"{asset_root}/"


class TestReadAsset:
    """Test the tagged outcomes of read_asset."""

    def test_sibling_and_canonical_share_identity(self, asset_root: Path):
        """A timestamped sibling reads the canonical artifact's content."""
        sibling = read_asset("/css/style.min.456.css", _root(asset_root))
        canonical = read_asset("css/style.min.css", _root(asset_root))

        assert sibling.tracked and canonical.tracked
        assert sibling.snapshot.canonical_path == canonical.snapshot.canonical_path
        assert sibling.snapshot.canonical_path == asset_root / "css" / "style.min.css"
        assert sibling.snapshot.content == canonical.snapshot.content == b"body{color:red}"

    def test_records_resolved_path(self, asset_root: Path):
        """The snapshot keeps the path the reference itself resolved to."""
        outcome = read_asset("/css/style.min.123.css", _root(asset_root))
        assert outcome.snapshot.resolved_path == asset_root / "css" / "style.min.123.css"

    def test_helper_call_reference(self, asset_root: Path):
        """Helper-call references are read through their literal."""
        outcome = read_asset("{{ asset('js/app.min.77.js') }}", _root(asset_root))
        assert outcome.tracked
        assert outcome.snapshot.content == b"var a=1;"

    def test_external_reference(self, asset_root: Path):
        """External references are never looked up on disk."""
        outcome = read_asset("//cdn.example.com/lib.js", _root(asset_root))
        assert outcome.kind == "external"
        assert outcome.snapshot is None

    def test_missing_reference(self, asset_root: Path):
        """A missing referenced file is reported with its path."""
        outcome = read_asset("/css/nope.min.css", _root(asset_root))
        assert outcome.kind == "missing"
        assert outcome.missing_path == asset_root / "css" / "nope.min.css"

    def test_missing_canonical_parent(self, asset_root: Path):
        """A timestamped file whose canonical parent is gone counts as missing."""
        (asset_root / "css" / "lonely.min.5.css").write_text("a{}")
        outcome = read_asset("/css/lonely.min.5.css", _root(asset_root))
        assert outcome.kind == "missing"
        assert outcome.missing_path == asset_root / "css" / "lonely.min.css"

    def test_digest(self, asset_root: Path):
        """The digest identifies the canonical content."""
        outcome = read_asset("css/other.min.9.css", _root(asset_root))
        assert outcome.snapshot.digest.startswith("sha256:")
        canonical = read_asset("css/other.min.css", _root(asset_root))
        assert outcome.snapshot.digest == canonical.snapshot.digest
