"""Tests for template scanning."""

import re

from minified_timestamps.config import DEFAULT_PATTERNS, compile_pattern
from minified_timestamps.scanner import (
    extract_asset_references,
    iter_asset_references,
    unique_in_order,
)

SCRIPT, STYLESHEET = (compile_pattern(pattern) for pattern in DEFAULT_PATTERNS)


class TestScriptPattern:
    """Test the default script-src pattern."""

    def test_finds_script_sources(self):
        """Should find every js source, including several on one line."""
        text = '<script src="/a.min.js"></script><script type="module" src="b.js"></script>'
        assert list(iter_asset_references(SCRIPT, text)) == ["/a.min.js", "b.js"]

    def test_finds_helper_call(self):
        """Helper-call references are captured whole."""
        text = """<script src="{{ asset('js/app.min.js') }}"></script>"""
        assert list(iter_asset_references(SCRIPT, text)) == ["{{ asset('js/app.min.js') }}"]

    def test_ignores_stylesheets(self):
        """A template with only a stylesheet has no script references."""
        text = '<link rel="stylesheet" href="empty.css">'
        assert list(iter_asset_references(SCRIPT, text)) == []


class TestStylesheetPattern:
    """Test the default stylesheet-link pattern."""

    def test_finds_stylesheet_href(self):
        """Should capture the href of a stylesheet link."""
        text = '<link rel="stylesheet" media="screen" href="empty.css">'
        assert list(iter_asset_references(STYLESHEET, text)) == ["empty.css"]

    def test_finds_link_without_rel(self):
        """Links without a rel attribute are treated as stylesheets."""
        assert list(iter_asset_references(STYLESHEET, '<link href="a.css">')) == ["a.css"]

    def test_excludes_non_stylesheet_rel(self):
        """Canonical, alternate and icon links are skipped."""
        text = "\n".join(
            [
                '<link rel="canonical" href="https://example.com/">',
                '<link rel="alternate" hreflang="es" href="/es/">',
                '<link rel="shortcut icon" href="/favicon.ico">',
                '<link href="/feed.xml" rel="alternate">',
                '<link rel="stylesheet" href="/keep.css">',
            ]
        )
        assert list(iter_asset_references(STYLESHEET, text)) == ["/keep.css"]

    def test_case_insensitive(self):
        """Tag and attribute names match regardless of case."""
        assert list(iter_asset_references(STYLESHEET, '<LINK REL="stylesheet" HREF="a.css">')) == [
            "a.css"
        ]


class TestExtractAssetReferences:
    """Test multi-pattern extraction."""

    TEXT = "\n".join(
        [
            '<link rel="stylesheet" href="/a.css">',
            '<script src="/x.js"></script>',
            '<link rel="stylesheet" href="/a.css">',
            '<script src="/y.js"></script>',
        ]
    )

    def test_orders_by_pattern_then_position(self):
        """References are grouped by pattern, in text order within a pattern."""
        references = extract_asset_references([SCRIPT, STYLESHEET], self.TEXT)
        assert references == ["/x.js", "/y.js", "/a.css", "/a.css"]

    def test_is_repeatable(self):
        """Repeated extraction over the same text gives the same result."""
        patterns = [SCRIPT, STYLESHEET]
        assert extract_asset_references(patterns, self.TEXT) == extract_asset_references(
            patterns, self.TEXT
        )

    def test_pattern_without_matches_contributes_nothing(self):
        """Patterns that never match add no references."""
        nothing = re.compile(r'<img src="([^"]+)"')
        assert extract_asset_references([nothing, SCRIPT], self.TEXT) == ["/x.js", "/y.js"]

    def test_unique_in_order(self):
        """Deduplication keeps the first occurrence."""
        assert unique_in_order(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]
