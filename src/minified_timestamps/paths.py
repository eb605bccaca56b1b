"""Translate asset references found in templates into filesystem paths."""

from __future__ import annotations

import os
import re

# {{ asset('relative/file/path') }} as used by twig/jinja helper calls
HELPER_CALL_PATTERN = re.compile(r"""^\{\{\s*asset\(\s*['"](.+)['"]\s*\)\s*\}\}$""", re.IGNORECASE)
EXTERNAL_PATTERN = re.compile(r"^(?:https?:)?//", re.IGNORECASE)
TIMESTAMP_SEGMENT_PATTERN = re.compile(r"\.min\.\d+\.")
DUPLICATE_SEPARATORS = re.compile(r"/{2,}")


def unwrap_helper_call(reference: str) -> str:
    """Return the literal inside a helper call, or the reference unchanged."""
    match = HELPER_CALL_PATTERN.match(reference.strip())
    if match is None:
        return reference
    return match.group(1)


def is_external(reference: str) -> bool:
    """Tell whether a reference points outside the local filesystem.

    Both the reference as written and its helper-call literal are tested.
    """
    return bool(
        EXTERNAL_PATTERN.match(reference) or EXTERNAL_PATTERN.match(unwrap_helper_call(reference))
    )


def resolve_asset_path(reference: str, asset_path: str) -> str:
    """Join the asset root and the reference literal, collapsing doubled slashes."""
    return DUPLICATE_SEPARATORS.sub("/", asset_path + unwrap_helper_call(reference))


def canonical_artifact_path(resolved_path: str) -> str:
    """Strip an embedded timestamp: ``style.min.123.css`` -> ``style.min.css``."""
    return TIMESTAMP_SEGMENT_PATTERN.sub(".min.", resolved_path, count=1)


def relative_to_root(resolved_path: str, asset_path: str) -> str:
    """Remove the asset root from a resolved path, as templates store it.

    Both sides are compared normalised, so ``./public/`` and ``public/`` name the same root.
    """
    root = DUPLICATE_SEPARATORS.sub("/", asset_path)
    if resolved_path.startswith(root):
        return resolved_path[len(root) :]
    normalized = os.path.normpath(resolved_path)
    normalized_root = os.path.normpath(root)
    if normalized_root == ".":
        return normalized if not os.path.isabs(normalized) else resolved_path
    prefix = normalized_root.rstrip("/") + "/"
    if normalized.startswith(prefix):
        return normalized[len(prefix) :]
    return resolved_path
