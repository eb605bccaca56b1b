"""Template rewriting with the references chosen by reconciliation."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from .reconcile import RewritePlan

logger = logging.getLogger(__name__)


def rewrite_text(plan: RewritePlan, references: Iterable[str], text: str) -> str:
    """Substitute every planned reference found in ``text``."""
    for reference in references:
        if reference not in plan:
            continue
        replacement = plan.new_reference(reference)
        text = plan.entries[reference].pattern.sub(
            lambda match, new=replacement: match.group(1) + new,
            text,
        )
    return text


def rewrite_template(
    plan: RewritePlan,
    references: Iterable[str],
    template: Path,
    *,
    encoding: str = "utf-8",
) -> bool:
    """Rewrite a template in place.

    Returns:
        True when the template content changed and was written back
    """
    with open(template, encoding=encoding, newline="") as f:
        content = f.read()
    updated = rewrite_text(plan, references, content)
    if updated == content:
        return False
    with open(template, "w", encoding=encoding, newline="") as f:
        f.write(updated)
    logger.info("Updated asset references on template: %s", template)
    return True
