"""Locate an image embed inside raw note text."""

from __future__ import annotations

import re

from vision_insights.types import Match


def build_reference_pattern(*candidates: str) -> re.Pattern[str] | None:
    """Compile one alternation matching any embed syntax for any candidate.

    Supported syntaxes: ``![[target]]`` (with optional ``|alias``),
    ``![alt](target)`` and ``<img src="target">``. Returns None when no
    usable candidate is given.
    """
    targets = list(dict.fromkeys(c for c in candidates if c))
    if not targets:
        return None
    alt = "|".join(re.escape(t) for t in targets)
    wiki = rf"!\[\[(?:{alt})(?:\|[^\]]*)?\]\]"
    markdown = rf"!\[[^\]]*\]\(\s*<?(?:{alt})>?(?:\s+\"[^\"]*\")?\s*\)"
    html = rf"<img\b[^>]*?\bsrc\s*=\s*[\"'](?:{alt})[\"'][^>]*>"
    return re.compile(f"{wiki}|{markdown}|{html}", re.IGNORECASE)


def locate_image_reference(text: str, vault_path: str, raw_reference: str = "") -> Match | None:
    """Return the span of the first embed of the image, or None if absent."""
    pattern = build_reference_pattern(vault_path, raw_reference)
    if pattern is None:
        return None
    found = pattern.search(text)
    if found is None:
        return None
    return Match(index=found.start(), length=found.end() - found.start())
