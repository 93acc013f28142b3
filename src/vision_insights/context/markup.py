"""Markdown regions that are not prose: the frontmatter block and code fences."""

from __future__ import annotations

import re

FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)

_FENCE_OPEN_RE = re.compile(r" {0,3}(`{3,}|~{3,})")
_FENCE_CLOSE_RE = re.compile(r" {0,3}(`{3,}|~{3,})[ \t]*")
_NOT_NEWLINE_RE = re.compile(r"[^\r\n]")


def literal_spans(text: str) -> list[tuple[int, int]]:
    """``(start, end)`` spans of the leading frontmatter and every fenced block.

    A fence closes on a line holding only a run of the same character at
    least as long as the opener. An unclosed fence runs to the end of text.
    """
    spans: list[tuple[int, int]] = []
    pos = 0
    frontmatter = FRONTMATTER_RE.match(text)
    if frontmatter:
        spans.append((0, frontmatter.end()))
        pos = frontmatter.end()

    fence: str | None = None
    start = 0
    for line in text[pos:].splitlines(keepends=True):
        content = line.rstrip("\r\n")
        if fence is None:
            m = _FENCE_OPEN_RE.match(content)
            if m:
                fence, start = m.group(1), pos
        else:
            m = _FENCE_CLOSE_RE.fullmatch(content)
            if m and m.group(1)[0] == fence[0] and len(m.group(1)) >= len(fence):
                spans.append((start, pos + len(line)))
                fence = None
        pos += len(line)
    if fence is not None:
        spans.append((start, len(text)))
    return spans


def mask_literal_blocks(text: str) -> str:
    """Blank out frontmatter and fenced code, keeping every offset and line break."""
    spans = literal_spans(text)
    if not spans:
        return text
    parts: list[str] = []
    cursor = 0
    for start, end in spans:
        parts.append(text[cursor:start])
        parts.append(_NOT_NEWLINE_RE.sub(" ", text[start:end]))
        cursor = end
    parts.append(text[cursor:])
    return "".join(parts)
