"""ATX heading parsing and section resolution."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import reduce

from vision_insights.context.markup import mask_literal_blocks

_HEADING_RE = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?[ \t]*$", re.MULTILINE)
_CLOSING_HASHES_RE = re.compile(r"(?:^|[ \t]+)#+$")

SECTION_TEXT_LIMIT = 1200


@dataclass(frozen=True)
class Heading:
    level: int
    title: str
    offset: int
    line_end: int


@dataclass(frozen=True)
class Section:
    path: tuple[str, ...] = ()
    title: str = ""
    text: str = ""


def parse_headings(text: str) -> list[Heading]:
    """Collect ATX headings in document order.

    Lines inside the frontmatter block or a code fence are not headings.
    """
    headings: list[Heading] = []
    for m in _HEADING_RE.finditer(mask_literal_blocks(text)):
        title = _CLOSING_HASHES_RE.sub("", m.group(2) or "").strip()
        headings.append(
            Heading(level=len(m.group(1)), title=title, offset=m.start(), line_end=m.end())
        )
    return headings


def _push(stack: tuple[Heading, ...], heading: Heading) -> tuple[Heading, ...]:
    kept = tuple(h for h in stack if h.level < heading.level)
    return (*kept, heading)


def heading_stack(headings: list[Heading], offset: int) -> tuple[Heading, ...]:
    """Fold headings at or before ``offset`` into the enclosing heading path."""
    return reduce(_push, (h for h in headings if h.offset <= offset), ())


def section_at(text: str, offset: int, limit: int = SECTION_TEXT_LIMIT) -> Section:
    """Resolve the heading path and section body enclosing ``offset``."""
    headings = parse_headings(text)
    stack = heading_stack(headings, offset)
    if not stack:
        return Section()

    active = stack[-1]
    end = next(
        (h.offset for h in headings if h.offset > active.offset and h.level <= active.level),
        len(text),
    )
    body = text[active.line_end:end].strip()[:limit]
    return Section(path=tuple(h.title for h in stack), title=active.title, text=body)


def first_heading(text: str) -> str | None:
    for heading in parse_headings(text):
        if heading.title:
            return heading.title
    return None
