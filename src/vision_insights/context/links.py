"""Wiki-link scanning around an image embed."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from vision_insights.context.protocols import FileHandle, LinkResolver, MetadataCache
from vision_insights.types import RelatedLink

logger = logging.getLogger(__name__)

LINK_WINDOW = 800

# Embeds (``![[...]]``) are excluded by the lookbehind
_WIKI_LINK_RE = re.compile(r"(?<!!)\[\[([^\[\]|]+?)(?:\|([^\[\]]*?))?\]\]")
_SUBPATH_RE = re.compile(r"[#^].*$")


@dataclass(frozen=True)
class WikiLink:
    target: str
    alias: str | None
    offset: int

    @property
    def display_text(self) -> str:
        return self.alias or self.target


def scan_wiki_links(text: str, start: int = 0, end: int | None = None) -> list[WikiLink]:
    """Find wiki links lying entirely inside ``text[start:end]``."""
    end = len(text) if end is None else end
    links: list[WikiLink] = []
    for m in _WIKI_LINK_RE.finditer(text, start, end):
        target = m.group(1).strip()
        alias = (m.group(2) or "").strip() or None
        if target:
            links.append(WikiLink(target=target, alias=alias, offset=m.start()))
    return links


def link_window(text_length: int, index: int, length: int, window: int = LINK_WINDOW) -> tuple[int, int]:
    return max(0, index - window), min(text_length, index + length + window)


def collect_related_links(
    text: str,
    index: int,
    length: int,
    source_id: str,
    resolver: LinkResolver,
    metadata: MetadataCache | None = None,
    window: int = LINK_WINDOW,
) -> list[RelatedLink]:
    """Resolve the wiki links within ``window`` characters of the span.

    Unresolvable links are dropped. Order of appearance is preserved and
    repeated links are kept.
    """
    start, end = link_window(len(text), index, length, window)
    related: list[RelatedLink] = []
    for link in scan_wiki_links(text, start, end):
        label = _SUBPATH_RE.sub("", link.target).strip() or link.target
        try:
            file = resolver.resolve(label, source_id)
        except Exception as e:
            logger.debug("Link [[%s]] from %s failed to resolve: %s", label, source_id, e)
            continue
        if file is None:
            logger.debug("Dropping unresolved link [[%s]] from %s", label, source_id)
            continue
        related.append(
            RelatedLink(
                link_text=link.display_text,
                path=file.path,
                title=file.basename,
                excerpt=_excerpt(file, metadata),
            )
        )
    return related


def _excerpt(file: FileHandle, metadata: MetadataCache | None) -> str:
    if metadata is not None:
        try:
            heading = metadata.get_first_heading(file)
        except Exception as e:
            logger.debug("No heading available for %s: %s", file.path, e)
            heading = None
        if heading:
            return heading
    return file.basename
