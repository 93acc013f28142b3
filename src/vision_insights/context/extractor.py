"""Build a NoteContext snapshot around an image embed."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

from vision_insights.context.headings import section_at
from vision_insights.context.links import collect_related_links
from vision_insights.context.protocols import FileHandle, LinkResolver, MetadataCache
from vision_insights.types import Match, NoteContext, RelatedLink

logger = logging.getLogger(__name__)

_TAG_SPLIT_RE = re.compile(r"[,\s]+")


def build_context(
    document_text: str,
    match: Match | None,
    note: FileHandle | None = None,
    resolver: LinkResolver | None = None,
    metadata: MetadataCache | None = None,
) -> NoteContext:
    """Extract the structural context of an embed.

    When ``match`` is None the surrounding text is left empty and the
    section, link and tag lookups run as if the image sat at offset 0.
    Never raises because a collaborator failed; those parts come back empty.
    """
    if match is not None:
        index, length = match.index, match.length
        text_before = document_text[:index].strip()
        text_after = document_text[match.end:].strip()
    else:
        index, length = 0, 0
        text_before = text_after = ""

    section = section_at(document_text, index)
    related = _related_links(document_text, index, length, note, resolver, metadata)
    tags, frontmatter = _tags_and_frontmatter(note, metadata)

    return NoteContext(
        note_name=note.basename if note is not None else "",
        note_path=note.path if note is not None else "",
        text_before=text_before,
        text_after=text_after,
        match_index=match.index if match is not None else None,
        match_length=match.length if match is not None else None,
        section_path=section.path,
        section_title=section.title,
        section_text=section.text,
        related_links=related,
        tags=tags,
        frontmatter=frontmatter,
    )


def normalize_tags(*sources: Iterable[Any]) -> list[str]:
    """Merge tag lists, dropping a leading ``#``, non-strings and repeats."""
    seen: dict[str, None] = {}
    for source in sources:
        for tag in source:
            if not isinstance(tag, str):
                continue
            cleaned = tag.strip()
            if cleaned.startswith("#"):
                cleaned = cleaned[1:]
            if cleaned:
                seen.setdefault(cleaned, None)
    return list(seen)


def frontmatter_tags(frontmatter: dict[str, Any]) -> list[Any]:
    raw = frontmatter.get("tags")
    if raw is None:
        return []
    if isinstance(raw, str):
        return [t for t in _TAG_SPLIT_RE.split(raw) if t]
    if isinstance(raw, list):
        return raw
    logger.debug("Ignoring frontmatter tags of type %s", type(raw).__name__)
    return []


def _related_links(
    text: str,
    index: int,
    length: int,
    note: FileHandle | None,
    resolver: LinkResolver | None,
    metadata: MetadataCache | None,
) -> list[RelatedLink]:
    if resolver is None:
        return []
    source_id = note.path if note is not None else ""
    return collect_related_links(text, index, length, source_id, resolver, metadata)


def _tags_and_frontmatter(
    note: FileHandle | None,
    metadata: MetadataCache | None,
) -> tuple[list[str], dict[str, Any]]:
    if note is None or metadata is None:
        return [], {}

    try:
        raw_frontmatter = metadata.get_frontmatter(note)
    except Exception as e:
        logger.warning("Skipping frontmatter of %s: %s", note.path, e)
        raw_frontmatter = None
    frontmatter = dict(raw_frontmatter) if isinstance(raw_frontmatter, dict) else {}

    try:
        inline = metadata.get_tags(note) or []
    except Exception as e:
        logger.warning("Skipping inline tags of %s: %s", note.path, e)
        inline = []

    return normalize_tags(inline, frontmatter_tags(frontmatter)), frontmatter
