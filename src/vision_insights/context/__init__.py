"""Note context extraction — locate an embed and describe its surroundings."""

from vision_insights.context.extractor import build_context, normalize_tags
from vision_insights.context.headings import parse_headings, section_at
from vision_insights.context.links import LINK_WINDOW, collect_related_links, scan_wiki_links
from vision_insights.context.locator import locate_image_reference

__all__ = [
    "LINK_WINDOW",
    "build_context",
    "collect_related_links",
    "locate_image_reference",
    "normalize_tags",
    "parse_headings",
    "scan_wiki_links",
    "section_at",
]
