"""Image reference detection and identity construction."""

from __future__ import annotations

import logging
import re
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

from vision_insights.context.protocols import LinkResolver
from vision_insights.types import ImageIdentity, ImageReference, ReferenceKind

logger = logging.getLogger(__name__)

_MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "bmp": "image/bmp",
    "svg": "image/svg+xml",
    "avif": "image/avif",
    "tif": "image/tiff",
    "tiff": "image/tiff",
}
_DEFAULT_MIME_TYPE = "image/png"
_UNKNOWN_EXTERNAL = "unknown-external"

_IMAGE_REF_RE = re.compile(
    r"!\[\[(?P<wiki>[^\]]+?)\]\]"
    r"|!\[[^\]]*?\]\((?P<markdown>.*?)\)"
    r"|<img[^>]+src=[\"'](?P<html>.*?)[\"'][^>]*>",
    re.IGNORECASE,
)


def get_mime_type(extension: str) -> str:
    return _MIME_TYPES.get(extension.lower().lstrip("."), _DEFAULT_MIME_TYPE)


def is_external(target: str) -> bool:
    return target.startswith(("http://", "https://"))


def find_image_references(text: str) -> list[ImageReference]:
    """Every image embed in ``text``, in document order."""
    refs: list[ImageReference] = []
    for m in _IMAGE_REF_RE.finditer(text):
        kind = ReferenceKind(m.lastgroup)
        target = m.group(m.lastgroup).strip()
        if kind is ReferenceKind.WIKI:
            target = target.split("|", 1)[0].strip()
        elif kind is ReferenceKind.MARKDOWN:
            # Drop an optional "title" and angle brackets
            target = target.split(' "', 1)[0].strip().strip("<>")
        if not target:
            continue
        refs.append(
            ImageReference(
                raw=m.group(0),
                target=target,
                kind=kind,
                index=m.start(),
                length=m.end() - m.start(),
            )
        )
    return refs


def image_identity_from_reference(
    target: str,
    resolver: LinkResolver | None = None,
    source_id: str = "",
) -> ImageIdentity | None:
    """Build the identity of an embedded image.

    External URLs are identified by the URL itself. Vault images are
    resolved relative to ``source_id``; an unresolvable target returns None.
    """
    if is_external(target):
        name = PurePosixPath(urlparse(target).path).name or _UNKNOWN_EXTERNAL
        return ImageIdentity(
            path=target,
            url=target,
            is_external=True,
            filename=name,
            mime_type=get_mime_type(PurePosixPath(name).suffix),
        )

    decoded = unquote(target)
    if resolver is None:
        path = PurePosixPath(decoded)
        return ImageIdentity(
            path=str(path),
            url=target,
            filename=path.name,
            mime_type=get_mime_type(path.suffix),
        )

    file = resolver.resolve(decoded, source_id)
    if file is None:
        logger.warning("Could not resolve image path '%s' from '%s'", decoded, source_id)
        return None
    return ImageIdentity(
        path=file.path,
        url=target,
        filename=file.name,
        mime_type=get_mime_type(PurePosixPath(file.name).suffix),
    )
