"""Filesystem vault — link resolution and note metadata over a notes directory."""

from __future__ import annotations

import logging
import re
from pathlib import Path, PurePosixPath
from typing import Any

import yaml

from vision_insights.context.headings import first_heading
from vision_insights.context.markup import FRONTMATTER_RE, mask_literal_blocks
from vision_insights.context.protocols import FileHandle
from vision_insights.errors.exceptions import MetadataError, ResolutionError
from vision_insights.types import NoteFile

logger = logging.getLogger(__name__)

_INLINE_TAG_RE = re.compile(r"(?<![\w/&#])#([\w/-]*[^\W\d][\w/-]*)")
_NOTE_SUFFIX = ".md"


class Vault:
    """A directory of markdown notes and attachments.

    Implements the link resolver and metadata cache interfaces used by
    the context extractor.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).resolve()
        self._files: list[NoteFile] | None = None

    @property
    def root(self) -> Path:
        return self._root

    def files(self) -> list[NoteFile]:
        if self._files is None:
            self._files = sorted(
                (
                    NoteFile(path=p.relative_to(self._root).as_posix())
                    for p in self._root.rglob("*")
                    if p.is_file() and not _is_hidden(p.relative_to(self._root))
                ),
                key=lambda f: f.path,
            )
        return self._files

    def refresh(self) -> None:
        self._files = None

    def file_for(self, path: Path | str) -> NoteFile:
        """Vault handle for a filesystem path or a vault-relative path."""
        p = Path(path)
        if p.is_absolute():
            p = p.resolve().relative_to(self._root)
        return NoteFile(path=p.as_posix())

    def read_text(self, file: FileHandle) -> str:
        return (self._root / file.path).read_text(encoding="utf-8")

    # ── LinkResolver ──

    def resolve(self, label: str, source_id: str) -> NoteFile | None:
        """Resolve a link label the way wiki links resolve in a vault.

        Tries the label relative to the linking note's folder, then from
        the vault root, then any file with that name (shortest path wins).
        A label also matches ``label.md``.
        """
        label = label.strip().lstrip("/")
        if not label:
            return None
        if ".." in PurePosixPath(label).parts:
            raise ResolutionError(f"Link escapes the vault: {label}", label=label, source=source_id)

        candidates = [label]
        if not label.lower().endswith(_NOTE_SUFFIX):
            candidates.append(label + _NOTE_SUFFIX)

        by_path = {f.path.lower(): f for f in self.files()}
        source_dir = PurePosixPath(source_id).parent
        for candidate in candidates:
            for full in (source_dir / candidate, PurePosixPath(candidate)):
                found = by_path.get(str(full).lower())
                if found is not None:
                    return found

        names = {PurePosixPath(c).name.lower() for c in candidates}
        matches = [f for f in self.files() if f.name.lower() in names]
        if not matches:
            return None
        return min(matches, key=lambda f: (len(PurePosixPath(f.path).parts), f.path))

    # ── MetadataCache ──

    def get_frontmatter(self, file: FileHandle) -> dict[str, Any] | None:
        return parse_frontmatter(self._read_note(file), file.path)

    def get_tags(self, file: FileHandle) -> list[str]:
        """Inline ``#tags`` of a note, with the leading ``#``."""
        return extract_inline_tags(self._read_note(file))

    def get_first_heading(self, file: FileHandle) -> str | None:
        return first_heading(strip_frontmatter(self._read_note(file)))

    def _read_note(self, file: FileHandle) -> str:
        if not file.path.lower().endswith(_NOTE_SUFFIX):
            return ""
        try:
            return self.read_text(file)
        except OSError as e:
            logger.warning("Cannot read note %s: %s", file.path, e)
            return ""


def parse_frontmatter(text: str, path: str = "") -> dict[str, Any] | None:
    """Parse a leading YAML frontmatter block.

    Raises MetadataError when the block exists but is not a YAML mapping.
    """
    m = FRONTMATTER_RE.match(text)
    if m is None:
        return None
    try:
        data = yaml.safe_load(m.group(1))
    except yaml.YAMLError as e:
        raise MetadataError(f"Invalid frontmatter in {path}: {e}", path=path) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MetadataError(
            f"Frontmatter in {path} is a {type(data).__name__}, not a mapping", path=path
        )
    return data


def strip_frontmatter(text: str) -> str:
    m = FRONTMATTER_RE.match(text)
    return text[m.end():] if m else text


def extract_inline_tags(text: str) -> list[str]:
    body = mask_literal_blocks(text)
    return [f"#{m.group(1)}" for m in _INLINE_TAG_RE.finditer(body)]


def _is_hidden(relative: Path) -> bool:
    return any(part.startswith(".") for part in relative.parts)
