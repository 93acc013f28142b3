"""Shared Pydantic models for vision-insights."""

from __future__ import annotations

from enum import StrEnum
from pathlib import PurePosixPath
from typing import Any

from pydantic import AliasChoices, BaseModel, Field

# ── Enums ──


class VisionAction(StrEnum):
    SMART_SUMMARY = "smart-summary"
    EXTRACT_FACTS = "extract-facts"
    GENERATE_DESCRIPTION = "generate-description"
    IDENTIFY_TEXT = "identify-text"
    ANALYZE_STRUCTURE = "analyze-structure"
    QUICK_INSIGHTS = "quick-insights"
    ANALYZE_DATA_VIZ = "analyze-data-viz"
    ANALYZE_DIAGRAM = "analyze-diagram"
    EXTRACT_MEETING_PARTICIPANTS = "extract-meeting-participants"
    ANALYZE_MEETING_CONTENT = "analyze-meeting-content"
    CUSTOM_VISION = "custom-vision"

    @property
    def is_free_form(self) -> bool:
        return self is VisionAction.CUSTOM_VISION


class ReferenceKind(StrEnum):
    WIKI = "wiki"
    MARKDOWN = "markdown"
    HTML = "html"


# ── Document models ──


class NoteFile(BaseModel):
    """A vault file, addressed by its vault-relative POSIX path."""

    model_config = {"frozen": True}

    path: str

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def basename(self) -> str:
        return PurePosixPath(self.path).stem

    @property
    def extension(self) -> str:
        return PurePosixPath(self.path).suffix.lstrip(".").lower()


class ImageIdentity(BaseModel):
    """The subject of an analysis request."""

    model_config = {"frozen": True}

    path: str
    url: str = ""
    is_external: bool = False
    filename: str
    mime_type: str


class ImageReference(BaseModel):
    """One embed of an image as it literally appears in note text."""

    model_config = {"frozen": True}

    raw: str
    target: str
    kind: ReferenceKind
    index: int
    length: int


class Match(BaseModel):
    model_config = {"frozen": True}

    index: int
    length: int

    @property
    def end(self) -> int:
        return self.index + self.length


class RelatedLink(BaseModel):
    model_config = {"frozen": True}

    link_text: str
    path: str
    title: str
    excerpt: str


class NoteContext(BaseModel):
    """Snapshot of the note surrounding an embedded image."""

    model_config = {"frozen": True}

    note_name: str = ""
    note_path: str = ""
    text_before: str = ""
    text_after: str = ""
    match_index: int | None = None
    match_length: int | None = None
    section_path: tuple[str, ...] = ()
    section_title: str = ""
    section_text: str = ""
    related_links: tuple[RelatedLink, ...] = ()
    tags: tuple[str, ...] = ()
    frontmatter: dict[str, Any] = Field(default_factory=dict)


# ── Runtime models ──


class AnalysisResult(BaseModel):
    content: str
    model_used: str = ""
    tokens: int | None = None
    cached: bool = False


class CacheEntry(BaseModel):
    """A cached analysis result, persisted as ``{result, createdAt, action, imageHash}``."""

    model_config = {"populate_by_name": True}

    result: str
    created_at: int = Field(
        validation_alias=AliasChoices("createdAt", "created_at", "timestamp"),
        serialization_alias="createdAt",
    )
    action: str = ""
    image_hash: str = Field(
        default="",
        validation_alias=AliasChoices("imageHash", "image_hash"),
        serialization_alias="imageHash",
    )

    def is_expired(self, now_ms: int, max_age_ms: int) -> bool:
        return now_ms - self.created_at > max_age_ms

    def to_blob(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class CacheStats(BaseModel):
    """Entry counts by TTL status."""

    valid: int = 0
    expired: int = 0
    total: int = 0
