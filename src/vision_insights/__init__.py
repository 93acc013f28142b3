"""vision-insights — note context extraction and result caching for image analysis."""

from vision_insights.cache import JsonFileBlobStore, MemoryBlobStore, ResultCache, fingerprint
from vision_insights.context import build_context, locate_image_reference
from vision_insights.service import VisionService
from vision_insights.types import (
    AnalysisResult,
    ImageIdentity,
    NoteContext,
    NoteFile,
    VisionAction,
)

__all__ = [
    "AnalysisResult",
    "ImageIdentity",
    "JsonFileBlobStore",
    "MemoryBlobStore",
    "NoteContext",
    "NoteFile",
    "ResultCache",
    "VisionAction",
    "VisionService",
    "build_context",
    "fingerprint",
    "locate_image_reference",
]
