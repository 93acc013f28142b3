"""Analysis service — context, fingerprint, cache lookup, then analyzer call."""

from __future__ import annotations

import logging
from typing import Protocol

from vision_insights.cache.keys import fingerprint, hash_image
from vision_insights.cache.store import ResultCache
from vision_insights.concurrency.rate_limiter import RequestThrottle
from vision_insights.config.schema import Settings
from vision_insights.context.extractor import build_context
from vision_insights.context.locator import locate_image_reference
from vision_insights.context.protocols import FileHandle, LinkResolver, MetadataCache
from vision_insights.errors.exceptions import ResolutionError
from vision_insights.image import find_image_references, image_identity_from_reference
from vision_insights.types import AnalysisResult, ImageIdentity, NoteContext, VisionAction

logger = logging.getLogger(__name__)


class Analyzer(Protocol):
    """The external vision model call."""

    async def analyze(
        self,
        identity: ImageIdentity,
        action: VisionAction,
        context: NoteContext | None,
        instruction: str | None,
    ) -> AnalysisResult: ...


class VisionService:
    """Runs one analysis request end to end: context → cache → analyzer."""

    def __init__(
        self,
        analyzer: Analyzer,
        cache: ResultCache | None = None,
        resolver: LinkResolver | None = None,
        metadata: MetadataCache | None = None,
        throttle: RequestThrottle | None = None,
    ) -> None:
        self._analyzer = analyzer
        self._cache = cache
        self._resolver = resolver
        self._metadata = metadata
        self._throttle = throttle or RequestThrottle()

    @classmethod
    def from_settings(
        cls,
        analyzer: Analyzer,
        settings: Settings,
        resolver: LinkResolver | None = None,
        metadata: MetadataCache | None = None,
    ) -> VisionService:
        """Service with its cache and request pacing taken from settings."""
        return cls(
            analyzer,
            cache=ResultCache.from_settings(settings),
            resolver=resolver,
            metadata=metadata,
            throttle=RequestThrottle(min_interval_ms=settings.rate_limit_delay_ms),
        )

    @property
    def cache(self) -> ResultCache | None:
        return self._cache

    @property
    def throttle(self) -> RequestThrottle:
        return self._throttle

    def context_for(
        self,
        document_text: str,
        note: FileHandle | None,
        identity: ImageIdentity,
    ) -> NoteContext:
        match = locate_image_reference(document_text, identity.path, identity.url)
        if match is None:
            logger.debug("Image %s not found in note text, using empty context", identity.path)
        return build_context(
            document_text, match, note=note, resolver=self._resolver, metadata=self._metadata
        )

    async def analyze(
        self,
        document_text: str,
        note: FileHandle | None,
        identity: ImageIdentity,
        action: VisionAction | str,
        instruction: str | None = None,
    ) -> AnalysisResult:
        """Analyze one image, serving a cached result when one exists.

        Errors raised by the analyzer propagate; nothing is cached then.
        """
        action = VisionAction(action)
        if action.is_free_form and not (instruction and instruction.strip()):
            raise ValueError(f"Action '{action}' requires an instruction")

        async with self._throttle:
            context = self.context_for(document_text, note, identity)
            key = fingerprint(identity, action, context, instruction)

            if self._cache is not None:
                cached = self._cache.get(key)
                if cached is not None:
                    logger.info("Cache hit for %s (%s)", identity.filename, action)
                    return AnalysisResult(content=cached, cached=True)
                logger.info("Cache miss for %s (%s)", identity.filename, action)

            result = await self._analyzer.analyze(identity, action, context, instruction)

            if self._cache is not None:
                self._cache.put(key, result.content, action=action, image_hash=hash_image(identity))

        logger.info(
            "Analyzed %s with %s (model=%s, tokens=%s)",
            identity.filename,
            action,
            result.model_used or "-",
            result.tokens if result.tokens is not None else "-",
        )
        return result

    async def analyze_note(
        self,
        document_text: str,
        note: FileHandle | None,
        action: VisionAction | str,
        instruction: str | None = None,
    ) -> list[tuple[ImageIdentity, AnalysisResult]]:
        """Analyze every resolvable image embedded in a note, in order."""
        source_id = note.path if note is not None else ""
        results: list[tuple[ImageIdentity, AnalysisResult]] = []
        seen: set[str] = set()
        for ref in find_image_references(document_text):
            try:
                identity = image_identity_from_reference(ref.target, self._resolver, source_id)
            except ResolutionError as e:
                logger.warning("Skipping image %s: %s", ref.target, e)
                continue
            if identity is None or identity.path in seen:
                continue
            seen.add(identity.path)
            result = await self.analyze(document_text, note, identity, action, instruction)
            results.append((identity, result))
        return results
