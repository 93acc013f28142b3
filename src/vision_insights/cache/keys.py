"""Cache key generation — deterministic fingerprints of analysis requests."""

from __future__ import annotations

from vision_insights.types import ImageIdentity, NoteContext, VisionAction

_CONTEXT_SLICE = 200
_PROMPT_SLICE = 500


def rolling_hash(text: str) -> str:
    """32-bit polynomial string hash, rendered as an unsigned decimal.

    Iterates UTF-16 code units so keys match those written by the
    JavaScript plugin sharing the same data file.
    """
    h = 0
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 0x100000000
    return str(abs(h))


def hash_image(identity: ImageIdentity) -> str:
    """Hash the identifying fields of an image."""
    return rolling_hash(f"{identity.path}-{identity.filename}-{identity.mime_type}")


def hash_context(context: NoteContext) -> str:
    """Hash the note name and the text immediately around the image."""
    before = context.text_before[:_CONTEXT_SLICE]
    after = context.text_after[:_CONTEXT_SLICE]
    return rolling_hash(f"{context.note_name}-{before}-{after}")


def hash_prompt(instruction: str) -> str:
    return rolling_hash(instruction[:_PROMPT_SLICE])


def fingerprint(
    identity: ImageIdentity,
    action: VisionAction | str,
    context: NoteContext | None = None,
    instruction: str | None = None,
) -> str:
    """Build the cache key ``imageHash-action[-contextHash][-promptHash]``.

    The prompt hash is only part of the key for the free-form action, so a
    stray instruction passed with a preset action does not split the cache.
    """
    action = VisionAction(action)
    parts = [hash_image(identity), action.value]
    if context is not None:
        parts.append(hash_context(context))
    if action.is_free_form and instruction:
        parts.append(hash_prompt(instruction))
    return "-".join(parts)
