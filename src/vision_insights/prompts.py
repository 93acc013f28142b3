"""Jinja2 rendering of note context into the prompt sent with an image."""

from __future__ import annotations

from jinja2 import ChainableUndefined
from jinja2.sandbox import SandboxedEnvironment

from vision_insights.types import NoteContext

_MAX_PROMPT_LINKS = 5

_jinja_env = SandboxedEnvironment(
    autoescape=False,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=ChainableUndefined,
)

_CONTEXT_TEMPLATE = """

**NOTE CONTEXT:**
This image is embedded in a note titled "{{ ctx.note_name }}".
{% if ctx.text_before %}

**Text BEFORE this image:**
{{ ctx.text_before }}
{% endif %}
{% if ctx.text_after %}

**Text AFTER this image:**
{{ ctx.text_after }}
{% endif %}
{% if links %}

**Related Links (nearby):**
{% for link in links %}
- [[{{ link.title }}]] — {{ link.excerpt }}
{% endfor %}
{% endif %}
{% if ctx.section_title %}

**Section:** {{ ctx.section_path | join(" > ") if ctx.section_path else ctx.section_title }}
{% endif %}
{% if ctx.section_text %}

**Section Text:**
{{ ctx.section_text }}
{% endif %}
{% if ctx.tags %}

**Tags:** {% for tag in ctx.tags %}#{{ tag }}{{ " " if not loop.last }}{% endfor %}

{% endif %}

Please consider this context when analyzing the image."""

_template = _jinja_env.from_string(_CONTEXT_TEMPLATE)


def render_note_context(context: NoteContext | None) -> str:
    """Render the context section appended to an action prompt.

    Returns an empty string when there is no context.
    """
    if context is None:
        return ""
    return _template.render(ctx=context, links=context.related_links[:_MAX_PROMPT_LINKS])
