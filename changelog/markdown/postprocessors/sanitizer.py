# changelog/markdown/postprocessors/sanitizer.py
"""
HTML sanitization for rendered changelog entries.

The allow-list is wide: embeds need iframes, inline styles and
SVG icons to survive. Event-handler attributes and ``javascript:`` URLs are
always refused.

If the allow-list pass removes more than ``1 - min_retained_ratio`` of the
markup, it most likely ate legitimate embed content, and the output of
``basic_sanitize`` (script blocks, event handlers and ``javascript:``
removed, nothing else) is used instead.
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache

import bleach
from bleach.css_sanitizer import ALLOWED_CSS_PROPERTIES, CSSSanitizer

logger = logging.getLogger(__name__)

DEFAULT_MIN_RETAINED_RATIO = 0.7

ALLOWED_TAGS = frozenset(
    {
        # text
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "p",
        "br",
        "strong",
        "em",
        "del",
        "ins",
        "a",
        "img",
        "ul",
        "ol",
        "li",
        "blockquote",
        "pre",
        "code",
        "table",
        "thead",
        "tbody",
        "tr",
        "th",
        "td",
        "div",
        "span",
        "sup",
        "sub",
        "hr",
        "input",
        # embeds
        "iframe",
        "embed",
        "object",
        "param",
        "video",
        "audio",
        "source",
        # svg icons
        "svg",
        "path",
        "polyline",
        "line",
        "circle",
        "rect",
        "g",
        "defs",
        "use",
        # forms
        "form",
        "fieldset",
        "legend",
        "label",
        "select",
        "option",
        "textarea",
        "button",
    }
)

ALLOWED_ATTRIBUTES = frozenset(
    {
        # standard
        "href",
        "title",
        "alt",
        "src",
        "class",
        "id",
        "target",
        "rel",
        "type",
        "checked",
        "disabled",
        "loading",
        "width",
        "height",
        "style",
        "role",
        "tabindex",
        # iframes
        "frameborder",
        "allowfullscreen",
        "allow",
        "sandbox",
        "scrolling",
        "allowtransparency",
        "name",
        "seamless",
        "srcdoc",
        # svg
        "viewbox",
        "fill",
        "stroke",
        "stroke-width",
        "stroke-linecap",
        "stroke-linejoin",
        "d",
        "points",
        "x1",
        "y1",
        "x2",
        "y2",
        "cx",
        "cy",
        "r",
        "rx",
        "ry",
        "xmlns",
        # media
        "autoplay",
        "controls",
        "loop",
        "muted",
        "preload",
        "poster",
        # forms
        "value",
        "placeholder",
        "required",
        "readonly",
        "maxlength",
        "minlength",
        "max",
        "min",
        "step",
        "pattern",
        "autocomplete",
        "autofocus",
    }
)

ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto", "tel", "callto", "cid", "xmpp"})

# Properties used by the embed wrappers on top of bleach's defaults
EMBED_CSS_PROPERTIES = frozenset(
    {
        "position",
        "top",
        "left",
        "right",
        "bottom",
        "padding-bottom",
        "border",
        "border-radius",
    }
)

_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.I)
# Handlers start after whitespace, "/" or a closing quote; "content=" is not one
_EVENT_HANDLER_DOUBLE = re.compile(r'(?:\s+|(?<=[/"\x27]))on\w+\s*=\s*"[^"]*"', re.I)
_EVENT_HANDLER_SINGLE = re.compile(r"(?:\s+|(?<=[/\x22']))on\w+\s*=\s*'[^']*'", re.I)
_JAVASCRIPT_SCHEME = re.compile(r"javascript:", re.I)


@dataclass(frozen=True)
class SanitizerOptions:
    """
    Sanitizer settings.

    allowlist: run the bleach allow-list pass. When False only
        ``basic_sanitize`` runs.
    min_retained_ratio: minimum share of the input length the allow-list
        output must keep before it is trusted.
    bypass_markers: substrings that, when present anywhere in the HTML,
        skip sanitization entirely. Empty unless configured.
    """

    allowlist: bool = True
    min_retained_ratio: float = DEFAULT_MIN_RETAINED_RATIO
    bypass_markers: tuple = ()

    def __post_init__(self):
        if not 0 <= self.min_retained_ratio <= 1:
            raise ValueError(f"min_retained_ratio must be between 0 and 1, got {self.min_retained_ratio!r}")
        object.__setattr__(self, "bypass_markers", tuple(self.bypass_markers))


def _allow_attribute(tag, name, value):
    """Attribute filter for bleach: allow-listed names and data-/aria-, never on*."""
    name = name.lower()
    if name.startswith("on"):
        return False
    if name.startswith(("data-", "aria-")):
        return True
    if name.startswith("xmlns"):
        return True
    return name in ALLOWED_ATTRIBUTES


@lru_cache(maxsize=1)
def _get_bleach_config():
    """Build the bleach configuration once per process."""
    css_sanitizer = CSSSanitizer(allowed_css_properties=ALLOWED_CSS_PROPERTIES | EMBED_CSS_PROPERTIES)
    return ALLOWED_TAGS, _allow_attribute, ALLOWED_PROTOCOLS, css_sanitizer


def basic_sanitize(html: str) -> str:
    """Remove script blocks, inline event handlers and ``javascript:`` URLs."""
    html = _SCRIPT_BLOCK.sub("", html)
    html = _EVENT_HANDLER_DOUBLE.sub("", html)
    html = _EVENT_HANDLER_SINGLE.sub("", html)
    return _JAVASCRIPT_SCHEME.sub("", html)


def allowlist_sanitize(html: str) -> str:
    """Run the bleach allow-list pass; disallowed tags are stripped."""
    allowed_tags, attribute_filter, allowed_protocols, css_sanitizer = _get_bleach_config()
    return bleach.clean(
        html,
        tags=allowed_tags,
        attributes=attribute_filter,
        protocols=allowed_protocols,
        strip=True,
        css_sanitizer=css_sanitizer,
    )


def sanitize_html(html, context):
    """
    Sanitize rendered HTML.

    Args:
        html: HTML string to process
        context: Rendering context; ``context["sanitizer"]`` holds the
            SanitizerOptions to apply (defaults when missing)

    Returns:
        Sanitized HTML
    """
    if not html:
        return html

    options = context.get("sanitizer") or SanitizerOptions()

    for marker in options.bypass_markers:
        if marker in html:
            logger.info(f"Skipping sanitization, HTML contains bypass marker {marker!r}")
            return html

    if not options.allowlist:
        return basic_sanitize(html)

    try:
        sanitized = allowlist_sanitize(html)
    except Exception as e:
        logger.error(f"Bleach sanitization failed: {e}", exc_info=True)
        return basic_sanitize(html)

    if len(sanitized) < len(html) * options.min_retained_ratio:
        logger.warning(
            f"Sanitization removed too much content ({len(html)} -> {len(sanitized)} chars), "
            "falling back to basic sanitization"
        )
        return basic_sanitize(html)

    return sanitized
