# changelog/markdown/renderer.py
"""
Token to HTML renderer.

Holds one RenderRule per token type (a later rule for the same type
replaces the earlier one). Rendering a document never raises: a failing
rule is replaced by a visible error block and the rest of the tokens still
render. The joined HTML then runs through the postprocessors, which
sanitize it.
"""

from __future__ import annotations

import logging

from .postprocessors import SanitizerOptions, apply_postprocessors
from .types import RenderRule, Token
from .utils import escape_html, generate_id

logger = logging.getLogger(__name__)

HEADING_CLASSES = {
    1: "text-3xl font-bold mt-8 mb-4",
    2: "text-2xl font-semibold mt-6 mb-3",
    3: "text-xl font-medium mt-5 mb-3",
    4: "text-lg font-medium mt-4 mb-2",
    5: "text-base font-medium mt-3 mb-2",
    6: "text-sm font-medium mt-3 mb-2",
}

PARAGRAPH_OPEN = '<p class="leading-7 mb-4">'

ANCHOR_ICON = (
    '<svg width="16" height="16" viewBox="0 0 16 16" fill="currentColor">'
    '<path d="M7.5 4H5.75A3.75 3.75 0 002 7.75v.5a3.75 3.75 0 003.75 3.75h1.5m-1.5-4h3m1.5-4h1.75A3.75 '
    '3.75 0 0114 7.75v.5a3.75 3.75 0 01-3.75 3.75H8.5"/>'
    "</svg>"
)

EXTERNAL_LINK_ICON = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="12" height="12" viewBox="0 0 24 24" fill="none" '
    'stroke="currentColor" stroke-width="2" stroke-linecap="round" stroke-linejoin="round" '
    'class="lucide lucide-external-link">'
    '<path d="M18 13v6a2 2 0 0 1-2 2H5a2 2 0 0 1-2-2V8a2 2 0 0 1 2-2h6"></path>'
    '<polyline points="15 3 21 3 21 9"></polyline>'
    '<line x1="10" y1="14" x2="21" y2="3"></line>'
    "</svg>"
)


def render_heading(token: Token) -> str:
    try:
        level = int(token.attributes.get("level", "1"))
    except ValueError:
        level = 1
    level = min(max(level, 1), 6)

    anchor = generate_id(token.content)
    classes = f"group relative flex items-center gap-2 {HEADING_CLASSES[level]}"

    return (
        f'<h{level} id="{anchor}" class="{classes}">\n'
        f"  {escape_html(token.content)}\n"
        f'  <a href="#{anchor}" class="opacity-0 group-hover:opacity-100 text-muted-foreground transition-opacity">'
        f"{ANCHOR_ICON}</a>\n"
        f"</h{level}>"
    )


def render_codeblock(token: Token) -> str:
    language = token.attributes.get("language") or "text"
    return (
        '<pre class="bg-muted p-4 rounded-md overflow-x-auto my-4">'
        f'<code class="language-{escape_html(language)}">{escape_html(token.content)}</code></pre>'
    )


def render_link(token: Token) -> str:
    href = token.attributes.get("href") or "#"
    return (
        f'<a href="{escape_html(href)}" class="text-primary hover:underline inline-flex items-center gap-1" '
        'target="_blank" rel="noopener noreferrer">\n'
        f"  {escape_html(token.content)}\n"
        f"  {EXTERNAL_LINK_ICON}\n"
        "</a>"
    )


def render_list_item(token: Token) -> str:
    if token.attributes.get("ordered") == "true" and token.attributes.get("number"):
        return f'<li value="{escape_html(token.attributes["number"])}">{escape_html(token.content)}</li>'
    return f"<li>{escape_html(token.content)}</li>"


def render_task_item(token: Token) -> str:
    checked = token.attributes.get("checked") == "true"
    checked_attr = " checked" if checked else ""
    span_class = ' class="line-through text-muted-foreground"' if checked else ""
    return (
        '<div class="flex items-center gap-2 my-2 task-list-item">\n'
        f'  <input type="checkbox"{checked_attr} disabled '
        'class="form-checkbox h-4 w-4 rounded border-gray-300 text-primary focus:ring-primary" />\n'
        f"  <span{span_class}>{escape_html(token.content)}</span>\n"
        "</div>"
    )


def render_image(token: Token) -> str:
    src = token.attributes.get("src", "")
    alt = token.attributes.get("alt", "")
    title = token.attributes.get("title", "")
    title_attr = f' title="{escape_html(title)}"' if title else ""
    return (
        f'<img src="{escape_html(src)}" alt="{escape_html(alt)}"{title_attr} '
        'class="max-w-full h-auto rounded-lg my-4" loading="lazy" />'
    )


def render_paragraph(token: Token) -> str:
    content = (token.content or "").strip()
    if not content:
        return ""
    # Line-break tokens may already have injected <br> tags
    if "<br>" in content:
        return f"{PARAGRAPH_OPEN}{content}</p>"
    return f"{PARAGRAPH_OPEN}{escape_html(content)}</p>"


def default_render_rules() -> list[RenderRule]:
    return [
        RenderRule("heading", render_heading),
        RenderRule("bold", lambda token: f"<strong>{escape_html(token.content)}</strong>"),
        RenderRule("italic", lambda token: f"<em>{escape_html(token.content)}</em>"),
        RenderRule(
            "code",
            lambda token: (
                f'<code class="bg-muted px-1.5 py-0.5 rounded text-sm font-mono">{escape_html(token.content)}</code>'
            ),
        ),
        RenderRule("codeblock", render_codeblock),
        RenderRule("link", render_link),
        RenderRule("list-item", render_list_item),
        RenderRule(
            "blockquote",
            lambda token: (
                '<blockquote class="pl-4 py-2 border-l-2 border-border italic text-muted-foreground my-4">'
                f"{escape_html(token.content)}</blockquote>"
            ),
        ),
        RenderRule("text", lambda token: escape_html(token.content)),
        RenderRule("paragraph", render_paragraph),
        RenderRule("task-item", render_task_item),
        RenderRule("image", render_image),
        RenderRule("hr", lambda token: '<hr class="my-6 border-t border-border">'),
        RenderRule("line-break", lambda token: '<br class="leading-7">'),
        RenderRule("paragraph-break", lambda token: f"</p>{PARAGRAPH_OPEN}"),
        RenderRule("soft-break", lambda token: token.content),
    ]


class MarkdownRenderer:
    """
    Render tokens to sanitized HTML.

    Args:
        debug: Render unknown token types as a visible debug block instead
            of plain escaped text. Meant for rule authoring.
        sanitizer: Options for the sanitization pass.
    """

    def __init__(self, debug: bool = False, sanitizer: SanitizerOptions | None = None):
        self.debug = debug
        self.sanitizer = sanitizer or SanitizerOptions()
        self.rules: dict[str, RenderRule] = {}
        for rule in default_render_rules():
            self.add_rule(rule)

    def add_rule(self, rule: RenderRule) -> None:
        if rule.type in self.rules:
            logger.debug(f"Replacing render rule for type: {rule.type}")
        self.rules[rule.type] = rule

    def get_registered_rules(self) -> list[str]:
        return list(self.rules)

    def render(self, tokens: list[Token]) -> str:
        html = "".join(self.render_token(token) for token in tokens)
        return apply_postprocessors(html, {"sanitizer": self.sanitizer})

    def render_token(self, token: Token) -> str:
        rule = self.rules.get(token.type)

        if rule is not None:
            try:
                return rule.render(token)
            except Exception as e:
                logger.error(f"Error rendering token {token.type}: {e}", exc_info=True)
                return self._error_block(f"Render error for {token.type}: {e}")

        logger.warning(f"No render rule found for token type: '{token.type}'")

        if token.type == "text":
            return escape_html(token.content or token.raw)

        if self.debug:
            return self._debug_block(token)

        return escape_html(token.content or token.raw or "")

    @staticmethod
    def _error_block(message: str) -> str:
        return (
            '<div class="bg-red-100 border border-red-300 text-red-800 p-2 rounded text-sm mb-2">'
            f"<strong>Render Error:</strong> {escape_html(message)}</div>"
        )

    @staticmethod
    def _debug_block(token: Token) -> str:
        return (
            '<div class="bg-yellow-100 border border-yellow-300 text-yellow-800 p-2 rounded text-sm mb-2">'
            f"<strong>Unknown token type:</strong> {escape_html(token.type)}<br>"
            f"<strong>Content:</strong> {escape_html(token.content or token.raw or '')}</div>"
        )
