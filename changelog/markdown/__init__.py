# changelog/markdown/__init__.py
"""
Markdown engine for changelog entries.

    >>> from changelog.markdown import render_markdown
    >>> html = render_markdown(":::tip\\nShip it.\\n:::")
"""

from .engine import ChangelogMarkdown
from .exceptions import ExtensionError
from .extensions import AlertExtension, ButtonExtension, EmbedExtension
from .parser import MarkdownParser, rule_sort_key
from .postprocessors import SanitizerOptions
from .renderer import MarkdownRenderer
from .types import Extension, ParseRule, RenderRule, Token

# Shared engine with the built-in extensions. Treat it as read-only; build
# another engine (or use with_extension) for a different extension set.
default_engine = ChangelogMarkdown()


def parse_markdown(content: str) -> list[Token]:
    return default_engine.parse(content)


def render_markdown(content: str) -> str:
    return default_engine.to_html(content)


__all__ = [
    "AlertExtension",
    "ButtonExtension",
    "ChangelogMarkdown",
    "EmbedExtension",
    "Extension",
    "ExtensionError",
    "MarkdownParser",
    "MarkdownRenderer",
    "ParseRule",
    "RenderRule",
    "SanitizerOptions",
    "Token",
    "default_engine",
    "parse_markdown",
    "render_markdown",
    "rule_sort_key",
]
