# changelog/markdown/engine.py
"""
Extension registry and the single entry point used by the rest of the
application.

An engine owns one parser and one renderer. Extensions add parse rules to
the first and render rules to the second. Removing an extension rebuilds
both from the remaining extensions, since the parser's sorted rule list and
the renderer's type table do not remember where a rule came from.

Engines are not locked. Do not register or unregister on an engine that is
rendering in another thread; use ``with_extension``/``without_extension`` to
get a separate engine instead.
"""

from __future__ import annotations

import logging

from .exceptions import ExtensionError
from .extensions import BUILTIN_EXTENSIONS
from .parser import MarkdownParser
from .postprocessors import SanitizerOptions
from .renderer import MarkdownRenderer
from .types import Extension, ParseRule, RenderRule, Token

logger = logging.getLogger(__name__)


def validate_extension(extension) -> None:
    name = getattr(extension, "name", None)
    if not isinstance(name, str) or not name:
        raise ExtensionError(f"Extension needs a non-empty name, got {name!r}")

    for rule in getattr(extension, "parse_rules", None) or []:
        if not isinstance(rule, ParseRule):
            raise ExtensionError(f"Extension '{name}' has a parse rule that is not a ParseRule: {rule!r}")

    for rule in getattr(extension, "render_rules", None) or []:
        if not isinstance(rule, RenderRule):
            raise ExtensionError(f"Extension '{name}' has a render rule that is not a RenderRule: {rule!r}")


class ChangelogMarkdown:
    """
    Markdown engine for changelog entries.

    Args:
        extensions: Extensions to register, in order. Defaults to the
            built-in button, alert and embed extensions.
        debug: Show unknown token types as debug blocks in the HTML.
        sanitizer: Options for the HTML sanitization pass.
    """

    def __init__(
        self,
        extensions: list[Extension] | None = None,
        debug: bool = False,
        sanitizer: SanitizerOptions | None = None,
    ):
        self.debug = debug
        self.sanitizer = sanitizer or SanitizerOptions()
        self.parser = MarkdownParser()
        self.renderer = MarkdownRenderer(debug=self.debug, sanitizer=self.sanitizer)
        self._extensions: dict[str, Extension] = {}

        # Extension rules go in before the defaults
        for extension in BUILTIN_EXTENSIONS if extensions is None else extensions:
            self.register_extension(extension)

        self.parser.ensure_default_rules()

    def register_extension(self, extension: Extension) -> None:
        """Add an extension's rules. An extension with the same name is replaced."""
        validate_extension(extension)

        if extension.name in self._extensions:
            logger.info(f"Replacing extension: {extension.name}")
            del self._extensions[extension.name]
            self._rebuild()

        logger.debug(f"Registering extension: {extension.name}")
        self._extensions[extension.name] = extension

        for rule in extension.parse_rules:
            self.parser.add_rule(rule)
        for rule in extension.render_rules:
            self.renderer.add_rule(rule)

    def unregister_extension(self, name: str) -> None:
        if name not in self._extensions:
            return

        del self._extensions[name]
        self._rebuild()

    def _rebuild(self) -> None:
        self.parser = MarkdownParser()
        self.renderer = MarkdownRenderer(debug=self.debug, sanitizer=self.sanitizer)

        for extension in self._extensions.values():
            for rule in extension.parse_rules:
                self.parser.add_rule(rule)
            for rule in extension.render_rules:
                self.renderer.add_rule(rule)

        self.parser.ensure_default_rules()

    def with_extension(self, extension: Extension) -> ChangelogMarkdown:
        """Return a new engine with ``extension`` added; this engine is unchanged."""
        engine = self._copy()
        engine.register_extension(extension)
        return engine

    def without_extension(self, name: str) -> ChangelogMarkdown:
        """Return a new engine without the named extension; this engine is unchanged."""
        engine = self._copy()
        engine.unregister_extension(name)
        return engine

    def _copy(self) -> ChangelogMarkdown:
        return ChangelogMarkdown(
            extensions=list(self._extensions.values()),
            debug=self.debug,
            sanitizer=self.sanitizer,
        )

    def parse(self, markdown: str) -> list[Token]:
        return self.parser.parse(markdown)

    def render(self, tokens: list[Token]) -> str:
        return self.renderer.render(tokens)

    def to_html(self, markdown: str) -> str:
        return self.render(self.parse(markdown))

    def get_extensions(self) -> list[str]:
        return list(self._extensions)

    def has_extension(self, name: str) -> bool:
        return name in self._extensions

    def get_warnings(self) -> list[str]:
        """Warnings from the most recent ``parse`` call."""
        return self.parser.get_warnings()
