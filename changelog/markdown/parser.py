# changelog/markdown/parser.py
"""
Regex-rule tokenizer.

The parser walks the input from left to right. At every position each rule
reports its leftmost match in the text that is still unparsed; the earliest
match wins, ties go to the rule that sorts first. Text skipped over before a
match becomes a ``text`` token.

Rule order:
    1. rules whose name contains "alert", "embed" or "button", in the order
       they were added
    2. every other rule, alphabetically by name

Parsing never raises. Problems are collected as warnings (see
``get_warnings``) and the output degrades to plain text instead.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace

from .rules import default_rules
from .types import ParseRule, Token

logger = logging.getLogger(__name__)

PINNED_RULE_MARKERS = ("alert", "embed", "button")

# Patterns containing these look at text before the match start, so a cached
# match position cannot be reused once the unparsed text is re-sliced.
_LOOKBEHIND_MARKERS = ("(?<=", "(?<!", r"\b", r"\B")

_NOT_SEARCHED = object()


def rule_sort_key(rule: ParseRule) -> tuple[int, str]:
    """Sort key giving pinned extension rules first, then names A-Z."""
    if any(marker in rule.name for marker in PINNED_RULE_MARKERS):
        return (0, "")
    return (1, rule.name.lower())


def _reads_behind(pattern) -> bool:
    return any(marker in pattern.pattern for marker in _LOOKBEHIND_MARKERS)


class MarkdownParser:
    def __init__(self):
        # Default rules are added lazily so extension rules can go in first
        self.rules: list[ParseRule] = []
        self._warnings: list[str] = []

    def add_rule(self, rule: ParseRule) -> None:
        """Add a rule, replacing any registered rule with the same name."""
        if any(existing.name == rule.name for existing in self.rules):
            logger.debug(f"Replacing parse rule: {rule.name}")
            self.rules = [existing for existing in self.rules if existing.name != rule.name]
        self.rules.append(rule)
        self.rules.sort(key=rule_sort_key)

    def ensure_default_rules(self) -> None:
        """Add every default rule that is not registered yet."""
        present = {rule.name for rule in self.rules}
        for rule in default_rules():
            if rule.name not in present:
                self.add_rule(rule)

    def rule_names(self) -> list[str]:
        return [rule.name for rule in self.rules]

    def get_warnings(self) -> list[str]:
        return list(self._warnings)

    def parse(self, markdown: str) -> list[Token]:
        """
        Tokenize markdown text.

        Args:
            markdown: Raw markdown text

        Returns:
            Tokens in source order. Joining their ``raw`` values gives back
            the input with line endings normalized to ``\\n``.
        """
        self._warnings = []
        self.ensure_default_rules()

        text = self._preprocess(markdown)

        tokens: list[Token] = []
        position = 0
        iterations = 0
        max_iterations = len(markdown) * 2
        # rule index -> absolute offset of its leftmost match, or None
        match_cache: dict[int, int | None] = {}

        while position < len(text) and iterations < max_iterations:
            iterations += 1
            remaining = text[position:]

            best = self._find_best_match(remaining, position, match_cache)

            if best is None:
                tokens.append(Token(type="text", content=remaining[0], raw=remaining[0]))
                position += 1
                continue

            rule, offset, match = best

            if offset > 0:
                # Re-evaluate the match at offset 0 on the next pass
                prefix = remaining[:offset]
                tokens.append(Token(type="text", content=prefix, raw=prefix))
                position += offset
                continue

            try:
                token = replace(rule.render(match), raw=match.group(0))
            except Exception as e:
                logger.error(f"Error rendering token for rule '{rule.name}': {e}", exc_info=True)
                self._warnings.append(f"Failed to render {rule.name}: {e}")
                tokens.append(Token(type="text", content=remaining[0], raw=remaining[0]))
                position += 1
                continue

            tokens.append(token)
            position += len(match.group(0))

        if position < len(text):
            self._warnings.append("Parser hit maximum iterations - possible infinite loop detected")

        tokens = self._merge_text_tokens(tokens)

        if self._warnings:
            logger.warning(f"Parser warnings: {self._warnings}")

        return tokens

    def _find_best_match(self, remaining: str, position: int, match_cache: dict):
        """
        Return ``(rule, offset, match)`` for the earliest match, or None.

        ``match`` is only set when ``offset`` is 0; a later match is
        re-checked once the parser has advanced to it.
        """
        best = None

        for index, rule in enumerate(self.rules):
            try:
                found = self._leftmost_match(index, rule, remaining, position, match_cache)
            except Exception as e:
                logger.warning(f"Error in rule '{rule.name}': {e}")
                continue

            if found is None:
                continue

            offset, match = found
            if best is None or offset < best[1]:
                best = (rule, offset, match)
                if offset == 0:
                    break

        return best

    def _leftmost_match(self, index, rule, remaining, position, match_cache):
        pattern = rule.pattern
        cached = match_cache.get(index, _NOT_SEARCHED)

        if cached is not _NOT_SEARCHED and (cached is None or cached > position) and not _reads_behind(pattern):
            # Nothing between here and the cached match can start a match,
            # except the current position, where "^" may now apply.
            anchored = pattern.match(remaining)
            if anchored is not None:
                return 0, anchored
            if cached is None:
                return None
            return cached - position, None

        match = pattern.search(remaining)
        if match is None:
            match_cache[index] = None
            return None

        match_cache[index] = position + match.start()
        return match.start(), match

    def _preprocess(self, markdown: str) -> str:
        self._validate(markdown)
        return markdown.replace("\r\n", "\n").replace("\r", "\n")

    def _validate(self, markdown: str) -> None:
        """Record advisory warnings about unbalanced markers."""
        if len(re.findall(r"\*\*", markdown)) % 2 != 0:
            self._warnings.append("Unclosed bold markers (**) detected - some bold formatting may not work")

        if len(re.findall(r"(?<!\*)\*(?!\*)", markdown)) % 2 != 0:
            self._warnings.append("Unclosed italic markers (*) detected - some italic formatting may not work")

        if markdown.count("```") % 2 != 0:
            self._warnings.append("Unclosed code blocks (```) detected - some code formatting may not work")

        if markdown.count("`") % 2 != 0:
            self._warnings.append("Unclosed inline code markers (`) detected - some code formatting may not work")

        if markdown.count("[") != markdown.count("]"):
            self._warnings.append("Unmatched square brackets [] detected - some links may not work")
        if markdown.count("(") != markdown.count(")"):
            self._warnings.append("Unmatched parentheses () detected - some links may not work")

    @staticmethod
    def _merge_text_tokens(tokens: list[Token]) -> list[Token]:
        merged: list[Token] = []
        i = 0

        while i < len(tokens):
            token = tokens[i]
            if token.type != "text":
                merged.append(token)
                i += 1
                continue

            content_parts = []
            raw_parts = []
            while i < len(tokens) and tokens[i].type == "text":
                content_parts.append(tokens[i].content or tokens[i].raw)
                raw_parts.append(tokens[i].raw)
                i += 1

            content = "".join(content_parts)
            if not content.strip() and "\n" not in content:
                # Whitespace-only span: nothing to render, raw kept for coverage
                content = ""
            merged.append(Token(type="text", content=content, raw="".join(raw_parts)))

        return merged
