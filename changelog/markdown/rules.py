# changelog/markdown/rules.py
"""
Default parse rules.

Each rule maps one markdown construct to a token. The parser orders rules by
name (see ``parser.rule_sort_key``), so the order of this list does not
decide precedence.
"""

import re

from .types import ParseRule, Token


def _heading(match):
    return Token(
        type="heading",
        content=match.group(2).strip(),
        raw=match.group(0),
        attributes={"level": str(len(match.group(1)))},
    )


def _codeblock(match):
    return Token(
        type="codeblock",
        content=match.group(2),
        raw=match.group(0),
        attributes={"language": match.group(1) or "text"},
    )


def _line_break(match):
    return Token(type="line-break", content="", raw=match.group(0))


def _paragraph_break(match):
    return Token(type="paragraph-break", content="", raw=match.group(0))


def _bold(match):
    return Token(type="bold", content=match.group(1), raw=match.group(0))


def _italic(match):
    return Token(type="italic", content=match.group(1), raw=match.group(0))


def _code(match):
    return Token(type="code", content=match.group(1), raw=match.group(0))


def _image(match):
    return Token(
        type="image",
        content=match.group(1),
        raw=match.group(0),
        attributes={
            "alt": match.group(1),
            "src": match.group(2),
            "title": match.group(3) or "",
        },
    )


def _link(match):
    return Token(
        type="link",
        content=match.group(1),
        raw=match.group(0),
        attributes={"href": match.group(2)},
    )


def _task_item(match):
    checked = match.group(1).lower() == "x"
    return Token(
        type="task-item",
        content=match.group(2),
        raw=match.group(0),
        attributes={"checked": "true" if checked else "false"},
    )


def _list_item(match):
    return Token(type="list-item", content=match.group(1), raw=match.group(0))


def _ordered_list_item(match):
    return Token(
        type="list-item",
        content=match.group(2),
        raw=match.group(0),
        attributes={"ordered": "true", "number": match.group(1)},
    )


def _blockquote(match):
    return Token(type="blockquote", content=match.group(1), raw=match.group(0))


def _hr(match):
    return Token(type="hr", content="", raw=match.group(0))


def _soft_break(match):
    # Rendered inline, so the newline collapses to a space
    return Token(type="soft-break", content=" ", raw=match.group(0))


def default_rules() -> list[ParseRule]:
    """Build a fresh list of the default parse rules."""
    return [
        ParseRule("heading", re.compile(r"^(#{1,6})\s+(.+)$", re.M), _heading),
        ParseRule("codeblock", re.compile(r"```(\w+)?\s*\n([\s\S]*?)```"), _codeblock),
        ParseRule("hard-break-backslash", re.compile(r"\\\s*\n"), _line_break),
        ParseRule("hard-break-spaces", re.compile(r"  +\n"), _line_break),
        ParseRule("paragraph-break", re.compile(r"\n\s*\n"), _paragraph_break),
        ParseRule("bold", re.compile(r"\*\*((?:(?!\*\*).)+)\*\*"), _bold),
        ParseRule("italic", re.compile(r"\*((?:(?!\*).)+)\*"), _italic),
        ParseRule("code", re.compile(r"`([^`]+)`"), _code),
        ParseRule("image", re.compile(r'!\[([^\]]*)\]\(([^)\s]+)(?:\s+"([^"]+)")?\)'), _image),
        ParseRule("link", re.compile(r"\[([^\]]+)\]\(([^)]+)\)"), _link),
        ParseRule("task-list", re.compile(r"^[\s]*-\s\[([ xX])\]\s(.+)$", re.M), _task_item),
        ParseRule("list", re.compile(r"^[\s]*[-*+]\s+(.+)$", re.M), _list_item),
        ParseRule("ordered-list", re.compile(r"^[\s]*(\d+)[.)]\s+(.+)$", re.M), _ordered_list_item),
        ParseRule("blockquote", re.compile(r"^>\s+(.+)$", re.M), _blockquote),
        ParseRule("hr", re.compile(r"^---$", re.M), _hr),
        ParseRule("soft-break", re.compile(r"\n"), _soft_break),
    ]
