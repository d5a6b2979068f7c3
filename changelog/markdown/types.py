# changelog/markdown/types.py
"""
Shared vocabulary of the markdown engine.

A ParseRule turns one regex match into a Token, a RenderRule turns a Token
of a given type into HTML, and an Extension bundles both so they can be
registered and removed together.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable


@dataclass
class Token:
    type: str
    content: str = ""
    raw: str = ""
    attributes: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Return a JSON-serializable representation of the token."""
        data = {"type": self.type, "content": self.content, "raw": self.raw}
        if self.attributes:
            data["attributes"] = dict(self.attributes)
        return data


@dataclass
class ParseRule:
    """
    A named pattern that produces a token.

    ``pattern`` is applied with a single search over the text that is still
    unparsed. A string pattern is compiled on construction, so an invalid
    expression fails here rather than halfway through a document.
    """

    name: str
    pattern: re.Pattern[str] | str
    render: Callable[[re.Match], Token]

    def __post_init__(self):
        if isinstance(self.pattern, str):
            self.pattern = re.compile(self.pattern)


@dataclass
class RenderRule:
    type: str
    render: Callable[[Token], str]


@dataclass
class Extension:
    name: str
    parse_rules: list[ParseRule] = field(default_factory=list)
    render_rules: list[RenderRule] = field(default_factory=list)
