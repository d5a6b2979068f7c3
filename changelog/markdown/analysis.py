# changelog/markdown/analysis.py
"""
Helpers that read a changelog entry without rendering it.

Everything except ``extract_toc_from_html`` works on the raw markdown text,
so these stay cheap enough to run on every keystroke in the editor.
"""

from __future__ import annotations

import math
import re
from typing import TypedDict

from bs4 import BeautifulSoup, NavigableString, Tag

from .utils import escape_html

HEADING_LINE = re.compile(r"^(#{1,6})\s+(.+)$", re.M)
FENCED_CODE = re.compile(r"```[\s\S]*?```")
INLINE_CODE = re.compile(r"`[^`]+`")
LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")

ELEMENT_PATTERNS = {
    "table": re.compile(r"\|(.+)\|[\r\n]"),
    "code": FENCED_CODE,
    "heading": HEADING_LINE,
    "list": re.compile(r"^(\s*)([-*+]|\d+\.)(\s+)(.+)$", re.M),
}


class Heading(TypedDict):
    text: str
    level: int
    id: str


class HeadingNode(TypedDict):
    level: int
    id: str
    title: str
    children: list["HeadingNode"]


def extract_headings(markdown: str) -> list[Heading]:
    headings: list[Heading] = []
    for match in HEADING_LINE.finditer(markdown):
        text = match.group(2)
        headings.append(
            {
                "text": text,
                "level": len(match.group(1)),
                "id": re.sub(r"[^\w]+", "-", text.lower(), flags=re.ASCII),
            }
        )
    return headings


def get_word_count(markdown: str) -> int:
    """Count words, ignoring code and link targets."""
    text = FENCED_CODE.sub("", markdown)
    text = INLINE_CODE.sub("", text)
    text = LINK.sub(r"\1", text)
    return len(text.split())


def get_reading_time(markdown: str, words_per_minute: int = 200) -> int:
    """Reading time in whole minutes, rounded up."""
    return math.ceil(get_word_count(markdown) / words_per_minute)


def generate_table_of_contents(markdown: str) -> str:
    headings = extract_headings(markdown)
    if not headings:
        return ""

    parts = [
        '<nav class="toc mb-8">',
        '<h2 class="text-lg font-medium mb-4">Table of Contents</h2>',
        '<ul class="space-y-2 text-sm">',
    ]

    current_level = 0
    for heading in headings:
        level = heading["level"]
        if level > current_level:
            parts.extend('<ul class="ml-4 mt-2 space-y-2">' for _ in range(current_level, level))
        elif level < current_level:
            parts.extend("</ul>" for _ in range(level, current_level))
        current_level = level

        parts.append(
            f'<li><a href="#{escape_html(heading["id"])}" class="hover:text-primary hover:underline">'
            f'{escape_html(heading["text"])}</a></li>'
        )

    parts.extend("</ul>" for _ in range(current_level))
    parts.append("</ul>")
    parts.append("</nav>")

    return "\n".join(parts)


def contains_element_type(markdown: str, element_type: str) -> bool:
    pattern = ELEMENT_PATTERNS.get(element_type)
    return bool(pattern and pattern.search(markdown))


def _heading_title(heading: Tag) -> str:
    """Heading text without the anchor-icon link the renderer appends."""
    parts: list[str] = []
    for child in heading.contents:
        if isinstance(child, NavigableString):
            value = str(child).strip()
            if value:
                parts.append(value)
            continue

        # The trailing "#slug" anchor only holds an icon
        if isinstance(child, Tag) and child.name == "a" and child.get("href", "").startswith("#"):
            continue

        if isinstance(child, Tag):
            text_value = child.get_text(separator=" ", strip=True)
            if text_value:
                parts.append(text_value)

    return " ".join(parts).strip()


def extract_toc_from_html(html: str) -> list[HeadingNode]:
    """
    Given rendered HTML, return a hierarchical list of headings for a TOC.

    Each node contains:
        - level: Heading level (1-6)
        - id: HTML id of the heading
        - title: Plain-text heading
        - children: Nested list of child headings
    """
    soup = BeautifulSoup(html, "html.parser")
    toc: list[HeadingNode] = []
    stack: list[HeadingNode] = []

    for heading in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
        level = int(heading.name[1])  # "h2" -> 2
        title = _heading_title(heading)
        if not title:
            continue

        node: HeadingNode = {
            "level": level,
            "id": heading.get("id") or "",
            "title": title,
            "children": [],
        }

        while stack and stack[-1]["level"] >= level:
            stack.pop()

        if stack:
            stack[-1]["children"].append(node)
        else:
            toc.append(node)

        stack.append(node)

    return toc
