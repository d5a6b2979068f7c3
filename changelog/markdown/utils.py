# changelog/markdown/utils.py
"""Small HTML helpers shared by the renderer and the built-in extensions."""

import re

_ESCAPE_TABLE = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
    }
)


def escape_html(text) -> str:
    """Escape ``& < > " '`` so the value is safe in text and attributes."""
    if not text:
        return ""
    return str(text).translate(_ESCAPE_TABLE)


def generate_id(text: str) -> str:
    """
    Build the anchor id for a heading.

    "Hello, World!" -> "hello-world". Only ASCII word characters survive,
    so accented letters are dropped rather than transliterated.
    """
    slug = text.lower()
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = re.sub(r"^-|-$", "", slug)
    return slug.strip()


def collapse_whitespace(classes: str) -> str:
    """Join a multi-line class list into a single space-separated string."""
    return re.sub(r"\s+", " ", classes).strip()
