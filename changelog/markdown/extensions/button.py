# changelog/markdown/extensions/button.py
"""
Call-to-action buttons.

    [button:Click Me](https://example.com){primary,lg}
    [button:Download](./file.pdf){success}
    [button:Disabled Button](#){danger,disabled}
    [button:Same Tab](https://example.com){primary,self}

Options are a comma-separated list of flags: one style, one size,
``disabled`` and ``self`` (open in the same tab).
"""

import re

from ..types import Extension, ParseRule, RenderRule, Token
from ..utils import collapse_whitespace, escape_html

BUTTON_PATTERN = re.compile(r"\[button:([^\]]+)\]\(([^)]+)\)(?:\{([^}]+)\})?")

BUTTON_STYLES = ("default", "primary", "secondary", "success", "danger", "outline", "ghost")
BUTTON_SIZES = ("sm", "md", "lg")

BASE_CLASSES = collapse_whitespace(
    """
    inline-flex items-center justify-center font-medium rounded-lg
    transition-all duration-200 ease-out
    focus:outline-none focus:ring-2 focus:ring-offset-2
    disabled:opacity-50 disabled:cursor-not-allowed disabled:pointer-events-none
    transform hover:scale-[1.02] active:scale-[0.98]
    shadow-sm hover:shadow-md active:shadow-sm
    border border-transparent
    relative overflow-hidden
    before:absolute before:inset-0 before:rounded-lg
    before:bg-gradient-to-br before:from-white/20 before:to-transparent
    before:opacity-0 hover:before:opacity-100 before:transition-opacity before:duration-200
    """
)

SIZE_CLASSES = {
    "sm": "px-3 py-1.5 text-sm gap-1.5",
    "md": "px-4 py-2 text-base gap-2",
    "lg": "px-6 py-3 text-lg gap-2.5",
}

_SOLID_SHADOW = (
    "shadow-[0_1px_0_0_rgba(255,255,255,0.1)_inset,0_1px_2px_0_rgba(0,0,0,0.1)] "
    "hover:shadow-[0_1px_0_0_rgba(255,255,255,0.15)_inset,0_2px_4px_0_rgba(0,0,0,0.15)]"
)


def _solid(color: str) -> str:
    return (
        f"bg-{color}-600 text-white border-{color}-500 "
        f"hover:bg-{color}-700 hover:border-{color}-400 "
        f"focus:ring-{color}-500 {_SOLID_SHADOW}"
    )


STYLE_CLASSES = {
    "default": _solid("slate"),
    "primary": _solid("blue"),
    "secondary": _solid("gray"),
    "success": _solid("green"),
    "danger": _solid("red"),
    "outline": (
        "bg-transparent text-blue-600 border-blue-600 "
        "hover:bg-blue-50 hover:border-blue-700 hover:text-blue-700 "
        "focus:ring-blue-500 "
        "shadow-[0_0_0_1px_rgba(59,130,246,0.5)_inset] "
        "hover:shadow-[0_0_0_1px_rgba(29,78,216,0.6)_inset,0_1px_2px_0_rgba(0,0,0,0.05)]"
    ),
    "ghost": (
        "bg-transparent text-gray-700 border-transparent "
        "hover:bg-gray-100 hover:text-gray-900 "
        "focus:ring-gray-500 shadow-none "
        "hover:shadow-[0_1px_2px_0_rgba(0,0,0,0.05)]"
    ),
}

EXTERNAL_ICON = (
    '<svg class="w-4 h-4 ml-1 opacity-75" fill="none" stroke="currentColor" viewBox="0 0 24 24">'
    '<path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" '
    'd="M10 6H6a2 2 0 00-2 2v10a2 2 0 002 2h10a2 2 0 002-2v-4M14 4h6m0 0v6m0-6L10 14"/>'
    "</svg>"
)


def parse_options(options: str) -> dict[str, str]:
    """Turn ``"primary,lg,self"`` into the button's token attributes."""
    flags = [flag.strip() for flag in options.split(",")] if options else []
    return {
        "style": next((flag for flag in flags if flag in BUTTON_STYLES), "primary"),
        "size": next((flag for flag in flags if flag in BUTTON_SIZES), "md"),
        "disabled": "true" if "disabled" in flags else "false",
        "target": "_self" if "self" in flags else "_blank",
    }


def parse_button(match):
    return Token(
        type="button",
        content=match.group(1),
        raw=match.group(0),
        attributes={"href": match.group(2), **parse_options(match.group(3))},
    )


def render_button(token: Token) -> str:
    href = token.attributes.get("href") or "#"
    style = token.attributes.get("style") or "primary"
    size = token.attributes.get("size") or "md"
    disabled = token.attributes.get("disabled") == "true"
    target = token.attributes.get("target") or "_blank"

    classes = " ".join(
        [
            BASE_CLASSES,
            SIZE_CLASSES.get(size, SIZE_CLASSES["md"]),
            STYLE_CLASSES.get(style, STYLE_CLASSES["primary"]),
        ]
    )

    target_attr = ' target="_blank" rel="noopener noreferrer"' if target == "_blank" else ""
    disabled_attr = ' aria-disabled="true" tabindex="-1"' if disabled else ""
    icon = EXTERNAL_ICON if target == "_blank" and not disabled else ""

    return (
        f'<a href="{escape_html(href)}" class="{classes}"{target_attr}{disabled_attr}>'
        f'<span class="relative z-10">{escape_html(token.content)}</span>{icon}</a>'
    )


ButtonExtension = Extension(
    name="button",
    parse_rules=[ParseRule("button", BUTTON_PATTERN, parse_button)],
    render_rules=[RenderRule("button", render_button)],
)
