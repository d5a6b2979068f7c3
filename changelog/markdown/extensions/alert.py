# changelog/markdown/extensions/alert.py
"""
Fenced alert blocks.

Expected markdown input:
    :::warning Be careful
    Do not run this.
    :::

Or without a title (the capitalized type is used):
    :::tip
    Use keyboard shortcuts.
    :::

Supported types: info, warning, error, success, tip, note. Any other type
is styled as info.
"""

import re

from ..types import Extension, ParseRule, RenderRule, Token
from ..utils import escape_html

ALERT_PATTERN = re.compile(r":::(\w+)(?:[ \t]+(.*?))?[ \t]*\n([\s\S]*?)\n:::")

ALERT_TYPES = {
    "info": {
        "icon": "ℹ️",
        "classes": "bg-blue-500/10 border-blue-500/30 text-blue-600 border-l-blue-500",
    },
    "warning": {
        "icon": "⚠️",
        "classes": "bg-amber-500/10 border-amber-500/30 text-amber-600 border-l-amber-500",
    },
    "error": {
        "icon": "❌",
        "classes": "bg-red-500/10 border-red-500/30 text-red-600 border-l-red-500",
    },
    "success": {
        "icon": "✅",
        "classes": "bg-green-500/10 border-green-500/30 text-green-600 border-l-green-500",
    },
    "tip": {
        "icon": "💡",
        "classes": "bg-purple-500/10 border-purple-500/30 text-purple-600 border-l-purple-500",
    },
    "note": {
        "icon": "📝",
        "classes": "bg-gray-500/10 border-gray-500/30 text-gray-600 border-l-gray-500",
    },
}

BASE_CLASSES = "border-l-4 p-4 mb-4 rounded-md transition-colors duration-200"


def parse_alert(match):
    return Token(
        type="alert",
        content=match.group(3).strip(),
        raw=match.group(0),
        attributes={"type": match.group(1), "title": match.group(2) or ""},
    )


def render_alert(token: Token) -> str:
    alert_type = token.attributes.get("type") or "info"
    title = token.attributes.get("title") or alert_type[:1].upper() + alert_type[1:]
    config = ALERT_TYPES.get(alert_type, ALERT_TYPES["info"])

    return (
        f'<div class="{BASE_CLASSES} {config["classes"]}" role="alert" aria-live="polite">\n'
        '  <div class="font-medium mb-2 flex items-center gap-2">\n'
        f'    <span class="text-lg" role="img" aria-label="{escape_html(alert_type)}">{config["icon"]}</span>\n'
        f"    <span>{escape_html(title)}</span>\n"
        "  </div>\n"
        f'  <div class="leading-relaxed">{escape_html(token.content)}</div>\n'
        "</div>"
    )


AlertExtension = Extension(
    name="alert",
    parse_rules=[ParseRule("alert", ALERT_PATTERN, parse_alert)],
    render_rules=[RenderRule("alert", render_alert)],
)
