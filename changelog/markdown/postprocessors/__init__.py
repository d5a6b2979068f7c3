# changelog/markdown/postprocessors/__init__.py

from .sanitizer import SanitizerOptions, basic_sanitize, sanitize_html

POSTPROCESSORS = [
    sanitize_html,
    # Order matters - they run sequentially on the joined HTML
]


def apply_postprocessors(html, context):
    """Apply all postprocessors in order"""
    for processor in POSTPROCESSORS:
        html = processor(html, context)
    return html


__all__ = ["POSTPROCESSORS", "SanitizerOptions", "apply_postprocessors", "basic_sanitize", "sanitize_html"]
