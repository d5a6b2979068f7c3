# changelog/templatetags/markdown_tags.py

from functools import lru_cache

from django import template
from django.utils.safestring import mark_safe

from changelog.markdown.analysis import generate_table_of_contents, get_reading_time
from changelog.markdown.config import build_engine

register = template.Library()


@lru_cache(maxsize=1)
def get_site_engine():
    """Engine built from the project's settings, created on first use."""
    return build_engine()


@register.filter(name="markdown")
def markdown_filter(value):
    if value is None:
        return ""
    return mark_safe(get_site_engine().to_html(str(value)))


@register.filter(name="markdown_toc")
def markdown_toc_filter(value):
    """Table of contents for a changelog entry body"""
    if value is None:
        return ""
    return mark_safe(generate_table_of_contents(str(value)))


@register.filter(name="reading_time")
def reading_time_filter(value):
    if value is None:
        return 0
    return get_reading_time(str(value))
