# changelog/markdown/config.py

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .engine import ChangelogMarkdown
from .postprocessors.sanitizer import DEFAULT_MIN_RETAINED_RATIO, SanitizerOptions

DEFAULT_CONFIG = {
    # Render unknown token types as visible debug blocks
    "DEBUG": False,
    # Run the bleach allow-list pass (False: script/handler stripping only)
    "SANITIZE": True,
    "MIN_RETAINED_RATIO": DEFAULT_MIN_RETAINED_RATIO,
    # Substrings that skip sanitization entirely, e.g. "youtube.com/embed/"
    "BYPASS_MARKERS": (),
}


def get_markdown_config(**overrides):
    """
    Configuration for the changelog markdown engine.

    Values are layered: DEFAULT_CONFIG, then the ``CHANGELOG_MARKDOWN`` dict
    from Django settings (when settings are configured; ``DEBUG`` follows
    ``settings.DEBUG`` unless set there), then keyword overrides.

    Example settings.py entry:

        CHANGELOG_MARKDOWN = {
            "MIN_RETAINED_RATIO": 0.8,
            "BYPASS_MARKERS": ["youtube.com/embed/"],
        }
    """
    config = dict(DEFAULT_CONFIG)

    if settings.configured:
        config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
        user_config = getattr(settings, "CHANGELOG_MARKDOWN", None) or {}
        if not isinstance(user_config, dict):
            raise ImproperlyConfigured("CHANGELOG_MARKDOWN must be a dict")
        _check_keys(user_config, "CHANGELOG_MARKDOWN")
        config.update(user_config)

    _check_keys(overrides, "get_markdown_config()")
    config.update(overrides)

    config["BYPASS_MARKERS"] = tuple(config["BYPASS_MARKERS"] or ())
    return config


def _check_keys(values, source):
    unknown = sorted(set(values) - set(DEFAULT_CONFIG))
    if unknown:
        raise ImproperlyConfigured(f"Unknown markdown setting(s) in {source}: {', '.join(unknown)}")


def build_engine(config=None):
    """Build a ChangelogMarkdown from a config dict (see get_markdown_config)."""
    if config is None:
        config = get_markdown_config()
    else:
        _check_keys(config, "build_engine()")
        config = {**DEFAULT_CONFIG, **config}

    try:
        sanitizer = SanitizerOptions(
            allowlist=bool(config["SANITIZE"]),
            min_retained_ratio=float(config["MIN_RETAINED_RATIO"]),
            bypass_markers=tuple(config["BYPASS_MARKERS"] or ()),
        )
    except (TypeError, ValueError) as e:
        raise ImproperlyConfigured(f"Invalid markdown sanitizer settings: {e}") from e

    return ChangelogMarkdown(debug=bool(config["DEBUG"]), sanitizer=sanitizer)
