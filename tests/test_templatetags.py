import pytest
from django.template import Context, Template
from django.test import override_settings

from changelog.templatetags.markdown_tags import get_site_engine


@pytest.fixture(autouse=True)
def fresh_site_engine():
    get_site_engine.cache_clear()
    yield
    get_site_engine.cache_clear()


def render(template, **context):
    return Template("{% load markdown_tags %}" + template).render(Context(context))


class TestMarkdownFilters:
    """Template filters"""

    def test_markdown_is_not_autoescaped(self):
        assert render("{{ body|markdown }}", body="**hi**") == "<strong>hi</strong>"

    def test_markdown_none(self):
        assert render("{{ body|markdown }}", body=None) == ""

    def test_markdown_sanitizes(self):
        html = render("{{ body|markdown }}", body="[x](javascript:alert(1))")
        assert "javascript:" not in html

    def test_markdown_toc(self):
        html = render("{{ body|markdown_toc }}", body="# Intro\n## Details")
        assert '<a href="#intro"' in html
        assert '<a href="#details"' in html

    def test_reading_time(self):
        assert render("{{ body|reading_time }}", body=" ".join(["word"] * 450)) == "3"
        assert render("{{ body|reading_time }}", body=None) == "0"

    def test_site_engine_follows_settings(self):
        with override_settings(DEBUG=True):
            engine = get_site_engine()
        assert engine.debug is True
        assert get_site_engine() is engine

    def test_site_engine_uses_sanitizer_settings(self):
        with override_settings(CHANGELOG_MARKDOWN={"SANITIZE": False}):
            assert get_site_engine().sanitizer.allowlist is False
