import django
import pytest
from django.conf import settings

from changelog.markdown import ChangelogMarkdown, Extension, ParseRule, RenderRule, Token


def pytest_configure():
    if not settings.configured:
        settings.configure(
            DEBUG=False,
            INSTALLED_APPS=["changelog"],
            TEMPLATES=[{"BACKEND": "django.template.backends.django.DjangoTemplates", "APP_DIRS": False}],
        )
        django.setup()


@pytest.fixture
def engine():
    return ChangelogMarkdown()


@pytest.fixture
def shout_extension():
    """Turns !!word!! into an upper-cased <strong class="shout">."""
    return Extension(
        name="shout",
        parse_rules=[
            ParseRule(
                "shout",
                r"!!(\w+)!!",
                lambda match: Token(type="shout", content=match.group(1), raw=match.group(0)),
            )
        ],
        render_rules=[RenderRule("shout", lambda token: f'<strong class="shout">{token.content.upper()}</strong>')],
    )


@pytest.fixture
def highlight_extension():
    """Turns ==text== into <span class="highlight">."""
    return Extension(
        name="highlight",
        parse_rules=[
            ParseRule(
                "highlight",
                r"==([^=]+)==",
                lambda match: Token(type="highlight", content=match.group(1), raw=match.group(0)),
            )
        ],
        render_rules=[RenderRule("highlight", lambda token: f'<span class="highlight">{token.content}</span>')],
    )
