import logging
from dataclasses import replace

import pytest

from changelog.markdown import ChangelogMarkdown, Extension, MarkdownParser, ParseRule, Token

DEFAULT_RULE_ORDER = [
    "blockquote",
    "bold",
    "code",
    "codeblock",
    "hard-break-backslash",
    "hard-break-spaces",
    "heading",
    "hr",
    "image",
    "italic",
    "link",
    "list",
    "ordered-list",
    "paragraph-break",
    "soft-break",
    "task-list",
]

DOCUMENTS = [
    "",
    "# Hello",
    "plain text only",
    "**a** **b**",
    "Hello *world*\n\n- item\n- [x] done\n> quote\n---\n",
    "line one  \nline two\\\nthree",
    "Intro\r\n## Setup\r\nRun `make`.\rDone",
    "```python\nprint('hi')\n```\nafter",
    "![logo](/logo.png \"Logo\") and [docs](https://docs.example.com)",
    ":::warning Be careful\nDo not run this.\n:::\n\n[button:Go](https://example.com){primary,lg}",
    "[embed:youtube](https://youtu.be/dQw4w9WgXcQ){autoplay:1} trailing",
    "1. first\n2) second\n   * nested",
    "**unclosed and `code and [link](",
    "   \t  ",
]


def naive_parse(parser, markdown):
    """Reference tokenizer that searches every rule at every step."""
    text = markdown.replace("\r\n", "\n").replace("\r", "\n")
    tokens, position, iterations = [], 0, 0
    while position < len(text) and iterations < len(markdown) * 2:
        iterations += 1
        remaining = text[position:]
        best = None
        for rule in parser.rules:
            match = rule.pattern.search(remaining)
            if match and (best is None or match.start() < best[1].start()):
                best = (rule, match)
        if best is None:
            tokens.append(Token(type="text", content=remaining[0], raw=remaining[0]))
            position += 1
        elif best[1].start() > 0:
            prefix = remaining[: best[1].start()]
            tokens.append(Token(type="text", content=prefix, raw=prefix))
            position += len(prefix)
        else:
            rule, match = best
            tokens.append(replace(rule.render(match), raw=match.group(0)))
            position += len(match.group(0))
    return MarkdownParser._merge_text_tokens(tokens)


class TestRuleOrder:
    """Rule precedence and default registration"""

    def test_defaults_sorted_by_name(self):
        parser = MarkdownParser()
        parser.ensure_default_rules()
        assert parser.rule_names() == DEFAULT_RULE_ORDER

    def test_ensure_default_rules_is_idempotent(self):
        parser = MarkdownParser()
        parser.ensure_default_rules()
        parser.ensure_default_rules()
        parser.parse("text")
        assert parser.rule_names() == DEFAULT_RULE_ORDER

    def test_extension_rules_pinned_first_in_insertion_order(self, engine):
        assert engine.parser.rule_names()[:3] == ["button", "alert", "embed"]
        assert engine.parser.rule_names()[3:] == DEFAULT_RULE_ORDER

    def test_other_rules_sort_alphabetically_case_insensitive(self):
        parser = MarkdownParser()
        parser.add_rule(ParseRule("Zebra", r"zz", lambda m: Token(type="z")))
        parser.add_rule(ParseRule("apple", r"aa", lambda m: Token(type="a")))
        parser.add_rule(ParseRule("my-embed-thing", r"ee", lambda m: Token(type="e")))
        assert parser.rule_names() == ["my-embed-thing", "apple", "Zebra"]

    def test_add_rule_replaces_same_name(self):
        parser = MarkdownParser()
        parser.ensure_default_rules()
        loud = ParseRule("bold", r"\*\*(\w+)\*\*", lambda m: Token(type="loud", content=m.group(1)))
        parser.add_rule(loud)

        assert parser.rule_names() == DEFAULT_RULE_ORDER
        assert parser.parse("**hi**")[0].type == "loud"

    def test_pinned_rule_beats_default_at_same_offset(self, engine):
        tokens = engine.parse(":::info\nhello\n:::")
        assert [token.type for token in tokens] == ["alert"]

    def test_button_beats_link_at_same_offset(self, engine):
        tokens = engine.parse("[button:Go](https://example.com)")
        assert [token.type for token in tokens] == ["button"]

    def test_list_shadows_task_list(self):
        # "list" sorts before "task-list" and matches at the same offset
        tokens = MarkdownParser().parse("- [x] done")
        assert tokens == [Token(type="list-item", content="[x] done", raw="- [x] done")]

    def test_leftmost_match_wins_over_rule_order(self):
        tokens = MarkdownParser().parse("`code` then **bold**")
        assert [token.type for token in tokens] == ["code", "text", "bold"]


class TestTokens:
    """Token shapes produced by the default rules"""

    def test_heading(self):
        tokens = MarkdownParser().parse("# Hello")
        assert tokens == [Token(type="heading", content="Hello", raw="# Hello", attributes={"level": "1"})]

    def test_heading_after_text_line(self):
        tokens = MarkdownParser().parse("Intro\n## Setup")
        assert [token.type for token in tokens] == ["text", "soft-break", "heading"]
        assert tokens[2].attributes == {"level": "2"}
        assert tokens[2].content == "Setup"

    def test_inline_formatting(self):
        tokens = MarkdownParser().parse("This is **bold** text")
        assert tokens == [
            Token(type="text", content="This is ", raw="This is "),
            Token(type="bold", content="bold", raw="**bold**"),
            Token(type="text", content=" text", raw=" text"),
        ]

    def test_italic(self):
        tokens = MarkdownParser().parse("*it*")
        assert tokens == [Token(type="italic", content="it", raw="*it*")]

    def test_codeblock_with_language(self):
        tokens = MarkdownParser().parse("```py\nprint(1)\n```")
        assert len(tokens) == 1
        assert tokens[0].type == "codeblock"
        assert tokens[0].content == "print(1)\n"
        assert tokens[0].attributes == {"language": "py"}

    def test_codeblock_defaults_to_text_language(self):
        tokens = MarkdownParser().parse("```\nls\n```")
        assert tokens[0].attributes == {"language": "text"}

    def test_image_with_title(self):
        tokens = MarkdownParser().parse('![alt](/img.png "Title")')
        assert tokens[0].type == "image"
        assert tokens[0].attributes == {"alt": "alt", "src": "/img.png", "title": "Title"}

    def test_image_without_title(self):
        tokens = MarkdownParser().parse("![logo](/logo.png)")
        assert tokens[0].attributes == {"alt": "logo", "src": "/logo.png", "title": ""}

    def test_link(self):
        tokens = MarkdownParser().parse("[Docs](https://docs.example.com)")
        assert tokens == [
            Token(
                type="link",
                content="Docs",
                raw="[Docs](https://docs.example.com)",
                attributes={"href": "https://docs.example.com"},
            )
        ]

    def test_unordered_list_item(self):
        tokens = MarkdownParser().parse("- item")
        assert tokens == [Token(type="list-item", content="item", raw="- item")]

    def test_ordered_list_item(self):
        tokens = MarkdownParser().parse("3. third")
        assert tokens[0].type == "list-item"
        assert tokens[0].attributes == {"ordered": "true", "number": "3"}
        assert tokens[0].content == "third"

    def test_blockquote_and_hr(self):
        tokens = MarkdownParser().parse("> quoted\n---")
        assert [token.type for token in tokens] == ["blockquote", "soft-break", "hr"]
        assert tokens[0].content == "quoted"

    def test_hard_breaks(self):
        tokens = MarkdownParser().parse("line one  \nline two\\\nthree")
        assert [token.type for token in tokens] == ["text", "line-break", "text", "line-break", "text"]
        assert tokens[0].content == "line one"
        assert tokens[4].content == "three"

    def test_paragraph_break_beats_soft_break(self):
        tokens = MarkdownParser().parse("one\n\ntwo")
        assert [token.type for token in tokens] == ["text", "paragraph-break", "text"]
        assert tokens[1].raw == "\n\n"

    def test_soft_break_content_is_space(self):
        tokens = MarkdownParser().parse("a\nb")
        assert tokens[1] == Token(type="soft-break", content=" ", raw="\n")

    def test_whitespace_between_tokens_keeps_raw(self):
        tokens = MarkdownParser().parse("**a** **b**")
        assert tokens[1] == Token(type="text", content="", raw=" ")

    def test_to_dict(self):
        token = MarkdownParser().parse("# Hi")[0]
        assert token.to_dict() == {"type": "heading", "content": "Hi", "raw": "# Hi", "attributes": {"level": "1"}}
        assert Token(type="text", content="x", raw="x").to_dict() == {"type": "text", "content": "x", "raw": "x"}


class TestRoundTrip:
    """Joined raw values reproduce the normalized input"""

    @pytest.mark.parametrize("markdown", DOCUMENTS)
    def test_raw_covers_input(self, engine, markdown):
        tokens = engine.parse(markdown)
        normalized = markdown.replace("\r\n", "\n").replace("\r", "\n")
        assert "".join(token.raw for token in tokens) == normalized

    @pytest.mark.parametrize("markdown", DOCUMENTS)
    def test_no_adjacent_text_tokens(self, engine, markdown):
        types = [token.type for token in engine.parse(markdown)]
        assert all(not (a == b == "text") for a, b in zip(types, types[1:]))

    @pytest.mark.parametrize("markdown", DOCUMENTS)
    def test_match_cache_agrees_with_full_search(self, engine, markdown):
        assert engine.parse(markdown) == naive_parse(engine.parser, markdown)

    def test_empty_input(self):
        parser = MarkdownParser()
        assert parser.parse("") == []
        assert parser.get_warnings() == []


class TestRobustness:
    """Parsing never raises and always terminates"""

    def test_long_plain_input_terminates(self):
        parser = MarkdownParser()
        tokens = parser.parse("a" * 10_000)
        assert tokens == [Token(type="text", content="a" * 10_000, raw="a" * 10_000)]
        assert parser.get_warnings() == []

    def test_failing_rule_degrades_to_text(self, caplog):
        def explode(match):
            raise ValueError("nope")

        engine = ChangelogMarkdown(extensions=[Extension(name="boom", parse_rules=[ParseRule("boom", r"@@", explode)])])

        with caplog.at_level(logging.ERROR, logger="changelog.markdown.parser"):
            tokens = engine.parse("a@@b")

        assert tokens == [Token(type="text", content="a@@b", raw="a@@b")]
        assert "Failed to render boom: nope" in engine.get_warnings()
        assert "Error rendering token for rule 'boom'" in caplog.text

    def test_zero_length_match_hits_iteration_cap(self):
        stall = ParseRule("stall", r"(?=x)", lambda match: Token(type="marker"))
        engine = ChangelogMarkdown(extensions=[Extension(name="stall", parse_rules=[stall])])

        tokens = engine.parse("abcx")

        assert tokens[0] == Token(type="text", content="abc", raw="abc")
        assert {token.type for token in tokens[1:]} == {"marker"}
        assert "Parser hit maximum iterations - possible infinite loop detected" in engine.get_warnings()


class TestWarnings:
    """Advisory warnings about unbalanced markers"""

    def test_unclosed_bold(self):
        parser = MarkdownParser()
        parser.parse("**bold")
        assert parser.get_warnings() == [
            "Unclosed bold markers (**) detected - some bold formatting may not work"
        ]

    def test_unclosed_italic(self):
        parser = MarkdownParser()
        parser.parse("*italic")
        assert any(warning.startswith("Unclosed italic markers") for warning in parser.get_warnings())

    def test_unclosed_code(self):
        parser = MarkdownParser()
        parser.parse("```\nnever closed")
        warnings = parser.get_warnings()
        assert any(warning.startswith("Unclosed code blocks") for warning in warnings)
        assert any(warning.startswith("Unclosed inline code markers") for warning in warnings)

    def test_unmatched_brackets_and_parentheses(self):
        parser = MarkdownParser()
        parser.parse("[link(x")
        assert parser.get_warnings() == [
            "Unmatched square brackets [] detected - some links may not work",
            "Unmatched parentheses () detected - some links may not work",
        ]

    def test_warnings_reset_between_parses(self):
        parser = MarkdownParser()
        parser.parse("**bold")
        parser.parse("fine")
        assert parser.get_warnings() == []

    def test_get_warnings_returns_copy(self):
        parser = MarkdownParser()
        parser.parse("**bold")
        parser.get_warnings().clear()
        assert len(parser.get_warnings()) == 1

    def test_warnings_are_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="changelog.markdown.parser"):
            MarkdownParser().parse("**bold")
        assert "Parser warnings" in caplog.text
