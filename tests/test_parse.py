"""Test parsing of styled spans, code, pre blocks, links, and entities."""

from tgmark.ast import (
    Bold,
    Code,
    Command,
    Hashtag,
    Italic,
    Link,
    Mention,
    Pre,
    Spoiler,
    Strikethrough,
    Text,
    Underline,
)


class TestStyledSpans:
    def test_bold(self, parse_source):
        assert parse_source("**bold text**") == [Bold((Text("bold text"),))]

    def test_star_italic(self, parse_source):
        assert parse_source("*it*") == [Italic((Text("it"),))]

    def test_underscore_italic(self, parse_source):
        assert parse_source("_it_") == [Italic((Text("it"),))]

    def test_underline(self, parse_source):
        assert parse_source("__under__") == [Underline((Text("under"),))]

    def test_strikethrough(self, parse_source):
        assert parse_source("~~gone~~") == [Strikethrough((Text("gone"),))]

    def test_spoiler(self, parse_source):
        assert parse_source("~secret~") == [Spoiler((Text("secret"),))]

    def test_nested(self, parse_source):
        nodes = parse_source("**a _b_ c**")
        assert nodes == [Bold((Text("a "), Italic((Text("b"),)), Text(" c")))]

    def test_surrounding_text(self, parse_source):
        nodes = parse_source("say **hi** now")
        assert nodes == [Text("say "), Bold((Text("hi"),)), Text(" now")]

    def test_empty_bold(self, parse_source):
        assert parse_source("****") == [Bold(())]

    def test_entities_inside_span(self, parse_source):
        nodes = parse_source("*@me #tag*")
        assert nodes == [Italic((Mention("me"), Text(" "), Hashtag("tag")))]


class TestCode:
    def test_inline_code(self, parse_source):
        assert parse_source("`x*y`") == [Code("x*y")]

    def test_code_keeps_markup_verbatim(self, parse_source):
        assert parse_source("`**not bold** @me`") == [Code("**not bold** @me")]

    def test_escaped_backtick_in_code(self, parse_source):
        assert parse_source("`a\\`b`") == [Code("a`b")]

    def test_other_escapes_stay_raw_in_code(self, parse_source):
        assert parse_source("`\\*`") == [Code("\\*")]

    def test_double_backtick_is_empty_code(self, parse_source):
        assert parse_source("``x") == [Code(""), Text("x")]


class TestPre:
    def test_pre_with_language(self, parse_source):
        nodes = parse_source("```python\nprint(1)\n```")
        assert nodes == [Pre("print(1)\n", "python")]

    def test_language_without_line_break(self, parse_source):
        assert parse_source("```rust```") == [Pre("", "rust")]

    def test_first_text_run_is_language(self, parse_source):
        assert parse_source("```a*b```") == [Pre("*b", "a")]

    def test_pre_without_language_keeps_line_breaks(self, parse_source):
        assert parse_source("```\ncode\n```") == [Pre("\ncode\n")]

    def test_single_backtick_inside_pre(self, parse_source):
        assert parse_source("```\na`b```") == [Pre("\na`b")]

    def test_double_backtick_inside_pre(self, parse_source):
        assert parse_source("```\na``b```") == [Pre("\na``b")]

    def test_multiline_pre(self, parse_source):
        nodes = parse_source("```sh\nls\ncd /tmp\n```")
        assert nodes == [Pre("ls\ncd /tmp\n", "sh")]

    def test_styles_are_not_parsed_inside_pre(self, parse_source):
        assert parse_source("```\n**x** _y_```") == [Pre("\n**x** _y_")]


class TestLinks:
    def test_simple_link(self, parse_source):
        nodes = parse_source("[text](https://example.com)")
        assert nodes == [Link((Text("text"),), "https://example.com")]

    def test_url_keeps_entity_characters(self, parse_source):
        nodes = parse_source("[a](https://x.io/some_path#frag)")
        assert nodes == [Link((Text("a"),), "https://x.io/some_path#frag")]

    def test_url_with_query(self, parse_source):
        nodes = parse_source("[q](https://x.io/?a=1&b=*2*)")
        assert nodes[0].url == "https://x.io/?a=1&b=*2*"

    def test_escaped_paren_in_url(self, parse_source):
        nodes = parse_source("[w](https://w.org/a_\\(b\\))")
        assert nodes[0].url == "https://w.org/a_(b)"

    def test_styled_link_text(self, parse_source):
        nodes = parse_source("[**bold** link](u)")
        assert nodes == [Link((Bold((Text("bold"),)), Text(" link")), "u")]


class TestEntities:
    def test_concrete_scenario(self, parse_source):
        nodes = parse_source("Hello @rustlang #rust")
        assert nodes == [Text("Hello "), Mention("rustlang"), Text(" "), Hashtag("rust")]

    def test_command(self, parse_source):
        assert parse_source("/start now") == [Command("start"), Text(" now")]


class TestLiterals:
    def test_escape_becomes_text(self, parse_source):
        nodes = parse_source("\\*not bold\\*")
        assert nodes == [Text("*"), Text("not bold"), Text("*")]

    def test_line_break_becomes_text(self, parse_source):
        assert parse_source("a\nb") == [Text("a"), Text("\n"), Text("b")]

    def test_stray_punctuation_is_literal(self, parse_source):
        nodes = parse_source("a ) | ] {b}")
        values = "".join(n.value for n in nodes)
        assert values == "a ) | ] {b}"
        assert all(isinstance(n, Text) for n in nodes)

    def test_bare_triggers_are_literal(self, parse_source):
        nodes = parse_source("@ # /")
        assert "".join(n.value for n in nodes) == "@ # /"

    def test_text_not_coalesced(self, parse_source):
        assert len(parse_source("a\\.b")) == 3

    def test_empty_source(self, parse_source):
        assert parse_source("") == []
