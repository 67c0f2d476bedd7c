"""Test condition evaluation and conditional re-formatting."""

import pytest

from tgmark.ast import Bold, Italic, Text
from tgmark.conditions import (
    ConditionalFormat,
    Contains,
    CustomCondition,
    Equals,
    GreaterThan,
    LessThan,
    Matches,
    apply_rules,
    compile_pattern,
    evaluate,
    format_text,
)
from tgmark.errors import RegexError


class TestEvaluate:
    @pytest.mark.parametrize(
        ("condition", "value", "expected"),
        [
            (GreaterThan(10), "11", True),
            (GreaterThan(10), "10", False),
            (GreaterThan(10), "abc", False),
            (LessThan(0), "-0.5", True),
            (LessThan(0), "", False),
            (GreaterThan(5), "1_000", False),
            (GreaterThan(5), " 50 ", False),
            (LessThan(100), "7\n", False),
            (GreaterThan(5), "6e1", True),
            (Equals("ok"), "ok", True),
            (Equals("ok"), "OK", False),
            (Contains("err"), "an error", True),
            (Contains("err"), "fine", False),
            (Matches(r"^\d+$"), "123", True),
            (Matches(r"\d"), "abc", False),
            (CustomCondition("anything"), "x", False),
        ],
    )
    def test_evaluate(self, condition, value, expected):
        assert evaluate(condition, value) is expected

    def test_invalid_pattern_is_false(self):
        assert evaluate(Matches("("), "(") is False

    def test_compile_pattern_raises(self):
        with pytest.raises(RegexError, match="invalid pattern"):
            compile_pattern("[unclosed")


def _bold(nodes):
    return (Bold(tuple(nodes)),)


def _italic(nodes):
    return (Italic(tuple(nodes)),)


class TestFormatText:
    def test_no_match_returns_original(self):
        rules = [ConditionalFormat(Equals("x"), _bold)]
        assert format_text(Text("y"), rules) == (Text("y"),)

    def test_first_matching_rule_wins(self):
        rules = [
            ConditionalFormat(Contains("a"), _bold),
            ConditionalFormat(Contains("ab"), _italic),
        ]
        assert format_text(Text("ab"), rules) == (Bold((Text("ab"),)),)


class TestApplyRules:
    def test_rewrites_nested_text(self):
        rules = [ConditionalFormat(GreaterThan(100), _bold)]
        tree = (Text("total "), Italic((Text("150"),)))
        assert apply_rules(tree, rules) == (Text("total "), Italic((Bold((Text("150"),)),)))

    def test_no_rules_is_identity(self):
        tree = (Text("a"),)
        assert apply_rules(tree, []) == tree
