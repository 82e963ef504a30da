"""Tests for first-match-wins type rules."""

from valuelens.inference import (
    DIGITS,
    TypeRule,
    enclosed,
    exact,
    first_match,
    matches,
    name_and_value,
    name_contains,
    name_is,
    prefixed,
    value_contains,
)


def test_first_match_respects_order():
    """The earliest matching rule wins."""
    rules = [exact("a", result="A"), prefixed("a", result="P")]
    assert first_match(rules, "", "a") == "A"
    assert first_match(rules, "", "ab") == "P"
    assert first_match(rules, "", "b") is None


def test_callable_result_can_decline():
    """A derived label of None lets the cascade continue."""
    rules = [
        TypeRule(lambda _n, _v: True, lambda _v: None, "declines"),
        TypeRule(lambda _n, _v: True, lambda v: v.upper(), "derives"),
    ]
    assert first_match(rules, "", "x") == "X"


def test_value_helpers():
    """Value predicates look at the stripped value only."""
    assert matches(DIGITS, "int").apply("count", "42") == "int"
    assert matches(r"^\d+L$", "long").apply("", "42L") == "long"
    assert enclosed('"', '"', "string").apply("", '"hi"') == "string"
    assert enclosed('"', '"', "string").apply("", '"') is None
    assert value_contains("@", " ", result="ref").apply("", "User@1 x") == "ref"
    assert value_contains("@", " ", result="ref").apply("", "User@1") is None


def test_name_helpers():
    """Name predicates see the lowercased name."""
    assert name_contains("count", "total", result="int").apply("itemcount", "") == "int"
    assert name_is("req", result="Request").apply("req", "") == "Request"
    assert name_is("req", result="Request").apply("request_id", "") is None
    rule = name_and_value("id", DIGITS, result="int64")
    assert rule.apply("userid", "42") == "int64"
    assert rule.apply("userid", "abc") is None
    assert rule.apply("name", "42") is None
