from __future__ import annotations

import pytest

from rulekit.validation import Rule, RuleSpec, parse_rule, parse_rules
from rulekit.validation.parser import normalize_rule_name


def test_pipe_delimited():
    spec = parse_rules("required|numeric|min:5")
    assert spec.rules == (Rule("required"), Rule("numeric"), Rule("min", ("5",)))


def test_sequence_and_rule_objects():
    spec = parse_rules(["required", Rule("between", ("1", "10")), "in:a, b ,c"])
    assert [str(r) for r in spec] == ["required", "between:1,10", "in:a,b,c"]


def test_empty_segments_ignored():
    assert len(parse_rules("required||numeric|")) == 2
    assert len(parse_rules("")) == 0


def test_regex_keeps_commas():
    assert parse_rule("regex:^[a-z,]{1,3}$").params == ("^[a-z,]{1,3}$",)
    assert parse_rule("not_regex:a,b").params == ("a,b",)


@pytest.mark.parametrize("name,expected", [
    ("isOdd", "is_odd"),
    ("nestedCollection", "nested_collection"),
    ("nested_collection", "nested_collection"),
    (" Required ", "required"),
])
def test_name_normalization(name, expected):
    assert normalize_rule_name(name) == expected


def test_unknown_names_are_not_rejected_here():
    assert parse_rules("definitely_not_a_rule").find("definitely_not_a_rule") is not None


def test_spec_helpers():
    spec = parse_rules("bail|integer|min:3")
    assert spec.has("integer", "numeric")
    assert not spec.has("string")
    assert spec.bails
    assert spec.find("min") == Rule("min", ("3",))
    assert str(spec) == "bail|integer|min:3"
    assert parse_rules(spec) is spec
    assert parse_rules(Rule("required")) == RuleSpec((Rule("required"),))
