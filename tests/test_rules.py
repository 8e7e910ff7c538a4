"""Tests for rule strings, Rule and FilterRule."""

import pytest

from validata.errors import RuleError
from validata.rules import FilterRule, Rule, parse_rule_string, split_fields


class TestSplitFields:
    def test_string_and_list(self):
        assert split_fields("a, b ,c") == ("a", "b", "c")
        assert split_fields(["a", "b"]) == ("a", "b")

    def test_empty_raises(self):
        with pytest.raises(RuleError):
            split_fields(" , ")


class TestParseRuleString:
    def test_names_and_args(self):
        assert parse_rule_string("required|len_range:3,20|in: a , b") == [
            ("required", ()),
            ("len_range", ("3", "20")),
            ("in", ("a", "b")),
        ]

    def test_regex_argument_is_not_split(self):
        assert parse_rule_string(r"regex:^\d{1,3}$") == [("regex", (r"^\d{1,3}$",))]
        assert parse_rule_string("regexp:a,b") == [("regexp", ("a,b",))]

    def test_blank_segments_skipped(self):
        assert parse_rule_string("trim||lower", filters=True) == [("trim", ()), ("lower", ())]

    def test_missing_name_raises(self):
        with pytest.raises(RuleError, match="missing function name"):
            parse_rule_string(":3")


class TestRule:
    def test_normalizes_fields(self):
        rule = Rule(fields="name, email", validator="required")
        assert rule.fields == ("name", "email")
        assert rule.is_required

    def test_empty_validator_raises(self):
        with pytest.raises(RuleError):
            Rule(fields="name", validator=" ")

    def test_context_validator_minimum_args(self):
        with pytest.raises(RuleError, match="at least 2"):
            Rule(fields="state", validator="required_if", args=("country",))

    def test_chained_modifiers(self):
        rule = (
            Rule(fields="age", validator="between", args=(1, 99))
            .with_message("{field} out of range")
            .with_skip_empty(False)
            .with_stop_on_error()
            .with_check_default()
        )
        assert rule.canonical == "range"
        assert rule.message == "{field} out of range"
        assert rule.skip_empty is False
        assert rule.stop_on_error is True
        assert rule.check_default is True
        assert not rule.is_context_check

    def test_when_sets_condition(self):
        condition = lambda v: True  # noqa: E731
        rule = Rule(fields="x", validator="int").when(condition)
        assert rule.condition is condition


class TestFilterRule:
    def test_from_string(self):
        rule = FilterRule.from_string("name", "trim|substr:0,3")
        assert rule.filters == [("trim", ()), ("substr", ("0", "3"))]

    def test_add_filters_and_typed_filter(self):
        rule = FilterRule(fields="tags").add_filters("split", "unique").add_filter("join", "|")
        assert rule.filters == [("split", ()), ("unique", ()), ("join", ("|",))]
