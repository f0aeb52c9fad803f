"""
Tests for the built-in rules.
"""

from datetime import datetime

import pytest

from nexaform.validation import (
    AlphaNumRule,
    CallbackRule,
    ComparisonRule,
    ConfigurationError,
    DateRule,
    DomainRule,
    EqualToRule,
    LengthRule,
    MaxRule,
    MaxWordsRule,
    MinCheckRule,
    MinRule,
    NotEqualToRule,
    PatternRule,
    RangeRule,
    RequiredRule,
    URLRule,
    WordsRule,
)
from nexaform.validation.rules import is_url


class TestRequiredRule:
    @pytest.mark.parametrize("value", ["", None])
    def test_missing(self, value):
        assert not RequiredRule().test(value)

    @pytest.mark.parametrize("value", [" ", "a", 0, False, ["x"]])
    def test_present(self, value):
        assert RequiredRule().test(value)

    def test_default_message(self):
        assert RequiredRule().get_message() == "This value is required."


class TestBoundedRules:
    @pytest.mark.parametrize(
        "rule",
        [MinRule(), MaxRule(), RangeRule(), RangeRule(min=1), RangeRule(max=1)],
    )
    def test_missing_bounds_make_rule_invalid(self, rule):
        assert not rule.is_valid()
        assert rule.test(-1000)
        assert rule.test(1000)

    @pytest.mark.parametrize("rule", [MinRule(1), MaxRule(1), RangeRule(min=1, max=2)])
    def test_bounds_make_rule_valid(self, rule):
        assert rule.is_valid()

    def test_min(self):
        rule = MinRule(5)

        assert rule.test(5)
        assert rule.test("6")
        assert not rule.test(3)
        assert rule.test("abc")
        assert rule.test("")

    def test_max(self):
        rule = MaxRule(5)

        assert rule.test(5)
        assert not rule.test("5.5")

    def test_range(self):
        rule = RangeRule(min=1, max=10)

        assert rule.test(5)
        assert not rule.test(11)
        assert rule.test("x")

    def test_length(self):
        rule = LengthRule(min=2, max=5)

        assert rule.test("abc")
        assert not rule.test("a")
        assert not rule.test("abcdef")
        assert rule.test("")
        assert rule.get_value() == "[2, 5]"

    def test_words(self):
        rule = WordsRule(min=2, max=3)

        assert rule.test("two words")
        assert not rule.test("one")
        assert not rule.test("far too many words")
        assert rule.test("")

    def test_max_words(self):
        rule = MaxWordsRule(2)

        assert rule.test("two words")
        assert not rule.test("three whole words")
        assert rule.get_value() == "2"

    def test_min_check(self):
        rule = MinCheckRule(2)

        assert rule.test(["a", "b"])
        assert not rule.test(["a"])
        assert not rule.test("a")
        assert rule.test([])
        assert rule.get_message() == "You must select a minimum of 2 options."


class TestPatternRule:
    def test_bare_pattern_matches_whole_value(self):
        rule = PatternRule("[a-z]+")

        assert rule.test("abc")
        assert not rule.test("abc1")
        assert rule.test("")

    def test_regex_literal_is_searched(self):
        assert PatternRule(r"/^\d+$/").test("123")
        assert not PatternRule(r"/^\d+$/").test("12a")
        assert PatternRule("/abc/i").test("xxABCxx")

    def test_empty_pattern_is_invalid(self):
        rule = PatternRule()

        assert not rule.is_valid()
        assert rule.test("anything")

    def test_bad_pattern_raises(self):
        with pytest.raises(ConfigurationError):
            PatternRule("(").test("x")

    def test_value_is_pattern(self):
        assert PatternRule("[a-z]+").get_value() == "[a-z]+"


class TestAlphaNumRule:
    def test_word_characters(self):
        rule = AlphaNumRule()

        assert rule.test("abc_123")
        assert rule.test("ABC")
        assert not rule.test("abc-1")
        assert not rule.test("é")
        assert rule.test("")


class TestURLRule:
    @pytest.mark.parametrize(
        "value",
        [
            "https://example.com/path?q=1",
            "http://localhost:8000",
            "http://127.0.0.1/",
            "mailto:someone@example.com",
        ],
    )
    def test_valid(self, value):
        assert is_url(value)
        assert URLRule().test(value)

    @pytest.mark.parametrize(
        "value",
        ["example.com", "http://", "http://exa mple.com", "http://example.com:abc", "http://-bad.com"],
    )
    def test_invalid(self, value):
        assert not URLRule().test(value)

    def test_empty_passes(self):
        assert URLRule().test("")


class TestDomainRule:
    @pytest.mark.parametrize("value", ["example.com", "sub.example.co.uk", "localhost"])
    def test_valid(self, value):
        assert DomainRule().test(value)

    @pytest.mark.parametrize("value", ["example", "example.123", "-bad.com", "exa mple.com"])
    def test_invalid(self, value):
        assert not DomainRule().test(value)


class TestDateRule:
    def test_default_format(self):
        rule = DateRule()

        assert rule.get_client_format() == "YYYY-MM-DD"
        assert rule.get_server_format() == "%Y-%m-%d"
        assert rule.get_value() == "YYYY-MM-DD"

    def test_round_trip(self):
        rule = DateRule()
        value = datetime(2024, 5, 17).strftime(rule.get_server_format())

        assert rule.test(value)

    @pytest.mark.parametrize("value", ["2024-13-01", "2023-02-29", "17/05/2024", "tomorrow"])
    def test_invalid_dates(self, value):
        assert not DateRule().test(value)

    def test_leap_day(self):
        assert DateRule().test("2024-02-29")

    def test_derived_server_format(self):
        rule = DateRule("DD/MM/YYYY")

        assert rule.get_server_format() == "%d/%m/%Y"
        assert rule.test("17/05/2024")
        assert not rule.test("2024-05-17")

    def test_explicit_server_format(self):
        rule = DateRule("DD.MM.YYYY", "%d.%m.%Y")

        assert rule.has_server_format()
        assert rule.test("31.12.2024")

    def test_missing_client_format_is_invalid(self):
        rule = DateRule().set_client_format("")

        assert not rule.is_valid()
        assert rule.test("garbage")

    def test_empty_passes(self):
        assert DateRule().test("")


class TestTargetRules:
    def test_equal_to(self, make_form):
        form, validator = make_form(
            {"ConfirmPassword": [EqualToRule("Password")]},
            fields=["Password", "ConfirmPassword"],
            values={"Password": "secret"},
        )
        rule = validator.get_rules_for_field_name("ConfirmPassword")[0]

        assert rule.test("secret")
        assert not rule.test("other")
        assert rule.get_message() == "This value should be the same as the Password field."
        assert rule.get_value() == "#Signup_Password"

    def test_target_value_is_read_on_use(self, make_form):
        form, validator = make_form(
            {"ConfirmPassword": [EqualToRule("Password")]},
            fields=["Password", "ConfirmPassword"],
        )
        rule = validator.get_rules_for_field_name("ConfirmPassword")[0]

        form["Password"].set_value("first")
        assert rule.test("first")

        form["Password"].set_value("second")
        assert not rule.test("first")

    def test_equal_to_compares_loosely(self, make_form):
        form, validator = make_form(
            {"Copy": [EqualToRule("Count")]},
            fields=["Count", "Copy"],
            values={"Count": 5},
        )
        rule = validator.get_rules_for_field_name("Copy")[0]

        assert rule.test("5.0")

    def test_equal_to_evaluates_empty_values(self, make_form):
        form, validator = make_form(
            {"ConfirmPassword": [EqualToRule("Password")]},
            fields=["Password", "ConfirmPassword"],
            values={"Password": "secret"},
        )
        rule = validator.get_rules_for_field_name("ConfirmPassword")[0]

        assert not rule.test("")

    def test_not_equal_to(self, make_form):
        form, validator = make_form(
            {"NewPassword": [NotEqualToRule("OldPassword")]},
            fields=["OldPassword", "NewPassword"],
            values={"OldPassword": "hunter2"},
        )
        rule = validator.get_rules_for_field_name("NewPassword")[0]

        assert rule.test("correct horse")
        assert not rule.test("hunter2")

    def test_missing_target_raises(self, make_form):
        form, validator = make_form(
            {"ConfirmPassword": [EqualToRule("Missing")]},
            fields=["ConfirmPassword"],
        )
        rule = validator.get_rules_for_field_name("ConfirmPassword")[0]

        with pytest.raises(ConfigurationError):
            rule.test("x")

    def test_unattached_target_rule_raises(self):
        with pytest.raises(ConfigurationError):
            EqualToRule("Password").test("secret")


class TestComparisonRule:
    def test_rejects_unknown_type(self):
        with pytest.raises(ConfigurationError, match="Invalid comparison type: eq"):
            ComparisonRule("eq", "Start")

    def test_rejects_unknown_type_on_set(self):
        rule = ComparisonRule("lt", "Start")

        with pytest.raises(ConfigurationError):
            rule.set_type("between")

    @pytest.mark.parametrize(
        "type, value, expected",
        [
            ("lt", "4", True),
            ("lt", "5", False),
            ("lte", "5", True),
            ("gt", "10", True),
            ("gt", "5", False),
            ("gte", "5", True),
            ("gte", "4", False),
        ],
    )
    def test_numeric_ordering(self, make_form, type, value, expected):
        form, validator = make_form(
            {"End": [ComparisonRule(type, "Start")]},
            fields=["Start", "End"],
            values={"Start": "5"},
        )
        rule = validator.get_rules_for_field_name("End")[0]

        assert rule.test(value) is expected

    def test_string_ordering(self, make_form):
        form, validator = make_form(
            {"EndDate": [ComparisonRule(ComparisonRule.GREATER_THAN, "StartDate")]},
            fields=["StartDate", "EndDate"],
            values={"StartDate": "2024-01-01"},
        )
        rule = validator.get_rules_for_field_name("EndDate")[0]

        assert rule.test("2024-01-02")
        assert not rule.test("2023-12-31")

    def test_attribute_follows_type(self, make_form):
        form, validator = make_form(
            {"End": [ComparisonRule("gte", "Start")]},
            fields=["Start", "End"],
        )
        rule = validator.get_rules_for_field_name("End")[0]

        assert rule.get_attribute() == "gte"
        assert rule.get_value() == "#Signup_Start"
        assert rule.get_message() == (
            "This value should be greater than or equal to the value of the Start field."
        )


class TestCallbackRule:
    def test_calls_function(self):
        rule = CallbackRule(lambda value: value.lower() != "admin")

        assert rule.test("alice")
        assert not rule.test("Admin")
        assert rule.test("")

    def test_client_side_needs_explicit_attribute(self):
        assert not CallbackRule(bool).is_valid()
        assert CallbackRule(bool, attribute="custom").is_valid()
