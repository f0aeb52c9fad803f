"""
Tests for the validator.
"""

import io

import pytest

from nexaform.core.config import Config
from nexaform.utils.logger import LogLevel, configure_logging
from nexaform.validation import (
    ConfigurationError,
    EmailField,
    EqualToRule,
    Form,
    FormField,
    LengthRule,
    MinRule,
    ParsleyBackend,
    RangeRule,
    RequiredRule,
    ValidationError,
    ValidationResult,
    Validator,
)
from nexaform.validation.validator import ValidationMessage


class TestRuleMap:
    def test_same_rule_class_replaces(self):
        validator = Validator()
        validator.set_rule("Email", RequiredRule("first"))
        validator.set_rule("Email", RequiredRule("second"))

        rules = validator.get_rules_for_field_name("Email")
        assert len(rules) == 1
        assert rules[0].get_message() == "second"

    def test_different_rule_classes_accumulate(self):
        validator = Validator({"Age": [MinRule(18), RangeRule(min=0, max=120)]})

        assert len(validator.get_rules_for_field_name("Age")) == 2

    def test_set_rules_forms(self):
        validator = Validator()
        validator.set_rules("Age", MinRule(18))
        validator.set_rules({"Name": [RequiredRule()]})

        assert [r.get_type() for r in validator.get_rules_for_field_name("Age")] == ["min"]
        assert [r.get_type() for r in validator.get_rules_for_field_name("Name")] == ["required"]

    def test_rules_know_their_field_and_validator(self):
        validator = Validator()
        rule = RequiredRule()
        validator.set_rule("Email", rule)

        assert rule.get_field_name() == "Email"
        assert rule.validator is validator
        assert rule.backend is validator.backend

    def test_required_fields_list(self):
        validator = Validator(required=["Email", "Name"])

        assert validator.field_is_required("Email")
        assert validator.field_is_required("Name")
        assert not validator.field_is_required("Age")

    def test_required_fields_mapping(self):
        validator = Validator()
        validator.add_required_fields({"Email": "We need your email."})

        rule = validator.get_rules_for_field_name("Email")[0]
        assert rule.get_message() == "We need your email."

    def test_remove_rules(self):
        validator = Validator(required=["Email"])
        validator.remove_rules_for_field("Email")

        assert validator.get_rules_for_field_name("Email") == []

    def test_rules_for_field_object(self):
        validator = Validator(required=["Email"])

        assert len(validator.get_rules_for_field(FormField("Email"))) == 1


class TestConstruction:
    def test_defaults(self):
        validator = Validator()

        assert isinstance(validator.get_backend(), ParsleyBackend)
        assert validator.get_client_side()
        assert validator.get_server_side()

    def test_flags_from_config(self):
        config = Config().load_env({"NEXAFORM_VALIDATOR__SERVER_SIDE": "false"})

        assert not Validator(config=config).get_server_side()

    def test_explicit_flags_win(self):
        config = Config({"validator": {"client_side": False}})

        assert Validator(config=config, client_side=True).get_client_side()

    def test_backend_config_is_shared(self, config):
        backend = ParsleyBackend(config)

        assert Validator(backend=backend).config is config

    def test_unknown_backend(self):
        config = Config({"validator": {"backend": "missing"}})

        with pytest.raises(ConfigurationError):
            Validator(config=config)


class TestBinding:
    def test_binds_once(self, make_form):
        form, validator = make_form(fields=["Email"])

        assert validator.get_form() is form
        assert form.get_validator() is validator
        assert validator.backend.get_frontend() is validator

        # Binding the same form again is a no-op
        validator.set_form(form)
        assert form.extra_classes == ["parsleybackend"]

    def test_rebinding_raises(self, make_form):
        form, validator = make_form(fields=["Email"])

        with pytest.raises(ConfigurationError, match="already bound"):
            validator.set_form(Form("Other", [FormField("Email")]))

    def test_set_form_attaches_validator_to_form(self):
        validator = Validator()
        form = Form("Signup", [FormField("Email")])

        validator.set_form(form)

        assert form.get_validator() is validator
        assert form.get_attribute("data-client-side") == "true"

    def test_data_field_lookup(self, make_form):
        form, validator = make_form(fields=["Email"])

        assert validator.get_data_field("Email") is form["Email"]
        assert validator.get_data_field("Missing") is None
        assert Validator().get_data_field("Email") is None


class TestServerSide:
    def test_full_form_scenario(self, make_form):
        form, validator = make_form(
            {"email": [RequiredRule()], "age": [RangeRule(min=18, max=65)]},
            fields=["email", "age"],
        )

        assert validator.php({"email": "", "age": 15}) is False
        assert validator.messages == [
            ValidationMessage("email", "This value is required.", "validation"),
            ValidationMessage("age", "This value should be between 18 and 65.", "validation"),
        ]

    def test_all_rules_are_evaluated(self, make_form):
        form, validator = make_form(
            {"Username": [RequiredRule(), LengthRule(min=3, max=5), MinRule(10)]},
            fields=["Username"],
        )

        assert not validator.php({"Username": "7"})
        assert len(validator.messages) == 2

    def test_passes(self, make_form):
        form, validator = make_form(
            {"email": [RequiredRule()], "age": [RangeRule(min=18, max=65)]},
            fields=["email", "age"],
        )

        assert validator.php({"email": "a@example.com", "age": "30"})
        assert validator.messages == []

    def test_server_side_disabled(self, make_form):
        form, validator = make_form(
            {"email": [RequiredRule()]},
            fields=["email"],
            server_side=False,
        )

        assert validator.php({"email": ""})
        assert validator.messages == []

    def test_targets_read_submitted_data(self, make_form):
        form, validator = make_form(
            {"Confirm": [EqualToRule("Password")]},
            fields=["Password", "Confirm"],
        )

        assert validator.php({"Password": "secret", "Confirm": "secret"})
        assert not validator.php({"Password": "secret", "Confirm": "other"})

    def test_field_validation_reads_submitted_data(self, make_form):
        form, validator = make_form(fields=[EmailField("Email")], values={"Email": "a@example.com"})

        assert not validator.php({"Email": "not-an-email"})
        assert validator.get_form()["Email"].data_value() == "not-an-email"

    def test_repeated_passes_do_not_accumulate(self, make_form):
        form, validator = make_form({"email": [RequiredRule()]}, fields=["email"])

        validator.php({"email": ""})
        validator.php({"email": ""})

        assert len(validator.messages) == 1

    def test_rules_without_form_field_are_skipped(self, make_form):
        form, validator = make_form({"Ghost": [RequiredRule()]}, fields=["Email"])

        assert validator.php({})

    def test_unbound_validator_tests_all_rules(self):
        validator = Validator({"x": [RequiredRule()]})

        assert not validator.php({})

    def test_failures_are_logged(self, make_form):
        stream = io.StringIO()
        configure_logging(LogLevel.INFO, stream=stream)
        form, validator = make_form({"email": [RequiredRule()]}, fields=["email"])

        validator.php({"email": ""})

        assert "Validation failed form=Signup field=email rule=RequiredRule" in stream.getvalue()


class TestValidate:
    def test_result(self, make_form):
        form, validator = make_form(
            {"email": [RequiredRule()], "age": [RangeRule(min=18, max=65)]},
            fields=["email", "age", "name"],
        )

        result = validator.validate({"email": "", "age": 15, "name": "Ada"})

        assert not result
        assert result.failed()
        assert result.errors == {
            "email": ["This value is required."],
            "age": ["This value should be between 18 and 65."],
        }
        assert result.data == {"name": "Ada"}
        assert result.has_error("age")
        assert result.first_error() == "This value is required."
        assert result.first_error("age") == "This value should be between 18 and 65."
        assert form["age"].data_value() == 15

    def test_messages_reset_between_passes(self, make_form):
        form, validator = make_form({"email": [RequiredRule()]}, fields=["email"])

        validator.validate({"email": ""})
        result = validator.validate({"email": "a@example.com"})

        assert result.valid
        assert result.all_errors() == []

    def test_raise_if_invalid(self):
        result = ValidationResult(
            valid=False,
            messages=[ValidationMessage("email", "This value is required.")],
        )

        with pytest.raises(ValidationError) as exc_info:
            result.raise_if_invalid()

        assert exc_info.value.errors == {"email": ["This value is required."]}
        assert exc_info.value.first("email") == "This value is required."
        assert "email: This value is required." in str(exc_info.value)

    def test_valid_result_does_not_raise(self):
        ValidationResult(valid=True).raise_if_invalid()


class TestRuleBuilder:
    def test_chain(self):
        validator = Validator()
        validator.field("Username").required().alphanum().length(3, 20).message("3 to 20 characters.")

        rules = validator.get_rules_for_field_name("Username")
        assert [r.get_type() for r in rules] == ["required", "alphanum", "length"]
        assert rules[-1].get_message() == "3 to 20 characters."

    def test_comparisons(self):
        validator = Validator()
        validator.field("End").gt("Start")

        rule = validator.get_rules_for_field_name("End")[0]
        assert rule.get_type() == "gt"
        assert rule.get_target() == "Start"

    def test_message_without_rule(self):
        with pytest.raises(ConfigurationError):
            Validator().field("Email").message("Required.")

    def test_builds_against_form(self, make_form):
        form, validator = make_form(fields=["Password", "ConfirmPassword"])
        validator.field("ConfirmPassword").required().equal_to("Password")

        result = validator.validate({"Password": "secret", "ConfirmPassword": "secret"})

        assert result.valid
