"""
NexaForm Validator
==================

Owns a form's rules and runs the server-side validation pass.

Rules are kept per field name and per concrete rule class, so setting
a second RequiredRule on "Email" replaces the first.

Lifecycle:
1. Attach rules to field names
2. Bind to exactly one form (set_form); the backend is initialized
   and the form receives its classes and attributes
3. Validate submitted data (php / validate)

Example:
    validator = Validator(
        {"Age": [RangeRule(min=18, max=65)]},
        required=["Email"],
    )
    form = Form("Signup", [FormField("Email"), FormField("Age")], validator=validator)

    result = validator.validate({"Email": "", "Age": 15})
    result.valid      # False
    result.errors     # {"Email": [...], "Age": [...]}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from nexaform.core.config import Config
from nexaform.utils.logger import get_logger
from nexaform.validation.backend import Backend
from nexaform.validation.backends import create_backend
from nexaform.validation.errors import ConfigurationError, ValidationError
from nexaform.validation.rule import Rule
from nexaform.validation.rules import (
    AlphaNumRule,
    CallbackRule,
    ComparisonRule,
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
    RemoteRule,
    RequiredRule,
    URLRule,
    WordsRule,
)

if TYPE_CHECKING:
    from nexaform.validation.form import Form, FormField

logger = get_logger("nexaform.validator")

RuleSpec = Union[Rule, Iterable[Rule]]


@dataclass
class ValidationMessage:
    """A recorded failure: field name, message and classification."""

    field: str
    message: str
    type: str = "validation"


@dataclass
class ValidationResult:
    """
    Result of validation.

    Contains the data of fields that passed and every recorded message.
    """

    valid: bool
    data: Dict[str, Any] = field(default_factory=dict)
    messages: List[ValidationMessage] = field(default_factory=list)

    def __bool__(self) -> bool:
        """Allow using result as boolean."""
        return self.valid

    @property
    def errors(self) -> Dict[str, List[str]]:
        """Messages grouped by field name."""
        errors: Dict[str, List[str]] = {}
        for message in self.messages:
            errors.setdefault(message.field, []).append(message.message)
        return errors

    def failed(self) -> bool:
        return not self.valid

    def has_error(self, field_name: str) -> bool:
        return any(message.field == field_name for message in self.messages)

    def get_errors(self, field_name: str) -> List[str]:
        return self.errors.get(field_name, [])

    def first_error(self, field_name: Optional[str] = None) -> Optional[str]:
        """Get first error message."""
        for message in self.messages:
            if field_name is None or message.field == field_name:
                return message.message
        return None

    def all_errors(self) -> List[str]:
        """Get all error messages as flat list."""
        return [message.message for message in self.messages]

    def raise_if_invalid(self) -> None:
        """Raise ValidationError if invalid."""
        if not self.valid:
            raise ValidationError(errors=self.errors)


class Validator:
    """
    Per-form validator.

    Args:
        rules: Mapping of field name to a rule or list of rules
        required: Required field names, or a name -> message mapping
        backend: Backend instance (created from config by default)
        config: Configuration (the backend's, or defaults)
        client_side: Enable client-side validation (config default)
        server_side: Enable server-side validation (config default)
    """

    def __init__(
        self,
        rules: Optional[Mapping[str, RuleSpec]] = None,
        required: Union[Iterable[str], Mapping[str, Optional[str]], None] = None,
        backend: Optional[Backend] = None,
        config: Optional[Config] = None,
        client_side: Optional[bool] = None,
        server_side: Optional[bool] = None,
    ) -> None:
        if config is None:
            config = backend.config if backend is not None else Config()

        self.config = config
        self.backend = backend or create_backend(
            config.get("validator.backend", "parsley"), config
        )
        self.form: Optional["Form"] = None
        self.rules: Dict[str, Dict[str, Rule]] = {}
        self.messages: List[ValidationMessage] = []

        self.set_client_side(
            config.get_bool("validator.client_side", True) if client_side is None else client_side
        )
        self.set_server_side(
            config.get_bool("validator.server_side", True) if server_side is None else server_side
        )

        if rules:
            self.set_rules(rules)

        if required:
            self.add_required_fields(required)

    # ------------------------------------------------------------------
    # Flags
    # ------------------------------------------------------------------

    def set_client_side(self, client_side: bool) -> "Validator":
        self.client_side = bool(client_side)
        return self

    def get_client_side(self) -> bool:
        return self.client_side

    def set_server_side(self, server_side: bool) -> "Validator":
        self.server_side = bool(server_side)
        return self

    def get_server_side(self) -> bool:
        return self.server_side

    def get_backend(self) -> Backend:
        return self.backend

    # ------------------------------------------------------------------
    # Form binding
    # ------------------------------------------------------------------

    def set_form(self, form: "Form") -> "Validator":
        """
        Bind to a form.

        Binds the backend to this validator, initializes it and pushes
        the backend's classes and attributes onto the form. A validator
        serves one form; binding another one raises ConfigurationError.
        """
        if self.form is form:
            return self

        if self.form is not None:
            raise ConfigurationError(
                f"Validator is already bound to form {self.form.get_name()!r}"
            )

        self.form = form

        for field_name, rules in self.rules.items():
            for rule in rules.values():
                rule.set_field(field_name)

        self.backend.set_frontend(self)
        self.backend.init()

        for css_class in self.get_classes_for_form():
            form.add_extra_class(css_class)

        for name, value in self.get_attributes_for_form().items():
            form.set_attribute(name, value)

        if form.get_validator() is not self:
            form.set_validator(self)

        logger.debug("Validator bound", form=form.get_name(), fields=len(self.rules))
        return self

    def get_form(self) -> Optional["Form"]:
        return self.form

    def get_form_fields(self) -> List["FormField"]:
        return list(self.form.fields) if self.form is not None else []

    def get_data_field(self, name: str) -> Optional["FormField"]:
        """Look up a field of the bound form by name."""
        if self.form is None:
            return None
        return self.form.fields.data_field_by_name(name)

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def set_rule(self, field_name: str, rule: Rule) -> "Validator":
        """Attach a rule, replacing any rule of the same class on the field."""
        rule.set_field(field_name)
        rule.set_validator(self)

        self.rules.setdefault(field_name, {})[rule.rule_key()] = rule

        logger.debug("Rule attached", field=field_name, rule=rule.rule_key())
        return self

    def set_rules(
        self,
        field_or_rules: Union[str, Mapping[str, RuleSpec]],
        rules: Optional[RuleSpec] = None,
    ) -> "Validator":
        """
        Attach several rules.

        Example:
            validator.set_rules("Age", [MinRule(18), MaxRule(65)])
            validator.set_rules({"Email": RequiredRule()})
        """
        if isinstance(field_or_rules, Mapping):
            for field_name, spec in field_or_rules.items():
                self.set_rules(field_name, spec)
            return self

        if isinstance(rules, Rule):
            rules = [rules]

        for rule in rules or []:
            self.set_rule(field_or_rules, rule)

        return self

    def get_rules(self) -> Dict[str, Dict[str, Rule]]:
        return self.rules

    def get_rules_for_field(self, field: Union["FormField", str]) -> List[Rule]:
        name = field if isinstance(field, str) else field.get_name()
        return self.get_rules_for_field_name(name)

    def get_rules_for_field_name(self, name: str) -> List[Rule]:
        return list(self.rules.get(name, {}).values())

    def remove_rules_for_field(self, name: str) -> "Validator":
        self.rules.pop(name, None)
        return self

    def configure_rule(self, rule: Rule) -> Rule:
        """Apply the backend's configuration overrides to a rule."""
        return self.backend.configure_rule(rule)

    # ------------------------------------------------------------------
    # Required fields
    # ------------------------------------------------------------------

    def add_required_field(self, name: str, message: Optional[str] = None) -> "Validator":
        return self.set_rule(name, RequiredRule(message))

    def add_required_fields(
        self,
        fields: Union[Iterable[str], Mapping[str, Optional[str]]],
    ) -> "Validator":
        """Require fields given as a list or a name -> message mapping."""
        if isinstance(fields, Mapping):
            for name, message in fields.items():
                self.add_required_field(name, message)
        else:
            for name in fields:
                self.add_required_field(name)
        return self

    def field_is_required(self, name: str) -> bool:
        """A RequiredRule on the field, or the field's own required flag."""
        if any(isinstance(rule, RequiredRule) for rule in self.get_rules_for_field_name(name)):
            return True

        form_field = self.get_data_field(name)
        return bool(getattr(form_field, "required", False))

    # ------------------------------------------------------------------
    # Client-side output
    # ------------------------------------------------------------------

    def get_classes_for_form(self) -> List[str]:
        return self.backend.get_classes_for_form(self.form)

    def get_attributes_for_form(self) -> Dict[str, str]:
        return self.backend.get_attributes_for_form(self.form)

    def get_attributes_for_field(self, field: "FormField") -> Dict[str, str]:
        return self.backend.get_attributes_for_field(field)

    # ------------------------------------------------------------------
    # Server-side validation
    # ------------------------------------------------------------------

    def validation_error(self, field_name: str, message: str, type: str = "validation") -> None:
        """Record a failure for a field."""
        self.messages.append(ValidationMessage(field_name, message, type))

    def php(self, data: Mapping[str, Any]) -> bool:
        """
        Run the server-side validation pass over submitted data.

        Field-level validation runs first, then every rule is tested
        against its field's submitted value. Every failure is recorded;
        there is no short-circuit. When a form is bound, rules for
        names it lacks are skipped. Messages from an earlier pass are
        cleared and the data is loaded onto the bound form first.

        Returns:
            True if everything passed or server-side validation is off
        """
        self.messages = []

        if not self.get_server_side():
            logger.debug("Server-side validation disabled")
            return True

        if self.form is not None:
            self.form.load_data_from(data)

        valid = True
        log = logger.with_context(form=self.form.get_name()) if self.form is not None else logger

        for form_field in self.get_form_fields():
            valid = form_field.validate(self) and valid

        for field_name, rules in self.rules.items():
            if self.form is not None and self.get_data_field(field_name) is None:
                continue

            value = data.get(field_name)

            for rule in list(rules.values()):
                if not rule.test(value):
                    self.validation_error(field_name, rule.get_message(), "validation")
                    log.info("Validation failed", field=field_name, rule=rule.rule_key())
                    valid = False

        return valid

    def validate(self, data: Mapping[str, Any]) -> ValidationResult:
        """
        Validate submitted data.

        Runs php() and collects the messages recorded during this pass.
        """
        valid = self.php(data)
        failed = {message.field for message in self.messages}

        return ValidationResult(
            valid=valid,
            data={name: value for name, value in data.items() if name not in failed},
            messages=list(self.messages),
        )

    def field(self, name: str) -> "RuleBuilder":
        """
        Start a rule chain for a field.

        Example:
            validator.field("Username").required().alphanum().length(3, 20)
        """
        return RuleBuilder(name, self)


class RuleBuilder:
    """Builder for field validation rules."""

    def __init__(self, name: str, validator: Validator) -> None:
        self.name = name
        self.validator = validator
        self._last: Optional[Rule] = None

    def rule(self, rule: Rule) -> "RuleBuilder":
        """Add custom rule."""
        self.validator.set_rule(self.name, rule)
        self._last = rule
        return self

    def message(self, message: str) -> "RuleBuilder":
        """Set the message of the last added rule."""
        if self._last is None:
            raise ConfigurationError(f"No rule to set a message on for field {self.name!r}")
        self._last.set_message(message)
        return self

    def required(self, message: Optional[str] = None) -> "RuleBuilder":
        return self.rule(RequiredRule(message))

    def pattern(self, pattern: str) -> "RuleBuilder":
        return self.rule(PatternRule(pattern))

    def alphanum(self) -> "RuleBuilder":
        return self.rule(AlphaNumRule())

    def url(self) -> "RuleBuilder":
        return self.rule(URLRule())

    def domain(self) -> "RuleBuilder":
        return self.rule(DomainRule())

    def min(self, value: Union[int, float]) -> "RuleBuilder":
        return self.rule(MinRule(value))

    def max(self, value: Union[int, float]) -> "RuleBuilder":
        return self.rule(MaxRule(value))

    def range(self, min: Union[int, float], max: Union[int, float]) -> "RuleBuilder":
        return self.rule(RangeRule(min=min, max=max))

    def length(self, min: int, max: int) -> "RuleBuilder":
        return self.rule(LengthRule(min=min, max=max))

    def words(self, min: int, max: int) -> "RuleBuilder":
        return self.rule(WordsRule(min=min, max=max))

    def max_words(self, max: int) -> "RuleBuilder":
        return self.rule(MaxWordsRule(max))

    def min_check(self, min: int) -> "RuleBuilder":
        return self.rule(MinCheckRule(min))

    def date(
        self,
        client_format: Optional[str] = None,
        server_format: Optional[str] = None,
    ) -> "RuleBuilder":
        return self.rule(DateRule(client_format, server_format))

    def equal_to(self, target: str) -> "RuleBuilder":
        return self.rule(EqualToRule(target))

    def not_equal_to(self, target: str) -> "RuleBuilder":
        return self.rule(NotEqualToRule(target))

    def compare(self, type: str, target: str) -> "RuleBuilder":
        return self.rule(ComparisonRule(type, target))

    def lt(self, target: str) -> "RuleBuilder":
        return self.compare(ComparisonRule.LESS_THAN, target)

    def lte(self, target: str) -> "RuleBuilder":
        return self.compare(ComparisonRule.LESS_THAN_OR_EQUAL, target)

    def gt(self, target: str) -> "RuleBuilder":
        return self.compare(ComparisonRule.GREATER_THAN, target)

    def gte(self, target: str) -> "RuleBuilder":
        return self.compare(ComparisonRule.GREATER_THAN_OR_EQUAL, target)

    def remote(self, url: str, **kwargs: Any) -> "RuleBuilder":
        return self.rule(RemoteRule(url, **kwargs))

    def callback(self, func: Callable[[Any], Any], **kwargs: Any) -> "RuleBuilder":
        return self.rule(CallbackRule(func, **kwargs))
