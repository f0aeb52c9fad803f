"""
NexaForm Validation System
==========================

Rules, backends and the per-form validator.

Features:
- Rules tested on the server and exported as client attributes
- Token templates for attribute values and messages
- Cross-field and remote rules
- Backend-specific attribute vocabulary
- Form and field helpers
"""

from nexaform.validation.errors import ConfigurationError, ValidationError
from nexaform.validation.rule import Bounds, BoundedRule, Rule
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
    TargetRule,
    URLRule,
    WordsRule,
)
from nexaform.validation.backend import Backend, Requirements
from nexaform.validation.backends import ParsleyBackend, create_backend, register_backend
from nexaform.validation.form import (
    CheckboxSetField,
    EmailField,
    FieldList,
    Form,
    FormField,
)
from nexaform.validation.validator import (
    RuleBuilder,
    ValidationMessage,
    ValidationResult,
    Validator,
)

__all__ = [
    # Core
    "Validator",
    "ValidationMessage",
    "ValidationResult",
    "RuleBuilder",
    "ValidationError",
    "ConfigurationError",
    # Rules
    "Rule",
    "Bounds",
    "BoundedRule",
    "RequiredRule",
    "PatternRule",
    "AlphaNumRule",
    "URLRule",
    "DomainRule",
    "MinRule",
    "MaxRule",
    "RangeRule",
    "LengthRule",
    "WordsRule",
    "MaxWordsRule",
    "MinCheckRule",
    "DateRule",
    "TargetRule",
    "EqualToRule",
    "NotEqualToRule",
    "ComparisonRule",
    "RemoteRule",
    "CallbackRule",
    # Backends
    "Backend",
    "Requirements",
    "ParsleyBackend",
    "create_backend",
    "register_backend",
    # Forms
    "Form",
    "FormField",
    "EmailField",
    "CheckboxSetField",
    "FieldList",
]
