"""
NexaForm Forms
==============

Form and field objects the validator works against.

The validator only needs these capabilities:

- field: get_name(), get_title(), data_value(), get_attribute(),
  set_attribute(), validate(validator), optional `multiple`
- form: get_name(), fields.data_field_by_name(), add_extra_class(),
  set_attribute(), get_validator()/set_validator()

Any framework objects offering them can be used in place of the
classes below.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, List, Mapping, Optional

from nexaform.utils.helpers import is_empty
from nexaform.validation.errors import ConfigurationError

if TYPE_CHECKING:
    from nexaform.validation.rule import Rule
    from nexaform.validation.validator import ValidationResult, Validator


@dataclass
class FormField:
    """
    Form field.

    Example:
        email = FormField("Email", title="Email Address", required=True)
    """

    name: str = ""
    title: str = ""
    value: Any = None
    default: Any = None
    required: bool = False
    multiple: bool = False
    html_attrs: Dict[str, Any] = field(default_factory=dict)
    form: Optional["Form"] = field(default=None, repr=False, compare=False)

    def get_name(self) -> str:
        return self.name

    def get_title(self) -> str:
        """Get the display title, derived from the name if unset."""
        return self.title or self.name.replace("_", " ").title()

    def data_value(self) -> Any:
        """Get the current value, falling back to the default."""
        return self.value if self.value is not None else self.default

    def set_value(self, value: Any) -> "FormField":
        self.value = value
        return self

    def get_form(self) -> Optional["Form"]:
        return self.form

    def get_id(self) -> str:
        """HTML id: "<FormName>_<FieldName>" inside a form."""
        raw = f"{self.form.get_name()}_{self.name}" if self.form else self.name
        return re.sub(r"[^A-Za-z0-9_-]", "_", raw)

    def get_attribute(self, name: str) -> Any:
        if name == "id" and "id" not in self.html_attrs:
            return self.get_id()
        return self.html_attrs.get(name)

    def set_attribute(self, name: str, value: Any) -> "FormField":
        self.html_attrs[name] = value
        return self

    def get_attributes(self) -> Dict[str, Any]:
        """Get HTML attributes including the validator's client hints."""
        attrs: Dict[str, Any] = {"name": self.name, "id": self.get_id()}
        attrs.update(self.html_attrs)

        if self.required:
            attrs["required"] = True

        validator = self.get_validator()
        if validator is not None:
            attrs.update(validator.get_attributes_for_field(self))

        return attrs

    def validate(self, validator: "Validator") -> bool:
        """Field-level validation run before the validator's rules."""
        return True

    # ------------------------------------------------------------------
    # Validator helpers
    # ------------------------------------------------------------------

    def get_validator(self) -> Optional["Validator"]:
        return self.form.get_validator() if self.form is not None else None

    def get_validator_rules(self) -> List["Rule"]:
        validator = self.get_validator()
        return validator.get_rules_for_field(self) if validator is not None else []

    def get_validator_messages(self) -> Dict[str, str]:
        """Map each rule type on this field to its message."""
        return {
            rule.get_type(): rule.get_message()
            for rule in self.get_validator_rules()
            if rule.has_message()
        }

    def get_validator_rule_count(self) -> int:
        return len(self.get_validator_rules())


@dataclass
class EmailField(FormField):
    """Field that checks email address syntax itself."""

    message: str = "Please enter a valid email address."

    _pattern = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

    def validate(self, validator: "Validator") -> bool:
        value = self.data_value()

        if is_empty(value) or self._pattern.match(str(value)):
            return True

        validator.validation_error(self.name, self.message, "validation")
        return False


@dataclass
class CheckboxSetField(FormField):
    """Multi-value field; its value is a list of selected options."""

    options: Dict[str, str] = field(default_factory=dict)
    multiple: bool = True

    def data_value(self) -> List[Any]:
        value = super().data_value()
        if value is None:
            return []
        if isinstance(value, (list, tuple, set)):
            return list(value)
        return [value]


class FieldList:
    """Ordered collection of fields addressable by name."""

    def __init__(self, fields: Optional[Iterable[FormField]] = None) -> None:
        self._fields: Dict[str, FormField] = {}
        for form_field in fields or []:
            self.add(form_field)

    def add(self, form_field: FormField) -> "FieldList":
        self._fields[form_field.get_name()] = form_field
        return self

    def data_field_by_name(self, name: str) -> Optional[FormField]:
        return self._fields.get(name)

    def names(self) -> List[str]:
        return list(self._fields)

    def __iter__(self) -> Iterator[FormField]:
        return iter(list(self._fields.values()))

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: str) -> bool:
        return name in self._fields


class FormMeta(type):
    """Metaclass for Form to collect field definitions."""

    def __new__(
        mcs,
        name: str,
        bases: tuple,
        namespace: dict,
    ) -> "FormMeta":
        fields: Dict[str, FormField] = {}

        # Get fields from base classes
        for base in bases:
            if hasattr(base, "_declared_fields"):
                fields.update(base._declared_fields)

        # Get fields from current class
        for key, value in list(namespace.items()):
            if isinstance(value, FormField):
                if not value.name:
                    value.name = key
                fields[key] = value

        namespace["_declared_fields"] = fields

        return super().__new__(mcs, name, bases, namespace)


class Form(metaclass=FormMeta):
    """
    Base form class.

    Fields can be declared as class attributes or passed in.

    Example:
        class SignupForm(Form):
            Email = EmailField(title="Email")
            Password = FormField(title="Password")
            ConfirmPassword = FormField(title="Confirm Password")

        validator = Validator({
            "Email": [RequiredRule()],
            "ConfirmPassword": [EqualToRule(target="Password")],
        })
        form = SignupForm(validator=validator)

        result = form.validate(request.form)
    """

    _declared_fields: Dict[str, FormField]

    def __init__(
        self,
        name: Optional[str] = None,
        fields: Optional[Iterable[FormField]] = None,
        validator: Optional["Validator"] = None,
        data: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Initialize form.

        Args:
            name: Form name (class name by default)
            fields: Fields in addition to the declared ones
            validator: Validator to bind
            data: Initial data to load
        """
        self.name = name or type(self).__name__
        self.fields = FieldList()
        self.extra_classes: List[str] = []
        self.attributes: Dict[str, Any] = {}
        self._validator: Optional["Validator"] = None

        # Declared fields are copied so instances never share state
        for field_def in self._declared_fields.values():
            self.add_field(
                dataclasses.replace(field_def, html_attrs=dict(field_def.html_attrs), form=None)
            )

        for form_field in fields or []:
            self.add_field(form_field)

        if data:
            self.load_data_from(data)

        if validator is not None:
            self.set_validator(validator)

    def get_name(self) -> str:
        return self.name

    def add_field(self, form_field: FormField) -> "Form":
        form_field.form = self
        self.fields.add(form_field)
        return self

    def get_fields(self) -> FieldList:
        return self.fields

    def add_extra_class(self, css_class: str) -> "Form":
        for name in css_class.split():
            if name not in self.extra_classes:
                self.extra_classes.append(name)
        return self

    def extra_class(self) -> str:
        return " ".join(self.extra_classes)

    def set_attribute(self, name: str, value: Any) -> "Form":
        self.attributes[name] = value
        return self

    def get_attribute(self, name: str) -> Any:
        return self.attributes.get(name)

    def set_validator(self, validator: "Validator") -> "Form":
        """Attach a validator, binding it to this form."""
        self._validator = validator
        if validator.form is not self:
            validator.set_form(self)
        return self

    def get_validator(self) -> Optional["Validator"]:
        return self._validator

    def load_data_from(self, data: Mapping[str, Any]) -> "Form":
        """Copy submitted values onto matching fields."""
        for form_field in self.fields:
            if form_field.get_name() in data:
                form_field.set_value(data[form_field.get_name()])
        return self

    def get_data(self) -> Dict[str, Any]:
        return {form_field.get_name(): form_field.data_value() for form_field in self.fields}

    def validate(self, data: Optional[Mapping[str, Any]] = None) -> "ValidationResult":
        """
        Validate submitted data (or the current field values).

        Raises:
            ConfigurationError: If no validator is attached
        """
        if self._validator is None:
            raise ConfigurationError(f"Form {self.name!r} has no validator")

        return self._validator.validate(self.get_data() if data is None else data)

    def __contains__(self, name: str) -> bool:
        return name in self.fields

    def __getitem__(self, name: str) -> FormField:
        form_field = self.fields.data_field_by_name(name)
        if form_field is None:
            raise KeyError(name)
        return form_field
