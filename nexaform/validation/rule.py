"""
NexaForm Rule
=============

Abstract base for validation rules.

A rule does two jobs:

- ``test(value)`` checks a submitted value on the server.
- ``get_attribute()``/``get_value()``/``get_message()`` describe the
  same check to the client-side library as an attribute name, an
  attribute value and a failure message.

Attribute values and messages are token templates. ``{min}`` in a
format is replaced with whatever the rule's accessor table returns for
``min``. Each variant extends the table in ``_accessors``.

Example:
    class EvenRule(Rule):
        default_type = "even"
        default_message = "This value should be even."

        def test(self, value):
            return is_empty(value) or int(value) % 2 == 0
"""

from __future__ import annotations

import re
import weakref
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, Mapping, Optional, Union

from nexaform.core.hooks import ValidatorHooks
from nexaform.utils.helpers import Number, stringify

if TYPE_CHECKING:
    from nexaform.validation.backend import Backend
    from nexaform.validation.form import FormField
    from nexaform.validation.validator import Validator


# Matches {Name} tokens, capturing the name
_TOKEN = re.compile(r"\{([^{}]*)\}")

# Marks an attribute spec that names another token, e.g. "$type"
DYNAMIC_MARKER = "$"

AttributeSpec = Union[str, Mapping[str, str], None]
Accessor = Callable[[], Any]


class Rule(ABC):
    """
    Abstract validation rule.

    Class attributes hold the variant defaults; constructor arguments
    and setters hold explicit instance values. Backend configuration
    applied at attach time sits between the two:

        explicit value > backend override > variant default
    """

    default_type: Optional[str] = None
    default_format: Optional[str] = None
    default_message: str = "This value seems to be invalid."

    def __init__(
        self,
        message: Optional[str] = None,
        type: Optional[str] = None,
        format: Optional[str] = None,
        attribute: AttributeSpec = None,
        tokens: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Initialize rule.

        Args:
            message: Failure message (defaults per variant)
            type: Logical rule identifier
            format: Token template for the attribute value
            attribute: Attribute name, "$token" reference or a
                {name: "token=value"} conditional table
            tokens: Extra tokens for formats and messages; values may
                be constants or zero-argument callables
        """
        self._type: Optional[str] = None
        self._format: Optional[str] = None
        self._attribute: AttributeSpec = attribute
        self._message: Optional[str] = None
        self._tokens: Dict[str, Any] = dict(tokens or {})
        self._configured: Dict[str, Any] = {}
        self._field_name: Optional[str] = None
        self._validator_ref: Optional[weakref.ref] = None

        if type is not None:
            self.set_type(type)
        if format is not None:
            self.set_format(format)
        if message is not None:
            self.set_message(message)

    @abstractmethod
    def test(self, value: Any) -> bool:
        """
        Test a submitted value.

        Args:
            value: Submitted value for the rule's field

        Returns:
            True if the value passes
        """
        ...

    # ------------------------------------------------------------------
    # Type and format
    # ------------------------------------------------------------------

    def set_type(self, type: Optional[str]) -> "Rule":
        """Define the rule type."""
        self._type = str(type) if type is not None else None
        return self

    def get_type(self) -> Optional[str]:
        """Get the rule type, falling back to configuration and the default."""
        return self._type or self._configured.get("type") or self.default_type

    def has_type(self) -> bool:
        return bool(self._type)

    def set_format(self, format: Optional[str]) -> "Rule":
        """Define the attribute value template."""
        self._format = str(format) if format is not None else None
        return self

    def get_format(self) -> Optional[str]:
        return self._format or self._configured.get("format") or self.default_format

    def has_format(self) -> bool:
        return bool(self.get_format())

    def check_type(self, type: Optional[str]) -> None:
        """Reject unusable types. Variants with a closed type set override this."""

    # ------------------------------------------------------------------
    # Attribute resolution
    # ------------------------------------------------------------------

    def set_attribute(self, attribute: AttributeSpec) -> "Rule":
        """Define the attribute name, reference or conditional table."""
        self._attribute = attribute
        return self

    def get_attribute_spec(self) -> AttributeSpec:
        if self._attribute is not None:
            return self._attribute
        return self._configured.get("attribute")

    def get_attribute(self) -> Optional[str]:
        """
        Resolve the attribute name used on the wire.

        Order:
        1. Conditional table: first name whose "token=value" holds
        2. "$token": the token's current value
        3. Plain string
        4. The backend's default attribute
        """
        spec = self.get_attribute_spec()

        if isinstance(spec, Mapping):
            for name, condition in spec.items():
                token, _, expected = str(condition).partition("=")
                if stringify(self.resolve_token(token.strip())) == expected.strip():
                    return name

        elif spec:
            if spec.startswith(DYNAMIC_MARKER):
                resolved = stringify(self.resolve_token(spec[len(DYNAMIC_MARKER):]))
                return resolved or None

            return spec

        return self.get_default_attribute()

    def get_default_attribute(self) -> Optional[str]:
        """
        Backend default attribute name.

        An unattached rule names its attribute after its type.
        """
        backend = self.backend
        if backend is not None:
            return backend.get_default_attribute()
        return self.get_type()

    def get_value(self) -> str:
        """Get the attribute value: the expanded format, or the type."""
        if not self.has_format():
            return stringify(self.get_type())

        fmt = self.get_format()
        if fmt == "boolean":
            return "true"
        return self.replace_tokens(fmt)

    def get_attributes(self) -> Dict[str, Any]:
        """
        Extra attributes beyond the name/value pair.

        Keys are mapping names; the backend maps and prefixes them.
        """
        attributes: Dict[str, Any] = {}

        backend = self.backend
        if backend is not None:
            backend.hooks.trigger(ValidatorHooks.RULE_UPDATE_ATTRIBUTES, self, attributes)

        return attributes

    def is_valid(self) -> bool:
        """Check whether the rule is usable (has an attribute name)."""
        return bool(self.get_attribute())

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def set_message(self, message: Optional[str]) -> "Rule":
        self._message = str(message) if message is not None else None
        return self

    def get_message(self) -> str:
        return self._message or self.get_default_message()

    def has_message(self) -> bool:
        return bool(self.get_message())

    def get_default_message(self) -> str:
        return self.replace_tokens(self.default_message)

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def _accessors(self) -> Dict[str, Accessor]:
        """Token table. Variants extend the dict returned by super()."""
        return {
            "type": self.get_type,
            "format": self.get_format,
            "FieldName": self.get_field_name,
        }

    def resolve_token(self, name: str) -> Any:
        """Get the current value of a token, None if unknown."""
        if name in self._tokens:
            value = self._tokens[name]
            return value() if callable(value) else value

        accessor = self._accessors().get(name)
        return accessor() if accessor is not None else None

    def token_names(self, template: str) -> Iterator[str]:
        """Yield the distinct token names in a template, in order."""
        seen = set()
        for name in _TOKEN.findall(template):
            if name not in seen:
                seen.add(name)
                yield name

    def replace_tokens(self, template: str) -> str:
        """
        Replace every {Name} token in a template.

        Unknown tokens become empty strings.

        Example:
            RangeRule(min=1, max=10).replace_tokens("[{min}, {max}]")
            # "[1, 10]"
        """
        for name in list(self.token_names(template)):
            template = template.replace(
                "{" + name + "}", stringify(self.resolve_token(name))
            )
        return template

    # ------------------------------------------------------------------
    # Field, validator and backend handles
    # ------------------------------------------------------------------

    def set_field(self, field: Union["FormField", str]) -> "Rule":
        """Associate the rule with a form field (by name)."""
        self._field_name = field if isinstance(field, str) else field.get_name()
        return self

    def get_field_name(self) -> Optional[str]:
        return self._field_name

    def get_field(self) -> Optional["FormField"]:
        """Look up the associated field through the validator's form."""
        if self._field_name is None:
            return None
        return self.get_data_field(self._field_name)

    def get_data_field(self, name: str) -> Optional["FormField"]:
        """Look up a field of the validator's form by name."""
        validator = self.validator
        if validator is None:
            return None
        return validator.get_data_field(name)

    def set_validator(self, validator: "Validator") -> "Rule":
        """Attach to a validator, which applies backend configuration."""
        self._validator_ref = weakref.ref(validator)
        validator.configure_rule(self)
        return self

    @property
    def validator(self) -> Optional["Validator"]:
        return self._validator_ref() if self._validator_ref is not None else None

    @property
    def backend(self) -> Optional["Backend"]:
        validator = self.validator
        return validator.backend if validator is not None else None

    def configure(self, config: Mapping[str, Any]) -> "Rule":
        """
        Apply backend overrides for type, format and attribute.

        Overrides sit below explicit instance values.
        """
        if "type" in config:
            self.check_type(config["type"])

        self._configured = {
            key: config[key]
            for key in ("type", "format", "attribute")
            if config.get(key) is not None
        }
        return self

    @classmethod
    def rule_key(cls) -> str:
        """Key under which the validator stores this rule for a field."""
        return cls.__name__

    def __repr__(self) -> str:
        return f"<{type(self).__name__} type={self.get_type()!r} field={self._field_name!r}>"


@dataclass
class Bounds:
    """
    Inclusive numeric bounds shared by the min/max style rules.

    A missing bound places no constraint.
    """

    min: Optional[Number] = None
    max: Optional[Number] = None

    def contains(self, number: Number) -> bool:
        if self.min is not None and number < self.min:
            return False
        if self.max is not None and number > self.max:
            return False
        return True


class BoundedRule(Rule):
    """
    Rule that measures a value and checks it against Bounds.

    Variants declare which bounds they require and how a value is
    measured; a measure of None means the value is not checked.
    """

    required_bounds: tuple = ("min", "max")

    def __init__(
        self,
        min: Optional[Number] = None,
        max: Optional[Number] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.bounds = Bounds(min=min, max=max)

    @abstractmethod
    def measure(self, value: Any) -> Optional[Number]:
        """Reduce a value to the number checked against the bounds."""
        ...

    @property
    def min(self) -> Optional[Number]:
        return self.bounds.min

    @property
    def max(self) -> Optional[Number]:
        return self.bounds.max

    def set_min(self, min: Number) -> "BoundedRule":
        self.bounds.min = float(min)
        return self

    def get_min(self) -> Optional[Number]:
        return self.bounds.min

    def set_max(self, max: Number) -> "BoundedRule":
        self.bounds.max = float(max)
        return self

    def get_max(self) -> Optional[Number]:
        return self.bounds.max

    def set_range(self, min: Number, max: Number) -> "BoundedRule":
        return self.set_min(min).set_max(max)

    def _accessors(self) -> Dict[str, Accessor]:
        accessors = super()._accessors()
        accessors.update(min=self.get_min, max=self.get_max)
        return accessors

    def is_valid(self) -> bool:
        return super().is_valid() and all(
            getattr(self.bounds, name) is not None for name in self.required_bounds
        )

    def test(self, value: Any) -> bool:
        if not self.is_valid():
            return True

        measured = self.measure(value)
        if measured is None:
            return True

        return self.bounds.contains(measured)
