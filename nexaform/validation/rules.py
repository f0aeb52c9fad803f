"""
NexaForm Validation Rules
=========================

Built-in rules. Each one tests values on the server and describes
the equivalent client-side check.

Unless noted, a rule passes when it is not usable (``is_valid()`` is
false) or when the value is empty. The required rule and the
target-based comparison rules always evaluate.
"""

from __future__ import annotations

import ipaddress
import re
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional
from urllib.parse import urlencode, urljoin, urlsplit

import httpx
import orjson

from nexaform.utils.helpers import (
    Number,
    is_empty,
    loose_compare,
    loose_equals,
    to_number,
    word_count,
)
from nexaform.utils.logger import get_logger
from nexaform.validation.dates import to_server_format
from nexaform.validation.errors import ConfigurationError
from nexaform.validation.rule import Accessor, BoundedRule, Rule

if TYPE_CHECKING:
    from nexaform.validation.form import FormField

logger = get_logger("nexaform.rules")


class RequiredRule(Rule):
    """
    Require a value.

    Only None and the empty string are missing: 0, False and " "
    count as present.
    """

    default_type = "required"
    default_message = "This value is required."

    def __init__(self, message: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message=message, **kwargs)

    def test(self, value: Any) -> bool:
        return not (value is None or (isinstance(value, str) and value == ""))


class PatternRule(Rule):
    """
    Match a regular expression.

    "/body/flags" is a regex literal searched anywhere in the value;
    a bare pattern must match the whole value.
    """

    default_type = "pattern"
    default_format = "{pattern}"

    _LITERAL = re.compile(r"^/(.*)/([a-z]*)$", re.DOTALL)
    _FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}

    def __init__(self, pattern: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.set_pattern(pattern)

    def set_pattern(self, pattern: Optional[str]) -> "PatternRule":
        self.pattern = str(pattern) if pattern is not None else ""
        self._compiled: Optional[re.Pattern] = None
        return self

    def get_pattern(self) -> str:
        return self.pattern

    def _accessors(self) -> Dict[str, Accessor]:
        accessors = super()._accessors()
        accessors["pattern"] = self.get_pattern
        return accessors

    def is_valid(self) -> bool:
        return super().is_valid() and bool(self.pattern)

    def compile(self) -> re.Pattern:
        """Compile the pattern, anchoring bare patterns."""
        if self._compiled is None:
            literal = self._LITERAL.match(self.pattern)

            try:
                if literal:
                    body, flag_chars = literal.groups()
                    flags = 0
                    for char in flag_chars:
                        flags |= self._FLAGS.get(char, 0)
                    self._compiled = re.compile(body, flags)
                else:
                    self._compiled = re.compile(f"^(?:{self.pattern})$")
            except re.error as exc:
                raise ConfigurationError(f"Invalid pattern {self.pattern!r}: {exc}") from exc

        return self._compiled

    def test(self, value: Any) -> bool:
        if not self.is_valid() or is_empty(value):
            return True
        return bool(self.compile().search(str(value)))


class AlphaNumRule(Rule):
    """Letters, digits and underscores only."""

    default_type = "alphanum"
    default_message = "This value should be alphanumeric."

    _PATTERN = re.compile(r"^\w+$", re.IGNORECASE | re.ASCII)

    def test(self, value: Any) -> bool:
        if not self.is_valid() or is_empty(value):
            return True
        return bool(self._PATTERN.fullmatch(str(value)))


_HOST_LABEL = re.compile(r"^(?!-)[A-Za-z\d-]{1,63}(?<!-)$")
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z\d+.-]*$")


def is_url(value: str) -> bool:
    """
    Check URL syntax.

    Requires a scheme. Web schemes also need a valid host name or IP
    address and, when given, a numeric port.
    """
    if not value or any(char.isspace() for char in value):
        return False

    try:
        parts = urlsplit(value)
        parts.port
    except ValueError:
        return False

    if not _SCHEME.match(parts.scheme):
        return False

    if parts.scheme.lower() not in ("http", "https", "ftp", "ftps", "ws", "wss"):
        return bool(parts.netloc or parts.path)

    host = parts.hostname
    if not host:
        return False

    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        pass

    labels = host.rstrip(".").split(".")
    return all(_HOST_LABEL.match(label) for label in labels)


class URLRule(Rule):
    """Syntactically valid URL."""

    default_type = "url"
    default_message = "This value should be a valid URL."

    def test(self, value: Any) -> bool:
        if not self.is_valid() or is_empty(value):
            return True
        return is_url(str(value))


class DomainRule(Rule):
    """Host name such as "example.com" or "localhost"."""

    default_type = "domain"
    default_message = "This value should be a valid domain name."

    _PATTERN = re.compile(
        r"^((localhost)|((?!-)(?:[a-zA-Z\d-]{0,62}[a-zA-Z\d]\.){1,126}"
        r"(?!\d+)[a-zA-Z\d]{1,63}))$"
    )

    def test(self, value: Any) -> bool:
        if not self.is_valid() or is_empty(value):
            return True
        return bool(self._PATTERN.match(str(value)))


# =============================================================================
# Bounded rules
# =============================================================================

class MinRule(BoundedRule):
    """Numeric value greater than or equal to min."""

    default_type = "min"
    default_format = "{min}"
    default_message = "This value should be greater than or equal to {min}."
    required_bounds = ("min",)

    def __init__(self, min: Optional[Number] = None, **kwargs: Any) -> None:
        super().__init__(min=min, **kwargs)

    def measure(self, value: Any) -> Optional[Number]:
        return to_number(value)


class MaxRule(BoundedRule):
    """Numeric value less than or equal to max."""

    default_type = "max"
    default_format = "{max}"
    default_message = "This value should be less than or equal to {max}."
    required_bounds = ("max",)

    def __init__(self, max: Optional[Number] = None, **kwargs: Any) -> None:
        super().__init__(max=max, **kwargs)

    def measure(self, value: Any) -> Optional[Number]:
        return to_number(value)


class RangeRule(BoundedRule):
    """Numeric value within [min, max]."""

    default_type = "range"
    default_format = "[{min}, {max}]"
    default_message = "This value should be between {min} and {max}."

    def measure(self, value: Any) -> Optional[Number]:
        return to_number(value)


class LengthRule(BoundedRule):
    """Character count within [min, max]."""

    default_type = "length"
    default_format = "[{min}, {max}]"
    default_message = "This value should be between {min} and {max} characters in length."

    def measure(self, value: Any) -> Optional[Number]:
        return None if is_empty(value) else len(str(value))


class WordsRule(BoundedRule):
    """Word count within [min, max]."""

    default_type = "words"
    default_format = "[{min}, {max}]"
    default_message = "This value should contain between {min} and {max} words."

    def measure(self, value: Any) -> Optional[Number]:
        return None if is_empty(value) else word_count(str(value))


class MaxWordsRule(BoundedRule):
    """Word count of at most max."""

    default_type = "maxwords"
    default_format = "{max}"
    default_message = "This value should contain a maximum of {max} words."
    required_bounds = ("max",)

    def __init__(self, max: Optional[Number] = None, **kwargs: Any) -> None:
        super().__init__(max=max, **kwargs)

    def measure(self, value: Any) -> Optional[Number]:
        return None if is_empty(value) else word_count(str(value))


class MinCheckRule(BoundedRule):
    """At least min options selected in a multi-value field."""

    default_type = "mincheck"
    default_format = "{min}"
    default_message = "You must select a minimum of {min} options."
    required_bounds = ("min",)

    def __init__(self, min: Optional[Number] = None, **kwargs: Any) -> None:
        super().__init__(min=min, **kwargs)

    def measure(self, value: Any) -> Optional[Number]:
        if is_empty(value):
            return None
        if isinstance(value, (str, bytes)) or not hasattr(value, "__len__"):
            return 1
        return len(value)


# =============================================================================
# Date rule
# =============================================================================

class DateRule(Rule):
    """
    Date in a given format.

    The client format uses Moment.js tokens. The server format uses
    strptime directives and is derived from the client format unless
    given explicitly.

    Example:
        DateRule("DD/MM/YYYY")                  # server: "%d/%m/%Y"
        DateRule("D MMM YYYY", "%d %b %Y")
    """

    default_type = "date"
    default_format = "{ClientFormat}"
    default_client_format = "YYYY-MM-DD"
    default_message = "This value appears to be an invalid date."

    def __init__(
        self,
        client_format: Optional[str] = None,
        server_format: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.set_client_format(client_format or self.default_client_format)
        self.set_server_format(server_format)

    def set_client_format(self, client_format: Optional[str]) -> "DateRule":
        self.client_format = str(client_format or "")
        return self

    def get_client_format(self) -> str:
        return self.client_format

    def has_client_format(self) -> bool:
        return bool(self.client_format)

    def set_server_format(self, server_format: Optional[str]) -> "DateRule":
        self.server_format = str(server_format or "")
        return self

    def get_server_format(self) -> str:
        """Get the strptime format, derived from the client format if unset."""
        return self.server_format or to_server_format(self.client_format)

    def has_server_format(self) -> bool:
        return bool(self.server_format)

    def _accessors(self) -> Dict[str, Accessor]:
        accessors = super()._accessors()
        accessors.update(
            ClientFormat=self.get_client_format,
            ServerFormat=self.get_server_format,
        )
        return accessors

    def is_valid(self) -> bool:
        return super().is_valid() and self.has_client_format()

    def parse(self, value: Any) -> datetime:
        """Parse a value with the server format; raises ValueError."""
        return datetime.strptime(str(value), self.get_server_format())

    def test(self, value: Any) -> bool:
        if not self.is_valid() or is_empty(value):
            return True

        try:
            self.parse(value)
        except ValueError:
            return False
        return True


# =============================================================================
# Target rules
# =============================================================================

class TargetRule(Rule):
    """
    Rule comparing the value with another field of the same form.

    The target field is looked up by name on every use so it always
    reflects the current form state.
    """

    default_format = "{TargetFieldID}"

    def __init__(self, target: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.set_target(target)

    def set_target(self, target: Optional[str]) -> "TargetRule":
        self.target = str(target) if target is not None else ""
        return self

    def get_target(self) -> str:
        return self.target

    def get_target_field(self) -> "FormField":
        field = self.get_data_field(self.target)
        if field is None:
            raise ConfigurationError(
                f"{type(self).__name__} target field {self.target!r} was not found"
            )
        return field

    def get_target_title(self) -> str:
        return self.get_target_field().get_title()

    def get_target_value(self) -> Any:
        return self.get_target_field().data_value()

    def get_target_field_id(self) -> str:
        return f"#{self.get_target_field().get_attribute('id')}"

    def _accessors(self) -> Dict[str, Accessor]:
        accessors = super()._accessors()
        accessors.update(
            target=self.get_target,
            TargetFieldID=self.get_target_field_id,
            TargetTitle=self.get_target_title,
            TargetValue=self.get_target_value,
        )
        return accessors


class EqualToRule(TargetRule):
    """Value equal to the target field's value."""

    default_type = "equalto"
    default_message = "This value should be the same as the {TargetTitle} field."

    def test(self, value: Any) -> bool:
        return loose_equals(value, self.get_target_value())


class NotEqualToRule(TargetRule):
    """Value different from the target field's value."""

    default_type = "notequalto"
    default_message = "This value should be different from the {TargetTitle} field."

    def test(self, value: Any) -> bool:
        return not loose_equals(value, self.get_target_value())


class ComparisonRule(TargetRule):
    """
    Order the value against the target field's value.

    The type selects the comparison and, through the "$type"
    attribute, the client attribute name (data-parsley-gt and so on).

    Example:
        ComparisonRule(ComparisonRule.GREATER_THAN, target="StartDate")
    """

    LESS_THAN = "lt"
    LESS_THAN_OR_EQUAL = "lte"
    GREATER_THAN = "gt"
    GREATER_THAN_OR_EQUAL = "gte"

    VALID_TYPES = (LESS_THAN, LESS_THAN_OR_EQUAL, GREATER_THAN, GREATER_THAN_OR_EQUAL)

    MESSAGES = {
        LESS_THAN: "This value should be less than the value of the {TargetTitle} field.",
        LESS_THAN_OR_EQUAL: (
            "This value should be less than or equal to the value of the "
            "{TargetTitle} field."
        ),
        GREATER_THAN: "This value should be greater than the value of the {TargetTitle} field.",
        GREATER_THAN_OR_EQUAL: (
            "This value should be greater than or equal to the value of the "
            "{TargetTitle} field."
        ),
    }

    _OUTCOMES = {
        LESS_THAN: (-1,),
        LESS_THAN_OR_EQUAL: (-1, 0),
        GREATER_THAN: (1,),
        GREATER_THAN_OR_EQUAL: (1, 0),
    }

    def __init__(self, type: str, target: Optional[str] = None, **kwargs: Any) -> None:
        self.check_type(type)
        super().__init__(target=target, type=type, **kwargs)

    def check_type(self, type: Optional[str]) -> None:
        if type not in self.VALID_TYPES:
            raise ConfigurationError(f"Invalid comparison type: {type}")

    def set_type(self, type: Optional[str]) -> "ComparisonRule":
        self.check_type(type)
        return super().set_type(type)

    def test(self, value: Any) -> bool:
        outcome = loose_compare(value, self.get_target_value())
        return outcome in self._OUTCOMES[self.get_type()]

    def get_default_message(self) -> str:
        return self.replace_tokens(self.MESSAGES[self.get_type()])


# =============================================================================
# Remote rule
# =============================================================================

class RemoteRule(Rule):
    """
    Ask an HTTP endpoint whether the value is valid.

    The field's name and value are sent along with any configured
    params. A 2xx status means valid; the "reverse" validator treats
    2xx as invalid. Transport errors propagate.

    Example:
        RemoteRule("/api/username-free", options={"type": "POST"})
    """

    default_type = "remote"
    default_format = "{URLWithParams}"

    DEFAULT = "default"
    REVERSE = "reverse"

    def __init__(
        self,
        url: Optional[str] = None,
        params: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
        remote_validator: Optional[str] = DEFAULT,
        client: Optional[httpx.Client] = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize remote rule.

        Args:
            url: Endpoint, absolute or relative to app.base_url
            params: Extra request parameters
            options: Client-side request options; "type" is the method
            remote_validator: "default" or "reverse"
            client: HTTP client to use instead of a fresh one per test
        """
        super().__init__(**kwargs)
        self.set_url(url)
        self.set_params(params)
        self.set_options(options)
        self.set_remote_validator(remote_validator)
        self.client = client

    def set_url(self, url: Optional[str]) -> "RemoteRule":
        self.url = str(url) if url is not None else ""
        return self

    def get_url(self) -> str:
        return self.url

    def get_base_url(self) -> str:
        validator = self.validator
        if validator is not None:
            return validator.config.get("app.base_url", "http://localhost/")
        return "http://localhost/"

    def get_absolute_url(self) -> str:
        parts = urlsplit(self.url)
        if parts.scheme or parts.netloc:
            return self.url
        return urljoin(self.get_base_url(), self.url)

    def set_param(self, name: str, value: Any) -> "RemoteRule":
        self.params[name] = value
        return self

    def get_param(self, name: str) -> Any:
        return self.params.get(name)

    def has_param(self, name: str) -> bool:
        return self.params.get(name) is not None

    def set_params(self, params: Optional[Mapping[str, Any]]) -> "RemoteRule":
        self.params: Dict[str, Any] = dict(params or {})
        return self

    def get_params(self) -> Dict[str, Any]:
        return self.params

    def set_options(self, options: Optional[Mapping[str, Any]]) -> "RemoteRule":
        self.options: Dict[str, Any] = dict(options or {})
        return self

    def get_options(self) -> Dict[str, Any]:
        return self.options

    def set_remote_validator(self, remote_validator: Optional[str]) -> "RemoteRule":
        self.remote_validator = str(remote_validator or "")
        return self

    def get_remote_validator(self) -> str:
        return self.remote_validator

    def get_url_with_params(self) -> str:
        if self.params:
            return f"{self.url}?{urlencode(self.params, doseq=True)}"
        return self.url

    def get_method(self) -> str:
        return str(self.options.get("type", "GET")).upper()

    def _accessors(self) -> Dict[str, Accessor]:
        accessors = super()._accessors()
        accessors.update(
            url=self.get_url,
            URLWithParams=self.get_url_with_params,
            remoteValidator=self.get_remote_validator,
        )
        return accessors

    def get_attributes(self) -> Dict[str, Any]:
        attributes = super().get_attributes()

        if self.options:
            attributes["remote-options"] = orjson.dumps(self.options).decode("utf-8")

        if self.remote_validator:
            attributes["remote-validator"] = self.remote_validator

        return attributes

    def is_valid(self) -> bool:
        return super().is_valid() and bool(self.url)

    def is_reverse(self) -> bool:
        return self.remote_validator == self.REVERSE

    def is_valid_status_code(self, code: int) -> bool:
        valid = 200 <= code < 300
        return not valid if self.is_reverse() else valid

    def get_request_params(self, value: Any) -> Dict[str, Any]:
        """Configured params plus the field's own name and value."""
        params = dict(self.params)
        if self._field_name:
            params[self._field_name] = value
        return params

    def get_client_options(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """httpx request options: query string for GET, form body otherwise."""
        key = "params" if self.get_method() == "GET" else "data"
        return {key: dict(params)}

    def test(self, value: Any) -> bool:
        if not self.is_valid() or is_empty(value):
            return True

        code = self.request(self.get_request_params(value))
        return self.is_valid_status_code(code)

    def request(self, params: Mapping[str, Any]) -> int:
        """Send the validation request and return its status code."""
        method = self.get_method()
        url = self.get_absolute_url()
        options = self.get_client_options(params)

        logger.debug("Remote validation request", method=method, url=url)

        try:
            if self.client is not None:
                response = self.client.request(method, url, **options)
            else:
                with httpx.Client(follow_redirects=True, timeout=None) as client:
                    response = client.request(method, url, **options)
        except httpx.TransportError as exc:
            logger.error("Remote validation failed", exception=exc, url=url)
            raise

        return response.status_code


# =============================================================================
# Custom rules
# =============================================================================

class CallbackRule(Rule):
    """
    Server-side rule backed by a function.

    The client only sees it when an attribute is given explicitly.

    Example:
        CallbackRule(lambda v: v.lower() != "admin", message="Reserved name.")
    """

    default_type = "callback"

    def __init__(self, func: Callable[[Any], Any], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.func = func

    def is_valid(self) -> bool:
        return bool(self.get_attribute_spec()) and super().is_valid()

    def test(self, value: Any) -> bool:
        if is_empty(value):
            return True
        return bool(self.func(value))


__all__: List[str] = [
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
    "is_url",
]
