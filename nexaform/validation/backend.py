"""
NexaForm Validator Backend
==========================

A backend translates rules into the attribute vocabulary of one
client-side validation library.

Responsibilities:
- Attribute names: mapping table lookup and prefixing
- Per-field attribute aggregation from the field's rules
- Per-form classes and attributes read by the client runtime
- Rule configuration overrides applied at attach time
- Required CSS/JS assets
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from nexaform.core.config import Config
from nexaform.core.hooks import HookRegistry, ValidatorHooks
from nexaform.utils.helpers import stringify
from nexaform.utils.logger import get_logger
from nexaform.validation.rule import Rule

if TYPE_CHECKING:
    from nexaform.validation.form import Form, FormField
    from nexaform.validation.validator import Validator

logger = get_logger("nexaform.backend")


@dataclass
class Requirements:
    """Ordered, de-duplicated CSS and JavaScript asset identifiers."""

    css: List[str] = field(default_factory=list)
    js: List[str] = field(default_factory=list)

    def add_css(self, path: str) -> None:
        if path not in self.css:
            self.css.append(path)

    def add_js(self, path: str) -> None:
        if path not in self.js:
            self.js.append(path)


class Backend:
    """
    Base validator backend.

    Settings are read from the "backends.<name>" configuration
    section. Subclasses set `name` and extend the form/field
    attribute methods.
    """

    name: str = "base"

    def __init__(
        self,
        config: Optional[Config] = None,
        hooks: Optional[HookRegistry] = None,
    ) -> None:
        self.config = config or Config()
        self.hooks = hooks or HookRegistry()
        self.requirements = Requirements()
        self._frontend_ref: Optional[weakref.ref] = None

    def setting(self, key: str, default: Any = None) -> Any:
        """Read a setting from this backend's configuration section."""
        return self.config.get(f"backends.{self.name}.{key}", default)

    # ------------------------------------------------------------------
    # Frontend
    # ------------------------------------------------------------------

    def set_frontend(self, frontend: "Validator") -> "Backend":
        self._frontend_ref = weakref.ref(frontend)
        return self

    def get_frontend(self) -> Optional["Validator"]:
        return self._frontend_ref() if self._frontend_ref is not None else None

    # ------------------------------------------------------------------
    # Form and field attributes
    # ------------------------------------------------------------------

    def get_html_class(self) -> str:
        return type(self).__name__.lower()

    def get_classes_for_form(self, form: "Form") -> List[str]:
        return [self.get_html_class()]

    def get_attributes_for_form(self, form: "Form") -> Dict[str, str]:
        frontend = self.get_frontend()
        client_side = frontend.get_client_side() if frontend is not None else True
        return {"data-client-side": "true" if client_side else "false"}

    def get_attributes_for_field(self, field: "FormField") -> Dict[str, str]:
        """
        Collect the attributes of every usable rule on a field.

        Each rule adds its prefixed attribute (values for the same name
        accumulate), a message attribute and its extra attributes.
        """
        attributes: Dict[str, Any] = {}

        frontend = self.get_frontend()
        if frontend is None:
            return attributes

        for rule in frontend.get_rules_for_field(field):
            if not rule.is_valid():
                continue

            attribute = rule.get_attribute()
            attributes.setdefault(self.prefix(attribute), []).append(rule.get_value())

            if rule.has_message():
                attributes[self.attr("message", attribute)] = rule.get_message()

            for name, value in rule.get_attributes().items():
                attributes.setdefault(self.attr(name), []).append(value)

        return self.flatten(attributes)

    def flatten(self, attributes: Dict[str, Any]) -> Dict[str, str]:
        """Join multi-valued attributes with spaces, dropping empty values."""
        flat: Dict[str, str] = {}

        for name, value in attributes.items():
            if isinstance(value, (list, tuple)):
                flat[name] = " ".join(
                    text for text in (stringify(item) for item in value) if text
                )
            else:
                flat[name] = stringify(value)

        return flat

    # ------------------------------------------------------------------
    # Attribute names
    # ------------------------------------------------------------------

    def attr(self, name: str, *args: Any) -> str:
        """
        Get the prefixed attribute name for a mapping name.

        Positional args fill "{}" placeholders in the mapping, so with
        mappings {"message": "{}-message"}, attr("message", "min")
        gives "data-parsley-min-message".
        """
        template = self.get_mapping(name) or name

        if args:
            template = template.format(*args)

        return self.prefix(template)

    def prefix(self, name: str) -> str:
        """Prefix an attribute name unless it already carries the prefix."""
        prefix = self.setting("attribute.prefix")

        if prefix and not name.startswith(prefix):
            return f"{prefix}{name}"

        return name

    def get_mappings(self) -> Dict[str, str]:
        return self.setting("mappings") or {}

    def get_mapping(self, name: str) -> Optional[str]:
        return self.get_mappings().get(name)

    def has_mapping(self, name: str) -> bool:
        return bool(self.get_mapping(name))

    def get_default_attribute(self) -> Optional[str]:
        return self.setting("attribute.default")

    # ------------------------------------------------------------------
    # Rule configuration
    # ------------------------------------------------------------------

    def get_rule_config(self, rule: Rule) -> Dict[str, Any]:
        """
        Get configuration overrides for a rule.

        Matches the rule's class name, then the names of its base
        classes, so custom subclasses inherit their parent's setup.
        """
        rules = self.setting("rules") or {}

        for cls in type(rule).__mro__:
            if cls is Rule:
                break
            if cls.__name__ in rules:
                return rules[cls.__name__] or {}

        return {}

    def configure_rule(self, rule: Rule) -> Rule:
        config = self.get_rule_config(rule)
        if config:
            rule.configure(config)
        return rule

    # ------------------------------------------------------------------
    # Initialization and requirements
    # ------------------------------------------------------------------

    def init(self) -> None:
        """Initialize the backend, with before/after hooks."""
        self.hooks.trigger(ValidatorHooks.BACKEND_BEFORE_INIT, self)
        self.load_requirements()
        self.hooks.trigger(ValidatorHooks.BACKEND_AFTER_INIT, self)

        logger.debug("Backend initialized", backend=self.name)

    def get_required_js(self) -> List[str]:
        js = list(self.setting("required_js") or [])
        self.hooks.trigger(ValidatorHooks.BACKEND_UPDATE_REQUIRED_JS, self, js)
        return js

    def get_required_css(self) -> List[str]:
        css = list(self.setting("required_css") or [])
        self.hooks.trigger(ValidatorHooks.BACKEND_UPDATE_REQUIRED_CSS, self, css)
        return css

    def load_requirements(self) -> Requirements:
        """Add the required assets to this backend's Requirements."""
        for css in self.get_required_css():
            self.requirements.add_css(css)

        for js in self.get_required_js():
            self.requirements.add_js(js)

        logger.debug(
            "Requirements loaded",
            css=len(self.requirements.css),
            js=len(self.requirements.js),
        )
        return self.requirements
