"""
NexaForm Parsley Backend
========================

Emits Parsley.js data-attributes:

    <form class="parsleybackend" data-client-side="true"
          data-parsley-trigger="change" ...>
      <input name="Age" data-parsley-range="[18, 65]"
             data-parsley-range-message="This value should be between 18 and 65.">
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, Optional, Union

from nexaform.validation.backend import Backend

if TYPE_CHECKING:
    from nexaform.validation.form import Form, FormField


class ParsleyBackend(Backend):
    """Backend for the Parsley.js client-side validation library."""

    name = "parsley"

    # Form data-attribute -> setting holding the class name
    FORM_CLASS_SETTINGS = {
        "data-group-class": "group_class",
        "data-error-wrapper-class": "error_wrapper_class",
        "data-group-error-class": "group_error_class",
        "data-field-error-class": "field_error_class",
        "data-group-success-class": "group_success_class",
        "data-field-success-class": "field_success_class",
    }

    def __init__(self, *args, trigger_on: Union[str, Iterable[str], None] = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._trigger_on: Optional[str] = None
        if trigger_on is not None:
            self.set_trigger_on(trigger_on)

    def set_trigger_on(self, trigger_on: Union[str, Iterable[str]]) -> "ParsleyBackend":
        """Set the events that trigger validation, as a string or list."""
        self._trigger_on = self._join(trigger_on)
        return self

    def get_trigger_on(self) -> str:
        """Get the trigger events, falling back to configuration."""
        if self._trigger_on:
            return self._trigger_on
        return self._join(self.setting("trigger_on", "change"))

    def get_attributes_for_form(self, form: "Form") -> Dict[str, str]:
        attributes = super().get_attributes_for_form(form)

        for attribute, setting in self.FORM_CLASS_SETTINGS.items():
            attributes[attribute] = self.setting(setting, "")

        attributes[self.prefix("trigger")] = self.get_trigger_on()

        return self.flatten(attributes)

    def get_attributes_for_field(self, field: "FormField") -> Dict[str, str]:
        attributes = super().get_attributes_for_field(field)

        # Checkbox sets validate as one group
        if getattr(field, "multiple", False):
            attributes[self.prefix("multiple")] = field.get_name()

        return attributes

    @staticmethod
    def _join(value: Union[str, Iterable[str], None]) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        return " ".join(str(item) for item in value)
