"""
NexaForm Validation Errors
==========================
"""

from __future__ import annotations

from typing import Dict, List, Optional


class ConfigurationError(ValueError):
    """
    A rule, backend or validator was set up incorrectly.

    Raised at construction or bind time, never as the outcome of
    testing a submitted value.
    """


class ValidationError(Exception):
    """
    Validation failed exception.

    Contains all validation errors keyed by field name.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[Dict[str, List[str]]] = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors or {}

    def __str__(self) -> str:
        if self.errors:
            error_list = []
            for field_name, messages in self.errors.items():
                for msg in messages:
                    error_list.append(f"  - {field_name}: {msg}")
            return "Validation failed:\n" + "\n".join(error_list)
        return "Validation failed"

    def first(self, field_name: Optional[str] = None) -> Optional[str]:
        """Get first error message."""
        if field_name:
            messages = self.errors.get(field_name, [])
            return messages[0] if messages else None

        for messages in self.errors.values():
            if messages:
                return messages[0]
        return None
