"""
NexaForm - Server and Client Form Validation
============================================

Validation rules that are checked on the server and, at the same time,
exported as client-side validation attributes (Parsley.js by default),
so one rule definition drives both sides.

Features:
---------
- Required, pattern, numeric bounds, length and word counts
- Date formats shared between Moment.js and strptime
- Cross-field equality and ordering
- Remote (HTTP) validation
- Pluggable backends with configurable attribute vocabulary
- Hooks for extra attributes and assets

Quick Start:
    from nexaform import Validator, Form, FormField
    from nexaform.validation import RangeRule

    validator = Validator({"Age": [RangeRule(min=18, max=65)]}, required=["Email"])
    form = Form("Signup", [FormField("Email"), FormField("Age")], validator=validator)

    form["Age"].get_attributes()
    # {..., "data-parsley-range": "[18, 65]", ...}

    validator.validate({"Email": "", "Age": 15}).valid   # False
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "BSD-3-Clause"

from typing import TYPE_CHECKING

# Core imports (always available)
from nexaform.core.config import Config

# Lazy imports
if TYPE_CHECKING:
    from nexaform.validation import Form, FormField, Rule, ValidationResult, Validator
    from nexaform.validation.backend import Backend
    from nexaform.core.hooks import HookRegistry


def __getattr__(name: str):
    """Lazy loading of the validation components."""
    _imports = {
        "Validator": "nexaform.validation.validator",
        "ValidationResult": "nexaform.validation.validator",
        "Form": "nexaform.validation.form",
        "FormField": "nexaform.validation.form",
        "Rule": "nexaform.validation.rule",
        "Backend": "nexaform.validation.backend",
        "HookRegistry": "nexaform.core.hooks",
        "get_logger": "nexaform.utils.logger",
    }

    if name in _imports:
        import importlib
        module = importlib.import_module(_imports[name])
        return getattr(module, name)

    raise AttributeError(f"module 'nexaform' has no attribute '{name}'")


__all__ = [
    # Metadata
    "__version__",
    "__license__",
    # Core (always loaded)
    "Config",
    # Validation (lazy)
    "Validator",
    "ValidationResult",
    "Form",
    "FormField",
    "Rule",
    "Backend",
    # Extension points (lazy)
    "HookRegistry",
    "get_logger",
]
