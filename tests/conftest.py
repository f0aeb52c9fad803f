"""
Shared fixtures.
"""

import pytest

from nexaform.core.config import Config
from nexaform.utils.logger import LogLevel, configure_logging
from nexaform.validation import Form, FormField, Validator


@pytest.fixture
def config():
    """Fresh configuration with built-in defaults only."""
    return Config()


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore the default logging setup after each test."""
    yield
    configure_logging(LogLevel.WARNING)


@pytest.fixture
def make_form():
    """
    Build a validator bound to a form.

    Fields may be names or FormField instances.
    """
    def factory(rules=None, fields=(), values=None, name="Signup", **kwargs):
        validator = Validator(rules, **kwargs)
        form = Form(
            name,
            [FormField(f) if isinstance(f, str) else f for f in fields],
            validator=validator,
            data=values,
        )
        return form, validator

    return factory
