"""
NexaForm Helpers
================

Value predicates shared by the rules. Submitted form data arrives as
strings, lists or None, so these helpers compare values the way the
browser-side library does rather than by Python truthiness.
"""

from __future__ import annotations

import re
from collections.abc import Sized
from typing import Any, Optional, Union


Number = Union[int, float]

_NUMERIC = re.compile(
    r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$"
)

# A word is a run of letters, optionally joined by apostrophes or hyphens
_WORD = re.compile(r"[^\W\d_](?:[^\W\d_]|['-])*")


# =============================================================================
# String Helpers
# =============================================================================

def stringify(value: Any) -> str:
    """
    Render a value for an HTML attribute or message.

    Integral floats lose their fraction so a bound of ``10.0`` renders
    as ``10``; None renders as an empty string.

    Example:
        >>> stringify(10.0)
        '10'
    """
    if value is None:
        return ""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def word_count(text: str) -> int:
    """
    Count words in text.

    Example:
        >>> word_count("It's a well-known fact")
        4
    """
    return len(_WORD.findall(text))


# =============================================================================
# Value Helpers
# =============================================================================

def is_empty(value: Any) -> bool:
    """
    Check whether a submitted value counts as "not provided".

    None, False, the empty string and empty collections are empty.
    Zero is a value.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, Sized):
        return len(value) == 0
    return False


def is_numeric(value: Any) -> bool:
    """
    Check whether a value is a number or a numeric string.

    Example:
        >>> is_numeric(" 1.5e3")
        True
        >>> is_numeric(True)
        False
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        return bool(_NUMERIC.match(value))
    return False


def to_number(value: Any) -> Optional[Number]:
    """Convert a numeric value to int or float, None if not numeric."""
    if not is_numeric(value):
        return None
    if isinstance(value, (int, float)):
        return value

    number = float(value)
    return int(number) if number.is_integer() and "." not in value else number


def loose_equals(left: Any, right: Any) -> bool:
    """
    Compare submitted values loosely.

    Two numeric values compare as numbers ("5" equals 5.0); otherwise
    both sides compare as strings with None as the empty string.
    """
    if is_numeric(left) and is_numeric(right):
        return float(left) == float(right)
    return stringify(left) == stringify(right)


def loose_compare(left: Any, right: Any) -> int:
    """
    Order two submitted values loosely.

    Returns -1, 0 or 1. Numeric pairs compare as numbers, anything
    else compares as strings.
    """
    if is_numeric(left) and is_numeric(right):
        a, b = float(left), float(right)
    else:
        a, b = stringify(left), stringify(right)

    return (a > b) - (a < b)
