"""
NexaForm Utils Package
======================

Logging and value helpers.
"""

from __future__ import annotations

from nexaform.utils.logger import Logger, LogLevel, get_logger, configure_logging
from nexaform.utils.helpers import (
    is_empty,
    is_numeric,
    loose_compare,
    loose_equals,
    stringify,
    to_number,
    word_count,
)

__all__ = [
    "Logger",
    "LogLevel",
    "get_logger",
    "configure_logging",
    "is_empty",
    "is_numeric",
    "loose_compare",
    "loose_equals",
    "stringify",
    "to_number",
    "word_count",
]
