"""
NexaForm Core Module
====================

- Config: Layered configuration
- Hooks: Synchronous extension points
"""

from nexaform.core.config import DEFAULTS, Config
from nexaform.core.hooks import Hook, HookPriority, HookRegistry, ValidatorHooks

__all__ = [
    "Config",
    "DEFAULTS",
    "Hook",
    "HookPriority",
    "HookRegistry",
    "ValidatorHooks",
]
