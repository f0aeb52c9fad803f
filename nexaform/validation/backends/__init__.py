"""
NexaForm Backends
=================

Registry of validator backends by configuration name.

Example:
    backend = create_backend("parsley", config)
"""

from __future__ import annotations

from typing import Dict, Optional, Type

from nexaform.core.config import Config
from nexaform.core.hooks import HookRegistry
from nexaform.validation.backend import Backend
from nexaform.validation.backends.parsley import ParsleyBackend
from nexaform.validation.errors import ConfigurationError

BACKENDS: Dict[str, Type[Backend]] = {
    ParsleyBackend.name: ParsleyBackend,
}


def register_backend(backend_class: Type[Backend], name: Optional[str] = None) -> None:
    """Register a backend class under a name (its `name` by default)."""
    BACKENDS[name or backend_class.name] = backend_class


def create_backend(
    name: str,
    config: Optional[Config] = None,
    hooks: Optional[HookRegistry] = None,
) -> Backend:
    """Instantiate a registered backend."""
    try:
        backend_class = BACKENDS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown validator backend {name!r}; available: {', '.join(sorted(BACKENDS))}"
        ) from None

    return backend_class(config=config, hooks=hooks)


__all__ = [
    "BACKENDS",
    "ParsleyBackend",
    "create_backend",
    "register_backend",
]
