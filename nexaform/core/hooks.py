"""
NexaForm Hooks
==============

Extension points for rules and backends.

Handlers receive the objects being built (attribute dicts, asset
lists) and mutate them in place, so a project can add attributes or
assets without subclassing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


HookCallback = Callable[..., Any]


class HookPriority(Enum):
    """Hook execution priority."""

    HIGHEST = 0
    HIGH = 25
    NORMAL = 50
    LOW = 75
    LOWEST = 100


@dataclass
class HookHandler:
    """
    Registered hook handler.

    Attributes:
        callback: Handler function
        priority: Execution priority
        once: Execute only once
    """

    callback: HookCallback
    priority: int = HookPriority.NORMAL.value
    once: bool = False
    _executed: bool = field(default=False, repr=False)

    def execute(self, *args: Any, **kwargs: Any) -> Any:
        """Execute the handler."""
        if self.once and self._executed:
            return None

        self._executed = True
        return self.callback(*args, **kwargs)


class Hook:
    """
    Named hook with ordered handlers.

    Example:
        update_attributes = Hook("update_attributes")

        @update_attributes.handler()
        def add_trigger(rule, attributes):
            attributes["trigger"] = "keyup"

        update_attributes.trigger(rule, attributes)
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self._handlers: List[HookHandler] = []

    def add(
        self,
        callback: HookCallback,
        priority: int = HookPriority.NORMAL.value,
        once: bool = False,
    ) -> "Hook":
        """Add handler to hook."""
        self._handlers.append(
            HookHandler(callback=callback, priority=priority, once=once)
        )
        self._handlers.sort(key=lambda h: h.priority)
        return self

    def handler(
        self,
        priority: int = HookPriority.NORMAL.value,
        once: bool = False,
    ) -> Callable[[HookCallback], HookCallback]:
        """Decorator to add handler."""
        def decorator(func: HookCallback) -> HookCallback:
            self.add(func, priority, once)
            return func
        return decorator

    def remove(self, callback: HookCallback) -> bool:
        """Remove handler from hook."""
        for handler in self._handlers:
            if handler.callback == callback:
                self._handlers.remove(handler)
                return True
        return False

    def trigger(self, *args: Any, **kwargs: Any) -> List[Any]:
        """
        Run all handlers in priority order.

        Handler exceptions propagate to the caller.

        Returns:
            List of handler return values
        """
        results = [handler.execute(*args, **kwargs) for handler in list(self._handlers)]

        # Clean up once handlers
        self._handlers = [
            h for h in self._handlers
            if not (h.once and h._executed)
        ]

        return results

    def __len__(self) -> int:
        return len(self._handlers)

    def __repr__(self) -> str:
        return f"<Hook {self.name!r} handlers={len(self._handlers)}>"


class HookRegistry:
    """
    Registry for managing hooks.

    Example:
        hooks = HookRegistry()
        hooks.on(ValidatorHooks.BACKEND_UPDATE_REQUIRED_JS, lambda backend, js: js.append("extra.js"))
        hooks.trigger(ValidatorHooks.BACKEND_UPDATE_REQUIRED_JS, backend, js)
    """

    def __init__(self) -> None:
        self._hooks: Dict[str, Hook] = {}

    def register(self, name: str, description: str = "") -> Hook:
        """Register a hook, returning the existing one if present."""
        if name not in self._hooks:
            self._hooks[name] = Hook(name, description)
        return self._hooks[name]

    def get(self, name: str) -> Optional[Hook]:
        return self._hooks.get(name)

    def on(
        self,
        name: str,
        callback: HookCallback,
        priority: int = HookPriority.NORMAL.value,
        once: bool = False,
    ) -> None:
        """Add handler to hook, registering the hook on first use."""
        self.register(name).add(callback, priority, once)

    def off(self, name: str, callback: HookCallback) -> bool:
        """Remove handler from hook."""
        hook = self._hooks.get(name)
        return hook.remove(callback) if hook else False

    def trigger(self, name: str, *args: Any, **kwargs: Any) -> List[Any]:
        """Trigger hook; unknown hooks are a no-op."""
        hook = self._hooks.get(name)
        return hook.trigger(*args, **kwargs) if hook else []

    def list_hooks(self) -> List[str]:
        return list(self._hooks.keys())


class ValidatorHooks:
    """Hook names triggered by rules and backends."""

    RULE_UPDATE_ATTRIBUTES = "rule.update_attributes"
    BACKEND_BEFORE_INIT = "backend.before_init"
    BACKEND_AFTER_INIT = "backend.after_init"
    BACKEND_UPDATE_REQUIRED_JS = "backend.update_required_js"
    BACKEND_UPDATE_REQUIRED_CSS = "backend.update_required_css"
