"""
NexaForm Configuration Management
=================================

Layered configuration for validators and backends:
- Built-in defaults (the Parsley attribute vocabulary)
- Python configuration files and dictionaries
- Environment variables (NEXAFORM_*)
- Runtime overrides

Configuration Loading Priority (highest to lowest):
1. Runtime overrides
2. Environment variables (NEXAFORM_SECTION__KEY)
3. config/{env}.py (environment-specific)
4. config/app.py (base configuration)
5. Added sources (priority chosen by the caller)
6. DEFAULTS

Example:
    config = Config()
    config.set("backends.parsley.trigger_on", ["change", "focusout"])

    prefix = config.get("backends.parsley.attribute.prefix")  # "data-parsley-"
"""

from __future__ import annotations

import copy
import importlib.util
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, TypeVar, Union

import orjson

T = TypeVar("T")


DEFAULTS: Dict[str, Any] = {
    "app": {
        "base_url": "http://localhost/",
    },
    "validator": {
        "backend": "parsley",
        "client_side": True,
        "server_side": True,
    },
    "backends": {
        "parsley": {
            "attribute": {
                "prefix": "data-parsley-",
                "default": "type",
            },
            "mappings": {
                "message": "{}-message",
            },
            "required_js": [
                "nexaform/client/dist/js/parsley.js",
            ],
            "required_css": [],
            "trigger_on": "change",
            "group_class": "form-group",
            "error_wrapper_class": "form-control-feedback",
            "group_error_class": "has-danger",
            "group_success_class": "has-success",
            "field_error_class": "form-control-danger",
            "field_success_class": "form-control-success",
            "rules": {
                "RequiredRule": {"attribute": "required", "format": "boolean"},
                "PatternRule": {"attribute": "pattern"},
                "DomainRule": {"attribute": "domain", "format": "boolean"},
                "MinRule": {"attribute": "min"},
                "MaxRule": {"attribute": "max"},
                "RangeRule": {"attribute": "range"},
                "LengthRule": {"attribute": "length"},
                "WordsRule": {"attribute": "words"},
                "MaxWordsRule": {"attribute": "maxwords"},
                "MinCheckRule": {"attribute": "mincheck"},
                "DateRule": {"attribute": "date"},
                "EqualToRule": {"attribute": "equalto"},
                "NotEqualToRule": {"attribute": "notequalto"},
                "ComparisonRule": {"attribute": "$type"},
                "RemoteRule": {"attribute": "remote"},
            },
        },
    },
}


@dataclass
class ConfigSource:
    """Represents a configuration source with priority."""
    name: str
    data: Dict[str, Any]
    priority: int = 0


class Config:
    """
    Validation configuration container.

    Provides hierarchical configuration access with type coercion
    and default values. Configuration values can be nested using
    dot notation.

    A Config is cheap to build and is expected to be created once
    per process (or request) and handed to the Validator and Backend.
    """

    ENV_PREFIX = "NEXAFORM_"

    def __init__(
        self,
        data: Optional[Dict[str, Any]] = None,
        defaults: bool = True,
    ) -> None:
        """
        Initialize configuration.

        Args:
            data: Extra configuration merged above the defaults
            defaults: Include the built-in DEFAULTS source
        """
        self._sources: List[ConfigSource] = []
        self._cache: Dict[str, Any] = {}
        self._merged: Dict[str, Any] = {}
        self._dirty = True

        if defaults:
            self.add_source("defaults", copy.deepcopy(DEFAULTS), priority=0)
        if data:
            self.add_source("init", data, priority=5)

    def load_from_path(self, config_path: Union[str, Path]) -> "Config":
        """
        Load configuration from a directory.

        Loads:
        - app.py (base configuration)
        - {NEXAFORM_ENV}.py (environment-specific)
        - NEXAFORM_* environment variables
        """
        config_path = Path(config_path)

        if config_path.exists():
            base_config = config_path / "app.py"
            if base_config.exists():
                self.add_source("app", self._load_python_config(base_config), priority=10)

            env = os.getenv("NEXAFORM_ENV", "development")
            env_config = config_path / f"{env}.py"
            if env_config.exists():
                self.add_source(
                    f"env:{env}", self._load_python_config(env_config), priority=20
                )

        self.load_env()
        return self

    def _load_python_config(self, path: Path) -> Dict[str, Any]:
        """Load configuration from Python file."""
        spec = importlib.util.spec_from_file_location("nexaform_config", path)
        if spec is None or spec.loader is None:
            return {}

        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        # Look for 'config' dict or all public variables
        if hasattr(module, "config"):
            return module.config

        return {
            key: value
            for key, value in vars(module).items()
            if not key.startswith("_")
        }

    def load_env(self, environ: Optional[Dict[str, str]] = None) -> "Config":
        """
        Load overrides from NEXAFORM_* environment variables.

        A double underscore separates levels, so
        NEXAFORM_VALIDATOR__SERVER_SIDE=false sets validator.server_side.
        """
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}

        for key, value in environ.items():
            if key.startswith(self.ENV_PREFIX) and key != "NEXAFORM_ENV":
                config_key = key[len(self.ENV_PREFIX):].lower().replace("__", ".")
                overrides[config_key] = self._parse_env_value(value)

        if overrides:
            self.add_source("env_vars", self._unflatten(overrides), priority=100)

        return self

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value to appropriate type."""
        if value.lower() in ("true", "yes", "on"):
            return True
        if value.lower() in ("false", "no", "off"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        # JSON (for complex values)
        if value.startswith(("{", "[")):
            try:
                return orjson.loads(value)
            except orjson.JSONDecodeError:
                pass

        return value

    def _unflatten(self, flat: Dict[str, Any]) -> Dict[str, Any]:
        """Convert flat dot-notation keys to nested dict."""
        result: Dict[str, Any] = {}

        for key, value in flat.items():
            parts = key.split(".")
            current = result

            for part in parts[:-1]:
                current = current.setdefault(part, {})

            current[parts[-1]] = value

        return result

    def add_source(
        self,
        name: str,
        data: Dict[str, Any],
        priority: int = 0,
    ) -> "Config":
        """Add a configuration source."""
        self._sources.append(ConfigSource(name=name, data=data, priority=priority))
        self._dirty = True
        return self

    def _merge(self) -> None:
        """Merge all sources into single configuration."""
        if not self._dirty:
            return

        # Sort by priority (lower first, so higher overrides)
        self._merged = {}
        for source in sorted(self._sources, key=lambda s: s.priority):
            self._deep_merge(self._merged, copy.deepcopy(source.data))

        self._dirty = False
        self._cache.clear()

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Deep merge override into base."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def get(
        self,
        key: str,
        default: T = None,
    ) -> Union[Any, T]:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "validator.server_side")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        self._merge()

        if key in self._cache:
            return self._cache[key]

        current: Any = self._merged
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]

        self._cache[key] = current
        return current

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get configuration value as boolean."""
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "yes", "1", "on")
        return bool(value)

    def get_list(self, key: str, default: Optional[List] = None) -> List:
        """Get configuration value as list."""
        value = self.get(key, default)
        if value is None:
            return list(default or [])
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]

    def section(self, prefix: str) -> Dict[str, Any]:
        """Get a copy of all values under a prefix."""
        value = self.get(prefix)
        if isinstance(value, dict):
            return copy.deepcopy(value)
        return {}

    def set(self, key: str, value: Any) -> None:
        """
        Set a runtime configuration value.

        Runtime values have the highest priority.
        """
        runtime_source = next(
            (source for source in self._sources if source.name == "runtime"),
            None,
        )

        if runtime_source is None:
            runtime_source = ConfigSource(name="runtime", data={}, priority=1000)
            self._sources.append(runtime_source)

        parts = key.split(".")
        current = runtime_source.data

        for part in parts[:-1]:
            current = current.setdefault(part, {})

        current[parts[-1]] = value
        self._dirty = True

    def has(self, key: str) -> bool:
        """Check if configuration key exists."""
        return self.get(key) is not None

    def __getitem__(self, key: str) -> Any:
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __contains__(self, key: str) -> bool:
        return self.has(key)
