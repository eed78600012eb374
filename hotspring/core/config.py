"""
Hotspring Configuration Management
==================================

Layered application configuration with dot-notation access.

Sources are merged by priority (highest wins):
1. Runtime values set with ``Config.set``
2. Environment variables (``HOTSPRING_*``)
3. Python config files / dicts added by the application
4. Defaults

Per-plugin configuration lives under ``plugins.<name>``:

    config = Config({
        "app": {"debug": True},
        "plugins": {
            "email": {"provider": "smtp", "from": "noreply@example.com"},
        },
    })

    config.get("plugins.email.provider")  # "smtp"
    config.section("plugins.email")       # {"provider": "smtp", ...}
"""

from __future__ import annotations

import importlib.util
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, TypeVar, Union

import orjson

T = TypeVar("T")

ENV_PREFIX = "HOTSPRING_"


@dataclass
class ConfigSource:
    """Represents a configuration source with priority."""
    name: str
    data: Dict[str, Any]
    priority: int = 0


class Config:
    """
    Application configuration container.

    Example:
        config = Config()
        config.set("app.name", "MyApp")

        name = config.get("app.name")                   # "MyApp"
        missing = config.get("app.missing", "default")  # "default"
    """

    def __init__(self, defaults: Optional[Mapping[str, Any]] = None) -> None:
        self._sources: List[ConfigSource] = []
        self._merged: Dict[str, Any] = {}
        self._dirty = True

        if defaults:
            self.add_source("defaults", dict(defaults), priority=0)

    def load_file(self, path: Union[str, Path], priority: int = 10) -> None:
        """
        Load a Python config file.

        Uses the module's ``config`` dict if present, otherwise every
        public module-level name. Missing files are ignored.
        """
        path = Path(path)
        if not path.exists():
            return

        spec = importlib.util.spec_from_file_location(f"hotspring_config_{path.stem}", path)
        if spec is None or spec.loader is None:
            return

        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        if hasattr(module, "config"):
            data = dict(module.config)
        else:
            data = {
                key: value
                for key, value in vars(module).items()
                if not key.startswith("_")
            }

        self.add_source(f"file:{path.name}", data, priority=priority)

    def load_env(
        self,
        environ: Optional[Mapping[str, str]] = None,
        prefix: str = ENV_PREFIX,
    ) -> None:
        """
        Load overrides from prefixed environment variables.

        ``HOTSPRING_APP_DEBUG=true`` becomes ``app.debug = True``.
        """
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}

        for key, value in environ.items():
            if key.startswith(prefix):
                config_key = key[len(prefix):].lower().replace("_", ".")
                overrides[config_key] = self._parse_env_value(value)

        if overrides:
            self.add_source("env_vars", self._unflatten(overrides), priority=100)

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

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
                # A nested key replaces a scalar set by a shorter variable
                if not isinstance(current.get(part), dict):
                    current[part] = {}
                current = current[part]

            if isinstance(current.get(parts[-1]), dict):
                continue
            current[parts[-1]] = value

        return result

    def add_source(self, name: str, data: Dict[str, Any], priority: int = 0) -> None:
        """Add a configuration source."""
        self._sources.append(ConfigSource(name=name, data=data, priority=priority))
        self._dirty = True

    def _merge(self) -> None:
        """Merge all sources into single configuration."""
        if not self._dirty:
            return

        self._merged = {}
        for source in sorted(self._sources, key=lambda s: s.priority):
            self._deep_merge(self._merged, source.data)

        self._dirty = False

    def _deep_merge(self, base: Dict, override: Mapping) -> None:
        """Deep merge override into base."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, Mapping):
                self._deep_merge(base[key], value)
            elif isinstance(value, Mapping):
                base[key] = {}
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: T = None) -> Union[Any, T]:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "app.debug")
            default: Default value if key not found
        """
        self._merge()

        current: Any = self._merged
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]

        return current

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get configuration value as boolean."""
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "yes", "1")
        return bool(value)

    def get_int(self, key: str, default: int = 0) -> int:
        """Get configuration value as integer."""
        try:
            return int(self.get(key, default))
        except (TypeError, ValueError):
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Set a runtime configuration value.

        Runtime values have the highest priority.
        """
        runtime = next((s for s in self._sources if s.name == "runtime"), None)
        if runtime is None:
            runtime = ConfigSource(name="runtime", data={}, priority=1000)
            self._sources.append(runtime)

        parts = key.split(".")
        current = runtime.data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = value
        self._dirty = True

    def has(self, key: str) -> bool:
        """Check if configuration key exists."""
        return self.get(key) is not None

    def section(self, prefix: str) -> Dict[str, Any]:
        """Copy of the mapping under ``prefix`` (empty if absent)."""
        value = self.get(prefix)
        if isinstance(value, dict):
            return dict(value)
        return {}

    def all(self) -> Dict[str, Any]:
        """Get all configuration as dict."""
        self._merge()
        return dict(self._merged)

    def __getitem__(self, key: str) -> Any:
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    def __contains__(self, key: str) -> bool:
        return self.has(key)
