"""
Hotspring Environment Lookup
============================

Environment variable access with fallbacks and optional ``.env`` loading.
Plugin utilities read their settings through this module.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

_VARIABLE = re.compile(r"\$\{([^}]+)\}|\$(\w+)")

_TRUTHY = ("true", "1", "yes", "on", "enabled")
_FALSY = ("false", "0", "no", "off", "disabled", "")


class Env:
    """
    Environment variable lookup.

    Values come from the process environment first, then from any
    ``.env`` file loaded into this instance. Lookups never raise unless
    ``required`` is set.

    Example:
        env = Env().load(".env")

        debug = env.bool("DEBUG", fallback=False)
        hosts = env.list("ALLOWED_HOSTS", fallback=["localhost"])
        smtp = env.get("SMTP_HOST", "localhost")
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        override: bool = False,
    ):
        """
        Initialize environment lookup.

        Args:
            environ: Mapping to read from (``os.environ`` by default)
            override: Let ``.env`` values replace existing variables
        """
        self._environ = environ if environ is not None else os.environ
        self._override = override
        self._file_values: Dict[str, str] = {}

    def load(self, env_file: Union[str, Path, None] = None) -> "Env":
        """
        Load ``KEY=value`` lines from a ``.env`` file.

        Missing files are ignored. Loaded values are kept on this instance
        and are not written to the process environment.

        Args:
            env_file: Path to the file (``./.env`` by default)

        Returns:
            Self for chaining
        """
        path = Path(env_file) if env_file else Path.cwd() / ".env"
        if not path.exists():
            return self

        for line in path.read_text().splitlines():
            line = line.strip()

            if not line or line.startswith("#"):
                continue

            if line.startswith("export "):
                line = line[7:]

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip()

            if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
                value = value[1:-1]

            self._file_values[key] = self._expand(value)

        return self

    def _expand(self, value: str) -> str:
        """Expand ``${VAR}`` and ``$VAR`` references."""
        def replace(match: "re.Match[str]") -> str:
            name = match.group(1) or match.group(2)
            return self.get(name, "") or ""

        return _VARIABLE.sub(replace, value)

    def get(
        self,
        key: str,
        fallback: Optional[str] = None,
        required: bool = False,
    ) -> Optional[str]:
        """
        Get an environment variable.

        Empty values count as unset and yield ``fallback``.

        Raises:
            KeyError: If required and not set
        """
        if self._override and key in self._file_values:
            value: Optional[str] = self._file_values[key]
        else:
            value = self._environ.get(key) or self._file_values.get(key)

        if not value:
            if required:
                raise KeyError(f"Required environment variable '{key}' is not set")
            return fallback

        return value

    def int(self, key: str, fallback: Optional[int] = None) -> Optional[int]:
        """Get integer value."""
        value = self.get(key)
        if value is None:
            return fallback

        try:
            return int(value)
        except ValueError:
            raise ValueError(f"Environment variable '{key}' is not a valid integer")

    def bool(self, key: str, fallback: Optional[bool] = None) -> Optional[bool]:
        """Get boolean value."""
        value = self.get(key)
        if value is None:
            return fallback

        if value.lower() in _TRUTHY:
            return True
        if value.lower() in _FALSY:
            return False

        raise ValueError(f"Environment variable '{key}' is not a valid boolean")

    def list(
        self,
        key: str,
        fallback: Optional[List[str]] = None,
        separator: str = ",",
    ) -> Optional[List[str]]:
        """Get list value (comma-separated by default)."""
        value = self.get(key)
        if value is None:
            return fallback

        return [item.strip() for item in value.split(separator) if item.strip()]

    def with_prefix(self, prefix: str) -> Dict[str, str]:
        """
        Get all variables starting with ``prefix``.

        Args:
            prefix: Variable prefix (e.g., "HOTSPRING_")

        Returns:
            Dict of matching variables with the prefix removed and lowercased
        """
        merged = {**self._file_values, **dict(self._environ)}
        return {
            key[len(prefix):].lower(): value
            for key, value in merged.items()
            if key.startswith(prefix)
        }

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
