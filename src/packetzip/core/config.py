"""Layered settings for packetzip.

A key such as ``archives.copy_buffer_size`` is looked up, first hit wins, in:
explicit overrides, ``PACKETZIP_ARCHIVES_COPY_BUFFER_SIZE`` in the
environment, the user YAML file, the system YAML file, built-in defaults.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from packetzip.core.errors import ConfigError

LOGGING_LEVELS = ("quiet", "normal", "debug")
ENV_PREFIX = "PACKETZIP_"

DEFAULTS: dict[str, Any] = {
    "archives": {
        "copy_buffer_size": 1024,
        "extract_buffer_size": 10000,
        "sort_entries": True,
        "directory_markers": True,
        "deterministic": False,
    },
    "logging": {"level": "normal", "color": True},
    "diagnostics": {
        "enabled": False,
        "path": "~/.packetzip/diagnostics.jsonl",
    },
}

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


def _lookup(tree: dict[str, Any], key: str) -> Any | None:
    node: Any = tree
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


class ConfigResolver:
    """Resolve dotted settings keys across overrides, env, YAML files and defaults.

    Example:
        resolver = ConfigResolver(cli_args={"archives": {"copy_buffer_size": 4096}})
        resolver.resolve("archives.copy_buffer_size")  # (4096, "cli")
    """

    def __init__(
        self,
        cli_args: dict[str, Any] | None = None,
        user_config_path: Path | None = None,
        system_config_path: Path | None = None,
        defaults: dict[str, Any] | None = None,
    ) -> None:
        self.cli_args = cli_args or {}
        self.user_config_path = user_config_path or Path.home() / ".config/packetzip/config.yaml"
        self.system_config_path = system_config_path or Path("/etc/packetzip/config.yaml")
        self.defaults = DEFAULTS if defaults is None else defaults
        self._files: dict[Path, dict[str, Any]] = {}

    def resolve(self, key: str) -> tuple[Any, str]:
        """Return ``(value, source)`` for key.

        Raises:
            ConfigError: key is unset everywhere, or a config file is unreadable
        """
        layers = (
            ("cli", lambda: _lookup(self.cli_args, key)),
            ("env", lambda: os.environ.get(ENV_PREFIX + key.upper().replace(".", "_"))),
            ("user_config", lambda: _lookup(self._file(self.user_config_path), key)),
            ("system_config", lambda: _lookup(self._file(self.system_config_path), key)),
            ("default", lambda: _lookup(self.defaults, key)),
        )
        for source, fetch in layers:
            value = fetch()
            if value is not None:
                return value, source
        raise ConfigError(f"Config key '{key}' not found in any source")

    def resolve_int(self, key: str, *, minimum: int | None = None) -> int:
        """Resolve an integer; strings from env or YAML are parsed."""
        raw, source = self.resolve(key)
        if isinstance(raw, bool):
            raise ConfigError(f"Config key '{key}' must be an int, got bool ({source})")
        try:
            value = int(raw.strip()) if isinstance(raw, str) else raw
        except ValueError:
            raise ConfigError(f"Config key '{key}' must be an int, got {raw!r}") from None
        if not isinstance(value, int):
            raise ConfigError(f"Config key '{key}' must be an int, got {type(raw).__name__}")
        if minimum is not None and value < minimum:
            raise ConfigError(f"Config key '{key}' must be >= {minimum}, got {value}")
        return value

    def resolve_bool(self, key: str) -> bool:
        """Resolve a flag; accepts YAML booleans and 1/0, yes/no, on/off, true/false."""
        raw, _source = self.resolve(key)
        if isinstance(raw, bool):
            return raw
        word = str(raw).strip().lower()
        if word in _TRUTHY:
            return True
        if word in _FALSY:
            return False
        raise ConfigError(f"Config key '{key}' must be a bool, got {raw!r}")

    def resolve_logging_level(self) -> str:
        """Return logging.level normalized to one of LOGGING_LEVELS ('normal' if unset)."""
        try:
            raw, _source = self.resolve("logging.level")
        except ConfigError as e:
            if "not found" in str(e):
                return "normal"
            raise
        level = raw.strip().lower() if isinstance(raw, str) else None
        if level not in LOGGING_LEVELS:
            raise ConfigError(
                f"Invalid 'logging.level': {raw!r}. Allowed values: {', '.join(LOGGING_LEVELS)}"
            )
        return level

    def _file(self, path: Path) -> dict[str, Any]:
        if path not in self._files:
            self._files[path] = self._load_yaml(path)
        return self._files[path]

    @staticmethod
    def _load_yaml(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}") from e
        return data if isinstance(data, dict) else {}
