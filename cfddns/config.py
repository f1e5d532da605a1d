"""Configuration loading: built-in defaults, an optional JSON file, then the environment."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

DEFAULT_CONFIG_FILE = Path("config.json")

_TRUE_WORDS = frozenset({"true", "on", "yes", "1"})
_FALSE_WORDS = frozenset({"false", "off", "no", "0"})


class ConfigError(Exception):
    """Raised when the configuration cannot be read or has invalid values."""


@dataclass
class Config:
    """Settings for the DDNS client."""

    domain: str = ""
    root_domain: str = ""
    ipv4: bool = True
    ipv6: bool = True
    token: str = field(default="", repr=False)

    def is_complete(self) -> bool:
        """Return True when token, domain and root_domain are all set."""
        return bool(self.token and self.domain and self.root_domain)


_FIELD_TYPES = {f.name: f.type for f in fields(Config)}


def _to_str(name: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise ConfigError(f"invalid type for {name!r}: expected a string, got {value!r}")


def _to_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ConfigError(f"invalid type for {name!r}: expected a boolean, got {value!r}")


def _read_file(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must hold a JSON object")
    return data


def _pick_known(source: Mapping[str, Any]) -> dict[str, Any]:
    return {
        key.lower(): value
        for key, value in source.items()
        if key.lower() in _FIELD_TYPES
    }


def load_config(path: str | os.PathLike | None = None,
                environ: Mapping[str, str] | None = None) -> Config:
    """Build a Config from defaults, an optional JSON file and environment variables.

    The file is optional; environment variables (matched case-insensitively
    against the field names) take precedence over it.
    """
    file_path = Path(path) if path is not None else DEFAULT_CONFIG_FILE
    values: dict[str, Any] = {}
    if file_path.is_file():
        values.update(_pick_known(_read_file(file_path)))
    values.update(_pick_known(os.environ if environ is None else environ))

    converted = {
        name: (_to_bool(name, value) if _FIELD_TYPES[name] in (bool, "bool") else _to_str(name, value))
        for name, value in values.items()
    }
    return Config(**converted)