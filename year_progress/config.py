"""Helpers for loading environment variables and reading typed settings."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Sequence

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

__all__ = [
    "ConfigError",
    "load_env_file",
    "read_bool_env",
    "read_choice_env",
    "resolve_timezone",
]

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


class ConfigError(RuntimeError):
    """Raised when configuration values are malformed."""


def load_env_file(env_file: str | Path | None = None) -> None:
    """Load environment variables from ``env_file`` if provided.

    When ``env_file`` is :data:`None`, the loader looks for a ``.env`` file in the
    current working directory. Existing environment variables are never overwritten.
    """

    path = Path(env_file) if env_file is not None else Path.cwd() / ".env"
    if not path.is_file():
        return

    for key, value in _iter_env_entries(path):
        os.environ.setdefault(key, value)


def _iter_env_entries(path: Path) -> Iterable[tuple[str, str]]:
    for raw_line in path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if "=" not in line:
            raise ConfigError(
                f"Invalid line in {path.name!r}: {raw_line!r}. Expected KEY=VALUE format."
            )
        key, raw_value = line.split("=", 1)
        key = key.strip()
        value = raw_value.strip().strip('"').strip("'")
        if not key:
            raise ConfigError(f"Environment variable key is missing in line: {raw_line!r}")
        yield key, value


def read_bool_env(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean (true/false), got {raw!r}")


def read_choice_env(name: str, choices: Sequence[str], default: str) -> str:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value not in choices:
        raise ConfigError(f"{name} must be one of {', '.join(choices)}; got {raw!r}")
    return value


def resolve_timezone(name: str | None) -> ZoneInfo | None:
    """Return the :class:`ZoneInfo` for ``name``; ``None`` or ``"local"`` means host local time."""

    if name is None or name.strip().lower() in {"", "local"}:
        return None
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigError(f"Unknown timezone: {name!r}") from exc
