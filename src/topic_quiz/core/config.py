"""TOML plumbing shared by the settings loader and ``config init``.

Every failure is raised as :class:`TomlConfigError`; callers re-raise it as
their own error type with the message intact.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Mapping, MutableMapping

__all__ = [
    "TomlConfigError",
    "env_bool",
    "env_string",
    "load_toml",
    "merge_defaults",
    "pick_first",
    "require_bool",
    "require_choice",
    "require_string",
    "require_string_list",
    "write_toml_template",
]

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})


class TomlConfigError(RuntimeError):
    """Raised when a config file cannot be read, parsed or validated."""


def load_toml(path: Path) -> Mapping[str, Any]:
    try:
        raw = path.read_bytes()
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    try:
        return tomllib.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        raise TomlConfigError(f"Cannot parse {path}: {exc}") from exc


def merge_defaults(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    """Overlay ``override`` onto ``base`` in place.

    Only keys already present in ``base`` are accepted, and a table in
    ``base`` may only be replaced by a table, so typos such as
    ``[interfce]`` are reported rather than silently ignored.
    """

    for key, value in override.items():
        dotted = path + key
        if key not in base:
            raise TomlConfigError(f"Unknown configuration key '{dotted}'.")
        current = base[key]
        if not isinstance(current, MutableMapping):
            base[key] = value
        elif isinstance(value, Mapping):
            merge_defaults(current, value, path=dotted + ".")
        else:
            raise TomlConfigError(
                f"Expected table for '{dotted}', "
                f"found {type(value).__name__}."
            )


def write_toml_template(
    path: Path,
    *,
    template: str,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Write ``template`` to ``path`` (owner read/write only)."""

    if path.exists() and not overwrite:
        raise TomlConfigError(f"Config already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(template, encoding="utf-8")
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path


def require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise TomlConfigError(f"'{field}' must be a boolean.")
    return value


def require_string(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise TomlConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()


def require_choice(value: Any, *, field: str, choices: tuple[str, ...]) -> str:
    normalized = require_string(value, field=field).lower()
    if normalized not in choices:
        expected = ", ".join(choices)
        raise TomlConfigError(
            f"'{field}' must be one of: {expected} (got '{value}')."
        )
    return normalized


def require_string_list(value: Any, *, field: str) -> tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise TomlConfigError(f"'{field}' must be a list of strings.")
    items = tuple(require_string(item, field=field) for item in value)
    if not items:
        raise TomlConfigError(f"'{field}' must not be empty.")
    return items


def env_string(
    env: Mapping[str, str], prefix: str, key: str
) -> str | None:
    """Return ``env[prefix + key]`` stripped, or ``None`` when unset/blank."""

    raw = env.get(f"{prefix}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def env_bool(env: Mapping[str, str], prefix: str, key: str) -> bool | None:
    raw = env_string(env, prefix, key)
    if raw is None:
        return None
    lowered = raw.lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    raise TomlConfigError(f"{prefix}{key} must be a boolean (got '{raw}').")


def pick_first(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
