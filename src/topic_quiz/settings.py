"""Configuration loader for topic-quiz.

Precedence is CLI overrides > ``TOPIC_QUIZ_*`` environment > TOML file >
built-in defaults. The file lives at ``<workspace>/config/quiz.toml`` unless
``--config`` or ``TOPIC_QUIZ_CONFIG`` points elsewhere; a missing default file
is fine, a missing explicit one is an error.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

from topic_quiz.core import config as core_config
from topic_quiz.core import workspace as workspace_mod
from topic_quiz.quiz.navigator import KeyMap

CONFIG_FILENAME = "quiz.toml"
CONFIG_ENV = "TOPIC_QUIZ_CONFIG"
ENV_PREFIX = "TOPIC_QUIZ_"

MODES = ("tui", "console")
THEMES = ("dark", "light")


class QuizConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizConfig:
    dataset_path: Optional[Path]
    strict: bool
    mode: str
    theme: str
    keymap: KeyMap
    log_level: str
    verbose: bool


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced values applied on top of env and file options."""

    dataset_path: Optional[Path] = None
    strict: Optional[bool] = None
    mode: Optional[str] = None
    theme: Optional[str] = None
    log_level: Optional[str] = None
    verbose: Optional[bool] = None


@dataclass(frozen=True)
class LoadResult:
    config: QuizConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise QuizConfigError(str(exc)) from exc

    requested = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=layout.path_for("config") / CONFIG_FILENAME,
    )
    table = _default_table()
    loaded_path: Optional[Path] = None
    if requested.exists():
        loaded_path = requested
        try:
            core_config.merge_defaults(table, core_config.load_toml(requested))
        except core_config.TomlConfigError as exc:
            raise QuizConfigError(str(exc)) from exc
    elif config_path is not None or env_map.get(CONFIG_ENV, "").strip():
        raise QuizConfigError(f"Config file not found: {requested}")

    try:
        config = _build_config(table, overrides, env_map, layout)
    except core_config.TomlConfigError as exc:
        raise QuizConfigError(str(exc)) from exc
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def _build_config(
    table: Mapping[str, Any],
    overrides: ConfigOverrides,
    env_map: Mapping[str, str],
    layout: workspace_mod.WorkspaceLayout,
) -> QuizConfig:
    pick = core_config.pick_first
    env_str = core_config.env_string

    raw_path = pick(
        env_str(env_map, ENV_PREFIX, "DATASET"),
        table["dataset"]["path"],
    )
    strict = core_config.require_bool(
        pick(
            overrides.strict,
            core_config.env_bool(env_map, ENV_PREFIX, "STRICT"),
            table["dataset"]["strict"],
        ),
        field="dataset.strict",
    )
    mode = core_config.require_choice(
        pick(
            overrides.mode,
            env_str(env_map, ENV_PREFIX, "MODE"),
            table["interface"]["mode"],
        ),
        field="interface.mode",
        choices=MODES,
    )
    theme = core_config.require_choice(
        pick(
            overrides.theme,
            env_str(env_map, ENV_PREFIX, "THEME"),
            table["interface"]["theme"],
        ),
        field="interface.theme",
        choices=THEMES,
    )
    keys = table["keys"]
    keymap = KeyMap.from_names(
        next=core_config.require_string_list(keys["next"], field="keys.next"),
        previous=core_config.require_string_list(
            keys["previous"], field="keys.previous"
        ),
        confirm=core_config.require_string_list(
            keys["confirm"], field="keys.confirm"
        ),
    )
    log_level = core_config.require_string(
        pick(
            overrides.log_level,
            env_str(env_map, ENV_PREFIX, "LOG_LEVEL"),
            table["logging"]["level"],
        ),
        field="logging.level",
    ).upper()
    verbose = core_config.require_bool(
        pick(
            overrides.verbose,
            core_config.env_bool(env_map, ENV_PREFIX, "VERBOSE"),
            table["logging"]["verbose"],
        ),
        field="logging.verbose",
    )
    return QuizConfig(
        dataset_path=(
            overrides.dataset_path.expanduser().resolve()
            if overrides.dataset_path is not None
            else _resolve_dataset_path(raw_path, layout)
        ),
        strict=strict,
        mode=mode,
        theme=theme,
        keymap=keymap,
        log_level=log_level,
        verbose=verbose,
    )


def _default_table() -> MutableMapping[str, MutableMapping[str, Any]]:
    defaults = KeyMap()
    return {
        "dataset": {"path": "", "strict": True},
        "interface": {"mode": "tui", "theme": "dark"},
        "keys": {
            "next": [*defaults.next, "j"],
            "previous": [*defaults.previous, "k"],
            "confirm": [*defaults.confirm, "space"],
        },
        "logging": {"level": "INFO", "verbose": False},
    }


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = (env_map.get(CONFIG_ENV) or "").strip()
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _resolve_dataset_path(
    value: object, layout: workspace_mod.WorkspaceLayout
) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, Path):
        candidate = value
    elif isinstance(value, str):
        if not value.strip():
            return None
        candidate = Path(value.strip())
    else:
        raise QuizConfigError("dataset.path must be a string.")
    candidate = candidate.expanduser()
    if not candidate.is_absolute():
        candidate = layout.home / candidate
    return candidate.resolve()
