"""Per-user workspace for topic-quiz: ``config/`` and ``logs/`` live here."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

WORKSPACE_ENV = "TOPIC_QUIZ_HOME"
DEFAULT_WORKSPACE = Path.home() / ".topic-quiz"

SUBDIRECTORIES = ("config", "logs")


class WorkspaceError(RuntimeError):
    """Raised when the workspace layout cannot be prepared."""


@dataclass(frozen=True)
class WorkspaceLayout:
    """Where the workspace lives and which of its folders were just made."""

    home: Path
    directories: Mapping[str, Path]
    created: Mapping[str, bool]

    def path_for(self, key: str) -> Path:
        if key not in self.directories:
            raise KeyError(f"Unknown workspace directory '{key}'.")
        return self.directories[key]

    def items(self) -> tuple[tuple[str, Path], ...]:
        return tuple(self.directories.items())


def ensure_workspace(
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
    create: bool = True,
) -> WorkspaceLayout:
    """Resolve the workspace home and, unless ``create`` is false, build it.

    ``path`` beats ``TOPIC_QUIZ_HOME`` which beats ``~/.topic-quiz``. Only
    the implicit default may fall back to a temp directory when the home
    directory is not writable; an explicit location fails loudly instead.
    """

    env_map = os.environ if env is None else env
    requested = path or _home_from_env(env_map)
    home = _absolute(requested or DEFAULT_WORKSPACE)

    if not create:
        return _plan_layout(home)

    attempts = [home]
    if requested is None and _fallback_base() != home:
        attempts.append(_fallback_base())

    failure: Exception | None = None
    for candidate in attempts:
        try:
            return _build_layout(candidate)
        except PermissionError as exc:
            failure = exc
    raise WorkspaceError(f"Unable to prepare workspace at {home}") from failure


def _home_from_env(env: Mapping[str, str]) -> Path | None:
    raw = (env.get(WORKSPACE_ENV) or "").strip()
    return Path(raw) if raw else None


def _absolute(candidate: Path) -> Path:
    expanded = candidate.expanduser()
    try:
        return expanded.resolve()
    except OSError:
        return expanded.absolute()


def _fallback_base() -> Path:
    return Path(tempfile.gettempdir()) / "topic-quiz"


def _plan_layout(home: Path) -> WorkspaceLayout:
    """Describe the layout under ``home`` without touching the disk."""

    directories = {name: home / name for name in SUBDIRECTORIES}
    for name, directory in directories.items():
        if directory.exists() and not directory.is_dir():
            raise WorkspaceError(
                f"Workspace entry '{name}' is not a directory: {directory}"
            )
    return WorkspaceLayout(
        home=home,
        directories=MappingProxyType(directories),
        created=MappingProxyType(
            {"home": False, **{name: False for name in directories}}
        ),
    )


def _build_layout(home: Path) -> WorkspaceLayout:
    if home.exists() and not home.is_dir():
        raise WorkspaceError(
            f"Configured workspace exists and is not a directory: {home}"
        )
    created = {"home": _make_private_dir(home)}
    directories = {}
    for name in SUBDIRECTORIES:
        directories[name] = home / name
        created[name] = _make_private_dir(directories[name])
    return WorkspaceLayout(
        home=home,
        directories=MappingProxyType(directories),
        created=MappingProxyType(created),
    )


def _make_private_dir(directory: Path) -> bool:
    """Create ``directory`` (mode 0700) and report whether it was new."""

    if directory.is_dir():
        return False
    if directory.exists():
        raise WorkspaceError(
            f"Expected a directory but found a file: {directory}"
        )
    directory.mkdir(mode=0o700, parents=True)
    return True
