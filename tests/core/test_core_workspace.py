from __future__ import annotations

import pytest

from topic_quiz.core import workspace


def test_workspace_env_creates_config_and_logs(tmp_path, monkeypatch):
    root = tmp_path / "quiz-home"
    monkeypatch.setenv(workspace.WORKSPACE_ENV, str(root))

    layout = workspace.ensure_workspace()

    assert layout.home == root.resolve()
    assert {name for name, _ in layout.items()} == {"config", "logs"}
    assert layout.path_for("logs").is_dir()
    assert all(layout.created.values())


def test_second_call_reports_nothing_created(tmp_path):
    first = workspace.ensure_workspace(path=tmp_path / "again")
    second = workspace.ensure_workspace(path=tmp_path / "again")

    assert first.home == second.home
    assert not any(second.created.values())


def test_explicit_path_beats_env(tmp_path):
    env = {workspace.WORKSPACE_ENV: str(tmp_path / "from-env")}

    layout = workspace.ensure_workspace(env=env, path=tmp_path / "flag")

    assert layout.home == (tmp_path / "flag").resolve()
    assert not (tmp_path / "from-env").exists()


def test_create_false_leaves_disk_untouched(tmp_path):
    layout = workspace.ensure_workspace(
        path=tmp_path / "lazy", create=False
    )

    assert not (tmp_path / "lazy").exists()
    assert layout.path_for("config") == layout.home / "config"


def test_file_in_place_of_workspace_errors(tmp_path):
    target = tmp_path / "occupied"
    target.write_text("x", encoding="utf-8")

    with pytest.raises(workspace.WorkspaceError):
        workspace.ensure_workspace(path=target)


def test_unknown_directory_key(tmp_path):
    layout = workspace.ensure_workspace(path=tmp_path / "w", create=False)

    with pytest.raises(KeyError, match="Unknown workspace directory"):
        layout.path_for("cache")


def test_default_home_falls_back_to_tempdir(tmp_path, monkeypatch):
    blocked = tmp_path / "blocked-home"
    fallback = tmp_path / "tmp-fallback"
    monkeypatch.setattr(workspace, "DEFAULT_WORKSPACE", blocked)
    monkeypatch.setattr(workspace, "_fallback_base", lambda: fallback)

    original = workspace._build_layout

    def fake_build(home):
        if home == blocked.resolve():
            raise PermissionError("denied")
        return original(home)

    monkeypatch.setattr(workspace, "_build_layout", fake_build)

    layout = workspace.ensure_workspace(env={})

    assert layout.home == fallback
