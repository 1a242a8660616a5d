from __future__ import annotations

import json

import pytest
from rich.console import Console

from topic_quiz import cli
from topic_quiz.view import app as quiz_app


def make_provider(commands: list[str]):
    iterator = iter(commands)

    def _provider() -> str:
        return next(iterator)

    return _provider


def _console() -> Console:
    return Console(record=True, width=120, force_terminal=False)


def _run(argv, *, commands=(), console=None) -> tuple[int, str]:
    console = console or _console()
    code = cli.main(
        argv, console=console, input_provider=make_provider(list(commands))
    )
    return code, console.export_text()


def test_topics_lists_bundled_quizzes(isolated_env):
    code, output = _run(["topics"])

    assert code == 0
    lines = output.strip().splitlines()
    assert lines[0] == "1. </> HTML (4 questions)"
    assert lines[3].startswith("4. (a) Accessibility")


def test_no_command_prints_help(isolated_env, capsys):
    code, _ = _run([])
    assert code == 2
    assert "topic-quiz" in capsys.readouterr().out


def test_version_flag(isolated_env):
    code, output = _run(["--version"])
    assert code == 0
    assert output.strip()


def test_start_console_session(isolated_env):
    code, output = _run(
        ["start", "--console", "html"], commands=["3", "s", "q"]
    )

    assert code == 0
    assert "Question 1 of 4" in output
    assert "Correct!" in output
    log_path = isolated_env / "logs" / "topic_quiz.log"
    events = [
        json.loads(line).get("event")
        for line in log_path.read_text(encoding="utf-8").splitlines()
    ]
    assert "session_started" in events
    assert "answer_submitted" in events


def test_start_console_menu_then_quit(isolated_env):
    code, output = _run(["start", "--mode", "console"], commands=["q"])
    assert code == 0
    assert "Welcome to the Frontend Quiz!" in output


def test_start_unknown_topic(isolated_env):
    code, output = _run(["start", "--console", "rust"])
    assert code == 2
    assert "no quiz named 'rust'" in output


def test_start_launches_textual_app(isolated_env, monkeypatch):
    launched = []
    monkeypatch.setattr(
        quiz_app.QuizApp, "run", lambda self: launched.append(self)
    )

    code, _ = _run(["start", "--theme", "light", "css"])

    assert code == 0
    (app,) = launched
    assert app.theme_mode == "light"
    assert app.session is not None
    assert app.session.title == "CSS"


def test_missing_dataset_is_reported(isolated_env, tmp_path):
    code, output = _run(["--dataset", str(tmp_path / "nope.json"), "topics"])
    assert code == 2
    assert "Error: Dataset file not found" in output


def test_lenient_flag_accepts_integrity_problems(isolated_env, tmp_path):
    path = tmp_path / "custom.json"
    path.write_text(
        json.dumps(
            {
                "quizzes": [
                    {
                        "title": "[Odd]",
                        "icon": "css",
                        "questions": [
                            {
                                "question": "?",
                                "options": ["a", "b"],
                                "answer": "c",
                            }
                        ],
                    }
                ]
            }
        ),
        encoding="utf-8",
    )

    code, output = _run(["--dataset", str(path), "topics"])
    assert code == 2
    assert "not among its options" in output

    code, output = _run(["--dataset", str(path), "--lenient", "topics"])
    assert code == 0
    assert output.strip() == "1. { } [Odd] (1 questions)"


def test_lenient_start_logs_dataset_integrity(isolated_env, tmp_path):
    path = tmp_path / "custom.json"
    path.write_text(
        json.dumps(
            {
                "quizzes": [
                    {
                        "title": "T",
                        "icon": "html",
                        "questions": [
                            {
                                "question": "Which one?",
                                "options": ["a", "b"],
                                "answer": "zzz",
                            }
                        ],
                    }
                ]
            }
        ),
        encoding="utf-8",
    )

    code, output = _run(
        ["--dataset", str(path), "--lenient", "start", "--console", "T"],
        commands=["q"],
    )

    assert code == 0
    assert "Which one?" in output
    log_path = isolated_env / "logs" / "topic_quiz.log"
    records = [
        json.loads(line)
        for line in log_path.read_text(encoding="utf-8").splitlines()
    ]
    integrity = [r for r in records if r.get("event") == "dataset_integrity"]
    assert integrity
    assert integrity[0]["level"] == "WARNING"
    assert integrity[0]["logger"] == "topic_quiz.dataset"


def test_bad_config_is_reported(isolated_env):
    config_dir = isolated_env / "config"
    config_dir.mkdir(parents=True)
    (config_dir / "quiz.toml").write_text(
        '[interface]\nmode = "gui"\n', encoding="utf-8"
    )

    code, output = _run(["topics"])
    assert code == 2
    assert "interface.mode" in output


def test_config_init_writes_template(isolated_env):
    code, output = _run(["config", "init"])
    target = isolated_env / "config" / "quiz.toml"

    assert code == 0
    assert "Created template" in output
    assert "[dataset]" in target.read_text(encoding="utf-8")

    code, output = _run(["config", "init"])
    assert code == 1
    assert "already exists" in output

    code, _ = _run(["config", "init", "--force"])
    assert code == 0


def test_config_init_custom_path(isolated_env, tmp_path):
    target = tmp_path / "elsewhere" / "quiz.toml"
    code, _ = _run(["config", "init", "--path", str(target)])
    assert code == 0
    assert target.exists()


def test_workspace_flag_overrides_env(isolated_env, tmp_path):
    other = tmp_path / "other-home"
    code, _ = _run(["--workspace", str(other), "config", "init"])
    assert code == 0
    assert (other / "config" / "quiz.toml").exists()
    assert not (isolated_env / "config" / "quiz.toml").exists()


def test_run_exits_with_main_status(monkeypatch):
    monkeypatch.setattr(cli, "main", lambda argv: 3)
    with pytest.raises(SystemExit) as excinfo:
        cli.run()
    assert excinfo.value.code == 3
