from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Iterator

import pytest

# Ensure src/ is importable when the package is not installed
ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from topic_quiz.quiz.dataset import Question, Topic  # noqa: E402


@pytest.fixture
def two_questions() -> tuple[Question, ...]:
    return (
        Question(text="First letter?", options=("A", "B", "C"), answer="A"),
        Question(text="Second letter?", options=("A", "B"), answer="B"),
    )


@pytest.fixture
def topic(two_questions: tuple[Question, ...]) -> Topic:
    return Topic(title="Letters", icon="html", questions=two_questions)


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the workspace at a tmp dir and clear ``TOPIC_QUIZ_*`` env."""

    for key in list(os.environ):
        if key.startswith("TOPIC_QUIZ_"):
            monkeypatch.delenv(key, raising=False)
    home = tmp_path / "home"
    monkeypatch.setenv("TOPIC_QUIZ_HOME", str(home))
    return home


@pytest.fixture(autouse=True)
def _close_topic_quiz_handlers() -> Iterator[None]:
    yield
    logger = logging.getLogger("topic_quiz")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
