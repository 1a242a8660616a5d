"""Quiz dataset model and JSON loader.

The dataset is read once at startup and never mutated. Its on-disk shape is::

    {"quizzes": [{"title": "HTML", "icon": "html",
                  "questions": [{"question": "...",
                                 "options": ["...", "..."],
                                 "answer": "..."}]}]}

Structural problems (wrong types, missing keys, blank text or option
strings, no options, no questions) always raise :class:`DatasetError`.
Integrity problems (an answer that is not one of the options, fewer than two
options) raise in strict mode and are logged as warnings otherwise; such a
question simply can never be answered correctly.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Iterator, Mapping

from .errors import DatasetError

__all__ = [
    "Question",
    "Topic",
    "QuizDataset",
    "load_dataset",
    "load_default_dataset",
    "parse_dataset",
]

_LOG = logging.getLogger("topic_quiz.dataset")

MIN_OPTIONS = 2


@dataclass(frozen=True)
class Question:
    """A single multiple-choice question."""

    text: str
    options: tuple[str, ...]
    answer: str

    def is_correct(self, option: str) -> bool:
        # Exact string match: no trimming, no case folding.
        return option == self.answer

    @property
    def answer_in_options(self) -> bool:
        return self.answer in self.options


@dataclass(frozen=True)
class Topic:
    """A titled, ordered question set."""

    title: str
    icon: str
    questions: tuple[Question, ...]

    def __len__(self) -> int:
        return len(self.questions)


@dataclass(frozen=True)
class QuizDataset:
    topics: tuple[Topic, ...]

    def __iter__(self) -> Iterator[Topic]:
        return iter(self.topics)

    def __len__(self) -> int:
        return len(self.topics)

    def titles(self) -> list[str]:
        return [topic.title for topic in self.topics]

    def find(self, name: str) -> Topic | None:
        """Look a topic up by title (case-insensitive) or 1-based index."""

        key = name.strip()
        if key.isdigit():
            index = int(key) - 1
            if 0 <= index < len(self.topics):
                return self.topics[index]
            return None
        lowered = key.lower()
        for topic in self.topics:
            if topic.title.lower() == lowered:
                return topic
        return None


def load_dataset(path: Path, *, strict: bool = True) -> QuizDataset:
    """Read and validate a quizzes JSON file."""

    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise DatasetError(f"Dataset file not found: {path}") from exc
    except OSError as exc:
        raise DatasetError(f"Unable to read dataset {path}: {exc}") from exc
    return _parse_text(raw, source=str(path), strict=strict)


def load_default_dataset(*, strict: bool = True) -> QuizDataset:
    """Load the sample dataset bundled with the package."""

    resource = resources.files("topic_quiz.data").joinpath("quizzes.json")
    raw = resource.read_text(encoding="utf-8")
    return _parse_text(raw, source="<bundled quizzes.json>", strict=strict)


def _parse_text(raw: str, *, source: str, strict: bool) -> QuizDataset:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise DatasetError(f"Invalid JSON in {source}: {exc}") from exc
    return parse_dataset(payload, strict=strict)


def parse_dataset(payload: Any, *, strict: bool = True) -> QuizDataset:
    """Build a :class:`QuizDataset` from already-decoded JSON."""

    if not isinstance(payload, Mapping):
        raise DatasetError("Dataset root must be an object.")
    quizzes = payload.get("quizzes")
    if not isinstance(quizzes, list) or not quizzes:
        raise DatasetError("Dataset must contain a non-empty 'quizzes' list.")
    topics = tuple(
        _parse_topic(item, index, strict=strict)
        for index, item in enumerate(quizzes)
    )
    return QuizDataset(topics=topics)


def _parse_topic(item: Any, index: int, *, strict: bool) -> Topic:
    where = f"quizzes[{index}]"
    if not isinstance(item, Mapping):
        raise DatasetError(f"{where} must be an object.")
    title = _require_text(item.get("title"), f"{where}.title")
    icon = item.get("icon", "")
    if not isinstance(icon, str):
        raise DatasetError(f"{where}.icon must be a string.")
    questions = item.get("questions")
    if not isinstance(questions, list) or not questions:
        raise DatasetError(f"{where}.questions must be a non-empty list.")
    parsed = tuple(
        _parse_question(q, f"{where}.questions[{q_index}]", strict=strict)
        for q_index, q in enumerate(questions)
    )
    return Topic(title=title, icon=icon.strip().lower(), questions=parsed)


def _parse_question(item: Any, where: str, *, strict: bool) -> Question:
    if not isinstance(item, Mapping):
        raise DatasetError(f"{where} must be an object.")
    text = _require_text(item.get("question"), f"{where}.question")
    options = item.get("options")
    if not isinstance(options, list) or not options:
        raise DatasetError(f"{where}.options must be a non-empty list.")
    for o_index, option in enumerate(options):
        _require_text(option, f"{where}.options[{o_index}]")
    answer = item.get("answer")
    if not isinstance(answer, str):
        raise DatasetError(f"{where}.answer must be a string.")

    question = Question(text=text, options=tuple(options), answer=answer)
    _check_integrity(question, where, strict=strict)
    return question


def _check_integrity(question: Question, where: str, *, strict: bool) -> None:
    problems: list[str] = []
    if len(question.options) < MIN_OPTIONS:
        problems.append(f"needs at least {MIN_OPTIONS} options")
    if not question.answer_in_options:
        problems.append(f"answer {question.answer!r} is not among its options")
    if not problems:
        return
    message = f"{where}: " + "; ".join(problems)
    if strict:
        raise DatasetError(message)
    _LOG.warning(
        message,
        extra={"event": "dataset_integrity", "location": where},
    )


def _require_text(value: Any, where: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise DatasetError(f"{where} must be a non-empty string.")
    return value

