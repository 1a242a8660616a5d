"""Forward-only cursor over a topic's questions."""

from __future__ import annotations

from typing import Sequence

from .dataset import Question
from .errors import QuestionOutOfRange


class QuestionIndexer:
    """Track the current question; ``index == total`` means exhausted."""

    def __init__(self, questions: Sequence[Question]) -> None:
        self._questions = tuple(questions)
        self._index = 0

    @property
    def index(self) -> int:
        return self._index

    @property
    def total(self) -> int:
        return len(self._questions)

    @property
    def questions(self) -> tuple[Question, ...]:
        return self._questions

    @property
    def completed(self) -> bool:
        return self._index >= len(self._questions)

    def current_question(self) -> Question:
        if self.completed:
            raise QuestionOutOfRange(
                f"No current question: all {self.total} answered."
            )
        return self._questions[self._index]

    def peek(self) -> Question | None:
        return None if self.completed else self._questions[self._index]

    def advance(self) -> int:
        """Move to the next question, stopping at ``total``."""

        if self._index < len(self._questions):
            self._index += 1
        return self._index
