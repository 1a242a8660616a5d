"""Quiz session state machine.

One :class:`QuizSession` exists per attempt at a topic. It composes the
question indexer, answer validator, keyboard navigator and score tracker and
is driven only through the intent methods below. Calls that do not fit the
current phase (selecting after the reveal, advancing before it, anything
after completion) are ignored and logged at DEBUG; they never raise.

Phases::

    ANSWERING --submit (answer picked)--> REVEALED
    REVEALED  --advance (more left)-----> ANSWERING
    REVEALED  --advance (last question)-> COMPLETED
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Sequence

from .dataset import Question, Topic
from .indexer import QuestionIndexer
from .navigator import KeyBinding, KeyDispatcher, KeyboardNavigator, NavKey
from .scoring import ScoreTracker
from .validator import AnswerValidator, OptionFeedback

__all__ = [
    "QuizPhase",
    "QuizSession",
    "SessionSnapshot",
    "SubmitResult",
]


class QuizPhase(Enum):
    ANSWERING = "answering"
    REVEALED = "revealed"
    COMPLETED = "completed"


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of :meth:`QuizSession.submit`.

    ``accepted`` is false when nothing was selected (the snapshot then carries
    the validation message); ``correct`` is only set for accepted submits.
    """

    accepted: bool
    correct: bool | None = None


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable, render-ready view of a session."""

    title: str
    phase: QuizPhase
    current_index: int
    total: int
    score: int
    question: Question | None
    selected_answer: str
    highlighted_index: int
    revealed: bool
    validation_error: str
    feedback: tuple[OptionFeedback, ...]

    @property
    def completed(self) -> bool:
        return self.phase is QuizPhase.COMPLETED

    @property
    def question_number(self) -> int:
        return min(self.current_index + 1, self.total)

    @property
    def answered_wrong(self) -> bool:
        """True while revealing an incorrect pick (show the right answer)."""

        return (
            self.revealed
            and self.question is not None
            and not self.question.is_correct(self.selected_answer)
        )


class QuizSession:
    """Drive one pass through a topic's questions."""

    def __init__(
        self,
        questions: Sequence[Question],
        *,
        title: str = "",
        logger: logging.Logger | None = None,
    ) -> None:
        self.title = title
        self._log = logger or logging.getLogger("topic_quiz.session")
        self._indexer = QuestionIndexer(questions)
        self._validator = AnswerValidator()
        self._navigator = KeyboardNavigator()
        self._scores = ScoreTracker(self._indexer.total)
        self._dispatcher: KeyDispatcher | None = None
        self._log.info(
            "Quiz session started",
            extra={
                "event": "session_started",
                "topic": title,
                "total": self._indexer.total,
            },
        )

    @classmethod
    def from_topic(
        cls, topic: Topic, *, logger: logging.Logger | None = None
    ) -> "QuizSession":
        return cls(topic.questions, title=topic.title, logger=logger)

    # -- read-only state -------------------------------------------------
    @property
    def phase(self) -> QuizPhase:
        if self._indexer.completed:
            return QuizPhase.COMPLETED
        if self._validator.revealed:
            return QuizPhase.REVEALED
        return QuizPhase.ANSWERING

    @property
    def completed(self) -> bool:
        return self._indexer.completed

    @property
    def questions(self) -> tuple[Question, ...]:
        return self._indexer.questions

    @property
    def total(self) -> int:
        return self._indexer.total

    @property
    def current_index(self) -> int:
        return self._indexer.index

    @property
    def score(self) -> int:
        return self._scores.score

    @property
    def selected_answer(self) -> str:
        return self._validator.selected

    @property
    def highlighted_index(self) -> int:
        return self._navigator.highlighted

    @property
    def revealed(self) -> bool:
        return self._validator.revealed

    @property
    def validation_error(self) -> str:
        return self._validator.error

    def current_question(self) -> Question:
        """Return the question being answered.

        Raises :class:`~topic_quiz.quiz.errors.QuestionOutOfRange` once the
        session is completed; check :attr:`completed` first.
        """

        return self._indexer.current_question()

    # -- intents ---------------------------------------------------------
    def select(self, option: str) -> None:
        if self.phase is not QuizPhase.ANSWERING:
            self._misuse("select")
            return
        self._validator.select(option)

    def submit(self) -> SubmitResult:
        if self.phase is not QuizPhase.ANSWERING:
            self._misuse("submit")
            return SubmitResult(accepted=False)
        question = self._indexer.current_question()
        verdict = self._validator.submit(question)
        if verdict is None:
            self._log.debug(
                "Submit rejected: no answer selected",
                extra={
                    "event": "submit_rejected",
                    "index": self.current_index,
                },
            )
            return SubmitResult(accepted=False)
        self._scores.record(verdict)
        self._log.info(
            "Answer submitted",
            extra={
                "event": "answer_submitted",
                "index": self.current_index,
                "correct": verdict,
                "score": self.score,
            },
        )
        return SubmitResult(accepted=True, correct=verdict)

    def advance_question(self) -> None:
        if self.phase is not QuizPhase.REVEALED:
            self._misuse("advance_question")
            return
        self._indexer.advance()
        if self._indexer.completed:
            self._navigator.unbind()
            self._log.info(
                "Quiz session completed",
                extra={
                    "event": "session_completed",
                    "topic": self.title,
                    "score": self.score,
                    "total": self.total,
                },
            )
            return
        self._validator.reset()
        self._navigator.reset()
        self._rebind()
        self._log.debug(
            "Advanced to next question",
            extra={"event": "question_advanced", "index": self.current_index},
        )

    def move_highlight(self, direction: NavKey) -> None:
        if direction is NavKey.CONFIRM:
            self.confirm_highlighted()
            return
        question = self._indexer.peek()
        if question is None:
            self._misuse("move_highlight")
            return
        self._navigator.move(direction, len(question.options))

    def confirm_highlighted(self) -> None:
        question = self._indexer.peek()
        if question is None:
            self._misuse("confirm_highlighted")
            return
        option = self._navigator.highlighted_option(question.options)
        if option is not None:
            self.select(option)

    def handle_key(self, key: NavKey) -> None:
        """Listener body bound to the dispatcher while mounted."""

        if key is NavKey.CONFIRM:
            self.confirm_highlighted()
        else:
            self.move_highlight(key)

    # -- key binding lifecycle -------------------------------------------
    def mount(self, dispatcher: KeyDispatcher) -> KeyBinding | None:
        """Start listening to ``dispatcher`` for the current question."""

        self._dispatcher = dispatcher
        return self._rebind()

    def unmount(self) -> None:
        self._navigator.unbind()
        self._dispatcher = None

    @property
    def listening(self) -> bool:
        return self._navigator.bound

    @contextmanager
    def mounted(self, dispatcher: KeyDispatcher) -> Iterator["QuizSession"]:
        self.mount(dispatcher)
        try:
            yield self
        finally:
            self.unmount()

    def _rebind(self) -> KeyBinding | None:
        if self._dispatcher is None or self._indexer.completed:
            return None
        return self._navigator.bind(
            self._dispatcher,
            self.handle_key,
            dependency=self.current_index,
        )

    # -- rendering -------------------------------------------------------
    def snapshot(self) -> SessionSnapshot:
        question = self._indexer.peek()
        feedback: tuple[OptionFeedback, ...] = ()
        if question is not None:
            feedback = self._validator.feedback(question)
        return SessionSnapshot(
            title=self.title,
            phase=self.phase,
            current_index=self.current_index,
            total=self.total,
            score=self.score,
            question=question,
            selected_answer=self._validator.selected,
            highlighted_index=self._navigator.highlighted,
            revealed=self._validator.revealed,
            validation_error=self._validator.error,
            feedback=feedback,
        )

    def _misuse(self, operation: str) -> None:
        self._log.debug(
            "Ignored %s during %s",
            operation,
            self.phase.value,
            extra={
                "event": "state_misuse",
                "operation": operation,
                "phase": self.phase.value,
            },
        )
