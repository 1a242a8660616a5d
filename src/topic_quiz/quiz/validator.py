"""Per-question answer selection, submission and feedback."""

from __future__ import annotations

from enum import Enum

from .dataset import Question

NO_ANSWER_MESSAGE = "Please give an answer"


class OptionFeedback(Enum):
    """How an option is shown once the answer has been revealed."""

    CORRECT = "correct"
    WRONG_SELECTED = "wrong"
    PLAIN = "plain"


class AnswerValidator:
    """Hold the tentative pick for one question and judge it on submit."""

    def __init__(self) -> None:
        self.selected = ""
        self.revealed = False
        self.error = ""

    def select(self, option: str) -> bool:
        """Record ``option`` as the pick; ignored once revealed."""

        if self.revealed:
            return False
        self.selected = option
        self.error = ""
        return True

    def submit(self, question: Question) -> bool | None:
        """Reveal and return the verdict, or ``None`` if nothing is picked."""

        if self.revealed:
            return None
        if not self.selected:
            self.error = NO_ANSWER_MESSAGE
            return None
        self.revealed = True
        return question.is_correct(self.selected)

    def feedback(self, question: Question) -> tuple[OptionFeedback, ...]:
        if not self.revealed:
            return tuple(OptionFeedback.PLAIN for _ in question.options)
        return tuple(
            _classify(option, question, self.selected)
            for option in question.options
        )

    def reset(self) -> None:
        self.selected = ""
        self.revealed = False
        self.error = ""


def _classify(
    option: str, question: Question, selected: str
) -> OptionFeedback:
    if question.is_correct(option):
        return OptionFeedback.CORRECT
    if option == selected:
        return OptionFeedback.WRONG_SELECTED
    return OptionFeedback.PLAIN
