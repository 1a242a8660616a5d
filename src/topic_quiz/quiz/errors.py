"""Exception types raised by the quiz core."""

from __future__ import annotations


class QuizError(RuntimeError):
    """Base class for quiz failures the CLI reports to the user."""


class DatasetError(QuizError):
    """Raised when a quiz dataset is malformed or fails validation."""


class QuestionOutOfRange(IndexError):
    """Raised when the current question is requested after completion.

    Check ``completed`` before asking for the current question; this is a
    signal of caller misuse, not a flow-control mechanism.
    """
