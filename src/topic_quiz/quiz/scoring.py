"""Running score for a quiz session."""

from __future__ import annotations


class ScoreTracker:
    """Count correct verdicts; the count only ever goes up."""

    def __init__(self, total: int) -> None:
        self._total = total
        self._correct = 0
        self._answered = 0

    @property
    def score(self) -> int:
        return self._correct

    @property
    def total(self) -> int:
        return self._total

    def record(self, correct: bool) -> int:
        """Record one submitted verdict and return the new score."""

        if self._answered >= self._total:
            return self._correct
        self._answered += 1
        if correct:
            self._correct += 1
        return self._correct
