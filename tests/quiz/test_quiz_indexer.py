from __future__ import annotations

import pytest

from topic_quiz.quiz.errors import QuestionOutOfRange
from topic_quiz.quiz.indexer import QuestionIndexer


def test_advance_is_forward_only_and_capped(two_questions) -> None:
    indexer = QuestionIndexer(two_questions)
    assert indexer.index == 0
    assert indexer.current_question() is two_questions[0]

    assert indexer.advance() == 1
    assert indexer.current_question() is two_questions[1]

    assert indexer.advance() == 2
    assert indexer.completed
    assert indexer.advance() == 2
    assert indexer.index == indexer.total


def test_current_question_out_of_range_when_completed(two_questions) -> None:
    indexer = QuestionIndexer(two_questions)
    indexer.advance()
    indexer.advance()
    assert indexer.peek() is None
    with pytest.raises(QuestionOutOfRange):
        indexer.current_question()


def test_out_of_range_is_an_index_error() -> None:
    indexer = QuestionIndexer([])
    assert indexer.completed
    with pytest.raises(IndexError):
        indexer.current_question()
