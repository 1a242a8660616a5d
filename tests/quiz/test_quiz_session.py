from __future__ import annotations

import logging

import pytest

from topic_quiz.quiz.dataset import Question
from topic_quiz.quiz.errors import QuestionOutOfRange
from topic_quiz.quiz.navigator import KeyDispatcher, NavKey
from topic_quiz.quiz.session import QuizPhase, QuizSession
from topic_quiz.quiz.validator import NO_ANSWER_MESSAGE, OptionFeedback


def test_new_session_starts_clean(topic) -> None:
    session = QuizSession.from_topic(topic)
    snap = session.snapshot()
    assert snap.title == "Letters"
    assert snap.phase is QuizPhase.ANSWERING
    assert (snap.current_index, snap.score, snap.total) == (0, 0, 2)
    assert snap.selected_answer == ""
    assert snap.highlighted_index == 0
    assert not snap.revealed
    assert snap.validation_error == ""
    assert snap.question_number == 1


def test_two_question_scenario(topic) -> None:
    session = QuizSession.from_topic(topic)

    session.select("A")
    result = session.submit()
    assert result.accepted and result.correct
    assert session.score == 1
    session.advance_question()

    session.select("A")
    result = session.submit()
    assert result.accepted and result.correct is False
    snap = session.snapshot()
    assert snap.score == 1
    assert snap.answered_wrong
    assert snap.feedback == (
        OptionFeedback.WRONG_SELECTED,
        OptionFeedback.CORRECT,
    )

    session.advance_question()
    final = session.snapshot()
    assert final.completed
    assert final.current_index == 2
    assert (final.score, final.total) == (1, 2)
    assert final.question is None
    assert final.question_number == 2


def test_empty_submit_only_sets_message(topic) -> None:
    session = QuizSession.from_topic(topic)
    result = session.submit()
    assert not result.accepted
    assert result.correct is None
    snap = session.snapshot()
    assert snap.validation_error == NO_ANSWER_MESSAGE
    assert snap.phase is QuizPhase.ANSWERING
    assert (snap.revealed, snap.score, snap.current_index) == (False, 0, 0)

    session.select("B")
    assert session.validation_error == ""


def test_advance_before_reveal_is_ignored(topic, caplog) -> None:
    session = QuizSession.from_topic(topic)
    session.select("B")
    with caplog.at_level(logging.DEBUG, logger="topic_quiz.session"):
        session.advance_question()
    assert session.current_index == 0
    assert session.selected_answer == "B"
    assert any(
        getattr(record, "event", None) == "state_misuse"
        for record in caplog.records
    )


def test_select_after_reveal_is_ignored(topic) -> None:
    session = QuizSession.from_topic(topic)
    session.select("B")
    session.submit()
    session.select("A")
    assert session.selected_answer == "B"
    assert not session.submit().accepted
    assert session.score == 0


def test_advance_resets_per_question_state(topic) -> None:
    session = QuizSession.from_topic(topic)
    session.move_highlight(NavKey.NEXT)
    session.move_highlight(NavKey.NEXT)
    session.confirm_highlighted()
    session.submit()
    assert session.highlighted_index == 2

    session.advance_question()
    snap = session.snapshot()
    assert snap.phase is QuizPhase.ANSWERING
    assert snap.selected_answer == ""
    assert snap.highlighted_index == 0
    assert not snap.revealed
    assert snap.validation_error == ""


def test_completed_session_is_frozen(topic) -> None:
    session = QuizSession.from_topic(topic)
    for answer in ("A", "B"):
        session.select(answer)
        session.submit()
        session.advance_question()
    assert session.completed
    assert session.score == 2

    session.select("A")
    session.submit()
    session.advance_question()
    session.move_highlight(NavKey.NEXT)
    session.confirm_highlighted()
    assert session.score == 2
    assert session.current_index == 2
    with pytest.raises(QuestionOutOfRange):
        session.current_question()


def test_score_bounds_hold_throughout(topic) -> None:
    session = QuizSession.from_topic(topic)
    seen = [session.score]
    for answer in ("C", "B"):
        session.submit()
        session.select(answer)
        session.submit()
        seen.append(session.score)
        session.advance_question()
        seen.append(session.score)
    assert seen == sorted(seen)
    assert all(0 <= value <= session.total for value in seen)


def test_highlight_wraps_and_confirm_selects(topic) -> None:
    session = QuizSession.from_topic(topic)
    session.move_highlight(NavKey.PREVIOUS)
    assert session.highlighted_index == 2
    session.move_highlight(NavKey.NEXT)
    assert session.highlighted_index == 0
    session.move_highlight(NavKey.CONFIRM)
    assert session.selected_answer == "A"


def test_highlight_and_selection_are_independent(topic) -> None:
    session = QuizSession.from_topic(topic)
    session.select("C")
    session.move_highlight(NavKey.NEXT)
    snap = session.snapshot()
    assert snap.selected_answer == "C"
    assert snap.highlighted_index == 1


def test_keys_reach_session_only_while_mounted(topic) -> None:
    session = QuizSession.from_topic(topic)
    dispatcher = KeyDispatcher()
    with session.mounted(dispatcher):
        assert session.listening
        dispatcher.dispatch(NavKey.NEXT)
        dispatcher.dispatch(NavKey.CONFIRM)
        assert session.selected_answer == "B"
    assert dispatcher.listener_count == 0
    dispatcher.dispatch(NavKey.NEXT)
    assert session.highlighted_index == 1


def test_bindings_do_not_accumulate_across_questions(topic) -> None:
    session = QuizSession.from_topic(topic)
    dispatcher = KeyDispatcher()
    session.mount(dispatcher)

    dispatcher.dispatch(NavKey.CONFIRM)
    session.submit()
    session.advance_question()
    assert dispatcher.listener_count == 1

    dispatcher.dispatch(NavKey.NEXT)
    assert session.highlighted_index == 1
    dispatcher.dispatch(NavKey.CONFIRM)
    session.submit()
    session.advance_question()

    assert session.completed
    assert dispatcher.listener_count == 0
    assert not session.listening
    assert session.score == 2


def test_select_before_submit_is_reflected_in_verdict(topic) -> None:
    session = QuizSession.from_topic(topic)
    dispatcher = KeyDispatcher()
    session.mount(dispatcher)
    dispatcher.dispatch_raw("down")
    dispatcher.dispatch_raw("enter")
    result = session.submit()
    assert result.accepted
    assert result.correct is False
    session.unmount()


def test_empty_question_list_starts_completed() -> None:
    session = QuizSession([], title="Empty")
    assert session.completed
    assert session.snapshot().question_number == 0
    session.mount(KeyDispatcher())
    assert not session.listening


def test_session_logs_structured_events(topic) -> None:
    records: list[logging.LogRecord] = []

    class _Collect(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            records.append(record)

    logger = logging.getLogger("topic_quiz.test_session_events")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    handler = _Collect()
    logger.addHandler(handler)
    try:
        session = QuizSession.from_topic(topic, logger=logger)
        session.select("A")
        session.submit()
        session.advance_question()
        session.select("B")
        session.submit()
        session.advance_question()
    finally:
        logger.removeHandler(handler)

    events = [getattr(record, "event", None) for record in records]
    assert events == [
        "session_started",
        "answer_submitted",
        "question_advanced",
        "answer_submitted",
        "session_completed",
    ]
    assert records[-1].score == 2


def test_duplicate_options_are_allowed() -> None:
    question = Question(text="?", options=("same", "same"), answer="same")
    session = QuizSession([question])
    session.move_highlight(NavKey.NEXT)
    session.confirm_highlighted()
    assert session.submit().correct is True
