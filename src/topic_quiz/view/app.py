from __future__ import annotations

import logging
from typing import List, Optional

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.containers import Container, Vertical
from textual.widget import Widget
from textual.widgets import Button, Static

from topic_quiz.quiz.dataset import QuizDataset, Topic
from topic_quiz.quiz.navigator import KeyDispatcher, KeyMap
from topic_quiz.quiz.session import QuizSession, SessionSnapshot
from topic_quiz.quiz.validator import OptionFeedback

from .icons import icon_for

THEME_NAMES = {"dark": "textual-dark", "light": "textual-light"}


def next_theme(mode: str) -> str:
    return "light" if mode == "dark" else "dark"


def option_classes(snapshot: SessionSnapshot, index: int) -> List[str]:
    """CSS classes for option ``index``: cursor, pick and reveal state."""

    question = snapshot.question
    if question is None:
        return []
    classes = ["option"]
    if index == snapshot.highlighted_index:
        classes.append("highlighted")
    if question.options[index] == snapshot.selected_answer:
        classes.append("selected")
    feedback = snapshot.feedback[index]
    if feedback is OptionFeedback.CORRECT:
        classes.append("correct")
    elif feedback is OptionFeedback.WRONG_SELECTED:
        classes.append("wrong")
    return classes


def _unfocusable(button: Button) -> Button:
    # Keys must reach the app's dispatcher, not a focused button.
    button.can_focus = False
    return button


class QuizApp(App):
    CSS_PATH = None
    CSS = """
#stage { padding: 1 2; }
#menu-title, #quiz-title { text-style: bold; }
#progress { color: $accent; }
#question { text-style: bold; margin: 1 0; }
Button.option { width: 100%; margin: 0; }
Button.option.highlighted { text-style: bold reverse; }
Button.option.selected { background: $accent; }
Button.option.correct { border: tall $success; }
Button.option.wrong { border: tall $error; }
#error { color: $accent; text-style: bold; }
#correct-answer { color: $success; text-style: bold; }
#hints { color: $text-muted; }
"""
    BINDINGS = [
        ("s", "submit", "Submit"),
        ("n", "next_question", "Next"),
        ("escape", "return_to_menu", "Menu"),
        ("t", "toggle_theme", "Theme"),
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        dataset: QuizDataset,
        *,
        keymap: Optional[KeyMap] = None,
        theme: str = "dark",
        start_topic: Optional[Topic] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__()
        self._quiz_dataset = dataset
        self._quiz_keys = KeyDispatcher(keymap)
        self._quiz_log = logger or logging.getLogger("topic_quiz.app")
        self._quiz_session: Optional[QuizSession] = None
        self._quiz_ready = False
        self.theme_mode = theme
        if start_topic is not None:
            self.start_topic(start_topic)

    def compose(self) -> ComposeResult:
        with Container(id="stage"):
            yield self._build_view()
        yield Static(self._hints_text(), id="hints")

    def on_mount(self) -> None:
        self._quiz_ready = True
        self._apply_theme()

    # Pure helpers (testable without running the App)
    @property
    def session(self) -> Optional[QuizSession]:
        return self._quiz_session

    @property
    def dispatcher(self) -> KeyDispatcher:
        return self._quiz_keys

    def start_topic(self, topic: Topic) -> QuizSession:
        """Open a fresh session for ``topic``, discarding any current one."""

        self._discard_session()
        session = QuizSession.from_topic(topic, logger=self._quiz_log)
        session.mount(self._quiz_keys)
        self._quiz_session = session
        self._update_stage()
        return session

    def return_to_menu(self) -> None:
        self._discard_session()
        self._update_stage()

    def select_option(self, index: int) -> bool:
        session = self._quiz_session
        if session is None or session.completed:
            return False
        options = session.current_question().options
        if not 0 <= index < len(options):
            return False
        session.select(options[index])
        self._update_stage()
        return True

    def handle_raw_key(self, name: str) -> bool:
        """Route a terminal key name to the bound session, if any."""

        if self._quiz_session is None:
            return self._pick_topic_by_key(name)
        handled = self._quiz_keys.dispatch_raw(name)
        if handled:
            self._update_stage()
        return handled

    def _pick_topic_by_key(self, name: str) -> bool:
        if not name.isdigit():
            return False
        topic = self._quiz_dataset.find(name)
        if topic is None:
            return False
        self.start_topic(topic)
        return True

    def _discard_session(self) -> None:
        if self._quiz_session is not None:
            self._quiz_session.unmount()
        self._quiz_session = None

    def _build_view(self) -> Widget:
        session = self._quiz_session
        if session is None:
            return MenuView(self._quiz_dataset)
        snapshot = session.snapshot()
        if snapshot.completed:
            return CompletedView(snapshot)
        return QuestionView(snapshot)

    def _hints_text(self) -> str:
        if self._quiz_session is None:
            return "1-9 pick a quiz | t theme | q quit"
        return "up/down move | enter pick | s submit | n next | esc menu"

    def _update_stage(self) -> None:
        if not self._quiz_ready:
            return
        stage = self.query_one("#stage", Container)
        stage.remove_children()
        stage.mount(self._build_view())
        self.query_one("#hints", Static).update(self._hints_text())

    def _apply_theme(self) -> None:
        self.theme = THEME_NAMES[self.theme_mode]

    # Actions and events
    def action_submit(self) -> None:
        if self._quiz_session is None:
            return
        self._quiz_session.submit()
        self._update_stage()

    def action_next_question(self) -> None:
        if self._quiz_session is None:
            return
        self._quiz_session.advance_question()
        self._update_stage()

    def action_return_to_menu(self) -> None:
        self.return_to_menu()

    def action_toggle_theme(self) -> None:
        self.theme_mode = next_theme(self.theme_mode)
        if self._quiz_ready:
            self._apply_theme()

    def on_key(self, event: events.Key) -> None:
        if self.handle_raw_key(event.key):
            event.stop()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id or ""
        if bid.startswith("topic-"):
            self._pick_topic_by_key(bid.split("-", 1)[1])
        elif bid.startswith("option-"):
            self.select_option(int(bid.split("-", 1)[1]))
        elif bid == "submit":
            self.action_submit()
        elif bid == "next":
            self.action_next_question()
        elif bid == "return":
            self.return_to_menu()

    def on_unmount(self) -> None:
        self._discard_session()


class MenuView(Widget):
    """Topic picker: one button per quiz, numbered from 1."""

    def __init__(self, dataset: QuizDataset) -> None:
        super().__init__()
        self.dataset = dataset

    def compose(self) -> ComposeResult:
        yield Static("Welcome to the Frontend Quiz!", id="menu-title")
        yield Static("Pick a subject to get started.", id="menu-subtitle")
        with Vertical(id="topics"):
            for number, topic in enumerate(self.dataset, start=1):
                yield _unfocusable(
                    Button(
                        Text(f"{icon_for(topic)}  {topic.title}"),
                        id=f"topic-{number}",
                    )
                )


class QuestionView(Widget):
    """One question with its options, feedback and the submit/next button."""

    def __init__(self, snapshot: SessionSnapshot) -> None:
        super().__init__()
        self.snapshot = snapshot

    def compose(self) -> ComposeResult:
        snap = self.snapshot
        question = snap.question
        if question is None:
            return
        yield Static(snap.title, id="quiz-title", markup=False)
        yield Static(
            f"Question {snap.question_number} of {snap.total}", id="progress"
        )
        yield Static(question.text, id="question", markup=False)
        with Vertical(id="options"):
            for index, option in enumerate(question.options):
                button = Button(
                    Text(option),
                    id=f"option-{index}",
                    classes=" ".join(option_classes(snap, index)),
                    disabled=snap.revealed,
                )
                yield _unfocusable(button)
        if snap.validation_error:
            yield Static(snap.validation_error, id="error")
        if snap.answered_wrong:
            yield Static(
                f"Correct answer: {question.answer}",
                id="correct-answer",
                markup=False,
            )
        if snap.revealed:
            yield _unfocusable(Button("Next Question", id="next"))
        else:
            yield _unfocusable(Button("Submit Answer", id="submit"))


class CompletedView(Widget):
    def __init__(self, snapshot: SessionSnapshot) -> None:
        super().__init__()
        self.snapshot = snapshot

    def compose(self) -> ComposeResult:
        yield Static(self.snapshot.title, id="quiz-title", markup=False)
        yield Static("You've completed the quiz!", id="completed")
        yield Static(
            f"Your score: {self.snapshot.score} out of {self.snapshot.total}",
            id="score",
        )
        yield _unfocusable(Button("Return to Quiz Options", id="return"))
