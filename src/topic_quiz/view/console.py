"""Rich-powered, line-based front end for quiz sessions.

Each loop iteration renders the session snapshot, reads one line from an
injectable input provider and turns it into a session intent. Navigation keys
go through the session's :class:`KeyDispatcher` exactly as terminal key
presses do in the Textual app, so both front ends share one code path.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from topic_quiz.quiz.dataset import QuizDataset, Topic
from topic_quiz.quiz.navigator import KeyDispatcher, KeyMap, NavKey
from topic_quiz.quiz.session import QuizPhase, QuizSession, SessionSnapshot
from topic_quiz.quiz.validator import OptionFeedback

from .icons import icon_for

InputProvider = Callable[[], str]
ExitAction = Literal["completed", "returned", "quit"]
CommandType = Literal["key", "select", "submit", "next", "return", "quit"]

_FEEDBACK_STYLE = {
    OptionFeedback.CORRECT: "bold green",
    OptionFeedback.WRONG_SELECTED: "bold red",
}


@dataclass(frozen=True)
class ConsoleCommand:
    """Normalized user command parsed from one input line."""

    type: CommandType
    key: NavKey | None = None
    choice: int | None = None


@dataclass(frozen=True)
class ConsoleSessionResult:
    snapshot: SessionSnapshot
    exit_action: ExitAction


def parse_console_command(
    raw: str | None, keymap: KeyMap | None = None
) -> ConsoleCommand | None:
    """Parse one input line.

    A bare Enter confirms the highlighted option. Digits pick an option by
    its 1-based position. Anything else is looked up in ``keymap``.
    """

    if raw is None:
        return None
    text = raw.strip().lower()
    if not text:
        return ConsoleCommand("key", key=NavKey.CONFIRM)
    if text in {"s", "submit"}:
        return ConsoleCommand("submit")
    if text in {"n", "next"}:
        return ConsoleCommand("next")
    if text in {"m", "menu", "back"}:
        return ConsoleCommand("return")
    if text in {"q", "quit", "exit"}:
        return ConsoleCommand("quit")
    if text.isdigit():
        return ConsoleCommand("select", choice=int(text))
    key = (keymap or KeyMap()).resolve(text)
    if key is not None:
        return ConsoleCommand("key", key=key)
    return None


def choose_topic(
    dataset: QuizDataset,
    console: Console,
    input_provider: InputProvider,
) -> Topic | None:
    """Show the topic menu until a topic is picked; ``None`` means quit."""

    while True:
        _render_menu(console, dataset)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            return None
        text = (raw or "").strip()
        if text.lower() in {"q", "quit", "exit"}:
            return None
        if not text:
            continue
        topic = dataset.find(text)
        if topic is not None:
            return topic
        console.print(
            f"[red]No quiz named '{escape(text)}'. Try again.[/red]"
        )


def run_console_session(
    session: QuizSession,
    console: Console,
    input_provider: InputProvider,
    *,
    dispatcher: KeyDispatcher | None = None,
) -> ConsoleSessionResult:
    """Drive ``session`` until it completes or the user leaves."""

    dispatcher = dispatcher or KeyDispatcher()
    exit_action: ExitAction = "completed"
    with session.mounted(dispatcher):
        while not session.completed:
            render_question(console, session.snapshot())
            try:
                raw = input_provider()
            except (EOFError, KeyboardInterrupt, StopIteration):
                console.print("\n[bold yellow]Session interrupted.[/]")
                exit_action = "quit"
                break
            command = parse_console_command(raw, dispatcher.keymap)
            if command is None:
                console.print("[red]Unrecognized command. Try again.[/]")
                continue
            action = _apply_command(command, session, dispatcher, console)
            if action is not None:
                exit_action = action
                break

    snapshot = session.snapshot()
    if snapshot.completed:
        render_summary(console, snapshot)
    return ConsoleSessionResult(snapshot=snapshot, exit_action=exit_action)


def run_console_app(
    dataset: QuizDataset,
    console: Console,
    input_provider: InputProvider,
    *,
    keymap: KeyMap | None = None,
    start_topic: Topic | None = None,
    session_factory: Callable[[Topic], QuizSession] = QuizSession.from_topic,
) -> list[ConsoleSessionResult]:
    """Menu, session, menu again; each topic pick gets a fresh session."""

    results: list[ConsoleSessionResult] = []
    topic = start_topic
    while True:
        if topic is None:
            topic = choose_topic(dataset, console, input_provider)
            if topic is None:
                return results
        result = run_console_session(
            session_factory(topic),
            console,
            input_provider,
            dispatcher=KeyDispatcher(keymap),
        )
        results.append(result)
        if result.exit_action == "quit":
            return results
        topic = None


def _apply_command(
    command: ConsoleCommand,
    session: QuizSession,
    dispatcher: KeyDispatcher,
    console: Console,
) -> ExitAction | None:
    if command.type == "key" and command.key is not None:
        dispatcher.dispatch(command.key)
        return None
    if command.type == "select" and command.choice is not None:
        options = session.current_question().options
        if not 1 <= command.choice <= len(options):
            console.print(
                "[red]'%d' is not a valid option for this question.[/red]"
                % command.choice
            )
            return None
        session.select(options[command.choice - 1])
        return None
    if command.type == "submit":
        result = session.submit()
        if result.accepted:
            verdict = "[bold green]Correct![/]" if result.correct else (
                "[bold red]Incorrect.[/]"
            )
            console.print(verdict)
        return None
    if command.type == "next":
        if session.phase is not QuizPhase.REVEALED:
            console.print("[yellow]Submit an answer first.[/]")
        session.advance_question()
        return None
    if command.type == "return":
        console.print("\n[bold yellow]Returning to quiz options.[/]")
        return "returned"
    if command.type == "quit":
        return "quit"
    return None


def _render_menu(console: Console, dataset: QuizDataset) -> None:
    console.print()
    console.rule(Text("Welcome to the Frontend Quiz!", style="bold magenta"))
    table = Table(show_header=False, box=box.SIMPLE, expand=False)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Icon", justify="center")
    table.add_column("Quiz")
    table.add_column("Questions", justify="right", style="dim")
    for number, topic in enumerate(dataset, start=1):
        table.add_row(
            str(number), icon_for(topic), Text(topic.title), str(len(topic))
        )
    console.print(table)
    console.print(
        Text("Pick a subject by number or name, q to quit.", style="dim")
    )


def render_question(console: Console, snapshot: SessionSnapshot) -> None:
    question = snapshot.question
    if question is None:
        return
    header = Text.assemble(
        (snapshot.title or "Quiz", "bold magenta"),
        (
            f"  Question {snapshot.question_number} of {snapshot.total}",
            "cyan",
        ),
    )
    console.print()
    console.rule(header)
    console.print(Text(question.text, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Cursor", width=1)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Option")
    for index, option in enumerate(question.options):
        cursor = ">" if index == snapshot.highlighted_index else " "
        label = Text(option)
        style = _FEEDBACK_STYLE.get(snapshot.feedback[index])
        if style:
            label.stylize(style)
        elif option == snapshot.selected_answer:
            label.stylize("bold magenta")
        if option == snapshot.selected_answer:
            label.append("  (selected)", style="dim")
        table.add_row(cursor, str(index + 1), label)
    console.print(table)

    if snapshot.validation_error:
        console.print(Text(snapshot.validation_error, style="bold magenta"))
    if snapshot.answered_wrong:
        console.print(
            Text(f"Correct answer: {question.answer}", style="bold green")
        )
    if snapshot.revealed:
        hint = "n (next question), m (menu), q (quit)"
    else:
        hint = (
            "up/down move, Enter picks, 1-%d select, s (submit), m (menu), "
            "q (quit)" % len(question.options)
        )
    console.print(Text(f"Score {snapshot.score} | {hint}", style="dim"))


def render_summary(console: Console, snapshot: SessionSnapshot) -> None:
    console.print()
    console.print(
        Panel(
            Text.assemble(
                ("You've completed the quiz!\n", "bold"),
                (
                    f"Your score: {snapshot.score} out of {snapshot.total}",
                    "magenta",
                ),
            ),
            title=snapshot.title or "Quiz",
            border_style="green",
            expand=False,
        )
    )
