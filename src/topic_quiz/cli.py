"""Command-line entry point for topic-quiz."""

from __future__ import annotations

import argparse
import logging
import sys
from importlib import metadata
from pathlib import Path
from typing import Callable, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from topic_quiz.core import config_templates
from topic_quiz.core.config_templates import ConfigTemplateError
from topic_quiz.core.logging import configure_logger
from topic_quiz.quiz.dataset import (
    QuizDataset,
    Topic,
    load_dataset,
    load_default_dataset,
)
from topic_quiz.quiz.errors import DatasetError
from topic_quiz.quiz.session import QuizSession
from topic_quiz.settings import (
    CONFIG_FILENAME,
    MODES,
    THEMES,
    ConfigOverrides,
    LoadResult,
    QuizConfigError,
    load_config,
)
from topic_quiz.view.console import run_console_app
from topic_quiz.view.icons import icon_for

LOGGER_NAME = "topic_quiz"


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="topic-quiz",
        description="Multiple-choice quizzes grouped by topic",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    p.add_argument(
        "-V", "--version", action="store_true", help="Print version and exit"
    )
    p.add_argument("--config", type=Path, help="Path to a quiz.toml file")
    p.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root holding config/ and logs/",
    )
    p.add_argument("--dataset", type=Path, help="Quizzes JSON file to load")
    p.add_argument(
        "--lenient",
        action="store_true",
        help="Load questions whose answer is not among the options",
    )
    p.add_argument("--log-level", help="Log level for the JSON log file")
    p.add_argument(
        "-v", "--verbose", action="store_true", help="Echo logs to stderr"
    )
    sub = p.add_subparsers(dest="command")

    sub.add_parser("topics", help="List available quizzes")

    sp_start = sub.add_parser("start", help="Start a quiz")
    sp_start.add_argument(
        "topic", nargs="?", help="Quiz title or number (menu when omitted)"
    )
    sp_start.add_argument(
        "--console",
        dest="mode",
        action="store_const",
        const="console",
        help="Use the line-based Rich console instead of the TUI",
    )
    sp_start.add_argument("--mode", dest="mode", choices=list(MODES))
    sp_start.add_argument("--theme", choices=list(THEMES))

    sp_config = sub.add_parser("config", help="Configuration helpers")
    config_sub = sp_config.add_subparsers(dest="action", required=True)
    sp_init = config_sub.add_parser(
        "init", help=f"Write a {CONFIG_FILENAME} template"
    )
    sp_init.add_argument("--path", type=Path, help="Destination file")
    sp_init.add_argument(
        "--force", action="store_true", help="Overwrite an existing file"
    )
    return p


def _overrides_from_args(args: argparse.Namespace) -> ConfigOverrides:
    return ConfigOverrides(
        dataset_path=args.dataset,
        strict=False if args.lenient else None,
        mode=getattr(args, "mode", None),
        theme=getattr(args, "theme", None),
        log_level=args.log_level,
        verbose=True if args.verbose else None,
    )


def _load_quizzes(loaded: LoadResult) -> QuizDataset:
    config = loaded.config
    if config.dataset_path is None:
        return load_default_dataset(strict=config.strict)
    return load_dataset(config.dataset_path, strict=config.strict)


def _cmd_topics(dataset: QuizDataset, console: Console) -> int:
    for number, topic in enumerate(dataset, start=1):
        console.print(
            f"{number}. {icon_for(topic)} {topic.title} "
            f"({len(topic)} questions)",
            markup=False,
            highlight=False,
        )
    return 0


def _cmd_start(
    args: argparse.Namespace,
    loaded: LoadResult,
    dataset: QuizDataset,
    logger: logging.Logger,
    console: Console,
    input_provider: Callable[[], str],
) -> int:
    config = loaded.config

    topic: Optional[Topic] = None
    if args.topic:
        topic = dataset.find(args.topic)
        if topic is None:
            console.print(
                f"[red]Error: no quiz named '{escape(args.topic)}'.[/red]"
            )
            return 2

    if config.mode == "console":
        run_console_app(
            dataset,
            console,
            input_provider,
            keymap=config.keymap,
            start_topic=topic,
            session_factory=lambda chosen: QuizSession.from_topic(
                chosen, logger=logger
            ),
        )
        return 0

    from topic_quiz.view.app import QuizApp

    app = QuizApp(
        dataset,
        keymap=config.keymap,
        theme=config.theme,
        start_topic=topic,
        logger=logger,
    )
    app.run()
    return 0


def _cmd_config_init(args: argparse.Namespace, console: Console) -> int:
    target = args.path
    if target is None:
        try:
            loaded = load_config(
                config_path=None, workspace_path=args.workspace
            )
        except QuizConfigError as exc:
            console.print(f"[red]Error: {escape(str(exc))}[/red]")
            return 2
        target = loaded.layout.path_for("config") / CONFIG_FILENAME
    try:
        written = config_templates.get_template("quiz").write(
            target, overwrite=args.force
        )
    except ConfigTemplateError as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 1
    console.print(f"Created template {written}", highlight=False)
    return 0


def _version() -> str:
    try:
        return metadata.version("topic-quiz")
    except metadata.PackageNotFoundError:
        return "unknown"


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
    input_provider: Optional[Callable[[], str]] = None,
) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    console = console or Console()
    input_provider = input_provider or (lambda: console.input("> "))

    if args.version:
        console.print(_version(), highlight=False)
        return 0
    if args.command is None:
        parser.print_help()
        return 2
    if args.command == "config":
        return _cmd_config_init(args, console)

    try:
        loaded = load_config(
            config_path=args.config,
            overrides=_overrides_from_args(args),
            workspace_path=args.workspace,
        )
    except QuizConfigError as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 2

    logger, log_path = configure_logger(
        LOGGER_NAME,
        log_dir=loaded.layout.path_for("logs"),
        level=loaded.config.log_level,
        verbose=loaded.config.verbose,
    )
    logger.debug(
        "%s command invoked", args.command, extra={"log_path": log_path}
    )

    try:
        dataset = _load_quizzes(loaded)
    except DatasetError as exc:
        logger.error("dataset load failed", extra={"event": "dataset_error"})
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 2

    if args.command == "topics":
        return _cmd_topics(dataset, console)
    return _cmd_start(
        args, loaded, dataset, logger, console, input_provider
    )


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    run()
