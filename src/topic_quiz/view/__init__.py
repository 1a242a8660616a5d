from .console import (
    ConsoleCommand,
    ConsoleSessionResult,
    choose_topic,
    parse_console_command,
    render_question,
    render_summary,
    run_console_app,
    run_console_session,
)
from .icons import DEFAULT_ICON, icon_for

__all__ = [
    "ConsoleCommand",
    "ConsoleSessionResult",
    "choose_topic",
    "parse_console_command",
    "render_question",
    "render_summary",
    "run_console_app",
    "run_console_session",
    "DEFAULT_ICON",
    "icon_for",
]
