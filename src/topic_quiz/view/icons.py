"""Topic icon lookup for the menu screens."""

from __future__ import annotations

from topic_quiz.quiz.dataset import Topic

DEFAULT_ICON = "?"

_ICONS = {
    "html": "</>",
    "css": "{ }",
    "js": "JS",
    "javascript": "JS",
    "accessibility": "(a)",
}


def icon_for(topic: Topic | str) -> str:
    key = topic.icon if isinstance(topic, Topic) else topic
    return _ICONS.get(key.strip().lower(), DEFAULT_ICON)
