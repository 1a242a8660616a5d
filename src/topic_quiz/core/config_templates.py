"""Starter TOML files shipped inside ``topic_quiz.data``."""

from __future__ import annotations

from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Iterable

from .config import TomlConfigError, write_toml_template

__all__ = [
    "ConfigTemplate",
    "ConfigTemplateError",
    "get_template",
    "iter_templates",
]


class ConfigTemplateError(RuntimeError):
    """Raised for unknown template names or failed template writes."""


@dataclass(frozen=True)
class ConfigTemplate:
    name: str
    filename: str
    description: str
    package: str = "topic_quiz.data"

    def read_text(self) -> str:
        source = resources.files(self.package) / self.filename
        if not source.is_file():
            raise ConfigTemplateError(
                f"Template '{self.name}' is missing {self.filename} "
                f"from {self.package}."
            )
        return source.read_text(encoding="utf-8")

    def write(self, path: Path, *, overwrite: bool = False) -> Path:
        """Copy the template to ``path``; refuses to replace a file unless
        ``overwrite`` is set.
        """

        text = self.read_text()
        try:
            return write_toml_template(
                path, template=text, overwrite=overwrite
            )
        except TomlConfigError as exc:
            raise ConfigTemplateError(str(exc)) from exc


_QUIZ_TEMPLATE = ConfigTemplate(
    name="quiz",
    filename="quiz.toml",
    description="Dataset, interface, key and logging defaults.",
)
_REGISTRY = {template.name: template for template in (_QUIZ_TEMPLATE,)}


def get_template(name: str) -> ConfigTemplate:
    template = _REGISTRY.get(name)
    if template is None:
        known = ", ".join(sorted(_REGISTRY))
        raise ConfigTemplateError(
            f"Unknown config template '{name}' (known: {known})."
        )
    return template


def iter_templates() -> Iterable[ConfigTemplate]:
    return tuple(_REGISTRY.values())
