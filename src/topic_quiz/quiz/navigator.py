"""Keyboard navigation over a question's options.

Key input reaches a session through a :class:`KeyDispatcher`. A session does
not listen implicitly: it acquires a :class:`KeyBinding` when mounted, and the
:class:`KeyboardNavigator` swaps that binding whenever the current question
changes so listeners never pile up across questions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Hashable, Iterable


class NavKey(Enum):
    NEXT = "next"
    PREVIOUS = "previous"
    CONFIRM = "confirm"


KeyListener = Callable[[NavKey], None]


@dataclass(frozen=True)
class KeyMap:
    """Raw key names (as reported by the terminal) for each logical key."""

    next: tuple[str, ...] = ("down",)
    previous: tuple[str, ...] = ("up",)
    confirm: tuple[str, ...] = ("enter",)

    def resolve(self, raw: str) -> NavKey | None:
        name = raw.strip().lower()
        if not name:
            return None
        if name in self.next:
            return NavKey.NEXT
        if name in self.previous:
            return NavKey.PREVIOUS
        if name in self.confirm:
            return NavKey.CONFIRM
        return None

    @classmethod
    def from_names(
        cls,
        *,
        next: Iterable[str],
        previous: Iterable[str],
        confirm: Iterable[str],
    ) -> "KeyMap":
        def _norm(names: Iterable[str]) -> tuple[str, ...]:
            return tuple(name.strip().lower() for name in names)

        return cls(
            next=_norm(next), previous=_norm(previous), confirm=_norm(confirm)
        )


class KeyBinding:
    """Handle for one registered listener; release is idempotent."""

    def __init__(self, dispatcher: "KeyDispatcher", listener: KeyListener):
        self._dispatcher = dispatcher
        self._listener = listener
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def __call__(self, key: NavKey) -> None:
        if self._active:
            self._listener(key)

    def release(self) -> None:
        if not self._active:
            return
        self._active = False
        self._dispatcher._remove(self)

    def __enter__(self) -> "KeyBinding":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.release()
        return False


class KeyDispatcher:
    """Deliver logical key events, in order, to the bound listeners."""

    def __init__(self, keymap: KeyMap | None = None) -> None:
        self.keymap = keymap or KeyMap()
        self._bindings: list[KeyBinding] = []

    @property
    def listener_count(self) -> int:
        return len(self._bindings)

    def bind(self, listener: KeyListener) -> KeyBinding:
        binding = KeyBinding(self, listener)
        self._bindings.append(binding)
        return binding

    def _remove(self, binding: KeyBinding) -> None:
        try:
            self._bindings.remove(binding)
        except ValueError:
            pass

    def dispatch(self, key: NavKey) -> int:
        """Send ``key`` to every listener bound right now; return the count."""

        delivered = 0
        for binding in list(self._bindings):
            if binding.active:
                binding(key)
                delivered += 1
        return delivered

    def dispatch_raw(self, name: str) -> bool:
        key = self.keymap.resolve(name)
        if key is None:
            return False
        return self.dispatch(key) > 0


class KeyboardNavigator:
    """Wrapping cursor over the current options plus its key binding."""

    def __init__(self) -> None:
        self.highlighted = 0
        self._binding: KeyBinding | None = None
        self._dispatcher: KeyDispatcher | None = None
        self._bound_for: Hashable = None

    @property
    def bound(self) -> bool:
        return self._binding is not None and self._binding.active

    def move(self, key: NavKey, option_count: int) -> int:
        if option_count <= 0:
            self.highlighted = 0
            return 0
        if key is NavKey.NEXT:
            self.highlighted = (self.highlighted + 1) % option_count
        elif key is NavKey.PREVIOUS:
            self.highlighted = (
                self.highlighted - 1 + option_count
            ) % option_count
        return self.highlighted

    def highlighted_option(self, options: tuple[str, ...]) -> str | None:
        if 0 <= self.highlighted < len(options):
            return options[self.highlighted]
        return None

    def reset(self) -> None:
        self.highlighted = 0

    def bind(
        self,
        dispatcher: KeyDispatcher,
        listener: KeyListener,
        *,
        dependency: Hashable,
    ) -> KeyBinding:
        """Hold exactly one binding keyed on ``dependency``.

        A repeat call with the same dependency keeps the live binding; a new
        dependency releases the old binding before acquiring the next one.
        """

        if (
            self.bound
            and self._dispatcher is dispatcher
            and self._bound_for == dependency
        ):
            return self._binding  # type: ignore[return-value]
        self.unbind()
        self._binding = dispatcher.bind(listener)
        self._dispatcher = dispatcher
        self._bound_for = dependency
        return self._binding

    def unbind(self) -> None:
        if self._binding is not None:
            self._binding.release()
        self._binding = None
        self._dispatcher = None
        self._bound_for = None
