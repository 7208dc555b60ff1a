"""Input events, messages and commands exchanged with the terminal UI loop.

A command is any zero-argument callable that produces a message. The UI loop
runs commands and feeds the messages they return back into the model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

Message = Any
Command = Callable[[], Message]


@dataclass(frozen=True)
class KeyBinding:
    """A set of key names bound to one action, with optional help text."""

    keys: tuple[str, ...]
    help_key: str = ""
    help_desc: str = ""

    def matches(self, key: object) -> bool:
        """Return True if the key press (or key name) triggers this binding."""
        return str(key) in self.keys


@dataclass(frozen=True)
class KeyPress:
    """A key press, identified by its name (``"q"``, ``"esc"``, ``"ctrl+c"``...)."""

    key: str

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class WindowSize:
    """The terminal or popup was resized."""

    width: int
    height: int


@dataclass(frozen=True)
class SpinnerTick:
    """Advances the spinner animation by one frame."""


@dataclass(frozen=True)
class Quit:
    """Message that ends the program; an instance also serves as the command yielding it."""

    def __call__(self) -> "Quit":
        return self


@dataclass(frozen=True)
class Batch:
    """Several commands to be run concurrently by the UI loop."""

    commands: tuple[Command, ...]

    def __iter__(self) -> Iterator[Command]:
        return iter(self.commands)

    def __len__(self) -> int:
        return len(self.commands)

    def __call__(self) -> "Batch":
        return self


def batch(*args: Optional[Command]) -> Optional[Command]:
    """Combine commands, dropping ``None``; returns None, the sole command, or a Batch."""
    commands = tuple(cmd for cmd in args if cmd is not None)
    if not commands:
        return None
    if len(commands) == 1:
        return commands[0]
    return Batch(commands)


@dataclass(frozen=True)
class _SharedKeys:
    quit: KeyBinding
    force_quit: KeyBinding


@dataclass(frozen=True)
class _ListKeys:
    up: KeyBinding
    down: KeyBinding
    toggle: KeyBinding
    install: KeyBinding
    update: KeyBinding
    clean: KeyBinding
    uninstall: KeyBinding
    debug: KeyBinding


SHARED_KEYS = _SharedKeys(
    quit=KeyBinding(("q",), "q", "quit"),
    force_quit=KeyBinding(("ctrl+c",), "ctrl+c", "force quit"),
)

LIST_KEYS = _ListKeys(
    up=KeyBinding(("up", "k"), "↑/k", "up"),
    down=KeyBinding(("down", "j"), "↓/j", "down"),
    toggle=KeyBinding(("tab", " "), "tab", "toggle"),
    install=KeyBinding(("i",), "i", "install"),
    update=KeyBinding(("u",), "u", "update"),
    clean=KeyBinding(("c",), "c", "clean"),
    uninstall=KeyBinding(("x",), "x", "uninstall"),
    debug=KeyBinding(("@",)),
)