"""Running the plugin manager and the commit viewer in a full-screen terminal."""

from __future__ import annotations

import queue
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional, Sequence

from blessed import Terminal

from plugdeck.commit_viewer import CommitViewer
from plugdeck.constants import FIXED_HEIGHT, FIXED_WIDTH, Commit, Config
from plugdeck.events import Batch, KeyPress, Quit, WindowSize
from plugdeck.model import Model
from plugdeck.operations import Deps
from plugdeck.plugins import Plugin
from plugdeck.styles import Theme

# How long to wait for a key before looking at finished background work.
_POLL_INTERVAL = 0.02
_MAX_WORKERS = 8

_SEQUENCE_NAMES = {
    "KEY_UP": "up",
    "KEY_DOWN": "down",
    "KEY_LEFT": "left",
    "KEY_RIGHT": "right",
    "KEY_ENTER": "enter",
    "KEY_ESCAPE": "esc",
    "KEY_TAB": "tab",
    "KEY_BACKSPACE": "backspace",
    "KEY_DELETE": "delete",
    "KEY_HOME": "home",
    "KEY_END": "end",
    "KEY_PGUP": "pgup",
    "KEY_PGDOWN": "pgdown",
}


def _key_name(keystroke: Any) -> str:
    """The key name the bindings use for a terminal keystroke."""
    name = getattr(keystroke, "name", None)
    if getattr(keystroke, "is_sequence", False) and name:
        return _SEQUENCE_NAMES.get(name, name.removeprefix("KEY_").lower())
    text = str(keystroke)
    if text == "\x1b":
        return "esc"
    if text in ("\r", "\n"):
        return "enter"
    if text == "\t":
        return "tab"
    if text == "\x7f":
        return "backspace"
    if len(text) == 1 and ord(text) < 32:
        return "ctrl+" + chr(ord(text) + 96)
    return text


def _commands_of(group: Any) -> list:
    """The commands grouped in a batch."""
    if isinstance(group, Iterable):
        return list(group)
    for value in vars(group).values():
        if isinstance(value, (list, tuple)):
            return list(value)
    return []


class _Failure:
    """A background command raised instead of returning a message."""

    def __init__(self, error: BaseException) -> None:
        self.error = error


class _EventLoop:
    """Feeds keys, resizes and command results to a model and draws its view."""

    def __init__(self, model: Any, term: Any) -> None:
        self._model = model
        self._term = term
        self._messages: "queue.Queue[object]" = queue.Queue()
        self._pool = ThreadPoolExecutor(max_workers=_MAX_WORKERS)
        self._quit = False

    def _schedule(self, cmd: Any) -> None:
        if cmd is None:
            return
        if isinstance(cmd, Quit):
            self._quit = True
        elif isinstance(cmd, Batch):
            for inner in _commands_of(cmd):
                self._schedule(inner)
        elif callable(cmd):
            self._pool.submit(self._execute, cmd)

    def _execute(self, cmd: Any) -> None:
        try:
            msg = cmd()
        except BaseException as exc:  # reported to the main loop
            self._messages.put(_Failure(exc))
            return
        if msg is not None:
            self._messages.put(msg)

    def _dispatch(self, msg: object) -> None:
        if isinstance(msg, _Failure):
            raise msg.error
        if isinstance(msg, (Quit, Batch)) or callable(msg):
            self._schedule(msg)
            return
        self._schedule(self._model.update(msg))

    def _drain(self) -> bool:
        handled = False
        while not self._quit:
            try:
                msg = self._messages.get_nowait()
            except queue.Empty:
                break
            self._dispatch(msg)
            handled = True
        return handled

    def _render(self) -> None:
        frame = self._model.view().replace("\n", "\r\n")
        print(self._term.home + self._term.clear + frame, end="", flush=True)

    def run(self) -> None:
        term = self._term
        try:
            with term.fullscreen(), term.raw(), term.hidden_cursor():
                size = (term.width, term.height)
                self._schedule(self._model.init())
                self._dispatch(WindowSize(width=size[0], height=size[1]))
                self._render()
                while not self._quit:
                    changed = self._drain()
                    if self._quit:
                        break
                    keystroke = term.inkey(timeout=_POLL_INTERVAL)
                    if keystroke:
                        self._dispatch(KeyPress(_key_name(keystroke)))
                        changed = True
                    new_size = (term.width, term.height)
                    if new_size != size:
                        size = new_size
                        self._dispatch(WindowSize(width=size[0], height=size[1]))
                        changed = True
                    if changed:
                        self._render()
                self._render()
        finally:
            self._pool.shutdown(wait=False, cancel_futures=True)


def ideal_size(*args: Any, **kwargs: Any) -> tuple[int, int]:
    """The fixed popup dimensions of the plugin manager."""
    return FIXED_WIDTH, FIXED_HEIGHT


def run_program(model: Any) -> None:
    """Run ``model`` full-screen until it asks to quit."""
    _EventLoop(model, Terminal()).run()


def run(config: Config, plugins: Sequence[Plugin], deps: Deps, **kwargs: Any) -> None:
    """Run the plugin manager; ``kwargs`` are passed on to :class:`Model`."""
    model = Model(config, plugins, deps, **kwargs)
    try:
        run_program(model)
    except Exception as exc:
        raise RuntimeError(f"tui: {exc}") from exc


def run_commit_viewer(name: str, commits: Sequence[Commit], theme: Theme) -> None:
    """Run the standalone commit viewer for one plugin."""
    viewer = CommitViewer(name, commits, theme)
    try:
        run_program(viewer)
    except Exception as exc:
        raise RuntimeError(f"commit viewer: {exc}") from exc