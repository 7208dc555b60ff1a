"""Message output for the command line, for tmux, and a recording double for tests."""

from __future__ import annotations

import contextlib
import sys
import threading
from abc import ABC, abstractmethod
from typing import Optional, TextIO


class Output(ABC):
    """Where progress and error messages go."""

    @abstractmethod
    def ok(self, msg: str) -> None:
        """Show an informational or success message."""

    @abstractmethod
    def err(self, msg: str) -> None:
        """Show an error message and mark the output as failed."""

    @abstractmethod
    def end_message(self) -> None:
        """Show the completion message with instructions."""

    @abstractmethod
    def has_failed(self) -> bool:
        """True if any error was reported."""


class ShellOutput(Output):
    """Writes messages to standard output and errors to standard error."""

    def __init__(self, stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None) -> None:
        self._stdout = stdout if stdout is not None else sys.stdout
        self._stderr = stderr if stderr is not None else sys.stderr
        self._lock = threading.Lock()
        self._failed = False

    def ok(self, msg: str) -> None:
        with self._lock:
            print(msg, file=self._stdout)

    def err(self, msg: str) -> None:
        with self._lock:
            self._failed = True
            print(msg, file=self._stderr)

    def end_message(self) -> None:
        """The shell mode has no end message."""

    def has_failed(self) -> bool:
        return self._failed


def shell_escape_single_quoted(s: str) -> str:
    """Escape ``s`` for use inside single quotes in a POSIX shell; NUL bytes are dropped."""
    return s.replace("\x00", "").replace("'", "'\\''")


class TmuxOutput(Output):
    """Shows messages through tmux ``run-shell`` echo commands."""

    def __init__(self, runner) -> None:
        self._runner = runner
        self._lock = threading.Lock()
        self._failed = False

    def _echo(self, msg: str) -> None:
        with self._lock:
            # Display is best effort: a failing tmux call must not abort the operation.
            with contextlib.suppress(Exception):
                self._runner.run_shell("echo '" + shell_escape_single_quoted(msg) + "'")

    def ok(self, msg: str) -> None:
        self._echo(msg)

    def err(self, msg: str) -> None:
        self._failed = True
        self._echo(msg)

    def end_message(self) -> None:
        continue_key = "ENTER"
        try:
            mode_keys = self._runner.show_window_option("mode-keys")
        except Exception:
            mode_keys = ""
        if "emacs" in mode_keys:
            continue_key = "ESCAPE"

        self.ok("")
        self.ok("TMUX environment reloaded.")
        self.ok("")
        self.ok("Done, press " + continue_key + " to continue.")

    def has_failed(self) -> bool:
        return self._failed


class MockOutput(Output):
    """Records every message for inspection."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.ok_msgs: list[str] = []
        self.err_msgs: list[str] = []
        self.end_calls = 0
        self._failed = False

    def ok(self, msg: str) -> None:
        with self._lock:
            self.ok_msgs.append(msg)

    def err(self, msg: str) -> None:
        with self._lock:
            self._failed = True
            self.err_msgs.append(msg)

    def end_message(self) -> None:
        with self._lock:
            self.end_calls += 1

    def has_failed(self) -> bool:
        with self._lock:
            return self._failed