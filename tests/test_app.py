import contextlib
import itertools
import os
import re
import time
from unittest.mock import patch

import pytest
from blessed.keyboard import Keystroke

from plugdeck import app
from plugdeck.constants import FIXED_HEIGHT, FIXED_WIDTH, Commit, Config
from plugdeck.operations import Cloner, Deps
from plugdeck.plugins import Plugin
from plugdeck.styles import default_theme

_ANSI = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")
HOME = "<HOME>"


class FakeTerminal:
    width = 80
    height = 25
    home = HOME
    clear = ""

    def __init__(self, keys, error=None):
        self._keys = iter(keys)
        self._error = error
        self.calls = 0

    def fullscreen(self):
        return contextlib.nullcontext()

    def raw(self):
        return contextlib.nullcontext()

    def hidden_cursor(self):
        return contextlib.nullcontext()

    def inkey(self, timeout=None):
        self.calls += 1
        if self._error is not None:
            raise self._error
        if self.calls > 2000:
            raise AssertionError("event loop did not finish")
        try:
            key = next(self._keys)
        except StopIteration:
            time.sleep(timeout or 0)
            return Keystroke("")
        time.sleep(0.002)
        return key if isinstance(key, Keystroke) else Keystroke(key)


class RecordingCloner(Cloner):
    def __init__(self):
        self.calls = []

    def clone(self, options, timeout):
        self.calls.append(options)
        os.makedirs(options.dir, exist_ok=True)


def last_frame(output):
    return _ANSI.sub("", output.split(HOME)[-1]).replace("\r", "")


def commits():
    return [
        Commit(hash="abc1234", message="add feature X"),
        Commit(hash="def5678", message="fix bug Y"),
        Commit(hash="ghi9012", message="refactor Z"),
    ]


def make_config(tmp_path):
    return Config(plugin_path=str(tmp_path) + "/", tmux_conf=str(tmp_path / "tmux.conf"))


def test_ideal_size_is_fixed():
    assert app.ideal_size() == (FIXED_WIDTH, FIXED_HEIGHT)
    assert app.ideal_size(None, [], Deps(), theme=default_theme()) == (FIXED_WIDTH, FIXED_HEIGHT)


def test_commit_viewer_moves_cursor_and_quits(capsys):
    down = Keystroke("\x1b[B", code=258, name="KEY_DOWN")
    fake = FakeTerminal([down, "q"])
    with patch("plugdeck.app.Terminal", lambda: fake):
        app.run_commit_viewer("tmux-sensible", commits(), default_theme())
    frame = last_frame(capsys.readouterr().out)
    assert "tmux-sensible — 3 new commits" in frame
    assert "> def5678 fix bug Y" in frame
    assert fake.calls == 2


def test_commit_viewer_quits_on_escape(capsys):
    esc = Keystroke("\x1b", code=361, name="KEY_ESCAPE")
    fake = FakeTerminal([esc])
    with patch("plugdeck.app.Terminal", lambda: fake):
        app.run_commit_viewer("test", commits(), default_theme())
    assert fake.calls == 1
    assert "quit" in last_frame(capsys.readouterr().out)


def test_run_shows_empty_list_and_quits(tmp_path, capsys):
    fake = FakeTerminal(["q"])
    with patch("plugdeck.app.Terminal", lambda: fake):
        app.run(make_config(tmp_path), [], Deps())
    frame = last_frame(capsys.readouterr().out)
    assert "No plugins configured in tmux.conf" in frame
    assert fake.calls == 1


def test_run_force_quit_with_ctrl_c(tmp_path, capsys):
    fake = FakeTerminal(["\x03"])
    with patch("plugdeck.app.Terminal", lambda: fake):
        app.run(make_config(tmp_path), [Plugin(name="alpha", spec="user/alpha")], Deps())
    assert fake.calls == 1
    assert "alpha" in last_frame(capsys.readouterr().out)


def test_run_installs_plugin_then_quits(tmp_path, capsys):
    cloner = RecordingCloner()
    keys = itertools.chain(["i"], itertools.repeat("q"))
    fake = FakeTerminal(keys)
    config = make_config(tmp_path)
    with patch("plugdeck.app.Terminal", lambda: fake):
        app.run(config, [Plugin(name="p", spec="user/p")], Deps(cloner=cloner))
    assert len(cloner.calls) == 1
    assert cloner.calls[0].url == "user/p"
    assert cloner.calls[0].dir == os.path.join(config.plugin_path, "p")
    frame = last_frame(capsys.readouterr().out)
    assert "1 successful" in frame
    assert "✓ p" in frame


def test_run_auto_operation_with_nothing_to_do_quits(tmp_path, capsys):
    from plugdeck.constants import Operation

    fake = FakeTerminal([])
    with patch("plugdeck.app.Terminal", lambda: fake):
        app.run(make_config(tmp_path), [], Deps(), auto_op=Operation.INSTALL)
    assert fake.calls < 2000
    assert "TPM Plugin Manager" in last_frame(capsys.readouterr().out)


def test_run_wraps_errors(tmp_path):
    fake = FakeTerminal([], error=OSError("boom"))
    with patch("plugdeck.app.Terminal", lambda: fake):
        with pytest.raises(RuntimeError, match="^tui: boom"):
            app.run(make_config(tmp_path), [], Deps())


def test_run_commit_viewer_wraps_errors():
    fake = FakeTerminal([], error=OSError("boom"))
    with patch("plugdeck.app.Terminal", lambda: fake):
        with pytest.raises(RuntimeError, match="^commit viewer: boom"):
            app.run_commit_viewer("test", commits(), default_theme())