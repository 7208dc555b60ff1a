"""A standalone screen listing the commits an update brought in."""

from __future__ import annotations

from typing import Optional, Sequence

from plugdeck.constants import (
    ESC_KEY_NAME,
    FIXED_HEIGHT,
    FIXED_WIDTH,
    MIN_VIEW_HEIGHT,
    Commit,
)
from plugdeck.events import LIST_KEYS, SHARED_KEYS, Command, KeyPress, Quit, WindowSize
from plugdeck.scroll import ScrollState
from plugdeck.styles import Theme, center_text, pad_to_bottom

# Lines taken by the title, help and padding around the commit list.
COMMIT_VIEWER_RESERVED_LINES = 13


def commit_list_max_visible(height: int) -> int:
    """Number of commit rows that fit in ``height`` lines."""
    return max(height - COMMIT_VIEWER_RESERVED_LINES, MIN_VIEW_HEIGHT)


def commit_title(name: str, count: int) -> str:
    """The title text for a plugin's commit list."""
    plural = "" if count == 1 else "s"
    return f"  {name} — {count} new commit{plural}  "


def render_commit_rows(theme: Theme, commits: Sequence[Commit], scroll: ScrollState, max_visible: int) -> str:
    """The commit rows with scroll indicators, each row ending in a newline."""
    visible = min(max_visible, len(commits))
    end = min(scroll.scroll_offset + visible, len(commits))
    top, bottom, data_start, data_end = theme.render_scroll_indicators(
        scroll.scroll_offset, end, len(commits)
    )
    rows = [top]
    for index in range(data_start, data_end):
        commit = commits[index]
        cursor = "> " if index == scroll.cursor else "  "
        rows.append(cursor + theme.muted_text_style.render(commit.hash) + " " + commit.message + "\n")
    rows.append(bottom)
    return "".join(rows)


class CommitViewer:
    """Scrollable list of commits for one plugin."""

    def __init__(self, name: str, commits: Sequence[Commit], theme: Theme) -> None:
        self.name = name
        self.commits = list(commits)
        self.theme = theme
        self.scroll = ScrollState()
        self.width = FIXED_WIDTH
        self.height = FIXED_HEIGHT
        self.size_known = True

    def init(self) -> Optional[Command]:
        """No start-up work is needed."""
        return None

    def max_visible(self) -> int:
        """Number of commit rows that fit in the current height."""
        return commit_list_max_visible(self.height)

    def update(self, msg: object) -> Optional[Command]:
        """Apply a message; returns a command to run, if any."""
        if isinstance(msg, WindowSize):
            self.width = msg.width
            self.height = msg.height
            self.size_known = True
            return None
        if isinstance(msg, KeyPress):
            if SHARED_KEYS.force_quit.matches(msg):
                return Quit()
            if SHARED_KEYS.quit.matches(msg) or str(msg) == ESC_KEY_NAME:
                return Quit()
            if LIST_KEYS.up.matches(msg):
                self.scroll.move_up()
            elif LIST_KEYS.down.matches(msg):
                self.scroll.move_down(len(self.commits), self.max_visible())
        return None

    def _center(self, text: str) -> str:
        return center_text(text, self.width, self.size_known)

    def view(self) -> str:
        """Render the screen."""
        title = self.theme.title_style.render(commit_title(self.name, len(self.commits)))
        body = (
            self._center(title)
            + "\n\n"
            + render_commit_rows(self.theme, self.commits, self.scroll, self.max_visible())
        )
        help_text = self._center(self.theme.render_help(self.width, "q", "quit"))
        return self.theme.base_style.render(pad_to_bottom(body, help_text, self.height))


def commit_viewer_ideal_size(name: str, commits: Sequence[Commit]) -> tuple[int, int]:
    """The fixed popup dimensions for the commit viewer."""
    return FIXED_WIDTH, FIXED_HEIGHT