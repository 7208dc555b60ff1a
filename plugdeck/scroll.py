"""Cursor and scroll-offset tracking for scrollable lists."""

from __future__ import annotations

from dataclasses import dataclass

from plugdeck.constants import SCROLL_OFFSET_MARGIN


@dataclass
class ScrollState:
    """Cursor position and scroll offset of a list."""

    cursor: int = 0
    scroll_offset: int = 0

    def move_up(self) -> None:
        """Move the cursor up one row, scrolling near the top margin."""
        if self.cursor > 0:
            self.cursor -= 1
            if self.cursor < self.scroll_offset + SCROLL_OFFSET_MARGIN and self.scroll_offset > 0:
                self.scroll_offset -= 1

    def move_down(self, list_len: int, visible_height: int) -> None:
        """Move the cursor down one row, scrolling near the bottom margin."""
        if self.cursor < list_len - 1:
            self.cursor += 1
            if self.cursor >= self.scroll_offset + visible_height - SCROLL_OFFSET_MARGIN:
                max_offset = max(list_len - visible_height, 0)
                if self.scroll_offset < max_offset:
                    self.scroll_offset += 1

    def reset(self) -> None:
        """Return cursor and scroll to the top."""
        self.cursor = 0
        self.scroll_offset = 0