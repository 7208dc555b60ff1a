"""Terminal styling: colours, padding, borders, themes and layout helpers."""

from __future__ import annotations

import math
import re
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional

from wcwidth import wcswidth, wcwidth

from plugdeck.constants import BASE_STYLE_PADDING, BASE_STYLE_VERTICAL_PADDING
from plugdeck.events import SpinnerTick

_ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")
_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_INDEXED_RE = re.compile(r"^(?:colou?r)?(\d{1,3})$")
_RESET = "\x1b[0m"


def _hex_to_rgb(color: str) -> tuple[int, int, int]:
    digits = color.lstrip("#")
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def _color_code(color: str, background: bool) -> Optional[str]:
    """SGR parameters for a hex ("#rrggbb") or indexed ("123") colour."""
    if not color:
        return None
    base = "48" if background else "38"
    if _HEX_RE.match(color):
        r, g, b = _hex_to_rgb(color)
        return f"{base};2;{r};{g};{b}"
    match = _INDEXED_RE.match(color)
    if match and int(match.group(1)) <= 255:
        return f"{base};5;{int(match.group(1))}"
    return None


def _sgr(codes: list[str], text: str) -> str:
    if not codes or not text:
        return text
    return "\x1b[" + ";".join(codes) + "m" + text + _RESET


def _line_width(line: str) -> int:
    plain = _ANSI_RE.sub("", line)
    width = wcswidth(plain)
    if width < 0:
        width = sum(max(wcwidth(ch), 0) for ch in plain)
    return width


def visible_width(text: str) -> int:
    """Display width of the widest line, ignoring escape sequences."""
    return max((_line_width(line) for line in text.split("\n")), default=0)


def text_height(text: str) -> int:
    """Number of lines in ``text``."""
    return text.count("\n") + 1


@dataclass(frozen=True)
class Style:
    """A set of display attributes that can be rendered around text.

    Padding and margin are (top, right, bottom, left). A non-zero ``width``
    pads every line to at least that many columns, padding included.
    """

    foreground: str = ""
    background: str = ""
    bold: bool = False
    italic: bool = False
    padding: tuple[int, int, int, int] = (0, 0, 0, 0)
    margin: tuple[int, int, int, int] = (0, 0, 0, 0)
    border: bool = False
    border_foreground: str = ""
    width: int = 0

    def _text_codes(self) -> list[str]:
        codes = []
        if self.bold:
            codes.append("1")
        if self.italic:
            codes.append("3")
        for code in (_color_code(self.foreground, False), _color_code(self.background, True)):
            if code:
                codes.append(code)
        return codes

    def render(self, text: str) -> str:
        """Apply this style to ``text`` and return the styled string."""
        if self == _PLAIN:
            return text

        lines = text.split("\n")
        pad_top, pad_right, pad_bottom, pad_left = self.padding
        inner_width = max((_line_width(line) for line in lines), default=0)
        if self.width:
            inner_width = max(inner_width, self.width - pad_left - pad_right)
        lines = [line + " " * (inner_width - _line_width(line)) for line in lines]

        codes = self._text_codes()
        lines = [_sgr(codes, line) for line in lines]

        bg = _color_code(self.background, True)
        bg_codes = [bg] if bg else []
        full_width = inner_width + pad_left + pad_right
        left = _sgr(bg_codes, " " * pad_left)
        right = _sgr(bg_codes, " " * pad_right)
        blank = _sgr(bg_codes, " " * full_width)
        lines = (
            [blank] * pad_top
            + [left + line + right for line in lines]
            + [blank] * pad_bottom
        )

        if self.border:
            border_code = _color_code(self.border_foreground, False)
            border_codes = [border_code] if border_code else []
            side = _sgr(border_codes, "│")
            lines = (
                [_sgr(border_codes, "╭" + "─" * full_width + "╮")]
                + [side + line + side for line in lines]
                + [_sgr(border_codes, "╰" + "─" * full_width + "╯")]
            )
            full_width += 2

        m_top, m_right, m_bottom, m_left = self.margin
        if any(self.margin):
            total = full_width + m_left + m_right
            lines = (
                [" " * total] * m_top
                + [" " * m_left + line + " " * m_right for line in lines]
                + [" " * total] * m_bottom
            )
        return "\n".join(lines)


_PLAIN = Style()


@dataclass(frozen=True)
class ColorConfig:
    """Colour overrides from the user's configuration; empty means keep."""

    primary: str = ""
    secondary: str = ""
    accent: str = ""
    error: str = ""
    muted: str = ""
    text: str = ""


@dataclass(frozen=True)
class Theme:
    """All UI styles derived from one colour palette."""

    primary_color: str
    secondary_color: str
    accent_color: str
    error_color: str
    muted_color: str
    text_color: str

    base_style: Style
    title_style: Style
    subtitle_style: Style
    muted_text_style: Style
    selected_row_style: Style
    checked_style: Style
    unchecked_style: Style
    status_installed_style: Style
    status_not_installed_style: Style
    status_outdated_style: Style
    status_check_failed_style: Style
    success_style: Style
    error_style: Style
    help_style: Style
    help_key_style: Style
    progress_style: Style
    orphan_style: Style

    def render_help(self, width: int, *args: str) -> str:
        """Render key/description pairs, wrapping lines to fit ``width``."""
        width = max(width, 20)
        separator = "  "
        lines: list[str] = []
        line_items: list[str] = []
        current_len = 0

        for index in range(0, len(args), 2):
            key = args[index]
            desc = args[index + 1] if index + 1 < len(args) else ""
            item_text = self.help_key_style.render(key) + " " + desc
            item_len = len(key) + 1 + len(desc)

            if line_items and current_len + len(separator) + item_len > width - 4:
                lines.append(separator.join(line_items))
                line_items = [item_text]
                current_len = item_len
            else:
                line_items.append(item_text)
                if len(line_items) > 1:
                    current_len += len(separator)
                current_len += item_len

        if line_items:
            lines.append(separator.join(line_items))
        return self.help_style.render("\n".join(lines))

    def render_checkbox(self, checked: bool) -> str:
        """A ticked or empty checkbox."""
        if checked:
            return self.checked_style.render("[✓]")
        return self.unchecked_style.render("[ ]")

    def render_scroll_indicators(self, start: int, end: int, total: int) -> tuple[str, str, int, int]:
        """Return (top, bottom, data_start, data_end); an indicator replaces one data row."""
        top = bottom = ""
        data_start, data_end = start, end
        if start > 0:
            top = self.muted_text_style.render("  ↑ more above") + "\n"
            data_start += 1
        if end < total:
            bottom = self.muted_text_style.render("  ↓ more below") + "\n"
            data_end -= 1
        return top, bottom, data_start, data_end


def new_theme(primary: str, secondary: str, accent: str, error: str, muted: str, text: str) -> Theme:
    """Build a Theme from a colour palette."""
    return Theme(
        primary_color=primary,
        secondary_color=secondary,
        accent_color=accent,
        error_color=error,
        muted_color=muted,
        text_color=text,
        base_style=Style(padding=(1, 2, 1, 2)),
        title_style=Style(
            foreground=primary,
            bold=True,
            margin=(0, 0, 1, 0),
            padding=(0, 1, 0, 1),
            border=True,
            border_foreground=primary,
        ),
        subtitle_style=Style(foreground=muted, italic=True, margin=(0, 0, 1, 0)),
        muted_text_style=Style(foreground=muted),
        selected_row_style=Style(foreground=text, background=primary, bold=True),
        checked_style=Style(foreground=secondary, bold=True),
        unchecked_style=Style(foreground=muted),
        status_installed_style=Style(foreground=secondary),
        status_not_installed_style=Style(foreground=error),
        status_outdated_style=Style(foreground=accent),
        status_check_failed_style=Style(foreground=accent),
        success_style=Style(foreground=secondary, bold=True),
        error_style=Style(foreground=error, bold=True),
        help_style=Style(foreground=muted, margin=(1, 0, 0, 0)),
        help_key_style=Style(foreground=accent, bold=True),
        progress_style=Style(foreground=secondary),
        orphan_style=Style(foreground=accent, italic=True),
    )


def default_theme() -> Theme:
    """The built-in palette."""
    return new_theme("#7C3AED", "#10B981", "#F59E0B", "#EF4444", "#6B7280", "#F3F4F6")


def overlay_config_colors(base: Theme, colors: ColorConfig) -> Theme:
    """A new Theme with the non-empty configured colours applied over ``base``."""
    return new_theme(
        colors.primary or base.primary_color,
        colors.secondary or base.secondary_color,
        colors.accent or base.accent_color,
        colors.error or base.error_color,
        colors.muted or base.muted_color,
        colors.text or base.text_color,
    )


DOT_FRAMES = ("⣾ ", "⣽ ", "⣻ ", "⢿ ", "⡿ ", "⣟ ", "⣯ ", "⣷ ")


@dataclass
class Spinner:
    """A frame-based activity indicator."""

    frames: tuple[str, ...] = DOT_FRAMES
    interval: float = 0.1
    frame: int = 0

    def tick(self) -> Callable[[], SpinnerTick]:
        """Advance one frame and return the command that schedules the next tick."""
        self.frame = (self.frame + 1) % len(self.frames)
        interval = self.interval

        def _next_tick() -> SpinnerTick:
            time.sleep(interval)
            return SpinnerTick()

        return _next_tick

    def view(self) -> str:
        """The current frame."""
        return self.frames[self.frame]


def _blend(color_a: str, color_b: str, fraction: float) -> str:
    a = _hex_to_rgb(color_a)
    b = _hex_to_rgb(color_b)
    mixed = (round(x + (y - x) * fraction) for x, y in zip(a, b))
    return "#" + "".join(f"{value:02x}" for value in mixed)


@dataclass
class ProgressBar:
    """A horizontal gradient progress bar followed by a percentage."""

    width: int = 40
    full_char: str = "█"
    empty_char: str = "░"
    empty_color: str = "#606060"
    gradient: tuple[str, str] = ("#5A56E0", "#EE6FF8")

    def view_as(self, percent: float) -> str:
        """Render the bar at ``percent`` (0.0 to 1.0)."""
        percent = min(max(percent, 0.0), 1.0)
        percentage = f" {percent * 100:3.0f}%"
        bar_width = max(0, self.width - visible_width(percentage))
        filled = min(max(int(math.floor(bar_width * percent + 0.5)), 0), bar_width)

        cells = []
        for index in range(filled):
            fraction = index / (bar_width - 1) if bar_width > 1 else 0.5
            color = _blend(self.gradient[0], self.gradient[1], fraction)
            cells.append(Style(foreground=color).render(self.full_char))
        empty = self.empty_char * (bar_width - filled)
        cells.append(Style(foreground=self.empty_color).render(empty))
        return "".join(cells) + percentage


def place_horizontal(width: int, text: str) -> str:
    """Centre every line of ``text`` in ``width`` columns; wider text is returned as is."""
    content_width = visible_width(text)
    if content_width >= width:
        return text
    gap = width - content_width
    placed = []
    for line in text.split("\n"):
        total = gap + content_width - _line_width(line)
        left = total // 2
        placed.append(" " * left + line + " " * (total - left))
    return "\n".join(placed)


def center_text(text: str, width: int, size_known: bool) -> str:
    """Centre a single-line element in the content area; unchanged while the size is unknown."""
    if not size_known or width <= 0:
        return text
    content_width = width - BASE_STYLE_PADDING
    if visible_width(text) >= content_width:
        return text
    return place_horizontal(content_width, text)


def center_block(block: str, width: int, size_known: bool) -> str:
    """Centre a multi-line block while keeping its lines left-aligned to each other."""
    if not size_known or width <= 0:
        return block
    content_width = width - BASE_STYLE_PADDING
    block_width = visible_width(block)
    if block_width >= content_width:
        return block
    aligned = Style(width=block_width).render(block)
    return place_horizontal(content_width, aligned)


def render_cursor(active: bool) -> str:
    """The row cursor marker."""
    return "> " if active else "  "


def pad_to_bottom(body: str, footer: str, height: int) -> str:
    """Insert blank lines so ``footer`` sits at the bottom of the content area."""
    content_height = height - BASE_STYLE_VERTICAL_PADDING
    padding = max(content_height - text_height(body) - text_height(footer), 1)
    return body + "\n" * padding + footer


def calculate_visible_range(offset: int, view_height: int, total: int) -> tuple[int, int]:
    """Start and end indices of the rows visible from ``offset``."""
    return offset, min(offset + view_height, total)