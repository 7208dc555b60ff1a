"""Rendering of the list, progress, commit and debug screens of the main model.

Each ``view_*`` function reads the state of a model object and returns the
screen content. The model applies the base style around it.
"""

from __future__ import annotations

from typing import Sequence

from plugdeck.commit_viewer import commit_list_max_visible, commit_title, render_commit_rows
from plugdeck.constants import (
    MIN_VIEW_HEIGHT,
    PROGRESS_RESULTS_RESERVED_LINES,
    STATUS_COL_WIDTH,
    Operation,
    PluginItem,
    PluginStatus,
    ResultItem,
)
from plugdeck.styles import (
    Theme,
    calculate_visible_range,
    center_block,
    center_text,
    pad_to_bottom,
    render_cursor,
)

_MIN_NAME_WIDTH = 10


def _center(model, text: str) -> str:
    return center_text(text, model.width, model.size_known)


def _center_block(model, block: str) -> str:
    return center_block(block, model.width, model.size_known)


def name_col_width(plugins: Sequence[PluginItem]) -> int:
    """Width of the name column: the longest name (at least 10) plus two."""
    longest = max((len(p.name) for p in plugins), default=0)
    return max(longest, _MIN_NAME_WIDTH) + 2


def table_width(plugins: Sequence[PluginItem]) -> int:
    """Total width of the plugin table."""
    return name_col_width(plugins) + 2 + STATUS_COL_WIDTH


def status_summary(plugins: Sequence[PluginItem]) -> str:
    """Subtitle text with the plugin counts per state."""
    installed = not_installed = outdated = 0
    for plugin in plugins:
        if plugin.status in (
            PluginStatus.INSTALLED,
            PluginStatus.CHECKING,
            PluginStatus.CHECK_FAILED,
        ):
            installed += 1
        elif plugin.status == PluginStatus.NOT_INSTALLED:
            not_installed += 1
        elif plugin.status == PluginStatus.OUTDATED:
            outdated += 1
    summary = f"{installed} installed, {not_installed} not installed"
    if outdated > 0:
        summary += f", {outdated} outdated"
    return summary


def render_status(theme: Theme, status: PluginStatus, spinner_frame: str) -> str:
    """The styled status text for one plugin row."""
    if status == PluginStatus.INSTALLED:
        return theme.status_installed_style.render("Installed")
    if status == PluginStatus.NOT_INSTALLED:
        return theme.status_not_installed_style.render("Not Installed")
    if status == PluginStatus.CHECKING:
        return theme.status_installed_style.render("Installed") + " " + spinner_frame
    if status == PluginStatus.OUTDATED:
        return theme.status_outdated_style.render("Outdated")
    if status == PluginStatus.CHECK_FAILED:
        return (
            theme.status_installed_style.render("Installed")
            + " "
            + theme.status_check_failed_style.render("⚠")
        )
    return ""


def _target_indices(model) -> list[int]:
    plugins = model.plugins
    if model.multi_select_active:
        return [index for index in range(len(plugins)) if index in model.selected]
    cursor = model.list_scroll.cursor
    if 0 <= cursor < len(plugins):
        return [cursor]
    return []


def _target_has_status(model) -> tuple[bool, bool]:
    has_not_installed = has_installed = False
    for index in _target_indices(model):
        if model.plugins[index].status.is_installed():
            has_installed = True
        else:
            has_not_installed = True
        if has_installed and has_not_installed:
            break
    return has_not_installed, has_installed


def _render_table(model) -> str:
    theme = model.theme
    plugins = model.plugins
    width = name_col_width(plugins)
    parts = [
        theme.muted_text_style.render(f"  {'name'.ljust(width)}  status") + "\n",
        theme.muted_text_style.render("  " + "─" * table_width(plugins)) + "\n",
    ]

    view_height = model.view_height if model.view_height > 0 else len(plugins)
    start, end = calculate_visible_range(model.list_scroll.scroll_offset, view_height, len(plugins))
    top, bottom, data_start, data_end = theme.render_scroll_indicators(start, end, len(plugins))
    parts.append(top)

    spinner_frame = model.check_spinner.view()
    for index in range(data_start, data_end):
        plugin = plugins[index]
        is_cursor = index == model.list_scroll.cursor
        is_selected = index in model.selected
        checkbox = theme.render_checkbox(is_selected) + " " if model.multi_select_active else ""
        status = render_status(theme, plugin.status, spinner_frame)
        row = f"{render_cursor(is_cursor)}{checkbox}{plugin.name.ljust(width)}  {status}"
        if is_cursor:
            row = theme.selected_row_style.render(row)
        elif is_selected:
            row = theme.checked_style.render(row)
        parts.append(row + "\n")

    parts.append(bottom)
    return "".join(parts).rstrip("\n")


def view_list(model) -> str:
    """Render the plugin list screen."""
    theme = model.theme
    body = [
        _center(model, theme.title_style.render("  TPM Plugin Manager  ")),
        "\n",
        _center(model, theme.subtitle_style.render(status_summary(model.plugins))),
        "\n",
    ]

    if not model.plugins:
        body.append(
            _center(model, theme.muted_text_style.render("  No plugins configured in tmux.conf"))
        )
        body.append("\n")
    else:
        body.append(_center_block(model, _render_table(model)))
        body.append("\n")

    if model.orphans:
        names = ", ".join(orphan.name for orphan in model.orphans)
        body.append("\n")
        body.append(_center(model, theme.orphan_style.render("Orphaned: " + names)))
        body.append("\n")

    help_pairs: list[str] = []
    has_not_installed, has_installed = _target_has_status(model)
    if has_not_installed:
        help_pairs += ["i", "install"]
    if has_installed:
        help_pairs += ["u", "update", "x", "uninstall"]
    if model.orphans:
        help_pairs += ["c", "clean"]
    help_pairs += ["q", "quit"]
    help_text = _center(model, theme.render_help(model.width, *help_pairs))

    return pad_to_bottom("".join(body), help_text, model.height)


def render_success_result(theme: Theme, cursor: str, result: ResultItem) -> str:
    """One successful result line with its commit count and expand indicator."""
    count = len(result.commits)
    commit_info = ""
    indicator = " "
    if count > 0:
        plural = "" if count == 1 else "s"
        commit_info = f" ({count} new commit{plural})"
        indicator = "▸"
    return (
        cursor
        + indicator
        + " "
        + theme.success_style.render("✓ " + result.name)
        + theme.muted_text_style.render(commit_info)
    )


def _result_max_visible(model) -> int:
    return max(model.height - PROGRESS_RESULTS_RESERVED_LINES, MIN_VIEW_HEIGHT)


def render_results(model) -> str:
    """The finished results list with cursor, commit counts and scroll indicators."""
    theme = model.theme
    results = model.results
    view_height = _result_max_visible(model)
    if view_height <= 0:
        view_height = len(results)
    start, end = calculate_visible_range(model.result_scroll.scroll_offset, view_height, len(results))
    top, bottom, data_start, data_end = theme.render_scroll_indicators(start, end, len(results))

    parts = [top]
    for index in range(data_start, data_end):
        result = results[index]
        cursor = "> " if index == model.result_scroll.cursor else "  "
        if result.success:
            parts.append(render_success_result(theme, cursor, result))
        else:
            parts.append(
                cursor + "  " + theme.error_style.render(f"✗ {result.name}: {result.message}")
            )
        parts.append("\n")
    parts.append(bottom)
    return "".join(parts).rstrip("\n")


def view_progress(model) -> str:
    """Render the progress screen, with results and help once processing is done."""
    theme = model.theme
    body = [
        _center(model, theme.title_style.render(f"  {model.operation} in progress...  ")),
        "\n",
        _center(
            model,
            theme.subtitle_style.render(
                f"Processing {model.completed_items} of {model.total_items} plugins"
            ),
        ),
        "\n",
    ]

    if model.in_flight_names:
        body.append(_center(model, "Current: " + ", ".join(model.in_flight_names)))
        body.append("\n\n")

    percent = model.completed_items / model.total_items if model.total_items > 0 else 0.0
    body.append(_center(model, model.progress_bar.view_as(percent)))
    body.append("\n\n")

    successes = sum(1 for result in model.results if result.success)
    failures = len(model.results) - successes
    stats = (
        f"{theme.success_style.render('✓')} {successes} successful  "
        f"{theme.error_style.render('✗')} {failures} failed"
    )
    body.append(_center(model, theme.muted_text_style.render(stats)))

    if not model.processing and model.results:
        body.append("\n\n")
        body.append(_center_block(model, render_results(model)))
        help_keys = ["enter", "view commits", "q", "quit"]
        if model.auto_op == Operation.NONE:
            help_keys += ["esc", "back to list"]
        help_text = _center(model, theme.render_help(model.width, *help_keys))
        return pad_to_bottom("".join(body), help_text, model.height)

    return "".join(body)


def view_commits(model) -> str:
    """Render the inline commit viewer screen."""
    theme = model.theme
    commits = model.commit_view_commits or []
    title = theme.title_style.render(commit_title(model.commit_view_name, len(commits)))
    body = (
        _center(model, title)
        + "\n\n"
        + render_commit_rows(theme, commits, model.commit_scroll, commit_list_max_visible(model.height))
    )
    help_text = _center(model, theme.render_help(model.width, "esc", "back", "q", "quit"))
    return pad_to_bottom(body, help_text, model.height)


def view_debug(model) -> str:
    """Render the debug information screen."""
    theme = model.theme
    version = model.version or "unknown"
    binary = model.binary_path or "unknown"
    body = (
        _center(model, theme.title_style.render("  Debug Info  "))
        + "\n"
        + f"  {theme.help_key_style.render('Version:')}  {version}\n"
        + f"  {theme.help_key_style.render('Binary:')}  {binary}\n"
    )
    help_text = _center(model, theme.render_help(model.width, "esc", "back", "q", "quit"))
    return pad_to_bottom(body, help_text, model.height)