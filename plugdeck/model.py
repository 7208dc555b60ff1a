"""The main interactive model: plugin list, operation progress, commits and debug screens."""

from __future__ import annotations

from functools import partial
from typing import Callable, Iterable, Optional

from plugdeck.commit_viewer import commit_list_max_visible
from plugdeck.constants import (
    ESC_KEY_NAME,
    FIXED_HEIGHT,
    FIXED_WIDTH,
    MAX_CONCURRENT_OPS,
    MIN_VIEW_HEIGHT,
    PROGRESS_BAR_MAX_WIDTH,
    PROGRESS_BAR_PADDING,
    PROGRESS_RESULTS_RESERVED_LINES,
    TITLE_RESERVED_LINES,
    Commit,
    Config,
    OrphanItem,
    Operation,
    PendingOp,
    PluginItem,
    PluginStatus,
    ResultItem,
    Screen,
)
from plugdeck.events import (
    LIST_KEYS,
    SHARED_KEYS,
    Command,
    KeyPress,
    Quit,
    SpinnerTick,
    WindowSize,
    batch,
)
from plugdeck.operations import (
    AutoStart,
    CheckResult,
    CleanResult,
    Deps,
    InstallResult,
    SourceComplete,
    UninstallResult,
    UpdateResult,
    check_plugin_cmd,
    clean_plugin_cmd,
    install_plugin_cmd,
    source_cmd,
    uninstall_plugin_cmd,
    update_plugin_cmd,
)
from plugdeck.plugins import Plugin, build_plugin_items, find_orphans, plugin_path
from plugdeck.scroll import ScrollState
from plugdeck import views
from plugdeck.styles import (
    ProgressBar,
    Spinner,
    Theme,
    center_block,
    center_text,
    default_theme,
)


def _spinner_start() -> SpinnerTick:
    return SpinnerTick()


def _auto_start() -> AutoStart:
    return AutoStart()


class Model:
    """State and behaviour of the plugin manager screen."""

    def __init__(
        self,
        config: Config,
        plugins: Iterable[Plugin],
        deps: Deps,
        *,
        auto_op: Operation = Operation.NONE,
        theme: Optional[Theme] = None,
        version: str = "",
        binary_path: str = "",
    ) -> None:
        plugins = list(plugins)
        self.config = config
        self.deps = deps
        self.plugins: list[PluginItem] = build_plugin_items(
            plugins, config.plugin_path, deps.validator
        )
        self.orphans: list[OrphanItem] = find_orphans(plugins, config.plugin_path)
        self.theme = theme if theme is not None else default_theme()

        self.screen = Screen.LIST
        self.operation = Operation.NONE
        self.auto_op = auto_op

        self.list_scroll = ScrollState()
        self.width = FIXED_WIDTH
        self.height = FIXED_HEIGHT
        self.size_known = True
        self.view_height = max(FIXED_HEIGHT - TITLE_RESERVED_LINES, MIN_VIEW_HEIGHT)

        self.selected: set[int] = set()
        self.multi_select_active = False

        self.results: list[ResultItem] = []
        self.total_items = 0
        self.completed_items = 0
        self.in_flight_names: list[str] = []
        self.processing = False
        self.in_flight = 0
        self.pending_items: list[PendingOp] = []
        self.progress_bar = ProgressBar()
        self.progress_bar.width = min(FIXED_WIDTH - PROGRESS_BAR_PADDING, PROGRESS_BAR_MAX_WIDTH)
        self.check_spinner = Spinner()

        self.result_scroll = ScrollState()

        self.commit_view_name = ""
        self.commit_view_commits: Optional[list[Commit]] = None
        self.commit_scroll = ScrollState()

        self.version = version
        self.binary_path = binary_path

    # Lifecycle -----------------------------------------------------------

    def init(self) -> Optional[Command]:
        """Start update checks for installed plugins and the auto-operation, if any."""
        cmds: list[Command] = [
            check_plugin_cmd(
                self.deps.fetcher, item.name, plugin_path(item.name, self.config.plugin_path)
            )
            for item in self.plugins
            if item.status == PluginStatus.CHECKING
        ]
        if cmds:
            cmds.append(_spinner_start)
        if self.auto_op != Operation.NONE:
            cmds.append(_auto_start)
        return batch(*cmds)

    def update(self, msg: object) -> Optional[Command]:
        """Apply a message; returns a command to run, if any."""
        if isinstance(msg, WindowSize):
            self._handle_window_size(msg)
            return None
        if isinstance(msg, KeyPress):
            return self._handle_key(msg)
        if isinstance(msg, AutoStart):
            return self.start_auto_operation()
        if isinstance(msg, SourceComplete):
            return None
        if isinstance(msg, CheckResult):
            self._handle_check_result(msg)
            return None
        if isinstance(msg, SpinnerTick):
            cmd = self.check_spinner.tick()
            return cmd if self.has_checking_plugins() else None
        if isinstance(msg, InstallResult):
            return self.handle_op_result(
                ResultItem(name=msg.name, success=msg.success, message=msg.message),
                partial(self._set_status, msg.name, PluginStatus.INSTALLED),
            )
        if isinstance(msg, UpdateResult):
            return self.handle_op_result(
                ResultItem(
                    name=msg.name,
                    success=msg.success,
                    message=msg.message,
                    output=msg.output,
                    commits=list(msg.commits),
                    dir=msg.dir,
                    before_ref=msg.before_ref,
                    after_ref=msg.after_ref,
                ),
                partial(self._set_status, msg.name, PluginStatus.INSTALLED),
            )
        if isinstance(msg, CleanResult):
            return self.handle_op_result(
                ResultItem(name=msg.name, success=msg.success, message=msg.message), None
            )
        if isinstance(msg, UninstallResult):
            return self.handle_op_result(
                ResultItem(name=msg.name, success=msg.success, message=msg.message),
                partial(self._set_status, msg.name, PluginStatus.NOT_INSTALLED),
            )
        return None

    def view(self) -> str:
        """Render the current screen."""
        if self.screen == Screen.PROGRESS:
            content = views.view_progress(self)
        elif self.screen == Screen.COMMITS:
            content = views.view_commits(self)
        elif self.screen == Screen.DEBUG:
            content = views.view_debug(self)
        else:
            content = views.view_list(self)
        return self.theme.base_style.render(content)

    # Input ---------------------------------------------------------------

    def _handle_window_size(self, msg: WindowSize) -> None:
        self.width = msg.width
        self.height = msg.height
        self.size_known = True
        self.view_height = max(msg.height - TITLE_RESERVED_LINES, MIN_VIEW_HEIGHT)
        self.progress_bar.width = min(msg.width - PROGRESS_BAR_PADDING, PROGRESS_BAR_MAX_WIDTH)

    def _handle_key(self, key: KeyPress) -> Optional[Command]:
        if SHARED_KEYS.force_quit.matches(key):
            return Quit()
        if self.screen == Screen.COMMITS:
            return self._update_commit_view(key)
        if self.screen == Screen.PROGRESS:
            return self._update_progress(key)
        if self.screen == Screen.DEBUG:
            return self._update_debug(key)
        return self._update_list(key)

    def _update_list(self, key: KeyPress) -> Optional[Command]:
        if SHARED_KEYS.quit.matches(key):
            return Quit()
        if LIST_KEYS.up.matches(key):
            self.list_scroll.move_up()
        elif LIST_KEYS.down.matches(key):
            self.list_scroll.move_down(len(self.plugins), self.view_height)
        elif LIST_KEYS.toggle.matches(key):
            if self.plugins:
                self.toggle_selection(self.list_scroll.cursor)
        elif LIST_KEYS.install.matches(key):
            return self.start_operation(Operation.INSTALL)
        elif LIST_KEYS.update.matches(key):
            return self.start_operation(Operation.UPDATE)
        elif LIST_KEYS.clean.matches(key):
            return self.start_operation(Operation.CLEAN)
        elif LIST_KEYS.uninstall.matches(key):
            return self.start_operation(Operation.UNINSTALL)
        elif LIST_KEYS.debug.matches(key):
            self.screen = Screen.DEBUG
        return None

    def _update_progress(self, key: KeyPress) -> Optional[Command]:
        if self.processing:
            return None
        is_esc = str(key) == ESC_KEY_NAME
        if SHARED_KEYS.quit.matches(key):
            return Quit()
        if is_esc:
            if self.auto_op != Operation.NONE:
                return Quit()
            self.return_to_list()
        elif LIST_KEYS.up.matches(key):
            self.result_scroll.move_up()
        elif LIST_KEYS.down.matches(key):
            self.result_scroll.move_down(len(self.results), self.result_max_visible())
        elif str(key) == "enter":
            self.show_commits()
        return None

    def _update_commit_view(self, key: KeyPress) -> Optional[Command]:
        if SHARED_KEYS.quit.matches(key) or str(key) == ESC_KEY_NAME:
            self.return_to_progress()
        elif LIST_KEYS.up.matches(key):
            self.commit_scroll.move_up()
        elif LIST_KEYS.down.matches(key):
            self.commit_scroll.move_down(
                len(self.commit_view_commits or []), self.commit_max_visible()
            )
        return None

    def _update_debug(self, key: KeyPress) -> Optional[Command]:
        if SHARED_KEYS.quit.matches(key):
            return Quit()
        if str(key) == ESC_KEY_NAME:
            self.screen = Screen.LIST
        return None

    # Operations ----------------------------------------------------------

    def _begin(self, op: Operation, ops: list[PendingOp]) -> Optional[Command]:
        self.screen = Screen.PROGRESS
        self.operation = op
        self.pending_items = list(ops)
        self.total_items = len(ops)
        self.completed_items = 0
        self.results = []
        self.processing = True
        self.in_flight = 0
        self.in_flight_names = []
        self.result_scroll.reset()
        return self.dispatch_next()

    def start_operation(self, op: Operation) -> Optional[Command]:
        """Begin ``op`` on the selected plugins, or the one under the cursor."""
        builders = {
            Operation.INSTALL: self.build_install_ops,
            Operation.UPDATE: self.build_update_ops,
            Operation.CLEAN: self.build_clean_ops,
            Operation.UNINSTALL: self.build_uninstall_ops,
        }
        builder = builders.get(op)
        if builder is None:
            return None
        ops = builder()
        if not ops:
            return None
        return self._begin(op, ops)

    def start_auto_operation(self) -> Optional[Command]:
        """Begin the configured auto-operation on every applicable plugin."""
        builders = {
            Operation.INSTALL: self.build_auto_install_ops,
            Operation.UPDATE: self.build_auto_update_ops,
            Operation.CLEAN: self.build_clean_ops,
        }
        builder = builders.get(self.auto_op)
        if builder is None:
            return None
        ops = builder()
        if not ops:
            return Quit()
        return self._begin(self.auto_op, ops)

    def handle_op_result(
        self, result: ResultItem, update_status: Optional[Callable[[], None]]
    ) -> Optional[Command]:
        """Record a finished operation and dispatch further queued work."""
        self.completed_items += 1
        self.in_flight -= 1
        self.results.append(result)
        if result.success and update_status is not None:
            update_status()
        if result.name in self.in_flight_names:
            self.in_flight_names.remove(result.name)
        return self.dispatch_next()

    def dispatch_next(self) -> Optional[Command]:
        """Start queued operations up to the concurrency limit."""
        slots = MAX_CONCURRENT_OPS - self.in_flight
        if slots <= 0:
            return None
        if not self.pending_items:
            if self.in_flight == 0:
                self.processing = False
                if self.deps.runner is not None and self.operation in (
                    Operation.INSTALL,
                    Operation.UPDATE,
                ):
                    return source_cmd(self.deps.runner, self.config.tmux_conf)
            return None

        current, self.pending_items = self.pending_items[:slots], self.pending_items[slots:]
        cmds: list[Command] = []
        for op in current:
            self.in_flight += 1
            self.in_flight_names.append(op.name)
            if self.operation == Operation.INSTALL:
                cmds.append(install_plugin_cmd(self.deps.cloner, op))
            elif self.operation == Operation.UPDATE:
                cmds.append(
                    update_plugin_cmd(self.deps.puller, self.deps.rev_parser, self.deps.logger, op)
                )
            elif self.operation == Operation.CLEAN:
                cmds.append(clean_plugin_cmd(op))
            elif self.operation == Operation.UNINSTALL:
                cmds.append(uninstall_plugin_cmd(op))

        if not cmds:
            self.processing = False
            return None
        return batch(*cmds)

    def _pending_for(self, item: PluginItem, with_branch: bool = True) -> PendingOp:
        return PendingOp(
            name=item.name,
            spec=item.spec,
            branch=item.branch if with_branch else "",
            path=plugin_path(item.name, self.config.plugin_path),
        )

    def build_install_ops(self) -> list[PendingOp]:
        """Install operations for targeted plugins that are not installed."""
        return [
            self._pending_for(self.plugins[i])
            for i in self.target_indices()
            if self.plugins[i].status == PluginStatus.NOT_INSTALLED
        ]

    def build_update_ops(self) -> list[PendingOp]:
        """Update operations for targeted installed plugins, or all installed ones."""
        ops = [
            self._pending_for(self.plugins[i])
            for i in self.target_indices()
            if self.plugins[i].status.is_installed()
        ]
        if not ops and not self.multi_select_active:
            ops = self.build_auto_update_ops()
        return ops

    def build_clean_ops(self) -> list[PendingOp]:
        """Removal operations for every orphaned directory."""
        return [PendingOp(name=orphan.name, path=orphan.path) for orphan in self.orphans]

    def build_uninstall_ops(self) -> list[PendingOp]:
        """Removal operations for targeted installed plugins."""
        return [
            self._pending_for(self.plugins[i], with_branch=False)
            for i in self.target_indices()
            if self.plugins[i].status.is_installed()
        ]

    def build_auto_install_ops(self) -> list[PendingOp]:
        """Install operations for every plugin that is not installed."""
        return [
            self._pending_for(item)
            for item in self.plugins
            if item.status == PluginStatus.NOT_INSTALLED
        ]

    def build_auto_update_ops(self) -> list[PendingOp]:
        """Update operations for every installed plugin."""
        return [self._pending_for(item) for item in self.plugins if item.status.is_installed()]

    # Selection -----------------------------------------------------------

    def toggle_selection(self, idx: int) -> None:
        """Select or deselect the plugin at ``idx``."""
        if idx in self.selected:
            self.selected.discard(idx)
        else:
            self.selected.add(idx)
        self.multi_select_active = bool(self.selected)

    def clear_selection(self) -> None:
        """Deselect everything."""
        self.selected = set()
        self.multi_select_active = False

    def selected_indices(self) -> list[int]:
        """Selected plugin indices in ascending order."""
        return [i for i in range(len(self.plugins)) if i in self.selected]

    def target_indices(self) -> list[int]:
        """The selected plugins if any are selected, else the one under the cursor."""
        if self.multi_select_active:
            return self.selected_indices()
        if 0 <= self.list_scroll.cursor < len(self.plugins):
            return [self.list_scroll.cursor]
        return []

    def target_has_status(self) -> tuple[bool, bool]:
        """Whether the targets include (not installed, installed) plugins."""
        has_not_installed = has_installed = False
        for i in self.target_indices():
            if self.plugins[i].status.is_installed():
                has_installed = True
            else:
                has_not_installed = True
            if has_installed and has_not_installed:
                break
        return has_not_installed, has_installed

    # Navigation between screens -----------------------------------------

    def show_commits(self) -> bool:
        """Open the commit viewer for the result under the cursor, if it has commits."""
        if not 0 <= self.result_scroll.cursor < len(self.results):
            return False
        result = self.results[self.result_scroll.cursor]
        if not result.commits:
            return False
        self.screen = Screen.COMMITS
        self.commit_view_name = result.name
        self.commit_view_commits = list(result.commits)
        self.commit_scroll.reset()
        return True

    def return_to_progress(self) -> None:
        """Leave the commit viewer for the progress screen."""
        self.screen = Screen.PROGRESS
        self.commit_view_name = ""
        self.commit_view_commits = None
        self.commit_scroll.reset()

    def return_to_list(self) -> "Model":
        """Go back to the list, dropping cleaned orphans and resetting operation state."""
        self.screen = Screen.LIST
        self.operation = Operation.NONE
        self.processing = False
        self.clear_selection()

        if self.results:
            removed = {result.name for result in self.results if result.success}
            self.orphans = [orphan for orphan in self.orphans if orphan.name not in removed]

        self.results = []
        self.pending_items = []
        self.in_flight = 0
        self.in_flight_names = []
        self.result_scroll.reset()

        if self.list_scroll.cursor >= len(self.plugins):
            self.list_scroll.cursor = len(self.plugins) - 1
        if self.list_scroll.cursor < 0:
            self.list_scroll.cursor = 0
        return self

    # State queries -------------------------------------------------------

    def _set_status(self, name: str, status: PluginStatus) -> None:
        for item in self.plugins:
            if item.name == name:
                item.status = status
                break

    def _handle_check_result(self, msg: CheckResult) -> None:
        if msg.error is not None:
            status = PluginStatus.CHECK_FAILED
        elif msg.outdated:
            status = PluginStatus.OUTDATED
        else:
            status = PluginStatus.INSTALLED
        self._set_status(msg.name, status)

    def has_checking_plugins(self) -> bool:
        """True while any plugin is still being checked."""
        return any(item.status == PluginStatus.CHECKING for item in self.plugins)

    def result_max_visible(self) -> int:
        """Number of result rows that fit in the current height."""
        return max(self.height - PROGRESS_RESULTS_RESERVED_LINES, MIN_VIEW_HEIGHT)

    def commit_max_visible(self) -> int:
        """Number of commit rows that fit in the current height."""
        return commit_list_max_visible(self.height)

    def center_text(self, text: str) -> str:
        """Centre a single line in the content area."""
        return center_text(text, self.width, self.size_known)

    def center_block(self, block: str) -> str:
        """Centre a block of lines in the content area."""
        return center_block(block, self.width, self.size_known)

    def status_summary(self) -> str:
        """Subtitle with plugin counts per state."""
        return views.status_summary(self.plugins)