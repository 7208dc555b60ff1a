"""Screens, operations, plugin states, shared records and layout constants."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

ESC_KEY_NAME = "esc"

FIXED_WIDTH = 80
FIXED_HEIGHT = 25

SCROLL_OFFSET_MARGIN = 3
TITLE_RESERVED_LINES = 12
MIN_VIEW_HEIGHT = 3
PROGRESS_BAR_MAX_WIDTH = 60
PROGRESS_BAR_PADDING = 8
BASE_STYLE_PADDING = 4
BASE_STYLE_VERTICAL_PADDING = 2
STATUS_COL_WIDTH = 14
PROGRESS_RESULTS_RESERVED_LINES = 15
MAX_CONCURRENT_OPS = 3

# Timeouts in seconds.
CHECK_TIMEOUT = 15.0
CLONE_TIMEOUT = 120.0
UPDATE_TIMEOUT = 120.0


class _LenientEnum(Enum):
    """Enum that turns unknown integer values into unnamed pseudo-members."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            member = object.__new__(cls)
            member._name_ = f"UNKNOWN_{value}"
            member._value_ = value
            return member
        return None


class Screen(Enum):
    LIST = 0
    PROGRESS = 1
    COMMITS = 2
    DEBUG = 3


_OPERATION_LABELS = {
    1: "Install",
    2: "Update",
    3: "Clean",
    4: "Uninstall",
}


class Operation(_LenientEnum):
    NONE = 0
    INSTALL = 1
    UPDATE = 2
    CLEAN = 3
    UNINSTALL = 4

    def __str__(self) -> str:
        return _OPERATION_LABELS.get(self.value, "")


_STATUS_LABELS = {
    0: "Installed",
    1: "Not Installed",
    2: "Checking",
    3: "Outdated",
    4: "Check Failed",
}


class PluginStatus(_LenientEnum):
    INSTALLED = 0
    NOT_INSTALLED = 1
    CHECKING = 2
    OUTDATED = 3
    CHECK_FAILED = 4

    def is_installed(self) -> bool:
        """True for any status meaning the plugin is on disk."""
        return self in (
            PluginStatus.INSTALLED,
            PluginStatus.CHECKING,
            PluginStatus.OUTDATED,
            PluginStatus.CHECK_FAILED,
        )

    def __str__(self) -> str:
        return _STATUS_LABELS.get(self.value, "Unknown")


@dataclass(frozen=True)
class Commit:
    hash: str
    message: str


@dataclass
class PluginItem:
    """A configured plugin together with its install status."""

    name: str
    spec: str = ""
    branch: str = ""
    status: PluginStatus = PluginStatus.NOT_INSTALLED


@dataclass(frozen=True)
class OrphanItem:
    """A plugin directory that is not in the configuration."""

    name: str
    path: str


@dataclass
class ResultItem:
    """Outcome of one plugin operation."""

    name: str
    success: bool
    message: str = ""
    output: str = ""
    commits: list[Commit] = field(default_factory=list)
    dir: str = ""
    before_ref: str = ""
    after_ref: str = ""


@dataclass(frozen=True)
class PendingOp:
    """A queued operation on one plugin."""

    name: str
    spec: str = ""
    branch: str = ""
    path: str = ""


@dataclass(frozen=True)
class Config:
    """The resolved settings the UI needs."""

    plugin_path: str
    tmux_conf: str = ""