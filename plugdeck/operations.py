"""Plugin operations run in the background, and the messages they report back.

Each ``*_cmd`` function returns a command: a zero-argument callable that does
the work when the UI loop runs it and returns a result message.
"""

from __future__ import annotations

import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from plugdeck.constants import (
    CHECK_TIMEOUT,
    CLONE_TIMEOUT,
    UPDATE_TIMEOUT,
    Commit,
    PendingOp,
)
from plugdeck.events import Command


class Cloner(ABC):
    """Clones a plugin repository."""

    @abstractmethod
    def clone(self, options: "CloneOptions", timeout: float) -> None:
        """Clone ``options.url`` into ``options.dir``; raise on failure."""


class Puller(ABC):
    """Pulls updates into an installed plugin."""

    @abstractmethod
    def pull(self, options: "PullOptions", timeout: float) -> str:
        """Pull updates and return the command output; raise on failure.

        An exception may carry the command output in an ``output`` attribute.
        """


class Validator(ABC):
    """Tells whether a directory is a git working copy."""

    @abstractmethod
    def is_git_repo(self, directory: str) -> bool:
        """True if ``directory`` is a git repository."""


class Fetcher(ABC):
    """Checks whether a plugin has upstream changes."""

    @abstractmethod
    def is_outdated(self, directory: str, timeout: float) -> bool:
        """True if the plugin in ``directory`` is behind its upstream; raise on failure."""


class RevParser(ABC):
    """Resolves the current commit of a working copy."""

    @abstractmethod
    def rev_parse(self, directory: str, timeout: float) -> str:
        """The commit hash of HEAD in ``directory``; raise on failure."""


class Logger(ABC):
    """Lists the commits between two revisions."""

    @abstractmethod
    def log(self, directory: str, before: str, after: str, timeout: float) -> list[Commit]:
        """Commits reachable from ``after`` but not from ``before``; raise on failure."""


class Runner(ABC):
    """The part of the tmux interface the UI uses after an operation."""

    @abstractmethod
    def source_file(self, path: str) -> None:
        """Have tmux source the configuration file at ``path``; raise on failure."""


@dataclass(frozen=True)
class CloneOptions:
    url: str
    dir: str
    branch: str = ""


@dataclass(frozen=True)
class PullOptions:
    dir: str
    branch: str = ""


@dataclass
class Deps:
    """External collaborators of the UI; ``runner`` is optional."""

    cloner: Optional[Cloner] = None
    puller: Optional[Puller] = None
    validator: Optional[Validator] = None
    fetcher: Optional[Fetcher] = None
    rev_parser: Optional[RevParser] = None
    logger: Optional[Logger] = None
    runner: Optional[Runner] = None


@dataclass(frozen=True)
class AutoStart:
    """Sent at start-up when an operation should begin on its own."""


@dataclass(frozen=True)
class SourceComplete:
    """tmux finished sourcing the configuration; ``error`` is set on failure."""

    error: Optional[Exception] = None


@dataclass(frozen=True)
class _OpResult:
    name: str
    success: bool
    message: str = ""


@dataclass(frozen=True)
class InstallResult(_OpResult):
    """Outcome of cloning one plugin."""


@dataclass(frozen=True)
class CleanResult(_OpResult):
    """Outcome of removing one orphaned directory."""


@dataclass(frozen=True)
class UninstallResult(_OpResult):
    """Outcome of removing one installed plugin."""


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of pulling one plugin, with the commits it brought in."""

    name: str
    success: bool
    message: str = ""
    output: str = ""
    commits: list[Commit] = field(default_factory=list)
    dir: str = ""
    before_ref: str = ""
    after_ref: str = ""


@dataclass(frozen=True)
class CheckResult:
    """Outcome of checking whether a plugin is outdated."""

    name: str
    outdated: bool = False
    error: Optional[Exception] = None


def check_plugin_cmd(fetcher: Fetcher, name: str, directory: str) -> Command:
    """A command that checks whether the plugin in ``directory`` is outdated."""

    def run() -> CheckResult:
        try:
            outdated = fetcher.is_outdated(directory, CHECK_TIMEOUT)
        except Exception as exc:
            return CheckResult(name=name, outdated=False, error=exc)
        return CheckResult(name=name, outdated=bool(outdated))

    return run


def install_plugin_cmd(cloner: Cloner, op: PendingOp) -> Command:
    """A command that clones the plugin described by ``op``."""

    def run() -> InstallResult:
        options = CloneOptions(url=op.spec, dir=op.path, branch=op.branch)
        try:
            cloner.clone(options, CLONE_TIMEOUT)
        except Exception as exc:
            return InstallResult(name=op.name, success=False, message=str(exc))
        return InstallResult(name=op.name, success=True, message="installed successfully")

    return run


def _try_rev_parse(rev_parser: RevParser, directory: str) -> str:
    try:
        return rev_parser.rev_parse(directory, UPDATE_TIMEOUT) or ""
    except Exception:
        return ""


def update_plugin_cmd(
    puller: Puller,
    rev_parser: Optional[RevParser],
    logger: Optional[Logger],
    op: PendingOp,
) -> Command:
    """A command that pulls the plugin and collects the commits it received."""

    def run() -> UpdateResult:
        before = _try_rev_parse(rev_parser, op.path) if rev_parser is not None else ""

        try:
            output = puller.pull(PullOptions(dir=op.path, branch=op.branch), UPDATE_TIMEOUT)
        except Exception as exc:
            return UpdateResult(
                name=op.name,
                success=False,
                message=str(exc),
                output=getattr(exc, "output", "") or "",
            )

        commits: list[Commit] = []
        after = ""
        if before and logger is not None and rev_parser is not None:
            try:
                after = rev_parser.rev_parse(op.path, UPDATE_TIMEOUT) or ""
            except Exception:
                after = ""
            else:
                if after != before:
                    try:
                        commits = list(logger.log(op.path, before, after, UPDATE_TIMEOUT))
                    except Exception:
                        commits = []

        return UpdateResult(
            name=op.name,
            success=True,
            message="updated successfully",
            output=output or "",
            commits=commits,
            dir=op.path,
            before_ref=before,
            after_ref=after,
        )

    return run


def _remove_all(path: str) -> None:
    """Remove ``path`` and everything below it; a missing path is not an error."""
    target = Path(path)
    if target.is_symlink() or (target.exists() and not target.is_dir()):
        target.unlink()
    elif target.is_dir():
        shutil.rmtree(target)


def _remove_dir_cmd(op: PendingOp, result_type: type[_OpResult]) -> Command:
    def run() -> _OpResult:
        try:
            _remove_all(op.path)
        except OSError as exc:
            return result_type(name=op.name, success=False, message=str(exc))
        if Path(op.path).exists():
            return result_type(
                name=op.name, success=False, message="directory still exists after removal"
            )
        return result_type(name=op.name, success=True, message="removed successfully")

    return run


def clean_plugin_cmd(op: PendingOp) -> Command:
    """A command that removes an orphaned plugin directory."""
    return _remove_dir_cmd(op, CleanResult)


def uninstall_plugin_cmd(op: PendingOp) -> Command:
    """A command that removes an installed plugin directory."""
    return _remove_dir_cmd(op, UninstallResult)


def source_cmd(runner: Runner, conf_path: str) -> Command:
    """A command that has tmux source ``conf_path``."""

    def run() -> SourceComplete:
        try:
            runner.source_file(conf_path)
        except Exception as exc:
            return SourceComplete(error=exc)
        return SourceComplete()

    return run