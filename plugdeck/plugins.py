"""Configured plugins, their install state on disk, and orphaned directories."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from plugdeck.constants import OrphanItem, PluginItem, PluginStatus

_MANAGER_DIR = "tpm"


@dataclass(frozen=True)
class Plugin:
    """A plugin entry from the tmux configuration."""

    name: str
    spec: str = ""
    branch: str = ""
    raw: str = ""


def plugin_path(name: str, plugin_dir: str) -> str:
    """The directory a plugin is installed in."""
    return os.path.join(plugin_dir, name)


def build_plugin_items(plugins: Iterable[Plugin], plugin_dir: str, validator) -> list[PluginItem]:
    """Pair each plugin with its status; installed ones start as CHECKING."""
    items = []
    for plugin in plugins:
        directory = plugin_path(plugin.name, plugin_dir)
        status = PluginStatus.NOT_INSTALLED
        if Path(directory).is_dir() and validator.is_git_repo(directory):
            status = PluginStatus.CHECKING
        items.append(
            PluginItem(name=plugin.name, spec=plugin.spec, branch=plugin.branch, status=status)
        )
    return items


def find_orphans(plugins: Iterable[Plugin], plugin_dir: str) -> list[OrphanItem]:
    """Directories under ``plugin_dir`` that no configured plugin owns, sorted by name."""
    known = {plugin.name for plugin in plugins}
    known.add(_MANAGER_DIR)
    try:
        entries = sorted(Path(plugin_dir).iterdir(), key=lambda entry: entry.name)
    except OSError:
        return []
    return [
        OrphanItem(name=entry.name, path=plugin_path(entry.name, plugin_dir))
        for entry in entries
        if entry.is_dir() and entry.name not in known
    ]