# plugdeck

plugdeck is a full-screen terminal interface for managing tmux plugins. It
shows a list of plugins with the status of each one: installed, outdated or
missing. From that list you can install, update, clean or uninstall plugins
and watch the progress as it happens. The package also has small output
helpers that report the same kind of work from a shell or from inside tmux.

## What it does

- **Plugin list.** A plugin's status is one of *Installed*, *Not Installed*,
  *Outdated*, or *Installed ⚠* when its update check failed. Update checks
  run in the background for every plugin directory that is a git repository.
  A spinner shows while the checks are running. Directories under the plugin
  path that no plugin owns are listed as *Orphaned*. The `tpm` directory is
  never treated as an orphan.
- **Operations.** Install clones plugins that are not installed. Update pulls
  installed plugins; if no plugin is selected and the plugin under the cursor
  is not installed, it updates every installed plugin. Clean removes all
  orphaned directories. Uninstall removes the targeted installed plugins. At
  most three operations run at the same time.
- **Selection.** Press `tab` or `space` to mark plugins. While any plugin is
  marked, operations apply to the marked plugins. Otherwise they apply to the
  plugin under the cursor.
- **Results.** When an operation finishes, every plugin's outcome is listed.
  An update that pulled commits shows how many it pulled; press `enter` on it
  to see them.
- **Reload.** When an install or update finishes and a `runner` was given,
  the configuration file `Config.tmux_conf` is sourced through it.
- **Debug screen.** Press `@` to see the version and binary path that were
  passed in.

## Keys

| Key            | Action                                   |
|----------------|------------------------------------------|
| `↑` / `k`      | move up                                  |
| `↓` / `j`      | move down                                |
| `tab`, `space` | toggle selection                         |
| `i`            | install                                  |
| `u`            | update                                   |
| `c`            | clean orphaned directories               |
| `x`            | uninstall                                |
| `@`            | debug screen                             |
| `enter`        | view the commits of a result             |
| `esc`          | back                                     |
| `q`            | quit (leaves the commit list)            |
| `ctrl+c`       | force quit, even while work is running   |

## Using it from Python

Build a `Config`, a list of `Plugin` entries and a `Deps` bundle of
collaborators, then pass them to `plugdeck.app.run`:

```python
from plugdeck.app import run
from plugdeck.constants import Config, Operation
from plugdeck.operations import Deps
from plugdeck.plugins import Plugin

config = Config(plugin_path="/home/me/.tmux/plugins/", tmux_conf="/home/me/.tmux.conf")
plugins = [
    Plugin(name="tmux-sensible", spec="tmux-plugins/tmux-sensible"),
    Plugin(name="tmux-yank", spec="tmux-plugins/tmux-yank", branch="main"),
]
deps = Deps(cloner=..., puller=..., validator=..., fetcher=...)

run(config, plugins, deps)
```

`run` passes any keyword arguments on to `plugdeck.model.Model`. The
arguments are:

- `auto_op`: an `Operation`. With `Operation.INSTALL` or `Operation.UPDATE`,
  the operation starts by itself on every plugin it applies to. With
  `Operation.CLEAN`, it starts on every orphan. When there is nothing to do,
  the program quits.
- `theme`
- `version`
- `binary_path`

If the program fails, `run` raises `RuntimeError`.

`plugdeck.app.run_commit_viewer(name, commits, theme)` opens a standalone
viewer for a list of `Commit` objects. `plugdeck.app.ideal_size()` and
`plugdeck.commit_viewer.commit_viewer_ideal_size()` both return the fixed
size, 80×25.

### Collaborators

The collaborators are the abstract classes in `plugdeck.operations`. Each
method raises on failure.

| Class       | Method                                             |
|-------------|----------------------------------------------------|
| `Cloner`    | `clone(options, timeout)`                          |
| `Puller`    | `pull(options, timeout)`, returns the output       |
| `Validator` | `is_git_repo(directory)`                           |
| `Fetcher`   | `is_outdated(directory, timeout)`                  |
| `RevParser` | `rev_parse(directory, timeout)`                    |
| `Logger`    | `log(directory, before, after, timeout)`           |
| `Runner`    | `source_file(path)`                                |

`rev_parser`, `logger` and `runner` are optional. Without a rev parser and a
logger, updates do not collect commits.

### Themes

`plugdeck.styles.default_theme()` returns the built-in palette.
`new_theme(primary, secondary, accent, error, muted, text)` builds a theme
from colours given as `"#rrggbb"` or as 256-colour indexes.
`overlay_config_colors(base, ColorConfig(...))` replaces only the colours
that are not empty.

## Output helpers

`plugdeck.output` has three implementations of the `Output` interface, which
has the methods `ok`, `err`, `end_message` and `has_failed`:

- `ShellOutput(stdout=None, stderr=None)` prints messages to stdout and
  errors to stderr. By default it uses the process streams. Its
  `end_message` prints nothing.
- `TmuxOutput(runner)` echoes each message through `runner.run_shell`. Its
  `end_message` reads `runner.show_window_option("mode-keys")` and tells the
  user to press ENTER, or ESCAPE when the mode keys are emacs.
- `MockOutput` records calls in `ok_msgs`, `err_msgs` and `end_calls`.

`shell_escape_single_quoted(s)` makes text safe to use inside single quotes
in a shell command.

```python
from plugdeck.output import MockOutput

out = MockOutput()
out.ok('Installing "tmux-yank"')
out.err("clone failed")
assert out.has_failed()
```

## What it does not do

plugdeck ships no command to run and does not read tmux configuration files.
You must supply the list of `Plugin` entries and the `Config` yourself. It
also has no git or tmux implementation of the collaborator classes, so you
must provide implementations that run git and tmux.