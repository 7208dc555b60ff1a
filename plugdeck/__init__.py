"""Full-screen terminal interface and output helpers for managing tmux plugins."""

__version__ = "0.1.0"