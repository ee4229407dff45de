"""Pane state, command palette, debouncing and background search tasks for a terminal file manager."""

__version__ = "0.1.0"