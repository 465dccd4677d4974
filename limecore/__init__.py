"""Building blocks for a text editor backend: logging, keys, rendering, parsing, commands, undo, clipboard, events, projects and syntax fallbacks."""

__version__ = "0.1.0"

__all__ = [
    "clipboard",
    "commands",
    "events",
    "keys",
    "log",
    "parser",
    "project",
    "render",
    "syntax",
    "undo",
]