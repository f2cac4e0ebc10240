"""Utility helpers for the todo.txt core."""

from .escaping import escape_text, unescape_text

__all__ = ["escape_text", "unescape_text"]
