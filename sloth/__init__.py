"""Sloth - personal todo list with tags."""

__version__ = "1.0.0"
