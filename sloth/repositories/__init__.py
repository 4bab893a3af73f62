"""Repository layer for data access."""

from .base import BaseRepository
from .tag import TagRepository
from .todo import TodoRepository, TodoWithTags
from .todo_tag import AttachOutcome, TodoTagRepository
from .user import AccountRepository, SessionRepository, UserRepository

__all__ = [
    "BaseRepository",
    "TodoRepository",
    "TodoWithTags",
    "TagRepository",
    "TodoTagRepository",
    "AttachOutcome",
    "UserRepository",
    "AccountRepository",
    "SessionRepository",
]
