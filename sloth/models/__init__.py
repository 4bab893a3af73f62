"""SQLAlchemy models for Sloth."""

from .base import Base, TimestampMixin
from .tag import Tag
from .todo import Todo
from .todo_tag import todo_tags
from .user import Account, Session, User

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "Account",
    "Session",
    "Todo",
    "Tag",
    "todo_tags",
]
