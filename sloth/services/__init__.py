"""Service layer with business logic."""

from .auth import AuthResult, AuthService
from .tag import TagService
from .todo import TodoService

__all__ = [
    "AuthService",
    "AuthResult",
    "TodoService",
    "TagService",
]
