"""API layer - FastAPI endpoints."""

from .auth import router as auth_router
from .tags import router as tags_router
from .todos import router as todos_router

__all__ = [
    "auth_router",
    "todos_router",
    "tags_router",
]
