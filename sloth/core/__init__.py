"""Core application components."""

from .config import Settings, settings
from .database import AsyncSessionLocal, drop_db, engine, get_db, init_db
from .exceptions import (
    AppError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError_,
)

__all__ = [
    "settings",
    "Settings",
    "engine",
    "AsyncSessionLocal",
    "get_db",
    "init_db",
    "drop_db",
    "AppError",
    "NotFoundError",
    "ConflictError",
    "ValidationError_",
    "AuthenticationError",
]
