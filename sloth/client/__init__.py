"""Client-side logic: API client, query cache, stores and the inline todo editor."""

from .api import ApiError, SlothClient
from .cache import QueryCache
from .editor import (
    DISMISS_WINDOW_MS,
    TAG_COLORS,
    EditorState,
    Surface,
    SurfaceTracker,
    TagSnapshot,
    TodoEditor,
    TodoSnapshot,
    filter_tags,
    has_exact_match,
    random_tag_color,
)
from .mutations import Notification, Notifications, TodoMutations
from .schedule import ScheduleLabel, format_due_at, format_start_at
from .store import EditTracker, NavStore

__all__ = [
    "ApiError",
    "SlothClient",
    "QueryCache",
    "DISMISS_WINDOW_MS",
    "TAG_COLORS",
    "EditorState",
    "Surface",
    "SurfaceTracker",
    "TagSnapshot",
    "TodoEditor",
    "TodoSnapshot",
    "filter_tags",
    "has_exact_match",
    "random_tag_color",
    "Notification",
    "Notifications",
    "TodoMutations",
    "ScheduleLabel",
    "format_due_at",
    "format_start_at",
    "EditTracker",
    "NavStore",
]
