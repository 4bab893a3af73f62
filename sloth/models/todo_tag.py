"""Todo-Tag junction table."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Table

from .base import Base, utc_now

# Many-to-many: составной первичный ключ (todo_id, tag_id) исключает дубликаты,
# удаление задачи или тега каскадно удаляет связи
todo_tags = Table(
    "todo_tags",
    Base.metadata,
    Column(
        "todo_id", String(36), ForeignKey("todos.id", ondelete="CASCADE"), primary_key=True
    ),
    Column("tag_id", String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime, default=utc_now, nullable=False),
    Index("todo_tags_tag_id_idx", "tag_id"),
)
