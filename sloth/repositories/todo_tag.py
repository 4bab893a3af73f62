"""Repository for the todo <-> tag association table."""

import enum

from sqlalchemy import and_, delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import todo_tags
from ..models.base import utc_now


class AttachOutcome(str, enum.Enum):
    """Result of attaching a tag to a todo."""

    ATTACHED = "attached"
    ALREADY_ATTACHED = "already_attached"


class TodoTagRepository:
    """
    Репозиторий связей задача-тег (таблица todo_tags).

    Это не модель, а Table, поэтому BaseRepository здесь не подходит:
    первичный ключ составной (todo_id, tag_id).

    Проверки владельца задачи и тега делает сервис до вызова attach/detach.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self):
        """INSERT с поддержкой ON CONFLICT для текущего диалекта."""
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(todo_tags)
        return sqlite.insert(todo_tags)

    async def attach(self, todo_id: str, tag_id: str) -> AttachOutcome:
        """
        Привязать тег к задаче (идемпотентно).

        Повторная вставка той же пары упирается в составной первичный ключ.
        Вместо IntegrityError (который ломает транзакцию) используем
        ON CONFLICT DO NOTHING и смотрим на rowcount.

        SQL эквивалент:
            INSERT INTO todo_tags (todo_id, tag_id, created_at)
            VALUES ({todo_id}, {tag_id}, now())
            ON CONFLICT (todo_id, tag_id) DO NOTHING;

        Returns:
            ATTACHED если строка вставлена, ALREADY_ATTACHED если связь уже была
        """
        statement = (
            self._insert()
            .values(todo_id=todo_id, tag_id=tag_id, created_at=utc_now())
            .on_conflict_do_nothing(index_elements=["todo_id", "tag_id"])
        )
        result = await self.db.execute(statement)
        if result.rowcount == 0:
            return AttachOutcome.ALREADY_ATTACHED
        return AttachOutcome.ATTACHED

    async def detach(self, todo_id: str, tag_id: str) -> bool:
        """
        Отвязать тег от задачи.

        Returns:
            True если связь была удалена, False если её не было

        SQL эквивалент:
            DELETE FROM todo_tags WHERE todo_id = {todo_id} AND tag_id = {tag_id};
        """
        result = await self.db.execute(
            delete(todo_tags).where(
                and_(todo_tags.c.todo_id == todo_id, todo_tags.c.tag_id == tag_id)
            )
        )
        return result.rowcount > 0

    async def exists(self, todo_id: str, tag_id: str) -> bool:
        """Проверить, привязан ли тег к задаче."""
        result = await self.db.execute(
            select(todo_tags.c.todo_id).where(
                and_(todo_tags.c.todo_id == todo_id, todo_tags.c.tag_id == tag_id)
            )
        )
        return result.first() is not None

    async def count_for_todo(self, todo_id: str) -> int:
        """Количество тегов у задачи."""
        result = await self.db.execute(
            select(func.count()).select_from(todo_tags).where(todo_tags.c.todo_id == todo_id)
        )
        return result.scalar_one()

    async def count_for_tag(self, tag_id: str) -> int:
        """Количество задач с тегом."""
        result = await self.db.execute(
            select(func.count()).select_from(todo_tags).where(todo_tags.c.tag_id == tag_id)
        )
        return result.scalar_one()
