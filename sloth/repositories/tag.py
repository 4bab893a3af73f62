"""Tag repository with specific queries."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Tag, todo_tags
from .base import BaseRepository


class TagRepository(BaseRepository[Tag]):
    """
    Репозиторий для работы с тегами.

    Имя тега уникально в пределах пользователя
    (UNIQUE (user_id, name)), у разных пользователей имена могут совпадать.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Tag, db)

    async def get_by_user(self, user_id: str) -> list[Tag]:
        """
        Получить все теги пользователя, отсортированные по имени.

        SQL эквивалент:
            SELECT * FROM tags WHERE user_id = {user_id} ORDER BY name;
        """
        result = await self.db.execute(
            select(Tag).where(Tag.user_id == user_id).order_by(Tag.name.asc())
        )
        return list(result.scalars().all())

    async def get_by_name(self, user_id: str, name: str) -> Tag | None:
        """
        Получить тег пользователя по точному имени.

        SQL эквивалент:
            SELECT * FROM tags WHERE user_id = {user_id} AND name = {name};
        """
        result = await self.db.execute(
            select(Tag).where(Tag.user_id == user_id, Tag.name == name)
        )
        return result.scalar_one_or_none()

    async def get_usage_counts(self, user_id: str) -> list[tuple[Tag, int]]:
        """
        Теги пользователя с количеством привязанных задач.

        SQL эквивалент:
            SELECT tags.*, COUNT(todo_tags.todo_id) AS usage_count
            FROM tags
            LEFT JOIN todo_tags ON tags.id = todo_tags.tag_id
            WHERE tags.user_id = {user_id}
            GROUP BY tags.id
            ORDER BY usage_count DESC, tags.name;
        """
        usage = func.count(todo_tags.c.todo_id)
        result = await self.db.execute(
            select(Tag, usage.label("usage_count"))
            .outerjoin(todo_tags, Tag.id == todo_tags.c.tag_id)
            .where(Tag.user_id == user_id)
            .group_by(Tag.id)
            .order_by(usage.desc(), Tag.name.asc())
        )
        return [(row[0], row[1]) for row in result.all()]
