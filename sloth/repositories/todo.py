"""Todo repository with the tag aggregation query."""

from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Tag, Todo, todo_tags
from .base import BaseRepository


@dataclass
class TodoWithTags:
    """Todo together with the tags attached to it."""

    todo: Todo
    tags: list[Tag] = field(default_factory=list)


class TodoRepository(BaseRepository[Todo]):
    """
    Репозиторий для работы с задачами.

    Все запросы фильтруются по user_id: задачи одного пользователя
    никогда не видны другому.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Todo, db)

    async def get_by_user_with_tags(
        self, user_id: str, todo_id: str | None = None
    ) -> list[TodoWithTags]:
        """
        Получить задачи пользователя вместе с тегами одним запросом.

        Args:
            user_id: Владелец задач
            todo_id: Сузить выборку до одной задачи (optional)

        Returns:
            Список TodoWithTags в порядке создания (старые первыми).
            Задача без тегов возвращается с tags=[].

        SQL эквивалент:
            SELECT todos.*, tags.*
            FROM todos
            LEFT OUTER JOIN todo_tags ON todo_tags.todo_id = todos.id
            LEFT OUTER JOIN tags ON tags.id = todo_tags.tag_id
            WHERE todos.user_id = {user_id}
            ORDER BY todos.created_at ASC;

        LEFT JOIN даёт "плоский" результат: задача с тремя тегами
        приходит тремя строками, задача без тегов - одной строкой с tags = NULL.

            todo_1 | tag_a
            todo_1 | tag_b
            todo_2 | NULL

        Проходим по строкам один раз и сворачиваем их в словарь по todo.id.
        dict сохраняет порядок вставки, а строки уже отсортированы
        по created_at, поэтому порядок задач совпадает с порядком запроса.
        """
        query = (
            select(Todo, Tag)
            .outerjoin(todo_tags, todo_tags.c.todo_id == Todo.id)
            .outerjoin(Tag, Tag.id == todo_tags.c.tag_id)
            .where(Todo.user_id == user_id)
            .order_by(Todo.created_at.asc(), Todo.id.asc(), Tag.name.asc())
        )
        if todo_id is not None:
            query = query.where(Todo.id == todo_id)

        result = await self.db.execute(query)

        grouped: dict[str, TodoWithTags] = {}
        seen_tags: dict[str, set[str]] = {}
        for todo, tag in result.all():
            entry = grouped.get(todo.id)
            if entry is None:
                entry = grouped[todo.id] = TodoWithTags(todo=todo)
                seen_tags[todo.id] = set()

            # tag is None когда у задачи нет ни одного тега (JOIN не совпал)
            if tag is not None and tag.id not in seen_tags[todo.id]:
                seen_tags[todo.id].add(tag.id)
                entry.tags.append(tag)

        return list(grouped.values())
