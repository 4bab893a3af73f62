"""Base repository with common CRUD operations."""

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import Base

# TypeVar для Generic класса - позволяет работать с любой моделью
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Базовый репозиторий с CRUD операциями.

    Generic[ModelType] означает, что класс работает с любой моделью,
    наследующейся от Base.

    Для моделей с колонкой user_id есть owner-scoped методы
    (get_owned, delete_owned): фильтр по владельцу добавляется прямо
    в запрос, поэтому чужая строка никогда не попадает в приложение.

    Пример использования:
        repo = BaseRepository[Todo](Todo, db_session)
        todo = await repo.get_owned(todo_id, user_id)
    """

    def __init__(self, model: type[ModelType], db: AsyncSession):
        """
        Args:
            model: Класс модели SQLAlchemy (например, Todo, Tag)
            db: Асинхронная сессия базы данных
        """
        self.model = model
        self.db = db

    async def create(self, obj: ModelType) -> ModelType:
        """
        Создать новую запись в БД.

        flush() отправляет INSERT, но не делает commit - commit
        выполняет зависимость get_db в конце запроса.
        """
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def get_by_id(self, id: str) -> ModelType | None:
        """
        Получить объект по ID (без проверки владельца).

        SQL эквивалент:
            SELECT * FROM table WHERE id = {id} LIMIT 1;
        """
        result = await self.db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_owned(self, id: str, user_id: str) -> ModelType | None:
        """
        Получить объект по ID, только если он принадлежит пользователю.

        SQL эквивалент:
            SELECT * FROM table WHERE id = {id} AND user_id = {user_id};
        """
        result = await self.db.execute(
            select(self.model).where(self.model.id == id, self.model.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_all(self, skip: int = 0, limit: int = 100) -> list[ModelType]:
        """
        Получить все записи с пагинацией.

        SQL эквивалент:
            SELECT * FROM table OFFSET {skip} LIMIT {limit};
        """
        result = await self.db.execute(select(self.model).offset(skip).limit(limit))
        return list(result.scalars().all())

    async def update(self, id: str, **kwargs: Any) -> ModelType | None:
        """
        Обновить запись по ID.

        Обновляются только переданные поля, неизвестные ключи игнорируются.

        Пример:
            todo = await repo.update(todo_id, title="Новое название", completed=True)
        """
        obj = await self.get_by_id(id)
        if not obj:
            return None

        for key, value in kwargs.items():
            if hasattr(obj, key):
                setattr(obj, key, value)

        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete(self, id: str) -> bool:
        """
        Удалить запись по ID.

        Returns:
            True если удалено, False если не найдено

        SQL эквивалент:
            DELETE FROM table WHERE id={id};
        """
        result = await self.db.execute(delete(self.model).where(self.model.id == id))
        return result.rowcount > 0

    async def delete_owned(self, id: str, user_id: str) -> bool:
        """
        Удалить запись, только если она принадлежит пользователю.

        SQL эквивалент:
            DELETE FROM table WHERE id={id} AND user_id={user_id};
        """
        result = await self.db.execute(
            delete(self.model).where(self.model.id == id, self.model.user_id == user_id)
        )
        return result.rowcount > 0

    async def exists(self, id: str) -> bool:
        """Проверить существование записи."""
        obj = await self.get_by_id(id)
        return obj is not None

    async def count(self) -> int:
        """
        Подсчитать количество записей.

        SQL эквивалент:
            SELECT COUNT(*) FROM table;
        """
        result = await self.db.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()
