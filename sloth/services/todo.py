"""Todo service with business logic."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationError_
from ..core.logging import get_logger
from ..models import Todo
from ..models.todo import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH
from ..repositories import (
    AttachOutcome,
    TagRepository,
    TodoRepository,
    TodoTagRepository,
    TodoWithTags,
)

logger = get_logger(__name__)

UPDATABLE_FIELDS = frozenset({"title", "description", "completed", "start_at", "due_at"})


class TodoService:
    """
    Сервис для работы с задачами.

    Каждый метод принимает user_id текущего пользователя первым
    аргументом. Владение проверяется явно до любой мутации:
    чужая задача для сервиса не существует (NotFoundError).
    """

    def __init__(self, db: AsyncSession):
        """Инициализация сервиса с несколькими репозиториями."""
        self.db = db
        self.todo_repo = TodoRepository(db)
        self.tag_repo = TagRepository(db)
        self.todo_tag_repo = TodoTagRepository(db)

    async def list_todos(self, user_id: str) -> list[TodoWithTags]:
        """
        Получить все задачи пользователя с тегами.

        Returns:
            Задачи в порядке создания, у каждой список tags (может быть пустым)
        """
        return await self.todo_repo.get_by_user_with_tags(user_id)

    async def get_todo(self, user_id: str, todo_id: str) -> TodoWithTags:
        """
        Получить одну задачу с тегами.

        Raises:
            NotFoundError: задачи нет или она чужая
        """
        found = await self.todo_repo.get_by_user_with_tags(user_id, todo_id=todo_id)
        if not found:
            raise NotFoundError("Todo")
        return found[0]

    async def create_todo(
        self, user_id: str, title: str, description: str | None = None
    ) -> Todo:
        """
        Создать новую задачу.

        Бизнес-правила:
        1. Название обязательно (после trim), не длиннее 500 символов
        2. Описание не длиннее 1000 символов
        3. completed = False по умолчанию
        """
        title = self._validate_title(title)
        description = self._validate_description(description)

        todo = await self.todo_repo.create(
            Todo(user_id=user_id, title=title, description=description)
        )
        logger.info("Todo created", extra={"todo_id": todo.id})
        return todo

    async def update_todo(self, user_id: str, todo_id: str, **fields: Any) -> Todo:
        """
        Частично обновить задачу.

        Args:
            user_id: Владелец
            todo_id: ID задачи
            **fields: Подмножество title, description, completed, start_at, due_at.
                      None для start_at/due_at снимает дату.

        Raises:
            ValidationError_: пустой набор полей, неизвестное поле, пустое название
            NotFoundError: задачи нет или она чужая
        """
        if not fields:
            raise ValidationError_("At least one field must be provided")

        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError_(f"Unknown fields: {', '.join(sorted(unknown))}")

        if "title" in fields:
            fields["title"] = self._validate_title(fields["title"])
        if "description" in fields:
            fields["description"] = self._validate_description(fields["description"])
        if "completed" in fields and fields["completed"] is None:
            raise ValidationError_("completed cannot be null", field="completed")

        todo = await self.todo_repo.get_owned(todo_id, user_id)
        if not todo:
            raise NotFoundError("Todo")

        return await self.todo_repo.update(todo.id, **fields)

    async def delete_todo(self, user_id: str, todo_id: str) -> Todo:
        """
        Удалить задачу.

        Связи с тегами удаляются каскадно (ON DELETE CASCADE).

        Returns:
            Удалённая задача (для ответа клиенту)
        """
        todo = await self.todo_repo.get_owned(todo_id, user_id)
        if not todo:
            raise NotFoundError("Todo")

        await self.todo_repo.delete_owned(todo.id, user_id)
        logger.info("Todo deleted", extra={"todo_id": todo.id})
        return todo

    async def attach_tag(self, user_id: str, todo_id: str, tag_id: str) -> AttachOutcome:
        """
        Привязать тег к задаче.

        Порядок проверок:
        1. Задача принадлежит пользователю, иначе NotFoundError("Todo")
        2. Тег принадлежит пользователю, иначе NotFoundError("Tag")
        3. Вставка связи. Повторная привязка - не ошибка,
           возвращается AttachOutcome.ALREADY_ATTACHED
        """
        await self._ensure_todo(user_id, todo_id)
        await self._ensure_tag(user_id, tag_id)

        outcome = await self.todo_tag_repo.attach(todo_id, tag_id)
        logger.info(
            "Tag attached" if outcome is AttachOutcome.ATTACHED else "Tag already attached",
            extra={"todo_id": todo_id, "tag_id": tag_id},
        )
        return outcome

    async def detach_tag(self, user_id: str, todo_id: str, tag_id: str) -> None:
        """
        Отвязать тег от задачи.

        Raises:
            NotFoundError: задача/тег не найдены или связи не было
        """
        await self._ensure_todo(user_id, todo_id)
        await self._ensure_tag(user_id, tag_id)

        removed = await self.todo_tag_repo.detach(todo_id, tag_id)
        if not removed:
            raise NotFoundError("Tag association")
        logger.info("Tag detached", extra={"todo_id": todo_id, "tag_id": tag_id})

    # Вспомогательные методы (private)

    async def _ensure_todo(self, user_id: str, todo_id: str) -> Todo:
        todo = await self.todo_repo.get_owned(todo_id, user_id)
        if not todo:
            raise NotFoundError("Todo")
        return todo

    async def _ensure_tag(self, user_id: str, tag_id: str) -> None:
        tag = await self.tag_repo.get_owned(tag_id, user_id)
        if not tag:
            raise NotFoundError("Tag")

    def _validate_title(self, title: str | None) -> str:
        if title is None or not title.strip():
            raise ValidationError_("Title is required", field="title")
        title = title.strip()
        if len(title) > TITLE_MAX_LENGTH:
            raise ValidationError_(
                f"Title must be at most {TITLE_MAX_LENGTH} characters", field="title"
            )
        return title

    def _validate_description(self, description: str | None) -> str | None:
        if description is None:
            return None
        description = description.strip()
        if len(description) > DESCRIPTION_MAX_LENGTH:
            raise ValidationError_(
                f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters",
                field="description",
            )
        return description
