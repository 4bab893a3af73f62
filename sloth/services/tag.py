"""Tag service with business logic."""

import re

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError, ValidationError_
from ..core.logging import get_logger
from ..models import Tag
from ..models.tag import HEX_COLOR_PATTERN, NAME_MAX_LENGTH
from ..repositories import TagRepository

logger = get_logger(__name__)

DUPLICATE_NAME_MESSAGE = "Tag with this name already exists"

# Отличаем "не передано" от явного None (сброс цвета)
_UNSET = object()


class TagService:
    """
    Сервис для работы с тегами.

    Теги принадлежат пользователю; имя уникально в пределах пользователя.
    """

    def __init__(self, db: AsyncSession):
        """Инициализация сервиса."""
        self.db = db
        self.tag_repo = TagRepository(db)

    async def list_tags(self, user_id: str) -> list[Tag]:
        """Все теги пользователя, по имени."""
        return await self.tag_repo.get_by_user(user_id)

    async def get_tag(self, user_id: str, tag_id: str) -> Tag:
        """
        Получить тег по ID.

        Raises:
            NotFoundError: тега нет или он чужой
        """
        tag = await self.tag_repo.get_owned(tag_id, user_id)
        if not tag:
            raise NotFoundError("Tag")
        return tag

    async def get_tag_usage(self, user_id: str) -> list[tuple[Tag, int]]:
        """
        Теги с количеством задач.

        Бизнес-логика для "облака тегов" в UI.
        """
        return await self.tag_repo.get_usage_counts(user_id)

    async def create_tag(self, user_id: str, name: str, color: str | None = None) -> Tag:
        """
        Создать новый тег.

        Бизнес-правила:
        1. Название обязательно, не длиннее 100 символов
        2. Цвет (если есть) в формате #RRGGBB
        3. Название уникально для пользователя

        Уникальность проверяется заранее, но гонку двух запросов ловит
        уникальный индекс (user_id, name) - IntegrityError тоже
        превращается в ConflictError.

        Raises:
            ValidationError_: неверное имя или цвет
            ConflictError: тег с таким именем уже есть
        """
        name = self._validate_name(name)
        self._validate_color(color)

        if await self.tag_repo.get_by_name(user_id, name):
            logger.warning("Duplicate tag name", extra={"tag_name": name})
            raise ConflictError(DUPLICATE_NAME_MESSAGE, field="name")

        try:
            tag = await self.tag_repo.create(Tag(user_id=user_id, name=name, color=color))
        except IntegrityError as e:
            raise ConflictError(DUPLICATE_NAME_MESSAGE, field="name") from e

        logger.info("Tag created", extra={"tag_id": tag.id})
        return tag

    async def update_tag(
        self,
        user_id: str,
        tag_id: str,
        name: str | None = None,
        color: str | None | object = _UNSET,
    ) -> Tag:
        """
        Обновить тег (переименовать и/или сменить цвет).

        Args:
            name: Новое имя (None - не менять)
            color: Новый цвет; явный None сбрасывает цвет

        Raises:
            ValidationError_: нечего обновлять, неверное имя или цвет
            NotFoundError: тега нет или он чужой
            ConflictError: новое имя уже занято
        """
        if name is None and color is _UNSET:
            raise ValidationError_("At least one field must be provided")

        tag = await self.get_tag(user_id, tag_id)
        updates: dict = {}

        if name is not None:
            name = self._validate_name(name)
            if name != tag.name:
                if await self.tag_repo.get_by_name(user_id, name):
                    raise ConflictError(DUPLICATE_NAME_MESSAGE, field="name")
                updates["name"] = name

        if color is not _UNSET:
            self._validate_color(color)
            updates["color"] = color

        if not updates:
            return tag

        try:
            return await self.tag_repo.update(tag.id, **updates)
        except IntegrityError as e:
            raise ConflictError(DUPLICATE_NAME_MESSAGE, field="name") from e

    async def delete_tag(self, user_id: str, tag_id: str) -> Tag:
        """
        Удалить тег.

        Связи с задачами удаляются каскадно (ON DELETE CASCADE).

        Returns:
            Удалённый тег
        """
        tag = await self.get_tag(user_id, tag_id)
        await self.tag_repo.delete_owned(tag.id, user_id)
        logger.info("Tag deleted", extra={"tag_id": tag.id})
        return tag

    # Вспомогательные методы (private)

    def _validate_name(self, name: str | None) -> str:
        if name is None or not name.strip():
            raise ValidationError_("Tag name is required", field="name")
        name = name.strip()
        if len(name) > NAME_MAX_LENGTH:
            raise ValidationError_(
                f"Tag name must be at most {NAME_MAX_LENGTH} characters", field="name"
            )
        return name

    def _validate_color(self, color: str | None) -> None:
        """
        Проверить формат цвета.

        Примеры:
            "#18AEF8" - ok
            "#fff"    - ошибка (нужно 6 цифр)
            "18AEF8"  - ошибка (нет #)
        """
        if color is not None and not re.match(HEX_COLOR_PATTERN, color):
            raise ValidationError_(f"Invalid color format: {color}. Use #RRGGBB", field="color")
