"""
Pydantic схемы для API.

DTOs (Data Transfer Objects) - объекты для передачи данных через HTTP.

JSON использует camelCase (startAt, dueAt, userId), Python - snake_case.
Преобразование делает alias_generator=to_camel; populate_by_name=True
позволяет создавать схемы и по snake_case именам.

Форматы ответов:
- чтение (GET) возвращает "сырые" объекты и массивы
- мутации возвращают конверт {"success": true, "data": ..., "message": "..."}
- ошибки: {"success": false, "error": "...", "code": "...", "details": [...]}
"""

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from ..models.tag import HEX_COLOR_PATTERN, NAME_MAX_LENGTH
from ..models.todo import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH
from ..repositories import TodoWithTags

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ORMModel(CamelModel):
    """Schema that can be built from a SQLAlchemy object."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


def _require_fields(model: BaseModel, non_nullable: tuple[str, ...]) -> None:
    """Правило "хотя бы одно поле" для PATCH схем."""
    if not model.model_fields_set:
        raise ValueError("At least one field must be provided")
    for name in non_nullable:
        if name in model.model_fields_set and getattr(model, name) is None:
            raise ValueError(f"{name} cannot be null")


# ============================================================================
# TAG SCHEMAS
# ============================================================================


class TagCreate(CamelModel):
    """
    Схема для создания тега (POST /api/tags).

    Пример:
    {
        "name": "Errands",
        "color": "#18AEF8"
    }
    """

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH, description="Название тега")
    color: str | None = Field(
        None, pattern=HEX_COLOR_PATTERN, description="Цвет в формате #RRGGBB"
    )


class TagUpdate(CamelModel):
    """
    Схема для обновления тега (PATCH /api/tags/{id}).

    Хотя бы одно поле обязательно. "color": null сбрасывает цвет.
    """

    name: str | None = Field(None, min_length=1, max_length=NAME_MAX_LENGTH)
    color: str | None = Field(None, pattern=HEX_COLOR_PATTERN)

    @model_validator(mode="after")
    def check_not_empty(self) -> "TagUpdate":
        _require_fields(self, non_nullable=("name",))
        return self


class TagResponse(ORMModel):
    """Тег в ответе API (отдельно и внутри задачи)."""

    id: str
    user_id: str
    name: str
    color: str | None
    created_at: datetime
    updated_at: datetime


class TagWithUsage(TagResponse):
    """Тег с количеством задач (GET /api/tags/usage)."""

    usage_count: int = Field(..., description="Количество задач с этим тегом")


# ============================================================================
# TODO SCHEMAS
# ============================================================================


class TodoCreate(CamelModel):
    """
    Схема для создания задачи (POST /api/todos).

    Пример запроса:
    {
        "title": "Buy milk",
        "description": "2 liters"
    }
    """

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH, description="Название")
    description: str | None = Field(None, max_length=DESCRIPTION_MAX_LENGTH, description="Описание")


class TodoUpdate(CamelModel):
    """
    Схема для обновления задачи (PATCH /api/todos/{id}).

    Все поля опциональные, но пустой объект {} отклоняется (422).
    "startAt": null / "dueAt": null снимают дату.

    Пример запроса:
    {
        "completed": true,
        "dueAt": "2026-10-25T09:00:00Z"
    }
    """

    title: str | None = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    completed: bool | None = None
    start_at: datetime | None = None
    due_at: datetime | None = None

    @model_validator(mode="after")
    def check_not_empty(self) -> "TodoUpdate":
        _require_fields(self, non_nullable=("title", "completed"))
        return self


class TodoResponse(ORMModel):
    """
    Задача в ответе API (без тегов).

    Используется в ответах мутаций.
    """

    id: str
    user_id: str
    title: str
    description: str | None
    completed: bool
    start_at: datetime | None
    due_at: datetime | None
    created_at: datetime
    updated_at: datetime


class TodoWithTagsResponse(TodoResponse):
    """
    Задача с тегами (GET /api/todos).

    tags всегда список: [] если тегов нет, никогда null.
    """

    tags: list[TagResponse] = []

    @classmethod
    def from_aggregate(cls, item: TodoWithTags) -> "TodoWithTagsResponse":
        """Собрать ответ из результата запроса с LEFT JOIN."""
        base = TodoResponse.model_validate(item.todo)
        return cls(
            **base.model_dump(),
            tags=[TagResponse.model_validate(tag) for tag in item.tags],
        )


class AttachTagRequest(CamelModel):
    """
    Схема привязки тега к задаче (POST /api/todos/{id}/tags).

    Пример:
    {"tagId": "0b9c...-..."}
    """

    tag_id: str = Field(..., min_length=1, description="ID тега")


class TodoTagLink(CamelModel):
    """Связь задача-тег в ответе."""

    todo_id: str
    tag_id: str


# ============================================================================
# AUTH SCHEMAS
# ============================================================================


class SignUpRequest(CamelModel):
    """Регистрация (POST /api/auth/sign-up)."""

    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=320)
    password: str = Field(..., min_length=8, max_length=128)


class SignInRequest(CamelModel):
    """Вход (POST /api/auth/sign-in)."""

    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(ORMModel):
    """Публичные поля пользователя."""

    id: str
    name: str
    email: str
    email_verified: bool
    image: str | None
    created_at: datetime


class SessionResponse(CamelModel):
    """
    Выданная сессия.

    token дублирует cookie, чтобы не-браузерные клиенты могли
    передавать его в заголовке Authorization: Bearer.
    """

    user: UserResponse
    token: str
    expires_at: datetime


# ============================================================================
# COMMON SCHEMAS
# ============================================================================


class MutationResponse(CamelModel, Generic[T]):
    """
    Единый формат ответа мутаций.

    Пример:
    {
        "success": true,
        "data": {"id": "...", "title": "Buy milk", ...},
        "message": "Todo created successfully"
    }
    """

    success: bool = True
    data: T | None = None
    message: str


class ErrorDetail(BaseModel):
    """
    Детали ошибки для конкретного поля.

    Пример:
    {"field": "color", "message": "String should match pattern ..."}
    """

    field: str = Field(..., description="Название поля с ошибкой")
    message: str = Field(..., description="Описание ошибки")


class ErrorResponse(BaseModel):
    """
    Единый формат ответа для всех ошибок API.

    Примеры кодов:
    - VALIDATION_ERROR: ошибка валидации полей
    - NOT_FOUND: ресурс не найден (или чужой)
    - CONFLICT: нарушение уникальности
    - UNAUTHORIZED: нет сессии
    - INTERNAL_ERROR: внутренняя ошибка сервера

    Пример:
    {
        "success": false,
        "error": "Tag with this name already exists",
        "code": "CONFLICT",
        "details": [{"field": "name", "message": "Tag with this name already exists"}]
    }
    """

    success: bool = False
    error: str = Field(..., description="Человекочитаемое сообщение")
    code: str = Field(..., description="Код ошибки (VALIDATION_ERROR, NOT_FOUND, ...)")
    details: list[ErrorDetail] | None = None
