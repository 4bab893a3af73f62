"""
API endpoints для работы с тегами.

Теги принадлежат пользователю: имя уникально в пределах пользователя,
цвет опционален (#RRGGBB).
"""

from fastapi import APIRouter, Depends, status

from ..models import User
from ..services import TagService
from .dependencies import get_current_user, get_tag_service
from .schemas import (
    ErrorResponse,
    MutationResponse,
    TagCreate,
    TagResponse,
    TagUpdate,
    TagWithUsage,
)

router = APIRouter(prefix="/tags", tags=["tags"])


# ============================================================================
# GET ALL TAGS
# ============================================================================


@router.get("", response_model=list[TagResponse], summary="Получить все теги")
async def list_tags(
    user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> list[TagResponse]:
    """
    Получить список тегов пользователя (по алфавиту).

    Пример запроса:
    ```
    GET /api/tags
    ```
    """
    tags = await service.list_tags(user.id)
    return [TagResponse.model_validate(t) for t in tags]


# ============================================================================
# GET TAG USAGE
# ============================================================================


@router.get(
    "/usage",
    response_model=list[TagWithUsage],
    summary="Теги с количеством задач",
    description="Все теги пользователя и число задач, к которым привязан каждый.",
)
async def get_tag_usage(
    user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> list[TagWithUsage]:
    """
    Получить использование тегов.

    Пример ответа:
    ```json
    [
        {"id": "...", "name": "Errands", "color": "#18AEF8", "usageCount": 3},
        {"id": "...", "name": "Work", "color": null, "usageCount": 0}
    ]
    ```
    """
    usage = await service.get_tag_usage(user.id)
    return [
        TagWithUsage(**TagResponse.model_validate(tag).model_dump(), usage_count=count)
        for tag, count in usage
    ]


# ============================================================================
# GET TAG BY ID
# ============================================================================


@router.get(
    "/{tag_id}",
    response_model=TagResponse,
    summary="Получить тег по ID",
    responses={404: {"model": ErrorResponse, "description": "Тег не найден"}},
)
async def get_tag(
    tag_id: str,
    user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> TagResponse:
    """Получить тег."""
    tag = await service.get_tag(user.id, tag_id)
    return TagResponse.model_validate(tag)


# ============================================================================
# CREATE TAG
# ============================================================================


@router.post(
    "",
    response_model=MutationResponse[TagResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Создать тег",
    responses={
        409: {"model": ErrorResponse, "description": "Тег с таким именем уже есть"},
        422: {"model": ErrorResponse, "description": "Ошибка валидации"},
    },
)
async def create_tag(
    data: TagCreate,
    user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> MutationResponse[TagResponse]:
    """
    Создать тег.

    Пример запроса:
    ```json
    {"name": "Errands", "color": "#18AEF8"}
    ```
    """
    tag = await service.create_tag(user.id, name=data.name, color=data.color)
    return MutationResponse[TagResponse](
        data=TagResponse.model_validate(tag), message="Tag created successfully"
    )


# ============================================================================
# UPDATE TAG
# ============================================================================


@router.patch(
    "/{tag_id}",
    response_model=MutationResponse[TagResponse],
    summary="Обновить тег",
    responses={
        404: {"model": ErrorResponse, "description": "Тег не найден"},
        409: {"model": ErrorResponse, "description": "Имя уже занято"},
    },
)
async def update_tag(
    tag_id: str,
    data: TagUpdate,
    user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> MutationResponse[TagResponse]:
    """
    Обновить тег.

    Пример запроса:
    ```json
    {"name": "Shopping", "color": null}
    ```
    """
    kwargs = {}
    # "color": null означает сбросить цвет, отсутствие поля - не трогать
    if "color" in data.model_fields_set:
        kwargs["color"] = data.color

    tag = await service.update_tag(user.id, tag_id, name=data.name, **kwargs)
    return MutationResponse[TagResponse](
        data=TagResponse.model_validate(tag), message="Tag updated successfully"
    )


# ============================================================================
# DELETE TAG
# ============================================================================


@router.delete(
    "/{tag_id}",
    response_model=MutationResponse[TagResponse],
    summary="Удалить тег",
    description="Удаляет тег и отвязывает его от всех задач (задачи не удаляются).",
    responses={404: {"model": ErrorResponse, "description": "Тег не найден"}},
)
async def delete_tag(
    tag_id: str,
    user: User = Depends(get_current_user),
    service: TagService = Depends(get_tag_service),
) -> MutationResponse[TagResponse]:
    """Удалить тег."""
    tag = await service.delete_tag(user.id, tag_id)
    return MutationResponse[TagResponse](
        data=TagResponse.model_validate(tag), message="Tag deleted successfully"
    )
