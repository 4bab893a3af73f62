"""
API endpoints для работы с задачами.

Все endpoints требуют сессию (get_current_user) и работают
только с задачами текущего пользователя.

Включает:
- CRUD операции
- Привязку/отвязку тегов
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..models import User
from ..repositories import AttachOutcome
from ..services import TodoService
from .dependencies import get_current_user, get_todo_service
from .schemas import (
    AttachTagRequest,
    ErrorResponse,
    MutationResponse,
    TodoCreate,
    TodoResponse,
    TodoTagLink,
    TodoUpdate,
    TodoWithTagsResponse,
)

router = APIRouter(prefix="/todos", tags=["todos"])


# ============================================================================
# LIST TODOS
# ============================================================================


@router.get(
    "",
    response_model=list[TodoWithTagsResponse],
    summary="Получить задачи",
    description="Все задачи текущего пользователя с тегами, в порядке создания.",
)
async def list_todos(
    user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
) -> list[TodoWithTagsResponse]:
    """
    Получить список задач.

    Пример ответа:
    ```json
    [
        {
            "id": "5f0c...",
            "title": "Buy milk",
            "completed": false,
            "startAt": null,
            "dueAt": null,
            "tags": [{"id": "...", "name": "Errands", "color": "#18AEF8", ...}]
        }
    ]
    ```
    """
    todos = await service.list_todos(user.id)
    return [TodoWithTagsResponse.from_aggregate(item) for item in todos]


# ============================================================================
# GET TODO BY ID
# ============================================================================


@router.get(
    "/{todo_id}",
    response_model=TodoWithTagsResponse,
    summary="Получить задачу по ID",
    responses={404: {"model": ErrorResponse, "description": "Задача не найдена"}},
)
async def get_todo(
    todo_id: str,
    user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
) -> TodoWithTagsResponse:
    """Получить задачу с тегами."""
    item = await service.get_todo(user.id, todo_id)
    return TodoWithTagsResponse.from_aggregate(item)


# ============================================================================
# CREATE TODO
# ============================================================================


@router.post(
    "",
    response_model=MutationResponse[TodoResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Создать задачу",
    responses={422: {"model": ErrorResponse, "description": "Ошибка валидации"}},
)
async def create_todo(
    data: TodoCreate,
    user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
) -> MutationResponse[TodoResponse]:
    """
    Создать новую задачу.

    Пример запроса:
    ```json
    {
        "title": "Buy milk",
        "description": "2 liters"
    }
    ```
    """
    todo = await service.create_todo(user.id, title=data.title, description=data.description)
    return MutationResponse[TodoResponse](
        data=TodoResponse.model_validate(todo), message="Todo created successfully"
    )


# ============================================================================
# UPDATE TODO
# ============================================================================


@router.patch(
    "/{todo_id}",
    response_model=MutationResponse[TodoResponse],
    summary="Обновить задачу",
    description="""
    Частичное обновление: title, description, completed, startAt, dueAt.

    Хотя бы одно поле обязательно. null в startAt/dueAt снимает дату.
    """,
    responses={
        404: {"model": ErrorResponse, "description": "Задача не найдена"},
        422: {"model": ErrorResponse, "description": "Пустой запрос или неверные поля"},
    },
)
async def update_todo(
    todo_id: str,
    data: TodoUpdate,
    user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
) -> MutationResponse[TodoResponse]:
    """
    Обновить задачу.

    Пример запроса:
    ```json
    {"completed": true}
    ```
    """
    # exclude_unset: только поля, которые клиент действительно прислал
    fields = data.model_dump(exclude_unset=True)
    todo = await service.update_todo(user.id, todo_id, **fields)
    return MutationResponse[TodoResponse](
        data=TodoResponse.model_validate(todo), message="Todo updated successfully"
    )


# ============================================================================
# DELETE TODO
# ============================================================================


@router.delete(
    "/{todo_id}",
    response_model=MutationResponse[TodoResponse],
    summary="Удалить задачу",
    description="Удаляет задачу вместе со всеми её связями с тегами.",
    responses={404: {"model": ErrorResponse, "description": "Задача не найдена"}},
)
async def delete_todo(
    todo_id: str,
    user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
) -> MutationResponse[TodoResponse]:
    """Удалить задачу."""
    todo = await service.delete_todo(user.id, todo_id)
    return MutationResponse[TodoResponse](
        data=TodoResponse.model_validate(todo), message="Todo deleted successfully"
    )


# ============================================================================
# MANAGE TAGS
# ============================================================================


@router.post(
    "/{todo_id}/tags",
    response_model=MutationResponse[TodoTagLink],
    status_code=status.HTTP_201_CREATED,
    summary="Привязать тег к задаче",
    description="""
    Привязать существующий тег к задаче.

    Операция идемпотентна: повторная привязка того же тега
    возвращает 200 и message "Tag already attached", дубликат не создаётся.
    """,
    responses={
        200: {"model": MutationResponse[TodoTagLink], "description": "Тег уже был привязан"},
        404: {"model": ErrorResponse, "description": "Задача или тег не найдены"},
    },
)
async def attach_tag(
    todo_id: str,
    data: AttachTagRequest,
    user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
):
    """
    Привязать тег.

    Пример запроса:
    ```json
    {"tagId": "0b9c..."}
    ```
    """
    outcome = await service.attach_tag(user.id, todo_id, data.tag_id)
    link = TodoTagLink(todo_id=todo_id, tag_id=data.tag_id)

    if outcome is AttachOutcome.ALREADY_ATTACHED:
        body = MutationResponse[TodoTagLink](data=link, message="Tag already attached")
        return JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump(by_alias=True))

    return MutationResponse[TodoTagLink](data=link, message="Tag added to todo successfully")


@router.delete(
    "/{todo_id}/tags/{tag_id}",
    response_model=MutationResponse[TodoTagLink],
    summary="Отвязать тег от задачи",
    responses={
        404: {"model": ErrorResponse, "description": "Задача, тег или связь не найдены"},
    },
)
async def detach_tag(
    todo_id: str,
    tag_id: str,
    user: User = Depends(get_current_user),
    service: TodoService = Depends(get_todo_service),
) -> MutationResponse[TodoTagLink]:
    """
    Отвязать тег.

    Пример запроса:
    ```
    DELETE /api/todos/5f0c.../tags/0b9c...
    ```
    """
    await service.detach_tag(user.id, todo_id, tag_id)
    return MutationResponse[TodoTagLink](
        data=TodoTagLink(todo_id=todo_id, tag_id=tag_id),
        message="Tag removed from todo successfully",
    )
