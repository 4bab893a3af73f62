"""
Мутации клиента: вызов API + инвалидация кэша + уведомления.

Успех: затронутые списки в QueryCache инвалидируются и перезапросятся.
Ошибка: сообщение сервера показывается как уведомление, кэш не трогаем,
исключение дальше не пробрасывается (UI остаётся в прежнем состоянии).
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Literal

from .api import ApiError, SlothClient
from .cache import QueryCache

logger = logging.getLogger(__name__)

TODOS_KEY = "todos"
TAGS_KEY = "tags"


@dataclass(frozen=True)
class Notification:
    kind: Literal["success", "error"]
    message: str


class Notifications:
    """Лента всплывающих уведомлений (toast)."""

    def __init__(self) -> None:
        self.items: list[Notification] = []

    def success(self, message: str) -> None:
        self.items.append(Notification("success", message))

    def error(self, message: str) -> None:
        self.items.append(Notification("error", message))

    @property
    def last(self) -> Notification | None:
        return self.items[-1] if self.items else None

    def clear(self) -> None:
        self.items.clear()


class TodoMutations:
    """
    Реализация TodoActions для редактора поверх SlothClient.

    Каждая операция возвращает поле "data" ответа или None при ошибке.
    """

    def __init__(
        self,
        client: SlothClient,
        cache: QueryCache | None = None,
        notifications: Notifications | None = None,
    ):
        self.client = client
        self.cache = cache or QueryCache()
        self.notifications = notifications or Notifications()

    async def _run(
        self,
        call: Callable[[], Awaitable[dict[str, Any]]],
        invalidate: tuple[str, ...],
        fallback_error: str,
    ) -> dict[str, Any] | None:
        try:
            body = await call()
        except ApiError as e:
            logger.warning("Mutation failed", extra={"status": e.status_code, "error": e.message})
            self.notifications.error(e.message or fallback_error)
            return None

        self.cache.invalidate(*invalidate)
        message = body.get("message")
        if message:
            self.notifications.success(message)
        return body.get("data")

    async def create_todo(self, title: str, description: str | None = None) -> dict[str, Any] | None:
        return await self._run(
            lambda: self.client.create_todo(title, description),
            (TODOS_KEY,),
            "Failed to create todo",
        )

    async def update_todo(self, todo_id: str, **fields: Any) -> dict[str, Any] | None:
        return await self._run(
            lambda: self.client.update_todo(todo_id, **fields),
            (TODOS_KEY,),
            "Failed to update todo",
        )

    async def delete_todo(self, todo_id: str) -> dict[str, Any] | None:
        return await self._run(
            lambda: self.client.delete_todo(todo_id),
            (TODOS_KEY,),
            "Failed to delete todo",
        )

    async def attach_tag(self, todo_id: str, tag_id: str) -> dict[str, Any] | None:
        return await self._run(
            lambda: self.client.attach_tag(todo_id, tag_id),
            (TODOS_KEY, TAGS_KEY),
            "Failed to add tag",
        )

    async def detach_tag(self, todo_id: str, tag_id: str) -> dict[str, Any] | None:
        return await self._run(
            lambda: self.client.detach_tag(todo_id, tag_id),
            (TODOS_KEY, TAGS_KEY),
            "Failed to remove tag",
        )

    async def create_tag(self, name: str, color: str | None = None) -> dict[str, Any] | None:
        return await self._run(
            lambda: self.client.create_tag(name, color),
            (TAGS_KEY,),
            "Failed to create tag",
        )

    async def delete_tag(self, tag_id: str) -> dict[str, Any] | None:
        return await self._run(
            lambda: self.client.delete_tag(tag_id),
            (TODOS_KEY, TAGS_KEY),
            "Failed to delete tag",
        )

    # ------------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------------

    async def todos(self) -> list[dict[str, Any]]:
        return await self.cache.fetch(TODOS_KEY, self.client.list_todos)

    async def tags(self) -> list[dict[str, Any]]:
        return await self.cache.fetch(TAGS_KEY, self.client.list_tags)
