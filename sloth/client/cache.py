"""In-memory кэш результатов запросов."""

from collections.abc import Awaitable, Callable
from typing import Any

Loader = Callable[[], Awaitable[Any]]


class QueryCache:
    """
    Кэш по ключу запроса ("todos", "tags").

    fetch() загружает данные при первом обращении или после invalidate().
    Мутации не меняют кэш напрямую, а инвалидируют затронутые ключи:
    следующий fetch() перезапросит список у сервера.
    """

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    async def fetch(self, key: str, loader: Loader) -> Any:
        if key not in self._data:
            self._data[key] = await loader()
        return self._data[key]

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def is_cached(self, key: str) -> bool:
        return key in self._data

    def invalidate(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()
