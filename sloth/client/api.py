"""
HTTP клиент для Sloth API.

Тонкая обёртка над httpx.AsyncClient: одна корутина на endpoint.
Ответы не 2xx превращаются в ApiError с сообщением из поля "error".

Пример:
    async with SlothClient("http://localhost:8000") as client:
        await client.sign_in("alice@example.com", "correct-horse")
        todos = await client.list_todos()
"""

from datetime import datetime
from typing import Any

import httpx

# Поля PATCH /api/todos/{id}: snake_case -> camelCase
_TODO_FIELD_ALIASES = {
    "title": "title",
    "description": "description",
    "completed": "completed",
    "start_at": "startAt",
    "due_at": "dueAt",
}


class ApiError(Exception):
    """Ошибка API: сообщение сервера и HTTP статус."""

    def __init__(self, message: str, status_code: int, code: str | None = None):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class SlothClient:
    """Асинхронный клиент API. Токен сессии передаётся заголовком Bearer."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        token: str | None = None,
        http: httpx.AsyncClient | None = None,
    ):
        self._http = http or httpx.AsyncClient(base_url=base_url)
        self._owns_http = http is None
        self.token = token

    async def __aenter__(self) -> "SlothClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        response = await self._http.request(method, path, json=json, headers=headers)

        if response.is_success:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = {}
        message = body.get("error") if isinstance(body, dict) else None
        code = body.get("code") if isinstance(body, dict) else None
        raise ApiError(message or f"Request failed ({response.status_code})", response.status_code, code)

    # ------------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------------

    async def sign_up(self, name: str, email: str, password: str) -> dict[str, Any]:
        body = await self._request(
            "POST", "/api/auth/sign-up", {"name": name, "email": email, "password": password}
        )
        self.token = body["data"]["token"]
        return body["data"]

    async def sign_in(self, email: str, password: str) -> dict[str, Any]:
        body = await self._request(
            "POST", "/api/auth/sign-in", {"email": email, "password": password}
        )
        self.token = body["data"]["token"]
        return body["data"]

    async def sign_out(self) -> None:
        await self._request("POST", "/api/auth/sign-out")
        self.token = None

    async def get_session(self) -> dict[str, Any]:
        return await self._request("GET", "/api/auth/session")

    async def delete_user(self) -> None:
        await self._request("DELETE", "/api/auth/user")
        self.token = None

    # ------------------------------------------------------------------------
    # Todos
    # ------------------------------------------------------------------------

    async def list_todos(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/api/todos")

    async def get_todo(self, todo_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/api/todos/{todo_id}")

    async def create_todo(self, title: str, description: str | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"title": title}
        if description is not None:
            payload["description"] = description
        return await self._request("POST", "/api/todos", payload)

    async def update_todo(self, todo_id: str, **fields: Any) -> dict[str, Any]:
        payload = {
            _TODO_FIELD_ALIASES.get(name, name): _serialize(value) for name, value in fields.items()
        }
        return await self._request("PATCH", f"/api/todos/{todo_id}", payload)

    async def delete_todo(self, todo_id: str) -> dict[str, Any]:
        return await self._request("DELETE", f"/api/todos/{todo_id}")

    async def attach_tag(self, todo_id: str, tag_id: str) -> dict[str, Any]:
        return await self._request("POST", f"/api/todos/{todo_id}/tags", {"tagId": tag_id})

    async def detach_tag(self, todo_id: str, tag_id: str) -> dict[str, Any]:
        return await self._request("DELETE", f"/api/todos/{todo_id}/tags/{tag_id}")

    # ------------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------------

    async def list_tags(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/api/tags")

    async def get_tag_usage(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/api/tags/usage")

    async def create_tag(self, name: str, color: str | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": name}
        if color is not None:
            payload["color"] = color
        return await self._request("POST", "/api/tags", payload)

    async def update_tag(self, tag_id: str, **fields: Any) -> dict[str, Any]:
        return await self._request("PATCH", f"/api/tags/{tag_id}", fields)

    async def delete_tag(self, tag_id: str) -> dict[str, Any]:
        return await self._request("DELETE", f"/api/tags/{tag_id}")
