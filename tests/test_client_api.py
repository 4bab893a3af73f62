"""
Тесты HTTP клиента и мутаций против настоящего приложения.

SlothClient работает поверх test_client (ASGITransport), поэтому
запросы проходят все слои до тестовой БД.
"""

import pytest
import pytest_asyncio

from sloth.client import (
    ApiError,
    EditorState,
    QueryCache,
    SlothClient,
    TodoEditor,
    TodoMutations,
    TodoSnapshot,
)


@pytest_asyncio.fixture
async def client(test_client) -> SlothClient:
    sloth = SlothClient(http=test_client)
    await sloth.sign_up("Alice", "alice@example.com", "correct-horse")
    return sloth


@pytest.mark.asyncio
async def test_sign_up_stores_token(client):
    """Test: после регистрации клиент авторизован."""
    assert client.token

    session = await client.get_session()
    assert session["email"] == "alice@example.com"


@pytest.mark.asyncio
async def test_api_error_carries_server_message(test_client):
    """Test: ответ не 2xx превращается в ApiError с полем error."""
    anonymous = SlothClient(http=test_client)

    with pytest.raises(ApiError) as exc_info:
        await anonymous.list_todos()

    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "Authentication required"
    assert exc_info.value.code == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_update_todo_sends_camel_case(client):
    """Test: start_at/due_at уходят как startAt/dueAt."""
    created = await client.create_todo("Buy milk")

    body = await client.update_todo(created["data"]["id"], due_at="2026-10-25T09:00:00Z")

    assert body["data"]["dueAt"].startswith("2026-10-25T09:00:00")


@pytest.mark.asyncio
async def test_mutations_invalidate_cache(client):
    """Test: успешная мутация инвалидирует список задач."""
    cache = QueryCache()
    mutations = TodoMutations(client, cache)

    assert await mutations.todos() == []
    await mutations.create_todo("Buy milk")

    assert cache.is_cached("todos") is False
    todos = await mutations.todos()
    assert [t["title"] for t in todos] == ["Buy milk"]
    assert mutations.notifications.last.message == "Todo created successfully"


@pytest.mark.asyncio
async def test_mutation_error_is_notified(client):
    """Test: ошибка мутации - уведомление, кэш не тронут, исключения нет."""
    cache = QueryCache()
    mutations = TodoMutations(client, cache)
    await mutations.todos()

    result = await mutations.update_todo("missing", completed=True)

    assert result is None
    assert mutations.notifications.last.kind == "error"
    assert mutations.notifications.last.message == "Todo not found"
    assert cache.is_cached("todos") is True


@pytest.mark.asyncio
async def test_duplicate_tag_notified(client):
    """Test: дубликат тега - уведомление с сообщением сервера."""
    mutations = TodoMutations(client)
    await mutations.create_tag("Work")

    assert await mutations.create_tag("Work") is None
    assert mutations.notifications.last.message == "Tag with this name already exists"


@pytest.mark.asyncio
async def test_editor_empty_title_deletes_on_server(client):
    """Test: редактор с пустым названием + Enter удаляет задачу на сервере."""
    mutations = TodoMutations(client)
    await mutations.create_todo("Buy milk")
    todo = TodoSnapshot.from_api((await mutations.todos())[0])

    editor = TodoEditor(todo, mutations)
    editor.click_item()
    editor.edit(title="")
    await editor.key_down("Enter")

    assert editor.state is EditorState.VIEWING
    assert await mutations.todos() == []


@pytest.mark.asyncio
async def test_editor_creates_and_attaches_tag(client):
    """Test: создание тега из меню привязывает его к задаче."""
    mutations = TodoMutations(client)
    await mutations.create_todo("Buy milk")
    todo = TodoSnapshot.from_api((await mutations.todos())[0])

    editor = TodoEditor(todo, mutations)
    editor.tag_search = "Errands"
    await editor.create_and_attach_tag(color="#18AEF8")

    todos = await mutations.todos()
    assert [(t["name"], t["color"]) for t in todos[0]["tags"]] == [("Errands", "#18AEF8")]
