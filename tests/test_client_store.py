"""Тесты клиентских хранилищ и кэша запросов."""

import pytest

from sloth.client import EditTracker, NavStore, QueryCache


def test_nav_store_defaults_to_visible():
    assert NavStore().display is True


def test_nav_store_toggle_show_hide():
    """Test: toggle/show/hide меняют display."""
    store = NavStore()

    store.toggle_display()
    assert store.display is False

    store.show_display()
    assert store.display is True

    store.hide_display()
    assert store.display is False


def test_nav_store_subscribers():
    """Test: подписчики получают только реальные изменения."""
    store = NavStore()
    seen: list[bool] = []
    unsubscribe = store.subscribe(seen.append)

    store.hide_display()
    store.hide_display()
    store.show_display()
    unsubscribe()
    store.toggle_display()

    assert seen == [False, True]


def test_nav_stores_are_independent():
    """Test: два хранилища не разделяют состояние."""
    first, second = NavStore(), NavStore()

    first.hide_display()

    assert second.display is True


def test_edit_tracker_single_todo():
    """Test: редактируется не больше одной задачи."""
    tracker = EditTracker()

    tracker.start("todo-1")
    tracker.start("todo-2")
    assert tracker.editing_id == "todo-2"

    # Запоздавший end от первой задачи ничего не сбрасывает
    tracker.end("todo-1")
    assert tracker.is_editing("todo-2")

    tracker.end("todo-2")
    assert tracker.editing_id is None


@pytest.mark.asyncio
async def test_query_cache_fetch_and_invalidate():
    """Test: загрузка один раз, после invalidate - повторно."""
    cache = QueryCache()
    loads: list[int] = []

    async def loader():
        loads.append(1)
        return ["todo"]

    assert await cache.fetch("todos", loader) == ["todo"]
    assert await cache.fetch("todos", loader) == ["todo"]
    assert len(loads) == 1

    cache.invalidate("todos", "tags")
    assert cache.is_cached("todos") is False

    await cache.fetch("todos", loader)
    assert len(loads) == 2
