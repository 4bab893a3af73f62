"""
Тесты для inline-редактора задачи.

Проверяем:
- Переходы VIEWING <-> EDITING
- Клавиши Enter / Cmd+Enter / Escape
- Пустое название при сохранении удаляет задачу
- Клик, закрывший всплывающий элемент, не считается кликом снаружи
"""

import pytest

from sloth.client import (
    DISMISS_WINDOW_MS,
    TAG_COLORS,
    EditorState,
    EditTracker,
    Surface,
    SurfaceTracker,
    TagSnapshot,
    TodoEditor,
    TodoSnapshot,
    filter_tags,
    has_exact_match,
    random_tag_color,
)


class FakeClock:
    """Ручные часы в миллисекундах."""

    def __init__(self) -> None:
        self.now = 10_000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class RecordingActions:
    """TodoActions, которые только запоминают вызовы."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    async def update_todo(self, todo_id, **fields):
        self.calls.append(("update", todo_id, fields))
        return {"id": todo_id, **fields}

    async def delete_todo(self, todo_id):
        self.calls.append(("delete", todo_id))
        return {"id": todo_id}

    async def attach_tag(self, todo_id, tag_id):
        self.calls.append(("attach", todo_id, tag_id))
        return {"todoId": todo_id, "tagId": tag_id}

    async def detach_tag(self, todo_id, tag_id):
        self.calls.append(("detach", todo_id, tag_id))
        return {"todoId": todo_id, "tagId": tag_id}

    async def create_tag(self, name, color=None):
        self.calls.append(("create_tag", name, color))
        return {"id": "new-tag", "name": name, "color": color}


ERRANDS = TagSnapshot(id="tag-1", name="Errands", color="#18AEF8")
WORK = TagSnapshot(id="tag-2", name="Work", color=None)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def actions() -> RecordingActions:
    return RecordingActions()


@pytest.fixture
def todo() -> TodoSnapshot:
    return TodoSnapshot(id="todo-1", title="Buy milk", description=None, tags=(ERRANDS,))


@pytest.fixture
def editor(todo, actions, clock) -> TodoEditor:
    return TodoEditor(todo, actions, surfaces=SurfaceTracker(clock=clock))


# ============================================================================
# STATE TRANSITIONS
# ============================================================================


def test_click_enters_editing(editor):
    """Test: клик по телу задачи открывает редактор."""
    assert editor.state is EditorState.VIEWING

    assert editor.click_item() is True
    assert editor.state is EditorState.EDITING


def test_click_on_checkbox_does_not_enter_editing(editor):
    """Test: клик по чекбоксу не открывает редактор."""
    assert editor.click_item(on_checkbox=True) is False
    assert editor.state is EditorState.VIEWING


def test_edit_tracker_callbacks(todo, actions):
    """Test: on_edit_start / on_edit_end обновляют EditTracker."""
    tracker = EditTracker()
    editor = TodoEditor(todo, actions, on_edit_start=tracker.start, on_edit_end=tracker.end)

    editor.click_item()
    assert tracker.is_editing("todo-1")

    editor.cancel()
    assert tracker.editing_id is None


# ============================================================================
# KEYBOARD
# ============================================================================


@pytest.mark.asyncio
async def test_empty_title_enter_deletes(editor, actions):
    """Test: пустое название + Enter -> задача удалена, редактор в VIEWING."""
    editor.click_item()
    editor.edit(title="   ")

    assert await editor.key_down("Enter") is True

    assert actions.calls == [("delete", "todo-1")]
    assert editor.state is EditorState.VIEWING


@pytest.mark.asyncio
async def test_enter_saves_changed_title(editor, actions):
    """Test: Enter сохраняет изменённое название (обрезанное)."""
    editor.click_item()
    editor.edit(title="  Buy oat milk ")

    await editor.key_down("Enter")

    assert actions.calls == [
        ("update", "todo-1", {"title": "Buy oat milk"})
    ]
    assert editor.state is EditorState.VIEWING


@pytest.mark.asyncio
async def test_enter_without_changes_does_not_update(editor, actions):
    """Test: без изменений Enter просто закрывает редактор."""
    editor.click_item()

    await editor.key_down("Enter")

    assert actions.calls == []
    assert editor.state is EditorState.VIEWING


@pytest.mark.asyncio
async def test_description_change_saves(editor, actions):
    """Test: изменённое описание тоже сохраняется."""
    editor.click_item()
    editor.edit(description="2 liters")

    await editor.key_down("Enter", meta=True, in_multiline=True)

    assert actions.calls == [
        ("update", "todo-1", {"description": "2 liters"})
    ]


@pytest.mark.asyncio
async def test_cleared_description_saves_as_none(actions, clock):
    """Test: очищенное описание сохраняется как None, название не отправляется."""
    todo = TodoSnapshot(id="todo-1", title="Buy milk", description="2 liters")
    editor = TodoEditor(todo, actions, surfaces=SurfaceTracker(clock=clock))
    editor.click_item()
    editor.edit(description="   ")

    await editor.key_down("Enter")

    assert actions.calls == [("update", "todo-1", {"description": None})]


@pytest.mark.asyncio
async def test_enter_in_multiline_is_not_consumed(editor, actions):
    """Test: Enter в многострочном поле - перевод строки, не сохранение."""
    editor.click_item()

    assert await editor.key_down("Enter", in_multiline=True) is False
    assert editor.state is EditorState.EDITING


@pytest.mark.asyncio
async def test_ctrl_enter_saves_in_multiline(editor, actions):
    """Test: Ctrl+Enter сохраняет даже в многострочном поле."""
    editor.click_item()
    editor.edit(title="Buy bread")

    assert await editor.key_down("Enter", ctrl=True, in_multiline=True) is True
    assert actions.calls[0][0] == "update"


@pytest.mark.asyncio
async def test_escape_discards(editor, actions):
    """Test: Escape отменяет правки."""
    editor.click_item()
    editor.edit(title="")

    assert await editor.key_down("Escape") is True

    assert actions.calls == []
    assert editor.state is EditorState.VIEWING
    assert editor.edited_title == "Buy milk"


@pytest.mark.asyncio
async def test_keys_ignored_when_viewing(editor, actions):
    """Test: в режиме просмотра клавиши не обрабатываются."""
    assert await editor.key_down("Enter") is False
    assert actions.calls == []


# ============================================================================
# OUTSIDE CLICKS AND SURFACES
# ============================================================================


@pytest.mark.asyncio
async def test_outside_click_saves(editor, actions):
    """Test: клик снаружи сохраняет и закрывает редактор."""
    editor.click_item()
    editor.edit(title="Buy bread")

    assert await editor.pointer_down(inside=False) is True

    assert actions.calls[0][0] == "update"
    assert editor.state is EditorState.VIEWING


@pytest.mark.asyncio
async def test_inside_click_keeps_editing(editor, actions):
    """Test: клик внутри задачи не закрывает редактор."""
    editor.click_item()

    assert await editor.pointer_down(inside=True) is False
    assert editor.state is EditorState.EDITING


@pytest.mark.asyncio
async def test_ignore_marker(editor):
    """Test: элементы с маркером ignore обрабатывают клик сами."""
    editor.click_item()

    assert await editor.pointer_down(inside=False, ignore_marker=True) is False
    assert editor.state is EditorState.EDITING


@pytest.mark.asyncio
async def test_outside_click_ignored_while_surface_open(editor, actions):
    """Test: пока меню тегов открыто, клик снаружи не закрывает редактор."""
    editor.click_item()
    editor.set_surface_open(Surface.TAG_MENU, True)

    assert await editor.pointer_down(inside=False) is False
    assert editor.state is EditorState.EDITING
    assert actions.calls == []


@pytest.mark.asyncio
async def test_dismiss_click_not_counted_as_outside(editor, clock):
    """Test: клик, закрывший календарь, не закрывает редактор."""
    editor.click_item()
    editor.set_surface_open(Surface.DUE_DATE, True)
    editor.set_surface_open(Surface.DUE_DATE, False)

    clock.advance(DISMISS_WINDOW_MS - 1)
    assert await editor.pointer_down(inside=False) is False
    assert editor.state is EditorState.EDITING

    clock.advance(2)
    assert await editor.pointer_down(inside=False) is True
    assert editor.state is EditorState.VIEWING


@pytest.mark.asyncio
async def test_date_picker_close_over_tag_menu(editor, actions, clock):
    """
    Test: меню тегов открыто, клик по дню в календаре.

    Календарь закрывается, каскад пытается закрыть и меню тегов -
    это фантомное закрытие игнорируется, и клик не считается кликом снаружи.
    """
    editor.click_item()
    editor.set_surface_open(Surface.TAG_MENU, True)
    editor.set_surface_open(Surface.START_DATE, True)

    await editor.select_start_date(None)
    assert editor.set_surface_open(Surface.START_DATE, False) is True

    clock.advance(5)
    assert editor.set_surface_open(Surface.TAG_MENU, False) is False
    assert editor.surfaces.is_open(Surface.TAG_MENU) is True

    assert await editor.pointer_down(inside=False) is False
    assert editor.state is EditorState.EDITING
    assert actions.calls == [("update", "todo-1", {"start_at": None})]


def test_tracker_closed_at_initially_none(clock):
    """Test: элемент, который ни разу не закрывался, не блокирует клики."""
    tracker = SurfaceTracker(clock=clock)

    assert tracker.closed_at(Surface.TAG_MENU) is None
    assert tracker.blocks_outside_click() is False


def test_tracker_same_surface_can_reclose(clock):
    """Test: повторное закрытие того же элемента не считается каскадом."""
    tracker = SurfaceTracker(clock=clock)
    tracker.set_open(Surface.TAG_MENU, True)
    tracker.set_open(Surface.TAG_MENU, False)
    tracker.set_open(Surface.TAG_MENU, True)
    clock.advance(10)

    assert tracker.set_open(Surface.TAG_MENU, False) is True
    assert tracker.closed_at(Surface.TAG_MENU) == clock.now


def test_tag_menu_close_clears_search(editor):
    """Test: закрытие меню тегов сбрасывает строку поиска."""
    editor.set_surface_open(Surface.TAG_MENU, True)
    editor.tag_search = "err"

    editor.set_surface_open(Surface.TAG_MENU, False)

    assert editor.tag_search == ""


# ============================================================================
# TODO ACTIONS
# ============================================================================


@pytest.mark.asyncio
async def test_toggle_complete(editor, actions):
    """Test: чекбокс инвертирует completed."""
    await editor.toggle_complete()

    assert actions.calls == [("update", "todo-1", {"completed": True})]


@pytest.mark.asyncio
async def test_toggle_tag(editor, actions):
    """Test: привязанный тег отвязывается, непривязанный - привязывается."""
    await editor.toggle_tag(ERRANDS.id)
    await editor.toggle_tag(WORK.id)

    assert actions.calls == [
        ("detach", "todo-1", "tag-1"),
        ("attach", "todo-1", "tag-2"),
    ]


@pytest.mark.asyncio
async def test_create_and_attach_tag(editor, actions):
    """Test: новый тег из строки поиска создаётся и привязывается."""
    editor.tag_search = " Home "

    created = await editor.create_and_attach_tag([ERRANDS, WORK], color="#7EBC89")

    assert created["id"] == "new-tag"
    assert actions.calls == [
        ("create_tag", "Home", "#7EBC89"),
        ("attach", "todo-1", "new-tag"),
    ]
    assert editor.tag_search == ""


@pytest.mark.asyncio
async def test_create_tag_skipped_on_exact_match(editor, actions):
    """Test: существующее имя (без учёта регистра) не создаёт тег."""
    editor.tag_search = "work"

    assert await editor.create_and_attach_tag([ERRANDS, WORK]) is None
    assert actions.calls == []


# ============================================================================
# TAG MENU HELPERS
# ============================================================================


def test_filter_tags():
    """Test: поиск тегов по подстроке без учёта регистра."""
    assert filter_tags([ERRANDS, WORK], "RR") == [ERRANDS]
    assert filter_tags([ERRANDS, WORK], "  ") == [ERRANDS, WORK]


def test_has_exact_match():
    assert has_exact_match([ERRANDS, WORK], " errands ") is True
    assert has_exact_match([ERRANDS, WORK], "err") is False


def test_random_tag_color_from_palette():
    assert random_tag_color() in TAG_COLORS


def test_snapshot_from_api():
    """Test: TodoSnapshot читает camelCase ответ API."""
    snapshot = TodoSnapshot.from_api(
        {
            "id": "todo-1",
            "title": "Buy milk",
            "description": None,
            "completed": False,
            "startAt": "2026-10-20T00:00:00",
            "dueAt": None,
            "tags": [{"id": "tag-1", "name": "Errands", "color": "#18AEF8"}],
        }
    )

    assert snapshot.start_at == "2026-10-20T00:00:00"
    assert snapshot.tags == (ERRANDS,)
    assert snapshot.has_tag("tag-1")
