"""
Inline-редактор одной задачи.

Задача показывается в режиме VIEWING; клик по телу (не по чекбоксу)
переводит её в EDITING. Выход из EDITING:
- Enter вне многострочного поля, Cmd/Ctrl+Enter где угодно -> сохранить
- Escape -> отменить правки
- клик снаружи -> сохранить

Поверх редактора открываются три всплывающих элемента (меню тегов,
календари начала и срока). Клик, которым пользователь закрыл такой
элемент, не должен считаться кликом снаружи редактора. Для этого
SurfaceTracker запоминает, когда каждый элемент закрылся, и в течение
DISMISS_WINDOW_MS считает клики частью того же жеста.
"""

import enum
import logging
import random
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

logger = logging.getLogger(__name__)

DISMISS_WINDOW_MS = 300

TAG_COLORS = (
    "#18AEF8",
    "#7EBC89",
    "#29335C",
    "#D8B4A0",
    "#D77A61",
    "#FFD400",
    "#ED7B84",
    "#FA1855",
    "#39A99D",
    "#A491D3",
)


class EditorState(str, enum.Enum):
    VIEWING = "viewing"
    EDITING = "editing"


class Surface(str, enum.Enum):
    """Всплывающие элементы, которые перекрывают редактор."""

    TAG_MENU = "tag_menu"
    START_DATE = "start_date"
    DUE_DATE = "due_date"


def monotonic_ms() -> float:
    return time.monotonic() * 1000


def random_tag_color() -> str:
    return random.choice(TAG_COLORS)


# ============================================================================
# SNAPSHOTS
# ============================================================================


@dataclass(frozen=True)
class TagSnapshot:
    id: str
    name: str
    color: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "TagSnapshot":
        return cls(id=data["id"], name=data["name"], color=data.get("color"))


@dataclass(frozen=True)
class TodoSnapshot:
    """Задача в том виде, в каком её вернул GET /api/todos."""

    id: str
    title: str
    description: str | None = None
    completed: bool = False
    start_at: str | None = None
    due_at: str | None = None
    tags: tuple[TagSnapshot, ...] = ()

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "TodoSnapshot":
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description"),
            completed=data.get("completed", False),
            start_at=data.get("startAt"),
            due_at=data.get("dueAt"),
            tags=tuple(TagSnapshot.from_api(t) for t in data.get("tags") or []),
        )

    def has_tag(self, tag_id: str) -> bool:
        return any(tag.id == tag_id for tag in self.tags)


def filter_tags(tags: Iterable[TagSnapshot], search: str) -> list[TagSnapshot]:
    """Теги, в имени которых есть подстрока search (без учёта регистра)."""
    needle = search.strip().lower()
    if not needle:
        return list(tags)
    return [tag for tag in tags if needle in tag.name.lower()]


def has_exact_match(tags: Iterable[TagSnapshot], search: str) -> bool:
    needle = search.strip().lower()
    return any(tag.name.lower() == needle for tag in tags)


# ============================================================================
# SURFACE TRACKER
# ============================================================================


class SurfaceTracker:
    """
    Открытость всплывающих элементов и время их последнего закрытия.

    Закрытие одного элемента часто вызывает каскад: библиотека UI
    закрывает и соседний элемент тем же жестом. Такое "фантомное"
    закрытие игнорируется, если любой другой элемент закрылся меньше
    window_ms назад.
    """

    def __init__(
        self,
        clock: Callable[[], float] = monotonic_ms,
        window_ms: float = DISMISS_WINDOW_MS,
    ):
        self._clock = clock
        self.window_ms = window_ms
        self._open: dict[Surface, bool] = {surface: False for surface in Surface}
        self._closed_at: dict[Surface, float | None] = {surface: None for surface in Surface}

    def is_open(self, surface: Surface) -> bool:
        return self._open[surface]

    def any_open(self) -> bool:
        return any(self._open.values())

    def closed_at(self, surface: Surface) -> float | None:
        return self._closed_at[surface]

    def _recently_closed(self, now: float, exclude: Surface | None = None) -> bool:
        for surface, closed_at in self._closed_at.items():
            if surface is exclude or closed_at is None:
                continue
            if now - closed_at < self.window_ms:
                return True
        return False

    def set_open(self, surface: Surface, open: bool) -> bool:
        """
        Открыть или закрыть элемент.

        Returns:
            False если закрытие проигнорировано как часть каскада
        """
        now = self._clock()
        if not open and self._recently_closed(now, exclude=surface):
            logger.debug("Ignored cascaded close", extra={"surface": surface.value})
            return False

        self._open[surface] = open
        if not open:
            self._closed_at[surface] = now
        return True

    def blocks_outside_click(self) -> bool:
        """Клик снаружи не закрывает редактор, пока элемент открыт или только что закрылся."""
        return self.any_open() or self._recently_closed(self._clock())


# ============================================================================
# EDITOR
# ============================================================================


class TodoActions(Protocol):
    """Операции над задачей, которые вызывает редактор (см. TodoMutations)."""

    async def update_todo(self, todo_id: str, **fields: Any) -> Any: ...

    async def delete_todo(self, todo_id: str) -> Any: ...

    async def attach_tag(self, todo_id: str, tag_id: str) -> Any: ...

    async def detach_tag(self, todo_id: str, tag_id: str) -> Any: ...

    async def create_tag(self, name: str, color: str | None = None) -> dict[str, Any] | None: ...


class TodoEditor:
    """
    Машина состояний редактора одной задачи.

    UI передаёт сюда события (клики, клавиши, открытие/закрытие
    всплывающих элементов), редактор решает, сохранять ли правки,
    и вызывает TodoActions.

    Пример:
        editor = TodoEditor(todo, mutations, on_edit_end=tracker.end)
        editor.click_item()
        editor.edit(title="")
        await editor.key_down("Enter")   # пустое название -> задача удалена
    """

    def __init__(
        self,
        todo: TodoSnapshot,
        actions: TodoActions,
        surfaces: SurfaceTracker | None = None,
        on_edit_start: Callable[[str], None] | None = None,
        on_edit_end: Callable[[str], None] | None = None,
        initial_editing: bool = False,
    ):
        self.todo = todo
        self.actions = actions
        self.surfaces = surfaces or SurfaceTracker()
        self.on_edit_start = on_edit_start
        self.on_edit_end = on_edit_end

        self.state = EditorState.EDITING if initial_editing else EditorState.VIEWING
        self.edited_title = todo.title
        self.edited_description = todo.description
        self.tag_search = ""
        self.selected_tag_color = random_tag_color()

    @property
    def is_editing(self) -> bool:
        return self.state is EditorState.EDITING

    def click_item(self, on_checkbox: bool = False) -> bool:
        """Клик по задаче. Клик по чекбоксу не открывает редактор."""
        if on_checkbox:
            return False
        if self.on_edit_start:
            self.on_edit_start(self.todo.id)
        self.state = EditorState.EDITING
        return True

    def edit(self, title: str | None = None, description: str | None = None) -> None:
        """Ввод в форму редактирования."""
        if not self.is_editing:
            return
        if title is not None:
            self.edited_title = title.strip()
        if description is not None:
            self.edited_description = description.strip()

    async def key_down(
        self,
        key: str,
        meta: bool = False,
        ctrl: bool = False,
        in_multiline: bool = False,
    ) -> bool:
        """
        Нажатие клавиши внутри формы.

        Returns:
            True если клавиша обработана редактором
        """
        if not self.is_editing:
            return False

        if key == "Enter" and (meta or ctrl):
            await self.save()
            return True
        if key == "Enter" and not in_multiline:
            await self.save()
            return True
        if key == "Escape":
            self.cancel()
            return True
        return False

    def set_surface_open(self, surface: Surface, open: bool) -> bool:
        applied = self.surfaces.set_open(surface, open)
        if applied and not open and surface is Surface.TAG_MENU:
            self.tag_search = ""
        return applied

    async def pointer_down(self, inside: bool, ignore_marker: bool = False) -> bool:
        """
        Нажатие мыши где-либо в документе.

        Args:
            inside: цель внутри DOM-поддерева задачи
            ignore_marker: цель помечена как обрабатывающая клик сама

        Returns:
            True если клик снаружи сохранил правки и закрыл редактор
        """
        if not self.is_editing or inside:
            return False
        if self.surfaces.blocks_outside_click():
            return False
        if ignore_marker:
            return False

        await self.save()
        return True

    async def save(self) -> None:
        """
        Сохранить правки и выйти в VIEWING.

        Пустое название означает удаление задачи. Отправляются только
        изменённые поля, очищенное описание уходит как None.
        """
        title = (self.edited_title or "").strip()
        description = (self.edited_description or "").strip()

        if not title:
            await self.actions.delete_todo(self.todo.id)
        else:
            changes: dict[str, Any] = {}
            if title != self.todo.title:
                changes["title"] = title
            if description != (self.todo.description or ""):
                changes["description"] = description or None
            if changes:
                await self.actions.update_todo(self.todo.id, **changes)

        self._exit()

    def cancel(self) -> None:
        """Отменить правки и выйти в VIEWING."""
        self.edited_title = self.todo.title
        self.edited_description = self.todo.description
        self._exit()

    async def toggle_complete(self) -> None:
        await self.actions.update_todo(self.todo.id, completed=not self.todo.completed)

    async def select_start_date(self, value: datetime | None) -> None:
        await self.actions.update_todo(self.todo.id, start_at=value)

    async def select_due_date(self, value: datetime | None) -> None:
        await self.actions.update_todo(self.todo.id, due_at=value)

    async def toggle_tag(self, tag_id: str) -> None:
        if self.todo.has_tag(tag_id):
            await self.actions.detach_tag(self.todo.id, tag_id)
        else:
            await self.actions.attach_tag(self.todo.id, tag_id)

    async def create_and_attach_tag(
        self,
        available_tags: Iterable[TagSnapshot] = (),
        name: str | None = None,
        color: str | None = None,
    ) -> dict[str, Any] | None:
        """
        Создать тег из строки поиска и сразу привязать его к задаче.

        Ничего не делает, если имя пустое или тег с таким именем уже есть.
        """
        name = (name if name is not None else self.tag_search).strip()
        if not name or has_exact_match(available_tags, name):
            return None

        created = await self.actions.create_tag(
            name, color or self.selected_tag_color or random_tag_color()
        )
        if not created:
            return None

        await self.actions.attach_tag(self.todo.id, created["id"])
        self.tag_search = ""
        self.selected_tag_color = random_tag_color()
        return created

    def _exit(self) -> None:
        self.state = EditorState.VIEWING
        if self.on_edit_end:
            self.on_edit_end(self.todo.id)
