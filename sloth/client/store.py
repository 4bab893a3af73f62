"""
Клиентское состояние уровня приложения.

Хранилища - обычные объекты, которые создаёт и передаёт вызывающий код:
несколько экземпляров (например, в тестах) не мешают друг другу.
"""

from collections.abc import Callable

Listener = Callable[[bool], None]


class NavStore:
    """
    Видимость шапки навигации.

    Страницы входа и регистрации прячут шапку, остальные показывают.
    Подписчики получают новое значение display при каждом изменении.
    """

    def __init__(self, display: bool = True):
        self.display = display
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Подписаться на изменения. Returns функцию отписки."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def toggle_display(self) -> None:
        self._set(not self.display)

    def show_display(self) -> None:
        self._set(True)

    def hide_display(self) -> None:
        self._set(False)

    def _set(self, value: bool) -> None:
        if value == self.display:
            return
        self.display = value
        for listener in list(self._listeners):
            listener(value)


class EditTracker:
    """Какая задача сейчас редактируется (не больше одной)."""

    def __init__(self) -> None:
        self.editing_id: str | None = None

    def start(self, todo_id: str) -> None:
        self.editing_id = todo_id

    def end(self, todo_id: str) -> None:
        # Запоздавший end от прошлого редактора не сбрасывает текущий
        if self.editing_id == todo_id:
            self.editing_id = None

    def is_editing(self, todo_id: str) -> bool:
        return self.editing_id == todo_id
