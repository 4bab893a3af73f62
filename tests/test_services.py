"""
Тесты для Service Layer (Бизнес-логика).

Проверяем:
- Валидацию бизнес-правил
- Проверку владельца перед мутациями
- Конфликты уникальности
- Регистрацию, вход и сессии
"""

from datetime import UTC, datetime, timedelta

import pytest

from sloth.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError_,
)
from sloth.models.base import utc_now
from sloth.repositories import AttachOutcome, SessionRepository, TodoTagRepository
from sloth.services import AuthService, TagService, TodoService

# ============================================================================
# TODO SERVICE TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_create_todo_trims_title(test_db, user):
    """Test: название и описание обрезаются."""
    service = TodoService(test_db)

    todo = await service.create_todo(user.id, title="  Buy milk  ", description=" 2 liters ")

    assert todo.title == "Buy milk"
    assert todo.description == "2 liters"
    assert todo.completed is False


@pytest.mark.asyncio
async def test_create_todo_validation_empty_title(test_db, user):
    """Test: валидация - пустое название."""
    service = TodoService(test_db)

    with pytest.raises(ValidationError_, match="Title is required"):
        await service.create_todo(user.id, title="   ")


@pytest.mark.asyncio
async def test_create_todo_validation_title_too_long(test_db, user):
    """Test: валидация - название длиннее 500 символов."""
    service = TodoService(test_db)

    with pytest.raises(ValidationError_, match="at most 500"):
        await service.create_todo(user.id, title="x" * 501)


@pytest.mark.asyncio
async def test_update_todo_empty_payload(test_db, user):
    """Test: пустой набор полей отклоняется."""
    service = TodoService(test_db)
    todo = await service.create_todo(user.id, title="Buy milk")

    with pytest.raises(ValidationError_, match="At least one field"):
        await service.update_todo(user.id, todo.id)


@pytest.mark.asyncio
async def test_update_todo_unknown_field(test_db, user):
    """Test: неизвестные поля отклоняются."""
    service = TodoService(test_db)
    todo = await service.create_todo(user.id, title="Buy milk")

    with pytest.raises(ValidationError_, match="Unknown fields: owner"):
        await service.update_todo(user.id, todo.id, owner="someone-else")


@pytest.mark.asyncio
async def test_update_todo_fields(test_db, user):
    """Test: частичное обновление и снятие даты через None."""
    service = TodoService(test_db)
    todo = await service.create_todo(user.id, title="Buy milk")
    due = datetime(2026, 10, 25, 9, 0, tzinfo=UTC)

    updated = await service.update_todo(user.id, todo.id, completed=True, due_at=due)
    assert updated.completed is True
    assert updated.due_at is not None
    assert updated.title == "Buy milk"

    cleared = await service.update_todo(user.id, todo.id, due_at=None)
    assert cleared.due_at is None
    assert cleared.completed is True


@pytest.mark.asyncio
async def test_update_todo_of_other_user(test_db, user, other_user):
    """Test: чужая задача - NotFound."""
    service = TodoService(test_db)
    todo = await service.create_todo(user.id, title="Buy milk")

    with pytest.raises(NotFoundError, match="Todo not found"):
        await service.update_todo(other_user.id, todo.id, completed=True)


@pytest.mark.asyncio
async def test_delete_todo(test_db, user):
    """Test: удаление задачи возвращает удалённую задачу."""
    service = TodoService(test_db)
    todo = await service.create_todo(user.id, title="Buy milk")

    deleted = await service.delete_todo(user.id, todo.id)

    assert deleted.id == todo.id
    assert await service.list_todos(user.id) == []
    with pytest.raises(NotFoundError):
        await service.delete_todo(user.id, todo.id)


@pytest.mark.asyncio
async def test_get_todo_not_found(test_db, user):
    """Test: несуществующая задача."""
    with pytest.raises(NotFoundError):
        await TodoService(test_db).get_todo(user.id, "missing")


@pytest.mark.asyncio
async def test_attach_tag_twice(test_db, user):
    """Test: повторная привязка возвращает ALREADY_ATTACHED без дубликата."""
    todos = TodoService(test_db)
    todo = await todos.create_todo(user.id, title="Buy milk")
    tag = await TagService(test_db).create_tag(user.id, name="Errands", color="#18AEF8")

    assert await todos.attach_tag(user.id, todo.id, tag.id) is AttachOutcome.ATTACHED
    assert await todos.attach_tag(user.id, todo.id, tag.id) is AttachOutcome.ALREADY_ATTACHED
    assert await TodoTagRepository(test_db).count_for_todo(todo.id) == 1


@pytest.mark.asyncio
async def test_attach_tag_ownership(test_db, user, other_user):
    """Test: нельзя привязать чужой тег или тег к чужой задаче."""
    todos = TodoService(test_db)
    tags = TagService(test_db)
    my_todo = await todos.create_todo(user.id, title="Mine")
    my_tag = await tags.create_tag(user.id, name="Mine")
    their_tag = await tags.create_tag(other_user.id, name="Theirs")

    with pytest.raises(NotFoundError, match="Tag not found"):
        await todos.attach_tag(user.id, my_todo.id, their_tag.id)

    with pytest.raises(NotFoundError, match="Todo not found"):
        await todos.attach_tag(other_user.id, my_todo.id, my_tag.id)


@pytest.mark.asyncio
async def test_detach_missing_association(test_db, user):
    """Test: отвязка несуществующей связи - NotFound, а не тихий успех."""
    todos = TodoService(test_db)
    todo = await todos.create_todo(user.id, title="Buy milk")
    tag = await TagService(test_db).create_tag(user.id, name="Errands")

    with pytest.raises(NotFoundError, match="Tag association not found"):
        await todos.detach_tag(user.id, todo.id, tag.id)

    await todos.attach_tag(user.id, todo.id, tag.id)
    await todos.detach_tag(user.id, todo.id, tag.id)
    item = await todos.get_todo(user.id, todo.id)
    assert item.tags == []


# ============================================================================
# TAG SERVICE TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_create_tag_duplicate_same_user(test_db, user):
    """Test: "Work" дважды для одного пользователя - Conflict."""
    service = TagService(test_db)
    await service.create_tag(user.id, name="Work")

    with pytest.raises(ConflictError, match="already exists"):
        await service.create_tag(user.id, name="Work")


@pytest.mark.asyncio
async def test_create_tag_same_name_different_users(test_db, user, other_user):
    """Test: "Work" для двух разных пользователей - оба успешны."""
    service = TagService(test_db)

    first = await service.create_tag(user.id, name="Work")
    second = await service.create_tag(other_user.id, name="Work")

    assert first.id != second.id
    assert first.user_id == user.id
    assert second.user_id == other_user.id


@pytest.mark.asyncio
async def test_create_tag_invalid_color(test_db, user):
    """Test: валидация - неправильный формат цвета."""
    service = TagService(test_db)

    for color in ("red", "#FFF", "18AEF8", "#GGGGGG"):
        with pytest.raises(ValidationError_, match="Invalid color format"):
            await service.create_tag(user.id, name="Work", color=color)


@pytest.mark.asyncio
async def test_update_tag(test_db, user):
    """Test: переименование, смена и сброс цвета."""
    service = TagService(test_db)
    tag = await service.create_tag(user.id, name="Errands", color="#18AEF8")

    renamed = await service.update_tag(user.id, tag.id, name="Shopping")
    assert renamed.name == "Shopping"
    assert renamed.color == "#18AEF8"

    cleared = await service.update_tag(user.id, tag.id, color=None)
    assert cleared.color is None
    assert cleared.name == "Shopping"


@pytest.mark.asyncio
async def test_update_tag_duplicate_name(test_db, user):
    """Test: переименование в занятое имя - Conflict."""
    service = TagService(test_db)
    await service.create_tag(user.id, name="Work")
    tag = await service.create_tag(user.id, name="Home")

    with pytest.raises(ConflictError):
        await service.update_tag(user.id, tag.id, name="Work")


@pytest.mark.asyncio
async def test_update_tag_nothing_to_update(test_db, user):
    """Test: пустое обновление тега отклоняется."""
    service = TagService(test_db)
    tag = await service.create_tag(user.id, name="Work")

    with pytest.raises(ValidationError_):
        await service.update_tag(user.id, tag.id)


@pytest.mark.asyncio
async def test_delete_tag_keeps_todo(test_db, user):
    """Test: удаление тега отвязывает его, задача остаётся."""
    todos = TodoService(test_db)
    tags = TagService(test_db)
    todo = await todos.create_todo(user.id, title="Buy milk")
    tag = await tags.create_tag(user.id, name="Errands")
    await todos.attach_tag(user.id, todo.id, tag.id)

    await tags.delete_tag(user.id, tag.id)

    item = await todos.get_todo(user.id, todo.id)
    assert item.tags == []
    assert await tags.list_tags(user.id) == []


# ============================================================================
# AUTH SERVICE TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_sign_up_and_resolve_session(test_db):
    """Test: регистрация открывает сессию, токен находит пользователя."""
    auth = AuthService(test_db)

    result = await auth.sign_up("Alice", "Alice@Example.com", "correct-horse")

    assert result.user.email == "alice@example.com"
    assert result.session.token
    resolved = await auth.resolve_session(result.session.token)
    assert resolved is not None
    assert resolved.id == result.user.id


@pytest.mark.asyncio
async def test_sign_up_duplicate_email(test_db):
    """Test: повторная регистрация с тем же email - Conflict."""
    auth = AuthService(test_db)
    await auth.sign_up("Alice", "alice@example.com", "correct-horse")

    with pytest.raises(ConflictError):
        await auth.sign_up("Alice 2", "ALICE@example.com", "another-pass")


@pytest.mark.asyncio
async def test_sign_up_short_password(test_db):
    """Test: пароль короче 8 символов."""
    with pytest.raises(ValidationError_, match="at least 8"):
        await AuthService(test_db).sign_up("Alice", "alice@example.com", "short")


@pytest.mark.asyncio
async def test_sign_in(test_db):
    """Test: вход с верным и неверным паролем."""
    auth = AuthService(test_db)
    await auth.sign_up("Alice", "alice@example.com", "correct-horse")

    result = await auth.sign_in("alice@example.com", "correct-horse")
    assert result.user.email == "alice@example.com"

    with pytest.raises(AuthenticationError, match="Invalid email or password"):
        await auth.sign_in("alice@example.com", "wrong-horse")

    with pytest.raises(AuthenticationError, match="Invalid email or password"):
        await auth.sign_in("nobody@example.com", "correct-horse")


@pytest.mark.asyncio
async def test_sign_out(test_db):
    """Test: после выхода токен недействителен."""
    auth = AuthService(test_db)
    result = await auth.sign_up("Alice", "alice@example.com", "correct-horse")

    assert await auth.sign_out(result.session.token) is True
    assert await auth.resolve_session(result.session.token) is None
    assert await auth.sign_out(result.session.token) is False


@pytest.mark.asyncio
async def test_expired_session_is_removed(test_db):
    """Test: истёкшая сессия не действует и удаляется."""
    auth = AuthService(test_db)
    result = await auth.sign_up("Alice", "alice@example.com", "correct-horse")
    result.session.expires_at = utc_now() - timedelta(minutes=1)
    await test_db.flush()

    assert await auth.resolve_session(result.session.token) is None
    assert await SessionRepository(test_db).get_by_token(result.session.token) is None


@pytest.mark.asyncio
async def test_delete_user_cascades(test_db):
    """Test: удаление пользователя удаляет его задачи и теги."""
    auth = AuthService(test_db)
    result = await auth.sign_up("Alice", "alice@example.com", "correct-horse")
    user_id = result.user.id
    todo = await TodoService(test_db).create_todo(user_id, title="Buy milk")
    await TagService(test_db).create_tag(user_id, name="Errands")

    await auth.delete_user(user_id)

    assert await TodoService(test_db).todo_repo.get_by_id(todo.id) is None
    assert await TagService(test_db).list_tags(user_id) == []
    assert await auth.resolve_session(result.session.token) is None

    with pytest.raises(NotFoundError, match="User not found"):
        await auth.delete_user(user_id)
