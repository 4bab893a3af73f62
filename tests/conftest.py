"""
Pytest fixtures для тестов.

Предоставляет:
- test_db: изолированная SQLite in-memory БД для каждого теста
- user / other_user: владельцы задач и тегов для тестов сервисов
- test_client: HTTP клиент для тестирования API endpoints
- auth_headers / other_auth_headers: Bearer токены двух пользователей
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sloth.core.database import create_engine_for, get_db
from sloth.main import app
from sloth.models import Base, User
from sloth.repositories import UserRepository

# Test database URL (SQLite in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """
    Создаёт async engine для тестовой БД (SQLite in-memory).

    create_engine_for включает StaticPool (одно соединение, иначе
    in-memory БД теряется) и PRAGMA foreign_keys=ON (иначе
    ON DELETE CASCADE в SQLite не работает).

    Таблицы пересоздаются для каждого теста.
    """
    engine = create_engine_for(TEST_DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(test_engine):
    """Async session для работы с тестовой БД."""
    TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def user(test_db) -> User:
    """Пользователь A."""
    created = await UserRepository(test_db).create(User(name="Alice", email="alice@example.com"))
    await test_db.commit()
    return created


@pytest_asyncio.fixture
async def other_user(test_db) -> User:
    """Пользователь B."""
    created = await UserRepository(test_db).create(User(name="Bob", email="bob@example.com"))
    await test_db.commit()
    return created


@pytest_asyncio.fixture
async def test_client(test_engine):
    """
    HTTP клиент для тестирования API endpoints.

    Использует тестовую БД вместо production БД.
    """
    TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with TestSessionLocal() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def sign_up(client: AsyncClient, name: str, email: str) -> dict[str, str]:
    """Зарегистрировать пользователя и вернуть заголовки с его токеном."""
    response = await client.post(
        "/api/auth/sign-up",
        json={"name": name, "email": email, "password": "correct-horse"},
    )
    assert response.status_code == 201, response.json()
    token = response.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def auth_headers(test_client) -> dict[str, str]:
    return await sign_up(test_client, "Alice", "alice@example.com")


@pytest_asyncio.fixture
async def other_auth_headers(test_client) -> dict[str, str]:
    return await sign_up(test_client, "Bob", "bob@example.com")


@pytest.fixture(scope="session")
def anyio_backend():
    """Используем asyncio для всех async тестов."""
    return "asyncio"
