"""
Dependencies для FastAPI endpoints.

Dependency Injection (DI): FastAPI сам создаёт сессию БД, сервисы
и текущего пользователя и передаёт их в endpoint:

    async def list_todos(
        user: User = Depends(get_current_user),
        service: TodoService = Depends(get_todo_service),
    ):
        ...

get_db вызывается один раз на запрос (FastAPI кэширует зависимости),
поэтому get_current_user и сервисы работают в одной сессии и одной транзакции.
"""

from fastapi import Depends
from fastapi.security import APIKeyCookie, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.database import get_db
from ..core.exceptions import AuthenticationError
from ..core.logging import user_id_var
from ..models import User
from ..services import AuthService, TagService, TodoService

# ============================================================================
# SESSION AUTHENTICATION
# ============================================================================

# Браузер присылает токен в cookie, API клиенты - в заголовке Authorization.
# auto_error=False: отсутствие токена обрабатываем сами (401 в нашем формате)
session_cookie = APIKeyCookie(
    name=settings.SESSION_COOKIE_NAME,
    auto_error=False,
    description="Токен сессии в cookie (выставляется /api/auth/sign-in)",
)
bearer_scheme = HTTPBearer(
    auto_error=False,
    description="Токен сессии: Authorization: Bearer <token>",
)


async def get_session_token(
    cookie_token: str | None = Depends(session_cookie),
    bearer: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    """Токен сессии из заголовка Authorization (приоритет) или из cookie."""
    if bearer and bearer.credentials:
        return bearer.credentials
    return cookie_token


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """Dependency для AuthService."""
    return AuthService(db)


async def get_current_user(
    token: str | None = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """
    Dependency для получения текущего пользователя.

    Как работает:
    1. Достаём токен сессии (Bearer или cookie)
    2. Ищем активную сессию в БД
    3. Нет токена / сессия истекла -> 401 Unauthorized

    user.id попадает в контекст логирования: все логи запроса
    содержат user_id.
    """
    if not token:
        raise AuthenticationError("Authentication required")

    user = await auth.resolve_session(token)
    if user is None:
        raise AuthenticationError("Session is invalid or expired")

    user_id_var.set(user.id)
    return user


# ============================================================================
# SERVICE DEPENDENCIES
# ============================================================================


async def get_todo_service(db: AsyncSession = Depends(get_db)) -> TodoService:
    """
    Dependency для TodoService.

    Цепочка зависимостей:
        get_todo_service зависит от get_db
        → FastAPI вызовет get_db()
        → передаст сессию в get_todo_service()
        → вернёт TodoService в endpoint
    """
    return TodoService(db)


async def get_tag_service(db: AsyncSession = Depends(get_db)) -> TagService:
    """Dependency для TagService."""
    return TagService(db)
