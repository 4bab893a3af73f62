"""
API endpoints аутентификации.

Сессии хранятся в БД. Токен сессии отдаётся:
- в httponly cookie (для браузера)
- в теле ответа (для API клиентов: Authorization: Bearer <token>)
"""

from fastapi import APIRouter, Depends, Request, Response, status

from ..core.config import settings
from ..models import User
from ..services import AuthResult, AuthService
from .dependencies import get_auth_service, get_current_user, get_session_token
from .schemas import (
    ErrorResponse,
    MutationResponse,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
    UserResponse,
)

router = APIRouter(prefix="/auth", tags=["auth"])


def _client_info(request: Request) -> tuple[str | None, str | None]:
    ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("user-agent")


def _set_session_cookie(response: Response, result: AuthResult) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=result.session.token,
        max_age=settings.SESSION_TTL_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )


def _session_response(result: AuthResult) -> SessionResponse:
    return SessionResponse(
        user=UserResponse.model_validate(result.user),
        token=result.session.token,
        expires_at=result.session.expires_at,
    )


# ============================================================================
# SIGN UP / SIGN IN
# ============================================================================


@router.post(
    "/sign-up",
    response_model=MutationResponse[SessionResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Регистрация",
    responses={409: {"model": ErrorResponse, "description": "Email уже зарегистрирован"}},
)
async def sign_up(
    data: SignUpRequest,
    request: Request,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
) -> MutationResponse[SessionResponse]:
    """
    Зарегистрироваться и сразу получить сессию.

    Пример запроса:
    ```json
    {"name": "Alice", "email": "alice@example.com", "password": "correct-horse"}
    ```
    """
    ip_address, user_agent = _client_info(request)
    result = await auth.sign_up(data.name, data.email, data.password, ip_address, user_agent)
    _set_session_cookie(response, result)
    return MutationResponse[SessionResponse](
        data=_session_response(result), message="Signed up successfully"
    )


@router.post(
    "/sign-in",
    response_model=MutationResponse[SessionResponse],
    summary="Вход",
    responses={401: {"model": ErrorResponse, "description": "Неверный email или пароль"}},
)
async def sign_in(
    data: SignInRequest,
    request: Request,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
) -> MutationResponse[SessionResponse]:
    """
    Войти по email и паролю.

    Пример запроса:
    ```json
    {"email": "alice@example.com", "password": "correct-horse"}
    ```
    """
    ip_address, user_agent = _client_info(request)
    result = await auth.sign_in(data.email, data.password, ip_address, user_agent)
    _set_session_cookie(response, result)
    return MutationResponse[SessionResponse](
        data=_session_response(result), message="Signed in successfully"
    )


# ============================================================================
# SESSION
# ============================================================================


@router.post("/sign-out", response_model=MutationResponse[None], summary="Выход")
async def sign_out(
    response: Response,
    token: str | None = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
) -> MutationResponse[None]:
    """Закрыть текущую сессию. Без сессии запрос тоже успешен."""
    if token:
        await auth.sign_out(token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return MutationResponse[None](message="Signed out successfully")


@router.get(
    "/session",
    response_model=UserResponse,
    summary="Текущий пользователь",
    responses={401: {"model": ErrorResponse, "description": "Нет активной сессии"}},
)
async def get_session(user: User = Depends(get_current_user)) -> UserResponse:
    """Пользователь текущей сессии."""
    return UserResponse.model_validate(user)


# ============================================================================
# DELETE ACCOUNT
# ============================================================================


@router.delete(
    "/user",
    response_model=MutationResponse[None],
    summary="Удалить аккаунт",
    description="Удаляет пользователя вместе со всеми задачами, тегами и сессиями.",
    responses={401: {"model": ErrorResponse, "description": "Нет активной сессии"}},
)
async def delete_user(
    response: Response,
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
) -> MutationResponse[None]:
    """Удалить текущего пользователя."""
    await auth.delete_user(user.id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return MutationResponse[None](message="User deleted successfully")
