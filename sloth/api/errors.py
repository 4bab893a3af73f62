"""
Обработчики ошибок (Exception Handlers) для API.

Зачем нужны exception handlers?
1. Единый формат ошибок {"success": false, "error": ...} для всего API
2. Перехват ошибок Pydantic (422) и преобразование в наш формат
3. Логирование ошибок
4. Скрытие внутренних деталей от клиента

Сервисы бросают исключения из core/exceptions.py, роуты их не ловят:
обработчик сам выбирает HTTP статус по типу исключения.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.exceptions import AppError
from .schemas import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)

_HTTP_ERROR_CODES = {
    status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_409_CONFLICT: "CONFLICT",
}


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: list[ErrorDetail] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build a JSON error response in the common envelope."""
    body = ErrorResponse(error=message, code=code, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """
    Обработчик доменных ошибок (NotFoundError, ConflictError, ...).
    """
    logger.warning(
        "API error",
        extra={"code": exc.code, "error": exc.message, "path": request.url.path},
    )

    details = None
    if exc.details:
        details = [ErrorDetail(field=d["field"], message=d["message"]) for d in exc.details]

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return error_response(exc.status_code, exc.code, exc.message, details, headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Обработчик ошибок валидации Pydantic (422).

    Pydantic возвращает ошибки в своём формате:
    {"detail": [{"type": "string_too_short", "loc": ["body", "title"], "msg": "..."}]}

    Мы преобразуем это в наш формат:
    {
        "success": false,
        "error": "Invalid request data",
        "code": "VALIDATION_ERROR",
        "details": [{"field": "title", "message": "..."}]
    }
    """
    logger.warning("Validation error", extra={"errors": str(exc.errors())})

    details = []
    for error in exc.errors():
        # loc - путь к полю: ["body", "title"], ["query", "limit"] или ["body"]
        location = [str(part) for part in error.get("loc", [])]
        if location and location[0] in ("body", "query", "path"):
            location = location[1:]
        details.append(
            ErrorDetail(
                field=".".join(location) if location else "body",
                message=error.get("msg", "Invalid value"),
            )
        )

    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "VALIDATION_ERROR", "Invalid request data", details
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """HTTPException (404 неизвестного пути, 405, ...) в едином формате."""
    code = _HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    return error_response(exc.status_code, code, str(exc.detail), headers=exc.headers)


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Обработчик для всех остальных ошибок (500).

    Полная ошибка уходит в лог, клиент видит только общее сообщение.
    """
    logger.error(
        "Unhandled error",
        extra={"path": request.url.path, "error_type": type(exc).__name__},
        exc_info=exc,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "Internal server error"
    )


def register_error_handlers(app: FastAPI) -> None:
    """
    Регистрирует все error handlers в приложении FastAPI.

    Вызывается из main.py:
        register_error_handlers(app)
    """
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    logger.debug("Error handlers registered")
