"""
Доменные исключения.

Сервисы бросают эти исключения, а обработчики из api/errors.py
превращают их в HTTP ответ единого формата:

    {"success": false, "error": "Tag not found", "code": "NOT_FOUND"}

Таксономия:
- NotFoundError       404  ресурса нет или он принадлежит другому пользователю
- ConflictError       409  нарушение уникальности (имя тега, email)
- ValidationError_    400  нарушено бизнес-правило
- AuthenticationError 401  нет сессии или неверные учётные данные
"""


class AppError(Exception):
    """
    Base class for all application errors.

    Использование:
        raise AppError(code="NOT_FOUND", message="Todo not found", status_code=404)
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: list[dict] | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class NotFoundError(AppError):
    """
    Resource is absent or not owned by the caller (404).

    Чужой ресурс неотличим от несуществующего: raise NotFoundError("Todo")
    """

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(code="NOT_FOUND", message=f"{resource} not found", status_code=404)


class ConflictError(AppError):
    """Unique constraint violation (409)."""

    def __init__(self, message: str, field: str | None = None):
        details = [{"field": field, "message": message}] if field else None
        super().__init__(code="CONFLICT", message=message, status_code=409, details=details)


class ValidationError_(AppError):
    """
    Business rule validation failed (400).

    Подчёркивание в имени, чтобы не путать с pydantic.ValidationError.
    """

    def __init__(self, message: str, field: str | None = None):
        details = [{"field": field, "message": message}] if field else None
        super().__init__(code="VALIDATION_ERROR", message=message, status_code=400, details=details)


class AuthenticationError(AppError):
    """Missing/expired session or bad credentials (401)."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(code="UNAUTHORIZED", message=message, status_code=401)
