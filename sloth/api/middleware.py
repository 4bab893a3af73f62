"""HTTP middleware for request logging and tracing."""

import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.logging import generate_request_id, get_logger, request_id_var, user_id_var

logger = get_logger("sloth.requests")

# Служебные пути не логируем
_QUIET_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware для логирования HTTP запросов.

    Логирует метод, путь, статус, время выполнения (мс) и IP клиента.
    Request ID пробрасывается в логи через contextvar и возвращается
    клиенту в заголовке X-Request-ID.

    Пример лога (JSON):
    {
        "timestamp": "2026-10-19T12:00:00+00:00",
        "level": "INFO",
        "logger": "sloth.requests",
        "message": "Request completed",
        "request_id": "abc-123",
        "extra": {
            "method": "PATCH",
            "path": "/api/todos/5f0c...",
            "status": 200,
            "duration_ms": 12,
            "client_ip": "127.0.0.1"
        }
    }
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        # Клиент может передать свой ID для сквозной трассировки
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        request_id_var.set(request_id)
        user_id_var.set("")

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            logger.error(
                "Request failed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": duration_ms,
                    "client_ip": client_ip,
                    "error": str(e),
                },
                exc_info=True,
            )
            raise

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        response.headers["X-Request-ID"] = request_id

        if request.url.path not in _QUIET_PATHS:
            log = logger.info if response.status_code < 400 else logger.warning
            log(
                "Request completed",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": duration_ms,
                    "client_ip": client_ip,
                },
            )

        return response
