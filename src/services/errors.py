# src/services/errors.py
"""
Обработчики ошибок FastAPI, общие для всех сервисов.
ServiceError и ошибки валидации запроса превращаются в ErrorResponse.
"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.common.constants import INTERNAL_ERROR_MESSAGE, TypeMsg
from src.common.exceptions import ServiceError
from src.common.logger import log_error, log_info
from src.shared.models.common import ErrorResponse


def format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts)


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    level = TypeMsg.ERROR if exc.status_code >= 500 else TypeMsg.WARNING
    await log_info(
        f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_code}: {exc.message}",
        type_msg=level,
    )
    body = ErrorResponse(error_code=exc.error_code, message=exc.message, details=exc.details or None)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = format_validation_errors(exc)
    await log_info(f"{request.method} {request.url.path} -> 400: {message}", type_msg=TypeMsg.WARNING)
    body = ErrorResponse(error_code="invalid_argument", message=message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump(mode="json"))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Детали наружу не отдаём, только в лог
    await log_error(f"{request.method} {request.url.path}: необработанная ошибка {exc!r}", exc_info=True)
    body = ErrorResponse(error_code="internal", message=INTERNAL_ERROR_MESSAGE)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump(mode="json"))


def register_exception_handlers(app: FastAPI) -> None:
    """Регистрирует обработчики на приложении сервиса."""
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
