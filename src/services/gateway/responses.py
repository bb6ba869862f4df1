# src/services/gateway/responses.py
"""
Конверт ответов шлюза {success, message, data} и обработчики ошибок.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.common.constants import INTERNAL_ERROR_MESSAGE, TypeMsg
from src.common.exceptions import ServiceError
from src.common.logger import log_error, log_info
from src.services.errors import format_validation_errors
from src.shared.models.common import ApiResponse

NO_CHANGES_MESSAGE = "No changes were made"


def ok(data: Any = None, message: str = "OK") -> ApiResponse[Any]:
    return ApiResponse(success=True, message=message, data=data)


def affected_response(affected: int, message: str) -> ApiResponse[Any]:
    """0 затронутых строк не ошибка: success=false с пояснением."""
    if affected > 0:
        return ApiResponse(success=True, message=message, data={"affected": affected})
    return ApiResponse(success=False, message=NO_CHANGES_MESSAGE, data={"affected": 0})


def error_body(message: str, error_code: str, data: Any = None) -> dict[str, Any]:
    return {"success": False, "message": message, "error_code": error_code, "data": data}


def error_response(exc: ServiceError, data: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.error_code, data if data is not None else (exc.details or None)),
    )


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    level = TypeMsg.ERROR if exc.status_code >= 500 else TypeMsg.WARNING
    await log_info(
        f"{request.method} {request.url.path} -> {exc.status_code} {exc.error_code}: {exc.message}",
        type_msg=level,
    )
    return error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = format_validation_errors(exc)
    await log_info(f"{request.method} {request.url.path} -> 400: {message}", type_msg=TypeMsg.WARNING)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(message, "invalid_argument"),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    await log_error(f"{request.method} {request.url.path}: необработанная ошибка {exc!r}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(INTERNAL_ERROR_MESSAGE, "internal"),
    )


def register_gateway_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
