# src/common/exceptions.py
"""
Иерархия ошибок сервисов.

Каждый класс несёт машинный код (error_code) и HTTP-статус, поэтому
ошибка одинаково понимается внутри сервиса, в ответе API и на стороне
клиента, вызвавшего сервис по HTTP.
"""

from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    """Базовая ошибка сервиса. Соответствует внутренней ошибке."""

    error_code: str = "internal"
    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class ValidationError(ServiceError):
    """Отсутствует или некорректно поле запроса."""
    error_code = "invalid_argument"
    status_code = 400


class UnauthorizedError(ServiceError):
    """Нет токена, токен невалиден или неверные учётные данные."""
    error_code = "unauthorized"
    status_code = 401


class NotFoundError(ServiceError):
    """Сущность не найдена."""
    error_code = "not_found"
    status_code = 404


class ConflictError(ServiceError):
    """Дубликат естественного ключа или уже занятая ссылка."""
    error_code = "conflict"
    status_code = 409


class InternalError(ServiceError):
    """Непредвиденная ошибка, сбой БД или недоступность соседнего сервиса."""


_BY_CODE: dict[str, type[ServiceError]] = {
    cls.error_code: cls
    for cls in (ValidationError, UnauthorizedError, NotFoundError, ConflictError, InternalError)
}


def error_from_code(
    error_code: str | None,
    message: str,
    details: dict[str, Any] | None = None,
) -> ServiceError:
    """Восстанавливает исключение по коду из ErrorResponse."""
    cls = _BY_CODE.get(error_code or "", InternalError)
    return cls(message, details)


def is_rejection(error: ServiceError) -> bool:
    """
    True, если сервис однозначно отклонил запрос и ничего не записал:
    ошибка валидации, not found или конфликт.
    """
    return isinstance(error, (ValidationError, NotFoundError, ConflictError))
