# src/shared/models/common.py
"""
Общие модели для всех сервисов.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Конверт ответа шлюза: {success, message, data}."""
    
    success: bool = True
    message: str = ""
    data: T | None = None


class ErrorResponse(BaseModel):
    """Стандартный ответ с ошибкой (внутренние сервисы)."""
    
    error_code: str
    message: str
    details: dict[str, Any] | None = None


class AffectedResponse(BaseModel):
    """Результат UPDATE: количество затронутых строк."""
    
    affected: int = 0

    @property
    def changed(self) -> bool:
        return self.affected > 0


class ExistsResponse(BaseModel):
    """Результат проверки существования."""
    
    exists: bool


class HealthStatus(BaseModel):
    """Статус здоровья сервиса."""
    
    service: str
    status: str = "healthy"  # healthy, degraded, unhealthy
    version: str | None = None
    dependencies: dict[str, str] = Field(default_factory=dict)
