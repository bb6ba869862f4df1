# src/infra/http_client.py
"""
HTTP-клиент для синхронных вызовов между микросервисами.

Ответы с ошибкой (ErrorResponse) превращаются обратно в исключения
из src.common.exceptions, поэтому класс ошибки сохраняется между сервисами.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from src.common.exceptions import InternalError, ServiceError, error_from_code
from src.common.logger import log_debug, log_error
from src.shared.models.common import ErrorResponse


def drop_none(params: dict[str, Any]) -> dict[str, Any]:
    """Убирает пустые параметры запроса и приводит bool к строке."""
    cleaned: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        cleaned[key] = value
    return cleaned


class ServiceClient:
    """
    Базовый клиент соседнего сервиса.
    
    Один httpx.AsyncClient на клиент: соединения переиспользуются
    между запросами.
    """
    
    service_name: str = "service"
    
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)
    
    async def close(self) -> None:
        """Закрыть HTTP клиент."""
        await self.http.aclose()
    
    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """
        Выполняет запрос и возвращает JSON ответа.
        
        Raises:
            ServiceError: подкласс по error_code ответа; InternalError при сетевой ошибке
        """
        try:
            response = await self.http.request(
                method,
                path,
                json=json,
                params=drop_none(params) if params else None,
            )
        except httpx.HTTPError as e:
            await log_error(f"{self.service_name}: {method} {path} не выполнен: {e!r}")
            raise InternalError(f"Service {self.service_name} is unavailable") from e
        
        await log_debug(f"{self.service_name}: {method} {path} -> {response.status_code}")
        
        if response.is_success:
            return response.json() if response.content else None
        raise self._to_error(response)
    
    def _to_error(self, response: httpx.Response) -> ServiceError:
        try:
            payload = ErrorResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError):
            return InternalError(
                f"Service {self.service_name} returned HTTP {response.status_code}",
            )
        return error_from_code(payload.error_code, payload.message, payload.details)
    
    async def get(self, path: str, **params: Any) -> Any:
        return await self.request("GET", path, params=params)
    
    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)
    
    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)
    
    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)
    
    async def health(self) -> bool:
        """True, если сервис отвечает 200 на /health."""
        try:
            response = await self.http.get("/health")
        except httpx.HTTPError:
            return False
        return response.status_code == 200
