# src/services/drivers_service/dependencies.py
"""
Dependency Injection для Drivers Service.
Клиенты соседних сервисов создаются один раз при старте приложения.
"""

from __future__ import annotations

from src.infra.database import DatabaseManager
from src.services.drivers_service.clients import MachineryTypesClient, UsersClient
from src.services.drivers_service.repository import DriverRepository
from src.services.drivers_service.service import DriverService


# Синглтоны
_users_client: UsersClient | None = None
_machinery_types_client: MachineryTypesClient | None = None


def init_dependencies(auth_url: str, vehicles_url: str, timeout: float = 10.0) -> None:
    """Инициализировать клиентов при старте приложения."""
    global _users_client, _machinery_types_client
    _users_client = UsersClient(auth_url, timeout=timeout)
    _machinery_types_client = MachineryTypesClient(vehicles_url, timeout=timeout)


def get_users_client() -> UsersClient:
    if _users_client is None:
        raise RuntimeError("UsersClient не инициализирован. Вызовите init_dependencies()")
    return _users_client


def get_machinery_types_client() -> MachineryTypesClient:
    if _machinery_types_client is None:
        raise RuntimeError("MachineryTypesClient не инициализирован. Вызовите init_dependencies()")
    return _machinery_types_client


def get_driver_repository() -> DriverRepository:
    return DriverRepository(DatabaseManager())


def get_driver_service() -> DriverService:
    return DriverService(get_driver_repository(), get_users_client(), get_machinery_types_client())


async def cleanup_dependencies() -> None:
    """Закрыть клиентов при остановке приложения."""
    global _users_client, _machinery_types_client
    for client in (_users_client, _machinery_types_client):
        if client:
            await client.close()
    _users_client = None
    _machinery_types_client = None
