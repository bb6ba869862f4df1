# src/services/gateway/dependencies.py
"""
Dependency Injection для API Gateway.
"""

from __future__ import annotations

from src.config import settings
from src.config.loader import AuthSettings
from src.services.gateway.clients import AuthClient, DriversClient, VehiclesClient
from src.services.gateway.orchestrator import UserDriverAssignment


# Синглтоны
_auth_client: AuthClient | None = None
_drivers_client: DriversClient | None = None
_vehicles_client: VehiclesClient | None = None


def init_dependencies(
    auth_url: str,
    drivers_url: str,
    vehicles_url: str,
    timeout: float = 10.0,
) -> None:
    """Инициализировать клиентов сервисов при старте приложения."""
    global _auth_client, _drivers_client, _vehicles_client
    _auth_client = AuthClient(auth_url, timeout=timeout)
    _drivers_client = DriversClient(drivers_url, timeout=timeout)
    _vehicles_client = VehiclesClient(vehicles_url, timeout=timeout)


def get_auth_client() -> AuthClient:
    if _auth_client is None:
        raise RuntimeError("AuthClient не инициализирован. Вызовите init_dependencies()")
    return _auth_client


def get_drivers_client() -> DriversClient:
    if _drivers_client is None:
        raise RuntimeError("DriversClient не инициализирован. Вызовите init_dependencies()")
    return _drivers_client


def get_vehicles_client() -> VehiclesClient:
    if _vehicles_client is None:
        raise RuntimeError("VehiclesClient не инициализирован. Вызовите init_dependencies()")
    return _vehicles_client


def get_assignment() -> UserDriverAssignment:
    return UserDriverAssignment(get_auth_client(), get_drivers_client())


def get_auth_settings() -> AuthSettings:
    return settings.auth


async def cleanup_dependencies() -> None:
    """Закрыть HTTP клиентов при остановке приложения."""
    global _auth_client, _drivers_client, _vehicles_client
    for client in (_auth_client, _drivers_client, _vehicles_client):
        if client:
            await client.close()
    _auth_client = None
    _drivers_client = None
    _vehicles_client = None
