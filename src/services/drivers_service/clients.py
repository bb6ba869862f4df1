# src/services/drivers_service/clients.py
"""
Клиенты соседних сервисов для проверок существования.
"""

from __future__ import annotations

from src.common.exceptions import NotFoundError
from src.infra.http_client import ServiceClient


class UsersClient(ServiceClient):
    """auth_service: существование пользователя."""
    
    service_name = "auth_service"
    
    async def user_exists(self, user_id: int) -> bool:
        data = await self.get(f"/api/v1/users/{user_id}/exists")
        return bool(data and data.get("exists"))


class MachineryTypesClient(ServiceClient):
    """vehicles_service: справочник типов техники."""
    
    service_name = "vehicles_service"
    
    async def machinery_type_exists(self, machinery_type_id: int) -> bool:
        try:
            await self.get(f"/api/v1/machinery-types/{machinery_type_id}")
        except NotFoundError:
            return False
        return True
