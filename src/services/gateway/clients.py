# src/services/gateway/clients.py
"""
Клиенты внутренних сервисов для шлюза.
Ответы валидируются в общие DTO, ошибки приходят исключениями ServiceError.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from src.infra.http_client import ServiceClient
from src.shared.models.driver_dto import CreateDriverRequest, DriverDTO, DriverFilter, UpdateDriverRequest
from src.shared.models.user_dto import (
    CreateUserRequest,
    CreateUserResponse,
    ForgotPasswordResponse,
    LoginResponse,
    RoleDTO,
    UpdateUserRequest,
    UserDTO,
)
from src.shared.models.vehicle_dto import MachineryTypeDTO, VehicleDTO, VehicleFilter, VehicleRequest


def _affected(data: Any) -> int:
    return int((data or {}).get("affected", 0))


def _exists(data: Any) -> bool:
    return bool((data or {}).get("exists"))


class AuthClient(ServiceClient):
    service_name = "auth_service"
    
    async def create_user(self, request: CreateUserRequest) -> CreateUserResponse:
        data = await self.post("/api/v1/users", json=request.model_dump(mode="json"))
        return CreateUserResponse.model_validate(data)
    
    async def list_users(self) -> list[UserDTO]:
        return [UserDTO.model_validate(item) for item in await self.get("/api/v1/users")]
    
    async def get_user(self, user_id: int) -> UserDTO:
        return UserDTO.model_validate(await self.get(f"/api/v1/users/{user_id}"))
    
    async def update_user(self, user_id: int, request: UpdateUserRequest) -> int:
        return _affected(await self.put(f"/api/v1/users/{user_id}", json=request.model_dump(mode="json")))
    
    async def update_user_status(self, user_id: int, status: int) -> int:
        return _affected(await self.patch(f"/api/v1/users/{user_id}/status", json={"status": status}))
    
    async def user_exists(self, user_id: int) -> bool:
        return _exists(await self.get(f"/api/v1/users/{user_id}/exists"))
    
    async def list_roles(self) -> list[RoleDTO]:
        return [RoleDTO.model_validate(item) for item in await self.get("/api/v1/roles")]
    
    async def login(self, username: str, password: str) -> LoginResponse:
        data = await self.post("/api/v1/auth/login", json={"username": username, "password": password})
        return LoginResponse.model_validate(data)
    
    async def forgot_password(self, username_or_email: str) -> ForgotPasswordResponse:
        data = await self.post(
            "/api/v1/auth/forgot-password",
            json={"username_or_email": username_or_email},
        )
        return ForgotPasswordResponse.model_validate(data)


class DriversClient(ServiceClient):
    service_name = "drivers_service"
    
    async def create_driver(self, request: CreateDriverRequest) -> DriverDTO:
        data = await self.post("/api/v1/drivers", json=request.model_dump(mode="json"))
        return DriverDTO.model_validate(data)
    
    async def list_drivers(self) -> list[DriverDTO]:
        return [DriverDTO.model_validate(item) for item in await self.get("/api/v1/drivers")]
    
    async def get_driver(self, driver_id: int) -> DriverDTO:
        return DriverDTO.model_validate(await self.get(f"/api/v1/drivers/{driver_id}"))
    
    async def update_driver(self, driver_id: int, request: UpdateDriverRequest) -> int:
        return _affected(await self.put(f"/api/v1/drivers/{driver_id}", json=request.model_dump(mode="json")))
    
    async def update_driver_status(self, driver_id: int, status: bool) -> int:
        return _affected(await self.patch(f"/api/v1/drivers/{driver_id}/status", json={"status": status}))
    
    async def update_driver_availability(self, driver_id: int, available: bool) -> int:
        return _affected(
            await self.patch(f"/api/v1/drivers/{driver_id}/availability", json={"available": available})
        )
    
    async def assign_user(self, driver_id: int, user_id: int) -> int:
        return _affected(await self.patch(f"/api/v1/drivers/{driver_id}/user", json={"user_id": user_id}))
    
    async def search_drivers(self, filters: DriverFilter) -> list[DriverDTO]:
        data = await self.get("/api/v1/drivers/search", **filters.model_dump(mode="json"))
        return [DriverDTO.model_validate(item) for item in data]
    
    async def search_drivers_by_term(self, term: str) -> list[DriverDTO]:
        data = await self.get(f"/api/v1/drivers/search/{quote(term, safe='')}")
        return [DriverDTO.model_validate(item) for item in data]


class VehiclesClient(ServiceClient):
    service_name = "vehicles_service"
    
    async def create_vehicle(self, request: VehicleRequest) -> VehicleDTO:
        data = await self.post("/api/v1/vehicles", json=request.model_dump(mode="json"))
        return VehicleDTO.model_validate(data)
    
    async def list_vehicles(self) -> list[VehicleDTO]:
        return [VehicleDTO.model_validate(item) for item in await self.get("/api/v1/vehicles")]
    
    async def get_vehicle(self, vehicle_id: int) -> VehicleDTO:
        return VehicleDTO.model_validate(await self.get(f"/api/v1/vehicles/{vehicle_id}"))
    
    async def update_vehicle(self, vehicle_id: int, request: VehicleRequest) -> int:
        return _affected(await self.put(f"/api/v1/vehicles/{vehicle_id}", json=request.model_dump(mode="json")))
    
    async def update_vehicle_status(self, vehicle_id: int, status: bool) -> int:
        return _affected(await self.patch(f"/api/v1/vehicles/{vehicle_id}/status", json={"status": status}))
    
    async def plate_exists(self, plate: str) -> bool:
        return _exists(await self.get(f"/api/v1/vehicles/exists/{quote(plate, safe='')}"))
    
    async def search_vehicles(self, filters: VehicleFilter) -> list[VehicleDTO]:
        data = await self.get("/api/v1/vehicles/search", **filters.model_dump(mode="json"))
        return [VehicleDTO.model_validate(item) for item in data]
    
    async def search_vehicles_by_term(self, term: str) -> list[VehicleDTO]:
        data = await self.get(f"/api/v1/vehicles/search/{quote(term, safe='')}")
        return [VehicleDTO.model_validate(item) for item in data]
    
    async def list_machinery_types(self) -> list[MachineryTypeDTO]:
        return [MachineryTypeDTO.model_validate(item) for item in await self.get("/api/v1/machinery-types")]
