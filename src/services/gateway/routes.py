# src/services/gateway/routes.py
"""
Публичные REST маршруты шлюза.

/auth/* открыты, все /api/* требуют Bearer-токен.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from src.common.exceptions import UnauthorizedError
from src.services.gateway.clients import AuthClient, DriversClient, VehiclesClient
from src.services.gateway.dependencies import (
    get_assignment,
    get_auth_client,
    get_drivers_client,
    get_vehicles_client,
)
from src.services.gateway.orchestrator import UserDriverAssignment
from src.services.gateway.responses import affected_response, error_body, error_response, ok
from src.services.gateway.security import get_current_user
from src.shared.models.driver_dto import (
    AssignUserRequest,
    CreateDriverRequest,
    DriverFilter,
    UpdateDriverAvailabilityRequest,
    UpdateDriverRequest,
    UpdateDriverStatusRequest,
)
from src.shared.models.enums import AssignmentOutcome, VehicleAvailability
from src.shared.models.user_dto import (
    CreateUserAndAssignDriverRequest,
    CreateUserRequest,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    UpdateUserRequest,
    UpdateUserStatusRequest,
)
from src.shared.models.vehicle_dto import UpdateVehicleStatusRequest, VehicleFilter, VehicleRequest

auth_router = APIRouter(prefix="/auth", tags=["auth"])
users_router = APIRouter(prefix="/api/usuarios", tags=["usuarios"], dependencies=[Depends(get_current_user)])
drivers_router = APIRouter(prefix="/api/choferes", tags=["choferes"], dependencies=[Depends(get_current_user)])
vehicles_router = APIRouter(prefix="/api/vehiculos", tags=["vehiculos"], dependencies=[Depends(get_current_user)])
types_router = APIRouter(prefix="/api/tipos", tags=["tipos"], dependencies=[Depends(get_current_user)])
roles_router = APIRouter(prefix="/api/roles", tags=["roles"], dependencies=[Depends(get_current_user)])


# =============================================================================
# AUTH
# =============================================================================

@auth_router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, auth: AuthClient = Depends(get_auth_client)):
    """Неверные учётные данные -> 401 с тем же телом LoginResponse."""
    try:
        return await auth.login(request.username, request.password)
    except UnauthorizedError as e:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=LoginResponse(success=False, message=e.message).model_dump(),
        )


@auth_router.post("/forgot-password")
async def forgot_password(request: ForgotPasswordRequest, auth: AuthClient = Depends(get_auth_client)):
    return await auth.forgot_password(request.username_or_email)


# =============================================================================
# USUARIOS
# =============================================================================

@users_router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(request: CreateUserRequest, auth: AuthClient = Depends(get_auth_client)):
    created = await auth.create_user(request)
    return ok(created.user, "User created")


@users_router.get("")
async def list_users(auth: AuthClient = Depends(get_auth_client)):
    return ok(await auth.list_users())


@users_router.post("/crear-y-asignar-chofer")
async def create_user_and_assign_driver(
    request: CreateUserAndAssignDriverRequest,
    assignment: UserDriverAssignment = Depends(get_assignment),
):
    """Создать пользователя и назначить его водителю (с компенсацией)."""
    result = await assignment.run(request)
    
    if result.outcome == AssignmentOutcome.ASSIGNED:
        return ok(result.to_data(), "User created and assigned to driver")
    if result.outcome == AssignmentOutcome.COMPENSATED:
        return error_response(result.error, data=result.to_data())
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            "Assignment failed and the created user could not be deactivated",
            "internal",
            result.to_data(),
        ),
    )


@users_router.get("/{user_id}")
async def get_user(user_id: int, auth: AuthClient = Depends(get_auth_client)):
    return ok(await auth.get_user(user_id))


@users_router.put("/{user_id}")
async def update_user(user_id: int, request: UpdateUserRequest, auth: AuthClient = Depends(get_auth_client)):
    return affected_response(await auth.update_user(user_id, request), "User updated")


@users_router.patch("/{user_id}/estado")
async def update_user_status(
    user_id: int,
    request: UpdateUserStatusRequest,
    auth: AuthClient = Depends(get_auth_client),
):
    return affected_response(await auth.update_user_status(user_id, request.status), "User status updated")


@users_router.get("/{user_id}/existe")
async def user_exists(user_id: int, auth: AuthClient = Depends(get_auth_client)):
    return ok({"exists": await auth.user_exists(user_id)})


# =============================================================================
# CHOFERES
# =============================================================================

@drivers_router.post("", status_code=status.HTTP_201_CREATED)
async def create_driver(request: CreateDriverRequest, drivers: DriversClient = Depends(get_drivers_client)):
    return ok(await drivers.create_driver(request), "Driver created")


@drivers_router.get("")
async def list_drivers(drivers: DriversClient = Depends(get_drivers_client)):
    return ok(await drivers.list_drivers())


@drivers_router.get("/search")
async def search_drivers(
    driver_status: Optional[bool] = Query(None, alias="status"),
    machinery_type_id: Optional[int] = None,
    available: Optional[bool] = None,
    birth_date_from: Optional[date] = None,
    birth_date_to: Optional[date] = None,
    drivers: DriversClient = Depends(get_drivers_client),
):
    filters = DriverFilter(
        status=driver_status,
        machinery_type_id=machinery_type_id,
        available=available,
        birth_date_from=birth_date_from,
        birth_date_to=birth_date_to,
    )
    return ok(await drivers.search_drivers(filters))


@drivers_router.get("/search/{term:path}")
async def search_drivers_by_term(term: str, drivers: DriversClient = Depends(get_drivers_client)):
    return ok(await drivers.search_drivers_by_term(term))


@drivers_router.get("/{driver_id}")
async def get_driver(driver_id: int, drivers: DriversClient = Depends(get_drivers_client)):
    return ok(await drivers.get_driver(driver_id))


@drivers_router.put("/{driver_id}")
async def update_driver(
    driver_id: int,
    request: UpdateDriverRequest,
    drivers: DriversClient = Depends(get_drivers_client),
):
    return affected_response(await drivers.update_driver(driver_id, request), "Driver updated")


@drivers_router.patch("/{driver_id}/estado")
async def update_driver_status(
    driver_id: int,
    request: UpdateDriverStatusRequest,
    drivers: DriversClient = Depends(get_drivers_client),
):
    return affected_response(
        await drivers.update_driver_status(driver_id, request.status), "Driver status updated"
    )


@drivers_router.patch("/{driver_id}/disponibilidad")
async def update_driver_availability(
    driver_id: int,
    request: UpdateDriverAvailabilityRequest,
    drivers: DriversClient = Depends(get_drivers_client),
):
    return affected_response(
        await drivers.update_driver_availability(driver_id, request.available), "Driver availability updated"
    )


@drivers_router.patch("/{driver_id}/asignar-usuario")
async def assign_user(
    driver_id: int,
    request: AssignUserRequest,
    drivers: DriversClient = Depends(get_drivers_client),
):
    return affected_response(await drivers.assign_user(driver_id, request.user_id), "User assigned to driver")


# =============================================================================
# VEHICULOS
# =============================================================================

@vehicles_router.post("", status_code=status.HTTP_201_CREATED)
async def create_vehicle(request: VehicleRequest, vehicles: VehiclesClient = Depends(get_vehicles_client)):
    return ok(await vehicles.create_vehicle(request), "Vehicle created")


@vehicles_router.get("")
async def list_vehicles(vehicles: VehiclesClient = Depends(get_vehicles_client)):
    return ok(await vehicles.list_vehicles())


@vehicles_router.get("/exists/{plate:path}")
async def plate_exists(plate: str, vehicles: VehiclesClient = Depends(get_vehicles_client)):
    return ok({"exists": await vehicles.plate_exists(plate)})


@vehicles_router.get("/search")
async def search_vehicles(
    vehicle_status: Optional[bool] = Query(None, alias="status"),
    machinery_type_id: Optional[int] = None,
    brand: Optional[str] = None,
    model: Optional[str] = None,
    capacity_min: Optional[float] = None,
    capacity_max: Optional[float] = None,
    consumption_min: Optional[float] = None,
    consumption_max: Optional[float] = None,
    availability: Optional[VehicleAvailability] = None,
    vehicles: VehiclesClient = Depends(get_vehicles_client),
):
    filters = VehicleFilter(
        status=vehicle_status,
        machinery_type_id=machinery_type_id,
        brand=brand,
        model=model,
        capacity_min=capacity_min,
        capacity_max=capacity_max,
        consumption_min=consumption_min,
        consumption_max=consumption_max,
        availability=availability,
    )
    return ok(await vehicles.search_vehicles(filters))


@vehicles_router.get("/search/{term:path}")
async def search_vehicles_by_term(term: str, vehicles: VehiclesClient = Depends(get_vehicles_client)):
    return ok(await vehicles.search_vehicles_by_term(term))


@vehicles_router.get("/{vehicle_id}")
async def get_vehicle(vehicle_id: int, vehicles: VehiclesClient = Depends(get_vehicles_client)):
    return ok(await vehicles.get_vehicle(vehicle_id))


@vehicles_router.put("/{vehicle_id}")
async def update_vehicle(
    vehicle_id: int,
    request: VehicleRequest,
    vehicles: VehiclesClient = Depends(get_vehicles_client),
):
    return affected_response(await vehicles.update_vehicle(vehicle_id, request), "Vehicle updated")


@vehicles_router.patch("/{vehicle_id}/estado")
async def update_vehicle_status(
    vehicle_id: int,
    request: UpdateVehicleStatusRequest,
    vehicles: VehiclesClient = Depends(get_vehicles_client),
):
    return affected_response(
        await vehicles.update_vehicle_status(vehicle_id, request.status), "Vehicle status updated"
    )


# =============================================================================
# TIPOS DE MAQUINARIA
# =============================================================================

@types_router.get("")
async def list_machinery_types(vehicles: VehiclesClient = Depends(get_vehicles_client)):
    return ok(await vehicles.list_machinery_types())


# =============================================================================
# ROLES
# =============================================================================

@roles_router.get("")
async def list_roles(auth: AuthClient = Depends(get_auth_client)):
    return ok(await auth.list_roles())
