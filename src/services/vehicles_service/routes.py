from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from src.services.vehicles_service.dependencies import get_machinery_type_service, get_vehicle_service
from src.services.vehicles_service.service import MachineryTypeService, VehicleService
from src.shared.models.common import AffectedResponse, ExistsResponse
from src.shared.models.enums import VehicleAvailability
from src.shared.models.vehicle_dto import (
    MachineryTypeDTO,
    UpdateVehicleStatusRequest,
    VehicleDTO,
    VehicleFilter,
    VehicleRequest,
)

router = APIRouter(prefix="/vehicles", tags=["vehicles"])
types_router = APIRouter(prefix="/machinery-types", tags=["machinery-types"])


@router.post("", response_model=VehicleDTO, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    request: VehicleRequest,
    service: VehicleService = Depends(get_vehicle_service),
):
    return await service.create_vehicle(request)


@router.get("", response_model=List[VehicleDTO])
async def list_vehicles(service: VehicleService = Depends(get_vehicle_service)):
    return await service.list_vehicles()


@router.get("/search", response_model=List[VehicleDTO])
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
    service: VehicleService = Depends(get_vehicle_service),
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
    return await service.search_vehicles(filters)


@router.get("/search/{term:path}", response_model=List[VehicleDTO])
async def search_vehicles_by_term(term: str, service: VehicleService = Depends(get_vehicle_service)):
    return await service.search_vehicles_by_term(term)


@router.get("/exists/{plate:path}", response_model=ExistsResponse)
async def plate_exists(plate: str, service: VehicleService = Depends(get_vehicle_service)):
    return ExistsResponse(exists=await service.plate_exists(plate))


@router.get("/{vehicle_id}", response_model=VehicleDTO)
async def get_vehicle(vehicle_id: int, service: VehicleService = Depends(get_vehicle_service)):
    return await service.get_vehicle(vehicle_id)


@router.put("/{vehicle_id}", response_model=AffectedResponse)
async def update_vehicle(
    vehicle_id: int,
    request: VehicleRequest,
    service: VehicleService = Depends(get_vehicle_service),
):
    return AffectedResponse(affected=await service.update_vehicle(vehicle_id, request))


@router.patch("/{vehicle_id}/status", response_model=AffectedResponse)
async def update_vehicle_status(
    vehicle_id: int,
    request: UpdateVehicleStatusRequest,
    service: VehicleService = Depends(get_vehicle_service),
):
    return AffectedResponse(affected=await service.update_vehicle_status(vehicle_id, request.status))


@types_router.get("", response_model=List[MachineryTypeDTO])
async def list_machinery_types(service: MachineryTypeService = Depends(get_machinery_type_service)):
    """Активные типы техники."""
    return await service.list_machinery_types()


@types_router.get("/{type_id}", response_model=MachineryTypeDTO)
async def get_machinery_type(type_id: int, service: MachineryTypeService = Depends(get_machinery_type_service)):
    return await service.get_machinery_type(type_id)
