from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from src.services.drivers_service.dependencies import get_driver_service
from src.services.drivers_service.service import DriverService
from src.shared.models.common import AffectedResponse, ExistsResponse
from src.shared.models.driver_dto import (
    AssignUserRequest,
    CreateDriverRequest,
    DriverDTO,
    DriverFilter,
    UpdateDriverAvailabilityRequest,
    UpdateDriverRequest,
    UpdateDriverStatusRequest,
)

router = APIRouter(prefix="/drivers", tags=["drivers"])


@router.post("", response_model=DriverDTO, status_code=status.HTTP_201_CREATED)
async def create_driver(
    request: CreateDriverRequest,
    service: DriverService = Depends(get_driver_service),
):
    return await service.create_driver(request)


@router.get("", response_model=List[DriverDTO])
async def list_drivers(service: DriverService = Depends(get_driver_service)):
    """Активные водители."""
    return await service.list_drivers()


@router.get("/search", response_model=List[DriverDTO])
async def search_drivers(
    driver_status: Optional[bool] = Query(None, alias="status"),
    machinery_type_id: Optional[int] = None,
    available: Optional[bool] = None,
    birth_date_from: Optional[date] = None,
    birth_date_to: Optional[date] = None,
    service: DriverService = Depends(get_driver_service),
):
    filters = DriverFilter(
        status=driver_status,
        machinery_type_id=machinery_type_id,
        available=available,
        birth_date_from=birth_date_from,
        birth_date_to=birth_date_to,
    )
    return await service.search_drivers(filters)


@router.get("/search/{term:path}", response_model=List[DriverDTO])
async def search_drivers_by_term(term: str, service: DriverService = Depends(get_driver_service)):
    return await service.search_drivers_by_term(term)


@router.get("/exists", response_model=ExistsResponse)
async def identification_exists(
    identification: str = "",
    service: DriverService = Depends(get_driver_service),
):
    return ExistsResponse(exists=await service.identification_exists(identification))


@router.get("/{driver_id}", response_model=DriverDTO)
async def get_driver(driver_id: int, service: DriverService = Depends(get_driver_service)):
    return await service.get_driver(driver_id)


@router.put("/{driver_id}", response_model=AffectedResponse)
async def update_driver(
    driver_id: int,
    request: UpdateDriverRequest,
    service: DriverService = Depends(get_driver_service),
):
    return AffectedResponse(affected=await service.update_driver(driver_id, request))


@router.patch("/{driver_id}/status", response_model=AffectedResponse)
async def update_driver_status(
    driver_id: int,
    request: UpdateDriverStatusRequest,
    service: DriverService = Depends(get_driver_service),
):
    return AffectedResponse(affected=await service.update_driver_status(driver_id, request.status))


@router.patch("/{driver_id}/availability", response_model=AffectedResponse)
async def update_driver_availability(
    driver_id: int,
    request: UpdateDriverAvailabilityRequest,
    service: DriverService = Depends(get_driver_service),
):
    return AffectedResponse(
        affected=await service.update_driver_availability(driver_id, request.available)
    )


@router.patch("/{driver_id}/user", response_model=AffectedResponse)
async def assign_user(
    driver_id: int,
    request: AssignUserRequest,
    service: DriverService = Depends(get_driver_service),
):
    return AffectedResponse(affected=await service.assign_user(driver_id, request.user_id))
