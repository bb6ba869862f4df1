from typing import List, Optional

from src.common.constants import TypeMsg
from src.common.exceptions import ConflictError, NotFoundError, ValidationError
from src.common.logger import log_info
from src.services.vehicles_service.repository import MachineryTypeRepository, VehicleRepository
from src.shared.models.vehicle_dto import MachineryTypeDTO, VehicleDTO, VehicleFilter, VehicleRequest


def collect_vehicle_errors(request: VehicleRequest) -> List[str]:
    errors = [
        f"{label} is required"
        for label, value in (
            ("Plate", request.plate), ("Name", request.name),
            ("Brand", request.brand), ("Model", request.model),
        )
        if not value.strip()
    ]
    if request.machinery_type_id <= 0:
        errors.append("Machinery type id must be greater than 0")
    if request.fuel_consumption_km <= 0:
        errors.append("Fuel consumption per km must be greater than 0")
    if request.fuel_capacity <= 0:
        errors.append("Fuel capacity must be greater than 0")
    return errors


class MachineryTypeService:
    def __init__(self, types: MachineryTypeRepository):
        self.types = types

    async def list_machinery_types(self) -> List[MachineryTypeDTO]:
        return await self.types.get_active_machinery_types()

    async def get_machinery_type(self, type_id: int) -> MachineryTypeDTO:
        machinery_type = await self.types.get_machinery_type_by_id(type_id)
        if not machinery_type:
            raise NotFoundError(f"Machinery type {type_id} not found")
        return machinery_type


class VehicleService:
    def __init__(self, vehicles: VehicleRepository, types: MachineryTypeRepository):
        self.vehicles = vehicles
        self.types = types

    async def _check_request(self, request: VehicleRequest, vehicle_id: Optional[int] = None) -> None:
        """
        Валидация полей, затем существование типа техники
        и уникальность номера (кроме самого ТС при обновлении).
        """
        errors = collect_vehicle_errors(request)
        if errors:
            raise ValidationError("; ".join(errors))
        if not await self.types.get_machinery_type_by_id(request.machinery_type_id):
            raise NotFoundError(f"Machinery type {request.machinery_type_id} not found")
        plate = request.plate.strip()
        if await self.vehicles.plate_exists(plate, exclude_id=vehicle_id):
            raise ConflictError(f"Plate {plate} is already registered")

    async def create_vehicle(self, request: VehicleRequest) -> VehicleDTO:
        await self._check_request(request)
        vehicle = await self.vehicles.create_vehicle(request)
        await log_info(f"Создано ТС {vehicle.id} ({vehicle.plate})", type_msg=TypeMsg.INFO)
        return vehicle

    async def update_vehicle(self, vehicle_id: int, request: VehicleRequest) -> int:
        await self.get_vehicle(vehicle_id)
        await self._check_request(request, vehicle_id)
        return await self.vehicles.update_vehicle(vehicle_id, request)

    async def list_vehicles(self) -> List[VehicleDTO]:
        return await self.vehicles.get_active_vehicles()

    async def get_vehicle(self, vehicle_id: int) -> VehicleDTO:
        vehicle = await self.vehicles.get_vehicle_by_id(vehicle_id)
        if not vehicle:
            raise NotFoundError(f"Vehicle {vehicle_id} not found")
        return vehicle

    async def update_vehicle_status(self, vehicle_id: int, status: bool) -> int:
        await self.get_vehicle(vehicle_id)
        return await self.vehicles.update_status(vehicle_id, status)

    async def plate_exists(self, plate: str) -> bool:
        plate = plate.strip()
        if not plate:
            raise ValidationError("Plate is required")
        return await self.vehicles.plate_exists(plate)

    async def search_vehicles(self, filters: VehicleFilter) -> List[VehicleDTO]:
        for low, high, name in (
            (filters.capacity_min, filters.capacity_max, "capacity"),
            (filters.consumption_min, filters.consumption_max, "consumption"),
        ):
            if low is not None and high is not None and low > high:
                raise ValidationError(f"{name}_min must not be greater than {name}_max")
        return await self.vehicles.search_vehicles(filters)

    async def search_vehicles_by_term(self, term: str) -> List[VehicleDTO]:
        term = term.strip()
        if not term:
            return []
        return await self.vehicles.search_by_term(term)
