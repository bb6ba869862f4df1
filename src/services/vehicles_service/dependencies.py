from src.infra.database import DatabaseManager
from src.services.vehicles_service.repository import MachineryTypeRepository, VehicleRepository
from src.services.vehicles_service.service import MachineryTypeService, VehicleService


def get_vehicle_repository() -> VehicleRepository:
    return VehicleRepository(DatabaseManager())


def get_machinery_type_repository() -> MachineryTypeRepository:
    return MachineryTypeRepository(DatabaseManager())


def get_vehicle_service() -> VehicleService:
    return VehicleService(get_vehicle_repository(), get_machinery_type_repository())


def get_machinery_type_service() -> MachineryTypeService:
    return MachineryTypeService(get_machinery_type_repository())
