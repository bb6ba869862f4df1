from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from src.shared.models.enums import VehicleAvailability


class MachineryTypeDTO(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    status: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VehicleDTO(BaseModel):
    id: int
    name: str
    plate: str
    brand: str
    model: str
    machinery_type_id: int
    availability: VehicleAvailability = VehicleAvailability.AVAILABLE
    fuel_consumption_km: float
    fuel_capacity: float
    status: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VehicleRequest(BaseModel):
    """
    Тело создания и обновления транспортного средства.
    Длины и диапазоны совпадают с колонками vehicles_schema.vehicles.
    """
    name: str = Field(default="", max_length=100)
    plate: str = Field(default="", max_length=20)
    brand: str = Field(default="", max_length=50)
    model: str = Field(default="", max_length=50)
    machinery_type_id: int = 0
    availability: VehicleAvailability = VehicleAvailability.AVAILABLE
    # NUMERIC(10, 3) и NUMERIC(10, 2)
    fuel_consumption_km: float = Field(default=0, lt=10_000_000, allow_inf_nan=False)
    fuel_capacity: float = Field(default=0, lt=100_000_000, allow_inf_nan=False)


class VehicleFilter(BaseModel):
    """Фильтр поиска: все поля необязательны."""
    status: Optional[bool] = None
    machinery_type_id: Optional[int] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    capacity_min: Optional[float] = None
    capacity_max: Optional[float] = None
    consumption_min: Optional[float] = None
    consumption_max: Optional[float] = None
    availability: Optional[VehicleAvailability] = None


class UpdateVehicleStatusRequest(BaseModel):
    status: bool
