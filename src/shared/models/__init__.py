# src/shared/models/__init__.py
"""
Общие DTO и Pydantic-модели для межсервисного взаимодействия.
"""

from src.shared.models.user_dto import (
    RoleDTO,
    UserDTO,
    CreateUserRequest,
    CreateUserAndAssignDriverRequest,
)
from src.shared.models.driver_dto import (
    DriverDTO,
    CreateDriverRequest,
    UpdateDriverRequest,
    DriverFilter,
)
from src.shared.models.vehicle_dto import (
    MachineryTypeDTO,
    VehicleDTO,
    VehicleRequest,
    VehicleFilter,
)
from src.shared.models.enums import (
    VehicleAvailability,
    AssignmentOutcome,
    AssignmentStage,
)
from src.shared.models.common import (
    ApiResponse,
    AffectedResponse,
    ErrorResponse,
    ExistsResponse,
    HealthStatus,
)

__all__ = [
    # Users
    "RoleDTO",
    "UserDTO",
    "CreateUserRequest",
    "CreateUserAndAssignDriverRequest",
    # Drivers
    "DriverDTO",
    "CreateDriverRequest",
    "UpdateDriverRequest",
    "DriverFilter",
    # Vehicles
    "MachineryTypeDTO",
    "VehicleDTO",
    "VehicleRequest",
    "VehicleFilter",
    # Enums
    "VehicleAvailability",
    "AssignmentOutcome",
    "AssignmentStage",
    # Common
    "ApiResponse",
    "AffectedResponse",
    "ErrorResponse",
    "ExistsResponse",
    "HealthStatus",
]
