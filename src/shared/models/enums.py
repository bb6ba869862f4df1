from enum import Enum


class VehicleAvailability(str, Enum):
    """Доступность транспортного средства."""
    AVAILABLE = "Disponible"
    MAINTENANCE = "En mantenimiento"
    UNAVAILABLE = "No Disponible"

    def __str__(self) -> str:
        return self.value


class AssignmentOutcome(str, Enum):
    """Итог операции «создать пользователя и назначить водителю»."""
    ASSIGNED = "assigned"
    COMPENSATED = "compensated"
    COMPENSATION_FAILED = "compensation_failed"

    def __str__(self) -> str:
        return self.value


class AssignmentStage(str, Enum):
    """Этапы операции назначения (только на время одного запроса)."""
    CHECKING_DRIVER = "checking_driver"
    CREATING_USER = "creating_user"
    ASSIGNING = "assigning"
    COMPENSATING = "compensating"
    DONE = "done"

    def __str__(self) -> str:
        return self.value
