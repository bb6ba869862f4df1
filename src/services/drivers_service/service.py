from datetime import date
from typing import List, Optional

from src.common.constants import MIN_DRIVER_AGE, TypeMsg, UNASSIGNED_USER_ID
from src.common.exceptions import ConflictError, NotFoundError, ValidationError
from src.common.logger import log_info
from src.services.drivers_service.clients import MachineryTypesClient, UsersClient
from src.services.drivers_service.repository import DriverRepository
from src.shared.models.driver_dto import CreateDriverRequest, DriverDTO, DriverFilter, UpdateDriverRequest


def calculate_age(birth_date: date, today: Optional[date] = None) -> int:
    """Полных лет на дату today (с точностью до дня рождения)."""
    today = today or date.today()
    had_birthday = (today.month, today.day) >= (birth_date.month, birth_date.day)
    return today.year - birth_date.year - (0 if had_birthday else 1)


def collect_driver_errors(request: CreateDriverRequest, today: Optional[date] = None) -> List[str]:
    errors = []
    if not request.first_name.strip():
        errors.append("First name is required")
    if not request.first_surname.strip():
        errors.append("First surname is required")
    if not request.identification.strip():
        errors.append("Identification is required")
    if request.machinery_type_id <= 0:
        errors.append("Machinery type id must be greater than 0")
    if request.birth_date is None:
        errors.append("Birth date is required")
    elif calculate_age(request.birth_date, today) < MIN_DRIVER_AGE:
        errors.append(f"Driver must be at least {MIN_DRIVER_AGE} years old")
    return errors


class DriverService:
    def __init__(
        self,
        drivers: DriverRepository,
        users: UsersClient,
        machinery_types: MachineryTypesClient,
    ):
        self.drivers = drivers
        self.users = users
        self.machinery_types = machinery_types

    async def _check_user_free(self, user_id: int, driver_id: Optional[int] = None) -> None:
        """Пользователь существует и не назначен другому водителю."""
        if not await self.users.user_exists(user_id):
            raise NotFoundError(f"User {user_id} not found")
        holder = await self.drivers.get_driver_by_user(user_id, exclude_id=driver_id)
        if holder:
            raise ConflictError(
                f"User {user_id} is already assigned to driver {holder.id} ({holder.full_name})"
            )

    async def _check_references(self, request: CreateDriverRequest, driver_id: Optional[int] = None) -> None:
        errors = collect_driver_errors(request)
        if errors:
            raise ValidationError("; ".join(errors))

        if request.user_id > UNASSIGNED_USER_ID:
            await self._check_user_free(request.user_id, driver_id)
        if not await self.machinery_types.machinery_type_exists(request.machinery_type_id):
            raise NotFoundError(f"Machinery type {request.machinery_type_id} not found")
        identification = request.identification.strip()
        if await self.drivers.identification_exists(identification, exclude_id=driver_id):
            raise ConflictError(f"Identification {identification} is already registered")

    async def create_driver(self, request: CreateDriverRequest) -> DriverDTO:
        await self._check_references(request)
        driver = await self.drivers.create_driver(request)
        await log_info(f"Создан водитель {driver.id} ({driver.full_name})", type_msg=TypeMsg.INFO)
        return driver

    async def update_driver(self, driver_id: int, request: UpdateDriverRequest) -> int:
        await self.get_driver(driver_id)
        await self._check_references(request, driver_id)
        affected = await self.drivers.update_driver(driver_id, request)
        await log_info(f"Обновлён водитель {driver_id}, строк: {affected}", type_msg=TypeMsg.DEBUG)
        return affected

    async def list_drivers(self) -> List[DriverDTO]:
        return await self.drivers.get_active_drivers()

    async def get_driver(self, driver_id: int) -> DriverDTO:
        driver = await self.drivers.get_driver_by_id(driver_id)
        if not driver:
            raise NotFoundError(f"Driver {driver_id} not found")
        return driver

    async def update_driver_status(self, driver_id: int, status: bool) -> int:
        await self.get_driver(driver_id)
        return await self.drivers.update_status(driver_id, status)

    async def update_driver_availability(self, driver_id: int, available: bool) -> int:
        await self.get_driver(driver_id)
        return await self.drivers.update_availability(driver_id, available)

    async def search_drivers(self, filters: DriverFilter) -> List[DriverDTO]:
        if (
            filters.birth_date_from and filters.birth_date_to
            and filters.birth_date_from > filters.birth_date_to
        ):
            raise ValidationError("birth_date_from must not be after birth_date_to")
        return await self.drivers.search_drivers(filters)

    async def search_drivers_by_term(self, term: str) -> List[DriverDTO]:
        term = term.strip()
        if not term:
            return []
        return await self.drivers.search_by_term(term)

    async def identification_exists(self, identification: str) -> bool:
        identification = identification.strip()
        if not identification:
            raise ValidationError("Identification is required")
        return await self.drivers.identification_exists(identification)

    async def assign_user(self, driver_id: int, user_id: int) -> int:
        """
        Назначает пользователя водителю.
        Запись выполняется одним условным UPDATE: если к этому моменту
        водителю уже назначен пользователь, затронуто 0 строк -> конфликт.
        """
        if user_id <= UNASSIGNED_USER_ID:
            raise ValidationError("User id must be greater than 0")
        driver = await self.get_driver(driver_id)
        if driver.has_user:
            raise ConflictError(f"Driver {driver_id} already has user {driver.user_id} assigned")
        await self._check_user_free(user_id, driver_id)

        affected = await self.drivers.assign_user(driver_id, user_id)
        if affected != 1:
            raise ConflictError(f"Driver {driver_id} already has a user assigned")

        await log_info(f"Пользователь {user_id} назначен водителю {driver_id}", type_msg=TypeMsg.INFO)
        return affected
