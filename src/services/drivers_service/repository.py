from typing import Any, List, Optional

from src.infra.database import DatabaseManager, rows_affected, unique_violation_as_conflict
from src.shared.models.driver_dto import CreateDriverRequest, DriverDTO, DriverFilter, UpdateDriverRequest

DRIVER_COLUMNS = """
    id, first_name, second_name, first_surname, second_surname, full_name,
    identification, birth_date, available, user_id, machinery_type_id,
    status, created_at, updated_at
"""

_DUPLICATE_MESSAGE = "Identification already registered or user already assigned to another driver"


def build_filter_clause(filters: DriverFilter) -> tuple[str, list[Any]]:
    """
    WHERE-условие из необязательных полей фильтра.
    Значения передаются только параметрами $n.
    """
    conditions: list[str] = []
    args: list[Any] = []

    def add(condition: str, value: Any) -> None:
        args.append(value)
        conditions.append(condition.format(n=len(args)))

    if filters.status is not None:
        add("status = ${n}", filters.status)
    if filters.machinery_type_id is not None:
        add("machinery_type_id = ${n}", filters.machinery_type_id)
    if filters.available is not None:
        add("available = ${n}", filters.available)
    if filters.birth_date_from is not None:
        add("birth_date >= ${n}", filters.birth_date_from)
    if filters.birth_date_to is not None:
        add("birth_date <= ${n}", filters.birth_date_to)

    where = " WHERE " + " AND ".join(conditions) if conditions else ""
    return where, args


class DriverRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def get_driver_by_id(self, driver_id: int) -> Optional[DriverDTO]:
        query = f"SELECT {DRIVER_COLUMNS} FROM drivers_schema.drivers WHERE id = $1"
        async with self.db.acquire() as conn:
            record = await conn.fetchrow(query, driver_id)
            if record:
                return DriverDTO(**dict(record))
            return None

    async def get_active_drivers(self) -> List[DriverDTO]:
        """Только активные водители (status = TRUE)."""
        query = f"""
            SELECT {DRIVER_COLUMNS} FROM drivers_schema.drivers
            WHERE status = TRUE
            ORDER BY full_name, id
        """
        async with self.db.acquire() as conn:
            records = await conn.fetch(query)
            return [DriverDTO(**dict(r)) for r in records]

    async def create_driver(self, driver: CreateDriverRequest) -> DriverDTO:
        query = f"""
            INSERT INTO drivers_schema.drivers (
                first_name, second_name, first_surname, second_surname,
                identification, birth_date, available, user_id, machinery_type_id, status
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, TRUE)
            RETURNING {DRIVER_COLUMNS}
        """
        async with unique_violation_as_conflict(_DUPLICATE_MESSAGE):
            async with self.db.acquire() as conn:
                record = await conn.fetchrow(
                    query,
                    driver.first_name.strip(),
                    driver.second_name,
                    driver.first_surname.strip(),
                    driver.second_surname,
                    driver.identification.strip(),
                    driver.birth_date,
                    driver.available,
                    driver.user_id,
                    driver.machinery_type_id,
                )
        return DriverDTO(**dict(record))

    async def update_driver(self, driver_id: int, driver: UpdateDriverRequest) -> int:
        """Обновляет водителя; status меняется только если передан."""
        query = """
            UPDATE drivers_schema.drivers
            SET first_name = $2,
                second_name = $3,
                first_surname = $4,
                second_surname = $5,
                identification = $6,
                birth_date = $7,
                available = $8,
                user_id = $9,
                machinery_type_id = $10,
                status = COALESCE($11, status),
                updated_at = NOW()
            WHERE id = $1
        """
        async with unique_violation_as_conflict(_DUPLICATE_MESSAGE):
            async with self.db.acquire() as conn:
                result = await conn.execute(
                    query,
                    driver_id,
                    driver.first_name.strip(),
                    driver.second_name,
                    driver.first_surname.strip(),
                    driver.second_surname,
                    driver.identification.strip(),
                    driver.birth_date,
                    driver.available,
                    driver.user_id,
                    driver.machinery_type_id,
                    driver.status,
                )
        return rows_affected(result)

    async def update_status(self, driver_id: int, status: bool) -> int:
        query = """
            UPDATE drivers_schema.drivers
            SET status = $2, updated_at = NOW()
            WHERE id = $1 AND status IS DISTINCT FROM $2
        """
        async with self.db.acquire() as conn:
            return rows_affected(await conn.execute(query, driver_id, status))

    async def update_availability(self, driver_id: int, available: bool) -> int:
        query = """
            UPDATE drivers_schema.drivers
            SET available = $2, updated_at = NOW()
            WHERE id = $1 AND available IS DISTINCT FROM $2
        """
        async with self.db.acquire() as conn:
            return rows_affected(await conn.execute(query, driver_id, available))

    async def assign_user(self, driver_id: int, user_id: int) -> int:
        """
        Назначает пользователя только водителю без пользователя.
        0 затронутых строк: водителю уже кто-то назначен.
        """
        query = """
            UPDATE drivers_schema.drivers
            SET user_id = $1, updated_at = NOW()
            WHERE id = $2 AND user_id = 0
        """
        async with unique_violation_as_conflict(f"User {user_id} is already assigned to another driver"):
            async with self.db.acquire() as conn:
                result = await conn.execute(query, user_id, driver_id)
        return rows_affected(result)

    async def search_drivers(self, filters: DriverFilter) -> List[DriverDTO]:
        where, args = build_filter_clause(filters)
        query = f"SELECT {DRIVER_COLUMNS} FROM drivers_schema.drivers{where} ORDER BY full_name, id"
        async with self.db.acquire() as conn:
            records = await conn.fetch(query, *args)
            return [DriverDTO(**dict(r)) for r in records]

    async def search_by_term(self, term: str) -> List[DriverDTO]:
        """Подстрока в полном имени или идентификации, без учёта регистра."""
        query = f"""
            SELECT {DRIVER_COLUMNS} FROM drivers_schema.drivers
            WHERE STRPOS(LOWER(full_name), LOWER($1)) > 0
               OR STRPOS(LOWER(identification), LOWER($1)) > 0
            ORDER BY full_name, id
        """
        async with self.db.acquire() as conn:
            records = await conn.fetch(query, term)
            return [DriverDTO(**dict(r)) for r in records]

    async def identification_exists(self, identification: str, exclude_id: Optional[int] = None) -> bool:
        query = """
            SELECT EXISTS(
                SELECT 1 FROM drivers_schema.drivers
                WHERE identification = $1 AND ($2::int IS NULL OR id <> $2)
            )
        """
        async with self.db.acquire() as conn:
            return bool(await conn.fetchval(query, identification, exclude_id))

    async def get_driver_by_user(self, user_id: int, exclude_id: Optional[int] = None) -> Optional[DriverDTO]:
        """Водитель, которому назначен пользователь (кроме exclude_id)."""
        query = f"""
            SELECT {DRIVER_COLUMNS} FROM drivers_schema.drivers
            WHERE user_id = $1 AND ($2::int IS NULL OR id <> $2)
            LIMIT 1
        """
        async with self.db.acquire() as conn:
            record = await conn.fetchrow(query, user_id, exclude_id)
            return DriverDTO(**dict(record)) if record else None
