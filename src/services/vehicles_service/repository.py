from typing import Any, List, Optional

from src.infra.database import DatabaseManager, rows_affected, unique_violation_as_conflict
from src.shared.models.vehicle_dto import MachineryTypeDTO, VehicleDTO, VehicleFilter, VehicleRequest

VEHICLE_COLUMNS = """
    id, name, plate, brand, model, machinery_type_id, availability,
    fuel_consumption_km, fuel_capacity, status, created_at, updated_at
"""


def build_filter_clause(filters: VehicleFilter) -> tuple[str, list[Any]]:
    """WHERE-условие поиска; значения только через параметры $n."""
    conditions: list[str] = []
    args: list[Any] = []

    def add(condition: str, value: Any) -> None:
        args.append(value)
        conditions.append(condition.format(n=len(args)))

    if filters.status is not None:
        add("status = ${n}", filters.status)
    if filters.machinery_type_id is not None:
        add("machinery_type_id = ${n}", filters.machinery_type_id)
    if filters.brand:
        add("LOWER(brand) = LOWER(${n})", filters.brand.strip())
    if filters.model:
        add("LOWER(model) = LOWER(${n})", filters.model.strip())
    if filters.capacity_min is not None:
        add("fuel_capacity >= ${n}", filters.capacity_min)
    if filters.capacity_max is not None:
        add("fuel_capacity <= ${n}", filters.capacity_max)
    if filters.consumption_min is not None:
        add("fuel_consumption_km >= ${n}", filters.consumption_min)
    if filters.consumption_max is not None:
        add("fuel_consumption_km <= ${n}", filters.consumption_max)
    if filters.availability is not None:
        add("availability = ${n}", filters.availability.value)

    where = " WHERE " + " AND ".join(conditions) if conditions else ""
    return where, args


class VehicleRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def get_vehicle_by_id(self, vehicle_id: int) -> Optional[VehicleDTO]:
        query = f"SELECT {VEHICLE_COLUMNS} FROM vehicles_schema.vehicles WHERE id = $1"
        async with self.db.acquire() as conn:
            record = await conn.fetchrow(query, vehicle_id)
            if record:
                return VehicleDTO(**dict(record))
            return None

    async def get_active_vehicles(self) -> List[VehicleDTO]:
        query = f"""
            SELECT {VEHICLE_COLUMNS} FROM vehicles_schema.vehicles
            WHERE status = TRUE
            ORDER BY name, id
        """
        async with self.db.acquire() as conn:
            records = await conn.fetch(query)
            return [VehicleDTO(**dict(r)) for r in records]

    async def create_vehicle(self, vehicle: VehicleRequest) -> VehicleDTO:
        query = f"""
            INSERT INTO vehicles_schema.vehicles (
                name, plate, brand, model, machinery_type_id, availability,
                fuel_consumption_km, fuel_capacity, status
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, TRUE)
            RETURNING {VEHICLE_COLUMNS}
        """
        plate = vehicle.plate.strip()
        async with unique_violation_as_conflict(f"Plate {plate} is already registered"):
            async with self.db.acquire() as conn:
                record = await conn.fetchrow(
                    query,
                    vehicle.name.strip(),
                    plate,
                    vehicle.brand.strip(),
                    vehicle.model.strip(),
                    vehicle.machinery_type_id,
                    vehicle.availability.value,
                    vehicle.fuel_consumption_km,
                    vehicle.fuel_capacity,
                )
        return VehicleDTO(**dict(record))

    async def update_vehicle(self, vehicle_id: int, vehicle: VehicleRequest) -> int:
        query = """
            UPDATE vehicles_schema.vehicles
            SET name = $2,
                plate = $3,
                brand = $4,
                model = $5,
                machinery_type_id = $6,
                availability = $7,
                fuel_consumption_km = $8,
                fuel_capacity = $9,
                updated_at = NOW()
            WHERE id = $1
        """
        plate = vehicle.plate.strip()
        async with unique_violation_as_conflict(f"Plate {plate} is already registered"):
            async with self.db.acquire() as conn:
                result = await conn.execute(
                    query,
                    vehicle_id,
                    vehicle.name.strip(),
                    plate,
                    vehicle.brand.strip(),
                    vehicle.model.strip(),
                    vehicle.machinery_type_id,
                    vehicle.availability.value,
                    vehicle.fuel_consumption_km,
                    vehicle.fuel_capacity,
                )
        return rows_affected(result)

    async def update_status(self, vehicle_id: int, status: bool) -> int:
        query = """
            UPDATE vehicles_schema.vehicles
            SET status = $2, updated_at = NOW()
            WHERE id = $1 AND status IS DISTINCT FROM $2
        """
        async with self.db.acquire() as conn:
            return rows_affected(await conn.execute(query, vehicle_id, status))

    async def plate_exists(self, plate: str, exclude_id: Optional[int] = None) -> bool:
        """Проверка номера без учёта регистра."""
        query = """
            SELECT EXISTS(
                SELECT 1 FROM vehicles_schema.vehicles
                WHERE UPPER(plate) = UPPER($1) AND ($2::int IS NULL OR id <> $2)
            )
        """
        async with self.db.acquire() as conn:
            return bool(await conn.fetchval(query, plate, exclude_id))

    async def search_vehicles(self, filters: VehicleFilter) -> List[VehicleDTO]:
        where, args = build_filter_clause(filters)
        query = f"SELECT {VEHICLE_COLUMNS} FROM vehicles_schema.vehicles{where} ORDER BY name, id"
        async with self.db.acquire() as conn:
            records = await conn.fetch(query, *args)
            return [VehicleDTO(**dict(r)) for r in records]

    async def search_by_term(self, term: str) -> List[VehicleDTO]:
        query = f"""
            SELECT {VEHICLE_COLUMNS} FROM vehicles_schema.vehicles
            WHERE STRPOS(LOWER(name), LOWER($1)) > 0
               OR STRPOS(LOWER(plate), LOWER($1)) > 0
               OR STRPOS(LOWER(brand), LOWER($1)) > 0
               OR STRPOS(LOWER(model), LOWER($1)) > 0
            ORDER BY name, id
        """
        async with self.db.acquire() as conn:
            records = await conn.fetch(query, term)
            return [VehicleDTO(**dict(r)) for r in records]


class MachineryTypeRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def get_machinery_type_by_id(self, type_id: int) -> Optional[MachineryTypeDTO]:
        query = """
            SELECT id, name, description, status, created_at, updated_at
            FROM vehicles_schema.machinery_types
            WHERE id = $1
        """
        async with self.db.acquire() as conn:
            record = await conn.fetchrow(query, type_id)
            return MachineryTypeDTO(**dict(record)) if record else None

    async def get_active_machinery_types(self) -> List[MachineryTypeDTO]:
        query = """
            SELECT id, name, description, status, created_at, updated_at
            FROM vehicles_schema.machinery_types
            WHERE status = TRUE
            ORDER BY name
        """
        async with self.db.acquire() as conn:
            records = await conn.fetch(query)
            return [MachineryTypeDTO(**dict(r)) for r in records]
