from typing import List, Optional

from src.common.constants import ROLE_NAME_FALLBACK
from src.infra.database import DatabaseManager, rows_affected, unique_violation_as_conflict
from src.shared.models.user_dto import RoleDTO, UserCredentials, UserDTO

_USER_SELECT = f"""
    SELECT
        u.id, u.email, u.username, u.role_id,
        COALESCE(r.name, '{ROLE_NAME_FALLBACK}') AS role_name,
        u.status, u.created_at, u.updated_at, u.last_access
    FROM auth_schema.users u
    LEFT JOIN auth_schema.roles r ON r.id = u.role_id
"""

_CREDENTIALS_SELECT = """
    SELECT
        u.id, u.email, u.username, u.password_hash, u.role_id,
        r.name AS role_name, u.status, u.created_at, u.last_access
    FROM auth_schema.users u
    LEFT JOIN auth_schema.roles r ON r.id = u.role_id
"""


class UserRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def get_user_by_id(self, user_id: int) -> Optional[UserDTO]:
        """Получает пользователя по ID вместе с именем роли."""
        query = _USER_SELECT + " WHERE u.id = $1"
        async with self.db.acquire() as conn:
            record = await conn.fetchrow(query, user_id)
            if record:
                return UserDTO(**dict(record))
            return None

    async def get_all_users(self) -> List[UserDTO]:
        """Все пользователи, новые первыми."""
        query = _USER_SELECT + " ORDER BY u.created_at DESC, u.id DESC"
        async with self.db.acquire() as conn:
            records = await conn.fetch(query)
            return [UserDTO(**dict(r)) for r in records]

    async def get_credentials_by_username(self, username: str) -> Optional[UserCredentials]:
        query = _CREDENTIALS_SELECT + " WHERE u.username = $1"
        async with self.db.acquire() as conn:
            record = await conn.fetchrow(query, username)
            return UserCredentials(**dict(record)) if record else None

    async def get_credentials_by_login(self, username_or_email: str) -> Optional[UserCredentials]:
        """Поиск по имени пользователя или email (без учёта регистра для email)."""
        query = _CREDENTIALS_SELECT + " WHERE u.username = $1 OR LOWER(u.email) = LOWER($1) LIMIT 1"
        async with self.db.acquire() as conn:
            record = await conn.fetchrow(query, username_or_email)
            return UserCredentials(**dict(record)) if record else None

    async def user_exists(self, user_id: int) -> bool:
        query = "SELECT EXISTS(SELECT 1 FROM auth_schema.users WHERE id = $1)"
        async with self.db.acquire() as conn:
            return bool(await conn.fetchval(query, user_id))

    async def email_exists(self, email: str, exclude_id: Optional[int] = None) -> bool:
        query = """
            SELECT EXISTS(
                SELECT 1 FROM auth_schema.users
                WHERE LOWER(email) = LOWER($1) AND ($2::int IS NULL OR id <> $2)
            )
        """
        async with self.db.acquire() as conn:
            return bool(await conn.fetchval(query, email, exclude_id))

    async def username_exists(self, username: str, exclude_id: Optional[int] = None) -> bool:
        query = """
            SELECT EXISTS(
                SELECT 1 FROM auth_schema.users
                WHERE username = $1 AND ($2::int IS NULL OR id <> $2)
            )
        """
        async with self.db.acquire() as conn:
            return bool(await conn.fetchval(query, username, exclude_id))

    async def create_user(self, email: str, username: str, password_hash: str, role_id: int) -> int:
        """Создаёт активного пользователя и возвращает его ID."""
        query = """
            INSERT INTO auth_schema.users (email, username, password_hash, role_id, status)
            VALUES ($1, $2, $3, $4, 1)
            RETURNING id
        """
        async with unique_violation_as_conflict("Email or username already registered"):
            async with self.db.acquire() as conn:
                return await conn.fetchval(query, email, username, password_hash, role_id)

    async def update_user(
        self,
        user_id: int,
        email: str,
        username: str,
        role_id: int,
        password_hash: Optional[str] = None,
    ) -> int:
        """Обновляет профиль. Пароль меняется только если передан хеш."""
        query = """
            UPDATE auth_schema.users
            SET email = $2,
                username = $3,
                role_id = $4,
                password_hash = COALESCE($5, password_hash),
                updated_at = NOW()
            WHERE id = $1
        """
        async with unique_violation_as_conflict("Email or username already registered"):
            async with self.db.acquire() as conn:
                result = await conn.execute(query, user_id, email, username, role_id, password_hash)
        return rows_affected(result)

    async def update_status(self, user_id: int, status: int) -> int:
        """Меняет статус. Повтор с тем же значением затрагивает 0 строк."""
        query = """
            UPDATE auth_schema.users
            SET status = $2, updated_at = NOW()
            WHERE id = $1 AND status IS DISTINCT FROM $2
        """
        async with self.db.acquire() as conn:
            result = await conn.execute(query, user_id, status)
        return rows_affected(result)

    async def update_last_access(self, user_id: int) -> None:
        query = "UPDATE auth_schema.users SET last_access = NOW() WHERE id = $1"
        async with self.db.acquire() as conn:
            await conn.execute(query, user_id)

    async def update_password_hash(self, user_id: int, password_hash: str) -> int:
        query = """
            UPDATE auth_schema.users
            SET password_hash = $2, updated_at = NOW()
            WHERE id = $1
        """
        async with self.db.acquire() as conn:
            result = await conn.execute(query, user_id, password_hash)
        return rows_affected(result)


class RoleRepository:
    def __init__(self, db: DatabaseManager):
        self.db = db

    async def role_exists(self, role_id: int) -> bool:
        query = "SELECT EXISTS(SELECT 1 FROM auth_schema.roles WHERE id = $1)"
        async with self.db.acquire() as conn:
            return bool(await conn.fetchval(query, role_id))

    async def get_all_roles(self) -> List[RoleDTO]:
        query = "SELECT id, name, description FROM auth_schema.roles ORDER BY name"
        async with self.db.acquire() as conn:
            records = await conn.fetch(query)
            return [RoleDTO(**dict(r)) for r in records]
