from typing import List

from email_validator import EmailNotValidError, validate_email

from src.common.constants import USER_STATUS_ACTIVE, USER_STATUS_INACTIVE, TypeMsg
from src.common.exceptions import ConflictError, NotFoundError, ValidationError
from src.common.logger import log_info
from src.services.auth_service.repository import RoleRepository, UserRepository
from src.services.auth_service.security import hash_password
from src.shared.models.user_dto import (
    CreateUserRequest,
    RoleDTO,
    UpdateUserRequest,
    UserDTO,
)


def _check_email(email: str) -> str:
    """Нормализованный email или ValidationError."""
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email: {email}") from e


class UserService:
    def __init__(self, users: UserRepository, roles: RoleRepository):
        self.users = users
        self.roles = roles

    async def create_user(self, request: CreateUserRequest) -> UserDTO:
        """
        Создаёт активного пользователя.
        Проверки по порядку: обязательные поля, формат email,
        уникальность email и имени, существование роли.
        """
        username = request.username.strip()
        missing = [
            name for name, value in (
                ("email", request.email), ("username", username), ("password", request.password),
            ) if not value
        ]
        if missing:
            raise ValidationError(f"Required fields: {', '.join(missing)}")
        email = _check_email(request.email)

        if await self.users.email_exists(email):
            raise ConflictError(f"Email {email} is already registered")
        if await self.users.username_exists(username):
            raise ConflictError(f"Username {username} is already taken")
        if not await self.roles.role_exists(request.role_id):
            raise NotFoundError(f"Role {request.role_id} not found")

        user_id = await self.users.create_user(
            email=email,
            username=username,
            password_hash=hash_password(request.password),
            role_id=request.role_id,
        )
        await log_info(f"Создан пользователь {user_id} ({username})", type_msg=TypeMsg.INFO)
        return await self.get_user(user_id)

    async def get_user(self, user_id: int) -> UserDTO:
        user = await self.users.get_user_by_id(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        return user

    async def list_users(self) -> List[UserDTO]:
        return await self.users.get_all_users()

    async def update_user(self, user_id: int, request: UpdateUserRequest) -> int:
        """Обновляет профиль, возвращает число затронутых строк."""
        if not await self.users.user_exists(user_id):
            raise NotFoundError(f"User {user_id} not found")

        username = request.username.strip()
        if not username:
            raise ValidationError("Required fields: username")
        email = _check_email(request.email)

        if await self.users.email_exists(email, exclude_id=user_id):
            raise ConflictError(f"Email {email} is already registered")
        if await self.users.username_exists(username, exclude_id=user_id):
            raise ConflictError(f"Username {username} is already taken")
        if not await self.roles.role_exists(request.role_id):
            raise NotFoundError(f"Role {request.role_id} not found")

        password_hash = hash_password(request.password) if request.password else None
        affected = await self.users.update_user(
            user_id,
            email=email,
            username=username,
            role_id=request.role_id,
            password_hash=password_hash,
        )
        await log_info(f"Пользователь {user_id} обновлён (строк: {affected})", type_msg=TypeMsg.INFO)
        return affected

    async def update_user_status(self, user_id: int, status: int) -> int:
        if status not in (USER_STATUS_INACTIVE, USER_STATUS_ACTIVE):
            raise ValidationError("Status must be 0 (inactive) or 1 (active)")
        if not await self.users.user_exists(user_id):
            raise NotFoundError(f"User {user_id} not found")

        affected = await self.users.update_status(user_id, status)
        await log_info(f"Статус пользователя {user_id} -> {status} (строк: {affected})", type_msg=TypeMsg.INFO)
        return affected

    async def user_exists(self, user_id: int) -> bool:
        return await self.users.user_exists(user_id)

    async def username_exists(self, username: str) -> bool:
        return await self.users.username_exists(username.strip())

    async def email_exists(self, email: str) -> bool:
        return await self.users.email_exists(email.strip())

    async def list_roles(self) -> List[RoleDTO]:
        return await self.roles.get_all_roles()
