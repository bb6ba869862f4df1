# tests/services/test_users_service_unit.py
"""
Unit тесты управления пользователями (src/services/auth_service/service.py).
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.common.exceptions import ConflictError, NotFoundError, ValidationError
from src.services.auth_service.repository import RoleRepository, UserRepository
from src.services.auth_service.service import UserService
from src.shared.models.user_dto import CreateUserRequest, UpdateUserRequest, UserDTO


@pytest.fixture
def users(sample_user_data: dict[str, Any]) -> MagicMock:
    repo = MagicMock(spec=UserRepository)
    repo.email_exists = AsyncMock(return_value=False)
    repo.username_exists = AsyncMock(return_value=False)
    repo.user_exists = AsyncMock(return_value=True)
    repo.create_user = AsyncMock(return_value=7)
    repo.get_user_by_id = AsyncMock(return_value=UserDTO(**sample_user_data))
    repo.update_user = AsyncMock(return_value=1)
    repo.update_status = AsyncMock(return_value=1)
    return repo


@pytest.fixture
def roles() -> MagicMock:
    repo = MagicMock(spec=RoleRepository)
    repo.role_exists = AsyncMock(return_value=True)
    return repo


@pytest.fixture
def service(users: MagicMock, roles: MagicMock) -> UserService:
    return UserService(users, roles)


def make_create_request(**overrides: Any) -> CreateUserRequest:
    data = {"email": "ana@example.com", "username": "ana", "password": "password1", "role_id": 2}
    data.update(overrides)
    return CreateUserRequest(**data)


class TestCreateUser:
    """Тесты создания пользователя."""

    @pytest.mark.asyncio
    async def test_create_success(self, service: UserService, users: MagicMock) -> None:
        with patch("src.services.auth_service.service.hash_password", return_value="hashed"):
            user = await service.create_user(make_create_request(username="  ana  "))

        assert user.id == 7
        users.create_user.assert_awaited_once_with(
            email="ana@example.com", username="ana", password_hash="hashed", role_id=2
        )

    @pytest.mark.asyncio
    async def test_blank_username_after_strip(self, service: UserService, users: MagicMock) -> None:
        """Тест: имя из одних пробелов считается пустым."""
        with pytest.raises(ValidationError, match="username"):
            await service.create_user(make_create_request(username="     "))

        users.create_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_email(self, service: UserService, users: MagicMock) -> None:
        users.email_exists.return_value = True

        with pytest.raises(ConflictError, match="Email"):
            await service.create_user(make_create_request())

        users.create_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_duplicate_username(self, service: UserService, users: MagicMock) -> None:
        users.username_exists.return_value = True

        with pytest.raises(ConflictError, match="Username"):
            await service.create_user(make_create_request())

    @pytest.mark.asyncio
    async def test_unknown_role(self, service: UserService, roles: MagicMock, users: MagicMock) -> None:
        roles.role_exists.return_value = False

        with pytest.raises(NotFoundError, match="Role 2"):
            await service.create_user(make_create_request())

        users.create_user.assert_not_awaited()


class TestUpdateUser:
    """Тесты обновления пользователя."""

    @pytest.mark.asyncio
    async def test_update_missing_user(self, service: UserService, users: MagicMock) -> None:
        users.user_exists.return_value = False
        request = UpdateUserRequest(email="ana@example.com", username="ana", role_id=2)

        with pytest.raises(NotFoundError):
            await service.update_user(99, request)

    @pytest.mark.asyncio
    async def test_update_keeps_password_when_absent(self, service: UserService, users: MagicMock) -> None:
        """Тест: без пароля хеш не передаётся."""
        request = UpdateUserRequest(email="ana@example.com", username="ana", role_id=2)

        affected = await service.update_user(7, request)

        assert affected == 1
        assert users.update_user.call_args.kwargs["password_hash"] is None
        users.email_exists.assert_awaited_once_with("ana@example.com", exclude_id=7)

    @pytest.mark.asyncio
    async def test_update_email_taken_by_other(self, service: UserService, users: MagicMock) -> None:
        users.email_exists.return_value = True
        request = UpdateUserRequest(email="ana@example.com", username="ana", role_id=2)

        with pytest.raises(ConflictError):
            await service.update_user(7, request)

        users.update_user.assert_not_awaited()


class TestUserStatus:
    """Тесты смены статуса."""

    @pytest.mark.asyncio
    async def test_invalid_status(self, service: UserService) -> None:
        with pytest.raises(ValidationError):
            await service.update_user_status(7, 5)

    @pytest.mark.asyncio
    async def test_missing_user(self, service: UserService, users: MagicMock) -> None:
        users.user_exists.return_value = False

        with pytest.raises(NotFoundError):
            await service.update_user_status(7, 0)

    @pytest.mark.asyncio
    async def test_no_op_status_returns_zero(self, service: UserService, users: MagicMock) -> None:
        """Тест: повтор того же статуса затрагивает 0 строк без ошибки."""
        users.update_status.return_value = 0

        assert await service.update_user_status(7, 1) == 0


class TestUserRepositorySql:
    """Тесты SQL репозитория пользователей."""

    @pytest.mark.asyncio
    async def test_update_status_skips_same_value(self, mock_db: MagicMock, mock_conn: AsyncMock) -> None:
        mock_conn.execute.return_value = "UPDATE 0"
        repo = UserRepository(mock_db)

        affected = await repo.update_status(7, 1)

        assert affected == 0
        query = mock_conn.execute.call_args.args[0]
        assert "IS DISTINCT FROM" in query

    @pytest.mark.asyncio
    async def test_email_exists_excludes_self(self, mock_db: MagicMock, mock_conn: AsyncMock) -> None:
        mock_conn.fetchval.return_value = False
        repo = UserRepository(mock_db)

        assert await repo.email_exists("ana@example.com", exclude_id=7) is False
        assert mock_conn.fetchval.call_args.args[1:] == ("ana@example.com", 7)
