# tests/services/test_gateway_orchestrator.py
"""
Unit тесты оркестратора «создать пользователя и назначить водителю»
(src/services/gateway/orchestrator.py).
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.common.constants import USER_STATUS_INACTIVE
from src.common.exceptions import (
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from src.services.gateway.clients import AuthClient, DriversClient
from src.services.gateway.orchestrator import AssignmentResult, UserDriverAssignment
from src.shared.models.driver_dto import DriverDTO
from src.shared.models.enums import AssignmentOutcome
from src.shared.models.user_dto import CreateUserAndAssignDriverRequest, CreateUserResponse, UserDTO


@pytest.fixture
def request_body() -> CreateUserAndAssignDriverRequest:
    return CreateUserAndAssignDriverRequest(
        username="ana",
        email="ana@example.com",
        password="password1",
        role_id=2,
        driver_id=10,
    )


@pytest.fixture
def auth_client(sample_user_data: dict[str, Any]) -> MagicMock:
    client = MagicMock(spec=AuthClient)
    user = UserDTO(**sample_user_data)
    client.create_user = AsyncMock(return_value=CreateUserResponse(user_id=user.id, user=user))
    client.update_user_status = AsyncMock(return_value=1)
    return client


@pytest.fixture
def drivers_client(sample_driver_data: dict[str, Any]) -> MagicMock:
    client = MagicMock(spec=DriversClient)
    client.get_driver = AsyncMock(return_value=DriverDTO(**sample_driver_data))
    client.assign_user = AsyncMock(return_value=1)
    return client


@pytest.fixture
def orchestrator(auth_client: MagicMock, drivers_client: MagicMock) -> UserDriverAssignment:
    return UserDriverAssignment(auth_client, drivers_client)


class TestAssignmentHappyPath:
    """Тесты успешного назначения."""

    @pytest.mark.asyncio
    async def test_assigned(
        self,
        orchestrator: UserDriverAssignment,
        request_body: CreateUserAndAssignDriverRequest,
        auth_client: MagicMock,
        drivers_client: MagicMock,
    ) -> None:
        result = await orchestrator.run(request_body)

        assert result.outcome == AssignmentOutcome.ASSIGNED
        assert result.to_data() == {"user_id": 7, "driver_id": 10, "assigned": True}
        drivers_client.assign_user.assert_awaited_once_with(10, 7)
        auth_client.update_user_status.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_user_created_with_request_fields(
        self,
        orchestrator: UserDriverAssignment,
        request_body: CreateUserAndAssignDriverRequest,
        auth_client: MagicMock,
    ) -> None:
        await orchestrator.run(request_body)

        sent = auth_client.create_user.call_args.args[0]
        assert sent.username == "ana"
        assert sent.role_id == 2


class TestAssignmentPrecheck:
    """Тесты предварительной проверки водителя."""

    @pytest.mark.asyncio
    async def test_driver_already_has_user(
        self,
        orchestrator: UserDriverAssignment,
        request_body: CreateUserAndAssignDriverRequest,
        auth_client: MagicMock,
        drivers_client: MagicMock,
        sample_driver_data: dict[str, Any],
    ) -> None:
        """Тест: водитель занят, пользователь не создаётся."""
        drivers_client.get_driver.return_value = DriverDTO(**{**sample_driver_data, "user_id": 4})

        with pytest.raises(ConflictError) as exc_info:
            await orchestrator.run(request_body)

        assert "Juan Perez Lopez" in exc_info.value.message
        assert exc_info.value.details == {"driver_id": 10, "user_id": 4}
        auth_client.create_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_driver_missing(
        self,
        orchestrator: UserDriverAssignment,
        request_body: CreateUserAndAssignDriverRequest,
        auth_client: MagicMock,
        drivers_client: MagicMock,
    ) -> None:
        drivers_client.get_driver.side_effect = NotFoundError("Driver 10 not found")

        with pytest.raises(NotFoundError):
            await orchestrator.run(request_body)

        auth_client.create_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_user_creation_rejected(
        self,
        orchestrator: UserDriverAssignment,
        request_body: CreateUserAndAssignDriverRequest,
        auth_client: MagicMock,
        drivers_client: MagicMock,
    ) -> None:
        """Тест: ошибка создания пользователя пробрасывается, назначения нет."""
        auth_client.create_user.side_effect = ConflictError("Email ana@example.com is already registered")

        with pytest.raises(ConflictError):
            await orchestrator.run(request_body)

        drivers_client.assign_user.assert_not_awaited()


class TestAssignmentCompensation:
    """Тесты компенсации при отказе в назначении."""

    @pytest.mark.asyncio
    async def test_rejection_deactivates_user(
        self,
        orchestrator: UserDriverAssignment,
        request_body: CreateUserAndAssignDriverRequest,
        auth_client: MagicMock,
        drivers_client: MagicMock,
    ) -> None:
        drivers_client.assign_user.side_effect = ConflictError("Driver 10 already has a user assigned")

        result = await orchestrator.run(request_body)

        assert result.outcome == AssignmentOutcome.COMPENSATED
        assert result.user_deactivated is True
        auth_client.update_user_status.assert_awaited_once_with(7, USER_STATUS_INACTIVE)
        assert result.to_data() == {
            "user_id": 7,
            "driver_id": 10,
            "user_deactivated": True,
            "error": "Driver 10 already has a user assigned",
        }

    @pytest.mark.asyncio
    async def test_validation_rejection_also_compensated(
        self,
        orchestrator: UserDriverAssignment,
        request_body: CreateUserAndAssignDriverRequest,
        drivers_client: MagicMock,
    ) -> None:
        drivers_client.assign_user.side_effect = ValidationError("User id must be greater than 0")

        result = await orchestrator.run(request_body)

        assert result.outcome == AssignmentOutcome.COMPENSATED
        assert isinstance(result.error, ValidationError)

    @pytest.mark.asyncio
    async def test_compensation_failure(
        self,
        orchestrator: UserDriverAssignment,
        request_body: CreateUserAndAssignDriverRequest,
        auth_client: MagicMock,
        drivers_client: MagicMock,
    ) -> None:
        """Тест: деактивация не удалась, оба сообщения в результате."""
        drivers_client.assign_user.side_effect = ConflictError("taken")
        auth_client.update_user_status.side_effect = InternalError("auth_service unavailable")

        result = await orchestrator.run(request_body)

        assert result.outcome == AssignmentOutcome.COMPENSATION_FAILED
        assert result.user_deactivated is False
        data = result.to_data()
        assert data["error"] == "taken"
        assert data["compensation_error"] == "auth_service unavailable"

    @pytest.mark.asyncio
    async def test_unconfirmed_assignment_not_compensated(
        self,
        orchestrator: UserDriverAssignment,
        request_body: CreateUserAndAssignDriverRequest,
        auth_client: MagicMock,
        drivers_client: MagicMock,
    ) -> None:
        """Тест: сбой вызова назначения не ведёт к деактивации."""
        drivers_client.assign_user.side_effect = InternalError("drivers_service timeout")

        with pytest.raises(InternalError) as exc_info:
            await orchestrator.run(request_body)

        assert exc_info.value.details == {
            "user_id": 7,
            "driver_id": 10,
            "error": "drivers_service timeout",
        }
        auth_client.update_user_status.assert_not_awaited()


class TestAssignmentResult:
    """Тесты сериализации результата."""

    def test_compensated_without_error(self) -> None:
        result = AssignmentResult(AssignmentOutcome.COMPENSATED, 1, 2)

        assert result.to_data()["error"] is None
        assert "compensation_error" not in result.to_data()
