# src/services/gateway/orchestrator.py
"""
Создание пользователя с назначением водителю.

Два сервиса, две записи без общей транзакции:
  1. auth_service создаёт пользователя;
  2. drivers_service назначает его водителю условным UPDATE.
Если drivers_service однозначно отклонил назначение, созданный
пользователь деактивируется (status = 0). Пользователь не удаляется.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from src.common.constants import USER_STATUS_INACTIVE, TypeMsg
from src.common.exceptions import ConflictError, InternalError, ServiceError, is_rejection
from src.common.logger import log_error, log_info
from src.services.gateway.clients import AuthClient, DriversClient
from src.shared.models.enums import AssignmentOutcome, AssignmentStage
from src.shared.models.user_dto import CreateUserAndAssignDriverRequest, CreateUserRequest


@dataclass
class AssignmentResult:
    """Итог операции для ответа шлюза."""
    outcome: AssignmentOutcome
    user_id: int
    driver_id: int
    error: ServiceError | None = None
    compensation_error: ServiceError | None = None
    
    @property
    def user_deactivated(self) -> bool:
        return self.outcome == AssignmentOutcome.COMPENSATED
    
    def to_data(self) -> dict[str, Any]:
        if self.outcome == AssignmentOutcome.ASSIGNED:
            return {"user_id": self.user_id, "driver_id": self.driver_id, "assigned": True}
        data: dict[str, Any] = {
            "user_id": self.user_id,
            "driver_id": self.driver_id,
            "user_deactivated": self.user_deactivated,
            "error": self.error.message if self.error else None,
        }
        if self.compensation_error:
            data["compensation_error"] = self.compensation_error.message
        return data


class UserDriverAssignment:
    """Оркестратор «создать пользователя и назначить водителю»."""
    
    def __init__(self, auth: AuthClient, drivers: DriversClient) -> None:
        self.auth = auth
        self.drivers = drivers
    
    async def _enter(self, stage: AssignmentStage, driver_id: int, user_id: int | None = None) -> None:
        await log_info(
            f"Назначение водителю {driver_id}: этап {stage}",
            type_msg=TypeMsg.DEBUG,
            extra={"stage": str(stage), "driver_id": driver_id, "user_id": user_id},
        )
    
    async def run(self, request: CreateUserAndAssignDriverRequest) -> AssignmentResult:
        """
        Raises:
            NotFoundError: водителя нет
            ConflictError: водителю уже назначен пользователь
            ServiceError: ошибка создания пользователя (пользователь не создан)
            InternalError: сбой вызова назначения; пользователь создан, id в details
        """
        driver_id = request.driver_id
        
        await self._enter(AssignmentStage.CHECKING_DRIVER, driver_id)
        driver = await self.drivers.get_driver(driver_id)
        if driver.has_user:
            raise ConflictError(
                f"Driver {driver.full_name} already has user {driver.user_id} assigned",
                details={"driver_id": driver_id, "user_id": driver.user_id},
            )
        
        await self._enter(AssignmentStage.CREATING_USER, driver_id)
        created = await self.auth.create_user(
            CreateUserRequest(
                email=request.email,
                username=request.username,
                password=request.password,
                role_id=request.role_id,
            )
        )
        user_id = created.user_id
        
        await self._enter(AssignmentStage.ASSIGNING, driver_id, user_id)
        try:
            await self.drivers.assign_user(driver_id, user_id)
        except ServiceError as e:
            if not is_rejection(e):
                # Запись могла пройти: компенсировать нельзя
                await log_error(
                    f"Назначение пользователя {user_id} водителю {driver_id} не подтверждено: {e.message}",
                    extra={"user_id": user_id, "driver_id": driver_id},
                )
                raise InternalError(
                    f"User {user_id} was created but assignment to driver {driver_id} is unconfirmed",
                    details={"user_id": user_id, "driver_id": driver_id, "error": e.message},
                ) from e
            return await self._compensate(driver_id, user_id, e)
        
        await self._enter(AssignmentStage.DONE, driver_id, user_id)
        await log_info(f"Пользователь {user_id} создан и назначен водителю {driver_id}", type_msg=TypeMsg.INFO)
        return AssignmentResult(AssignmentOutcome.ASSIGNED, user_id, driver_id)
    
    async def _compensate(self, driver_id: int, user_id: int, error: ServiceError) -> AssignmentResult:
        """Одна попытка деактивировать созданного пользователя."""
        await self._enter(AssignmentStage.COMPENSATING, driver_id, user_id)
        await log_info(
            f"Назначение отклонено ({error.error_code}: {error.message}), деактивация пользователя {user_id}",
            type_msg=TypeMsg.WARNING,
        )
        try:
            await self.auth.update_user_status(user_id, USER_STATUS_INACTIVE)
        except ServiceError as compensation_error:
            await log_error(
                f"Компенсация не выполнена: пользователь {user_id} остался активным без водителя: "
                f"{compensation_error.message}",
                extra={"user_id": user_id, "driver_id": driver_id},
            )
            return AssignmentResult(
                AssignmentOutcome.COMPENSATION_FAILED,
                user_id,
                driver_id,
                error=error,
                compensation_error=compensation_error,
            )
        
        await log_info(f"Пользователь {user_id} деактивирован после отказа в назначении", type_msg=TypeMsg.INFO)
        return AssignmentResult(AssignmentOutcome.COMPENSATED, user_id, driver_id, error=error)
