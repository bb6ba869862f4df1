# src/services/auth_service/auth.py
"""
Вход по логину/паролю и восстановление пароля.
"""

from __future__ import annotations

from src.common.constants import INVALID_CREDENTIALS_MESSAGE, USER_STATUS_ACTIVE, TypeMsg
from src.common.exceptions import InternalError, UnauthorizedError, ValidationError
from src.common.logger import log_error, log_info, log_warning
from src.config.loader import AuthSettings
from src.infra.email_sender import EmailSender
from src.services.auth_service.repository import UserRepository
from src.services.auth_service.security import (
    generate_temporary_password,
    hash_password,
    verify_password,
)
from src.shared.models.user_dto import ForgotPasswordResponse, LoginResponse
from src.shared.tokens import create_access_token

FORGOT_PASSWORD_MESSAGE = "If the account exists, a temporary password has been sent to its email"


class AuthService:
    """
    Аутентификация.
    
    Любая причина отказа во входе (нет пользователя, неактивен,
    неверный пароль) даёт одно и то же сообщение.
    """
    
    def __init__(self, users: UserRepository, email_sender: EmailSender, config: AuthSettings) -> None:
        self.users = users
        self.email_sender = email_sender
        self.config = config
    
    async def login(self, username: str, password: str) -> LoginResponse:
        """
        Raises:
            UnauthorizedError: неверные учётные данные
        """
        if not username or not username.strip() or not password:
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)
        
        user = await self.users.get_credentials_by_username(username.strip())
        if user is None or user.status != USER_STATUS_ACTIVE:
            await log_warning(f"Неудачный вход: {username} (нет пользователя или неактивен)")
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)
        
        if not verify_password(password, user.password_hash):
            await log_warning(f"Неудачный вход: {username} (неверный пароль)")
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)
        
        await self.users.update_last_access(user.id)
        token, expires_at = create_access_token(user, self.config)
        
        await log_info(f"Успешный вход: {username}", type_msg=TypeMsg.INFO)
        return LoginResponse(success=True, message="Login successful", token=token, expires_at=expires_at)
    
    async def forgot_password(self, username_or_email: str) -> ForgotPasswordResponse:
        """
        Выдаёт временный пароль по email.
        
        Для неизвестного или неактивного аккаунта ответ тот же, что и при
        успехе. Если письмо не ушло, прежний хеш пароля восстанавливается.
        """
        login = (username_or_email or "").strip()
        if not login:
            raise ValidationError("A username or email is required")
        
        user = await self.users.get_credentials_by_login(login)
        if user is None or user.status != USER_STATUS_ACTIVE:
            await log_warning(f"Восстановление пароля для неизвестного/неактивного аккаунта: {login}")
            return ForgotPasswordResponse(success=True, message=FORGOT_PASSWORD_MESSAGE)
        
        temporary_password = generate_temporary_password(self.config.TEMP_PASSWORD_LENGTH)
        await self.users.update_password_hash(user.id, hash_password(temporary_password))
        
        sent = await self.email_sender.send_temporary_password(user.email, user.username, temporary_password)
        if not sent:
            await self.users.update_password_hash(user.id, user.password_hash)
            await log_error(f"Временный пароль для пользователя {user.id} не отправлен, прежний пароль восстановлен")
            raise InternalError("Could not send the temporary password email")
        
        await log_info(f"Временный пароль отправлен пользователю {user.id}", type_msg=TypeMsg.INFO)
        return ForgotPasswordResponse(success=True, message=FORGOT_PASSWORD_MESSAGE)
