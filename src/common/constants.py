# src/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# Статусы пользователя (auth_schema.users.status)
USER_STATUS_INACTIVE = 0
USER_STATUS_ACTIVE = 1

# Значение user_id у водителя без привязанного пользователя
UNASSIGNED_USER_ID = 0

MIN_DRIVER_AGE = 18

# Имя роли, если роль пользователя не найдена
ROLE_NAME_FALLBACK = "Sin rol"

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
INTERNAL_ERROR_MESSAGE = "Internal server error"
