# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import json
import os
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("DB_PASSWORD", "test_password")
os.environ.setdefault("JWT_SECRET", "test_jwt_secret_with_enough_length_for_hs256")

from src.config.loader import AuthSettings, SmtpSettings


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Путь к файлу конфигурации."""
    return project_root / "config" / "config.json"


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Мок конфигурации для тестов."""
    return {
        "_comment_system": "Системные настройки",
        "PROJECT_NAME": "fleet_test",
        "VERSION": "1.0.0-test",
        "DEBUG": True,
        "ENVIRONMENT": "test",
        "COMPONENT_MODE": "gateway",
        "GATEWAY_PORT": 9100,
        "AUTH_SERVICE_HOST": "auth.test",
        "AUTH_SERVICE_PORT": 9101,
        "DRIVERS_SERVICE_HOST": "drivers.test",
        "DRIVERS_SERVICE_PORT": 9102,
        "VEHICLES_SERVICE_HOST": "vehicles.test",
        "VEHICLES_SERVICE_PORT": 9103,
        "LOG_LEVEL": "DEBUG",
        "LOG_TO_FILE": False,
        "LOG_FILE_PATH": "logs/test.log",
        "LOG_FORMAT": "json",
        "LOG_BACKUP_COUNT": 3,
        "DB_HOST": "localhost",
        "DB_PORT": 5432,
        "DB_NAME": "fleet_test",
        "DB_USER": "postgres",
        "DB_MIN_POOL_SIZE": 1,
        "DB_MAX_POOL_SIZE": 2,
        "DB_RETRY_ATTEMPTS": 4,
        "DB_RETRY_DELAY": 0.5,
        "JWT_ISSUER": "fleet.auth",
        "JWT_AUDIENCE": "fleet.api",
        "JWT_EXPIRE_MINUTES": 60,
        "TEMP_PASSWORD_LENGTH": 12,
        "SMTP_HOST": "smtp.test",
        "SMTP_PORT": 2525,
        "HTTP_TIMEOUT": 3.0,
    }


@pytest.fixture
def auth_settings() -> AuthSettings:
    """Настройки JWT с известным секретом."""
    return AuthSettings(
        JWT_SECRET="unit_test_secret_key_long_enough_for_hmac",
        JWT_ISSUER="fleet.auth",
        JWT_AUDIENCE="fleet.api",
        JWT_EXPIRE_MINUTES=60,
        TEMP_PASSWORD_LENGTH=10,
    )


@pytest.fixture
def smtp_settings() -> SmtpSettings:
    return SmtpSettings(
        SMTP_HOST="smtp.test",
        SMTP_PORT=2525,
        SMTP_USERNAME="mailer",
        SMTP_PASSWORD="secret",
        SMTP_USE_TLS=True,
    )


# =============================================================================
# ФИКСТУРЫ ИНФРАСТРУКТУРЫ (МОКИ)
# =============================================================================

@pytest.fixture
def mock_conn() -> AsyncMock:
    """Мок соединения asyncpg."""
    conn = AsyncMock()
    conn.fetchrow = AsyncMock(return_value=None)
    conn.fetch = AsyncMock(return_value=[])
    conn.execute = AsyncMock(return_value="UPDATE 1")
    conn.fetchval = AsyncMock(return_value=None)
    return conn


@pytest.fixture
def mock_db(mock_conn: AsyncMock) -> MagicMock:
    """Мок DatabaseManager: acquire() отдаёт mock_conn."""
    db = MagicMock()
    acquire_cm = MagicMock()
    acquire_cm.__aenter__ = AsyncMock(return_value=mock_conn)
    acquire_cm.__aexit__ = AsyncMock(return_value=False)
    db.acquire = MagicMock(return_value=acquire_cm)
    return db


# =============================================================================
# ФИКСТУРЫ МОДЕЛЕЙ
# =============================================================================

@pytest.fixture
def sample_user_data() -> dict[str, Any]:
    """Пример данных пользователя."""
    return {
        "id": 7,
        "email": "ana@example.com",
        "username": "ana",
        "role_id": 2,
        "role_name": "Chofer",
        "status": 1,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "last_access": None,
    }


@pytest.fixture
def sample_credentials_data(sample_user_data: dict[str, Any]) -> dict[str, Any]:
    """Пользователь вместе с хешем пароля."""
    data = {k: v for k, v in sample_user_data.items() if k != "updated_at"}
    data["password_hash"] = "$2b$12$hash"
    return data


@pytest.fixture
def sample_driver_data() -> dict[str, Any]:
    """Пример данных водителя без пользователя."""
    return {
        "id": 10,
        "first_name": "Juan",
        "second_name": None,
        "first_surname": "Perez",
        "second_surname": "Lopez",
        "full_name": "Juan Perez Lopez",
        "identification": "1712345678",
        "birth_date": date(1990, 5, 17),
        "available": True,
        "user_id": 0,
        "machinery_type_id": 1,
        "status": True,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }


@pytest.fixture
def sample_vehicle_data() -> dict[str, Any]:
    """Пример данных транспортного средства."""
    return {
        "id": 3,
        "name": "Volqueta 01",
        "plate": "PBA-1234",
        "brand": "Hino",
        "model": "500",
        "machinery_type_id": 1,
        "availability": "Disponible",
        "fuel_consumption_km": 0.35,
        "fuel_capacity": 200.0,
        "status": True,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }


# =============================================================================
# УТИЛИТЫ
# =============================================================================

@pytest.fixture
def temp_config_file(tmp_path: Path, mock_config: dict[str, Any]) -> Path:
    """Создаёт временный файл конфигурации."""
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(mock_config, ensure_ascii=False, indent=2))
    return config_file
