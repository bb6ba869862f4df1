# src/config/loader.py
"""
Загрузчик конфигурации проекта.
Единственный источник истины: config/config.json.
Секретные данные и адреса сервисов переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации."""
    return get_project_root() / "config" / "config.json"


def load_config_json() -> dict[str, Any]:
    """Загружает config.json и возвращает словарь."""
    config_path = get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")
    
    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


def _env_or(data: dict[str, Any], key: str, default: Any) -> Any:
    """Значение из окружения, затем из config.json, затем default."""
    return os.getenv(key, data.get(key, default))


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "fleet_backend"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    COMPONENT_MODE: str = "all"


class DeploymentSettings(BaseModel):
    """Адреса и порты микросервисов."""
    GATEWAY_PORT: int = 8100
    AUTH_SERVICE_HOST: str = "auth_service"
    AUTH_SERVICE_PORT: int = 8101
    DRIVERS_SERVICE_HOST: str = "drivers_service"
    DRIVERS_SERVICE_PORT: int = 8102
    VEHICLES_SERVICE_HOST: str = "vehicles_service"
    VEHICLES_SERVICE_PORT: int = 8103
    ROUTES_SERVICE_PORT: int = 8104
    FUEL_SERVICE_PORT: int = 8105

    @property
    def auth_url(self) -> str:
        """Базовый URL сервиса аутентификации."""
        return f"http://{self.AUTH_SERVICE_HOST}:{self.AUTH_SERVICE_PORT}"

    @property
    def drivers_url(self) -> str:
        """Базовый URL сервиса водителей."""
        return f"http://{self.DRIVERS_SERVICE_HOST}:{self.DRIVERS_SERVICE_PORT}"

    @property
    def vehicles_url(self) -> str:
        """Базовый URL сервиса транспорта."""
        return f"http://{self.VEHICLES_SERVICE_HOST}:{self.VEHICLES_SERVICE_PORT}"


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "DEBUG"
    LOG_TO_FILE: bool = True
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_FORMAT: str = "colored"
    LOG_MAX_BYTES: int = 10485760
    LOG_BACKUP_COUNT: int = 5


class DatabaseSettings(BaseModel):
    """Настройки PostgreSQL."""
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "fleet"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_MIN_POOL_SIZE: int = 5
    DB_MAX_POOL_SIZE: int = 20
    DB_COMMAND_TIMEOUT: int = 60
    DB_RETRY_ATTEMPTS: int = 3
    DB_RETRY_DELAY: float = 1.0

    @field_validator("DB_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает пароль из переменных окружения."""
        if not v:
            return os.getenv("DB_PASSWORD", "")
        return v

    @property
    def dsn(self) -> str:
        """Возвращает DSN для подключения к PostgreSQL."""
        return (
            f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


class AuthSettings(BaseModel):
    """Настройки JWT и временных паролей."""
    JWT_SECRET: str = ""
    JWT_ISSUER: str = "fleet.auth"
    JWT_AUDIENCE: str = "fleet.api"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60
    TEMP_PASSWORD_LENGTH: int = 10

    @field_validator("JWT_SECRET", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает секрет из переменных окружения."""
        if not v:
            return os.getenv("JWT_SECRET", "")
        return v


class SmtpSettings(BaseModel):
    """Настройки SMTP для отправки временных паролей."""
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM_EMAIL: str = "no-reply@fleet.local"
    SMTP_FROM_NAME: str = "Fleet Control"
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT: float = 15.0


class HttpSettings(BaseModel):
    """Настройки межсервисных HTTP-вызовов."""
    HTTP_TIMEOUT: float = 10.0


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

class Settings(BaseSettings):
    """
    Главный класс настроек приложения.
    Агрегирует все секции конфигурации.
    """
    system: SystemSettings = Field(default_factory=SystemSettings)
    deployment: DeploymentSettings = Field(default_factory=DeploymentSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    smtp: SmtpSettings = Field(default_factory=SmtpSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @classmethod
    def from_config_json(cls) -> "Settings":
        """
        Создаёт объект Settings из config.json.
        Секреты и адреса переопределяются из переменных окружения.
        """
        config_data = load_config_json()
        
        # Фильтруем комментарии (ключи, начинающиеся с _comment_)
        data = {k: v for k, v in config_data.items() if not k.startswith("_comment_")}
        
        return cls(
            system=SystemSettings(
                PROJECT_NAME=data.get("PROJECT_NAME", "fleet_backend"),
                VERSION=data.get("VERSION", "1.0.0"),
                DEBUG=data.get("DEBUG", False),
                ENVIRONMENT=_env_or(data, "ENVIRONMENT", "development"),
                COMPONENT_MODE=_env_or(data, "COMPONENT_MODE", "all"),
            ),
            deployment=DeploymentSettings(
                GATEWAY_PORT=int(_env_or(data, "GATEWAY_PORT", 8100)),
                AUTH_SERVICE_HOST=_env_or(data, "AUTH_SERVICE_HOST", "auth_service"),
                AUTH_SERVICE_PORT=int(_env_or(data, "AUTH_SERVICE_PORT", 8101)),
                DRIVERS_SERVICE_HOST=_env_or(data, "DRIVERS_SERVICE_HOST", "drivers_service"),
                DRIVERS_SERVICE_PORT=int(_env_or(data, "DRIVERS_SERVICE_PORT", 8102)),
                VEHICLES_SERVICE_HOST=_env_or(data, "VEHICLES_SERVICE_HOST", "vehicles_service"),
                VEHICLES_SERVICE_PORT=int(_env_or(data, "VEHICLES_SERVICE_PORT", 8103)),
                ROUTES_SERVICE_PORT=int(_env_or(data, "ROUTES_SERVICE_PORT", 8104)),
                FUEL_SERVICE_PORT=int(_env_or(data, "FUEL_SERVICE_PORT", 8105)),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=data.get("LOG_LEVEL", "DEBUG"),
                LOG_TO_FILE=data.get("LOG_TO_FILE", True),
                LOG_FILE_PATH=data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_FORMAT=data.get("LOG_FORMAT", "json"),
                LOG_MAX_BYTES=data.get("LOG_MAX_BYTES", 10485760),
                LOG_BACKUP_COUNT=data.get("LOG_BACKUP_COUNT", 5),
            ),
            database=DatabaseSettings(
                DB_HOST=_env_or(data, "DB_HOST", "localhost"),
                DB_PORT=int(_env_or(data, "DB_PORT", 5432)),
                DB_NAME=_env_or(data, "DB_NAME", "fleet"),
                DB_USER=_env_or(data, "DB_USER", "postgres"),
                DB_PASSWORD=_env_or(data, "DB_PASSWORD", ""),
                DB_MIN_POOL_SIZE=data.get("DB_MIN_POOL_SIZE", 5),
                DB_MAX_POOL_SIZE=data.get("DB_MAX_POOL_SIZE", 20),
                DB_COMMAND_TIMEOUT=data.get("DB_COMMAND_TIMEOUT", 60),
                DB_RETRY_ATTEMPTS=data.get("DB_RETRY_ATTEMPTS", 3),
                DB_RETRY_DELAY=data.get("DB_RETRY_DELAY", 1.0),
            ),
            auth=AuthSettings(
                JWT_SECRET=_env_or(data, "JWT_SECRET", ""),
                JWT_ISSUER=_env_or(data, "JWT_ISSUER", "fleet.auth"),
                JWT_AUDIENCE=_env_or(data, "JWT_AUDIENCE", "fleet.api"),
                JWT_ALGORITHM=data.get("JWT_ALGORITHM", "HS256"),
                JWT_EXPIRE_MINUTES=int(data.get("JWT_EXPIRE_MINUTES", 60)),
                TEMP_PASSWORD_LENGTH=int(data.get("TEMP_PASSWORD_LENGTH", 10)),
            ),
            smtp=SmtpSettings(
                SMTP_HOST=_env_or(data, "SMTP_HOST", "localhost"),
                SMTP_PORT=int(_env_or(data, "SMTP_PORT", 587)),
                SMTP_USERNAME=_env_or(data, "SMTP_USERNAME", ""),
                SMTP_PASSWORD=_env_or(data, "SMTP_PASSWORD", ""),
                SMTP_FROM_EMAIL=_env_or(data, "SMTP_FROM_EMAIL", "no-reply@fleet.local"),
                SMTP_FROM_NAME=_env_or(data, "SMTP_FROM_NAME", "Fleet Control"),
                SMTP_USE_TLS=data.get("SMTP_USE_TLS", True),
                SMTP_TIMEOUT=data.get("SMTP_TIMEOUT", 15.0),
            ),
            http=HttpSettings(
                HTTP_TIMEOUT=data.get("HTTP_TIMEOUT", 10.0),
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    Использует кэширование для производительности.
    """
    from dotenv import load_dotenv
    
    # Загружаем .env файл
    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    
    return Settings.from_config_json()


# Экспорт синглтона для удобного импорта
settings = get_settings()
