# src/shared/tokens.py
"""
Выпуск и проверка JWT (PyJWT, HS256).
Выпускает auth_service, проверяет шлюз: обоим нужен общий JWT_SECRET.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from src.common.exceptions import InternalError, UnauthorizedError
from src.config.loader import AuthSettings
from src.shared.models.user_dto import UserCredentials


def _require_secret(config: AuthSettings) -> str:
    if not config.JWT_SECRET:
        raise InternalError("JWT_SECRET is not configured")
    return config.JWT_SECRET


def create_access_token(
    user: UserCredentials,
    config: AuthSettings,
    now: datetime | None = None,
) -> tuple[str, int]:
    """
    Выпускает JWT для пользователя.
    
    Returns:
        (токен, время истечения в unix-секундах)
    """
    issued_at = now or datetime.now(timezone.utc)
    expires = issued_at + timedelta(minutes=config.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": str(user.id),
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "role_id": user.role_id,
        "status": user.status,
        "iss": config.JWT_ISSUER,
        "aud": config.JWT_AUDIENCE,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires.timestamp()),
    }
    if user.role_name:
        payload["role"] = user.role_name
    token = jwt.encode(payload, _require_secret(config), algorithm=config.JWT_ALGORITHM)
    return token, payload["exp"]


def decode_access_token(token: str, config: AuthSettings) -> dict[str, Any]:
    """
    Проверяет подпись, срок, issuer и audience.
    
    Raises:
        UnauthorizedError: токен отсутствует, истёк или невалиден
    """
    if not token:
        raise UnauthorizedError("Token not provided")
    try:
        return jwt.decode(
            token,
            _require_secret(config),
            algorithms=[config.JWT_ALGORITHM],
            audience=config.JWT_AUDIENCE,
            issuer=config.JWT_ISSUER,
            options={"require": ["exp", "id"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise UnauthorizedError("Token expired") from e
    except jwt.PyJWTError as e:
        raise UnauthorizedError("Invalid token") from e
