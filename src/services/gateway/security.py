# src/services/gateway/security.py
"""
Проверка Bearer-токена для маршрутов /api/*.
"""

from __future__ import annotations

from typing import Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.common.exceptions import UnauthorizedError
from src.config.loader import AuthSettings
from src.services.gateway.dependencies import get_auth_settings
from src.shared.tokens import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    config: AuthSettings = Depends(get_auth_settings),
) -> dict[str, Any]:
    """Claims токена. Нет токена, он просрочен или невалиден -> 401."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Token not provided")
    return decode_access_token(credentials.credentials, config)
