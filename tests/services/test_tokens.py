# tests/services/test_tokens.py
"""
Unit тесты выпуска и проверки JWT (src/shared/tokens.py).
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
import pytest

from src.common.exceptions import InternalError, UnauthorizedError
from src.config.loader import AuthSettings
from src.shared.models.user_dto import UserCredentials
from src.shared.tokens import create_access_token, decode_access_token


@pytest.fixture
def credentials(sample_credentials_data: dict[str, Any]) -> UserCredentials:
    return UserCredentials(**sample_credentials_data)


class TestCreateAccessToken:
    """Тесты выпуска токена."""

    def test_token_contains_identity_claims(
        self, credentials: UserCredentials, auth_settings: AuthSettings
    ) -> None:
        """Тест наличия id, имени и роли в токене."""
        token, expires_at = create_access_token(credentials, auth_settings)

        payload = jwt.decode(
            token,
            auth_settings.JWT_SECRET,
            algorithms=["HS256"],
            audience="fleet.api",
            issuer="fleet.auth",
        )
        assert payload["id"] == 7
        assert payload["sub"] == "7"
        assert payload["username"] == "ana"
        assert payload["role"] == "Chofer"
        assert payload["exp"] == expires_at

    def test_expiration_follows_settings(
        self, credentials: UserCredentials, auth_settings: AuthSettings
    ) -> None:
        """Тест срока жизни токена из настроек."""
        now = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

        _, expires_at = create_access_token(credentials, auth_settings, now=now)

        assert expires_at == int((now + timedelta(minutes=60)).timestamp())

    def test_missing_secret_raises_internal(
        self, credentials: UserCredentials, auth_settings: AuthSettings
    ) -> None:
        """Тест ошибки при пустом JWT_SECRET."""
        config = auth_settings.model_copy(update={"JWT_SECRET": ""})

        with pytest.raises(InternalError):
            create_access_token(credentials, config)


class TestDecodeAccessToken:
    """Тесты проверки токена."""

    def test_decode_valid_token(
        self, credentials: UserCredentials, auth_settings: AuthSettings
    ) -> None:
        token, _ = create_access_token(credentials, auth_settings)

        claims = decode_access_token(token, auth_settings)

        assert claims["id"] == credentials.id

    def test_empty_token(self, auth_settings: AuthSettings) -> None:
        with pytest.raises(UnauthorizedError, match="not provided"):
            decode_access_token("", auth_settings)

    def test_expired_token(self, credentials: UserCredentials, auth_settings: AuthSettings) -> None:
        """Тест истёкшего токена."""
        issued = datetime.now(timezone.utc) - timedelta(hours=5)
        token, _ = create_access_token(credentials, auth_settings, now=issued)

        with pytest.raises(UnauthorizedError, match="expired"):
            decode_access_token(token, auth_settings)

    def test_foreign_secret_rejected(
        self, credentials: UserCredentials, auth_settings: AuthSettings
    ) -> None:
        """Тест токена, подписанного другим секретом."""
        token, _ = create_access_token(credentials, auth_settings)
        other = auth_settings.model_copy(update={"JWT_SECRET": "another_secret_key_long_enough_for_hmac"})

        with pytest.raises(UnauthorizedError, match="Invalid"):
            decode_access_token(token, other)

    def test_wrong_audience_rejected(
        self, credentials: UserCredentials, auth_settings: AuthSettings
    ) -> None:
        token, _ = create_access_token(credentials, auth_settings)
        other = auth_settings.model_copy(update={"JWT_AUDIENCE": "someone.else"})

        with pytest.raises(UnauthorizedError):
            decode_access_token(token, other)

    def test_garbage_token(self, auth_settings: AuthSettings) -> None:
        with pytest.raises(UnauthorizedError):
            decode_access_token("not.a.jwt", auth_settings)
