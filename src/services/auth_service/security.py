# src/services/auth_service/security.py
"""
Хеширование паролей (passlib, bcrypt) и генерация временных паролей.
"""

from __future__ import annotations

import secrets
import string

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_TEMP_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """False и для неверного пароля, и для нераспознанного хеша."""
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


def generate_temporary_password(length: int = 10) -> str:
    """Случайный пароль из букв и цифр; минимум одна буква и одна цифра."""
    while True:
        password = "".join(secrets.choice(_TEMP_PASSWORD_ALPHABET) for _ in range(length))
        if any(c.isdigit() for c in password) and any(c.isalpha() for c in password):
            return password
