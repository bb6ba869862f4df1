# src/infra/__init__.py
"""
Инфраструктурный слой.
PostgreSQL, HTTP-вызовы соседних сервисов, SMTP.
"""

from src.infra.database import DatabaseManager, get_db
from src.infra.http_client import ServiceClient

__all__ = [
    "DatabaseManager",
    "get_db",
    "ServiceClient",
]
