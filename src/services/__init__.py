# src/services/__init__.py
"""
Микросервисы приложения.

Архитектура:
- Каждый сервис: независимое FastAPI-приложение
- Общий PostgreSQL, у каждого сервиса своя схема
- Синхронная коммуникация по HTTP (httpx)

Сервисы:
- gateway: публичный REST, проверка JWT, оркестрация назначения водителя
- auth_service: пользователи, роли, вход, восстановление пароля
- drivers_service: реестр водителей, назначение пользователя
- vehicles_service: транспорт и типы техники
- routes_service, fuel_service: пока только диагностика БД
"""

__all__: list[str] = []
