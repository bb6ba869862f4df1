# src/shared/__init__.py
"""
Общий код между микросервисами.

Модули:
- models: общие DTO и Pydantic-модели
- tokens: выпуск и проверка JWT
"""

__all__: list[str] = []
