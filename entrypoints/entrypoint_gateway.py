#!/usr/bin/env python3
# entrypoint_gateway.py
"""
Точка входа для API Gateway.
"""

import asyncio
import os
import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
sys.path.insert(0, str(Path(__file__).parent.parent.resolve()))

# Имя сервиса для логов и JSON-формата
os.environ.setdefault("SERVICE_NAME", "gateway")

from src.common.logger import setup_logging
from main import run_service


async def main() -> None:
    """Запуск API Gateway."""
    setup_logging()
    await run_service("gateway")


if __name__ == "__main__":
    asyncio.run(main())
