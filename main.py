#!/usr/bin/env python3
# main.py
"""
Главная точка входа fleet back end.
Запускает один микросервис или все сразу в зависимости от аргументов.

Использование:
    python main.py [gateway|auth_service|drivers_service|vehicles_service|routes_service|fuel_service|all]
"""

from __future__ import annotations

import asyncio
import signal
import sys

import uvicorn

from src.config import settings
from src.common.logger import setup_logging, log_info, log_error
from src.common.constants import TypeMsg


# Режим -> (путь к приложению, атрибут порта в settings.deployment, название)
SERVICES: dict[str, tuple[str, str, str]] = {
    "gateway": ("src.services.gateway.app:app", "GATEWAY_PORT", "API Gateway"),
    "auth_service": ("src.services.auth_service.app:app", "AUTH_SERVICE_PORT", "Auth Service"),
    "drivers_service": ("src.services.drivers_service.app:app", "DRIVERS_SERVICE_PORT", "Drivers Service"),
    "vehicles_service": ("src.services.vehicles_service.app:app", "VEHICLES_SERVICE_PORT", "Vehicles Service"),
    "routes_service": ("src.services.routes_service.app:app", "ROUTES_SERVICE_PORT", "Routes Service"),
    "fuel_service": ("src.services.fuel_service.app:app", "FUEL_SERVICE_PORT", "Fuel Service"),
}

VALID_MODES = (*SERVICES, "all")

# Глобальный флаг для graceful shutdown
_shutdown_event: asyncio.Event | None = None
_running_tasks: list[asyncio.Task] = []


def setup_signal_handlers() -> None:
    """Настраивает обработчики сигналов для graceful shutdown."""
    global _shutdown_event
    _shutdown_event = asyncio.Event()
    
    def signal_handler(sig: int) -> None:
        """Обработчик сигналов SIGINT и SIGTERM."""
        if _shutdown_event and not _shutdown_event.is_set():
            print(f"\nПолучен сигнал остановки (sig={sig}), завершаем работу...")
            _shutdown_event.set()
            for task in _running_tasks:
                if not task.done():
                    task.cancel()
    
    try:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))
    except NotImplementedError:
        # Windows не поддерживает add_signal_handler
        signal.signal(signal.SIGINT, lambda s, f: signal_handler(s))
        signal.signal(signal.SIGTERM, lambda s, f: signal_handler(s))


def build_server_config(mode: str) -> uvicorn.Config:
    """Конфигурация uvicorn для сервиса по имени режима."""
    app_path, port_attr, _ = SERVICES[mode]
    return uvicorn.Config(
        app_path,
        host="0.0.0.0",
        port=getattr(settings.deployment, port_attr),
        reload=settings.system.DEBUG,
        log_level="debug" if settings.system.DEBUG else "info",
    )


async def run_service(mode: str) -> None:
    """Запускает один микросервис и ждёт его остановки."""
    config = build_server_config(mode)
    title = SERVICES[mode][2]
    
    await log_info(f"Запуск {title} на порту {config.port}...", type_msg=TypeMsg.INFO)
    
    server = uvicorn.Server(config)
    try:
        await server.serve()
    except asyncio.CancelledError:
        await log_info(f"{title}: graceful shutdown", type_msg=TypeMsg.DEBUG)
        await server.shutdown()


async def run_all() -> None:
    """Все микросервисы параллельно в одном процессе (для разработки)."""
    global _running_tasks
    
    await log_info(f"Запуск всех микросервисов ({', '.join(SERVICES)})...", type_msg=TypeMsg.INFO)
    
    _running_tasks = [asyncio.create_task(run_service(mode)) for mode in SERVICES]
    try:
        await asyncio.gather(*_running_tasks, return_exceptions=True)
    except asyncio.CancelledError:
        await log_info("Отмена всех микросервисов...", type_msg=TypeMsg.INFO)
        for task in _running_tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*_running_tasks, return_exceptions=True)
        raise


def print_usage() -> None:
    print("\n" + "=" * 80)
    print(f"  FLEET BACKEND v{settings.system.VERSION} — режимы запуска")
    print("=" * 80)
    for mode, (_, port_attr, title) in SERVICES.items():
        print(f"  {mode:<18} — {title} (:{getattr(settings.deployment, port_attr)})")
    print(f"  {'all':<18} — все микросервисы одновременно")
    print("\nРежим без аргумента берётся из COMPONENT_MODE.")


def resolve_mode(argv: list[str]) -> str | None:
    """Режим из аргумента командной строки или COMPONENT_MODE."""
    if len(argv) > 1:
        return argv[1].strip().lower()
    return (settings.system.COMPONENT_MODE or "").strip().lower() or None


async def main(mode: str | None = None) -> None:
    """
    Главная функция запуска.
    
    Args:
        mode: Имя сервиса или all. Если None, берётся из argv/COMPONENT_MODE.
    """
    setup_logging()
    setup_signal_handlers()
    
    mode = mode or resolve_mode(sys.argv)
    if mode not in VALID_MODES:
        await log_error(f"Неизвестный режим: {mode}")
        print_usage()
        sys.exit(2)
    
    await log_info(
        f"Fleet backend v{settings.system.VERSION} — запуск в режиме '{mode}'",
        type_msg=TypeMsg.INFO,
    )
    
    try:
        if mode == "all":
            await run_all()
        else:
            await run_service(mode)
    except asyncio.CancelledError:
        await log_info("Завершение работы...", type_msg=TypeMsg.INFO)
    finally:
        await log_info("Приложение остановлено", type_msg=TypeMsg.INFO)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nОстановлено пользователем")
