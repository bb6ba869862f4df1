# src/services/diagnostics.py
"""
Диагностика подключения к БД. Подключается в каждый сервис.
"""

from __future__ import annotations

from datetime import datetime

import asyncpg
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.common.logger import log_error
from src.infra.database import DatabaseManager, get_db

router = APIRouter(prefix="/database", tags=["diagnostics"])


@router.get("/test-connection")
async def test_connection(db: DatabaseManager = Depends(get_db)):
    """Проверяет, что пул отвечает на SELECT 1."""
    is_connected = db.is_connected and await db.health_check()
    if is_connected:
        return {
            "success": True,
            "message": "Database connection successful",
            "timestamp": datetime.now().isoformat(),
        }
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Could not connect to the database",
            "timestamp": datetime.now().isoformat(),
        },
    )


@router.get("/select-test")
async def select_test(db: DatabaseManager = Depends(get_db)):
    """Выполняет тестовый SELECT и возвращает строки."""
    try:
        rows = await db.fetch("SELECT 1 AS test_value, NOW() AS current_datetime")
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, RuntimeError) as e:
        await log_error(f"Ошибка тестового запроса к БД: {e}")
        return JSONResponse(status_code=500, content={"success": False, "message": str(e)})
    
    return {
        "success": True,
        "data": [
            {"test_value": row["test_value"], "current_datetime": row["current_datetime"].isoformat()}
            for row in rows
        ],
    }


@router.get("/database-info")
async def database_info(db: DatabaseManager = Depends(get_db)):
    """Имя базы, версия сервера и пользователь текущего соединения."""
    try:
        row = await db.fetchrow(
            "SELECT current_database() AS current_database, version() AS server_version, current_user AS current_user"
        )
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, RuntimeError) as e:
        await log_error(f"Ошибка получения информации о БД: {e}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": str(e), "timestamp": datetime.now().isoformat()},
        )

    return {
        "success": True,
        "data": dict(row) if row is not None else {},
        "timestamp": datetime.now().isoformat(),
    }


# Только для сервиса транспорта: первые строки таблицы vehicles
vehicles_router = APIRouter(prefix="/database", tags=["diagnostics"])


@vehicles_router.get("/select-vehicles")
async def select_vehicles(db: DatabaseManager = Depends(get_db)):
    try:
        rows = await db.fetch("SELECT * FROM vehicles_schema.vehicles ORDER BY id LIMIT 10")
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, RuntimeError) as e:
        await log_error(f"Ошибка SELECT по vehicles: {e}")
        return JSONResponse(status_code=500, content={"success": False, "message": str(e)})

    return {
        "success": True,
        "data": [dict(row) for row in rows],
        "row_count": len(rows),
        "timestamp": datetime.now().isoformat(),
    }
