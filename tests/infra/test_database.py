# tests/infra/test_database.py
"""
Тесты для менеджера базы данных.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import asyncpg
import pytest

import src.infra.database as database_module
from src.common.exceptions import ConflictError
from src.infra.database import (
    DatabaseManager,
    _init_schema,
    retry_on_connection_error,
    rows_affected,
    unique_violation_as_conflict,
)


class TestRetryOnConnectionError:
    """Тесты для декоратора retry_on_connection_error."""
    
    @pytest.mark.asyncio
    async def test_success_first_attempt(self) -> None:
        @retry_on_connection_error(max_attempts=3, delay=0.01)
        async def successful_func():
            return "success"
        
        assert await successful_func() == "success"
    
    @pytest.mark.asyncio
    async def test_retry_on_connection_error(self) -> None:
        """Повторная попытка после ConnectionRefusedError."""
        call_count = 0
        
        @retry_on_connection_error(max_attempts=3, delay=0.01)
        async def failing_then_success():
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise ConnectionRefusedError("Connection refused")
            return "success"
        
        assert await failing_then_success() == "success"
        assert call_count == 2
    
    @pytest.mark.asyncio
    async def test_max_attempts_exceeded(self) -> None:
        @retry_on_connection_error(max_attempts=2, delay=0.01)
        async def always_failing():
            raise ConnectionRefusedError("Connection refused")
        
        with pytest.raises(ConnectionRefusedError):
            await always_failing()
    
    @pytest.mark.asyncio
    async def test_non_connection_error_not_retried(self) -> None:
        call_count = 0
        
        @retry_on_connection_error(max_attempts=3, delay=0.01)
        async def raises_value_error():
            nonlocal call_count
            call_count += 1
            raise ValueError("Not a connection error")
        
        with pytest.raises(ValueError):
            await raises_value_error()
        
        assert call_count == 1


class TestRowsAffected:
    """Разбор статуса команды asyncpg."""
    
    @pytest.mark.parametrize(
        "status, expected",
        [("UPDATE 1", 1), ("UPDATE 0", 0), ("INSERT 0 3", 3), ("DELETE 12", 12), ("", 0), ("SELECT", 0)],
    )
    def test_parse(self, status: str, expected: int) -> None:
        assert rows_affected(status) == expected


class TestUniqueViolationAsConflict:
    """Нарушение уникального индекса -> ConflictError."""
    
    @pytest.mark.asyncio
    async def test_unique_violation_mapped(self) -> None:
        with pytest.raises(ConflictError, match="Plate ABC is already registered"):
            async with unique_violation_as_conflict("Plate ABC is already registered"):
                raise asyncpg.UniqueViolationError("duplicate key value")
    
    @pytest.mark.asyncio
    async def test_other_errors_pass_through(self) -> None:
        with pytest.raises(ValueError):
            async with unique_violation_as_conflict("unused"):
                raise ValueError("other")


class TestDatabaseManager:
    """Тесты для DatabaseManager."""
    
    @pytest.fixture
    def db_manager(self) -> DatabaseManager:
        # Сбрасываем синглтон для каждого теста
        DatabaseManager._instance = None
        DatabaseManager._pool = None
        return DatabaseManager()
    
    def test_singleton(self, db_manager: DatabaseManager) -> None:
        assert DatabaseManager() is db_manager
    
    def test_pool_not_initialized(self, db_manager: DatabaseManager) -> None:
        assert db_manager.is_connected is False
        with pytest.raises(RuntimeError, match="не инициализирован"):
            _ = db_manager.pool
    
    @pytest.mark.asyncio
    async def test_connect_creates_pool(self, db_manager: DatabaseManager) -> None:
        pool = MagicMock()
        with patch("asyncpg.create_pool", new=AsyncMock(return_value=pool)) as create_pool:
            await db_manager.connect(dsn="postgresql://u:p@h:5432/db", min_size=1, max_size=2)
        
        assert db_manager.pool is pool
        assert create_pool.await_args.kwargs["dsn"] == "postgresql://u:p@h:5432/db"

    @pytest.mark.asyncio
    async def test_concurrent_connect_creates_single_pool(self, db_manager: DatabaseManager) -> None:
        """Параллельные connect() при старте создают ровно один пул."""
        pool = MagicMock()

        async def slow_create_pool(**kwargs):
            await asyncio.sleep(0.01)
            return pool

        with patch("asyncpg.create_pool", new=AsyncMock(side_effect=slow_create_pool)) as create_pool:
            await asyncio.gather(
                *(db_manager.connect(dsn="postgresql://u:p@h:5432/db", min_size=1, max_size=2) for _ in range(5))
            )

        assert create_pool.await_count == 1
        assert db_manager.pool is pool

    @pytest.mark.asyncio
    async def test_connect_uses_given_retry_attempts(self, db_manager: DatabaseManager) -> None:
        """Число попыток подключения берётся из аргументов, а не зашито."""
        pool = MagicMock()
        side_effect = [ConnectionRefusedError("refused")] * 4 + [pool]
        with patch("asyncpg.create_pool", new=AsyncMock(side_effect=side_effect)) as create_pool:
            await db_manager.connect(dsn="postgresql://u:p@h:5432/db", retry_attempts=5, retry_delay=0)

        assert create_pool.await_count == 5
        assert db_manager.pool is pool

    @pytest.mark.asyncio
    async def test_connect_gives_up_after_retry_attempts(self, db_manager: DatabaseManager) -> None:
        with patch(
            "asyncpg.create_pool", new=AsyncMock(side_effect=ConnectionRefusedError("refused"))
        ) as create_pool:
            with pytest.raises(ConnectionRefusedError):
                await db_manager.connect(dsn="postgresql://u:p@h:5432/db", retry_attempts=2, retry_delay=0)

        assert create_pool.await_count == 2
        assert db_manager.is_connected is False
    
    @pytest.mark.asyncio
    async def test_disconnect_closes_pool(self, db_manager: DatabaseManager) -> None:
        pool = MagicMock()
        pool.close = AsyncMock()
        db_manager._pool = pool
        
        await db_manager.disconnect()
        
        pool.close.assert_awaited_once()
        assert db_manager.is_connected is False
    
    @pytest.mark.asyncio
    async def test_health_check_true(self, db_manager: DatabaseManager) -> None:
        with patch.object(DatabaseManager, "fetchval", new=AsyncMock(return_value=1)):
            assert await db_manager.health_check() is True
    
    @pytest.mark.asyncio
    async def test_health_check_without_pool(self, db_manager: DatabaseManager) -> None:
        """Без пула health_check возвращает False, а не падает."""
        assert await db_manager.health_check() is False


class TestInitSchema:
    """Применение migrations/init.sql."""
    
    def _db_with_transaction(self, conn: AsyncMock) -> MagicMock:
        db = MagicMock()
        tx = MagicMock()
        tx.__aenter__ = AsyncMock(return_value=conn)
        tx.__aexit__ = AsyncMock(return_value=False)
        db.transaction = MagicMock(return_value=tx)
        return db
    
    @pytest.mark.asyncio
    async def test_applies_schema_under_lock(self, mock_conn: AsyncMock) -> None:
        db = self._db_with_transaction(mock_conn)
        
        await _init_schema(db)
        
        statements = [call.args[0] for call in mock_conn.execute.await_args_list]
        assert "pg_advisory_xact_lock" in statements[0]
        assert "CREATE SCHEMA IF NOT EXISTS auth_schema" in statements[1]
    
    @pytest.mark.asyncio
    async def test_race_error_ignored(self, mock_conn: AsyncMock) -> None:
        mock_conn.execute = AsyncMock(side_effect=[None, asyncpg.DuplicateObjectError("exists")])
        db = self._db_with_transaction(mock_conn)
        
        await _init_schema(db)
    
    @pytest.mark.asyncio
    async def test_missing_schema_file(self, tmp_path: Path, mock_conn: AsyncMock) -> None:
        db = self._db_with_transaction(mock_conn)
        with patch("src.config.loader.get_project_root", return_value=tmp_path):
            await _init_schema(db)
        
        db.transaction.assert_not_called()


class TestInitDb:
    """init_db подключается и по флагу применяет схему."""
    
    @pytest.mark.asyncio
    async def test_without_schema(self) -> None:
        db = MagicMock()
        db.connect = AsyncMock()
        with patch.object(database_module, "get_db", return_value=db), \
             patch.object(database_module, "_init_schema", new=AsyncMock()) as init_schema:
            result = await database_module.init_db(apply_schema=False)
        
        assert result is db
        db.connect.assert_awaited_once()
        init_schema.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_passes_retry_settings(self) -> None:
        """DB_RETRY_ATTEMPTS и DB_RETRY_DELAY доходят до connect()."""
        from src.config import settings

        db = MagicMock()
        db.connect = AsyncMock()
        with patch.object(database_module, "get_db", return_value=db), \
             patch.object(database_module, "_init_schema", new=AsyncMock()):
            await database_module.init_db(apply_schema=False)

        kwargs = db.connect.await_args.kwargs
        assert kwargs["retry_attempts"] == settings.database.DB_RETRY_ATTEMPTS
        assert kwargs["retry_delay"] == settings.database.DB_RETRY_DELAY
