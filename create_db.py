# create_db.py
"""
Создаёт базу данных DB_NAME, если её ещё нет.
Схемы и таблицы создают сами сервисы при старте (migrations/init.sql).
"""

import asyncio

import asyncpg

from src.config import settings


async def create_db():
    db_name = settings.database.DB_NAME
    # Connect to default postgres DB to create new DB
    sys_conn = await asyncpg.connect(
        user=settings.database.DB_USER,
        password=settings.database.DB_PASSWORD,
        host=settings.database.DB_HOST,
        port=settings.database.DB_PORT,
        database="postgres",
    )
    try:
        exists = await sys_conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", db_name)
        if not exists:
            print(f"Creating database {db_name}...")
            # Имя базы нельзя передать параметром
            quoted = '"' + db_name.replace('"', '""') + '"'
            await sys_conn.execute(f"CREATE DATABASE {quoted}")
            print("Database created.")
        else:
            print(f"Database {db_name} already exists.")
    finally:
        await sys_conn.close()

if __name__ == "__main__":
    asyncio.run(create_db())
