# create_dev_user.py
"""
Создаёт администратора для локальной разработки, чтобы получить первый токен.

    python create_dev_user.py [username] [email] [password]
"""

import asyncio
import os
import sys

# Add project root to path
sys.path.append(os.getcwd())

from src.infra.database import close_db, init_db
from src.services.auth_service.repository import UserRepository
from src.services.auth_service.security import hash_password

ADMIN_ROLE_ID = 1


async def main(username: str = "admin", email: str = "admin@fleet.local", password: str = "admin123"):
    db = await init_db()
    users = UserRepository(db)
    print("Connected to DB")

    if await users.username_exists(username):
        print(f"User {username} already exists")
    else:
        user_id = await users.create_user(
            email=email,
            username=username,
            password_hash=hash_password(password),
            role_id=ADMIN_ROLE_ID,
        )
        print(f"User {username} created with id {user_id}")

    await close_db()

if __name__ == "__main__":
    asyncio.run(main(*sys.argv[1:4]))
