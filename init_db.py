"""
Скрипт для инициализации базы данных.

Создаёт все таблицы напрямую через SQLAlchemy (без Alembic).
Удобно для локальной SQLite:
    DATABASE_URL=sqlite+aiosqlite:///./sloth.db python init_db.py
"""

import asyncio

from sloth.core.database import init_db


async def main():
    """Создать все таблицы."""
    print("Создание таблиц...")
    await init_db()
    print("✓ Таблицы созданы успешно!")


if __name__ == "__main__":
    asyncio.run(main())
