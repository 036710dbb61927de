from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .config import settings


def build_engine(url: str, **kwargs) -> AsyncEngine:
    """
    Создаёт async-движок. Для SQLite дополнительно включает проверку
    внешних ключей на каждом новом соединении.
    """
    engine = create_async_engine(url, future=True, **kwargs)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


engine = build_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,      # проверка соединения перед использованием
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Асинхронный генератор сессии.
    Используется как Depends(get_db) в роутерах.
    """
    async with AsyncSessionLocal() as session:
        yield session


def upsert(db: AsyncSession, model):
    """
    INSERT ... ON CONFLICT для диалекта, к которому привязана сессия.
    Возвращает dialect-specific insert с методами on_conflict_do_*.
    """
    if db.get_bind().dialect.name == "postgresql":
        return postgresql.insert(model)
    return sqlite.insert(model)
