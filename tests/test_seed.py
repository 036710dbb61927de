import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.database import build_engine
from models.match import Match
from models.message import Message
from models.user import User
from utils import seed_db


async def _count(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.mark.asyncio
async def test_seed_is_repeatable(tmp_path, monkeypatch):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}")
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(seed_db, "engine", engine)
    monkeypatch.setattr(seed_db, "AsyncSessionLocal", factory)

    await seed_db.seed()
    await seed_db.seed()

    async with factory() as session:
        assert await _count(session, User) == len(seed_db.MOCK_USERS)
        assert await _count(session, Match) == 4
        assert await _count(session, Message) == len(seed_db.MOCK_MESSAGES)
    await engine.dispose()
