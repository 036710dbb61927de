import asyncio

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.database import build_engine
from core.id_generator import IdAllocationError
from models.base import Base
from models.like import Like
from models.match import Match
from models.user import User
from services.likes import record_decision, submit_decision
from services.matching import canonical_pair, get_match, try_form_match


async def _count_matches(db) -> int:
    return (await db.execute(select(func.count()).select_from(Match))).scalar_one()


def test_canonical_pair_puts_smaller_id_first():
    assert canonical_pair(7, 3) == (3, 7)
    assert canonical_pair(3, 7) == (3, 7)


@pytest.mark.asyncio
async def test_one_sided_like_forms_no_match(db, make_user):
    await make_user(101)
    await make_user(201)

    _, result = await submit_decision(db, 101, 201, True)

    assert result is None
    assert await _count_matches(db) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("first, second", [(101, 201), (201, 101)])
async def test_mutual_like_forms_one_canonical_match(db, make_user, first, second):
    await make_user(101)
    await make_user(201)

    await submit_decision(db, first, second, True)
    _, result = await submit_decision(db, second, first, True)

    assert result.created is True
    assert (result.match.user1_id, result.match.user2_id) == (101, 201)
    assert await _count_matches(db) == 1


@pytest.mark.asyncio
async def test_repeated_like_returns_existing_match(db, make_user):
    await make_user(101)
    await make_user(201)
    await submit_decision(db, 101, 201, True)
    _, formed = await submit_decision(db, 201, 101, True)

    _, again = await submit_decision(db, 101, 201, True)
    third = await try_form_match(db, 201, 101)

    assert again.created is False
    assert third.created is False
    assert again.match.id == formed.match.id == third.match.id
    assert await _count_matches(db) == 1


@pytest.mark.asyncio
async def test_later_pass_does_not_revoke_match(db, make_user):
    await make_user(101)
    await make_user(201)
    await submit_decision(db, 101, 201, True)
    await submit_decision(db, 201, 101, True)

    await submit_decision(db, 101, 201, False)

    assert await get_match(db, 201, 101) is not None


@pytest.mark.asyncio
async def test_pass_retracts_eligibility_for_future_matches(db, make_user):
    await make_user(101)
    await make_user(201)
    await submit_decision(db, 101, 201, True)
    await submit_decision(db, 101, 201, False)

    _, result = await submit_decision(db, 201, 101, True)

    assert result is None
    assert await _count_matches(db) == 0


@pytest.mark.asyncio
async def test_match_is_formed_lazily_after_interrupted_request(db, make_user):
    await make_user(101)
    await make_user(201)
    await submit_decision(db, 101, 201, True)
    # Лайк записан, но до поиска матча дело не дошло
    await record_decision(db, 201, 101, True)
    assert await _count_matches(db) == 0

    _, result = await submit_decision(db, 101, 201, True)

    assert result.created is True
    assert await _count_matches(db) == 1


@pytest.mark.asyncio
async def test_concurrent_mutual_likes_create_exactly_one_match(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async with factory() as setup:
        setup.add_all([User(id=101, oid="oid-101"), User(id=201, oid="oid-201")])
        await setup.commit()

    async def like(liker_id: int, liked_id: int):
        async with factory() as session:
            _, result = await submit_decision(session, liker_id, liked_id, True)
            return result

    try:
        results = await asyncio.gather(like(101, 201), like(201, 101))

        created = [r for r in results if r is not None and r.created]
        assert len(created) == 1

        async with factory() as check:
            assert await _count_matches(check) == 1
            third = await try_form_match(check, 101, 201)
            assert third.created is False
            assert third.match.id == created[0].match.id
            assert await _count_matches(check) == 1
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_taken_match_id_is_reissued(db, make_user, monkeypatch):
    for user_id in (101, 201, 301, 401):
        await make_user(user_id)
    ids = iter([4205, 4205, 4305])
    monkeypatch.setattr("services.matching.generate_random_id", lambda entity: next(ids))

    await submit_decision(db, 101, 201, True)
    _, first = await submit_decision(db, 201, 101, True)
    await submit_decision(db, 301, 401, True)
    _, second = await submit_decision(db, 401, 301, True)

    assert first.match.id == 4205
    assert second.created is True
    assert second.match.id == 4305
    assert (second.match.user1_id, second.match.user2_id) == (301, 401)
    assert await _count_matches(db) == 2


@pytest.mark.asyncio
async def test_exhausted_id_attempts_keep_the_like(db, make_user, monkeypatch):
    for user_id in (101, 201, 301, 401):
        await make_user(user_id)
    monkeypatch.setattr("services.matching.generate_random_id", lambda entity: 4205)
    await submit_decision(db, 101, 201, True)
    await submit_decision(db, 201, 101, True)
    await submit_decision(db, 301, 401, True)

    with pytest.raises(IdAllocationError):
        await submit_decision(db, 401, 301, True)

    like = await db.get(Like, (401, 301))
    assert like is not None and like.is_like is True
    assert await get_match(db, 301, 401) is None

    # Следующий лайк любой из сторон достраивает матч
    monkeypatch.setattr("services.matching.generate_random_id", lambda entity: 4305)
    _, healed = await submit_decision(db, 301, 401, True)
    assert healed.created is True
    assert await _count_matches(db) == 2
