import pytest
from sqlalchemy import func, select

from core.id_generator import IdAllocationError
from models.interest import Interest, UserInterest
from services.interests import (
    ensure_interests,
    fetch_interest_names,
    normalize_interest_names,
    set_user_interests,
)


def test_normalize_strips_collapses_and_dedupes():
    names = ["  Hiking ", "Board   Games", "", "   ", "Hiking", None, "hiking"]

    assert normalize_interest_names(names) == ["Hiking", "Board Games", "hiking"]


def test_normalize_truncates_long_names():
    assert normalize_interest_names(["x" * 100]) == ["x" * 64]


@pytest.mark.asyncio
async def test_ensure_interests_reuses_existing_ids(db):
    first = await ensure_interests(db, ["Coffee", "Chess"])
    await db.commit()
    second = await ensure_interests(db, ["Chess", "Coffee", "Jazz"])
    await db.commit()

    assert [i.name for i in second] == ["Chess", "Coffee", "Jazz"]
    assert {i.name: i.id for i in first} == {
        i.name: i.id for i in second if i.name in ("Coffee", "Chess")
    }
    total = (await db.execute(select(func.count()).select_from(Interest))).scalar_one()
    assert total == 3


@pytest.mark.asyncio
async def test_ensure_interests_with_nothing_to_do(db):
    assert await ensure_interests(db, ["", "  "]) == []


@pytest.mark.asyncio
async def test_set_user_interests_replaces_previous_set(db, make_user):
    await make_user(101, interests=["Hiking", "Coffee"])

    names = await set_user_interests(db, 101, ["Coffee", "Yoga", "Coffee"])
    await db.commit()

    assert names == ["Coffee", "Yoga"]
    assert (await fetch_interest_names(db, [101])) == {101: ["Coffee", "Yoga"]}
    rows = (await db.execute(select(func.count()).select_from(UserInterest))).scalar_one()
    assert rows == 2
    # «Hiking» остаётся в справочнике, хотя им больше никто не пользуется
    assert (await db.execute(select(Interest).where(Interest.name == "Hiking"))).scalar_one()


@pytest.mark.asyncio
async def test_fetch_interest_names_covers_users_without_interests(db, make_user):
    await make_user(101, interests=["Reading", "Chess"])
    await make_user(201)

    assert await fetch_interest_names(db, [101, 201]) == {
        101: ["Chess", "Reading"],
        201: [],
    }
    assert await fetch_interest_names(db, []) == {}


@pytest.mark.asyncio
async def test_taken_interest_id_is_reissued(db, monkeypatch):
    ids = iter([4202, 4202, 4302])
    monkeypatch.setattr("services.interests.generate_random_id", lambda entity: next(ids))

    (chess,) = await ensure_interests(db, ["Chess"])
    (jazz,) = await ensure_interests(db, ["Jazz"])
    await db.commit()

    assert (chess.id, jazz.id) == (4202, 4302)
    assert jazz.name == "Jazz"


@pytest.mark.asyncio
async def test_interest_id_allocation_gives_up(db, monkeypatch):
    monkeypatch.setattr("services.interests.generate_random_id", lambda entity: 4202)
    await ensure_interests(db, ["Chess"])

    with pytest.raises(IdAllocationError):
        await ensure_interests(db, ["Chess", "Jazz"])
