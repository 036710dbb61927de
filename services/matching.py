"""
Превращение двух независимых лайков во взаимный матч.

Пара хранится в каноническом порядке (меньший id — user1_id), а вставка
матча — один условный INSERT ... ON CONFLICT DO NOTHING по уникальному
ключу (user1_id, user2_id). Параллельные запросы обеих сторон не могут
создать две строки: синхронизацию обеспечивает хранилище, а не процесс.
Если случайный id матча уже занят другой парой, вставка повторяется с
новым id.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import upsert
from core.id_generator import MAX_ID_ATTEMPTS, IdAllocationError, generate_random_id
from models.like import Like
from models.match import Match

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    match: Match
    # True только для вызова, который фактически вставил строку
    created: bool


def canonical_pair(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a < b else (b, a)


async def has_liked(db: AsyncSession, liker_id: int, liked_id: int) -> bool:
    """Есть ли решение liker → liked с вердиктом «лайк». Поиск по первичному ключу."""
    result = await db.execute(
        select(Like.is_like).where(
            Like.liker_id == liker_id,
            Like.liked_id == liked_id,
        )
    )
    return bool(result.scalar_one_or_none())


async def get_match(db: AsyncSession, user_a: int, user_b: int) -> Optional[Match]:
    user1_id, user2_id = canonical_pair(user_a, user_b)
    result = await db.execute(
        select(Match).where(
            Match.user1_id == user1_id,
            Match.user2_id == user2_id,
        )
    )
    return result.scalar_one_or_none()


async def try_form_match(db: AsyncSession, liker_id: int, liked_id: int) -> Optional[MatchResult]:
    """
    Вызывается после записи лайка liker → liked.

    1. Нет встречного лайка — матча нет, возвращаем None.
    2. Пара приводится к (min, max).
    3. Вставка, если строки ещё нет; иначе возвращается существующая.
    Матчи неизменяемы: повторный вызов ничего не меняет.
    """
    if not await has_liked(db, liked_id, liker_id):
        return None

    user1_id, user2_id = canonical_pair(liker_id, liked_id)

    for _ in range(MAX_ID_ATTEMPTS):
        # Без conflict target DO NOTHING гасит и занятую пару, и занятый id
        stmt = (
            upsert(db, Match)
            .values(id=generate_random_id("matches"), user1_id=user1_id, user2_id=user2_id)
            .on_conflict_do_nothing()
            .returning(Match)
        )
        inserted = (await db.scalars(stmt)).one_or_none()
        await db.commit()

        if inserted is not None:
            logger.info("match %s formed between %s and %s", inserted.id, user1_id, user2_id)
            return MatchResult(match=inserted, created=True)

        existing = await get_match(db, user1_id, user2_id)
        if existing is not None:
            return MatchResult(match=existing, created=False)

        logger.warning("match id for %s↔%s already taken, retrying", user1_id, user2_id)

    raise IdAllocationError(f"Could not allocate a match id for {user1_id}↔{user2_id}")
