"""
Журнал решений (лайк / пропуск) и точка входа для действия «оценить профиль».

Запись решения и создание матча — две отдельные транзакции: если процесс
упадёт между ними, лайк уже сохранён, а матч создастся при следующем
подходящем лайке любой из сторон.
"""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.database import upsert
from models.like import Like
from services.matching import MatchResult, try_form_match

logger = logging.getLogger(__name__)


async def record_decision(db: AsyncSession, liker_id: int, liked_id: int, is_like: bool) -> Like:
    """
    Upsert по (liker_id, liked_id): повторное решение перезаписывает вердикт,
    история не хранится. Атомарный INSERT ... ON CONFLICT DO UPDATE, без
    чтения-изменения-записи в приложении.
    """
    if liker_id == liked_id:
        raise ValueError("A user cannot like or pass themselves")

    stmt = upsert(db, Like).values(liker_id=liker_id, liked_id=liked_id, is_like=is_like)
    stmt = stmt.on_conflict_do_update(
        index_elements=[Like.liker_id, Like.liked_id],
        set_={"is_like": stmt.excluded.is_like},
    ).returning(Like)

    result = await db.scalars(stmt, execution_options={"populate_existing": True})
    like = result.one()
    await db.commit()

    logger.debug("decision %s → %s recorded: is_like=%s", liker_id, liked_id, is_like)
    return like


async def submit_decision(
    db: AsyncSession, liker_id: int, liked_id: int, is_like: bool
) -> tuple[Like, Optional[MatchResult]]:
    """Записывает решение и, если это лайк, пытается сформировать матч."""
    like = await record_decision(db, liker_id, liked_id, is_like)
    if not is_like:
        return like, None
    return like, await try_form_match(db, liker_id, liked_id)
