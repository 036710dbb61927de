"""
Справочник интересов: свободный текст тегов → стабильные id.

Интерес создаётся при первом использовании любым пользователем и никогда
не удаляется; пользователю принадлежат только строки user_interests.
"""
import logging
import re
from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import upsert
from core.id_generator import MAX_ID_ATTEMPTS, IdAllocationError, generate_random_id
from models.interest import Interest, UserInterest

logger = logging.getLogger(__name__)

MAX_INTEREST_LENGTH = 64

_WHITESPACE = re.compile(r"\s+")


def normalize_interest_names(names: Iterable[str]) -> list[str]:
    """Обрезает пробелы, схлопывает внутренние, убирает пустые и дубли (порядок сохраняется)."""
    seen: set[str] = set()
    result: list[str] = []
    for raw in names:
        if raw is None:
            continue
        name = _WHITESPACE.sub(" ", raw).strip()[:MAX_INTEREST_LENGTH].strip()
        if not name or name in seen:
            continue
        seen.add(name)
        result.append(name)
    return result


async def ensure_interests(db: AsyncSession, names: Iterable[str]) -> list[Interest]:
    """
    Возвращает Interest для каждого имени, создавая недостающие.
    INSERT ... ON CONFLICT DO NOTHING: параллельные запросы с одним и тем
    же новым тегом получают одну и ту же строку. Имена, не вставленные из-за
    занятого случайного id, вставляются повторно с новым id.
    """
    names = normalize_interest_names(names)
    if not names:
        return []

    by_name: dict[str, Interest] = {}
    missing = names
    for _ in range(MAX_ID_ATTEMPTS):
        for name in missing:
            stmt = (
                upsert(db, Interest)
                .values(id=generate_random_id("interests"), name=name)
                .on_conflict_do_nothing()
            )
            await db.execute(stmt)

        result = await db.execute(select(Interest).where(Interest.name.in_(missing)))
        by_name.update((interest.name, interest) for interest in result.scalars().all())
        missing = [name for name in names if name not in by_name]
        if not missing:
            return [by_name[name] for name in names]

    raise IdAllocationError(f"Could not allocate interest ids for {missing}")


async def set_user_interests(db: AsyncSession, user_id: int, names: Iterable[str]) -> list[str]:
    """Заменяет набор интересов пользователя. Коммит остаётся за вызывающим."""
    interests = await ensure_interests(db, names)

    await db.execute(delete(UserInterest).where(UserInterest.user_id == user_id))
    for interest in interests:
        stmt = (
            upsert(db, UserInterest)
            .values(user_id=user_id, interest_id=interest.id)
            .on_conflict_do_nothing(index_elements=[UserInterest.user_id, UserInterest.interest_id])
        )
        await db.execute(stmt)

    logger.debug("user %s interests set to %s", user_id, [i.name for i in interests])
    return sorted(interest.name for interest in interests)


async def fetch_interest_names(db: AsyncSession, user_ids: Iterable[int]) -> dict[int, list[str]]:
    """Одним запросом собирает user_id → отсортированный список названий интересов."""
    user_ids = list(user_ids)
    if not user_ids:
        return {}

    result = await db.execute(
        select(UserInterest.user_id, Interest.name)
        .join(Interest, Interest.id == UserInterest.interest_id)
        .where(UserInterest.user_id.in_(user_ids))
        .order_by(UserInterest.user_id, Interest.name)
    )
    names: dict[int, list[str]] = {uid: [] for uid in user_ids}
    for uid, name in result.all():
        names[uid].append(name)
    return names
