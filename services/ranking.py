"""
Ранжирование кандидатов для ленты.

Очки относительно запрашивающего:
  +3 за каждый общий интерес
  +2 за одинаковую (непустую) специальность, сравнение с учётом регистра
  +1 за одинаковый флаг участия в RSO (включая оба false)

Исключаются сам пользователь и все, по кому у него уже есть решение.
Порядок: очки по убыванию, затем id кандидата по возрастанию. Не больше 50.
"""
from dataclasses import dataclass

from sqlalchemy import case, func, literal, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from models.interest import UserInterest
from models.like import Like
from models.user import User

MAX_CANDIDATES = 50

SHARED_INTEREST_POINTS = 3
SAME_MAJOR_POINTS = 2
SAME_RSO_POINTS = 1


@dataclass(frozen=True)
class RankedCandidate:
    user: User
    score: int


def compatibility_score(me: User):
    """SQL-выражение очков совместимости строки User с пользователем me."""
    mine = aliased(UserInterest)
    theirs = aliased(UserInterest)
    shared_interests = (
        select(func.count())
        .select_from(mine)
        .join(theirs, theirs.interest_id == mine.interest_id)
        .where(mine.user_id == me.id, theirs.user_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )

    if me.major is None:
        major_points = literal(0)
    else:
        major_points = case((User.major == me.major, SAME_MAJOR_POINTS), else_=0)

    rso_points = case((User.is_rso == bool(me.is_rso), SAME_RSO_POINTS), else_=0)

    return shared_interests * SHARED_INTEREST_POINTS + major_points + rso_points


async def rank_candidates(
    db: AsyncSession, user_id: int, limit: int = MAX_CANDIDATES
) -> list[RankedCandidate]:
    """Только чтение: одинаковый снимок данных даёт одинаковый результат."""
    me = await db.get(User, user_id, populate_existing=True)
    if me is None:
        raise ValueError(f"User {user_id} not found")

    acted_on = select(Like.liked_id).where(Like.liker_id == me.id)
    score = compatibility_score(me).label("score")

    stmt = (
        select(User, score)
        .where(
            User.id != me.id,
            User.id.not_in(acted_on),
        )
        .order_by(score.desc(), User.id.asc())
        .limit(min(limit, MAX_CANDIDATES))
    )
    result = await db.execute(stmt)
    return [RankedCandidate(user=user, score=int(points)) for user, points in result.all()]
