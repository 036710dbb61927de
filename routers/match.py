# routers/match.py

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import get_current_user
from models.user import User
from models.match import Match as MatchModel
from schemas.match import MatchWithUser
from services.interests import fetch_interest_names
from utils.user_helpers import build_user_read

router = APIRouter(prefix="/matches", tags=["matches"])


@router.get(
    "",
    response_model=List[MatchWithUser],
    summary="Список пользователей, с которыми у вас совпадения"
)
async def get_my_matches(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[MatchWithUser]:
    # Ищем все матчи, где текущий пользователь — участник
    stmt = (
        select(MatchModel)
        .where(
            or_(
                MatchModel.user1_id == current_user.id,
                MatchModel.user2_id == current_user.id,
            )
        )
        .order_by(MatchModel.created_at.desc(), MatchModel.id.desc())
    )
    matches = (await db.execute(stmt)).scalars().all()
    if not matches:
        return []

    # ID другого участника каждого матча
    other_ids = {
        m.id: m.user2_id if m.user1_id == current_user.id else m.user1_id
        for m in matches
    }
    users = (
        await db.execute(select(User).where(User.id.in_(set(other_ids.values()))))
    ).scalars().all()
    by_id = {u.id: u for u in users}
    interests = await fetch_interest_names(db, by_id.keys())

    out: List[MatchWithUser] = []
    for match in matches:
        other = by_id.get(other_ids[match.id])
        if other is None:
            continue
        out.append(MatchWithUser(
            id=match.id,
            user=build_user_read(other, interests.get(other.id)),
            created_at=match.created_at,
        ))
    return out
