import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.security import get_current_user
from models.user import User
from schemas.like import LikeCreate, LikeResponse
from schemas.match import MatchRead
from services.likes import submit_decision

router = APIRouter(prefix="", tags=["Likes"])

logger = logging.getLogger(__name__)


@router.post(
    "/like",
    response_model=LikeResponse,
    status_code=status.HTTP_200_OK,
    summary="Лайк или пропуск; сообщает, образовался ли матч",
)
async def like_profile(
    payload: LikeCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> LikeResponse:
    # 1) Нельзя оценивать себя
    if payload.liked_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot like yourself")

    # 2) Цель должна существовать, иначе лайк не может привести к матчу
    target = await db.get(User, payload.liked_id)
    if not target:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    # 3) Upsert решения и, для лайка, проверка взаимности
    _, result = await submit_decision(db, current_user.id, payload.liked_id, payload.is_like)

    if result is None:
        return LikeResponse(matched=False)

    return LikeResponse(
        matched=result.created,
        match=MatchRead.model_validate(result.match),
    )
