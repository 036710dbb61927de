from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from core.database import get_db
from core.security import get_current_user
from models.user import User
from schemas.feed import CandidateRead
from schemas.user import UserRead
from services.interests import fetch_interest_names
from services.ranking import rank_candidates
from utils.image_tools import content_type_for_key
from utils.s3 import BlobStoreError, download_object
from utils.user_helpers import build_user_read, to_user_read

router = APIRouter(prefix="/profiles", tags=["profiles"])


# Статический путь объявлен раньше /{user_id}
@router.get(
    "/compatible",
    response_model=List[CandidateRead],
    summary="Лента кандидатов по совместимости (до 50)"
)
async def compatible_profiles(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[CandidateRead]:
    ranked = await rank_candidates(db, current_user.id)
    interests = await fetch_interest_names(db, [c.user.id for c in ranked])
    return [
        CandidateRead(user=build_user_read(c.user, interests.get(c.user.id)), score=c.score)
        for c in ranked
    ]


@router.get(
    "/{user_id}",
    response_model=UserRead,
    summary="Публичный профиль пользователя"
)
async def read_profile(
    user_id: int = Path(..., description="ID пользователя"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserRead:
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return await to_user_read(user, db)


@router.get(
    "/{user_id}/image",
    summary="Картинка профиля",
    response_class=Response,
)
async def read_profile_image(
    user_id: int = Path(..., description="ID пользователя"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Response:
    user = await db.get(User, user_id)
    if not user or not user.image_key:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")

    try:
        data = await run_in_threadpool(download_object, user.image_key)
    except BlobStoreError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return Response(content=data, media_type=content_type_for_key(user.image_key))
